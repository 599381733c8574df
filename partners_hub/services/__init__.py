"""Services package — all business logic lives here, never in routers.

Files:
  pricing.py         — price tiers, case/unit conversion, support-fund arithmetic (pure)
  company.py         — company management
  product.py         — product management, image upload, per-company catalog
  order.py           — order entry, item replacement, status transitions, history
  support_fund.py    — support-fund summary and one-time redemption
  note.py            — company notes, attachments, replies
  user.py            — client provisioning and password links
  feedback.py        — feedback / issue reports to the orders mailbox
  notification.py    — order email selection, recipients, background dispatch
  email_templates.py — HTML templates
  email_service.py   — SMTP relay (STARTTLS + XOAUTH2)
  email_auth.py      — OAuth client-credentials token cache for the relay
  supabase_api.py    — shared plumbing for the auth provider's service-role APIs
  auth_admin.py      — auth user admin API
  storage.py         — object storage API

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
