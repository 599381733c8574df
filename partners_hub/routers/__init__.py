"""Routers package — HTTP endpoint definitions.

Files:
  v1/               — Versioned API routes (/api/v1/*)
  users.py          — Service-role user provisioning (/api/users/*)
  auth.py           — Public password reset request (/api/auth/*)
  notifications.py  — On-demand order emails (/api/orders/send-*)
  feedback.py       — Feedback and issue reports (/api/feedback/*)
"""
