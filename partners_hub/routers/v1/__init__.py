"""v1 router package — all /api/v1/* endpoints live here.

Files:
  companies.py  — company management
  products.py   — product management + per-company catalog
  orders.py     — orders, history, support-fund redemption
  notes.py      — company notes, attachments, replies

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to partners_hub/services/.
"""
