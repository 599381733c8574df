"""Pydantic schemas package.

Folder intent:
  common.py        — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  company.py       — Company request DTOs and responses
  product.py       — Product management and per-company catalog views
  order.py         — Orders, line items, history, support-fund summary / redemption
  note.py          — Company notes, attachments, replies, signed URLs
  user.py          — Service-role user provisioning and password reset
  notification.py  — Order email endpoints
"""
