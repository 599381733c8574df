"""Audit logging middleware — records every state-changing request to audit_trail."""

import asyncio
import logging
import re
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from partners_hub.db.base import async_session_factory
from partners_hub.domain.audit import AuditTrail

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

_UUID = re.compile(r"^[0-9a-fA-F-]{36}$")

# Keeps fire-and-forget tasks referenced until they finish
_pending: set[asyncio.Task] = set()


def describe_target(path: str) -> tuple[str, str | None]:
    """Infer (entity_type, entity_id) from a path.

    /api/v1/orders/<id>/status -> ("order", "<id>")
    /api/users/create          -> ("user", None)
    """
    parts = [p for p in path.strip("/").split("/") if p and p not in ("api", "v1")]
    entity_id = next((p for p in parts if _UUID.match(p)), None)
    if entity_id is not None:
        entity_type = parts[parts.index(entity_id) - 1] if parts.index(entity_id) > 0 else "unknown"
    else:
        entity_type = parts[0] if parts else "unknown"
    return entity_type.rstrip("s") or "unknown", entity_id


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written by a background task AFTER the response is
    produced so it never adds latency to the request. Failures are logged and
    never reach the caller.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            task = asyncio.create_task(self._record(request, response.status_code, duration_ms))
            _pending.add(task)
            task.add_done_callback(_pending.discard)

        return response

    async def _record(self, request: Request, status_code: int, duration_ms: int) -> None:
        principal = getattr(request.state, "principal", None)
        entity_type, entity_id = describe_target(request.url.path)
        try:
            async with async_session_factory() as session:
                session.add(
                    AuditTrail(
                        user_id=principal.user_id if principal else None,
                        user_role=principal.role if principal else None,
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=f"{request.method}:{status_code}",
                        entity_type=entity_type,
                        entity_id=entity_id,
                        status_code=status_code,
                        duration_ms=duration_ms,
                        description=f"{request.method} {request.url.path} -> {status_code} ({duration_ms}ms)",
                    )
                )
                await session.commit()
        except Exception:
            logger.exception("Failed to record audit row for %s %s", request.method, request.url.path)
