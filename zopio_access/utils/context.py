"""
Request Context Utilities.

Provides correlation IDs for:
- Log correlation
- Linking access decisions in the audit trail to the request that made them

Only request metadata lives here. The user being evaluated is always passed
explicitly to the engine and is never read from ambient state.

Usage:
    # In middleware (automatic)
    app.add_middleware(RequestContextMiddleware)

    # Access anywhere in request lifecycle
    from zopio_access.utils.context import get_correlation_id

    logger.info("Processing", correlation_id=get_correlation_id())
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Any, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


# ============================================================
# CONTEXT VARIABLES
# ============================================================

# Request-scoped context using contextvars (async-safe)
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


# ============================================================
# CONTEXT ACCESSORS
# ============================================================

def get_correlation_id() -> Optional[str]:
    """
    Get the current correlation ID.

    Returns None if called outside of a request context.
    """
    return _correlation_id.get()


def get_request_id() -> Optional[str]:
    """Get the current request ID."""
    return _request_id.get()


def set_request_ids(request_id: str, correlation_id: Optional[str] = None) -> None:
    """
    Bind request/correlation IDs for the current task.

    Background jobs that evaluate access outside of HTTP handling call this
    so their audit records can still be correlated.
    """
    _request_id.set(request_id)
    _correlation_id.set(correlation_id or request_id)


# ============================================================
# MIDDLEWARE
# ============================================================

class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that binds request IDs for each request.

    Sets up:
    - request_id: Unique ID for this request
    - correlation_id: From X-Correlation-ID header or generated

    Usage:
        app.add_middleware(RequestContextMiddleware)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        correlation_id = (
            request.headers.get("X-Correlation-ID") or
            request.headers.get("X-Request-ID") or
            str(uuid.uuid4())
        )

        set_request_ids(request_id, correlation_id)

        request.state.request_id = request_id
        request.state.correlation_id = correlation_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Correlation-ID"] = correlation_id

        return response


# ============================================================
# STRUCTLOG PROCESSOR
# ============================================================

def add_request_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Structlog processor that adds request IDs to all logs.

    Installed by zopio_access.core.logging.configure_logging().
    """
    correlation_id = get_correlation_id()
    request_id = get_request_id()

    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    if request_id:
        event_dict.setdefault("request_id", request_id)

    return event_dict
