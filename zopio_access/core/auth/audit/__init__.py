"""
Access decision audit trail.

Built-in sinks:
- console: structlog event (default)
- memory: in-process list
- http: remote log ingestion over HTTP
- null: discard

Add custom sinks with the @AuthRegistry.audit_sink decorator.
"""

from zopio_access.core.config import AccessSettings, get_settings

from ..interfaces import AuditSink
from ..registry import AuthRegistry
from .sinks import ConsoleAuditSink, HttpAuditSink, MemoryAuditSink, NullAuditSink


def build_audit_sink(settings: AccessSettings | None = None) -> AuditSink:
    """
    Get configured audit sink.

    Reads ACCESS_AUDIT_ENABLED / ACCESS_AUDIT_SINK.
    Default: "console"

    Raises:
        ValueError: If the configured sink is not registered
    """
    settings = settings or get_settings()

    if not settings.audit_enabled:
        return AuthRegistry.get_audit_sink("null")

    sink_config = {}
    if settings.audit_sink == "http":
        sink_config = {
            "url": settings.audit_http_url,
            "token": settings.audit_http_token,
            "timeout": settings.audit_timeout,
        }

    return AuthRegistry.get_audit_sink(settings.audit_sink, **sink_config)


__all__ = [
    "build_audit_sink",
    "ConsoleAuditSink",
    "HttpAuditSink",
    "MemoryAuditSink",
    "NullAuditSink",
]
