"""
Audit sinks for access decisions.

Sinks receive one AuditRecord per evaluation. Select one by name:

    ACCESS_AUDIT_SINK=console   # structlog event (default)
    ACCESS_AUDIT_SINK=http      # POST to a remote log service
    ACCESS_AUDIT_SINK=memory    # keep in process (tests)
    ACCESS_AUDIT_SINK=null      # discard
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from ..interfaces import AuditRecord, AuditSink
from ..registry import AuthRegistry

logger = structlog.get_logger()


@AuthRegistry.audit_sink("console")
class ConsoleAuditSink(AuditSink):
    """
    Emit each decision as an "access.decision" log event.

    The record goes under the "audit" key; the log's own "timestamp" is the
    time of writing and must not replace the decision time.
    """

    def __init__(self, event: str = "access.decision", **kwargs: Any):
        self.event = event

    def write(self, entry: AuditRecord) -> None:
        logger.info(self.event, audit=entry.to_dict())


@AuthRegistry.audit_sink("memory")
class MemoryAuditSink(AuditSink):
    """
    In-memory audit trail.

    Useful for:
    - Unit testing
    - Development without a log service
    """

    def __init__(self, **kwargs: Any):
        self.entries: list[AuditRecord] = []

    def write(self, entry: AuditRecord) -> None:
        self.entries.append(entry)

    @property
    def last(self) -> AuditRecord | None:
        return self.entries[-1] if self.entries else None

    def clear(self) -> None:
        self.entries.clear()


@AuthRegistry.audit_sink("null")
class NullAuditSink(AuditSink):
    """Discard decisions (audit disabled)."""

    def __init__(self, **kwargs: Any):
        pass

    def write(self, entry: AuditRecord) -> None:
        return None


@AuthRegistry.audit_sink("http")
class HttpAuditSink(AuditSink):
    """
    Ship decisions to an HTTP log ingestion endpoint.

    Body:
        {"timestamp": ..., "level": "info",
         "message": "<action> on <resource>", "context": {...}}

    Usage:
        sink = HttpAuditSink(
            url="https://in.logs.betterstack.com",
            token="source-token",
        )
    """

    def __init__(
        self,
        url: str,
        token: str = "",
        timeout: float = 2.0,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs: Any,
    ):
        """
        Initialize HTTP sink.

        Args:
            url: Ingestion endpoint
            token: Bearer token for the endpoint
            timeout: Request timeout in seconds
            client: Shared client; a short-lived one is used per write otherwise
        """
        self.url = url
        self.token = token
        self.timeout = timeout
        self._client = client

    def build_payload(self, entry: AuditRecord) -> dict[str, Any]:
        context = entry.to_dict()
        timestamp = context.pop("timestamp")
        return {
            "timestamp": timestamp,
            "level": "info",
            "message": f"{entry.action} on {entry.resource}",
            "context": context,
        }

    async def write(self, entry: AuditRecord) -> None:
        payload = self.build_payload(entry)
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        if self._client is not None:
            response = await self._client.post(self.url, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload, headers=headers)

        response.raise_for_status()
