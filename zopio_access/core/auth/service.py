"""
Access service - Audited facade over the evaluation engine.

This is the primary entry point for access checks in request handlers.
Every call evaluates the rule list and then emits exactly one audit record,
on allow and deny alike. The audit write is best-effort: sink errors and
timeouts are logged and never change the decision.

Usage:
    evaluator = AccessEvaluator(rules, sink=ConsoleAuditSink())

    result = evaluator.evaluate(context, "read", "Dashboard")
    evaluator.require(context, "update", "Profile", record=profile)
    visible = evaluator.filter_allowed(context, "read", "Profile", profiles)
"""

import asyncio
import inspect
from collections.abc import Iterable, Sequence
from typing import Any, Awaitable

import structlog

from zopio_access.core.config import AccessSettings, get_settings
from zopio_access.utils.context import get_correlation_id
from zopio_access.utils.timezone import utc_now

from .engine import evaluate
from .interfaces import Action, AuditRecord, AuditSink, EvaluationResult, Rule, UserContext

logger = structlog.get_logger()


class AccessDenied(Exception):
    """Raised by AccessEvaluator.require() when the decision is a denial."""

    def __init__(self, result: EvaluationResult):
        super().__init__(result.reason or "Permission denied")
        self.result = result

    @property
    def reason(self) -> str:
        return self.result.reason or "Permission denied"


class AccessEvaluator:
    """
    Evaluates access over a fixed rule list and audits each decision.

    Args:
        rules: Ordered rules (first match wins)
        sink: Audit sink; None disables auditing
        settings: Evaluation and audit settings
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        sink: AuditSink | None = None,
        settings: AccessSettings | None = None,
    ):
        self.rules: tuple[Rule, ...] = tuple(rules)
        self.sink = sink
        self.settings = settings or get_settings()
        self._pending: set[asyncio.Task] = set()

    # ============================================================
    # DECISIONS
    # ============================================================

    def decide(
        self,
        context: UserContext,
        action: str | Action,
        resource: str,
        record: Any = None,
        field: str | None = None,
    ) -> EvaluationResult:
        """Evaluate without auditing."""
        return evaluate(
            self.rules,
            context,
            action,
            resource,
            record,
            field,
            missing_field=self.settings.missing_field_policy,
            strict_placeholders=self.settings.strict_placeholders,
        )

    def evaluate(
        self,
        context: UserContext,
        action: str | Action,
        resource: str,
        record: Any = None,
        field: str | None = None,
    ) -> EvaluationResult:
        """
        Evaluate and audit.

        Async sinks are scheduled on the running loop when there is one,
        otherwise run to completion bounded by the audit timeout.
        """
        result = self.decide(context, action, resource, record, field)
        self._emit(self._build_record(context, action, resource, record, field, result))
        return result

    async def aevaluate(
        self,
        context: UserContext,
        action: str | Action,
        resource: str,
        record: Any = None,
        field: str | None = None,
    ) -> EvaluationResult:
        """Evaluate and await the audit write (bounded by the audit timeout)."""
        result = self.decide(context, action, resource, record, field)
        entry = self._build_record(context, action, resource, record, field, result)

        if self.sink is not None:
            try:
                outcome = self.sink.write(entry)
                if inspect.isawaitable(outcome):
                    await asyncio.wait_for(outcome, timeout=self.settings.audit_timeout)
            except Exception:
                self._log_failure(entry)

        return result

    def require(
        self,
        context: UserContext,
        action: str | Action,
        resource: str,
        record: Any = None,
        field: str | None = None,
    ) -> EvaluationResult:
        """
        Evaluate or raise.

        Raises:
            AccessDenied: Carrying the denial result and its reason
        """
        result = self.evaluate(context, action, resource, record, field)
        if not result.can:
            raise AccessDenied(result)
        return result

    def filter_allowed(
        self,
        context: UserContext,
        action: str | Action,
        resource: str,
        records: Sequence[Any],
        field: str | None = None,
    ) -> list[Any]:
        """Filter records to those the context may access (one audit record each)."""
        return [
            record
            for record in records
            if self.evaluate(context, action, resource, record, field).can
        ]

    async def drain(self) -> None:
        """Wait for audit writes scheduled by evaluate() to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ============================================================
    # AUDIT
    # ============================================================

    def _build_record(
        self,
        context: UserContext,
        action: str | Action,
        resource: str,
        record: Any,
        field: str | None,
        result: EvaluationResult,
    ) -> AuditRecord:
        return AuditRecord(
            resource=resource,
            action=action.value if isinstance(action, Action) else action,
            context=context,
            can=result.can,
            reason=result.reason,
            timestamp=utc_now(),
            correlation_id=get_correlation_id(),
            record=record,
            field=field,
        )

    def _emit(self, entry: AuditRecord) -> None:
        if self.sink is None:
            return

        try:
            outcome = self.sink.write(entry)
        except Exception:
            self._log_failure(entry)
            return

        if not inspect.isawaitable(outcome):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._bounded_write(outcome, entry))
            return

        task = loop.create_task(self._bounded_write(outcome, entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _bounded_write(self, outcome: Awaitable[None], entry: AuditRecord) -> None:
        try:
            await asyncio.wait_for(outcome, timeout=self.settings.audit_timeout)
        except Exception:
            self._log_failure(entry)

    def _log_failure(self, entry: AuditRecord) -> None:
        logger.exception(
            "audit.write_failed",
            sink=type(self.sink).__name__,
            resource=entry.resource,
            action=entry.action,
            user_id=entry.context.id,
            can=entry.can,
        )
