"""
Runner - combined rule set and the default audited evaluator.

    from zopio_access.extensions.auth.runner import evaluate_access

    result = evaluate_access(context, "update", "Profile", record=profile)

RBAC rules come first, so a role grant wins over any ABAC rule for the same
resource/action. Both sets are static, so the combination is built once per
process.
"""

from collections.abc import Iterable
from functools import lru_cache
from typing import Any

from zopio_access.core.auth.audit import build_audit_sink
from zopio_access.core.auth.interfaces import Action, EvaluationResult, Rule, UserContext
from zopio_access.core.auth.service import AccessEvaluator
from zopio_access.core.config import get_settings

from .abac import abac_rules
from .rbac import rbac_rules


def combine(rbac: Iterable[Rule], abac: Iterable[Rule]) -> tuple[Rule, ...]:
    """Concatenate RBAC rules before ABAC rules. No deduplication."""
    return (*rbac, *abac)


@lru_cache(maxsize=1)
def combined_rules() -> tuple[Rule, ...]:
    """
    Get the process-wide combined rule set.

    Roles registered after the first call are not picked up until
    combined_rules.cache_clear() is called.
    """
    return combine(rbac_rules(), abac_rules)


@lru_cache
def get_access_evaluator() -> AccessEvaluator:
    """Get the cached evaluator over combined_rules() with the configured audit sink."""
    settings = get_settings()
    return AccessEvaluator(
        combined_rules(),
        sink=build_audit_sink(settings),
        settings=settings,
    )


def evaluate_access(
    context: UserContext,
    action: str | Action,
    resource: str,
    record: Any = None,
    field: str | None = None,
) -> EvaluationResult:
    """Evaluate (and audit) against the combined rule set."""
    return get_access_evaluator().evaluate(context, action, resource, record, field)
