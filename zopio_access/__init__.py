"""
zopio access - role and attribute based access evaluation.

Two entry points over the same rule data:

    # Raw evaluator over the combined RBAC + ABAC rule list (audited)
    from zopio_access import evaluate_access, UserContext

    result = evaluate_access(
        UserContext(id="42", role="user"),
        resource="Profile",
        action="update",
        record={"userId": "42"},
    )
    if not result.can:
        print(result.reason)

    # UI-facing ability over role templates only
    from zopio_access import create_ability_for

    ability = create_ability_for({"id": "42", "role": "user"})
    ability.can("read", "Dashboard")
"""

from .core.auth import (
    AccessDenied,
    AccessEvaluator,
    Action,
    AuditRecord,
    AuditSink,
    EvaluationResult,
    Rule,
    UserContext,
    evaluate,
    substitute,
)
from .extensions.auth.rbac import Ability, create_ability_for, create_ability_from_roles
from .extensions.auth.runner import combined_rules, evaluate_access, get_access_evaluator

__version__ = "0.1.0"

__all__ = [
    "AccessDenied",
    "AccessEvaluator",
    "Action",
    "AuditRecord",
    "AuditSink",
    "EvaluationResult",
    "Rule",
    "UserContext",
    "evaluate",
    "substitute",
    "Ability",
    "create_ability_for",
    "create_ability_from_roles",
    "combined_rules",
    "evaluate_access",
    "get_access_evaluator",
]
