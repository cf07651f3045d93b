"""
Access module - Rule-based access evaluation.

Decides allow/deny for a user context, resource, action and optional
record/field by matching an ordered rule list.

Usage Levels:
=============

Level 1: Evaluate a rule list
-----------------------------
    from zopio_access.core.auth import Rule, UserContext, evaluate

    rules = [Rule("Dashboard", "read")]
    evaluate(rules, UserContext(id="42"), "read", "Dashboard")  # can=True

Level 2: Record conditions
--------------------------
    rules = [Rule("Profile", "update", dsl={"userId": "${user.id}"})]
    evaluate(rules, ctx, "update", "Profile", record={"userId": "42"})

Level 3: Field permissions
--------------------------
    rules = [Rule("Profile", "read", field_permissions={"ssn": "none"})]
    evaluate(rules, ctx, "read", "Profile", field="ssn")
    # can=False, reason="No access to field 'ssn'"

Level 4: Audited service
------------------------
    evaluator = AccessEvaluator(rules, sink=build_audit_sink())
    evaluator.require(ctx, "update", "Profile", record=profile)

Level 5: FastAPI routes
-----------------------
    @router.patch("/profiles/{id}", dependencies=[Depends(require_access("update", "Profile"))])
    async def update_profile(...):
        ...

Configuration:
==============

Environment variables (or in config):
- ACCESS_MISSING_FIELD_POLICY: "allow" (default), "deny"
- ACCESS_STRICT_PLACEHOLDERS: false (default), true
- ACCESS_AUDIT_SINK: "console" (default), "memory", "http", "null"
- ACCESS_AUDIT_TIMEOUT: 2.0 (seconds)

Extensibility:
=============

Add custom audit sinks:
    @AuthRegistry.audit_sink("kafka")
    class KafkaAuditSink(AuditSink):
        ...

Add named policies:
    @AuthRegistry.policy("billing.refund")
    def can_refund(data: PolicyInput) -> bool:
        ...
"""

# Core interfaces (for type hints and custom implementations)
from .interfaces import (
    FIELD_ACCESS_NONE,
    Action,
    AuditRecord,
    AuditSink,
    EvaluationResult,
    Rule,
    UserContext,
)

# Registry (for extending with custom implementations)
from .registry import AuthRegistry

# Engine
from .engine import NO_MATCHING_RULE, evaluate, field_denied_reason
from .substitution import UNRESOLVED, ConditionSubstitutionError, substitute

# Service (main facade)
from .service import AccessDenied, AccessEvaluator

# Context provider adapter
from .claims import IncompleteSessionError, user_context_from_claims

# Default implementations (auto-registered)
from .audit import (
    ConsoleAuditSink,
    HttpAuditSink,
    MemoryAuditSink,
    NullAuditSink,
    build_audit_sink,
)
from . import policy  # noqa: F401

# Dependencies (what you'll use in routes)
from .dependencies import (
    Authorized,
    CurrentContext,
    Evaluator,
    Rejected,
    access_denied_handler,
    authorize_request,
    get_evaluator,
    get_user_context,
    require_access,
)

__all__ = [
    # Interfaces
    "FIELD_ACCESS_NONE",
    "Action",
    "AuditRecord",
    "AuditSink",
    "EvaluationResult",
    "Rule",
    "UserContext",
    # Registry
    "AuthRegistry",
    # Engine
    "NO_MATCHING_RULE",
    "evaluate",
    "field_denied_reason",
    "UNRESOLVED",
    "ConditionSubstitutionError",
    "substitute",
    # Service
    "AccessDenied",
    "AccessEvaluator",
    # Claims
    "IncompleteSessionError",
    "user_context_from_claims",
    # Audit
    "ConsoleAuditSink",
    "HttpAuditSink",
    "MemoryAuditSink",
    "NullAuditSink",
    "build_audit_sink",
    # Dependencies
    "Authorized",
    "CurrentContext",
    "Evaluator",
    "Rejected",
    "access_denied_handler",
    "authorize_request",
    "get_evaluator",
    "get_user_context",
    "require_access",
]
