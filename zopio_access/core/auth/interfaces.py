"""
Access evaluation interfaces - Core data model.

These define the shapes every part of the engine exchanges:
- Rule: the atomic unit of policy (resource + action + optional condition)
- UserContext: the resolved identity being evaluated
- EvaluationResult: allow/deny with a stable reason
- AuditRecord / AuditSink: the decision trail and where it goes

Rules are validated when they are built (registry load time), never per call.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable

from zopio_access.utils.timezone import to_iso8601, utc_now

from .conditions.dsl import validate_dsl
from .substitution import resolve_path


# ============================================================
# ACTIONS
# ============================================================

class Action(str, Enum):
    """Closed set of actions a rule can grant."""
    MANAGE = "manage"
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


ACTIONS = frozenset(action.value for action in Action)

# Field permission level that blocks a field even when the rule matches
FIELD_ACCESS_NONE = "none"


def normalize_action(action: Any) -> str:
    """
    Return the plain string value of an action.

    Raises:
        ValueError: If action is not one of Action
    """
    value = action.value if isinstance(action, Action) else action
    if value not in ACTIONS:
        raise ValueError(
            f"Unknown action: '{value}'. "
            f"Available: {sorted(ACTIONS)}"
        )
    return value


# ============================================================
# USER CONTEXT
# ============================================================

_CONTEXT_FIELDS = {
    "id": "id",
    "role": "role",
    "organization_id": "organization_id",
    "organizationId": "organization_id",
}


@dataclass(frozen=True)
class UserContext:
    """
    The subject of evaluation.

    Built once per request by the authentication layer and passed explicitly
    to every check. Never read from ambient state.
    """
    id: str
    role: str | None = None
    organization_id: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def lookup(self, path: str, default: Any = None) -> Any:
        """
        Resolve a dotted path.

        The first segment names id/role/organization_id, otherwise an
        attribute. "attributes.x" is accepted as an explicit spelling.
        """
        head, _, rest = path.partition(".")

        if head in _CONTEXT_FIELDS:
            value = getattr(self, _CONTEXT_FIELDS[head])
            if value is None:
                return default
        elif head == "attributes":
            value = self.attributes
        elif head in self.attributes:
            value = self.attributes[head]
        else:
            return default

        return resolve_path(value, rest, default) if rest else value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for logging and audit payloads."""
        return {
            "id": self.id,
            "role": self.role,
            "organization_id": self.organization_id,
            "attributes": dict(self.attributes),
        }


# ============================================================
# RULE
# ============================================================

# Predicate condition: (context, record) -> bool
ConditionFn = Callable[[UserContext, Any], bool]


@dataclass(frozen=True)
class Rule:
    """
    Access rule.

    resource + action is the match key; several rules may share a key with
    different conditions. A rule carries at most one condition form:
    a predicate (condition) or a declarative query (dsl).

    Examples:
        Rule("Dashboard", "read")
        Rule("Profile", "update", dsl={"userId": "${user.id}"})
        Rule("Profile", "read", field_permissions={"ssn": "none"})
        Rule("Report", "read", condition=lambda ctx, rec: ctx.role == "analyst")
    """
    resource: str
    action: str
    condition: ConditionFn | None = None
    dsl: Mapping[str, Any] | None = None
    field_permissions: Mapping[str, str] | None = None
    inverted: bool = False
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", normalize_action(self.action))

        if not self.resource or not isinstance(self.resource, str):
            raise ValueError("Rule resource must be a non-empty string")

        if self.condition is not None and self.dsl is not None:
            raise ValueError(
                f"Rule {self.resource}:{self.action} has both a condition and a dsl"
            )
        if self.condition is not None and not callable(self.condition):
            raise ValueError(
                f"Rule {self.resource}:{self.action} condition must be callable"
            )
        if self.dsl is not None:
            validate_dsl(self.dsl)

        if self.field_permissions is not None:
            for field_name, level in self.field_permissions.items():
                if not isinstance(field_name, str) or not isinstance(level, str):
                    raise ValueError(
                        f"Rule {self.resource}:{self.action} field permissions "
                        f"must map field names to access levels"
                    )

    @property
    def key(self) -> str:
        """Get rule key as 'resource:action' string."""
        return f"{self.resource}:{self.action}"

    def matches(self, resource: str, action: str) -> bool:
        """Exact match on resource and action (no wildcards)."""
        return self.resource == resource and self.action == action

    def __repr__(self) -> str:
        kind = "cannot" if self.inverted else "can"
        return f"<Rule {kind} {self.key}>"


# ============================================================
# EVALUATION RESULT
# ============================================================

@dataclass(frozen=True)
class EvaluationResult:
    """
    Result of an access evaluation.

    Attributes:
        can: Whether the action is permitted
        reason: Stable, human-readable cause (set on denial)
    """
    can: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "EvaluationResult":
        return cls(can=True)

    @classmethod
    def deny(cls, reason: str) -> "EvaluationResult":
        return cls(can=False, reason=reason)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"can": self.can}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


# ============================================================
# AUDIT
# ============================================================

@dataclass(frozen=True)
class AuditRecord:
    """One access decision, emitted after every evaluation."""
    resource: str
    action: str
    context: UserContext
    can: bool
    reason: str | None = None
    timestamp: datetime = field(default_factory=utc_now)
    correlation_id: str | None = None
    record: Mapping[str, Any] | None = None
    # Declared last: the name shadows dataclasses.field in this class body
    field: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "resource": self.resource,
            "action": self.action,
            "context": self.context.to_dict(),
            "record": dict(self.record) if isinstance(self.record, Mapping) else self.record,
            "field": self.field,
            "can": self.can,
            "reason": self.reason,
            "timestamp": to_iso8601(self.timestamp),
            "correlation_id": self.correlation_id,
        }


class AuditSink(ABC):
    """
    Destination for access decision records.

    write() may be synchronous or return an awaitable. Failures are caught
    by the caller and never change the decision.

    Implementations:
    - ConsoleAuditSink: structlog event (default)
    - MemoryAuditSink: in-process list (tests, development)
    - HttpAuditSink: POST to a remote log service
    - NullAuditSink: discard
    """

    @abstractmethod
    def write(self, entry: AuditRecord) -> Awaitable[None] | None:
        """Record one access decision."""
        pass
