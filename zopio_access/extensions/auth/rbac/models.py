"""
RBAC Models - Permission templates and role definitions.

Templates are static data defined at process start:

    PermissionTemplate("read", "Dashboard")
    PermissionTemplate("update", "Profile", conditions={"userId": "${user.id}"})
    PermissionTemplate("delete", "Profile", inverted=True)   # 'cannot' rule

Conditions may carry ${user.<path>} placeholders that are resolved against
the user context when rules are expanded or evaluated.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from zopio_access.core.auth.conditions import validate_dsl
from zopio_access.core.auth.interfaces import normalize_action

# Subject that matches every subject in the ability layer
ALL_SUBJECTS = "all"

# Action that matches every action in the ability layer
MANAGE = "manage"

SUBJECTS = (
    "Dashboard",
    "Profile",
    "User",
    "Plugin",
    "FeatureFlag",
    "Organization",
    "Public",
    ALL_SUBJECTS,
)


@dataclass(frozen=True)
class PermissionTemplate:
    """
    Rule template attached to a role.

    Attributes:
        action: One of manage/create/read/update/delete
        subject: Resource type, or "all"
        conditions: Condition query, may contain placeholders
        fields: Field permission map ({"ssn": "none"})
        inverted: 'cannot' rule
    """
    action: str
    subject: str
    conditions: Mapping[str, Any] | None = None
    fields: Mapping[str, str] | None = None
    inverted: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", normalize_action(self.action))
        if not self.subject:
            raise ValueError("Permission subject must be a non-empty string")
        if self.conditions is not None:
            validate_dsl(self.conditions)

    @property
    def permission_string(self) -> str:
        """Get permission as 'subject:action' string."""
        return f"{self.subject}:{self.action}"

    def __repr__(self) -> str:
        kind = "cannot" if self.inverted else "can"
        return f"<PermissionTemplate {kind} {self.permission_string}>"


@dataclass(frozen=True)
class RoleDefinition:
    """
    Role definition.

    Roles group permission templates and may inherit the templates of other
    roles. A role's own templates come before inherited ones.
    """
    name: str
    permissions: tuple[PermissionTemplate, ...] = ()
    inherits: tuple[str, ...] = ()
    description: str | None = None

    def __repr__(self) -> str:
        return f"<RoleDefinition {self.name}>"
