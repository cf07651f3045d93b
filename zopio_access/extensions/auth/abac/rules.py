"""
ABAC rule set.

Attribute-based rules evaluated after the RBAC rules. They grant access from
organization membership and user attributes rather than role names.
"""

from typing import Any

from zopio_access.core.auth.conditions import attribute_condition, check_attributes
from zopio_access.core.auth.interfaces import Rule, UserContext
from zopio_access.core.auth.substitution import resolve_path

OPERATIONS_POLICY = {"department": ["operations", "finance"]}


def same_organization_operations(context: UserContext, record: Any = None) -> bool:
    """Operations staff may update their own organization's settings."""
    if record is None or not context.organization_id:
        return False
    if resolve_path(record, "id") != context.organization_id:
        return False
    return check_attributes(context.attributes, OPERATIONS_POLICY)


abac_rules: tuple[Rule, ...] = (
    Rule(
        "Organization",
        "read",
        dsl={"id": "${user.organization_id}"},
        description="members read their organization",
    ),
    Rule(
        "Organization",
        "update",
        condition=same_organization_operations,
        description="operations staff update their organization",
    ),
    Rule(
        "Dashboard",
        "read",
        dsl={"organizationId": "${user.organization_id}"},
        field_permissions={"revenue": "none", "metrics": "read"},
        description="members read their organization's dashboard",
    ),
    Rule(
        "Profile",
        "read",
        dsl={"organizationId": "${user.organization_id}"},
        field_permissions={"ssn": "none", "salary": "none"},
        description="members read colleagues' profiles",
    ),
    Rule(
        "FeatureFlag",
        "read",
        condition=attribute_condition({"plan": ["pro", "enterprise"]}),
        description="paid plans see feature flags",
    ),
    Rule(
        "Plugin",
        "create",
        condition=attribute_condition({"department": ["engineering"]}),
        description="engineering installs plugins",
    ),
)
