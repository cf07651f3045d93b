"""
RBAC (Role-Based Access Control) Extension.

Roles map to permission templates with optional placeholder conditions,
field permissions and 'cannot' entries. Two views over the same templates:

1. Ability (UI-facing, role templates only):
   ability = create_ability_for({"id": user_id, "role": "user"})
   ability.can("update", "Profile", {"userId": user_id})

2. Engine rules (combined with ABAC rules by the runner):
   rules = rbac_rules()

Add roles at startup:
   register_role(RoleDefinition(name="auditor", permissions=(...,), inherits=("user",)))

Models:
- PermissionTemplate: action + subject + conditions/fields/inverted
- RoleDefinition: named group of templates with inheritance
"""

from .models import ALL_SUBJECTS, MANAGE, SUBJECTS, PermissionTemplate, RoleDefinition
from .roles import ROLES, get_permissions_for_role, get_role, list_roles, register_role
from .ability import (
    Ability,
    AbilityRule,
    as_user_context,
    create_ability_for,
    create_ability_from_roles,
    define_rules_for,
)
from .rules import rbac_rules, rules_for_role

__all__ = [
    "ALL_SUBJECTS",
    "MANAGE",
    "SUBJECTS",
    "PermissionTemplate",
    "RoleDefinition",
    "ROLES",
    "get_permissions_for_role",
    "get_role",
    "list_roles",
    "register_role",
    "Ability",
    "AbilityRule",
    "as_user_context",
    "create_ability_for",
    "create_ability_from_roles",
    "define_rules_for",
    "rbac_rules",
    "rules_for_role",
]
