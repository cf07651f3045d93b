"""
Ability - per-user permission object for UI-facing checks.

Built from the user's role templates only (not the ABAC rules):

    ability = create_ability_for({"id": "42", "role": "user"})
    ability.can("read", "Dashboard")                       # True
    ability.can("update", "Profile", {"userId": "42"})     # True
    ability.can("delete", "Profile")                        # False ('cannot' rule)

Matching follows the Mongo-ability model:
- Rules are scanned from last to first; the first matching rule decides,
  so a later 'cannot' overrides an earlier 'can' for the same pair
- "manage" matches any action and "all" matches any subject
- Without an object to check, a conditional 'can' still matches (the user
  may act on some instances) while a conditional 'cannot' does not
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from zopio_access.core.auth.conditions import matches
from zopio_access.core.auth.engine import MISSING_FIELD_ALLOW, MISSING_FIELD_DENY
from zopio_access.core.auth.interfaces import FIELD_ACCESS_NONE, Action, UserContext
from zopio_access.core.auth.substitution import substitute
from zopio_access.core.config import AccessSettings, get_settings

from .models import ALL_SUBJECTS, MANAGE
from .roles import get_permissions_for_role

_CONTEXT_KEYS = ("id", "role", "organization_id", "organizationId")


@dataclass(frozen=True)
class AbilityRule:
    """A concrete (placeholder-free) can/cannot entry."""
    action: str
    subject: str
    conditions: Mapping[str, Any] | None = None
    fields: Mapping[str, str] | None = None
    inverted: bool = False

    def matches_action(self, action: str) -> bool:
        return self.action == action or self.action == MANAGE

    def matches_subject(self, subject: str) -> bool:
        return self.subject == subject or self.subject == ALL_SUBJECTS

    def matches_conditions(self, obj: Any = None) -> bool:
        if not self.conditions:
            return True
        if obj is None:
            return not self.inverted
        return matches(self.conditions, obj)

    def allows_field(self, field: str | None, missing_field: str = MISSING_FIELD_ALLOW) -> bool:
        if not field or not self.fields:
            return True
        level = self.fields.get(field)
        if level == FIELD_ACCESS_NONE:
            return False
        return not (level is None and missing_field == MISSING_FIELD_DENY)


class Ability:
    """
    Queryable permission set.

    Args:
        rules: Concrete rules in declaration order
        missing_field: "allow" or "deny" for fields absent from a field map
    """

    def __init__(
        self,
        rules: Iterable[AbilityRule],
        missing_field: str = MISSING_FIELD_ALLOW,
    ):
        self._rules: tuple[AbilityRule, ...] = tuple(rules)
        self.missing_field = missing_field

    @property
    def rules(self) -> tuple[AbilityRule, ...]:
        return self._rules

    def rules_for(self, action: str | Action, subject: str) -> list[AbilityRule]:
        """Rules relevant to action/subject, in decision order (last declared first)."""
        action = action.value if isinstance(action, Action) else action
        return [
            rule
            for rule in reversed(self._rules)
            if rule.matches_action(action) and rule.matches_subject(subject)
        ]

    def can(
        self,
        action: str | Action,
        subject: str,
        conditions: Any = None,
        field: str | None = None,
    ) -> bool:
        """
        Check whether the user may perform action on subject.

        Args:
            action: Requested action
            subject: Subject type
            conditions: Instance attributes to check rule conditions against
            field: Optional field name
        """
        for rule in self.rules_for(action, subject):
            if not rule.matches_conditions(conditions):
                continue
            if rule.inverted:
                return False
            return rule.allows_field(field, self.missing_field)
        return False

    def cannot(
        self,
        action: str | Action,
        subject: str,
        conditions: Any = None,
        field: str | None = None,
    ) -> bool:
        return not self.can(action, subject, conditions, field)

    def __repr__(self) -> str:
        return f"<Ability rules={len(self._rules)}>"


# ============================================================
# BUILDERS
# ============================================================

def as_user_context(user: Any) -> UserContext:
    """
    Normalize a user into a UserContext.

    Accepts a UserContext, a mapping ({"id": ..., "role": ..., ...}; other
    keys become attributes), an object with id/role attributes, or None.
    """
    if isinstance(user, UserContext):
        return user

    if user is None:
        return UserContext(id="")

    if isinstance(user, Mapping):
        attributes = dict(user.get("attributes") or {})
        attributes.update(
            (key, value)
            for key, value in user.items()
            if key not in _CONTEXT_KEYS and key != "attributes"
        )
        return UserContext(
            id=str(user.get("id") or ""),
            role=user.get("role"),
            organization_id=user.get("organization_id") or user.get("organizationId"),
            attributes=attributes,
        )

    return UserContext(
        id=str(getattr(user, "id", "") or ""),
        role=getattr(user, "role", None),
        organization_id=getattr(user, "organization_id", None),
        attributes=dict(getattr(user, "attributes", None) or {}),
    )


def define_rules_for(user: Any, strict_placeholders: bool = False) -> list[AbilityRule]:
    """
    Expand the user's role templates into concrete rules.

    No role, or a role that is not registered, yields no rules.
    """
    context = as_user_context(user)
    if not context.role:
        return []

    return [
        AbilityRule(
            action=template.action,
            subject=template.subject,
            conditions=substitute(template.conditions, context, strict=strict_placeholders),
            fields=template.fields,
            inverted=template.inverted,
        )
        for template in get_permissions_for_role(context.role)
    ]


def create_ability_for(user: Any, settings: AccessSettings | None = None) -> Ability:
    """Create the ability of a user from their role."""
    settings = settings or get_settings()
    rules = define_rules_for(user, strict_placeholders=settings.strict_placeholders)
    return Ability(rules, missing_field=settings.missing_field_policy)


def create_ability_from_roles(
    user_id: str = "",
    roles: Sequence[str] = (),
    settings: AccessSettings | None = None,
) -> Ability:
    """
    Create an ability when only the user id and role names are at hand.

    The first role is used; with no roles the user is a guest.
    """
    role = roles[0] if roles else "guest"
    return create_ability_for(UserContext(id=user_id, role=role), settings=settings)
