"""
RBAC rule set for the evaluation engine.

The engine matches resource/action exactly and has no notion of roles, so
each role template becomes a Rule gated on the caller's role:

    PermissionTemplate("update", "Profile", conditions={"userId": "${user.id}"})
    # for role "user" becomes
    Rule("Profile", "update", dsl={"$and": [{"$user": {"role": "user"}}, {"userId": "${user.id}"}]})

"manage" and "all" are expanded here into every concrete action and subject,
so the engine itself never needs wildcard matching. 'cannot' templates are
left out: in first-match evaluation only grants carry meaning.
"""

from zopio_access.core.auth.interfaces import Action, Rule

from .models import ALL_SUBJECTS, MANAGE, SUBJECTS, PermissionTemplate
from .roles import get_permissions_for_role, list_roles


def _expand_actions(action: str) -> list[str]:
    if action == MANAGE:
        return [member.value for member in Action]
    return [action]


def _expand_subjects(subject: str) -> list[str]:
    if subject == ALL_SUBJECTS:
        return list(SUBJECTS)
    return [subject]


def rules_for_role(role: str) -> list[Rule]:
    """Derive engine rules for one role (own templates first, then inherited)."""
    rules: list[Rule] = []
    for template in get_permissions_for_role(role):
        if template.inverted:
            continue
        rules.extend(_template_rules(role, template))
    return rules


def _template_rules(role: str, template: PermissionTemplate) -> list[Rule]:
    # Nested, so a template's own $user clause cannot replace the role gate
    gate = {"$user": {"role": role}}
    if template.conditions:
        dsl = {"$and": [gate, dict(template.conditions)]}
    else:
        dsl = gate

    return [
        Rule(
            resource=subject,
            action=action,
            dsl=dsl,
            field_permissions=template.fields,
            description=f"role:{role}",
        )
        for subject in _expand_subjects(template.subject)
        for action in _expand_actions(template.action)
    ]


def rbac_rules() -> list[Rule]:
    """Derive engine rules for every registered role."""
    rules: list[Rule] = []
    for role in list_roles():
        rules.extend(rules_for_role(role))
    return rules
