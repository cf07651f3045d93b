"""
Access evaluation engine.

Walks an ordered rule list and returns the first decision that applies:

1. Skip rules whose resource/action differ (exact match, no wildcards)
2. Skip inverted rules (they only carry meaning for the ability layer)
3. Evaluate the condition: predicate, else dsl query, else always true
4. If a field was requested, a matching rule can still deny it
5. Otherwise the first satisfying rule grants access

Precedence is expressed purely by list order: rules placed earlier win,
even over a later rule that would deny.

Usage:
    result = evaluate(rules, context, "update", "Profile", record={"userId": "42"})
    if not result.can:
        raise HTTPException(403, result.reason)
"""

from collections.abc import Iterable
from typing import Any

from .conditions.dsl import evaluate_dsl
from .interfaces import (
    FIELD_ACCESS_NONE,
    Action,
    EvaluationResult,
    Rule,
    UserContext,
)

NO_MATCHING_RULE = "No matching rule found"

MISSING_FIELD_ALLOW = "allow"
MISSING_FIELD_DENY = "deny"


def field_denied_reason(field: str) -> str:
    """Reason returned when a matching rule blocks the requested field."""
    return f"No access to field '{field}'"


def evaluate_condition(
    rule: Rule,
    context: UserContext,
    record: Any = None,
    strict_placeholders: bool = False,
) -> bool:
    """Check whether a rule's condition holds for this context and record."""
    if rule.condition is not None:
        return bool(rule.condition(context, record))

    if rule.dsl is not None:
        return evaluate_dsl(rule.dsl, context, record, strict=strict_placeholders)

    return True


def evaluate_field_access(
    rule: Rule,
    field: str | None,
    missing_field: str = MISSING_FIELD_ALLOW,
) -> EvaluationResult | None:
    """
    Check field-level permissions of a matching rule.

    Returns a denial, or None when the field is accessible or no field was
    requested. A field listed as "none" is always denied; a field absent
    from a non-empty map is denied only when missing_field is "deny".
    """
    if not field or not rule.field_permissions:
        return None

    level = rule.field_permissions.get(field)
    if level == FIELD_ACCESS_NONE:
        return EvaluationResult.deny(field_denied_reason(field))
    if level is None and missing_field == MISSING_FIELD_DENY:
        return EvaluationResult.deny(field_denied_reason(field))

    return None


def evaluate(
    rules: Iterable[Rule],
    context: UserContext,
    action: str | Action,
    resource: str,
    record: Any = None,
    field: str | None = None,
    *,
    missing_field: str = MISSING_FIELD_ALLOW,
    strict_placeholders: bool = False,
) -> EvaluationResult:
    """
    Decide whether context may perform action on resource.

    Args:
        rules: Ordered rules; the first satisfying rule wins
        context: User being evaluated
        action: Requested action
        resource: Requested resource type
        record: Concrete data instance for record-level conditions
        field: Field name for field-level checks
        missing_field: "allow" or "deny" for fields absent from a field map
        strict_placeholders: Fail conditions whose placeholders do not resolve

    Returns:
        EvaluationResult; never raises for ordinary denials
    """
    action = action.value if isinstance(action, Action) else action

    for rule in rules:
        if rule.inverted or not rule.matches(resource, action):
            continue

        if not evaluate_condition(rule, context, record, strict_placeholders):
            continue

        denied = evaluate_field_access(rule, field, missing_field)
        if denied is not None:
            return denied

        return EvaluationResult.allow()

    return EvaluationResult.deny(NO_MATCHING_RULE)
