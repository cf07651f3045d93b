"""
Declarative rule conditions.

A condition is a Mongo-style query mapping, the same dialect role templates
use for the ability layer:

    {"userId": "${user.id}"}                         # equality
    {"status": {"$in": ["draft", "review"]}}          # operator object
    {"$or": [{"ownerId": "${user.id}"}, {"public": True}]}
    {"$user": {"role": "admin"}}                      # match the user context

Plain keys are dotted paths into the record. $user matches its nested query
against the user context instead. Placeholders are substituted before
matching, so templates and concrete rules share one evaluator.
"""

from collections.abc import Mapping
from typing import Any, Callable

from ..substitution import contains_placeholder, resolve_path, substitute

_MISSING = object()

LOGICAL_OPERATORS = frozenset({"$and", "$or", "$not", "$user"})


def _equals(actual: Any, expected: Any) -> bool:
    if actual is _MISSING:
        return expected is None
    if isinstance(actual, (list, tuple)) and not isinstance(expected, (list, tuple)):
        return any(item == expected for item in actual)
    return actual == expected


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, operand: Any) -> bool:
        if actual is _MISSING or actual is None:
            return False
        try:
            return bool(compare(actual, operand))
        except TypeError:
            return False
    return check


COMPARISON_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$eq": _equals,
    "$ne": lambda actual, operand: not _equals(actual, operand),
    # A list operand that came from an unresolved placeholder fails closed
    "$in": lambda actual, operand: (
        isinstance(operand, (list, tuple)) and any(_equals(actual, item) for item in operand)
    ),
    "$nin": lambda actual, operand: (
        isinstance(operand, (list, tuple)) and not any(_equals(actual, item) for item in operand)
    ),
    "$gt": _ordered(lambda a, b: a > b),
    "$gte": _ordered(lambda a, b: a >= b),
    "$lt": _ordered(lambda a, b: a < b),
    "$lte": _ordered(lambda a, b: a <= b),
    "$exists": lambda actual, operand: (actual is not _MISSING) == bool(operand),
}


def _is_operator_object(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and bool(value)
        and all(isinstance(key, str) and key.startswith("$") for key in value)
    )


def validate_dsl(query: Any) -> None:
    """
    Check that a condition query only uses known operators.

    Raises:
        ValueError: Unknown operator or malformed operand
    """
    if not isinstance(query, Mapping):
        raise ValueError(f"Condition must be a mapping, got {type(query).__name__}")

    for key, value in query.items():
        if not isinstance(key, str):
            raise ValueError(f"Condition keys must be strings, got {key!r}")

        if key in ("$and", "$or"):
            if not isinstance(value, (list, tuple)) or not value:
                raise ValueError(f"'{key}' expects a non-empty list of conditions")
            for clause in value:
                validate_dsl(clause)
        elif key in ("$not", "$user"):
            validate_dsl(value)
        elif key.startswith("$"):
            raise ValueError(f"Unknown condition operator: '{key}'")
        elif _is_operator_object(value):
            for operator, operand in value.items():
                if operator not in COMPARISON_OPERATORS:
                    raise ValueError(f"Unknown comparison operator: '{operator}' on '{key}'")
                if operator in ("$in", "$nin") and not (
                    isinstance(operand, (list, tuple)) or contains_placeholder(operand)
                ):
                    raise ValueError(f"'{operator}' on '{key}' expects a list")


def matches(query: Mapping[str, Any], document: Any, user: Any = None) -> bool:
    """
    Match an already-substituted query against a document.

    Args:
        query: Condition mapping
        document: Record being checked (mapping or object)
        user: Context for $user clauses; they fail when it is None
    """
    for key, expected in query.items():
        if key == "$and":
            if not all(matches(clause, document, user) for clause in expected):
                return False
        elif key == "$or":
            if not any(matches(clause, document, user) for clause in expected):
                return False
        elif key == "$not":
            if matches(expected, document, user):
                return False
        elif key == "$user":
            if user is None or not matches(expected, user, user):
                return False
        else:
            actual = resolve_path(document, key, _MISSING)
            if _is_operator_object(expected):
                for operator, operand in expected.items():
                    if not COMPARISON_OPERATORS[operator](actual, operand):
                        return False
            elif not _equals(actual, expected):
                return False
    return True


def evaluate_dsl(
    query: Mapping[str, Any],
    context: Any,
    record: Any = None,
    strict: bool = False,
) -> bool:
    """
    Substitute placeholders from the context, then match against the record.

    A missing record is matched as an empty mapping, so record-level
    conditions fail closed.
    """
    resolved = substitute(query, context, strict=strict)
    return matches(resolved, record if record is not None else {}, context)
