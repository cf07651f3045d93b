"""
Placeholder substitution for rule conditions.

Role templates reference the user being evaluated with ${user.<path>}
tokens. Substitution walks the condition tree and replaces those tokens with
values from the live user context:

    substitute({"userId": "${user.id}"}, UserContext(id="u1"))
    # {"userId": "u1"}

A string that is exactly one placeholder is replaced by the resolved value
itself, so non-string attributes keep their type. Placeholders embedded in a
longer string are interpolated as text.

Unresolved paths become "" (compatible default). With strict=True they
become UNRESOLVED, which never compares equal to anything, so the
condition fails closed instead of matching empty record fields.
"""

import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_PATTERN = re.compile(r"\$\{user\.([^}]+)\}")


class ConditionSubstitutionError(TypeError):
    """Conditions contain values that cannot appear in a serializable rule."""


class _Unresolved:
    """Marker for a placeholder whose path did not resolve (strict mode)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        return False

    def __ne__(self, other: object) -> bool:
        return True

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return "<unresolved>"


UNRESOLVED = _Unresolved()

_NOT_FOUND = object()
_SCALARS = (str, int, float, bool, type(None))


def resolve_path(source: Any, path: str, default: Any = None) -> Any:
    """
    Resolve a dotted path against a mapping, sequence, object or context.

    Objects exposing lookup(path, default) (UserContext) resolve themselves.
    Digit segments index into lists. Anything missing returns default.
    """
    if not path:
        return source
    if hasattr(source, "lookup"):
        return source.lookup(path, default)

    current = source
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _NOT_FOUND)
        elif isinstance(current, (list, tuple)):
            if not part.isdigit() or int(part) >= len(current):
                return default
            current = current[int(part)]
        elif isinstance(current, _SCALARS):
            return default
        else:
            current = getattr(current, part, _NOT_FOUND)

        if current is _NOT_FOUND:
            return default

    return current


def stringify(value: Any) -> str:
    """Render a scalar the way it appears inside a JSON-encoded rule."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def substitute(conditions: Any, user: Any, strict: bool = False) -> Any:
    """
    Return a copy of conditions with ${user.*} placeholders resolved.

    Args:
        conditions: JSON-like tree (dicts, lists, tuples, scalars) or None
        user: UserContext, mapping or object the paths resolve against
        strict: Resolve missing paths to UNRESOLVED instead of ""

    Raises:
        ConditionSubstitutionError: Non-serializable leaf, non-string key
            or cyclic reference
    """
    if conditions is None:
        return None
    return _walk(conditions, user, strict, set())


def contains_placeholder(conditions: Any) -> bool:
    """Check whether any string in the tree carries a ${user.*} token."""
    if isinstance(conditions, str):
        return PLACEHOLDER_PATTERN.search(conditions) is not None
    if isinstance(conditions, Mapping):
        return any(contains_placeholder(value) for value in conditions.values())
    if isinstance(conditions, (list, tuple)):
        return any(contains_placeholder(value) for value in conditions)
    return False


def _walk(value: Any, user: Any, strict: bool, active: set[int]) -> Any:
    if isinstance(value, str):
        return _substitute_string(value, user, strict)

    if isinstance(value, _SCALARS):
        return value

    if isinstance(value, Mapping):
        marker = id(value)
        if marker in active:
            raise ConditionSubstitutionError("Conditions contain a cyclic reference")
        active.add(marker)
        try:
            result = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise ConditionSubstitutionError(
                        f"Condition keys must be strings, got {type(key).__name__}"
                    )
                result[key] = _walk(item, user, strict, active)
            return result
        finally:
            active.discard(marker)

    if isinstance(value, (list, tuple)):
        marker = id(value)
        if marker in active:
            raise ConditionSubstitutionError("Conditions contain a cyclic reference")
        active.add(marker)
        try:
            items = [_walk(item, user, strict, active) for item in value]
            # Subclasses such as namedtuples come back as plain tuples
            return items if isinstance(value, list) else tuple(items)
        finally:
            active.discard(marker)

    raise ConditionSubstitutionError(
        f"Cannot use value of type {type(value).__name__} in rule conditions"
    )


def _substitute_string(value: str, user: Any, strict: bool) -> Any:
    whole = PLACEHOLDER_PATTERN.fullmatch(value)
    if whole:
        resolved = resolve_path(user, whole.group(1))
        if resolved is None:
            return UNRESOLVED if strict else ""
        return resolved

    if "${user." not in value:
        return value

    unresolved = False

    def replace(match: re.Match) -> str:
        nonlocal unresolved
        resolved = resolve_path(user, match.group(1))
        if resolved is None:
            unresolved = True
            return ""
        return stringify(resolved)

    replaced = PLACEHOLDER_PATTERN.sub(replace, value)
    if unresolved and strict:
        return UNRESOLVED
    return replaced
