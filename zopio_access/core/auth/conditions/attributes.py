"""
Attribute policies (ABAC).

An attribute policy maps an attribute name to the values it may take:

    policy = {"department": ["engineering", "ops"], "plan": ["enterprise"]}
    check_attributes({"department": "ops", "plan": "enterprise"}, policy)  # True

Every key in the policy must be satisfied. Values are compared as text, so
{"level": ["3"]} accepts an integer attribute 3.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Callable

from ..substitution import stringify

AttributePolicy = Mapping[str, Sequence[str]]


def check_attributes(attributes: Mapping[str, Any], policy: AttributePolicy) -> bool:
    """Check that every attribute named by the policy holds an allowed value."""
    for key, allowed_values in policy.items():
        if key not in attributes:
            return False
        if stringify(attributes[key]) not in allowed_values:
            return False
    return True


def attribute_condition(policy: AttributePolicy) -> Callable[[Any, Any], bool]:
    """
    Build a rule predicate that checks the user's attributes.

    Usage:
        Rule("FeatureFlag", "read", condition=attribute_condition({"plan": ["pro"]}))
    """
    def condition(context: Any, record: Any = None) -> bool:
        return check_attributes(context.attributes, policy)

    condition.__name__ = f"attribute_condition({', '.join(policy)})"
    return condition
