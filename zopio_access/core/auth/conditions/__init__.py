"""
Rule conditions.

- dsl: declarative Mongo-style condition queries with ${user.*} placeholders
- attributes: attribute policies checked against the user's attributes

Predicate conditions are plain callables taking (context, record).
"""

from .dsl import evaluate_dsl, matches, validate_dsl
from .attributes import AttributePolicy, attribute_condition, check_attributes

__all__ = [
    "evaluate_dsl",
    "matches",
    "validate_dsl",
    "AttributePolicy",
    "attribute_condition",
    "check_attributes",
]
