"""
ABAC (Attribute-Based Access Control) Extension.

Static attribute rules appended after the RBAC rules by the runner.
"""

from .rules import OPERATIONS_POLICY, abac_rules, same_organization_operations

__all__ = ["OPERATIONS_POLICY", "abac_rules", "same_organization_operations"]
