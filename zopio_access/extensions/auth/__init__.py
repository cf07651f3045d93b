"""
Access Extensions.

- rbac: role templates, ability objects and role-derived engine rules
- abac: attribute-based engine rules
- runner: combined rule set and the default audited evaluator

Usage:
    from zopio_access.extensions.auth.runner import evaluate_access
"""
