"""
Named action policies.

Registered:
- plugin.install: admin or developer role
- users.manage: "manage-users" metadata permission
- analytics.view: "view-analytics" metadata permission

Add custom policies with the @AuthRegistry.policy decorator.
"""

from .named import (
    PolicyInput,
    PolicyUser,
    allow_all,
    can,
    create_policy_user,
    deny_all,
    metadata_permission_rule,
)

__all__ = [
    "PolicyInput",
    "PolicyUser",
    "allow_all",
    "can",
    "create_policy_user",
    "deny_all",
    "metadata_permission_rule",
]
