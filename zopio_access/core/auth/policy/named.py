"""
Named action policies.

Some checks are not resource/action rules but whole named capabilities
("plugin.install", "users.manage"). Each is a function of PolicyInput
registered under its action name:

    allowed = await can(PolicyInput(user=policy_user, action="plugin.install"))

Unknown actions are denied.
"""

import inspect
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..registry import AuthRegistry, PolicyFn

_RESERVED_METADATA = ("roles", "organizationId", "organization_id", "permissions")


@dataclass(frozen=True)
class PolicyUser:
    """Identity as seen by named policies."""
    id: str
    roles: tuple[str, ...] = ()
    organization_id: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def permissions(self) -> list[str]:
        permissions = self.metadata.get("permissions")
        return list(permissions) if isinstance(permissions, (list, tuple)) else []


@dataclass(frozen=True)
class PolicyInput:
    """Input to a named policy."""
    user: PolicyUser
    action: str
    resource: Any = None
    context: Mapping[str, Any] = field(default_factory=dict)


def create_policy_user(identity: Mapping[str, Any] | None) -> PolicyUser:
    """
    Convert an identity-provider user into a PolicyUser.

    Reads roles, organization and permissions from public metadata and keeps
    every other metadata key for policy decisions. A missing identity yields
    an anonymous user with no roles.
    """
    if not identity:
        return PolicyUser(id="")

    public = identity.get("public_metadata") or identity.get("publicMetadata") or {}
    roles = public.get("roles") or []
    permissions = public.get("permissions")
    if not isinstance(permissions, (list, tuple)):
        permissions = []

    metadata: dict[str, Any] = {"permissions": list(permissions)}
    metadata.update(
        (key, value) for key, value in public.items() if key not in _RESERVED_METADATA
    )

    return PolicyUser(
        id=str(identity.get("id", "")),
        roles=tuple(roles),
        organization_id=public.get("organization_id") or public.get("organizationId"),
        metadata=metadata,
    )


def metadata_permission_rule(permission: str) -> PolicyFn:
    """Build a policy granting users whose metadata lists the permission."""
    def rule(data: PolicyInput) -> bool:
        return permission in data.user.permissions

    rule.__name__ = f"has_{permission.replace('-', '_')}"
    return rule


@AuthRegistry.policy("plugin.install")
def can_install_plugin(data: PolicyInput) -> bool:
    """Installing plugins requires the admin or developer role."""
    return "admin" in data.user.roles or "developer" in data.user.roles


can_manage_users = metadata_permission_rule("manage-users")
can_view_analytics = metadata_permission_rule("view-analytics")

AuthRegistry.register_policy("users.manage", can_manage_users)
AuthRegistry.register_policy("analytics.view", can_view_analytics)


async def can(data: PolicyInput) -> bool:
    """Check a named policy. Policies may be sync or async."""
    if not AuthRegistry.has_policy(data.action):
        return False

    outcome = AuthRegistry.get_policy(data.action)(data)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return bool(outcome)


async def allow_all(_: PolicyInput) -> bool:
    return True


async def deny_all(_: PolicyInput) -> bool:
    return False
