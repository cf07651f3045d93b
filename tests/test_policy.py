"""
Tests for named action policies.
"""

import pytest

from zopio_access.core.auth import AuthRegistry
from zopio_access.core.auth.policy import (
    PolicyInput,
    PolicyUser,
    allow_all,
    can,
    create_policy_user,
    deny_all,
)


@pytest.fixture
def restore_policies():
    saved = dict(AuthRegistry._policies)
    yield
    AuthRegistry._policies.clear()
    AuthRegistry._policies.update(saved)


def test_create_policy_user_from_identity():
    user = create_policy_user(
        {
            "id": "user_1",
            "public_metadata": {
                "roles": ["developer"],
                "organizationId": "org_1",
                "permissions": ["view-analytics"],
                "plan": "pro",
            },
        }
    )

    assert user.id == "user_1"
    assert user.roles == ("developer",)
    assert user.organization_id == "org_1"
    assert user.permissions == ["view-analytics"]
    assert user.metadata["plan"] == "pro"


def test_create_policy_user_anonymous():
    assert create_policy_user(None) == PolicyUser(id="")


def test_create_policy_user_ignores_string_permissions():
    """A single string is not split into one permission per character."""
    user = create_policy_user(
        {"id": "user_1", "public_metadata": {"permissions": "manage-users"}}
    )

    assert user.permissions == []
    assert user.metadata["permissions"] == []


@pytest.mark.asyncio
async def test_plugin_install_requires_developer_or_admin():
    developer = PolicyUser(id="1", roles=("developer",))
    member = PolicyUser(id="2", roles=("user",))

    assert await can(PolicyInput(user=developer, action="plugin.install"))
    assert not await can(PolicyInput(user=member, action="plugin.install"))


@pytest.mark.asyncio
async def test_metadata_permission_policies():
    user = PolicyUser(id="1", metadata={"permissions": ["manage-users"]})

    assert await can(PolicyInput(user=user, action="users.manage"))
    assert not await can(PolicyInput(user=user, action="analytics.view"))


@pytest.mark.asyncio
async def test_unknown_action_denied():
    assert not await can(PolicyInput(user=PolicyUser(id="1"), action="billing.refund"))


@pytest.mark.asyncio
async def test_async_policy(restore_policies):
    AuthRegistry.register_policy("billing.refund", allow_all)

    assert await can(PolicyInput(user=PolicyUser(id="1"), action="billing.refund"))

    AuthRegistry.register_policy("billing.refund", deny_all)

    assert not await can(PolicyInput(user=PolicyUser(id="1"), action="billing.refund"))


def test_policy_decorator_registers(restore_policies):
    @AuthRegistry.policy("reports.export")
    def can_export(data: PolicyInput) -> bool:
        return True

    assert AuthRegistry.has_policy("reports.export")
    assert AuthRegistry.get_policy("reports.export") is can_export


def test_get_unknown_policy_raises():
    with pytest.raises(ValueError, match="Unknown policy"):
        AuthRegistry.get_policy("nope")
