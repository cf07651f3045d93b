"""
Tests for claims-to-context conversion and attribute policies.
"""

import pytest

from zopio_access.core.auth import IncompleteSessionError, UserContext, user_context_from_claims
from zopio_access.core.auth.conditions import attribute_condition, check_attributes


def test_context_from_claims():
    context = user_context_from_claims(
        {
            "sub": "user_2abc",
            "org_id": "org_9xyz",
            "metadata": {"role": "user", "department": "sales"},
        }
    )

    assert context == UserContext(
        id="user_2abc",
        role="user",
        organization_id="org_9xyz",
        attributes={"department": "sales"},
    )


def test_context_from_camel_case_claims():
    context = user_context_from_claims(
        {"userId": "u1", "orgId": "o1", "metadata": {"role": "admin"}}
    )

    assert (context.id, context.organization_id, context.role) == ("u1", "o1", "admin")


@pytest.mark.parametrize(
    "claims",
    [
        {},
        {"sub": "u1", "metadata": {"role": "user"}},
        {"sub": "u1", "org_id": "o1"},
        {"org_id": "o1", "metadata": {"role": "user"}},
    ],
)
def test_incomplete_session(claims):
    with pytest.raises(IncompleteSessionError, match="incomplete session"):
        user_context_from_claims(claims)


# ============ Attribute Policies ============


def test_check_attributes():
    policy = {"department": ["engineering", "ops"], "level": ["3"]}

    assert check_attributes({"department": "ops", "level": 3}, policy)
    assert not check_attributes({"department": "sales", "level": 3}, policy)
    assert not check_attributes({"department": "ops"}, policy)
    assert check_attributes({"anything": 1}, {})


def test_attribute_condition_reads_context():
    condition = attribute_condition({"plan": ["pro", "enterprise"]})

    assert condition(UserContext(id="1", attributes={"plan": "enterprise"}))
    assert not condition(UserContext(id="1", attributes={"plan": "free"}), {"plan": "pro"})
    assert condition.__name__ == "attribute_condition(plan)"
