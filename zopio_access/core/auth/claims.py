"""
User context from identity-provider session claims.

The engine never verifies credentials. The authentication layer hands over
already verified claims and this adapter shapes them into a UserContext:

    {
        "sub": "user_2abc",
        "org_id": "org_9xyz",
        "metadata": {"role": "user", "department": "sales"},
    }
"""

from collections.abc import Mapping
from typing import Any

from .interfaces import UserContext


class IncompleteSessionError(ValueError):
    """Claims are missing the user id, organization or role."""


def user_context_from_claims(claims: Mapping[str, Any]) -> UserContext:
    """
    Build the evaluation context from verified session claims.

    Every metadata key other than the role becomes an attribute.

    Raises:
        IncompleteSessionError: If user id, organization id or role is missing
    """
    user_id = claims.get("sub") or claims.get("user_id") or claims.get("userId")
    org_id = claims.get("org_id") or claims.get("orgId")
    metadata = claims.get("metadata") or {}
    role = metadata.get("role")

    if not user_id or not org_id or not role:
        raise IncompleteSessionError("Unauthorized or incomplete session")

    attributes = {key: value for key, value in metadata.items() if key != "role"}

    return UserContext(
        id=str(user_id),
        role=str(role),
        organization_id=str(org_id),
        attributes=attributes,
    )
