"""
Tests for the FastAPI integration.
"""

import pytest
from httpx import AsyncClient

from zopio_access.core.auth import Authorized, Rejected, authorize_request

MEMBER_HEADERS = {"X-User-Id": "42", "X-User-Role": "user", "X-Org-Id": "org_1"}


@pytest.mark.asyncio
async def test_missing_identity_is_401(client: AsyncClient):
    """Requests without a forwarded user are rejected before evaluation."""
    response = await client.get("/dashboard")

    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


@pytest.mark.asyncio
async def test_require_access_allows(client: AsyncClient, memory_sink):
    response = await client.get("/dashboard", headers=MEMBER_HEADERS)

    assert response.status_code == 200
    assert memory_sink.last.context.id == "42"
    assert memory_sink.last.context.organization_id == "org_1"


@pytest.mark.asyncio
async def test_field_denial_is_403_with_reason(client: AsyncClient, memory_sink):
    response = await client.get("/profiles/ssn", headers=MEMBER_HEADERS)

    assert response.status_code == 403
    assert response.json()["detail"] == "No access to field 'ssn'"
    assert memory_sink.last.field == "ssn"


@pytest.mark.asyncio
async def test_authorize_request_record_check(client: AsyncClient):
    own = await client.patch("/profiles/42", headers=MEMBER_HEADERS)
    other = await client.patch("/profiles/99", headers=MEMBER_HEADERS)

    assert own.json() == {"updated": "42"}
    assert other.json() == {"rejected": "No matching rule found"}


@pytest.mark.asyncio
async def test_access_denied_handler(client: AsyncClient):
    response = await client.delete("/profiles/42", headers=MEMBER_HEADERS)

    assert response.status_code == 403
    assert response.json() == {"detail": "No matching rule found"}


@pytest.mark.asyncio
async def test_correlation_id_propagates(client: AsyncClient, memory_sink):
    response = await client.get(
        "/dashboard",
        headers={**MEMBER_HEADERS, "X-Correlation-ID": "corr-123"},
    )

    assert response.headers["X-Correlation-ID"] == "corr-123"
    assert "X-Request-ID" in response.headers
    assert memory_sink.last.correlation_id == "corr-123"


@pytest.mark.asyncio
async def test_authorize_request_outcomes(evaluator, member):
    allowed = await authorize_request(evaluator, member, "read", "Dashboard")
    denied = await authorize_request(evaluator, member, "delete", "Profile")

    assert isinstance(allowed, Authorized)
    assert allowed.result.can
    assert denied == Rejected(status_code=403, reason="No matching rule found")
