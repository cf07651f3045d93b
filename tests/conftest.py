"""
Pytest fixtures for testing.

Provides:
- Settings instances independent of the environment
- Audit sinks (memory, failing, slow, async)
- Common user contexts
- FastAPI app with the evaluator overridden
"""

import asyncio
from typing import AsyncGenerator

import pytest
import pytest_asyncio
import structlog
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient

from zopio_access.core.auth import (
    AccessDenied,
    AccessEvaluator,
    AuditRecord,
    AuditSink,
    CurrentContext,
    Evaluator,
    MemoryAuditSink,
    Rejected,
    Rule,
    UserContext,
    access_denied_handler,
    authorize_request,
    get_evaluator,
    require_access,
)
from zopio_access.core.config import AccessSettings
from zopio_access.utils.context import RequestContextMiddleware


# ============ Settings ============


@pytest.fixture
def settings() -> AccessSettings:
    """Default settings, ignoring any .env file."""
    return AccessSettings(_env_file=None)


@pytest.fixture
def strict_settings() -> AccessSettings:
    return AccessSettings(
        _env_file=None,
        strict_placeholders=True,
        missing_field_policy="deny",
    )


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after configure_logging()."""
    yield
    structlog.reset_defaults()


# ============ Contexts ============


@pytest.fixture
def member() -> UserContext:
    return UserContext(
        id="42",
        role="user",
        organization_id="org_1",
        attributes={"department": "sales", "plan": "pro"},
    )


@pytest.fixture
def admin() -> UserContext:
    return UserContext(id="1", role="admin", organization_id="org_1")


# ============ Mock Sinks ============


class FailingAuditSink(AuditSink):
    """Sink whose write always raises."""

    def __init__(self):
        self.calls = 0

    def write(self, entry: AuditRecord) -> None:
        self.calls += 1
        raise ConnectionError("log service unavailable")


class AsyncMemorySink(AuditSink):
    """Async sink recording entries, optionally after a delay."""

    def __init__(self, delay: float = 0.0, fail: bool = False):
        self.delay = delay
        self.fail = fail
        self.entries: list[AuditRecord] = []

    async def write(self, entry: AuditRecord) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("async sink failed")
        self.entries.append(entry)


@pytest.fixture
def memory_sink() -> MemoryAuditSink:
    return MemoryAuditSink()


@pytest.fixture
def failing_sink() -> FailingAuditSink:
    return FailingAuditSink()


@pytest.fixture
def async_sink() -> AsyncMemorySink:
    return AsyncMemorySink()


@pytest.fixture
def slow_sink() -> AsyncMemorySink:
    """Async sink that outlives a short audit timeout."""
    return AsyncMemorySink(delay=1.0)


@pytest.fixture
def broken_async_sink() -> AsyncMemorySink:
    return AsyncMemorySink(fail=True)


@pytest.fixture
def profile_rules() -> list[Rule]:
    """The classic own-profile rule set."""
    return [
        Rule("Dashboard", "read"),
        Rule("Profile", "read", field_permissions={"ssn": "none"}),
        Rule("Profile", "update", dsl={"userId": "${user.id}"}),
    ]


@pytest.fixture
def evaluator(profile_rules, memory_sink, settings) -> AccessEvaluator:
    return AccessEvaluator(profile_rules, sink=memory_sink, settings=settings)


# ============ App Fixtures ============


@pytest.fixture
def app(evaluator: AccessEvaluator) -> FastAPI:
    """Small app exercising every dependency style."""
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(AccessDenied, access_denied_handler)

    @app.get("/dashboard", dependencies=[Depends(require_access("read", "Dashboard"))])
    async def dashboard():
        return {"ok": True}

    @app.get("/profiles/ssn")
    async def profile_ssn(context=Depends(require_access("read", "Profile", field="ssn"))):
        return {"id": context.id}

    @app.patch("/profiles/{owner_id}")
    async def update_profile(owner_id: str, context: CurrentContext, evaluator: Evaluator):
        outcome = await authorize_request(
            evaluator, context, "update", "Profile", record={"userId": owner_id}
        )
        if isinstance(outcome, Rejected):
            return {"rejected": outcome.reason}
        return {"updated": owner_id}

    @app.delete("/profiles/{owner_id}")
    async def delete_profile(owner_id: str, context: CurrentContext, evaluator: Evaluator):
        evaluator.require(context, "delete", "Profile", record={"userId": owner_id})
        return {"deleted": owner_id}

    app.dependency_overrides[get_evaluator] = lambda: evaluator
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
