"""
FastAPI dependencies for access checks.

Usage:
    from zopio_access.core.auth import CurrentContext, require_access

    @router.get("/dashboard", dependencies=[Depends(require_access("read", "Dashboard"))])
    async def dashboard():
        ...

    @router.patch("/profiles/{id}")
    async def update_profile(id: str, context: CurrentContext, evaluator: Evaluator):
        profile = await load_profile(id)
        outcome = await authorize_request(evaluator, context, "update", "Profile", record=profile)
        if isinstance(outcome, Rejected):
            raise HTTPException(outcome.status_code, outcome.reason)

The user context comes from headers set by the authentication gateway
(X-User-Id, X-User-Role, X-Org-Id). Apps that resolve identity differently
override get_user_context through app.dependency_overrides.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Callable, Union

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from .interfaces import Action, EvaluationResult, UserContext
from .service import AccessDenied, AccessEvaluator


# ============================================================
# AUTHORIZATION OUTCOME
# ============================================================

@dataclass(frozen=True)
class Authorized:
    """The request may proceed."""
    context: UserContext
    result: EvaluationResult


@dataclass(frozen=True)
class Rejected:
    """The request must be answered with status_code and reason."""
    status_code: int
    reason: str


AuthorizationOutcome = Union[Authorized, Rejected]


# ============================================================
# COMPONENT FACTORIES
# ============================================================

def get_evaluator() -> AccessEvaluator:
    """
    Get the process-wide audited evaluator over the combined rule set.

    Override in tests through app.dependency_overrides[get_evaluator].
    """
    from zopio_access.extensions.auth.runner import get_access_evaluator

    return get_access_evaluator()


# ============================================================
# CONTEXT DEPENDENCIES
# ============================================================

async def get_user_context(
    user_id: str | None = Header(default=None, alias="X-User-Id"),
    role: str | None = Header(default=None, alias="X-User-Role"),
    organization_id: str | None = Header(default=None, alias="X-Org-Id"),
) -> UserContext:
    """
    Get the user context for the current request.

    Raises:
        HTTPException 401: If no user identity was forwarded
    """
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return UserContext(id=user_id, role=role, organization_id=organization_id)


# ============================================================
# AUTHORIZATION
# ============================================================

async def authorize_request(
    evaluator: AccessEvaluator,
    context: UserContext,
    action: str | Action,
    resource: str,
    record: Any = None,
    field: str | None = None,
) -> AuthorizationOutcome:
    """Evaluate (and audit) a request-level check as a tagged outcome."""
    result = await evaluator.aevaluate(context, action, resource, record, field)
    if result.can:
        return Authorized(context=context, result=result)
    return Rejected(
        status_code=status.HTTP_403_FORBIDDEN,
        reason=result.reason or "Permission denied",
    )


def require_access(
    action: str | Action,
    resource: str,
    field: str | None = None,
) -> Callable[..., Any]:
    """
    Dependency factory requiring access to a resource type.

    Raises:
        HTTPException 403: With the denial reason as detail
    """
    async def dependency(
        context: UserContext = Depends(get_user_context),
        evaluator: AccessEvaluator = Depends(get_evaluator),
    ) -> UserContext:
        outcome = await authorize_request(evaluator, context, action, resource, field=field)
        if isinstance(outcome, Rejected):
            raise HTTPException(status_code=outcome.status_code, detail=outcome.reason)
        return outcome.context

    return dependency


async def access_denied_handler(request: Request, exc: AccessDenied) -> JSONResponse:
    """
    Exception handler turning AccessDenied into a 403 response.

    Usage:
        app.add_exception_handler(AccessDenied, access_denied_handler)
    """
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": exc.reason},
    )


# ============================================================
# TYPE ALIASES FOR CLEAN SIGNATURES
# ============================================================

# User context (required)
CurrentContext = Annotated[UserContext, Depends(get_user_context)]

# Audited evaluator
Evaluator = Annotated[AccessEvaluator, Depends(get_evaluator)]
