"""Bearer-token authentication dependencies."""

from typing import Callable

from fastapi import Depends, Header

from safetour.auth.guard import Role, authorize
from safetour.auth.tokens import Claims
from safetour.common.exceptions import ForbiddenError, UnauthenticatedError


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise UnauthenticatedError("Access denied. No token provided.")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Access denied. Malformed authorization header.")
    return token.strip()


async def require_claims(
    authorization: str | None = Header(None, alias="Authorization"),
) -> Claims:
    """FastAPI dependency that verifies the bearer token and returns its claims."""
    from safetour.deps import get_token_service

    result = get_token_service().verify(_bearer_token(authorization))
    if not result.valid:
        raise UnauthenticatedError(result.message)
    return result.claims


def require_roles(*roles: Role) -> Callable:
    """Build a dependency that admits only the given roles."""

    async def dependency(claims: Claims = Depends(require_claims)) -> Claims:
        decision = authorize(claims, roles)
        if not decision.authorized:
            raise ForbiddenError(decision.reason)
        return claims

    return dependency
