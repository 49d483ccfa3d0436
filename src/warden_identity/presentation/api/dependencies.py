"""FastAPI dependencies that authenticate and authorize requests.

Provides dependencies for:
- The identity components attached to the application
- The current principal (from the bearer access token)
- Role and permission guards built on AccessPolicy

Every failure is raised as an AuthError; the handlers registered by
``setup_exception_handlers`` turn it into the JSON error response.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Header, Request

from warden_identity.application.context import Principal
from warden_identity.domain.user import UserRole
from warden_identity.exceptions import (
    AuthError,
    InsufficientPermissionsError,
    InvalidTokenError,
)
from warden_identity.factory import IdentityComponents
from warden_identity.services import Permission, TokenAuthority

logger = logging.getLogger(__name__)

PrincipalGuard = Callable[..., Awaitable[Principal]]


def get_identity_components(request: Request) -> IdentityComponents:
    """Return the components installed by ``setup_identity``."""
    components = getattr(request.app.state, "identity", None)
    if components is None:
        msg = "Identity components are not configured; call setup_identity(app, ...)"
        raise RuntimeError(msg)
    return components


Components = Annotated[IdentityComponents, Depends(get_identity_components)]


# -----------------------------------------------------------------------------
# Current Principal (JWT Authentication)
# -----------------------------------------------------------------------------


async def get_current_principal(
    request: Request,
    components: Components,
    authorization: Annotated[str | None, Header()] = None,
) -> Principal:
    """
    Authenticate the request from its ``Authorization: Bearer`` header.

    The verified principal is also attached to ``request.state.principal``
    for code that does not take it as a parameter.

    Raises
    ------
    InvalidTokenError
        If the header is missing or malformed, or the token is invalid
    TokenExpiredError
        If the access token has expired
    """
    token = TokenAuthority.extract_bearer(authorization)
    if token is None:
        raise InvalidTokenError("Authentication required")

    principal = components.token_authority.verify_access(token)
    request.state.principal = principal
    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def get_optional_principal(
    request: Request,
    components: Components,
    authorization: Annotated[str | None, Header()] = None,
) -> Principal | None:
    """
    Optional authentication dependency.

    Returns the principal if a valid access token is provided, None when the
    header is absent or the token does not verify.
    """
    token = TokenAuthority.extract_bearer(authorization)
    if token is None:
        return None

    try:
        principal = components.token_authority.verify_access(token)
    except AuthError as e:
        logger.debug("Ignoring invalid token on optional auth: %s", e.code.value)
        return None

    request.state.principal = principal
    return principal


OptionalPrincipal = Annotated[Principal | None, Depends(get_optional_principal)]


# -----------------------------------------------------------------------------
# Authorization guards
# -----------------------------------------------------------------------------


def require_roles(*roles: UserRole) -> PrincipalGuard:
    """Allow only principals holding exactly one of ``roles``."""

    async def guard(principal: CurrentPrincipal, components: Components) -> Principal:
        if not components.access_policy.has_any_role(principal, roles):
            logger.info("Role check failed for user %s", principal.id)
            raise InsufficientPermissionsError("Access denied")
        return principal

    return guard


def require_role_or_higher(minimum_role: UserRole) -> PrincipalGuard:
    """Allow principals whose role subsumes ``minimum_role``."""

    async def guard(principal: CurrentPrincipal, components: Components) -> Principal:
        if not components.access_policy.has_role_or_higher(principal, minimum_role):
            logger.info("Role hierarchy check failed for user %s", principal.id)
            raise InsufficientPermissionsError("Access denied")
        return principal

    return guard


def require_permission(action: str, resource: str) -> PrincipalGuard:
    """Allow principals whose role grants ``action`` on ``resource``.

    No request facts are supplied, so conditional catalog entries (owner,
    status, ...) never satisfy this guard. Check those in the endpoint with
    ``AccessPolicy.ensure_permission`` once the resource is loaded.
    """
    permission = Permission(action, resource)

    async def guard(principal: CurrentPrincipal, components: Components) -> Principal:
        components.access_policy.ensure_permission(principal, permission)
        return principal

    return guard
