"""FastAPI boundary for warden_identity.

Usage:
    from warden_identity.presentation.api import setup_identity

    app = FastAPI()
    setup_identity(app, build_identity_components(settings, user_repository))
"""

from fastapi import FastAPI

from warden_identity.factory import IdentityComponents
from warden_identity.presentation.api.dependencies import (
    CurrentPrincipal,
    OptionalPrincipal,
    get_current_principal,
    get_identity_components,
    get_optional_principal,
    require_permission,
    require_role_or_higher,
    require_roles,
)
from warden_identity.presentation.api.exception_handlers import (
    setup_exception_handlers,
)


def setup_identity(app: FastAPI, components: IdentityComponents) -> None:
    """Attach the identity components and error handlers to an application."""
    app.state.identity = components
    setup_exception_handlers(app)


__all__ = [
    "CurrentPrincipal",
    "OptionalPrincipal",
    "get_current_principal",
    "get_identity_components",
    "get_optional_principal",
    "require_permission",
    "require_role_or_higher",
    "require_roles",
    "setup_exception_handlers",
    "setup_identity",
]
