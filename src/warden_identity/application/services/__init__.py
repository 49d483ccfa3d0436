"""Application services for identity management."""

from warden_identity.application.services.identity_service import IdentityService

__all__ = ["IdentityService"]
