"""Explicit wiring of the identity components from settings.

Each collaborator is constructed once and passed in by constructor; there is
no global registry. Applications build one ``IdentityComponents`` at
start-up and hand it to the presentation layer.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from warden_config.settings import Settings
from warden_identity.application.ports import ProfileFetcher
from warden_identity.application.services import IdentityService
from warden_identity.domain.shared.time import utc_now
from warden_identity.domain.user import UserRepository, UserRole
from warden_identity.services import (
    AccessPolicy,
    Clock,
    NullRevocationStore,
    PasswordPolicy,
    PasswordRules,
    RevocationStore,
    TokenAuthority,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityComponents:
    password_policy: PasswordPolicy
    token_authority: TokenAuthority
    access_policy: AccessPolicy
    identity_service: IdentityService
    revocation_store: RevocationStore


def build_password_policy(settings: Settings) -> PasswordPolicy:
    rules = PasswordRules(
        min_length=settings.password_min_length,
        require_uppercase=settings.password_require_uppercase,
        require_lowercase=settings.password_require_lowercase,
        require_digit=settings.password_require_digit,
        require_special=settings.password_require_special,
    )
    return PasswordPolicy(rules=rules, rounds=settings.bcrypt_rounds)


def build_token_authority(
    settings: Settings,
    revocation_store: RevocationStore,
    clock: Clock = utc_now,
) -> TokenAuthority:
    return TokenAuthority(
        access_secret=settings.jwt_access_secret_key.get_secret_value(),
        refresh_secret=settings.jwt_refresh_secret_key.get_secret_value(),
        access_ttl=settings.jwt_access_token_ttl,
        refresh_ttl=settings.jwt_refresh_token_ttl,
        algorithm=settings.jwt_algorithm,
        clock=clock,
        revocation_store=revocation_store,
    )


def build_identity_components(  # noqa: PLR0913
    settings: Settings,
    user_repository: UserRepository,
    profile_fetcher: Optional[ProfileFetcher] = None,
    revocation_store: Optional[RevocationStore] = None,
    clock: Clock = utc_now,
) -> IdentityComponents:
    """Build every identity component from application settings.

    Parameters
    ----------
    settings
        Loaded application settings
    user_repository
        The user store
    profile_fetcher
        Social sign-on adapter; social auth is rejected without one
    revocation_store
        Revocation backend; defaults to ``NullRevocationStore``
    clock
        Time source for token issue and expiry checks

    Returns
    -------
    IdentityComponents
        The wired components, sharing one revocation store
    """
    revocation_store = revocation_store or NullRevocationStore()
    password_policy = build_password_policy(settings)
    token_authority = build_token_authority(settings, revocation_store, clock)
    access_policy = AccessPolicy()

    identity_service = IdentityService(
        user_repository=user_repository,
        password_policy=password_policy,
        token_authority=token_authority,
        profile_fetcher=profile_fetcher,
        default_role=UserRole(settings.default_role),
    )

    logger.debug(
        "Identity components built (revocation: %s)",
        type(revocation_store).__name__,
    )
    return IdentityComponents(
        password_policy=password_policy,
        token_authority=token_authority,
        access_policy=access_policy,
        identity_service=identity_service,
        revocation_store=revocation_store,
    )
