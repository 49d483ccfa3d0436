"""Identity schemas and data structures.

These are simple data classes used for transferring identity
data between components.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Literal

from warden_identity.application.context import Principal
from warden_identity.domain.user import UserRole

if TYPE_CHECKING:
    from warden_identity.domain.user import User

TokenType = Literal["access", "refresh"]


@dataclass(frozen=True)
class TokenPayload:
    """Decoded and verified token claims.

    Attributes
    ----------
    principal_id
        The unique identifier of the user
    email
        The user's email address
    role
        The role the user held when the token was issued
    token_type
        Either "access" or "refresh"
    nonce
        Typed nonce: the session nonce plus a ``_access``/``_refresh`` suffix
    issued_at
        Token issue timestamp
    expires_at
        Token expiration timestamp
    generation
        Revocation generation of the user when the token was issued
    """

    principal_id: str
    email: str
    role: UserRole
    token_type: TokenType
    nonce: str
    issued_at: datetime
    expires_at: datetime
    generation: int = 0

    @property
    def session_id(self) -> str:
        """The nonce shared by both tokens of the pair."""
        return self.nonce.rsplit("_", 1)[0]

    def is_access_token(self) -> bool:
        """Check if this is an access token."""
        return self.token_type == "access"

    def is_refresh_token(self) -> bool:
        """Check if this is a refresh token."""
        return self.token_type == "refresh"

    def to_principal(self) -> Principal:
        return Principal(
            id=self.principal_id,
            email=self.email,
            role=self.role,
            session_id=self.session_id,
        )


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together."""

    access_token: str
    refresh_token: str
    access_token_expires_at: datetime
    expires_in: int  # seconds until access token expires
    token_type: str = "bearer"


@dataclass(frozen=True)
class UserView:
    """User data returned to callers (no password hash)."""

    id: str
    name: str
    email: str
    role: UserRole
    phone: str | None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserView:
        """The single place a stored user is projected for output."""
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            phone=user.phone,
            created_at=user.created_at,
        )


@dataclass(frozen=True)
class AuthResult:
    user: UserView
    tokens: TokenPair


@dataclass(frozen=True)
class SocialAuthResult:
    user: UserView
    tokens: TokenPair
    is_new_user: bool
