"""Token authority: issues, verifies, refreshes and revokes JWT pairs.

Access and refresh tokens are signed with separate secrets, so leaking one
secret does not let an attacker forge the other token type. Both tokens of
a pair share a random session nonce; each carries it with a type suffix
(``<nonce>_access`` / ``<nonce>_refresh``) in the ``jti`` claim.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from warden_config.durations import parse_duration
from warden_identity.application.context import Principal
from warden_identity.domain.shared.time import utc_now
from warden_identity.domain.user import UserRole
from warden_identity.exceptions import InvalidTokenError, TokenExpiredError
from warden_identity.schemas import TokenPair, TokenPayload, TokenType
from warden_identity.services.revocation import NullRevocationStore, RevocationStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_REQUIRED_CLAIMS = ["sub", "email", "role", "type", "jti", "iat", "exp"]

# Expiry is checked against the injected clock below, not by PyJWT.
_DECODE_OPTIONS: dict[str, Any] = {
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "require": _REQUIRED_CLAIMS,
}


class TokenAuthority:
    """Service for JWT token pair lifecycle.

    Examples
    --------
    >>> authority = TokenAuthority(access_secret="a" * 32, refresh_secret="b" * 32)
    >>> pair = authority.issue_pair("user-1", "user@example.com", UserRole.CUSTOMER)
    >>> authority.verify_access(pair.access_token).id
    'user-1'
    """

    DEFAULT_ACCESS_TTL = "24h"
    DEFAULT_REFRESH_TTL = "7d"
    ALGORITHM = "HS256"

    def __init__(  # noqa: PLR0913
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: str = DEFAULT_ACCESS_TTL,
        refresh_ttl: str = DEFAULT_REFRESH_TTL,
        algorithm: str = ALGORITHM,
        clock: Clock = utc_now,
        revocation_store: RevocationStore | None = None,
    ):
        """Initialize the token authority.

        Parameters
        ----------
        access_secret
            Secret for signing access tokens
        refresh_secret
            Secret for signing refresh tokens; must differ from access_secret
        access_ttl
            Access token lifetime as a duration string (default "24h")
        refresh_ttl
            Refresh token lifetime as a duration string (default "7d")
        algorithm
            HMAC algorithm used for signing
        clock
            Returns the current aware UTC datetime
        revocation_store
            Revocation backend; defaults to advisory revocation

        Raises
        ------
        ValueError
            If a secret is empty, the secrets are equal, or a TTL is malformed
        """
        if not access_secret or not refresh_secret:
            msg = "JWT secret keys cannot be empty"
            raise ValueError(msg)
        if access_secret == refresh_secret:
            msg = "Access and refresh secrets must differ"
            raise ValueError(msg)

        self._secrets: dict[TokenType, str] = {
            "access": access_secret,
            "refresh": refresh_secret,
        }
        self._ttls: dict[TokenType, timedelta] = {
            "access": timedelta(seconds=parse_duration(access_ttl)),
            "refresh": timedelta(seconds=parse_duration(refresh_ttl)),
        }
        self._algorithm = algorithm
        self._clock = clock
        self._revocation_store = revocation_store or NullRevocationStore()

    @staticmethod
    def ttl_seconds(duration: str) -> int:
        """Convert a duration string ("60m", "24h", "7d") into seconds."""
        return parse_duration(duration)

    @staticmethod
    def extract_bearer(header_value: str | None) -> str | None:
        """Return the token of a ``Bearer <token>`` header value.

        Absent or malformed headers yield None; whether that is fatal is the
        caller's decision.
        """
        if not header_value:
            return None

        parts = header_value.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
            return None

        return parts[1]

    def issue_pair(self, principal_id: str, email: str, role: UserRole | str) -> TokenPair:
        """Issue a new access/refresh pair sharing one session nonce."""
        role = role if isinstance(role, UserRole) else UserRole(role)
        now = self._clock().replace(microsecond=0)
        session_nonce = secrets.token_urlsafe(16)
        generation = self._revocation_store.generation(principal_id)

        access_token = self._encode(
            principal_id, email, role, "access", session_nonce, now, generation
        )
        refresh_token = self._encode(
            principal_id, email, role, "refresh", session_nonce, now, generation
        )

        access_expires_at = now + self._ttls["access"]
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_token_expires_at=access_expires_at,
            expires_in=int(self._ttls["access"].total_seconds()),
        )

    def verify_access(self, token: str) -> Principal:
        """Verify an access token and return its principal.

        Raises
        ------
        TokenExpiredError
            If the token is past its expiry
        InvalidTokenError
            If the signature is invalid, the token is not an access token,
            or it has been revoked
        """
        return self.verify(token, "access").to_principal()

    def verify_refresh(self, token: str) -> Principal:
        """Verify a refresh token and return its principal.

        Raises the same errors as ``verify_access``.
        """
        return self.verify(token, "refresh").to_principal()

    def refresh(self, refresh_token: str) -> TokenPair:
        """Mint a brand-new pair from the claims of a valid refresh token."""
        payload = self.verify(refresh_token, "refresh")
        pair = self.issue_pair(payload.principal_id, payload.email, payload.role)
        logger.debug("Tokens refreshed for user: %s", payload.principal_id)
        return pair

    def revoke(self, principal_id: str, session_id: str | None = None) -> None:
        """Revoke one session of a user."""
        if session_id is None:
            logger.info(
                "Logout for user %s without session id - tokens will expire naturally",
                principal_id,
            )
            return
        # No token of the session outlives a refresh token issued now
        expires_at = self._clock() + max(self._ttls.values())
        self._revocation_store.revoke_session(principal_id, session_id, expires_at)

    def revoke_all(self, principal_id: str) -> None:
        """Revoke every session of a user."""
        self._revocation_store.revoke_all(principal_id)

    def verify(self, token: str, expected_type: TokenType) -> TokenPayload:
        """Verify a token of the given type and return its decoded claims.

        This is the only verification path; ``verify_access``,
        ``verify_refresh`` and ``refresh`` all go through it.
        """
        try:
            claims = jwt.decode(
                token,
                self._secrets[expected_type],
                algorithms=[self._algorithm],
                options=_DECODE_OPTIONS,
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid {expected_type} token") from e

        if claims["type"] != expected_type:
            raise InvalidTokenError("Invalid token type")

        nonce = claims["jti"]
        if not isinstance(nonce, str) or not nonce.endswith(f"_{expected_type}"):
            raise InvalidTokenError("Invalid token type")

        try:
            payload = TokenPayload(
                principal_id=str(claims["sub"]),
                email=str(claims["email"]),
                role=UserRole(claims["role"]),
                token_type=expected_type,
                nonce=nonce,
                issued_at=datetime.fromtimestamp(int(claims["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc),
                generation=int(claims.get("gen", 0)),
            )
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("Malformed token payload") from e

        now = self._clock()
        if payload.expires_at <= now:
            raise TokenExpiredError(f"{expected_type.capitalize()} token has expired")

        if self._revocation_store.is_revoked(payload, now):
            raise InvalidTokenError("Token has been revoked")

        return payload

    def _encode(  # noqa: PLR0913
        self,
        principal_id: str,
        email: str,
        role: UserRole,
        token_type: TokenType,
        session_nonce: str,
        now: datetime,
        generation: int,
    ) -> str:
        claims = {
            "sub": principal_id,
            "email": email,
            "role": role.value,
            "type": token_type,
            "jti": f"{session_nonce}_{token_type}",
            "gen": generation,
            "iat": now,
            "exp": now + self._ttls[token_type],
        }
        return jwt.encode(claims, self._secrets[token_type], algorithm=self._algorithm)
