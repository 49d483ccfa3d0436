"""Principal: the authenticated identity of one request."""

from __future__ import annotations

from dataclasses import dataclass

from warden_identity.domain.user import UserRole


@dataclass(frozen=True)
class Principal:
    """Immutable identity reconstructed from a verified access token.

    Lives for one request and is never cached or persisted. ``session_id``
    is the nonce shared by the token pair the principal authenticated with;
    it lets logout revoke exactly that session.
    """

    id: str
    email: str
    role: UserRole
    session_id: str | None = None

    def __str__(self) -> str:
        return f"Principal({self.email})"
