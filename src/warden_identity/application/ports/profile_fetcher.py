"""Port for fetching identities from external sign-on providers.

warden_identity never talks to a provider itself. An adapter exchanges the
provider token for a profile and normalizes it into ``SocialProfile``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class SocialProvider(str, Enum):
    GOOGLE = "google"
    APPLE = "apple"
    FACEBOOK = "facebook"


@dataclass(frozen=True)
class SocialProfile:
    """Normalized profile returned by a provider adapter."""

    name: str
    email: str
    phone: str | None = None


class ProfileFetcher(ABC):
    """Exchanges a provider token for a normalized profile."""

    supported_providers: frozenset[str] = frozenset(p.value for p in SocialProvider)

    def supports(self, provider: str) -> bool:
        return provider in self.supported_providers

    @abstractmethod
    async def fetch_profile(self, provider: str, token: str) -> SocialProfile:
        """Fetch the profile behind a provider access token.

        Implementations raise any exception on failure; the identity
        service reports it as SocialAuthFailedError.
        """
