from warden_identity.application.ports.profile_fetcher import (
    ProfileFetcher,
    SocialProfile,
    SocialProvider,
)

__all__ = ["ProfileFetcher", "SocialProfile", "SocialProvider"]
