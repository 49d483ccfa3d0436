"""Identity services - password policy, token authority, access policy."""

from warden_identity.services.access_policy import (
    DEFAULT_PERMISSION_CATALOG,
    AccessPolicy,
    Permission,
    Resource,
)
from warden_identity.services.jwt_service import Clock, TokenAuthority
from warden_identity.services.password_service import (
    PasswordPolicy,
    PasswordRules,
    StrengthAssessment,
)
from warden_identity.services.revocation import (
    InMemoryRevocationStore,
    NullRevocationStore,
    RevocationStore,
)

__all__ = [
    "DEFAULT_PERMISSION_CATALOG",
    "AccessPolicy",
    "Clock",
    "InMemoryRevocationStore",
    "NullRevocationStore",
    "PasswordPolicy",
    "PasswordRules",
    "Permission",
    "Resource",
    "RevocationStore",
    "StrengthAssessment",
    "TokenAuthority",
]
