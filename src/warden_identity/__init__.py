"""Warden Identity - authentication and authorization core.

This module handles all identity-related concerns:
- Password policy (strength rules, bcrypt hashing, generation)
- Token authority (JWT access/refresh pairs, refresh, revocation)
- Access policy (role hierarchy, permission catalog)
- Identity service (registration, login, social sign-on, password change)

Storage is owned by the application through the UserRepository port;
warden_identity only reads and writes credential records through it.
"""

from warden_identity.application.context import Principal
from warden_identity.application.ports import (
    ProfileFetcher,
    SocialProfile,
    SocialProvider,
)
from warden_identity.application.services import IdentityService
from warden_identity.domain.user import (
    DEFAULT_ROLE,
    ROLE_HIERARCHY,
    Email,
    InvalidEmailError,
    InvalidPhoneError,
    PhoneNumber,
    User,
    UserRepository,
    UserRole,
)
from warden_identity.exceptions import (
    AlreadyExistsError,
    AuthError,
    ErrorCode,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    InvalidTokenError,
    LoginFailedError,
    PasswordChangeFailedError,
    RegistrationFailedError,
    SocialAuthFailedError,
    TokenExpiredError,
    UserNotFoundError,
    ValidationFailedError,
    WeakPasswordError,
)
from warden_identity.factory import IdentityComponents, build_identity_components
from warden_identity.schemas import (
    AuthResult,
    SocialAuthResult,
    TokenPair,
    TokenPayload,
    UserView,
)
from warden_identity.services import (
    DEFAULT_PERMISSION_CATALOG,
    AccessPolicy,
    InMemoryRevocationStore,
    NullRevocationStore,
    PasswordPolicy,
    PasswordRules,
    Permission,
    Resource,
    RevocationStore,
    TokenAuthority,
)

__all__ = [
    # Domain - User
    "DEFAULT_ROLE",
    "ROLE_HIERARCHY",
    "Email",
    "InvalidEmailError",
    "InvalidPhoneError",
    "PhoneNumber",
    "User",
    "UserRepository",
    "UserRole",
    # Exceptions
    "AlreadyExistsError",
    "AuthError",
    "ErrorCode",
    "InsufficientPermissionsError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "LoginFailedError",
    "PasswordChangeFailedError",
    "RegistrationFailedError",
    "SocialAuthFailedError",
    "TokenExpiredError",
    "UserNotFoundError",
    "ValidationFailedError",
    "WeakPasswordError",
    # Schemas
    "AuthResult",
    "SocialAuthResult",
    "TokenPair",
    "TokenPayload",
    "UserView",
    # Services
    "DEFAULT_PERMISSION_CATALOG",
    "AccessPolicy",
    "InMemoryRevocationStore",
    "NullRevocationStore",
    "PasswordPolicy",
    "PasswordRules",
    "Permission",
    "Resource",
    "RevocationStore",
    "TokenAuthority",
    # Application
    "IdentityService",
    "Principal",
    "ProfileFetcher",
    "SocialProfile",
    "SocialProvider",
    # Wiring
    "IdentityComponents",
    "build_identity_components",
]
