from warden_identity.domain.user.aggregates import User
from warden_identity.domain.user.exceptions import InvalidEmailError, InvalidPhoneError
from warden_identity.domain.user.repositories import UserRepository
from warden_identity.domain.user.value_objects import (
    DEFAULT_ROLE,
    ROLE_HIERARCHY,
    Email,
    PhoneNumber,
    UserRole,
    build_role_hierarchy,
)

__all__ = [
    "DEFAULT_ROLE",
    "ROLE_HIERARCHY",
    "Email",
    "InvalidEmailError",
    "InvalidPhoneError",
    "PhoneNumber",
    "User",
    "UserRepository",
    "UserRole",
    "build_role_hierarchy",
]
