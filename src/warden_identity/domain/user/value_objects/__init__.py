from warden_identity.domain.user.value_objects.email import Email
from warden_identity.domain.user.value_objects.phone import PhoneNumber
from warden_identity.domain.user.value_objects.user_role import (
    DEFAULT_ROLE,
    ROLE_HIERARCHY,
    UserRole,
    build_role_hierarchy,
)

__all__ = [
    "DEFAULT_ROLE",
    "ROLE_HIERARCHY",
    "Email",
    "PhoneNumber",
    "UserRole",
    "build_role_hierarchy",
]
