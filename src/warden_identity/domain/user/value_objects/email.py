"""Email value object.

Provides validated, normalized email addresses for user identification.
"""

import re
from dataclasses import dataclass

from warden_identity.domain.user.exceptions import InvalidEmailError

MAX_EMAIL_LENGTH = 255

# Simple but effective email regex
# Validates: user@domain.tld (minimum requirements)
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


@dataclass(frozen=True)
class Email:
    """Value object representing a validated email address.

    Emails are compared case-insensitively, so the stored value is always
    lower-cased.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            msg = "Email is required"
            raise InvalidEmailError(msg)

        normalized = self.value.lower().strip()

        if len(normalized) > MAX_EMAIL_LENGTH:
            msg = f"Email must be at most {MAX_EMAIL_LENGTH} characters"
            raise InvalidEmailError(msg)

        if not EMAIL_PATTERN.match(normalized):
            msg = "Invalid email format"
            raise InvalidEmailError(msg)

        # Replace value with normalized version (frozen dataclass workaround)
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Email('{self.value}')"
