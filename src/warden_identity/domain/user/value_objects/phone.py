"""Phone number value object (E.164-like)."""

import re
from dataclasses import dataclass

from warden_identity.domain.user.exceptions import InvalidPhoneError

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
MIN_DIGITS = 10
MAX_DIGITS = 15


@dataclass(frozen=True)
class PhoneNumber:
    """Value object representing a validated phone number."""

    value: str

    def __post_init__(self) -> None:
        normalized = (self.value or "").strip()
        digits = sum(ch.isdigit() for ch in normalized)

        if not PHONE_PATTERN.match(normalized) or not MIN_DIGITS <= digits <= MAX_DIGITS:
            msg = "Invalid phone number format"
            raise InvalidPhoneError(msg)

        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value
