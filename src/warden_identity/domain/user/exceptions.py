"""User domain exceptions.

Raised by value objects on malformed input. The identity service collects
their messages into a single ValidationFailedError.
"""


class InvalidEmailError(ValueError):
    """Raised when email format is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidPhoneError(ValueError):
    """Raised when phone number format is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
