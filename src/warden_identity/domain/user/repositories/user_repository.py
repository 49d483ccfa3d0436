"""User repository interface (the user store)."""

from abc import ABC, abstractmethod
from typing import Optional, Union

from warden_identity.domain.user.aggregates.user import User
from warden_identity.domain.user.value_objects import Email


class UserRepository(ABC):
    """Repository interface for User aggregates.

    Implementations own storage and must enforce uniqueness of email (case
    insensitive) and phone atomically, raising AlreadyExistsError from
    ``create`` when a concurrent insert wins. warden_identity does no
    locking of its own.
    """

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find a user by their ID."""

    @abstractmethod
    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        """Find a user by their email address (case-insensitive)."""

    @abstractmethod
    async def find_by_phone(self, phone: str) -> Optional[User]:
        """Find a user by their phone number."""

    @abstractmethod
    async def create(self, user: User) -> None:
        """Persist a new user.

        Raises
        ------
        AlreadyExistsError
            If the email or phone number is already taken
        """

    @abstractmethod
    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        """Replace the stored password hash of an existing user.

        Raises
        ------
        UserNotFoundError
            If no user has the given ID
        """
