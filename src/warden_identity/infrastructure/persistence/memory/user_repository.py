"""In-memory implementation of UserRepository.

Backs tests and single-process deployments. Email and phone uniqueness is
checked and claimed under one lock, so two concurrent registrations for the
same address cannot both succeed.
"""

import asyncio
import logging
from typing import Optional, Union

from warden_identity.domain.user import Email, User, UserRepository
from warden_identity.exceptions import AlreadyExistsError, UserNotFoundError

logger = logging.getLogger(__name__)


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users: dict[str, User] = {}
        self._ids_by_email: dict[str, str] = {}
        self._ids_by_phone: dict[str, str] = {}

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        email_value = email.value if isinstance(email, Email) else Email(email).value
        user_id = self._ids_by_email.get(email_value)
        return self._users.get(user_id) if user_id else None

    async def find_by_phone(self, phone: str) -> Optional[User]:
        user_id = self._ids_by_phone.get(phone)
        return self._users.get(user_id) if user_id else None

    async def create(self, user: User) -> None:
        async with self._lock:
            if user.email in self._ids_by_email:
                raise AlreadyExistsError("Email already registered")
            if user.phone and user.phone in self._ids_by_phone:
                raise AlreadyExistsError("Phone number already registered")

            self._users[user.id] = user
            self._ids_by_email[user.email] = user.id
            if user.phone:
                self._ids_by_phone[user.phone] = user.id

        logger.info("Created user: %s (email: %s)", user.id, user.email)

    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFoundError
            user.change_password_hash(password_hash)

        logger.debug("Updated password hash for user: %s", user_id)

    async def count(self) -> int:
        return len(self._users)
