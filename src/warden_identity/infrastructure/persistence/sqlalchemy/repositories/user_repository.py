"""SQLAlchemy implementation of UserRepository."""

import logging
from typing import Union

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from warden_identity.domain.shared.time import ensure_tz_aware, utc_now
from warden_identity.domain.user import Email, User, UserRepository
from warden_identity.exceptions import AlreadyExistsError, UserNotFoundError
from warden_identity.infrastructure.persistence.sqlalchemy.models import UserModel

logger = logging.getLogger(__name__)


class UserRepositorySQLAlchemy(UserRepository):
    """SQLAlchemy implementation of the UserRepository interface.

    Uniqueness of email and phone is enforced by the database; a lost
    race surfaces from ``create`` as AlreadyExistsError. The caller owns
    the session and commits it.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, user_id: str) -> User | None:
        model = await self._find_model_by_id(user_id)

        if model is None:
            return None

        return self._map_to_domain(model)

    async def find_by_email(self, email: Union[str, Email]) -> User | None:
        email_value = email.value if isinstance(email, Email) else Email(email).value

        stmt = select(UserModel).where(UserModel.email == email_value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._map_to_domain(model)

    async def find_by_phone(self, phone: str) -> User | None:
        stmt = select(UserModel).where(UserModel.phone == phone)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._map_to_domain(model)

    async def create(self, user: User) -> None:
        self._session.add(self._map_to_model(user))

        try:
            await self._session.flush()
        except IntegrityError as e:
            message = str(e.orig).lower()
            if "phone" in message:
                raise AlreadyExistsError("Phone number already registered") from e
            if "email" in message or "unique" in message:
                raise AlreadyExistsError("Email already registered") from e
            raise

        logger.info("Created user: %s (email: %s)", user.id, user.email)

    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        model = await self._find_model_by_id(user_id)

        if model is None:
            raise UserNotFoundError

        model.password_hash = password_hash
        model.updated_at = utc_now()
        await self._session.flush()
        logger.debug("Updated password hash for user: %s", user_id)

    async def count(self) -> int:
        stmt = select(func.count()).select_from(UserModel)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def _find_model_by_id(self, user_id: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _map_to_domain(self, model: UserModel) -> User:
        return User.reconstitute(
            id=model.id,
            name=model.name,
            email=model.email,
            password_hash=model.password_hash,
            role=model.role,
            phone=model.phone,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _map_to_model(self, user: User) -> UserModel:
        return UserModel(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            password_hash=user.password_hash,
            role=user.role.value,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
