"""User aggregate: the stored credential record."""

from datetime import datetime
from typing import Union
from uuid import uuid4

from warden_identity.domain.shared.time import utc_now
from warden_identity.domain.user.value_objects import (
    DEFAULT_ROLE,
    Email,
    PhoneNumber,
    UserRole,
)


class User:
    """
    User aggregate root.

    Holds the identity and the password hash of an account. The hash never
    leaves warden_identity: every outward projection goes through
    ``UserView.from_user`` which drops it.
    """

    def __init__(  # noqa: PLR0913
        self,
        name: str,
        email: Union[str, Email],
        password_hash: str,
        role: Union[str, UserRole] = DEFAULT_ROLE,
        phone: Union[str, PhoneNumber, None] = None,
        id: str | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self._id = id or str(uuid4())
        self._name = name
        self._email = email if isinstance(email, Email) else Email(email)
        self._password_hash = password_hash
        self._role = role if isinstance(role, UserRole) else UserRole(role)
        if phone is None or isinstance(phone, PhoneNumber):
            self._phone = phone
        else:
            self._phone = PhoneNumber(phone)
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or self._created_at

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def role(self) -> UserRole:
        return self._role

    @property
    def phone(self) -> str | None:
        return self._phone.value if self._phone else None

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def change_password_hash(self, password_hash: str) -> None:
        self._password_hash = password_hash
        self._updated_at = utc_now()

    @classmethod
    def create(
        cls,
        name: str,
        email: Union[str, Email],
        password_hash: str,
        role: UserRole = DEFAULT_ROLE,
        phone: Union[str, PhoneNumber, None] = None,
    ) -> "User":
        return cls(
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            phone=phone,
        )

    @classmethod
    def reconstitute(  # noqa: PLR0913
        cls,
        id: str,
        name: str,
        email: Union[str, Email],
        password_hash: str,
        role: Union[str, UserRole],
        phone: str | None,
        created_at: datetime,
        updated_at: datetime,
    ) -> "User":
        return cls(
            id=id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            phone=phone,
            created_at=created_at,
            updated_at=updated_at,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"User(id={self._id}, email={self._email.value}, role={self._role.value})"
