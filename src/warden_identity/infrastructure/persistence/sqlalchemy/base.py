"""SQLAlchemy declarative base for warden_identity models.

Applications that keep their own tables can include ``IdentityBase.metadata``
in their migrations alongside their own.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from warden_identity.domain.shared.time import utc_now


class IdentityBase(DeclarativeBase):
    """Base class for identity database models."""


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps (utc_now)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
