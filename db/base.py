"""SQLAlchemy declarative base for the reservation engine."""

from datetime import datetime

from sqlalchemy import DateTime, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all reservation engine tables."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    # Booking and feedback instants are stored in UTC
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class RecordedAtMixin:
    """
    Insert time stamped by the database.

    Used by rows written during service (orders, feedback) whose creation
    time is not part of the business record. Reservations carry their own
    ``created_at`` taken from the service clock instead.
    """

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
        index=True,
    )
