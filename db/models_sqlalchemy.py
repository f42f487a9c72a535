"""SQLAlchemy models for the reservation engine database tables."""

import datetime as dt
from datetime import time
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, RecordedAtMixin
from domain.enums import (
    ClientType,
    PreOrderItemStatus,
    PreOrderStatus,
    ReservationStatus,
    Role,
)


class Location(Base):
    """Restaurant location."""

    __tablename__ = "locations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Location(id='{self.id}', address='{self.address}')>"


class RestaurantTable(Base):
    """Bookable table at a location."""

    __tablename__ = "restaurant_tables"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    location_id: Mapped[str] = mapped_column(
        ForeignKey("locations.id"),
        nullable=False,
        index=True,
    )
    table_number: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<RestaurantTable(id='{self.id}', number='{self.table_number}', "
            f"capacity={self.capacity})>"
        )


class User(Base):
    """Customer, waiter or admin account."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Role.CUSTOMER.value,
        index=True,
    )
    location_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("locations.id"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', email='{self.email}', role='{self.role}')>"


class Reservation(Base):
    """Reservation table model."""

    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    location_id: Mapped[str] = mapped_column(ForeignKey("locations.id"), nullable=False)
    location_address: Mapped[str] = mapped_column(String(255), nullable=False)

    table_id: Mapped[str] = mapped_column(ForeignKey("restaurant_tables.id"), nullable=False)
    table_number: Mapped[str] = mapped_column(String(20), nullable=False)
    table_capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    time_from: Mapped[time] = mapped_column(Time, nullable=False)
    time_to: Mapped[time] = mapped_column(Time, nullable=False)
    time_slot: Mapped[str] = mapped_column(String(20), nullable=False)
    guests_number: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReservationStatus.RESERVED.value,
        index=True,
    )
    client_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ClientType.CUSTOMER.value,
    )

    user_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    user_info: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    waiter_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )

    pre_order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    feedback_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_reservations_date_location_table", "date", "location_address", "table_id"),
        Index("ix_reservations_waiter_date", "waiter_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation(id='{self.id}', table='{self.table_number}', "
            f"date={self.date}, slot='{self.time_slot}', status='{self.status}')>"
        )


class Dish(Base):
    """Menu dish."""

    __tablename__ = "dishes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))


class PreOrder(Base):
    """Dishes selected by a customer before the visit."""

    __tablename__ = "pre_orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    reservation_id: Mapped[str] = mapped_column(
        ForeignKey("reservations.id"),
        nullable=False,
        unique=True,
    )
    user_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PreOrderStatus.DRAFT.value,
    )

    items: Mapped[List["PreOrderItem"]] = relationship(
        back_populates="pre_order",
        cascade="all, delete-orphan",
        order_by="PreOrderItem.id",
    )


class PreOrderItem(Base):
    __tablename__ = "pre_order_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    pre_order_id: Mapped[str] = mapped_column(
        ForeignKey("pre_orders.id"),
        nullable=False,
        index=True,
    )
    dish_id: Mapped[str] = mapped_column(ForeignKey("dishes.id"), nullable=False)
    dish_name: Mapped[str] = mapped_column(String(150), nullable=False, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PreOrderItemStatus.PENDING.value,
    )

    pre_order: Mapped[PreOrder] = relationship(back_populates="items")


class Order(Base, RecordedAtMixin):
    """Live order of a reservation being served."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    reservation_id: Mapped[str] = mapped_column(
        ForeignKey("reservations.id"),
        nullable=False,
        unique=True,
    )
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    lines: Mapped[List["OrderLine"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )


class OrderLine(Base):
    __tablename__ = "order_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    dish_id: Mapped[str] = mapped_column(ForeignKey("dishes.id"), nullable=False)
    dish_name: Mapped[str] = mapped_column(String(150), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    order: Mapped[Order] = relationship(back_populates="lines")


class Feedback(Base, RecordedAtMixin):
    """Rating left for a finished reservation."""

    __tablename__ = "feedbacks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    reservation_id: Mapped[str] = mapped_column(ForeignKey("reservations.id"), nullable=False)
    location_id: Mapped[str] = mapped_column(ForeignKey("locations.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    reservation_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    rate: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    def __repr__(self) -> str:
        return f"<Feedback(id='{self.id}', key='{self.reservation_type}', rate={self.rate})>"
