"""SQLAlchemy-backed repositories used by the reservation services."""

import logging
from datetime import date, time
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from core.exceptions import ConflictError, NotFoundError
from domain import models as domain
from domain.enums import FeedbackType, ReservationStatus, Role
from . import models_sqlalchemy as orm


logger = logging.getLogger(__name__)


def feedback_key(reservation_id: str, feedback_type: FeedbackType) -> str:
    """Composite lookup key of a feedback row."""
    return f"{reservation_id}#{feedback_type.value}"


class SqlReservationRepository:
    """Reservation storage with optimistic concurrency on ``version``."""

    def __init__(self, session: Session):
        self.session = session

    def upsert(self, reservation: domain.Reservation) -> domain.Reservation:
        """
        Insert a reservation or overwrite the stored one.

        Raises:
            ConflictError: If the stored reservation changed since it was read
        """
        row = self.session.get(orm.Reservation, reservation.id)
        if row is None:
            row = orm.Reservation(id=reservation.id)
            self.session.add(row)
        elif row.version != reservation.version:
            raise ConflictError(
                f"Reservation {reservation.id} was modified by another request; reload and retry."
            )

        row.location_id = reservation.location_id
        row.location_address = reservation.location_address
        row.table_id = reservation.table_id
        row.table_number = reservation.table_number
        row.table_capacity = reservation.table_capacity
        row.date = reservation.date
        row.time_from = reservation.time_from
        row.time_to = reservation.time_to
        row.time_slot = reservation.time_slot
        row.guests_number = reservation.guests_number
        row.status = reservation.status.value
        row.client_type = reservation.client_type.value
        row.user_email = reservation.user_email
        row.user_info = reservation.user_info
        row.waiter_id = reservation.waiter_id
        row.pre_order_count = reservation.pre_order_count
        row.order_count = reservation.order_count
        row.feedback_token = reservation.feedback_token
        row.created_at = reservation.created_at

        try:
            self.session.commit()
        except StaleDataError:
            self.session.rollback()
            logger.warning(f"Stale write rejected for reservation {reservation.id}")
            raise ConflictError(
                f"Reservation {reservation.id} was modified by another request; reload and retry."
            ) from None

        return domain.Reservation.model_validate(row)

    def exists(self, reservation_id: str) -> bool:
        return self.session.get(orm.Reservation, reservation_id) is not None

    def get_by_id(self, reservation_id: str) -> Optional[domain.Reservation]:
        row = self.session.get(orm.Reservation, reservation_id)
        return domain.Reservation.model_validate(row) if row else None

    def list_by_date_and_location(self, day: date, location_id: str) -> List[domain.Reservation]:
        stmt = (
            select(orm.Reservation)
            .where(
                orm.Reservation.date == day,
                orm.Reservation.location_id == location_id,
                orm.Reservation.status != ReservationStatus.CANCELLED.value,
            )
            .order_by(orm.Reservation.table_id, orm.Reservation.time_from)
        )
        return self._fetch(stmt)

    def list_by_date_location_table(
        self, day: date, location_address: str, table_id: str
    ) -> List[domain.Reservation]:
        stmt = (
            select(orm.Reservation)
            .where(
                orm.Reservation.date == day,
                orm.Reservation.location_address == location_address,
                orm.Reservation.table_id == table_id,
                orm.Reservation.status != ReservationStatus.CANCELLED.value,
            )
            .order_by(orm.Reservation.time_from)
        )
        return self._fetch(stmt)

    def count_for_waiter_on_date(self, waiter_id: str, day: date) -> int:
        stmt = select(func.count()).select_from(orm.Reservation).where(
            orm.Reservation.waiter_id == waiter_id,
            orm.Reservation.date == day,
        )
        return self.session.scalar(stmt) or 0

    def cancel(self, reservation_id: str) -> domain.Reservation:
        row = self.session.get(orm.Reservation, reservation_id)
        if row is None:
            raise NotFoundError("Reservation", reservation_id)

        row.status = ReservationStatus.CANCELLED.value
        try:
            self.session.commit()
        except StaleDataError:
            self.session.rollback()
            raise ConflictError(
                f"Reservation {reservation_id} was modified by another request; reload and retry."
            ) from None
        return domain.Reservation.model_validate(row)

    def list_filtered(
        self,
        user_email: Optional[str] = None,
        waiter_id: Optional[str] = None,
        day: Optional[date] = None,
        time_from: Optional[time] = None,
        table_number: Optional[str] = None,
    ) -> List[domain.Reservation]:
        stmt = select(orm.Reservation)
        if user_email is not None:
            stmt = stmt.where(orm.Reservation.user_email == user_email)
        if waiter_id is not None:
            stmt = stmt.where(orm.Reservation.waiter_id == waiter_id)
        if day is not None:
            stmt = stmt.where(orm.Reservation.date == day)
        if time_from is not None:
            stmt = stmt.where(orm.Reservation.time_from == time_from)
        if table_number is not None:
            stmt = stmt.where(orm.Reservation.table_number == table_number)

        stmt = stmt.order_by(orm.Reservation.date, orm.Reservation.time_from, orm.Reservation.id)
        return self._fetch(stmt)

    def _fetch(self, stmt) -> List[domain.Reservation]:
        return [domain.Reservation.model_validate(row) for row in self.session.scalars(stmt)]


class SqlLocationRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, location_id: str) -> Optional[domain.Location]:
        row = self.session.get(orm.Location, location_id)
        return domain.Location.model_validate(row) if row else None


class SqlTableRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, table_id: str) -> Optional[domain.Table]:
        row = self.session.get(orm.RestaurantTable, table_id)
        return domain.Table.model_validate(row) if row else None

    def list_by_location(self, location_id: str) -> List[domain.Table]:
        stmt = (
            select(orm.RestaurantTable)
            .where(orm.RestaurantTable.location_id == location_id)
            .order_by(orm.RestaurantTable.table_number, orm.RestaurantTable.id)
        )
        return [domain.Table.model_validate(row) for row in self.session.scalars(stmt)]


class SqlUserRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, user_id: str) -> Optional[domain.User]:
        row = self.session.get(orm.User, user_id)
        return domain.User.model_validate(row) if row else None

    def list_waiters_by_location(self, location_id: str) -> List[domain.User]:
        stmt = (
            select(orm.User)
            .where(orm.User.role == Role.WAITER.value, orm.User.location_id == location_id)
            .order_by(orm.User.id)
        )
        return [domain.User.model_validate(row) for row in self.session.scalars(stmt)]


class SqlPreOrderRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_reservation_id(self, reservation_id: str) -> Optional[domain.PreOrder]:
        stmt = select(orm.PreOrder).where(orm.PreOrder.reservation_id == reservation_id)
        row = self.session.scalars(stmt).first()
        return domain.PreOrder.model_validate(row) if row else None


class SqlDishRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, dish_id: str) -> Optional[domain.Dish]:
        row = self.session.get(orm.Dish, dish_id)
        return domain.Dish.model_validate(row) if row else None


class SqlOrderRepository:
    """Orders keep one line per dish; adding a dish again bumps its quantity."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_reservation_id(self, reservation_id: str) -> Optional[domain.Order]:
        row = self._get_row(reservation_id)
        return domain.Order.model_validate(row) if row else None

    def add_dish(self, reservation_id: str, dish_id: str) -> domain.Order:
        """
        Add one unit of a dish, creating the order on first use.

        Raises:
            NotFoundError: If the dish does not exist
        """
        dish = self.session.get(orm.Dish, dish_id)
        if dish is None:
            raise NotFoundError("Dish", dish_id)

        order = self._get_row(reservation_id)
        if order is None:
            order = orm.Order(id=str(uuid4()), reservation_id=reservation_id, total_price=Decimal("0"))
            self.session.add(order)

        line = self._find_line(order, dish_id)
        if line is None:
            order.lines.append(orm.OrderLine(
                dish_id=dish.id,
                dish_name=dish.name,
                price=dish.price,
                quantity=1,
            ))
        else:
            line.quantity += 1

        order.total_price = self._total(order)
        self.session.commit()
        return domain.Order.model_validate(order)

    def remove_dish(self, reservation_id: str, dish_id: str) -> Optional[domain.Order]:
        """Remove one unit of a dish; None when the dish is not on the order."""
        order = self._get_row(reservation_id)
        if order is None:
            return None

        line = self._find_line(order, dish_id)
        if line is None:
            return None

        if line.quantity > 1:
            line.quantity -= 1
        else:
            order.lines.remove(line)

        order.total_price = self._total(order)
        self.session.commit()
        return domain.Order.model_validate(order)

    def _get_row(self, reservation_id: str) -> Optional[orm.Order]:
        stmt = select(orm.Order).where(orm.Order.reservation_id == reservation_id)
        return self.session.scalars(stmt).first()

    @staticmethod
    def _find_line(order: orm.Order, dish_id: str) -> Optional[orm.OrderLine]:
        for line in order.lines:
            if line.dish_id == dish_id:
                return line
        return None

    @staticmethod
    def _total(order: orm.Order) -> Decimal:
        return sum((Decimal(line.price) * line.quantity for line in order.lines), Decimal("0"))


class SqlFeedbackRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_by_reservation_and_type(
        self, reservation_id: str, feedback_type: FeedbackType
    ) -> List[domain.Feedback]:
        stmt = (
            select(orm.Feedback)
            .where(orm.Feedback.reservation_type == feedback_key(reservation_id, feedback_type))
            .order_by(orm.Feedback.id)
        )
        return [domain.Feedback.model_validate(row) for row in self.session.scalars(stmt)]

    def add(self, feedback: domain.Feedback) -> domain.Feedback:
        row = orm.Feedback(
            id=feedback.id,
            reservation_id=feedback.reservation_id,
            location_id=feedback.location_id,
            type=feedback.type.value,
            reservation_type=feedback_key(feedback.reservation_id, feedback.type),
            rate=feedback.rate,
            comment=feedback.comment,
            date=feedback.date,
        )
        self.session.add(row)
        self.session.commit()
        return domain.Feedback.model_validate(row)
