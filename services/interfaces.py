"""Collaborator contracts consumed by the reservation engine.

The engine never talks to a store, a queue or an encoder directly; the host
wires concrete implementations (see ``db.repositories`` and ``integrations``).
"""
from datetime import date, time
from typing import Any, Dict, List, Optional, Protocol

from domain.enums import FeedbackType
from domain.models import (
    Dish,
    Feedback,
    Location,
    Order,
    PreOrder,
    Reservation,
    Table,
    User,
)


class ReservationRepository(Protocol):
    def upsert(self, reservation: Reservation) -> Reservation: ...

    def exists(self, reservation_id: str) -> bool: ...

    def get_by_id(self, reservation_id: str) -> Optional[Reservation]: ...

    def list_by_date_and_location(self, day: date, location_id: str) -> List[Reservation]:
        """Active reservations only."""
        ...

    def list_by_date_location_table(
        self, day: date, location_address: str, table_id: str
    ) -> List[Reservation]:
        """Active reservations only."""
        ...

    def count_for_waiter_on_date(self, waiter_id: str, day: date) -> int: ...

    def cancel(self, reservation_id: str) -> Reservation: ...

    def list_filtered(
        self,
        user_email: Optional[str] = None,
        waiter_id: Optional[str] = None,
        day: Optional[date] = None,
        time_from: Optional[time] = None,
        table_number: Optional[str] = None,
    ) -> List[Reservation]: ...


class LocationRepository(Protocol):
    def get_by_id(self, location_id: str) -> Optional[Location]: ...


class TableRepository(Protocol):
    def get_by_id(self, table_id: str) -> Optional[Table]: ...

    def list_by_location(self, location_id: str) -> List[Table]: ...


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[User]: ...

    def list_waiters_by_location(self, location_id: str) -> List[User]: ...


class PreOrderRepository(Protocol):
    def get_by_reservation_id(self, reservation_id: str) -> Optional[PreOrder]: ...


class DishRepository(Protocol):
    def get_by_id(self, dish_id: str) -> Optional[Dish]: ...


class OrderRepository(Protocol):
    def get_by_reservation_id(self, reservation_id: str) -> Optional[Order]: ...

    def add_dish(self, reservation_id: str, dish_id: str) -> Order: ...

    def remove_dish(self, reservation_id: str, dish_id: str) -> Optional[Order]: ...


class FeedbackRepository(Protocol):
    def list_by_reservation_and_type(
        self, reservation_id: str, feedback_type: FeedbackType
    ) -> List[Feedback]: ...

    def add(self, feedback: Feedback) -> Feedback: ...


class TokenIssuer(Protocol):
    def mint_anonymous_feedback_token(self, reservation_id: str) -> str: ...


class EventSink(Protocol):
    def publish(self, event_type: str, payload: Dict[str, Any]) -> bool:
        """Fire-and-forget delivery; returns False when delivery failed."""
        ...


class QrEncoder(Protocol):
    def encode(self, url: str) -> bytes: ...
