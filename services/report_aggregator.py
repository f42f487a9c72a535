"""
Operational report built once when a reservation is completed.
"""
from datetime import time
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from core.exceptions import NotFoundError
from core.utils_datetime import minutes_of_day
from domain.enums import FeedbackType
from domain.models import Location, Order, Reservation, ReservationReport, User
from services.interfaces import (
    FeedbackRepository,
    LocationRepository,
    OrderRepository,
    UserRepository,
)


def summarize_feedback(rates: Iterable[int]) -> Tuple[float, int]:
    """
    Average and minimum of feedback rates.

    Returns:
        (average, minimum); (0, 0) when there is no feedback yet
    """
    values = list(rates)
    if not values:
        return 0.0, 0
    return round(sum(values) / len(values), 2), min(values)


def hours_worked(time_from: time, time_to: time) -> float:
    """Length of the slot in decimal hours."""
    return round((minutes_of_day(time_to) - minutes_of_day(time_from)) / 60, 2)


def build_report(
    reservation: Reservation,
    location: Location,
    waiter: User,
    order: Optional[Order],
    service_rates: Iterable[int],
    cuisine_rates: Iterable[int],
) -> ReservationReport:
    avg_service, min_service = summarize_feedback(service_rates)
    avg_cuisine, min_cuisine = summarize_feedback(cuisine_rates)

    return ReservationReport(
        date=reservation.date,
        location_id=location.id,
        location=location.address,
        waiter=waiter.full_name,
        waiter_email=waiter.email,
        hours_worked=hours_worked(reservation.time_from, reservation.time_to),
        order_id=order.id if order else None,
        order_revenue=order.total_price if order else Decimal("0"),
        avg_service_feedback=avg_service,
        avg_cuisine_feedback=avg_cuisine,
        min_cuisine_feedback=min_cuisine,
        min_service_feedback=min_service,
    )


class ReportAggregator:
    """Fetches what a report needs and aggregates it."""

    def __init__(
        self,
        locations: LocationRepository,
        users: UserRepository,
        orders: OrderRepository,
        feedbacks: FeedbackRepository,
    ):
        self.locations = locations
        self.users = users
        self.orders = orders
        self.feedbacks = feedbacks

    def build(self, reservation: Reservation) -> ReservationReport:
        """
        Build the completion report for a reservation.

        Raises:
            NotFoundError: If the location or the assigned waiter is missing
        """
        location = self.locations.get_by_id(reservation.location_id)
        if location is None:
            raise NotFoundError("Location", reservation.location_id)

        waiter = self.users.get_by_id(reservation.waiter_id) if reservation.waiter_id else None
        if waiter is None:
            raise NotFoundError("Waiter", reservation.waiter_id)

        order = self.orders.get_by_reservation_id(reservation.id)
        service = self.feedbacks.list_by_reservation_and_type(
            reservation.id, FeedbackType.SERVICE_QUALITY
        )
        cuisine = self.feedbacks.list_by_reservation_and_type(
            reservation.id, FeedbackType.CUISINE_EXPERIENCE
        )

        return build_report(
            reservation,
            location,
            waiter,
            order,
            service_rates=[f.rate for f in service],
            cuisine_rates=[f.rate for f in cuisine],
        )
