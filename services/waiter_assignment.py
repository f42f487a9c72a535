"""Least-busy waiter selection for new customer reservations."""
import logging
from datetime import date

from core.exceptions import NotFoundError
from services.interfaces import ReservationRepository, UserRepository


logger = logging.getLogger(__name__)


class WaiterAssigner:
    """Picks the waiter with the fewest reservations on a given day."""

    def __init__(self, users: UserRepository, reservations: ReservationRepository):
        self.users = users
        self.reservations = reservations

    def assign_least_busy_waiter(self, location_id: str, day: date) -> str:
        """
        Select the least-loaded waiter at a location.

        Ties go to the first waiter encountered in repository order.

        Args:
            location_id: Location the reservation is for
            day: Reservation date

        Returns:
            Waiter user id

        Raises:
            NotFoundError: If the location has no waiters
        """
        waiters = self.users.list_waiters_by_location(location_id)
        if not waiters:
            raise NotFoundError("Waiters for location", location_id)

        best_id = None
        best_count = None
        for waiter in waiters:
            count = self.reservations.count_for_waiter_on_date(waiter.id, day)
            if best_count is None or count < best_count:
                best_id, best_count = waiter.id, count

        logger.info(f"Assigned waiter {best_id} ({best_count} reservations on {day})")
        return best_id
