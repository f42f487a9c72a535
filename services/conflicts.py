"""
Reservation request gating and double-booking detection.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Iterable, Optional

from core.exceptions import BadRequestError, ConflictError
from core.utils_datetime import (
    combine_utc,
    format_time_slot,
    get_current_datetime,
    parse_date,
    parse_time_of_day,
    to_utc,
)
from domain.models import Location, Reservation, ReservationRequestBase, Table
from services.time_slots import TimeSlotCatalog


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotRequest:
    """Reservation request fields after parsing and grid validation."""
    day: date
    time_from: time
    time_to: time
    guests: int


def intervals_overlap(
    start: time,
    end: time,
    other_start: time,
    other_end: time,
    inclusive: bool = True,
) -> bool:
    """
    Interval overlap test used for double-booking detection.

    Args:
        start: Candidate start
        end: Candidate end
        other_start: Existing start
        other_end: Existing end
        inclusive: When True, intervals sharing only an endpoint overlap

    Returns:
        True if the intervals overlap
    """
    if inclusive:
        return start <= other_end and end >= other_start
    return start < other_end and end > other_start


class ConflictDetector:
    """Validates reservation requests and rejects overlapping bookings."""

    def __init__(
        self,
        catalog: TimeSlotCatalog,
        boundary_inclusive: bool = True,
        clock: Callable[[], datetime] = get_current_datetime,
    ):
        """
        Initialize the detector.

        Args:
            catalog: Slot grid requests must match
            boundary_inclusive: Whether back-to-back bookings conflict
            clock: Source of "now" (UTC)
        """
        self.catalog = catalog
        self.boundary_inclusive = boundary_inclusive
        self.clock = clock

    def parse_request(self, request: ReservationRequestBase) -> SlotRequest:
        """
        Parse and validate the time-related part of a request.

        Raises:
            BadRequestError: Malformed date/time, inverted interval, non-positive guests
            ConflictError: Outside working hours, not a grid slot, or in the past
        """
        day = parse_date(request.date, field="date")
        time_from = parse_time_of_day(request.time_from, field="timeFrom")
        time_to = parse_time_of_day(request.time_to, field="timeTo")

        if time_from >= time_to:
            raise BadRequestError(
                "Reservation start time must be before its end time.",
                errors={"timeFrom": ["Must be earlier than timeTo."]},
            )

        if request.guests_number <= 0:
            raise BadRequestError(
                "Guests number must be a positive integer.",
                errors={"guestsNumber": ["Must be greater than zero."]},
            )

        if not self.catalog.within_working_hours(time_from, time_to):
            raise ConflictError("Reservation must be within restaurant working hours.")

        if not self.catalog.contains(time_from, time_to):
            raise ConflictError("Reservation must exactly match one of the predefined time slots.")

        if combine_utc(day, time_from) < to_utc(self.clock()):
            raise ConflictError("Reservation cannot start in the past.")

        return SlotRequest(day=day, time_from=time_from, time_to=time_to, guests=request.guests_number)

    def check_table(self, slot: SlotRequest, location: Location, table: Table) -> None:
        """
        Check the target table against the request.

        Raises:
            ConflictError: Table at another location or too small for the party
        """
        if table.location_id != location.id:
            raise ConflictError(
                f"Table with ID {table.id} does not belong to location {location.id}."
            )

        if table.capacity < slot.guests:
            raise ConflictError(
                f"Table with ID {table.id} cannot accommodate {slot.guests} guests. "
                f"Maximum capacity: {table.capacity}."
            )

    def find_conflict(
        self,
        candidate: Reservation,
        existing: Iterable[Reservation],
    ) -> Optional[Reservation]:
        """Return the first active reservation overlapping the candidate, if any."""
        for other in existing:
            if other.id == candidate.id or not other.is_active:
                continue
            if other.date != candidate.date or other.table_id != candidate.table_id:
                continue
            if intervals_overlap(
                candidate.time_from,
                candidate.time_to,
                other.time_from,
                other.time_to,
                inclusive=self.boundary_inclusive,
            ):
                return other
        return None

    def check_conflict(
        self,
        candidate: Reservation,
        existing: Iterable[Reservation],
        user_email: Optional[str] = None,
    ) -> None:
        """
        Reject the candidate if it overlaps another active reservation.

        Args:
            candidate: Reservation about to be written
            existing: Reservations on the same date, location and table
            user_email: Email of the customer the candidate is for

        Raises:
            ConflictError: If an overlapping reservation exists
        """
        other = self.find_conflict(candidate, existing)
        if other is None:
            return

        logger.warning(
            f"Reservation {candidate.id} overlaps {other.id} on table {candidate.table_id} "
            f"({format_time_slot(other.time_from, other.time_to)})"
        )

        if user_email and other.user_email == user_email:
            raise ConflictError(
                f"You already have reservation booked at location "
                f"{candidate.location_address} during the requested time period."
            )

        raise ConflictError(
            f"Reservation #{candidate.id} at location "
            f"{candidate.location_address} is already booked during the requested time period."
        )
