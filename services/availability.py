"""
Per-table availability for a location, date and party size.
"""
import logging
from datetime import date, time
from typing import Dict, Iterable, List, Optional, Union

from core.exceptions import BadRequestError, NotFoundError
from core.utils_datetime import minutes_of_day, parse_date, parse_time_of_day
from domain.models import AvailableTable, Reservation, Table, TimeSlot
from services.interfaces import LocationRepository, ReservationRepository, TableRepository
from services.time_slots import TimeSlotCatalog


logger = logging.getLogger(__name__)


def free_slots(catalog_slots: Iterable[TimeSlot], reservations: Iterable[Reservation]) -> List[TimeSlot]:
    """Slots not overlapping any of the given reservations."""
    booked = [(r.time_from, r.time_to) for r in reservations if r.is_active]
    return [
        slot for slot in catalog_slots
        if not any(slot.overlaps(start, end) for start, end in booked)
    ]


def match_requested_time(
    slots: List[TimeSlot],
    requested: time,
    tolerance_minutes: int = 15,
) -> List[TimeSlot]:
    """
    Narrow a table's free slots to the one matching a requested time.

    A slot containing the requested time wins; otherwise the closest-starting
    slot within the tolerance. No match yields an empty list.
    """
    for slot in slots:
        if slot.contains(requested):
            return [slot]

    requested_minutes = minutes_of_day(requested)
    best = None
    best_distance = None
    for slot in slots:
        distance = abs(minutes_of_day(slot.start) - requested_minutes)
        if distance <= tolerance_minutes and (best_distance is None or distance < best_distance):
            best, best_distance = slot, distance

    return [best] if best is not None else []


class AvailabilityCalculator:
    """Computes free slots per table."""

    def __init__(
        self,
        catalog: TimeSlotCatalog,
        locations: LocationRepository,
        tables: TableRepository,
        reservations: ReservationRepository,
        tolerance_minutes: int = 15,
    ):
        self.catalog = catalog
        self.locations = locations
        self.tables = tables
        self.reservations = reservations
        self.tolerance_minutes = tolerance_minutes

    def compute_availability(
        self,
        location_id: str,
        day: Union[str, date],
        guests: int,
        requested_time: Optional[Union[str, time]] = None,
    ) -> List[AvailableTable]:
        """
        Compute available tables and their free slots.

        Args:
            location_id: Location to search
            day: Reservation date (YYYY-MM-DD or date)
            guests: Party size
            requested_time: Optional time of day to narrow the result to

        Returns:
            Tables with at least one free slot, in table order

        Raises:
            NotFoundError: If the location does not exist
            BadRequestError: If the date, time or guest count is malformed
        """
        parsed_day = parse_date(day, field="date")
        parsed_time = parse_time_of_day(requested_time, field="time") if requested_time else None
        if guests <= 0:
            raise BadRequestError(
                "Guests number must be a positive integer.",
                errors={"guests": ["Must be greater than zero."]},
            )

        location = self.locations.get_by_id(location_id)
        if location is None:
            raise NotFoundError("Location", location_id)

        candidates = [t for t in self.tables.list_by_location(location_id) if t.capacity >= guests]
        active = self.reservations.list_by_date_and_location(parsed_day, location_id)

        by_table: Dict[str, List[Reservation]] = {}
        for reservation in active:
            if reservation.is_active:
                by_table.setdefault(reservation.table_id, []).append(reservation)

        catalog_slots = self.catalog.generate()
        result = []
        for table in candidates:
            slots = free_slots(catalog_slots, by_table.get(table.id, []))
            if parsed_time is not None:
                slots = match_requested_time(slots, parsed_time, self.tolerance_minutes)
            if slots:
                result.append(self._to_available(table, location.address, slots))

        logger.info(
            f"Availability for location {location_id} on {parsed_day}: "
            f"{len(result)} of {len(candidates)} tables free"
        )
        return result

    @staticmethod
    def _to_available(table: Table, address: str, slots: List[TimeSlot]) -> AvailableTable:
        return AvailableTable(
            table_id=table.id,
            table_number=table.table_number,
            capacity=table.capacity,
            location_id=table.location_id,
            location_address=address,
            available_slots=slots,
        )
