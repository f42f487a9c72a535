"""
Canonical grid of bookable time slots for a service day.
"""
from datetime import time
from typing import List, Optional

from core.config import Settings
from core.utils_datetime import minutes_of_day, time_from_minutes
from domain.models import TimeSlot


class TimeSlotCatalog:
    """Generates the fixed daily grid: a slot, a gap, a slot, ... until close."""

    def __init__(
        self,
        service_open: time = time(6, 30),
        service_close: time = time(18, 30),
        slot_duration_minutes: int = 90,
        slot_gap_minutes: int = 15,
    ):
        """
        Initialize the catalog.

        Args:
            service_open: Start of the first slot
            service_close: No slot may end after this time
            slot_duration_minutes: Length of every slot
            slot_gap_minutes: Pause between the end of a slot and the next start
        """
        if slot_duration_minutes <= 0:
            raise ValueError("slot_duration_minutes must be positive")
        if slot_gap_minutes < 0:
            raise ValueError("slot_gap_minutes must not be negative")

        self.service_open = service_open
        self.service_close = service_close
        self.slot_duration_minutes = slot_duration_minutes
        self.slot_gap_minutes = slot_gap_minutes

    @classmethod
    def from_settings(cls, config: Settings) -> "TimeSlotCatalog":
        return cls(
            service_open=config.service_open,
            service_close=config.service_close,
            slot_duration_minutes=config.slot_duration_minutes,
            slot_gap_minutes=config.slot_gap_minutes,
        )

    def generate(self) -> List[TimeSlot]:
        """
        Generate the ordered slot grid.

        Pure and deterministic: the same catalog always yields the same list.

        Returns:
            Ordered list of TimeSlot
        """
        slots = []
        close = minutes_of_day(self.service_close)
        current = minutes_of_day(self.service_open)

        while current + self.slot_duration_minutes <= close:
            end = current + self.slot_duration_minutes
            slots.append(TimeSlot(start=time_from_minutes(current), end=time_from_minutes(end)))
            current = end + self.slot_gap_minutes

        return slots

    @property
    def first_start(self) -> Optional[time]:
        slots = self.generate()
        return slots[0].start if slots else None

    @property
    def last_end(self) -> Optional[time]:
        slots = self.generate()
        return slots[-1].end if slots else None

    def contains(self, time_from: time, time_to: time) -> bool:
        """True when (time_from, time_to) exactly equals one grid slot."""
        return any(
            slot.start == time_from and slot.end == time_to
            for slot in self.generate()
        )

    def within_working_hours(self, time_from: time, time_to: time) -> bool:
        first, last = self.first_start, self.last_end
        if first is None or last is None:
            return False
        return time_from >= first and time_to <= last
