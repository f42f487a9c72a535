"""Domain enums for the table reservation engine."""

from enum import Enum


class ReservationStatus(str, Enum):
    """Reservation lifecycle states."""

    RESERVED = "Reserved"
    IN_PROGRESS = "InProgress"
    FINISHED = "Finished"
    CANCELLED = "Cancelled"

    @property
    def is_active(self) -> bool:
        return self is not ReservationStatus.CANCELLED

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.FINISHED, ReservationStatus.CANCELLED)


class ClientType(str, Enum):
    """Who the reservation is for."""

    CUSTOMER = "CUSTOMER"
    VISITOR = "VISITOR"


class Role(str, Enum):
    """User roles."""

    CUSTOMER = "Customer"
    WAITER = "Waiter"
    ADMIN = "Admin"


class PreOrderStatus(str, Enum):
    """Pre-order status."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    CANCELLED = "Cancelled"


class PreOrderItemStatus(str, Enum):
    """Per-item status of a pre-order line, independent of the pre-order."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class FeedbackType(str, Enum):
    """Feedback categories."""

    SERVICE_QUALITY = "SERVICE_QUALITY"
    CUISINE_EXPERIENCE = "CUISINE_EXPERIENCE"

