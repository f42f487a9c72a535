"""Domain layer for the table reservation engine."""

from .enums import (
    ReservationStatus,
    ClientType,
    Role,
    PreOrderStatus,
    PreOrderItemStatus,
    FeedbackType,
)
from .models import (
    TimeSlot,
    Location,
    Table,
    User,
    Reservation,
    Dish,
    PreOrder,
    PreOrderItem,
    Order,
    OrderLine,
    Feedback,
    ReservationReport,
    AvailableTable,
    CompletionResult,
    AccessClaims,
    CustomerReservationRequest,
    StaffReservationRequest,
    ReservationRequest,
)

__all__ = [
    # Enums
    "ReservationStatus",
    "ClientType",
    "Role",
    "PreOrderStatus",
    "PreOrderItemStatus",
    "FeedbackType",
    # Models
    "TimeSlot",
    "Location",
    "Table",
    "User",
    "Reservation",
    "Dish",
    "PreOrder",
    "PreOrderItem",
    "Order",
    "OrderLine",
    "Feedback",
    "ReservationReport",
    "AvailableTable",
    "CompletionResult",
    "AccessClaims",
    "CustomerReservationRequest",
    "StaffReservationRequest",
    "ReservationRequest",
]
