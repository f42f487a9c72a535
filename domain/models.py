"""Domain models using Pydantic v2 for the table reservation engine."""

from datetime import date as Date, datetime, time
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer

from core.utils_datetime import format_time, format_time_slot
from .enums import (
    ClientType,
    FeedbackType,
    PreOrderItemStatus,
    PreOrderStatus,
    ReservationStatus,
    Role,
)


class TimeSlot(BaseModel):
    """A bookable window of the daily grid."""

    start: time
    end: time

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        return format_time_slot(self.start, self.end)

    def overlaps(self, start: time, end: time) -> bool:
        """Half-open interval overlap with [start, end)."""
        return self.start < end and self.end > start

    def contains(self, moment: time) -> bool:
        return self.start <= moment < self.end

    @field_serializer("start", "end")
    def _serialize_time(self, value: time) -> str:
        return format_time(value)


class Location(BaseModel):
    """Restaurant location."""

    id: str
    address: str
    name: str = ""

    model_config = ConfigDict(from_attributes=True)


class Table(BaseModel):
    """Restaurant table; read-only to the engine."""

    id: str
    location_id: str
    table_number: str
    capacity: int = Field(..., gt=0)

    model_config = ConfigDict(from_attributes=True)


class User(BaseModel):
    """Registered user (customer, waiter or admin)."""

    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: Role = Role.CUSTOMER
    location_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email

    @property
    def is_waiter(self) -> bool:
        return self.role == Role.WAITER


class Reservation(BaseModel):
    """Central reservation entity."""

    id: str
    location_id: str
    location_address: str
    table_id: str
    table_number: str
    table_capacity: int
    date: Date
    time_from: time
    time_to: time
    guests_number: int
    status: ReservationStatus = ReservationStatus.RESERVED
    client_type: ClientType = ClientType.CUSTOMER
    user_email: Optional[str] = None
    user_info: Optional[str] = None
    waiter_id: Optional[str] = None
    pre_order_count: int = 0
    order_count: int = 0
    feedback_token: Optional[str] = None
    created_at: datetime
    version: int = 0

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def time_slot(self) -> str:
        return format_time_slot(self.time_from, self.time_to)

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @field_serializer("time_from", "time_to")
    def _serialize_time(self, value: time) -> str:
        return format_time(value)


class Dish(BaseModel):
    id: str
    name: str
    price: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)


class PreOrderItem(BaseModel):
    """A pre-selected dish line with its own confirmation status."""

    id: str
    dish_id: str
    dish_name: str = ""
    quantity: int = Field(default=1, ge=0)
    price: Decimal = Decimal("0")
    status: PreOrderItemStatus = PreOrderItemStatus.PENDING

    model_config = ConfigDict(from_attributes=True)


class PreOrder(BaseModel):
    """Dishes a customer selected ahead of the visit."""

    id: str
    reservation_id: str
    user_email: Optional[str] = None
    status: PreOrderStatus = PreOrderStatus.DRAFT
    items: List[PreOrderItem] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @property
    def active_quantity(self) -> int:
        """Sum of quantities over items that are not cancelled."""
        return sum(
            item.quantity for item in self.items
            if item.status != PreOrderItemStatus.CANCELLED
        )


class OrderLine(BaseModel):
    dish_id: str
    dish_name: str = ""
    price: Decimal = Decimal("0")
    quantity: int = Field(default=1, ge=1)

    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    """Live tally of dishes served for a reservation."""

    id: str
    reservation_id: str
    lines: List[OrderLine] = Field(default_factory=list)
    total_price: Decimal = Decimal("0")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def quantity_total(self) -> int:
        return sum(line.quantity for line in self.lines)


class Feedback(BaseModel):
    id: str
    reservation_id: str
    location_id: str
    type: FeedbackType
    rate: int = Field(..., ge=1, le=5)
    comment: str = ""
    date: Date

    model_config = ConfigDict(from_attributes=True)


class ReservationReport(BaseModel):
    """Per-completion operational report; built once, never persisted."""

    date: Date
    location_id: str
    location: str
    waiter: str
    waiter_email: str
    hours_worked: float
    order_id: Optional[str] = None
    order_revenue: Decimal = Decimal("0")
    avg_service_feedback: float = 0
    avg_cuisine_feedback: float = 0
    min_cuisine_feedback: int = 0
    min_service_feedback: int = 0


class AvailableTable(BaseModel):
    """A table together with its free slots for the requested day."""

    table_id: str
    table_number: str
    capacity: int
    location_id: str
    location_address: str
    available_slots: List[TimeSlot]


class CompletionResult(BaseModel):
    """Outcome of completing a reservation."""

    reservation: Reservation
    report: ReservationReport
    qr_code_image_base64: str = ""
    feedback_url: str = ""


class AccessClaims(BaseModel):
    """Identity decoded from a bearer access token."""

    user_id: str
    email: str
    role: Role


# ---------------------------------------------------------------------------
# Reservation requests: a tagged union over the two request shapes
# ---------------------------------------------------------------------------

class ReservationRequestBase(BaseModel):
    """Fields shared by customer and staff reservation requests."""

    id: Optional[str] = None
    location_id: str = Field(..., min_length=1)
    table_id: str = Field(..., min_length=1)
    date: str = Field(..., description="Reservation date (YYYY-MM-DD)")
    guests_number: int = Field(..., description="Number of guests")
    time_from: str = Field(..., description="Slot start (HH:MM)")
    time_to: str = Field(..., description="Slot end (HH:MM)")

    model_config = ConfigDict(str_strip_whitespace=True)


class CustomerReservationRequest(ReservationRequestBase):
    """Self-booking by a registered customer."""

    kind: Literal["customer"] = "customer"


class StaffReservationRequest(ReservationRequestBase):
    """Booking made by a waiter for a customer or a walk-in visitor."""

    kind: Literal["staff"] = "staff"
    client_type: ClientType
    customer_id: Optional[str] = None
    visitor_name: Optional[str] = Field(None, max_length=100)


ReservationRequest = Annotated[
    Union[CustomerReservationRequest, StaffReservationRequest],
    Field(discriminator="kind"),
]
