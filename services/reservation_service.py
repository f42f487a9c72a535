"""
Reservation lifecycle: creation and editing, start of service, completion, cancellation.
"""
import base64
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from urllib.parse import urlencode
from uuid import uuid4

from core.exceptions import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from core.logging import LogContext
from core.utils_datetime import (
    combine_utc,
    get_current_datetime,
    parse_date,
    parse_time_of_day,
    to_utc,
)
from domain.enums import ClientType, PreOrderItemStatus, PreOrderStatus, ReservationStatus, Role
from domain.models import (
    CompletionResult,
    CustomerReservationRequest,
    Location,
    Reservation,
    ReservationRequestBase,
    StaffReservationRequest,
    Table,
    User,
)
from services.conflicts import ConflictDetector, SlotRequest
from services.interfaces import (
    EventSink,
    LocationRepository,
    OrderRepository,
    PreOrderRepository,
    QrEncoder,
    ReservationRepository,
    TableRepository,
    TokenIssuer,
    UserRepository,
)
from services.report_aggregator import ReportAggregator
from services.waiter_assignment import WaiterAssigner


logger = logging.getLogger(__name__)


class ReservationService:
    """State machine driving a reservation from Reserved to Finished or Cancelled."""

    def __init__(
        self,
        reservations: ReservationRepository,
        locations: LocationRepository,
        tables: TableRepository,
        users: UserRepository,
        pre_orders: PreOrderRepository,
        orders: OrderRepository,
        conflicts: ConflictDetector,
        waiters: WaiterAssigner,
        reports: ReportAggregator,
        tokens: TokenIssuer,
        events: EventSink,
        qr_encoder: QrEncoder,
        feedback_base_url: str,
        modification_cutoff_minutes: int = 30,
        report_event_type: str = "ReservationCompleted",
        clock: Callable[[], datetime] = get_current_datetime,
    ):
        """
        Initialize the reservation service.

        Args:
            reservations: Reservation store
            locations: Location lookups
            tables: Table lookups
            users: User and waiter lookups
            pre_orders: Pre-order lookups, read at start of service
            orders: Live order store
            conflicts: Request gating and double-booking detection
            waiters: Least-busy waiter selection
            reports: Completion report builder
            tokens: Anonymous feedback token issuer
            events: Sink receiving completion reports
            qr_encoder: Renders feedback URLs as QR images
            feedback_base_url: Public page visitors leave feedback on
            modification_cutoff_minutes: Edits are refused this close to the start
            report_event_type: Event type of the published report
            clock: Source of "now" (UTC)
        """
        self.reservations = reservations
        self.locations = locations
        self.tables = tables
        self.users = users
        self.pre_orders = pre_orders
        self.orders = orders
        self.conflicts = conflicts
        self.waiters = waiters
        self.reports = reports
        self.tokens = tokens
        self.events = events
        self.qr_encoder = qr_encoder
        self.feedback_base_url = feedback_base_url
        self.modification_cutoff = timedelta(minutes=modification_cutoff_minutes)
        self.report_event_type = report_event_type
        self.clock = clock

        self._request_handlers = {
            "customer": self._process_customer_request,
            "staff": self._process_staff_request,
        }

    # ------------------------------------------------------------------
    # Create / edit
    # ------------------------------------------------------------------

    def upsert_reservation(self, request: ReservationRequestBase, user_id: str) -> Reservation:
        """
        Create a reservation, or edit one that is still Reserved.

        Args:
            request: Customer or staff reservation request
            user_id: Id of the submitting user

        Returns:
            The stored reservation

        Raises:
            BadRequestError: Malformed date, time or guest count
            NotFoundError: Unknown location, table, user, customer or no waiter available
            ConflictError: Business rule violation (slot, capacity, overlap, edit window)
            UnauthorizedError: Submitter may not create or edit this reservation
        """
        with LogContext(logger, reservation_id=request.id, user_id=user_id):
            slot = self.conflicts.parse_request(request)
            location = self._get_location(request.location_id)
            table = self._get_table(request.table_id)
            self.conflicts.check_table(slot, location, table)

            candidate = self._build_candidate(request, slot, location, table)
            handler = self._request_handlers[request.kind]
            saved = handler(request, candidate, location, user_id)

            logger.info(
                f"Reservation {saved.id} stored for table {saved.table_number} "
                f"on {saved.date} {saved.time_slot}"
            )
            return saved

    def _build_candidate(
        self,
        request: ReservationRequestBase,
        slot: SlotRequest,
        location: Location,
        table: Table,
    ) -> Reservation:
        return Reservation(
            id=request.id or str(uuid4()),
            location_id=location.id,
            location_address=location.address,
            table_id=table.id,
            table_number=table.table_number,
            table_capacity=table.capacity,
            date=slot.day,
            time_from=slot.time_from,
            time_to=slot.time_to,
            guests_number=slot.guests,
            status=ReservationStatus.RESERVED,
            created_at=to_utc(self.clock()),
        )

    def _process_customer_request(
        self,
        request: CustomerReservationRequest,
        candidate: Reservation,
        location: Location,
        user_id: str,
    ) -> Reservation:
        user = self._get_user(user_id)
        candidate = candidate.model_copy(update={
            "client_type": ClientType.CUSTOMER,
            "user_email": user.email,
            "user_info": user.full_name,
        })

        existing = self._find_existing(request.id)
        if existing is not None:
            self._validate_modification(existing, user)
            candidate = self._carry_over(existing, candidate)

        self._check_overlaps(candidate, user.email)

        if existing is None and candidate.waiter_id is None:
            waiter_id = self.waiters.assign_least_busy_waiter(location.id, candidate.date)
            candidate = candidate.model_copy(update={"waiter_id": waiter_id})

        return self.reservations.upsert(candidate)

    def _process_staff_request(
        self,
        request: StaffReservationRequest,
        candidate: Reservation,
        location: Location,
        user_id: str,
    ) -> Reservation:
        staff = self._get_user(user_id)
        if not staff.is_waiter or staff.location_id != location.id:
            raise UnauthorizedError(
                f"Only waiters of location {location.id} can make reservations there."
            )

        if request.client_type == ClientType.CUSTOMER:
            if not request.customer_id:
                raise BadRequestError(
                    "Customer ID is required for customer reservations made by staff.",
                    errors={"customerId": ["Required when clientType is CUSTOMER."]},
                )
            customer = self.users.get_by_id(request.customer_id)
            if customer is None:
                raise NotFoundError("Customer", request.customer_id)
            user_email, user_info = customer.email, customer.full_name
        else:
            user_email, user_info = None, request.visitor_name or "Visitor"

        candidate = candidate.model_copy(update={
            "client_type": request.client_type,
            "user_email": user_email,
            "user_info": user_info,
            "waiter_id": staff.id,
        })

        existing = self._find_existing(request.id)
        if existing is not None:
            self._validate_modification(existing, staff)
            candidate = self._carry_over(existing, candidate)

        self._check_overlaps(candidate, candidate.user_email)
        return self.reservations.upsert(candidate)

    def _find_existing(self, reservation_id: Optional[str]) -> Optional[Reservation]:
        if not reservation_id or not self.reservations.exists(reservation_id):
            return None
        return self.reservations.get_by_id(reservation_id)

    def _validate_modification(self, existing: Reservation, editor: User) -> None:
        if existing.status != ReservationStatus.RESERVED:
            raise ConflictError(
                f"Reservation {existing.id} is {existing.status.value} and can no longer be modified."
            )

        is_customer = existing.user_email is not None and editor.email == existing.user_email
        is_waiter = existing.waiter_id is not None and editor.id == existing.waiter_id
        if not (is_customer or is_waiter):
            raise UnauthorizedError("Only the customer or assigned waiter can modify this reservation")

        start = combine_utc(existing.date, existing.time_from)
        if to_utc(self.clock()) > start - self.modification_cutoff:
            minutes = int(self.modification_cutoff.total_seconds() // 60)
            raise ConflictError(
                f"Reservations cannot be modified within {minutes} minutes of start time"
            )

    def _carry_over(self, existing: Reservation, candidate: Reservation) -> Reservation:
        """Fields an edit never changes, plus the recomputed pre-order count."""
        pre_order = self.pre_orders.get_by_reservation_id(existing.id)
        return candidate.model_copy(update={
            "client_type": existing.client_type,
            "user_email": existing.user_email,
            "user_info": existing.user_info,
            "waiter_id": existing.waiter_id,
            "created_at": existing.created_at,
            "order_count": existing.order_count,
            "feedback_token": existing.feedback_token,
            "version": existing.version,
            "pre_order_count": pre_order.active_quantity if pre_order else 0,
        })

    def _check_overlaps(self, candidate: Reservation, user_email: Optional[str]) -> None:
        existing = self.reservations.list_by_date_location_table(
            candidate.date, candidate.location_address, candidate.table_id
        )
        self.conflicts.check_conflict(candidate, existing, user_email)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_service(self, reservation_id: str, user_id: str) -> Reservation:
        """
        Move a reservation from Reserved to InProgress.

        Confirmed items of a submitted pre-order are added to the live order
        one unit at a time.

        Raises:
            NotFoundError: Unknown reservation
            UnauthorizedError: Caller is not the assigned waiter
            ConflictError: Reservation is not Reserved
        """
        with LogContext(logger, reservation_id=reservation_id, user_id=user_id):
            reservation = self.get_reservation(reservation_id)
            if reservation.waiter_id != user_id:
                raise UnauthorizedError("Only the assigned waiter can start this reservation")
            if reservation.status != ReservationStatus.RESERVED:
                raise ConflictError(
                    f"Reservation {reservation_id} is {reservation.status.value}; only reserved "
                    f"reservations can be started."
                )

            saved = self.reservations.upsert(
                reservation.model_copy(update={"status": ReservationStatus.IN_PROGRESS})
            )

            merged = self._merge_pre_order(saved)
            order = self.orders.get_by_reservation_id(saved.id)
            order_count = order.quantity_total if order else 0
            if order_count != saved.order_count:
                saved = self.reservations.upsert(saved.model_copy(update={"order_count": order_count}))

            logger.info(f"Reservation {reservation_id} started; {merged} pre-ordered units merged")
            return saved

    def _merge_pre_order(self, reservation: Reservation) -> int:
        pre_order = self.pre_orders.get_by_reservation_id(reservation.id)
        if pre_order is None or not pre_order.items or pre_order.status != PreOrderStatus.SUBMITTED:
            return 0

        merged = 0
        for item in pre_order.items:
            if item.status != PreOrderItemStatus.CONFIRMED:
                continue
            for _ in range(item.quantity):
                self.orders.add_dish(reservation.id, item.dish_id)
                merged += 1
        return merged

    def complete_reservation(self, reservation_id: str, user_id: str) -> CompletionResult:
        """
        Finish a reservation, publish its report and issue visitor feedback access.

        Raises:
            NotFoundError: Unknown reservation, or its location/waiter is missing
            UnauthorizedError: Caller is not the assigned waiter
            ConflictError: Reservation is already Finished or was Cancelled
        """
        with LogContext(logger, reservation_id=reservation_id, user_id=user_id):
            reservation = self.get_reservation(reservation_id)
            if reservation.waiter_id != user_id:
                raise UnauthorizedError("Only the assigned waiter can complete this reservation")
            if reservation.status == ReservationStatus.FINISHED:
                raise ConflictError(f"Reservation {reservation_id} is already finished.")
            if reservation.status == ReservationStatus.CANCELLED:
                raise ConflictError(f"Reservation {reservation_id} is cancelled and cannot be completed.")

            report = self.reports.build(reservation)

            order = self.orders.get_by_reservation_id(reservation.id)
            updates = {
                "status": ReservationStatus.FINISHED,
                "order_count": order.quantity_total if order else 0,
            }

            qr_code, feedback_url = "", ""
            if reservation.client_type == ClientType.VISITOR:
                token = self.tokens.mint_anonymous_feedback_token(reservation.id)
                updates["feedback_token"] = token
                feedback_url = f"{self.feedback_base_url}?{urlencode({'token': token})}"
                qr_code = base64.b64encode(self.qr_encoder.encode(feedback_url)).decode("ascii")

            saved = self.reservations.upsert(reservation.model_copy(update=updates))
            logger.info(f"Reservation {reservation_id} finished")

            if not self.events.publish(self.report_event_type, report.model_dump(mode="json")):
                logger.warning(f"Report for reservation {reservation_id} was not delivered")

            return CompletionResult(
                reservation=saved,
                report=report,
                qr_code_image_base64=qr_code,
                feedback_url=feedback_url,
            )

    def cancel_reservation(self, reservation_id: str, user_id: str) -> Reservation:
        """
        Cancel a Reserved reservation.

        Raises:
            NotFoundError: Unknown reservation or user
            UnauthorizedError: Caller may not cancel this reservation
            ConflictError: Reservation is in progress, finished or already cancelled
        """
        with LogContext(logger, reservation_id=reservation_id, user_id=user_id):
            reservation = self.get_reservation(reservation_id)
            user = self._get_user(user_id)
            self._authorize_cancel(reservation, user)

            if reservation.status == ReservationStatus.FINISHED:
                raise ConflictError("Cannot cancel a finished reservation.")
            if reservation.status == ReservationStatus.IN_PROGRESS:
                raise ConflictError("Cannot cancel a reservation that is in progress.")
            if reservation.status == ReservationStatus.CANCELLED:
                raise ConflictError("Reservation is already cancelled.")

            cancelled = self.reservations.cancel(reservation_id)
            logger.info(f"Reservation {reservation_id} cancelled by {user.role.value} {user.id}")
            return cancelled

    @staticmethod
    def _authorize_cancel(reservation: Reservation, user: User) -> None:
        if user.role == Role.ADMIN:
            return
        if user.role == Role.CUSTOMER and user.email == reservation.user_email:
            return
        if user.role == Role.WAITER and (
            reservation.waiter_id == user.id or reservation.location_id == user.location_id
        ):
            return
        raise UnauthorizedError("You are not allowed to cancel this reservation")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_reservation(self, reservation_id: str) -> Reservation:
        reservation = self.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation", reservation_id)
        return reservation

    def list_reservations(
        self,
        user_id: str,
        date: Optional[str] = None,
        time_from: Optional[str] = None,
        table_number: Optional[str] = None,
    ) -> List[Reservation]:
        """
        Reservations visible to a user.

        Customers see their own bookings, waiters the ones assigned to them,
        admins everything.
        """
        user = self._get_user(user_id)
        day = parse_date(date) if date else None
        start = parse_time_of_day(time_from, field="timeFrom") if time_from else None

        return self.reservations.list_filtered(
            user_email=user.email if user.role == Role.CUSTOMER else None,
            waiter_id=user.id if user.role == Role.WAITER else None,
            day=day,
            time_from=start,
            table_number=table_number,
        )

    def _get_location(self, location_id: str) -> Location:
        location = self.locations.get_by_id(location_id)
        if location is None:
            raise NotFoundError("Location", location_id)
        return location

    def _get_table(self, table_id: str) -> Table:
        table = self.tables.get_by_id(table_id)
        if table is None:
            raise NotFoundError("Table", table_id)
        return table

    def _get_user(self, user_id: str) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user
