"""FastAPI dependencies: sessions, identity and service wiring."""

from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from core.config import Settings, settings
from core.exceptions import UnauthorizedError
from core.utils_datetime import get_current_datetime
from db.repositories import (
    SqlDishRepository,
    SqlFeedbackRepository,
    SqlLocationRepository,
    SqlOrderRepository,
    SqlPreOrderRepository,
    SqlReservationRepository,
    SqlTableRepository,
    SqlUserRepository,
)
from db.session import get_session
from domain.models import AccessClaims
from integrations.event_sink import create_event_sink
from integrations.qr_encoder import SvgQrEncoder
from services.anonymous_feedback_service import AnonymousFeedbackService
from services.availability import AvailabilityCalculator
from services.conflicts import ConflictDetector
from services.interfaces import EventSink, QrEncoder
from services.order_service import OrderService
from services.report_aggregator import ReportAggregator
from services.reservation_service import ReservationService
from services.time_slots import TimeSlotCatalog
from services.token_service import TokenService
from services.waiter_assignment import WaiterAssigner


def get_settings() -> Settings:
    return settings


def get_clock() -> Callable[[], datetime]:
    return get_current_datetime


@lru_cache(maxsize=1)
def _event_sink() -> EventSink:
    return create_event_sink(settings)


def get_event_sink() -> EventSink:
    return _event_sink()


def get_qr_encoder() -> QrEncoder:
    return SvgQrEncoder()


def get_token_service(
    config: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> TokenService:
    return TokenService(
        secret=config.jwt_secret,
        algorithm=config.jwt_algorithm,
        feedback_token_ttl_minutes=config.feedback_token_ttl_minutes,
        clock=clock,
    )


def get_current_claims(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> AccessClaims:
    """
    Identity of the caller from ``Authorization: Bearer <jwt>``.

    Raises:
        UnauthorizedError: Header missing, malformed or token invalid
    """
    if not authorization:
        raise UnauthorizedError("Authorization header is missing.")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Authorization header must use the Bearer scheme.")

    return tokens.decode_access_token(token.strip())


def get_catalog(config: Settings = Depends(get_settings)) -> TimeSlotCatalog:
    return TimeSlotCatalog.from_settings(config)


def get_availability_calculator(
    session: Session = Depends(get_session),
    catalog: TimeSlotCatalog = Depends(get_catalog),
    config: Settings = Depends(get_settings),
) -> AvailabilityCalculator:
    return AvailabilityCalculator(
        catalog,
        locations=SqlLocationRepository(session),
        tables=SqlTableRepository(session),
        reservations=SqlReservationRepository(session),
        tolerance_minutes=config.requested_time_tolerance_minutes,
    )


def get_reservation_service(
    session: Session = Depends(get_session),
    config: Settings = Depends(get_settings),
    catalog: TimeSlotCatalog = Depends(get_catalog),
    tokens: TokenService = Depends(get_token_service),
    events: EventSink = Depends(get_event_sink),
    qr_encoder: QrEncoder = Depends(get_qr_encoder),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ReservationService:
    reservations = SqlReservationRepository(session)
    locations = SqlLocationRepository(session)
    users = SqlUserRepository(session)
    orders = SqlOrderRepository(session)

    return ReservationService(
        reservations=reservations,
        locations=locations,
        tables=SqlTableRepository(session),
        users=users,
        pre_orders=SqlPreOrderRepository(session),
        orders=orders,
        conflicts=ConflictDetector(
            catalog,
            boundary_inclusive=config.conflict_boundary_inclusive,
            clock=clock,
        ),
        waiters=WaiterAssigner(users, reservations),
        reports=ReportAggregator(locations, users, orders, SqlFeedbackRepository(session)),
        tokens=tokens,
        events=events,
        qr_encoder=qr_encoder,
        feedback_base_url=config.feedback_base_url,
        modification_cutoff_minutes=config.modification_cutoff_minutes,
        report_event_type=config.report_event_type,
        clock=clock,
    )


def get_order_service(session: Session = Depends(get_session)) -> OrderService:
    return OrderService(
        reservations=SqlReservationRepository(session),
        orders=SqlOrderRepository(session),
        dishes=SqlDishRepository(session),
    )


def get_anonymous_feedback_service(
    session: Session = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AnonymousFeedbackService:
    return AnonymousFeedbackService(
        tokens=tokens,
        reservations=SqlReservationRepository(session),
        feedbacks=SqlFeedbackRepository(session),
        clock=clock,
    )
