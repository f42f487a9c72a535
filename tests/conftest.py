"""Pytest configuration and fixtures for reservation engine tests."""
from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import jwt
import pytest
import pytz
from sqlalchemy.pool import StaticPool

from db import models_sqlalchemy as orm
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
from db.session import create_engine, create_session_factory, init_db
from domain.enums import ClientType, Role
from domain.models import CustomerReservationRequest, StaffReservationRequest
from integrations.event_sink import LoggingEventSink
from services.anonymous_feedback_service import AnonymousFeedbackService
from services.availability import AvailabilityCalculator
from services.conflicts import ConflictDetector
from services.order_service import OrderService
from services.report_aggregator import ReportAggregator
from services.reservation_service import ReservationService
from services.time_slots import TimeSlotCatalog
from services.token_service import TokenService
from services.waiter_assignment import WaiterAssigner


TEST_SECRET = "test-secret"
FEEDBACK_BASE_URL = "https://tables.example.com/feedback"

# Fixed "now": 1 June 2030, 08:00 UTC
NOW = datetime(2030, 6, 1, 8, 0, tzinfo=pytz.utc)
SERVICE_DAY = date(2030, 6, 3)

LOCATION_ID = "loc-1"
LOCATION_ADDRESS = "12 Harbour Street"
OTHER_LOCATION_ID = "loc-2"


@pytest.fixture(scope="function")
def clock():
    """A movable clock; tests may reassign ``clock.now``."""
    class FixedClock:
        def __init__(self):
            self.now = NOW

        def __call__(self):
            return self.now

        def advance(self, **kwargs):
            self.now = self.now + timedelta(**kwargs)

    return FixedClock()


@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False, poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


def seed_reference_data(session):
    """Store the locations, tables, users and dishes every test relies on."""
    session.add_all([
        orm.Location(id=LOCATION_ID, address=LOCATION_ADDRESS, name="Harbour"),
        orm.Location(id=OTHER_LOCATION_ID, address="5 Hill Road", name="Hill"),
    ])
    session.flush()
    session.add_all([
        orm.RestaurantTable(id="t-1", location_id=LOCATION_ID, table_number="1", capacity=2),
        orm.RestaurantTable(id="t-2", location_id=LOCATION_ID, table_number="2", capacity=4),
        orm.RestaurantTable(id="t-3", location_id=LOCATION_ID, table_number="3", capacity=8),
        orm.RestaurantTable(id="t-9", location_id=OTHER_LOCATION_ID, table_number="9", capacity=4),
        orm.User(id="w-1", email="anna@example.com", first_name="Anna", last_name="Berg",
                 role=Role.WAITER.value, location_id=LOCATION_ID),
        orm.User(id="w-2", email="ben@example.com", first_name="Ben", last_name="Ode",
                 role=Role.WAITER.value, location_id=LOCATION_ID),
        orm.User(id="w-3", email="cleo@example.com", first_name="Cleo", last_name="Hart",
                 role=Role.WAITER.value, location_id=OTHER_LOCATION_ID),
        orm.User(id="c-1", email="carol@example.com", first_name="Carol", last_name="Jones",
                 role=Role.CUSTOMER.value),
        orm.User(id="c-2", email="dave@example.com", first_name="Dave", last_name="Kim",
                 role=Role.CUSTOMER.value),
        orm.User(id="a-1", email="admin@example.com", first_name="Ada", last_name="Min",
                 role=Role.ADMIN.value),
        orm.Dish(id="d-1", name="Tomato soup", price=Decimal("5.50")),
        orm.Dish(id="d-2", name="Ribeye steak", price=Decimal("21.00")),
    ])
    session.commit()


def build_repositories(session):
    """All SQL repositories sharing one session."""
    return SimpleNamespace(
        reservations=SqlReservationRepository(session),
        locations=SqlLocationRepository(session),
        tables=SqlTableRepository(session),
        users=SqlUserRepository(session),
        pre_orders=SqlPreOrderRepository(session),
        dishes=SqlDishRepository(session),
        orders=SqlOrderRepository(session),
        feedbacks=SqlFeedbackRepository(session),
    )


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session with seeded locations, tables, users and dishes."""
    session = create_session_factory(db_engine)()
    seed_reference_data(session)

    yield session
    session.close()


@pytest.fixture(scope="function")
def repos(db_session):
    return build_repositories(db_session)


@pytest.fixture(scope="function")
def catalog():
    return TimeSlotCatalog()


@pytest.fixture(scope="function")
def conflict_detector(catalog, clock):
    return ConflictDetector(catalog, boundary_inclusive=True, clock=clock)


@pytest.fixture(scope="function")
def token_service(clock):
    return TokenService(secret=TEST_SECRET, feedback_token_ttl_minutes=60, clock=clock)


@pytest.fixture(scope="function")
def event_sink():
    """Logging sink wrapped so tests can inspect published events."""
    return MagicMock(wraps=LoggingEventSink())


@pytest.fixture(scope="function")
def qr_encoder():
    encoder = MagicMock()
    encoder.encode.return_value = b"<svg>qr</svg>"
    return encoder


@pytest.fixture(scope="function")
def availability_calculator(catalog, repos):
    return AvailabilityCalculator(catalog, repos.locations, repos.tables, repos.reservations)


@pytest.fixture(scope="function")
def reservation_service_factory(conflict_detector, token_service, event_sink, qr_encoder, clock):
    """Factory wiring a reservation service to the given repositories."""
    def _make(repos):
        return ReservationService(
            reservations=repos.reservations,
            locations=repos.locations,
            tables=repos.tables,
            users=repos.users,
            pre_orders=repos.pre_orders,
            orders=repos.orders,
            conflicts=conflict_detector,
            waiters=WaiterAssigner(repos.users, repos.reservations),
            reports=ReportAggregator(repos.locations, repos.users, repos.orders, repos.feedbacks),
            tokens=token_service,
            events=event_sink,
            qr_encoder=qr_encoder,
            feedback_base_url=FEEDBACK_BASE_URL,
            modification_cutoff_minutes=30,
            clock=clock,
        )
    return _make


@pytest.fixture(scope="function")
def reservation_service(reservation_service_factory, repos):
    """Create a reservation service wired to the in-memory database."""
    return reservation_service_factory(repos)


@pytest.fixture(scope="function")
def order_service(repos):
    return OrderService(repos.reservations, repos.orders, repos.dishes)


@pytest.fixture(scope="function")
def feedback_service(token_service, repos, clock):
    return AnonymousFeedbackService(token_service, repos.reservations, repos.feedbacks, clock=clock)


@pytest.fixture(scope="function")
def customer_request():
    """Factory for customer reservation requests on the service day."""
    def _make(**kwargs):
        data = {
            "location_id": LOCATION_ID,
            "table_id": "t-2",
            "date": SERVICE_DAY.isoformat(),
            "guests_number": 2,
            "time_from": "10:00",
            "time_to": "11:30",
        }
        data.update(kwargs)
        return CustomerReservationRequest(**data)
    return _make


@pytest.fixture(scope="function")
def staff_request():
    """Factory for waiter-made reservation requests (visitor by default)."""
    def _make(**kwargs):
        data = {
            "location_id": LOCATION_ID,
            "table_id": "t-2",
            "date": SERVICE_DAY.isoformat(),
            "guests_number": 2,
            "time_from": "13:30",
            "time_to": "15:00",
            "client_type": ClientType.VISITOR,
            "visitor_name": "Walk-in party",
        }
        data.update(kwargs)
        return StaffReservationRequest(**data)
    return _make


@pytest.fixture(scope="function")
def access_token():
    """Factory minting bearer tokens for seeded users."""
    def _make(user_id, email, role, expires_in=timedelta(hours=1)):
        payload = {
            "sub": user_id,
            "email": email,
            "role": role.value if isinstance(role, Role) else role,
            "exp": NOW + expires_in,
        }
        return jwt.encode(payload, TEST_SECRET, algorithm="HS256")
    return _make


@pytest.fixture(scope="function")
def service_day():
    """A future day the fixed clock can book on."""
    return SERVICE_DAY


@pytest.fixture(scope="function")
def reserve(reservation_service, customer_request):
    """Factory booking a customer reservation for a seeded customer."""
    def _reserve(user_id="c-1", **kwargs):
        return reservation_service.upsert_reservation(customer_request(**kwargs), user_id)
    return _reserve


@pytest.fixture(scope="function")
def concurrent_clients(tmp_path, reservation_service_factory):
    """Two request scopes, each with its own session on one file-backed database."""
    engine = create_engine(f"sqlite:///{tmp_path / 'reservations.db'}", echo=False)
    init_db(bind=engine)
    session_factory = create_session_factory(engine)

    clients = []
    for _ in range(2):
        session = session_factory()
        repositories = build_repositories(session)
        clients.append(SimpleNamespace(
            session=session,
            repos=repositories,
            service=reservation_service_factory(repositories),
        ))
    seed_reference_data(clients[0].session)

    yield clients

    for client in clients:
        client.session.close()
    engine.dispose()
