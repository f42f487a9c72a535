"""Tests for the SQL repositories."""
import pytest
from datetime import date, datetime, time
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytz

from core.exceptions import ConflictError, NotFoundError
import db
from db import models_sqlalchemy as orm
from db.repositories import feedback_key
from db.session import get_session
from domain.enums import FeedbackType, ReservationStatus
from domain.models import Feedback, Reservation


LOCATION_ID = "loc-1"
LOCATION_ADDRESS = "12 Harbour Street"
SERVICE_DAY = date(2030, 6, 3)
NOW = datetime(2030, 6, 1, 8, 0, tzinfo=pytz.utc)


def make_reservation(reservation_id="r-1", **kwargs):
    data = dict(
        id=reservation_id,
        location_id=LOCATION_ID,
        location_address=LOCATION_ADDRESS,
        table_id="t-2",
        table_number="2",
        table_capacity=4,
        date=SERVICE_DAY,
        time_from=time(10, 0),
        time_to=time(11, 30),
        guests_number=2,
        user_email="carol@example.com",
        user_info="Carol Jones",
        waiter_id="w-1",
        created_at=NOW,
    )
    data.update(kwargs)
    return Reservation(**data)


@pytest.mark.integration
class TestReservationRepository:

    def test_insert_sets_first_version(self, repos):
        stored = repos.reservations.upsert(make_reservation())

        assert stored.version == 1
        assert stored.time_slot == "10:00 - 11:30"
        assert repos.reservations.exists("r-1")

    def test_update_bumps_version(self, repos):
        stored = repos.reservations.upsert(make_reservation())

        updated = repos.reservations.upsert(stored.model_copy(update={"guests_number": 3}))

        assert updated.version == 2
        assert repos.reservations.get_by_id("r-1").guests_number == 3

    def test_created_at_is_the_booking_time(self, repos, db_session):
        repos.reservations.upsert(make_reservation(created_at=NOW))
        db_session.expire_all()

        stored = repos.reservations.get_by_id("r-1")

        assert stored.created_at.replace(tzinfo=None) == NOW.replace(tzinfo=None)
        assert orm.Reservation.__table__.c.created_at.server_default is None

    def test_stale_write_rejected(self, repos):
        stored = repos.reservations.upsert(make_reservation())
        repos.reservations.upsert(stored.model_copy(update={"guests_number": 3}))

        with pytest.raises(ConflictError, match="modified by another request"):
            repos.reservations.upsert(stored.model_copy(update={"guests_number": 4}))

        assert repos.reservations.get_by_id("r-1").guests_number == 3

    def test_get_missing(self, repos):
        assert repos.reservations.get_by_id("r-404") is None
        assert not repos.reservations.exists("r-404")

    def test_table_listing_skips_cancelled(self, repos):
        repos.reservations.upsert(make_reservation("r-1"))
        repos.reservations.upsert(make_reservation("r-2", time_from=time(13, 30), time_to=time(15, 0)))
        repos.reservations.upsert(make_reservation("r-3", time_from=time(8, 15), time_to=time(9, 45)))
        repos.reservations.cancel("r-2")

        found = repos.reservations.list_by_date_location_table(SERVICE_DAY, LOCATION_ADDRESS, "t-2")

        assert [r.id for r in found] == ["r-3", "r-1"]

    def test_location_listing(self, repos):
        repos.reservations.upsert(make_reservation("r-1"))
        repos.reservations.upsert(make_reservation("r-2", table_id="t-1", table_number="1"))
        repos.reservations.upsert(make_reservation("r-3", date=date(2030, 6, 4)))

        found = repos.reservations.list_by_date_and_location(SERVICE_DAY, LOCATION_ID)

        assert {r.id for r in found} == {"r-1", "r-2"}

    def test_waiter_count_includes_cancelled(self, repos):
        repos.reservations.upsert(make_reservation("r-1"))
        repos.reservations.upsert(make_reservation("r-2", time_from=time(13, 30), time_to=time(15, 0)))
        repos.reservations.upsert(make_reservation("r-3", waiter_id="w-2"))
        repos.reservations.cancel("r-2")

        assert repos.reservations.count_for_waiter_on_date("w-1", SERVICE_DAY) == 2
        assert repos.reservations.count_for_waiter_on_date("w-2", SERVICE_DAY) == 1
        assert repos.reservations.count_for_waiter_on_date("w-1", date(2030, 6, 4)) == 0

    def test_cancel(self, repos):
        repos.reservations.upsert(make_reservation())

        cancelled = repos.reservations.cancel("r-1")

        assert cancelled.status == ReservationStatus.CANCELLED
        assert cancelled.version == 2

    def test_cancel_missing(self, repos):
        with pytest.raises(NotFoundError):
            repos.reservations.cancel("r-404")

    def test_filtered_listing(self, repos):
        repos.reservations.upsert(make_reservation("r-1"))
        repos.reservations.upsert(make_reservation(
            "r-2", user_email="dave@example.com", waiter_id="w-2", table_id="t-3", table_number="3"
        ))

        assert [r.id for r in repos.reservations.list_filtered(user_email="dave@example.com")] == ["r-2"]
        assert [r.id for r in repos.reservations.list_filtered(waiter_id="w-1")] == ["r-1"]
        assert [r.id for r in repos.reservations.list_filtered(table_number="3")] == ["r-2"]
        assert [r.id for r in repos.reservations.list_filtered(day=SERVICE_DAY, time_from=time(10, 0))] == [
            "r-1", "r-2"
        ]


@pytest.mark.integration
class TestLookupRepositories:

    def test_tables_ordered_by_number(self, repos):
        tables = repos.tables.list_by_location(LOCATION_ID)

        assert [t.id for t in tables] == ["t-1", "t-2", "t-3"]

    def test_waiters_at_location(self, repos):
        waiters = repos.users.list_waiters_by_location(LOCATION_ID)

        assert [w.id for w in waiters] == ["w-1", "w-2"]

    def test_pre_order_items(self, repos, db_session):
        db_session.add(orm.PreOrder(
            id="p-1",
            reservation_id="r-1",
            user_email="carol@example.com",
            status="Submitted",
            items=[
                orm.PreOrderItem(id="pi-1", dish_id="d-1", dish_name="Tomato soup",
                                 quantity=2, price=Decimal("5.50"), status="Confirmed"),
                orm.PreOrderItem(id="pi-2", dish_id="d-2", dish_name="Ribeye steak",
                                 quantity=1, price=Decimal("21.00"), status="Cancelled"),
            ],
        ))
        db_session.commit()

        pre_order = repos.pre_orders.get_by_reservation_id("r-1")

        assert pre_order.active_quantity == 2
        assert repos.pre_orders.get_by_reservation_id("r-2") is None


@pytest.mark.integration
class TestOrderRepository:

    def test_add_creates_order(self, repos):
        order = repos.orders.add_dish("r-1", "d-2")

        assert order.reservation_id == "r-1"
        assert order.total_price == Decimal("21.00")
        assert repos.orders.get_by_reservation_id("r-1").id == order.id

    def test_database_stamps_created_at(self, repos, db_session):
        repos.orders.add_dish("r-1", "d-1")
        db_session.expire_all()

        assert repos.orders.get_by_reservation_id("r-1").created_at is not None
        assert "updated_at" not in orm.Order.__table__.c

    def test_add_unknown_dish(self, repos):
        with pytest.raises(NotFoundError):
            repos.orders.add_dish("r-1", "d-404")

        assert repos.orders.get_by_reservation_id("r-1") is None

    def test_remove_missing(self, repos):
        assert repos.orders.remove_dish("r-1", "d-1") is None

        repos.orders.add_dish("r-1", "d-1")
        assert repos.orders.remove_dish("r-1", "d-2") is None


@pytest.mark.integration
class TestFeedbackRepository:

    def test_composite_key(self):
        assert feedback_key("r-1", FeedbackType.SERVICE_QUALITY) == "r-1#SERVICE_QUALITY"

    def test_lists_by_reservation_and_type(self, repos, db_session):
        for feedback_id, feedback_type, rate in [
            ("f-1", FeedbackType.SERVICE_QUALITY, 5),
            ("f-2", FeedbackType.CUISINE_EXPERIENCE, 3),
            ("f-3", FeedbackType.SERVICE_QUALITY, 4),
        ]:
            repos.feedbacks.add(Feedback(
                id=feedback_id,
                reservation_id="r-1",
                location_id=LOCATION_ID,
                type=feedback_type,
                rate=rate,
                date=SERVICE_DAY,
            ))

        service = repos.feedbacks.list_by_reservation_and_type("r-1", FeedbackType.SERVICE_QUALITY)

        assert [f.rate for f in service] == [5, 4]
        stored = db_session.get(orm.Feedback, "f-2")
        assert stored.reservation_type == "r-1#CUISINE_EXPERIENCE"
        assert repos.feedbacks.list_by_reservation_and_type("r-2", FeedbackType.SERVICE_QUALITY) == []


@pytest.mark.unit
class TestSessionDependency:

    def test_rolls_back_and_closes_on_error(self):
        session = MagicMock()
        with patch("db.session.SessionLocal", return_value=session):
            dependency = get_session()
            assert next(dependency) is session
            with pytest.raises(RuntimeError):
                dependency.throw(RuntimeError("request failed"))

        session.rollback.assert_called_once()
        session.close.assert_called_once()

    def test_closes_without_commit_on_success(self):
        session = MagicMock()
        with patch("db.session.SessionLocal", return_value=session):
            dependency = get_session()
            next(dependency)
            dependency.close()

        session.commit.assert_not_called()
        session.close.assert_called_once()

    def test_package_exports_request_scoped_helpers_only(self):
        assert {"get_session", "init_db", "close_db"} <= set(db.__all__)
        assert not {"get_session_context", "drop_db"} & set(db.__all__)
