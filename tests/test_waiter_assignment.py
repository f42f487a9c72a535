"""Tests for least-busy waiter selection."""
import pytest
from unittest.mock import MagicMock

from core.exceptions import NotFoundError
from domain.enums import Role
from domain.models import User
from services.waiter_assignment import WaiterAssigner


def waiter(user_id):
    return User(id=user_id, email=f"{user_id}@example.com", role=Role.WAITER, location_id="loc-1")


@pytest.mark.unit
class TestAssignLeastBusyWaiter:
    """Test selection against stubbed repositories."""

    def test_picks_waiter_with_fewest_reservations(self, service_day):
        users = MagicMock()
        users.list_waiters_by_location.return_value = [waiter("w-1"), waiter("w-2"), waiter("w-3")]
        reservations = MagicMock()
        reservations.count_for_waiter_on_date.side_effect = lambda waiter_id, day: {
            "w-1": 3, "w-2": 1, "w-3": 2,
        }[waiter_id]

        assert WaiterAssigner(users, reservations).assign_least_busy_waiter("loc-1", service_day) == "w-2"

    def test_tie_goes_to_first_waiter(self, service_day):
        users = MagicMock()
        users.list_waiters_by_location.return_value = [waiter("w-1"), waiter("w-2")]
        reservations = MagicMock()
        reservations.count_for_waiter_on_date.return_value = 2

        assert WaiterAssigner(users, reservations).assign_least_busy_waiter("loc-1", service_day) == "w-1"

    def test_no_waiters(self, service_day):
        users = MagicMock()
        users.list_waiters_by_location.return_value = []

        with pytest.raises(NotFoundError):
            WaiterAssigner(users, MagicMock()).assign_least_busy_waiter("loc-1", service_day)


@pytest.mark.integration
class TestAssignmentThroughBookings:
    """Test that customer bookings spread across the location's waiters."""

    def test_bookings_alternate_between_waiters(self, reserve):
        first = reserve(table_id="t-1", time_from="10:00", time_to="11:30")
        second = reserve(table_id="t-2", time_from="10:00", time_to="11:30")
        third = reserve(table_id="t-3", time_from="10:00", time_to="11:30")

        assert [first.waiter_id, second.waiter_id, third.waiter_id] == ["w-1", "w-2", "w-1"]

    def test_waiters_of_other_locations_are_not_used(self, reserve):
        reservation = reserve(table_id="t-2")

        assert reservation.waiter_id in {"w-1", "w-2"}

    def test_location_without_waiters(self, repos, service_day):
        assigner = WaiterAssigner(repos.users, repos.reservations)

        with pytest.raises(NotFoundError, match="Waiters for location"):
            assigner.assign_least_busy_waiter("loc-unknown", service_day)
