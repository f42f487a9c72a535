"""Tests for live order editing."""
import pytest
from decimal import Decimal

from core.exceptions import ConflictError, NotFoundError, UnauthorizedError


@pytest.fixture
def seated(reservation_service, reserve):
    """A reservation whose service has started."""
    reservation = reserve()
    return reservation_service.start_service(reservation.id, reservation.waiter_id)


@pytest.mark.integration
class TestAddDish:

    def test_add_dish(self, order_service, seated, repos):
        order = order_service.add_dish_to_order(seated.id, "d-1", seated.waiter_id)

        assert order.reservation_id == seated.id
        assert [(line.dish_name, line.quantity) for line in order.lines] == [("Tomato soup", 1)]
        assert order.total_price == Decimal("5.50")
        assert repos.reservations.get_by_id(seated.id).order_count == 1

    def test_adding_same_dish_bumps_quantity(self, order_service, seated):
        order_service.add_dish_to_order(seated.id, "d-1", seated.waiter_id)
        order_service.add_dish_to_order(seated.id, "d-2", seated.waiter_id)
        order = order_service.add_dish_to_order(seated.id, "d-1", seated.waiter_id)

        assert {line.dish_id: line.quantity for line in order.lines} == {"d-1": 2, "d-2": 1}
        assert order.quantity_total == 3
        assert order.total_price == Decimal("32.00")

    def test_reserved_reservation_accepts_dishes(self, order_service, reserve):
        reservation = reserve()

        order = order_service.add_dish_to_order(reservation.id, "d-2", reservation.waiter_id)

        assert order.quantity_total == 1

    def test_unknown_dish(self, order_service, seated):
        with pytest.raises(NotFoundError, match="Dish"):
            order_service.add_dish_to_order(seated.id, "d-404", seated.waiter_id)

    def test_unknown_reservation(self, order_service):
        with pytest.raises(NotFoundError, match="Reservation"):
            order_service.add_dish_to_order("r-404", "d-1", "w-1")

    def test_only_assigned_waiter(self, order_service, seated):
        with pytest.raises(UnauthorizedError):
            order_service.add_dish_to_order(seated.id, "d-1", "c-1")

    def test_finished_reservation_is_closed(self, order_service, reservation_service, seated):
        reservation_service.complete_reservation(seated.id, seated.waiter_id)

        with pytest.raises(ConflictError, match="finished"):
            order_service.add_dish_to_order(seated.id, "d-1", seated.waiter_id)

    def test_cancelled_reservation_is_closed(self, order_service, reservation_service, reserve):
        reservation = reserve()
        reservation_service.cancel_reservation(reservation.id, "c-1")

        with pytest.raises(ConflictError, match="cancelled"):
            order_service.add_dish_to_order(reservation.id, "d-1", reservation.waiter_id)


@pytest.mark.integration
class TestRemoveDish:

    def test_remove_one_unit(self, order_service, seated, repos):
        order_service.add_dish_to_order(seated.id, "d-1", seated.waiter_id)
        order_service.add_dish_to_order(seated.id, "d-1", seated.waiter_id)

        order = order_service.remove_dish_from_order(seated.id, "d-1", seated.waiter_id)

        assert [line.quantity for line in order.lines] == [1]
        assert order.total_price == Decimal("5.50")
        assert repos.reservations.get_by_id(seated.id).order_count == 1

    def test_remove_last_unit_drops_line(self, order_service, seated, repos):
        order_service.add_dish_to_order(seated.id, "d-2", seated.waiter_id)

        order = order_service.remove_dish_from_order(seated.id, "d-2", seated.waiter_id)

        assert order.lines == []
        assert order.total_price == Decimal("0")
        assert repos.reservations.get_by_id(seated.id).order_count == 0

    def test_remove_dish_not_on_order(self, order_service, seated):
        order_service.add_dish_to_order(seated.id, "d-1", seated.waiter_id)

        with pytest.raises(NotFoundError, match="Dish in order"):
            order_service.remove_dish_from_order(seated.id, "d-2", seated.waiter_id)

    def test_remove_without_order(self, order_service, seated):
        with pytest.raises(NotFoundError):
            order_service.remove_dish_from_order(seated.id, "d-1", seated.waiter_id)


@pytest.mark.integration
class TestOrderDishes:

    def test_lists_lines(self, order_service, seated):
        order_service.add_dish_to_order(seated.id, "d-1", seated.waiter_id)

        lines = order_service.get_order_dishes(seated.id)

        assert [(line.dish_id, line.quantity) for line in lines] == [("d-1", 1)]

    def test_empty_without_order(self, order_service, seated):
        assert order_service.get_order_dishes(seated.id) == []

    def test_unknown_reservation(self, order_service):
        with pytest.raises(NotFoundError):
            order_service.get_order_dishes("r-404")
