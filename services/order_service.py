"""
Live order editing for reservations being served.
"""
import logging
from typing import List

from core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from domain.models import Order, OrderLine, Reservation
from services.interfaces import DishRepository, OrderRepository, ReservationRepository


logger = logging.getLogger(__name__)


class OrderService:
    """Adds and removes dishes on a reservation's order."""

    def __init__(
        self,
        reservations: ReservationRepository,
        orders: OrderRepository,
        dishes: DishRepository,
    ):
        self.reservations = reservations
        self.orders = orders
        self.dishes = dishes

    def add_dish_to_order(self, reservation_id: str, dish_id: str, user_id: str) -> Order:
        """
        Add one unit of a dish to the order.

        Raises:
            NotFoundError: Unknown reservation or dish
            UnauthorizedError: Caller is not the assigned waiter
            ConflictError: Reservation is finished or cancelled
        """
        reservation = self._get_editable(reservation_id, user_id)
        if self.dishes.get_by_id(dish_id) is None:
            raise NotFoundError("Dish", dish_id)

        order = self.orders.add_dish(reservation.id, dish_id)
        self._sync_order_count(reservation, order)

        logger.info(f"Dish {dish_id} added to order of reservation {reservation_id}")
        return order

    def remove_dish_from_order(self, reservation_id: str, dish_id: str, user_id: str) -> Order:
        """
        Remove one unit of a dish from the order.

        Raises:
            NotFoundError: Unknown reservation, or the dish is not on the order
            UnauthorizedError: Caller is not the assigned waiter
            ConflictError: Reservation is finished or cancelled
        """
        reservation = self._get_editable(reservation_id, user_id)

        order = self.orders.remove_dish(reservation.id, dish_id)
        if order is None:
            raise NotFoundError("Dish in order", dish_id)
        self._sync_order_count(reservation, order)

        logger.info(f"Dish {dish_id} removed from order of reservation {reservation_id}")
        return order

    def get_order_dishes(self, reservation_id: str) -> List[OrderLine]:
        if self.reservations.get_by_id(reservation_id) is None:
            raise NotFoundError("Reservation", reservation_id)
        order = self.orders.get_by_reservation_id(reservation_id)
        return list(order.lines) if order else []

    def _get_editable(self, reservation_id: str, user_id: str) -> Reservation:
        reservation = self.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation", reservation_id)
        if reservation.waiter_id != user_id:
            raise UnauthorizedError("Only the assigned waiter can change this order")
        if reservation.status.is_terminal:
            raise ConflictError(
                f"Cannot change the order of a {reservation.status.value.lower()} reservation."
            )
        return reservation

    def _sync_order_count(self, reservation: Reservation, order: Order) -> None:
        if reservation.order_count == order.quantity_total:
            return
        self.reservations.upsert(
            reservation.model_copy(update={"order_count": order.quantity_total})
        )
