"""Order endpoints used by waiters while serving a table."""

from typing import List

from fastapi import APIRouter, Depends

from apps.api.deps import get_current_claims, get_order_service
from domain.models import AccessClaims, Order, OrderLine
from services.order_service import OrderService


router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/{reservation_id}/dishes", response_model=List[OrderLine])
async def get_order_dishes(
    reservation_id: str,
    claims: AccessClaims = Depends(get_current_claims),
    service: OrderService = Depends(get_order_service),
):
    return service.get_order_dishes(reservation_id)


@router.post("/{reservation_id}/dishes/{dish_id}", response_model=Order)
async def add_dish(
    reservation_id: str,
    dish_id: str,
    claims: AccessClaims = Depends(get_current_claims),
    service: OrderService = Depends(get_order_service),
):
    """Add one unit of a dish to the reservation's order."""
    return service.add_dish_to_order(reservation_id, dish_id, claims.user_id)


@router.delete("/{reservation_id}/dishes/{dish_id}", response_model=Order)
async def remove_dish(
    reservation_id: str,
    dish_id: str,
    claims: AccessClaims = Depends(get_current_claims),
    service: OrderService = Depends(get_order_service),
):
    """Remove one unit of a dish from the reservation's order."""
    return service.remove_dish_from_order(reservation_id, dish_id, claims.user_id)
