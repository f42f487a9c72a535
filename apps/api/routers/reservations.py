"""Reservation endpoints: availability, booking and lifecycle transitions."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from apps.api.deps import (
    get_availability_calculator,
    get_current_claims,
    get_reservation_service,
)
from domain.models import (
    AccessClaims,
    AvailableTable,
    CompletionResult,
    CustomerReservationRequest,
    Reservation,
    StaffReservationRequest,
)
from services.availability import AvailabilityCalculator
from services.reservation_service import ReservationService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.get("/tables", response_model=List[AvailableTable])
async def get_available_tables(
    location_id: str = Query(..., alias="locationId", description="Location to search"),
    date: str = Query(..., description="Reservation date (YYYY-MM-DD)"),
    guests: int = Query(..., description="Party size"),
    time: Optional[str] = Query(None, description="Preferred time (HH:MM)"),
    calculator: AvailabilityCalculator = Depends(get_availability_calculator),
):
    """
    List tables with free slots.

    Args:
        location_id: Location id
        date: Day to check
        guests: Number of guests the table must seat
        time: Optional preferred time; narrows each table to the matching slot

    Returns:
        List[AvailableTable]: Tables that still have a free slot
    """
    return calculator.compute_availability(location_id, date, guests, requested_time=time)


@router.post("/client", response_model=Reservation)
async def upsert_client_reservation(
    request: CustomerReservationRequest,
    claims: AccessClaims = Depends(get_current_claims),
    service: ReservationService = Depends(get_reservation_service),
):
    """Create or edit a reservation on behalf of the authenticated customer."""
    return service.upsert_reservation(request, claims.user_id)


@router.post("/waiter", response_model=Reservation)
async def upsert_waiter_reservation(
    request: StaffReservationRequest,
    claims: AccessClaims = Depends(get_current_claims),
    service: ReservationService = Depends(get_reservation_service),
):
    """Create or edit a reservation made by a waiter for a customer or a visitor."""
    return service.upsert_reservation(request, claims.user_id)


@router.get("", response_model=List[Reservation])
async def list_reservations(
    date: Optional[str] = Query(None, description="Filter by date (YYYY-MM-DD)"),
    time_from: Optional[str] = Query(None, alias="timeFrom", description="Filter by slot start"),
    table_number: Optional[str] = Query(None, alias="tableNumber", description="Filter by table"),
    claims: AccessClaims = Depends(get_current_claims),
    service: ReservationService = Depends(get_reservation_service),
):
    """
    List reservations visible to the caller.

    Customers get their own bookings, waiters the ones assigned to them and
    admins all of them.
    """
    return service.list_reservations(
        claims.user_id,
        date=date,
        time_from=time_from,
        table_number=table_number,
    )


@router.get("/{reservation_id}", response_model=Reservation)
async def get_reservation(
    reservation_id: str,
    claims: AccessClaims = Depends(get_current_claims),
    service: ReservationService = Depends(get_reservation_service),
):
    return service.get_reservation(reservation_id)


@router.post("/{reservation_id}/start", response_model=Reservation)
async def start_reservation(
    reservation_id: str,
    claims: AccessClaims = Depends(get_current_claims),
    service: ReservationService = Depends(get_reservation_service),
):
    """Seat the guests: Reserved -> InProgress, merging a submitted pre-order."""
    return service.start_service(reservation_id, claims.user_id)


@router.post("/{reservation_id}/complete", response_model=CompletionResult)
async def complete_reservation(
    reservation_id: str,
    claims: AccessClaims = Depends(get_current_claims),
    service: ReservationService = Depends(get_reservation_service),
):
    """
    Finish the reservation.

    Returns:
        CompletionResult: Updated reservation, its report and, for visitors,
        the feedback URL with its QR code (base64 SVG)
    """
    return service.complete_reservation(reservation_id, claims.user_id)


@router.delete("/{reservation_id}", response_model=Reservation)
async def cancel_reservation(
    reservation_id: str,
    claims: AccessClaims = Depends(get_current_claims),
    service: ReservationService = Depends(get_reservation_service),
):
    """Cancel a reservation that has not started yet."""
    return service.cancel_reservation(reservation_id, claims.user_id)
