"""
Feedback left by walk-in visitors through the QR code handed out at completion.
"""
import logging
from datetime import datetime
from typing import Callable, List
from uuid import uuid4

from core.exceptions import BadRequestError, ConflictError, NotFoundError
from core.utils_datetime import get_current_datetime
from domain.enums import FeedbackType, ReservationStatus
from domain.models import Feedback, Reservation
from services.interfaces import FeedbackRepository, ReservationRepository
from services.token_service import TokenService


logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class AnonymousFeedbackService:
    """Validates feedback tokens and stores visitor ratings."""

    def __init__(
        self,
        tokens: TokenService,
        reservations: ReservationRepository,
        feedbacks: FeedbackRepository,
        clock: Callable[[], datetime] = get_current_datetime,
    ):
        self.tokens = tokens
        self.reservations = reservations
        self.feedbacks = feedbacks
        self.clock = clock

    def validate_token(self, token: str) -> str:
        """
        Check that a token may be used to leave feedback.

        Returns:
            Reservation id the token is bound to

        Raises:
            UnauthorizedError: Token is invalid or expired
            NotFoundError: Reservation no longer exists
            ConflictError: Reservation is not finished
        """
        return self._finished_reservation(token).id

    def submit_feedback(
        self,
        token: str,
        cuisine_rating: int,
        service_rating: int,
        cuisine_comment: str = "",
        service_comment: str = "",
    ) -> List[Feedback]:
        """
        Store a visitor's cuisine and service ratings.

        Returns:
            The two stored feedback records (service first, then cuisine)

        Raises:
            BadRequestError: A rating is outside 1..5
        """
        errors = {}
        for field, value in (("cuisineRating", cuisine_rating), ("serviceRating", service_rating)):
            if not MIN_RATING <= value <= MAX_RATING:
                errors[field] = [f"Must be between {MIN_RATING} and {MAX_RATING}."]
        if errors:
            raise BadRequestError("Ratings must be between 1 and 5.", errors=errors)

        reservation = self._finished_reservation(token)
        today = self.clock().date()

        stored = [
            self.feedbacks.add(self._feedback(
                reservation, FeedbackType.SERVICE_QUALITY, service_rating, service_comment, today
            )),
            self.feedbacks.add(self._feedback(
                reservation, FeedbackType.CUISINE_EXPERIENCE, cuisine_rating, cuisine_comment, today
            )),
        ]
        logger.info(f"Anonymous feedback stored for reservation {reservation.id}")
        return stored

    def _finished_reservation(self, token: str) -> Reservation:
        reservation_id = self.tokens.validate_anonymous_feedback_token(token)
        reservation = self.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation", reservation_id)
        if reservation.status != ReservationStatus.FINISHED:
            raise ConflictError("Feedback can only be left for a finished reservation.")
        return reservation

    @staticmethod
    def _feedback(reservation, feedback_type, rate, comment, day) -> Feedback:
        return Feedback(
            id=str(uuid4()),
            reservation_id=reservation.id,
            location_id=reservation.location_id,
            type=feedback_type,
            rate=rate,
            comment=comment or "",
            date=day,
        )
