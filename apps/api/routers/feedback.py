"""Anonymous feedback endpoints reached through the completion QR code."""

from typing import List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from apps.api.deps import get_anonymous_feedback_service
from domain.models import Feedback
from services.anonymous_feedback_service import AnonymousFeedbackService


router = APIRouter(prefix="/feedbacks", tags=["feedback"])


class AnonymousFeedbackRequest(BaseModel):
    """Ratings submitted by a visitor holding a feedback token."""

    token: str = Field(..., min_length=1)
    cuisine_rating: int
    service_rating: int
    cuisine_comment: str = Field(default="", max_length=1000)
    service_comment: str = Field(default="", max_length=1000)


class TokenValidationResponse(BaseModel):
    valid: bool
    reservation_id: str


@router.get("/anonymous/validate-token", response_model=TokenValidationResponse)
async def validate_token(
    token: str = Query(..., min_length=1),
    service: AnonymousFeedbackService = Depends(get_anonymous_feedback_service),
):
    """Check a feedback token before showing the rating form."""
    reservation_id = service.validate_token(token)
    return TokenValidationResponse(valid=True, reservation_id=reservation_id)


@router.post("/anonymous", response_model=List[Feedback], status_code=201)
async def submit_anonymous_feedback(
    request: AnonymousFeedbackRequest,
    service: AnonymousFeedbackService = Depends(get_anonymous_feedback_service),
):
    return service.submit_feedback(
        request.token,
        cuisine_rating=request.cuisine_rating,
        service_rating=request.service_rating,
        cuisine_comment=request.cuisine_comment,
        service_comment=request.service_comment,
    )
