"""
Token handling: anonymous feedback tokens and bearer access token decoding.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable

import jwt
from jwt.exceptions import InvalidTokenError

from core.exceptions import UnauthorizedError
from core.utils_datetime import get_current_datetime
from domain.enums import Role
from domain.models import AccessClaims


logger = logging.getLogger(__name__)

FEEDBACK_PURPOSE = "anonymous_feedback"


class TokenService:
    """Mints and validates HS256 JWTs."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        feedback_token_ttl_minutes: int = 60 * 24 * 7,
        clock: Callable[[], datetime] = get_current_datetime,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.feedback_token_ttl = timedelta(minutes=feedback_token_ttl_minutes)
        self.clock = clock

    def mint_anonymous_feedback_token(self, reservation_id: str) -> str:
        """
        Issue a token letting an anonymous visitor leave feedback.

        Args:
            reservation_id: Reservation the token is bound to

        Returns:
            Encoded JWT
        """
        issued_at = self.clock()
        payload = {
            "reservation_id": reservation_id,
            "purpose": FEEDBACK_PURPOSE,
            "iat": issued_at,
            "exp": issued_at + self.feedback_token_ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate_anonymous_feedback_token(self, token: str) -> str:
        """
        Validate a feedback token.

        Returns:
            The reservation id the token is bound to

        Raises:
            UnauthorizedError: If the token is malformed, expired or not a feedback token
        """
        claims = self._decode(token)
        reservation_id = claims.get("reservation_id")
        if claims.get("purpose") != FEEDBACK_PURPOSE or not reservation_id:
            raise UnauthorizedError("Invalid or expired feedback token.")
        return reservation_id

    def decode_access_token(self, token: str) -> AccessClaims:
        """
        Decode a bearer access token issued by the authentication service.

        Raises:
            UnauthorizedError: If the token is invalid or lacks identity claims
        """
        claims = self._decode(token)
        try:
            return AccessClaims(
                user_id=claims["sub"],
                email=claims["email"],
                role=Role(claims["role"]),
            )
        except (KeyError, ValueError):
            raise UnauthorizedError("Access token is missing identity claims.") from None

    def _decode(self, token: str) -> dict:
        # Expiry is checked against the injected clock, not the system time.
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
            expires = claims.get("exp")
            if expires is not None and self.clock().timestamp() >= expires:
                raise jwt.ExpiredSignatureError("Signature has expired")
            return claims
        except InvalidTokenError as e:
            logger.warning(f"Rejected token: {e}")
            raise UnauthorizedError("Invalid or expired token.") from None
