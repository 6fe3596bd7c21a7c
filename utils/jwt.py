import jwt
import logging
from datetime import datetime, timedelta, timezone
from fastapi import Request

from errors import TokenExpired, TokenInvalid, TokenMalformed
from schemas import Identity

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenService:
    """Issues and verifies signed, time-limited identity tokens"""

    def __init__(self, secret: str, expires_in: timedelta = timedelta(days=7)):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.expires_in = expires_in

    def issue(self, user_id: int, email: str) -> str:
        """
        Create a signed token for a user

        Args:
            user_id: User ID
            email: User email

        Returns:
            Encoded JWT carrying id, email, iat and exp claims
        """
        now = datetime.now(timezone.utc)
        payload = {
            "id": user_id,
            "email": email,
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Identity:
        """
        Verify JWT token and return the identity it carries

        Args:
            token: JWT token string

        Returns:
            Identity with user id and email

        Raises:
            TokenExpired: If the token is past its expiry
            TokenMalformed: If the token structure or signature is invalid
            TokenInvalid: For any other verification failure
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired()
        except jwt.DecodeError:
            # Covers bad segments, bad encoding and signature mismatch
            raise TokenMalformed()
        except jwt.InvalidTokenError as exc:
            logger.debug("Token rejected: %s", exc)
            raise TokenInvalid()

        user_id, email = payload.get("id"), payload.get("email")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(email, str):
            raise TokenInvalid()

        return Identity(id=user_id, email=email)


def get_token_service(request: Request) -> TokenService:
    """Get the app's token service - used as FastAPI dependency"""
    return request.app.state.token_service
