from fastapi import Depends, Request

from errors import Unauthenticated
from schemas import Identity
from utils.jwt import TokenService, get_token_service


def extract_bearer_token(auth_header: str) -> str:
    """
    Pull the token out of an Authorization header value

    Raises:
        Unauthenticated: If the header is empty or not "Bearer <token>"
    """
    if not auth_header:
        raise Unauthenticated("Missing Authorization header")

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise Unauthenticated("Invalid Authorization header format. Expected: Bearer <token>")

    return parts[1]


def require_identity(
    request: Request,
    token_service: TokenService = Depends(get_token_service),
) -> Identity:
    """
    Verify the bearer token and resolve the caller identity

    Args:
        request: FastAPI request object
        token_service: Service used to verify the token

    Returns:
        Identity of the caller, also stored on request.state.identity

    Raises:
        Unauthenticated: If the Authorization header is missing or malformed
        TokenExpired, TokenMalformed, TokenInvalid: If the token fails verification
    """
    token = extract_bearer_token(request.headers.get("Authorization", ""))
    identity = token_service.verify(token)

    # Attach user info to request state
    request.state.identity = identity
    return identity
