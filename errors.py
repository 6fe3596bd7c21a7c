from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors reported to the API caller with a specific reason"""

    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return error


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class MissingField(ValidationError):
    code = "MISSING_FIELD"
    default_message = "Please provide all required fields"


class AuthenticationError(AppError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"
    default_message = "Authentication failed"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class InvalidCredentials(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class Unauthenticated(AuthenticationError):
    code = "UNAUTHENTICATED"
    default_message = "No token provided, authorization denied"


class TokenExpired(AuthenticationError):
    code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class TokenMalformed(AuthenticationError):
    code = "TOKEN_MALFORMED"
    default_message = "Invalid token"


class TokenInvalid(AuthenticationError):
    code = "TOKEN_INVALID"
    default_message = "Token verification failed"


class AuthorizationError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Not authorized to perform this action"


class Forbidden(AuthorizationError):
    pass


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class DuplicateEmail(ConflictError):
    code = "DUPLICATE_EMAIL"
    default_message = "User already exists with this email"


class InternalError(AppError):
    pass
