"""
Error taxonomy for the API.

Every error is an ``HTTPException`` so it can be raised from dependencies
and route handlers alike; ``profile_api.api.errors`` renders them as
``{"status": "error", "message": ...}``.
"""

from typing import Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors with a fixed status code and default message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"
    headers: Optional[dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=message or self.default_message,
            headers=dict(type(self).headers) if type(self).headers else None,
        )

    @property
    def message(self) -> str:
        return self.detail


# 400


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, messages: Optional[list[str]] = None, message: Optional[str] = None):
        self.messages = list(messages or [])
        super().__init__(message or ", ".join(self.messages) or None)


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User with this email already exists"


class BusinessRuleError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request violates a business rule"


class SelfDeleteError(BusinessRuleError):
    default_message = "You cannot delete your own account"


# 401


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"
    headers = {"WWW-Authenticate": "Bearer"}


class MissingTokenError(AuthenticationError):
    default_message = "Access denied. No token provided or invalid format."


class InvalidTokenError(AuthenticationError):
    default_message = "Invalid token."


class TokenExpiredError(AuthenticationError):
    default_message = "Token has expired."


class StaleUserError(AuthenticationError):
    default_message = "Token is valid but user not found."


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid email or password"


# 403


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied."


class AdminRequiredError(AuthorizationError):
    default_message = "Access denied. Admin privileges required."


class ProfileAccessDeniedError(AuthorizationError):
    default_message = "Access denied. You can only access your own profile."


# 404


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


# 413


class PayloadTooLargeError(AppError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "Request body too large"


# 500


class ServerError(AppError):
    pass
