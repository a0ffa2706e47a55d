"""
Authentication endpoints.

Handles user registration, login, profile lookup and token refresh.
"""

import logging

from fastapi import APIRouter, status

from profile_api.api.deps import CurrentUser, Issuer, Users
from profile_api.api.responses import ApiResponse, AuthData, TokenData, UserData
from profile_api.api.validation import LoginRequest, UserCreateRequest
from profile_api.core.exceptions import ConflictError, InvalidCredentialsError
from profile_api.models.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=ApiResponse[AuthData],
    response_model_exclude_none=True,
)
async def login(credentials: LoginRequest, users: Users, issuer: Issuer):
    """
    Authenticate user and return an access token.

    Unknown email and wrong password produce the same response.

    Raises:
        InvalidCredentialsError: If credentials are invalid.
    """
    user = await users.find_by_email(credentials.email)

    if user is None or not users.hasher.verify(credentials.password, user.hashed_password):
        logger.info(f"Failed login attempt for {credentials.email}")
        raise InvalidCredentialsError()

    token = issuer.issue(user.id)
    logger.info(f"User {user.id} logged in")

    return ApiResponse(
        message="Login successful",
        data=AuthData(user=UserRead.model_validate(user), token=token),
    )


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def register(user_in: UserCreateRequest, users: Users, issuer: Issuer):
    """
    Register a new user and return it with an access token.

    Raises:
        ConflictError: If email already registered.
    """
    if await users.email_exists(user_in.email):
        raise ConflictError("User with this email already exists")

    user = await users.create(user_in.model_dump())
    token = issuer.issue(user.id)
    logger.info(f"Registered user {user.id} with role {user.role.value}")

    return ApiResponse(
        message="User registered successfully",
        data=AuthData(user=UserRead.model_validate(user), token=token),
    )


@router.get(
    "/profile",
    response_model=ApiResponse[UserData],
    response_model_exclude_none=True,
)
async def get_profile(current_user: CurrentUser):
    """Get current authenticated user's profile."""
    return ApiResponse(data=UserData(user=UserRead.model_validate(current_user)))


@router.post(
    "/refresh",
    response_model=ApiResponse[TokenData],
    response_model_exclude_none=True,
)
async def refresh_token(current_user: CurrentUser, issuer: Issuer):
    """
    Issue a fresh token for the current user.

    The presented token stays valid until its own expiry.
    """
    return ApiResponse(
        message="Token refreshed successfully",
        data=TokenData(token=issuer.issue(current_user.id)),
    )
