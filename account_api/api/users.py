"""User endpoints: sign-up, login, access-token refresh, and the current user."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from account_api.api.deps import get_auth_service, require_access_token
from account_api.schemas.auth import (
    AccessToken,
    ApiResponse,
    CurrentUser,
    ErrorResponse,
    LoginRequest,
    LoginTokens,
    SignupRequest,
    TokenClaims,
    TokenRefreshRequest,
    UserProfile,
)
from account_api.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/signup",
    response_model=ApiResponse[UserProfile],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input data"},
        409: {"model": ErrorResponse, "description": "Username already exists"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
async def signup(
    body: SignupRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[UserProfile]:
    """Create a new user with the default role. The password is stored hashed."""
    profile = await service.sign_up(body)
    return ApiResponse(message="Sign-up completed.", data=profile)


@router.post(
    "/login",
    response_model=ApiResponse[LoginTokens],
    responses={400: {"model": ErrorResponse, "description": "Invalid input or credentials"}},
)
async def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[LoginTokens]:
    """
    Authenticate with username and password; returns an access and a refresh token.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    tokens = await service.login(body)
    return ApiResponse(message="Logged in.", data=tokens)


@router.post(
    "/token",
    response_model=ApiResponse[AccessToken],
    responses={400: {"model": ErrorResponse, "description": "Missing or invalid refresh token"}},
)
async def refresh_token(
    body: TokenRefreshRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[AccessToken]:
    """Exchange a refresh token for a new access token."""
    token = await service.refresh_access_token(body.refresh_token)
    return ApiResponse(message="A new access token has been issued.", data=token)


@router.get(
    "/me",
    response_model=ApiResponse[CurrentUser],
    responses={
        401: {"model": ErrorResponse, "description": "No bearer token"},
        403: {"model": ErrorResponse, "description": "Invalid or expired token"},
    },
)
def read_current_user(
    claims: Annotated[TokenClaims, Depends(require_access_token)],
) -> ApiResponse[CurrentUser]:
    """Return the identity carried by the presented access token."""
    return ApiResponse(message="Token verified.", data=CurrentUser(username=claims.username))
