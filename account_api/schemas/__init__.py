"""Pydantic request/response schemas."""

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
from account_api.schemas.health import HealthResponse

__all__ = [
    "AccessToken",
    "ApiResponse",
    "CurrentUser",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginTokens",
    "SignupRequest",
    "TokenClaims",
    "TokenRefreshRequest",
    "UserProfile",
]
