"""Request/response schemas for user and token endpoints."""

from datetime import datetime
from typing import Annotated, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

T = TypeVar("T")

USERNAME_MIN_LEN = 2
USERNAME_MAX_LEN = 255
NICKNAME_MIN_LEN = 1
NICKNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 4
PASSWORD_MAX_LEN = 16

# Surrounding whitespace is stripped from usernames and nicknames before length checks.
# Passwords are taken verbatim.
Username = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN
    ),
]
Nickname = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=NICKNAME_MIN_LEN, max_length=NICKNAME_MAX_LEN
    ),
]


class SignupRequest(BaseModel):
    """New account details."""

    username: Username = Field(..., description="Username")
    nickname: Nickname = Field(..., description="Display name")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: Username = Field(..., description="Username")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class TokenRefreshRequest(BaseModel):
    """Refresh token presented to obtain a new access token."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken", min_length=1, description="Refresh token")


class UserProfile(BaseModel):
    """Public projection of a user (no password hash)."""

    username: str
    nickname: str
    authorities: list[str]


class LoginTokens(BaseModel):
    """Access and refresh tokens returned after successful login."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken", description="Short-lived JWT access token")
    refresh_token: str = Field(
        ..., alias="refreshToken", description="Long-lived JWT refresh token"
    )


class AccessToken(BaseModel):
    """New access token returned by the refresh endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken", description="Short-lived JWT access token")


class TokenClaims(BaseModel):
    """Decoded claims of a verified token."""

    username: str
    type: Literal["access", "refresh"]
    jti: str | None = None
    iat: datetime
    exp: datetime


class CurrentUser(BaseModel):
    """Identity taken from a verified access token, exposed to protected handlers."""

    username: str


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by all user endpoints."""

    success: bool = True
    message: str
    data: T


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""

    success: bool = False
    message: str
    errors: list[str] | None = None
