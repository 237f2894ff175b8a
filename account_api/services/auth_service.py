"""Account flows: registration, login, and access-token refresh."""

import asyncio
import hmac
import logging

import jwt

from account_api.core.errors import AuthenticationError, ValidationError
from account_api.core.security import (
    TokenIssuer,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from account_api.repositories.user_repository import UserRepository
from account_api.schemas.auth import (
    AccessToken,
    LoginRequest,
    LoginTokens,
    SignupRequest,
    UserProfile,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."
INVALID_REFRESH_TOKEN_MESSAGE = "Invalid or expired refresh token."


class AuthService:
    """
    Registration, login, and refresh over a UserRepository and a TokenIssuer.

    Failures are raised as AccountServiceError subclasses; the caller maps
    them to responses. bcrypt work runs in a worker thread so the event loop
    is not blocked.
    """

    def __init__(
        self,
        repository: UserRepository,
        token_issuer: TokenIssuer,
        bcrypt_rounds: int,
        default_role: str = "ROLE_USER",
        refresh_must_match_stored: bool = True,
    ) -> None:
        self._repository = repository
        self._tokens = token_issuer
        self._bcrypt_rounds = bcrypt_rounds
        self._default_role = default_role
        self._refresh_must_match_stored = refresh_must_match_stored

    async def sign_up(self, body: SignupRequest) -> UserProfile:
        """
        Hash the password and create the user with the default role.

        Raises ConflictError when the username is taken.
        """
        hashed = await asyncio.to_thread(hash_password, body.password, self._bcrypt_rounds)
        user = await self._repository.create_user(
            username=body.username,
            nickname=body.nickname,
            hashed_password=hashed,
            authorities=[self._default_role],
        )
        logger.info("User registered", extra={"username": user.username})
        return UserProfile(
            username=user.username,
            nickname=user.nickname,
            authorities=user.authorities,
        )

    async def login(self, body: LoginRequest) -> LoginTokens:
        """
        Check credentials, issue access and refresh tokens, and store the refresh token.

        Unknown user and wrong password raise the same AuthenticationError.
        """
        user = await self._repository.find_by_username(body.username)
        stored_hash = user.password if user is not None else dummy_password_hash(self._bcrypt_rounds)
        password_ok = await asyncio.to_thread(verify_password, body.password, stored_hash)
        if user is None or not password_ok:
            logger.info("Login failed", extra={"username": body.username})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        access_token = self._tokens.issue_access_token(user.username)
        refresh_token = self._tokens.issue_refresh_token(user.username)
        if not await self._repository.save_refresh_token(user.username, refresh_token):
            logger.info("Login failed; user row missing", extra={"username": user.username})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        logger.info("Login succeeded", extra={"username": user.username})
        return LoginTokens(access_token=access_token, refresh_token=refresh_token)

    async def refresh_access_token(self, refresh_token: str) -> AccessToken:
        """
        Verify a refresh token and issue a new access token for its user.

        The refresh token is not rotated. When refresh_must_match_stored is set,
        only the token currently stored for the user is accepted.
        """
        if not refresh_token or not refresh_token.strip():
            raise ValidationError("Refresh token is required.")

        try:
            claims = self._tokens.decode_refresh_token(refresh_token)
        except jwt.PyJWTError as e:
            logger.info("Refresh token rejected", extra={"reason": type(e).__name__})
            raise AuthenticationError(INVALID_REFRESH_TOKEN_MESSAGE, cause=e) from e

        user = await self._repository.find_by_username(claims.username)
        if user is None:
            logger.info("Refresh token rejected", extra={"reason": "unknown_user"})
            raise AuthenticationError(INVALID_REFRESH_TOKEN_MESSAGE)
        if self._refresh_must_match_stored and not hmac.compare_digest(
            user.refresh_token or "", refresh_token
        ):
            logger.info(
                "Refresh token rejected",
                extra={"reason": "not_current", "username": user.username},
            )
            raise AuthenticationError(INVALID_REFRESH_TOKEN_MESSAGE)

        logger.info("Access token refreshed", extra={"username": user.username})
        return AccessToken(access_token=self._tokens.issue_access_token(user.username))
