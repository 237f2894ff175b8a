"""FastAPI dependencies: service wiring and the access-token guard."""

import logging
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from account_api.core.config import get_settings
from account_api.core.database import get_db
from account_api.core.errors import InvalidTokenError, MissingTokenError
from account_api.core.security import TokenIssuer, TokenSettings
from account_api.repositories.user_repository import UserRepository
from account_api.schemas.auth import TokenClaims
from account_api.services.auth_service import AuthService

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Token issuer built once from settings; secrets are not read anywhere else."""
    return TokenIssuer(TokenSettings.from_settings(get_settings()))


def get_user_repository(db: Annotated[AsyncSession, Depends(get_db)]) -> UserRepository:
    return UserRepository(db)


def get_auth_service(
    repository: Annotated[UserRepository, Depends(get_user_repository)],
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    settings = get_settings()
    return AuthService(
        repository,
        token_issuer,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        default_role=settings.DEFAULT_ROLE,
        refresh_must_match_stored=settings.REFRESH_TOKEN_MATCH_STORED,
    )


def require_access_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> TokenClaims:
    """
    Dependency: require a valid Bearer access token.

    Raises MissingTokenError (401) when no bearer token is sent and
    InvalidTokenError (403) when it fails verification. On success the
    decoded claims are stored on request.state.user and returned.
    """
    if credentials is None:
        logger.debug("Rejected request without bearer token", extra={"path": request.url.path})
        raise MissingTokenError("Access token is missing.")
    try:
        claims = token_issuer.decode_access_token(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.debug(
            "Rejected invalid access token",
            extra={"path": request.url.path, "reason": type(e).__name__},
        )
        raise InvalidTokenError("Invalid or expired access token. Please log in again.", cause=e) from e
    request.state.user = claims
    return claims
