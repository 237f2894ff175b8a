"""Password hashing and JWT issuance/verification for authentication."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any, Literal

import bcrypt
import jwt

from account_api.core.config import Settings
from account_api.schemas.auth import TokenClaims

TokenType = Literal["access", "refresh"]

# Claims every token must carry; PyJWT raises MissingRequiredClaimError otherwise.
REQUIRED_CLAIMS = ["exp", "iat", "username", "type"]

# bcrypt only looks at the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72


def hash_password(plain_password: str, rounds: int) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (constant-time compare inside bcrypt)."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_password_hash(rounds: int) -> str:
    """Hash compared against when the user does not exist, so both login failures cost the same."""
    return hash_password(uuid.uuid4().hex, rounds)


@dataclass(frozen=True)
class TokenSettings:
    """Signing secrets and lifetimes handed to TokenIssuer at construction."""

    access_secret: str
    refresh_secret: str
    algorithm: str
    access_expires: timedelta
    refresh_expires: timedelta

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenSettings":
        return cls(
            access_secret=settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            refresh_secret=settings.REFRESH_TOKEN_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_expires=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_expires=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )


class TokenIssuer:
    """
    Signs and verifies access and refresh tokens.

    Tokens carry {username, type, jti, iat, exp}. Access and refresh tokens use
    separate secrets and a type claim, so one kind is never accepted as the other.
    """

    def __init__(self, config: TokenSettings) -> None:
        self._config = config

    def issue_access_token(self, username: str) -> str:
        return self._encode(username, "access")

    def issue_refresh_token(self, username: str) -> str:
        return self._encode(username, "refresh")

    def decode_access_token(self, token: str) -> TokenClaims:
        """
        Decode and validate an access token.
        Raises jwt.PyJWTError on invalid, expired, or wrong-type token.
        """
        return self._decode(token, "access")

    def decode_refresh_token(self, token: str) -> TokenClaims:
        """
        Decode and validate a refresh token.
        Raises jwt.PyJWTError on invalid, expired, or wrong-type token.
        """
        return self._decode(token, "refresh")

    def _secret_for(self, token_type: TokenType) -> str:
        if token_type == "access":
            return self._config.access_secret
        return self._config.refresh_secret

    def _encode(self, username: str, token_type: TokenType) -> str:
        now = datetime.now(UTC)
        lifetime = (
            self._config.access_expires if token_type == "access" else self._config.refresh_expires
        )
        payload: dict[str, Any] = {
            "username": username,
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(payload, self._secret_for(token_type), algorithm=self._config.algorithm)

    def _decode(self, token: str, token_type: TokenType) -> TokenClaims:
        payload = jwt.decode(
            token,
            self._secret_for(token_type),
            algorithms=[self._config.algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
        if payload.get("type") != token_type:
            raise jwt.InvalidTokenError(f"Expected a {token_type} token")
        if not isinstance(payload.get("username"), str) or not payload["username"]:
            raise jwt.InvalidTokenError("Token username claim is empty")
        return TokenClaims.model_validate(payload)
