"""
Create a user outside the HTTP surface (e.g. a first administrator). Run from project root:
  python -m account_api.scripts.create_user USERNAME NICKNAME PASSWORD [--role ROLE ...]
Example:
  python -m account_api.scripts.create_user admin Admin s3cret --role ROLE_USER --role ROLE_ADMIN
"""
import argparse
import asyncio
import logging
import sys

from account_api.core.config import get_settings
from account_api.core.database import SessionLocal, engine
from account_api.core.errors import AccountServiceError, ValidationError
from account_api.core.security import hash_password
from account_api.repositories.user_repository import UserRepository
from account_api.schemas.auth import SignupRequest

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


async def create_user(username: str, nickname: str, password: str, roles: list[str]) -> list[str]:
    """Create the user and return its authority names. Raises AccountServiceError on failure."""
    settings = get_settings()
    try:
        body = SignupRequest(username=username, nickname=nickname, password=password)
    except ValueError as e:
        raise ValidationError("Invalid user details.", errors=[str(e)], cause=e) from e

    hashed = await asyncio.to_thread(hash_password, body.password, settings.BCRYPT_ROUNDS)
    try:
        async with SessionLocal() as db:
            user = await UserRepository(db).create_user(
                username=body.username,
                nickname=body.nickname,
                hashed_password=hashed,
                authorities=roles or [settings.DEFAULT_ROLE],
            )
            return user.authorities
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an account (bypasses the sign-up endpoint).")
    parser.add_argument("username", help="Username (2-255 chars)")
    parser.add_argument("nickname", help="Display name (1-255 chars)")
    parser.add_argument("password", help="Password (4-16 chars)")
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        default=[],
        help="Authority name to grant; repeatable (default: DEFAULT_ROLE)",
    )
    args = parser.parse_args()

    try:
        authorities = asyncio.run(create_user(args.username, args.nickname, args.password, args.roles))
    except AccountServiceError as e:
        print(e.message, file=sys.stderr)
        for detail in e.errors or []:
            print(detail, file=sys.stderr)
        return 1
    logger.info("Created user '%s' with roles %s", args.username.strip(), ", ".join(authorities))
    return 0


if __name__ == "__main__":
    sys.exit(main())
