"""Async database engine and session management."""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from account_api.core.config import Settings, settings


def build_engine(app_settings: Settings) -> AsyncEngine:
    """Create the async engine for DATABASE_URL. SQLite does not take pool options."""
    options: dict[str, object] = {"echo": app_settings.DEBUG}
    if not app_settings.DATABASE_URL.startswith("sqlite"):
        options["pool_pre_ping"] = True
        options["pool_timeout"] = app_settings.DB_POOL_TIMEOUT_SEC
    return create_async_engine(app_settings.DATABASE_URL, **options)


engine = build_engine(settings)

SessionLocal = async_sessionmaker(engine, autoflush=False, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields a DB session and closes it when done."""
    async with SessionLocal() as db:
        yield db


async def check_db_connected(db: AsyncSession) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        await db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
