"""SQLAlchemy ORM models."""

from account_api.models.base import Base
from account_api.models.user import Role, User, user_roles

__all__ = ["Base", "Role", "User", "user_roles"]
