"""ORM models for user accounts and their roles."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import relationship

from account_api.models.base import Base

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """Named authority (e.g. ROLE_USER). One row per name, shared by many users."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    authority_name = Column(String(64), nullable=False, unique=True, index=True)


class User(Base):
    """
    User account for JWT authentication.

    password holds a bcrypt hash. refresh_token is a single slot: the most
    recently issued refresh token, overwritten on every login.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    nickname = Column(String(255), nullable=False)
    password = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # selectin: roles are loaded eagerly, async sessions cannot lazy-load.
    roles = relationship("Role", secondary=user_roles, lazy="selectin")

    @property
    def authorities(self) -> list[str]:
        return [role.authority_name for role in self.roles]
