"""Persistence adapters."""

from account_api.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
