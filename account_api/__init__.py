"""User-account service: registration, login, and JWT access/refresh tokens."""
