"""Login gate package."""

from src.auth.session import (
    AuthenticationError,
    Authenticator,
    Session,
    require_authenticated,
)

__all__ = [
    "AuthenticationError",
    "Authenticator",
    "Session",
    "require_authenticated",
]
