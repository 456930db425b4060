"""
Login Gate

DESIGN DECISION: One shared account protects the front end. The
credentials come from the environment (CASHBOOK_AUTH_*), never from code.

The logged-in state is an explicit Session value that the front end keeps
and passes to whatever needs it. There is no module-level flag.

The gate protects the UI only; the store does not check sessions.
"""

import hmac
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from src.audit.logger import AuditLogger
from src.config import AuthSettings, get_settings


class AuthenticationError(Exception):
    """Wrong credentials, or an action that needs a logged-in session."""
    pass


class Session(BaseModel):
    """Who is using the front end right now."""

    username: Optional[str] = None
    session_id: UUID = Field(default_factory=uuid4)
    authenticated_at: Optional[datetime] = None
    is_authenticated: bool = False

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()


def require_authenticated(session: Optional[Session]) -> Session:
    """
    Guard for screens behind the login.

    Raises:
        AuthenticationError: If there is no logged-in session
    """
    if session is None or not session.is_authenticated:
        raise AuthenticationError("Login required")
    return session


def _matches(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


class Authenticator:
    """Checks submitted credentials against the configured account."""

    def __init__(
        self,
        settings: Optional[AuthSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().auth
        self._audit = audit_logger or AuditLogger()

    def login(self, username: str, password: str) -> Session:
        """
        Open a session for the configured account.

        Both fields are always compared so a wrong username takes as
        long as a wrong password.

        Raises:
            AuthenticationError: On any mismatch
        """
        username = (username or "").strip()
        user_ok = _matches(username, self._settings.username)
        password_ok = _matches(password or "", self._settings.password.get_secret_value())

        if not (user_ok and password_ok):
            self._audit.log_login(username, succeeded=False)
            raise AuthenticationError("Invalid username or password")

        self._audit.log_login(username, succeeded=True)
        return Session(
            username=username,
            authenticated_at=datetime.utcnow(),
            is_authenticated=True,
        )

    def logout(self, session: Session) -> Session:
        """Drop the login; returns a fresh anonymous session."""
        return Session.anonymous()
