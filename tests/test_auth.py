"""Tests for the login gate."""

import pytest
from pydantic import SecretStr

from src.audit import AuditLogger
from src.auth import AuthenticationError, Authenticator, Session, require_authenticated
from src.config import AuthSettings
from src.models.audit import AuditEventType


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def authenticator(audit_logger):
    settings = AuthSettings(username="admin", password=SecretStr("s3cret"))
    return Authenticator(settings, audit_logger)


class TestAuthenticator:
    """Tests for Authenticator.login."""

    def test_login_success(self, authenticator, audit_logger):
        session = authenticator.login("admin", "s3cret")
        assert session.is_authenticated
        assert session.username == "admin"
        assert session.authenticated_at is not None
        assert audit_logger.history[-1].event_type == AuditEventType.LOGIN_SUCCEEDED

    def test_username_is_trimmed(self, authenticator):
        assert authenticator.login("  admin ", "s3cret").is_authenticated

    @pytest.mark.parametrize("username,password", [
        ("admin", "wrong"),
        ("other", "s3cret"),
        ("", ""),
        (None, None),
    ])
    def test_login_failure(self, authenticator, audit_logger, username, password):
        with pytest.raises(AuthenticationError):
            authenticator.login(username, password)
        assert audit_logger.history[-1].event_type == AuditEventType.LOGIN_FAILED

    def test_failed_login_does_not_log_password(self, authenticator, audit_logger):
        with pytest.raises(AuthenticationError):
            authenticator.login("admin", "guess")
        assert "guess" not in str(audit_logger.history[-1].to_log_dict())

    def test_logout_returns_anonymous(self, authenticator):
        session = authenticator.login("admin", "s3cret")
        assert authenticator.logout(session).is_authenticated is False


class TestSession:
    """Tests for the explicit session value."""

    def test_anonymous(self):
        session = Session.anonymous()
        assert session.is_authenticated is False
        assert session.username is None

    def test_sessions_have_distinct_ids(self):
        assert Session.anonymous().session_id != Session.anonymous().session_id

    def test_require_authenticated(self, authenticator):
        session = authenticator.login("admin", "s3cret")
        assert require_authenticated(session) is session
        with pytest.raises(AuthenticationError):
            require_authenticated(Session.anonymous())
        with pytest.raises(AuthenticationError):
            require_authenticated(None)
