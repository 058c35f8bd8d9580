"""Tests for AdminService."""

import pytest

from chatrelay.services import AdminService, Session


@pytest.fixture
def service():
    return AdminService(admin_password="midnight2025")


def test_validate_password_correct(service):
    """Test the configured secret validates."""
    assert service.validate_password("midnight2025")


@pytest.mark.parametrize("password", ["", "midnight2024", "MIDNIGHT2025", "midnight2025 "])
def test_validate_password_wrong(service, password):
    """Test near misses are rejected."""
    assert not service.validate_password(password)


def test_authenticate_grants_admin(service):
    """Test a matching secret flips the session to admin."""
    session = Session(sid="abc")

    assert service.authenticate(session, "midnight2025") is True
    assert session.is_admin is True
    assert service.is_authorized(session)


def test_authenticate_wrong_password_leaves_session(service):
    """Test a wrong secret keeps the session unprivileged."""
    session = Session(sid="abc")

    assert service.authenticate(session, "nope") is False
    assert session.is_admin is False
    assert not service.is_authorized(session)


def test_admin_flag_is_monotonic(service):
    """Test a later failed attempt does not revoke admin rights."""
    session = Session(sid="abc")
    service.authenticate(session, "midnight2025")

    assert service.authenticate(session, "wrong") is False
    assert session.is_admin is True


def test_is_authorized_without_session(service):
    """Test unknown connections are never authorized."""
    assert not service.is_authorized(None)


def test_password_never_logged(service, caplog):
    """Test failed attempts do not leak either secret into the logs."""
    service.authenticate(Session(sid="abc"), "guess-123")

    assert "midnight2025" not in caplog.text
    assert "guess-123" not in caplog.text


def test_unencodable_password_is_rejected(service):
    """Test a lone surrogate is treated as a wrong password, not an error."""
    session = Session(sid="abc")

    assert service.validate_password("\ud800") is False
    assert service.authenticate(session, "\ud800") is False
    assert session.is_admin is False
