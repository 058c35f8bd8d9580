"""Admin access control for room administration."""

import hmac
import logging

from .session_service import Session

log = logging.getLogger(__name__)


class AdminService:
    """Validates the shared admin secret and holds the per-session gate.

    Parameters
    ----------
    admin_password : str
        The shared secret from ``ChatRelayConfig.admin_password``
    """

    def __init__(self, admin_password: str):
        self._admin_password = admin_password

    def validate_password(self, password: str) -> bool:
        """Constant-time comparison against the configured secret."""
        try:
            candidate = password.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates can arrive over JSON but never match the secret.
            return False
        return hmac.compare_digest(candidate, self._admin_password.encode("utf-8"))

    def authenticate(self, session: Session, password: str) -> bool:
        """Grant admin rights to ``session`` if ``password`` matches.

        A failed attempt never revokes rights granted earlier.

        Returns
        -------
        bool
            True if the password matched
        """
        if not self.validate_password(password):
            log.warning(f"Failed admin authentication from session {session.sid}")
            return False
        session.grant_admin()
        log.info(f"Session {session.sid} authenticated as admin")
        return True

    def is_authorized(self, session: Session | None) -> bool:
        return session is not None and session.is_admin
