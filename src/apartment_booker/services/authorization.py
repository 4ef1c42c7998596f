"""Request authorization against the shared password."""

import hmac
import logging
from dataclasses import dataclass

from apartment_booker.errors import AuthError
from apartment_booker.services.sessions import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class RequestAuthorizer:
    """Decides whether a request may proceed.

    An empty password disables authentication entirely. The calendar export
    is served without going through this class even when a password is set.
    """

    password: str
    sessions: SessionManager

    @property
    def enabled(self) -> bool:
        """Return True when a password is configured."""
        return bool(self.password)

    def is_authorized(self, token: str | None) -> bool:
        """Return True when the request may access protected resources."""
        if not self.enabled:
            return True
        return self.sessions.validate(token)

    def require(self, token: str | None) -> None:
        """Raise AuthError unless the token grants access."""
        if not self.is_authorized(token):
            raise AuthError("unauthorized")

    def login(self, candidate: str) -> str:
        """Exchange the shared password for a new session token."""
        if not hmac.compare_digest(
            candidate.strip().encode("utf-8"), self.password.encode("utf-8")
        ):
            logger.info("Rejected login attempt")
            raise AuthError("invalid password")
        token = self.sessions.create()
        logger.info("Opened new session")
        return token
