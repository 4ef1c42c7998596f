"""Domain models for login sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TokenState(Enum):
    """Lifecycle of a session token.

    ACTIVE becomes EXPIRED purely with the passage of time. EXPIRED becomes
    EVICTED only when a validation observes it.
    """

    ACTIVE = "active"
    EXPIRED = "expired"
    EVICTED = "evicted"


@dataclass(frozen=True)
class SessionEntry:
    """An issued token and its absolute expiry."""

    token: str
    expires_at: datetime

    def state_at(self, now: datetime) -> TokenState:
        """Return ACTIVE while now is strictly before the expiry."""
        if now < self.expires_at:
            return TokenState.ACTIVE
        return TokenState.EXPIRED
