"""In-memory login sessions with absolute expiry."""

import logging
import secrets
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from apartment_booker.domain.sessions import SessionEntry, TokenState
from apartment_booker.errors import EntropyError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
DEFAULT_LIFETIME = timedelta(hours=24)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def generate_token(size: int = TOKEN_BYTES) -> str:
    """Return a URL-safe token built from ``size`` random bytes."""
    try:
        return secrets.token_urlsafe(size)
    except (OSError, NotImplementedError) as exc:
        raise EntropyError("random source unavailable") from exc


class SessionManager:
    """Issues and validates bearer tokens for the shared password.

    The token table lives only in memory and is guarded by one lock; each
    operation is a single critical section. Expired tokens are evicted lazily
    by the next ``validate`` that sees them, so a token that is never checked
    again stays in the table until the process exits.
    """

    def __init__(
        self,
        lifetime: timedelta = DEFAULT_LIFETIME,
        clock: Callable[[], datetime] = _utc_now,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        self._lifetime = lifetime
        self._clock = clock
        self._token_factory = token_factory
        self._lock = threading.Lock()
        self._sessions: dict[str, SessionEntry] = {}

    @property
    def lifetime(self) -> timedelta:
        """Return how long a freshly issued token stays valid."""
        return self._lifetime

    def __len__(self) -> int:
        """Return how many tokens are held, including expired ones not yet evicted."""
        with self._lock:
            return len(self._sessions)

    def create(self) -> str:
        """Issue a new token valid until now + lifetime."""
        token = self._token_factory()
        entry = SessionEntry(token=token, expires_at=self._clock() + self._lifetime)
        with self._lock:
            self._sessions[token] = entry
        return token

    def validate(self, token: str | None) -> bool:
        """Return True while the token is known and not yet expired."""
        return self._inspect(token) is TokenState.ACTIVE

    def _inspect(self, token: str | None) -> TokenState:
        if not token:
            return TokenState.EVICTED
        now = self._clock()
        with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return TokenState.EVICTED
            state = entry.state_at(now)
            if state is TokenState.EXPIRED:
                del self._sessions[token]
                logger.debug("Evicted expired session token")
                return TokenState.EVICTED
            return state
