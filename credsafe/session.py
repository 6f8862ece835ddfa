"""Session Guard: master passphrase recency tracking.

A Session remembers the master passphrase and when it was last supplied.
It only reports expiry; prompting again is up to the caller, which must
check ``is_expired`` before every store operation.
"""
import time
import logging
from typing import Callable, Optional

from .vault.config import DEFAULT_SESSION_TIMEOUT

logger = logging.getLogger("credsafe.session")


class Session:
    """In-memory master passphrase with an inactivity window.

    ``clock`` returns seconds as a float; it defaults to ``time.monotonic``
    so wall-clock adjustments cannot extend a session.
    """

    def __init__(
        self,
        passphrase: str,
        issued_at: float,
        timeout: int = DEFAULT_SESSION_TIMEOUT,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._passphrase = passphrase
        self._issued_at = issued_at
        self._timeout = timeout
        self._clock = clock

    def __repr__(self) -> str:
        # never expose the passphrase
        return (
            f'<Session [issued_at:{self._issued_at}, timeout:{self._timeout}]>'
        )

    @classmethod
    def supply(
        cls,
        passphrase: str,
        timeout: int = DEFAULT_SESSION_TIMEOUT,
        clock: Callable[[], float] = time.monotonic
    ) -> "Session":
        """Start a session from a freshly entered passphrase."""
        session = cls(passphrase, clock(), timeout=timeout, clock=clock)
        logger.debug("Passphrase supplied, session valid for %ds", timeout)
        return session

    def resupply(self, passphrase: str) -> None:
        """Accept a re-entered passphrase and restart the window."""
        self._passphrase = passphrase
        self._issued_at = self._clock()
        logger.debug("Passphrase re-supplied")

    @property
    def passphrase(self) -> str:
        return self._passphrase

    @property
    def issued_at(self) -> float:
        return self._issued_at

    @property
    def timeout(self) -> int:
        return self._timeout

    def is_expired(self, now: Optional[float] = None) -> bool:
        """True once more than ``timeout`` seconds passed since the last supply."""
        if now is None:
            now = self._clock()
        return now - self._issued_at > self._timeout

    def remaining(self, now: Optional[float] = None) -> float:
        """Seconds left before expiry, never negative."""
        if now is None:
            now = self._clock()
        return max(0.0, self._timeout - (now - self._issued_at))
