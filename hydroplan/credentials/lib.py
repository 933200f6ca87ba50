"""Credential pool with round-robin selection and per-key rate limiting.

The pool owns one state record per credential behind a single lock. The
selector walks the pool round-robin, skipping keys that have failed or that
have used up their request allowance for the current window.

When every credential has been marked failed the pool arms a bulk reset.
The reset is applied lazily on the next pool access once the cooldown has
elapsed, so the pool heals itself without a background timer.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from hydroplan.core.log import mask_secret

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 60
DEFAULT_RATE_WINDOW = 60.0
DEFAULT_FAILURE_COOLDOWN = 60.0

Clock = Callable[[], float]


class ExhaustedCredentialsError(RuntimeError):
    """Raised when every credential is failed or rate limited."""


@dataclass
class _CredentialState:
    secret: str
    window_start: float
    failed: bool = False
    request_count: int = 0
    last_used: float | None = None


@dataclass(frozen=True)
class CredentialStatus:
    """Read-only view of one credential's state.

    Attributes:
        label: Masked credential prefix, safe to log.
        failed: Whether the credential is currently marked failed.
        request_count: Requests served in the current window.
        window_start: Clock time the current window began.
        last_used: Clock time of the last selection, if any.
    """

    label: str
    failed: bool
    request_count: int
    window_start: float
    last_used: float | None


class CredentialPool:
    """Ordered set of credentials with failure tracking.

    Args:
        credentials: API keys in preference order. Duplicates are collapsed.
        cooldown: Seconds after all credentials fail before they are reset.
        clock: Monotonic time source, injectable for tests.

    Raises:
        ValueError: If no non-blank credential is given.

    Example:
        >>> pool = CredentialPool(["key-a", "key-b"])
        >>> selector = CredentialSelector(pool)
        >>> selector.select_credential()
        'key-a'
    """

    def __init__(
        self,
        credentials: Iterable[str],
        *,
        cooldown: float = DEFAULT_FAILURE_COOLDOWN,
        clock: Clock = time.monotonic,
    ):
        unique = [c for c in dict.fromkeys(credentials) if c and c.strip()]
        if not unique:
            raise ValueError("At least one API key is required")

        self._clock = clock
        self._cooldown = cooldown
        self._lock = threading.Lock()
        now = clock()
        self._states = [_CredentialState(secret=c, window_start=now) for c in unique]
        self._by_secret = {state.secret: state for state in self._states}
        self._reset_at: float | None = None

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, credential: object) -> bool:
        return credential in self._by_secret

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def cooldown(self) -> float:
        return self._cooldown

    @contextmanager
    def locked(self) -> Iterator[list[_CredentialState]]:
        """Hold the pool lock and yield the live state records.

        Any pending bulk reset whose cooldown has elapsed is applied first.
        """
        with self._lock:
            self._apply_pending_reset()
            yield self._states

    def mark_failed(self, credential: str) -> None:
        """Mark a credential as failed.

        Raises:
            KeyError: If the credential is not in the pool.
        """
        with self._lock:
            self._apply_pending_reset()
            state = self._lookup(credential)
            if not state.failed:
                state.failed = True
                logger.warning(f"Marked API key {mask_secret(credential)} as failed")

            if self._reset_at is None and all(s.failed for s in self._states):
                self._reset_at = self._clock() + self._cooldown
                logger.error(
                    f"All {len(self._states)} API keys failed; "
                    f"resetting in {self._cooldown:g}s"
                )

    def reset(self, credential: str) -> None:
        """Clear the failed flag on a credential.

        Raises:
            KeyError: If the credential is not in the pool.
        """
        with self._lock:
            self._lookup(credential).failed = False
            self._reset_at = None

    def snapshot(self) -> list[CredentialStatus]:
        """Return the state of every credential, in pool order."""
        with self.locked() as states:
            return [
                CredentialStatus(
                    label=mask_secret(s.secret),
                    failed=s.failed,
                    request_count=s.request_count,
                    window_start=s.window_start,
                    last_used=s.last_used,
                )
                for s in states
            ]

    def _lookup(self, credential: str) -> _CredentialState:
        try:
            return self._by_secret[credential]
        except KeyError:
            raise KeyError(f"Unknown API key {mask_secret(credential)}") from None

    def _apply_pending_reset(self) -> None:
        if self._reset_at is None or self._clock() < self._reset_at:
            return
        for state in self._states:
            state.failed = False
        self._reset_at = None
        logger.info(f"Cooldown elapsed; reset {len(self._states)} API keys")


class CredentialSelector:
    """Round-robin credential selection with per-key rate limiting.

    Args:
        pool: Credentials to select from.
        rate_limit: Maximum selections per credential per window.
        window: Length of the rate window in seconds.
    """

    def __init__(
        self,
        pool: CredentialPool,
        *,
        rate_limit: int = DEFAULT_RATE_LIMIT,
        window: float = DEFAULT_RATE_WINDOW,
    ):
        if rate_limit < 1:
            raise ValueError(f"rate_limit must be at least 1, got {rate_limit}")
        self.pool = pool
        self.rate_limit = rate_limit
        self.window = window
        self._cursor = 0

    def select_credential(self) -> str:
        """Pick the next usable credential.

        Scans at most one full cycle starting from the cursor. The cursor
        advances on every step, so consecutive calls rotate through the pool.

        Returns:
            The selected credential.

        Raises:
            ExhaustedCredentialsError: If every credential is failed or at
                its rate ceiling.
        """
        with self.pool.locked() as states:
            now = self.pool.clock()
            for _ in range(len(states)):
                state = states[self._cursor]
                self._cursor = (self._cursor + 1) % len(states)

                if state.failed:
                    continue

                if now - state.window_start > self.window:
                    state.window_start = now
                    state.request_count = 0

                if state.request_count >= self.rate_limit:
                    continue

                state.request_count += 1
                state.last_used = now
                logger.debug(f"Selected API key {mask_secret(state.secret)}")
                return state.secret

        raise ExhaustedCredentialsError(
            "All API keys are either failed or rate limited"
        )

    def mark_failed(self, credential: str) -> None:
        """Shorthand for ``pool.mark_failed``."""
        self.pool.mark_failed(credential)


__all__ = [
    "DEFAULT_RATE_LIMIT",
    "DEFAULT_RATE_WINDOW",
    "DEFAULT_FAILURE_COOLDOWN",
    "CredentialPool",
    "CredentialSelector",
    "CredentialStatus",
    "ExhaustedCredentialsError",
]
