"""Chaos decision engine for laggy."""

from __future__ import annotations

from collections.abc import Sequence

from laggy.models import (
    DEFAULT_FAIL_CODES,
    Decision,
    Delay,
    Fail,
    LaggyConfig,
    Timeout,
)
from laggy.rng import DeterministicRandom

CHAOS_PREFIX = "[laggy chaos]"

STATUS_REASONS: dict[int, str] = {
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}

# ---------------------------------------------------------------------------
# Custom exceptions
# ---------------------------------------------------------------------------


class ChaosError(RuntimeError):
    """Synthetic HTTP failure injected by laggy."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChaosNetworkError(ConnectionError):
    """Synthetic connection-level failure (failure code ``0``)."""


class ChaosTimeoutError(TimeoutError):
    """Raised when a request held by a timeout decision is released."""

    def __init__(self, hold_ms: int) -> None:
        super().__init__(f"{CHAOS_PREFIX} Request timed out after {hold_ms}ms")
        self.hold_ms = hold_ms


def is_chaos_message(message: str) -> bool:
    """Return True if *message* was produced by an injected failure."""
    return message.startswith(CHAOS_PREFIX)


def failure_message(status_code: int) -> str:
    """Return the marked message for a synthetic failure with *status_code*."""
    if status_code == 0:
        return f"{CHAOS_PREFIX} Network error: simulated offline"
    reason = STATUS_REASONS.get(status_code, f"HTTP Error {status_code}")
    return f"{CHAOS_PREFIX} {reason} (simulated failure)"


# ---------------------------------------------------------------------------
# ChaosEngine
# ---------------------------------------------------------------------------


class ChaosEngine:
    """Turn a :class:`LaggyConfig` into one :class:`Decision` per request.

    The engine holds no state besides the injected random source.  It never
    sleeps or performs I/O: callers apply the decision themselves.

    Checks run in a fixed order and short-circuit, each consuming draws only
    when reached:

    1. timeout -- the request is held and never forwarded;
    2. failure -- a status code is picked, then a delay is computed;
    3. delay  -- a delay is computed and the request forwarded.
    """

    def __init__(self, rng: DeterministicRandom | None = None) -> None:
        self.rng = rng if rng is not None else DeterministicRandom()

    def check_timeout(self, timeout_rate: float, timeout_ms: int) -> Timeout | None:
        """Return a :class:`Timeout` if the timeout check fires."""
        if not self.rng.trigger(timeout_rate):
            return None
        return Timeout(hold_ms=timeout_ms)

    def check_failure(
        self, fail_rate: float, fail_codes: Sequence[int]
    ) -> tuple[int, str] | None:
        """Return ``(status_code, message)`` if the failure check fires.

        The code is picked uniformly from *fail_codes*, falling back to
        ``500, 502, 503`` when the list is empty.
        """
        if not self.rng.trigger(fail_rate):
            return None
        codes = list(fail_codes) or list(DEFAULT_FAIL_CODES)
        status_code = codes[self.rng.next_int(0, len(codes) - 1)]
        return status_code, failure_message(status_code)

    def compute_delay(self, latency_ms: int, jitter_ms: int) -> int:
        """Return ``latency_ms`` plus a symmetric jitter, never below zero.

        When both inputs are non-positive no draw is consumed.
        """
        if latency_ms <= 0 and jitter_ms <= 0:
            return 0
        variance = self.rng.next_int(-jitter_ms, jitter_ms) if jitter_ms > 0 else 0
        return max(0, max(0, latency_ms) + variance)

    def decide(self, target: str, method: str, config: LaggyConfig) -> Decision:
        """Decide what happens to one in-scope request.

        Args:
            target: Canonical destination, usually the full URL.
            method: Request method, e.g. ``"GET"``.
            config: The run's :class:`LaggyConfig`.

        Returns:
            A :class:`Timeout`, :class:`Fail` or :class:`Delay`.  A zero
            :class:`Delay` means the request passes through untouched.
        """
        timeout = self.check_timeout(config.timeout_rate, config.timeout_ms)
        if timeout is not None:
            return timeout

        failure = self.check_failure(config.fail_rate, config.fail_codes)
        if failure is not None:
            status_code, message = failure
            delay_ms = self.compute_delay(config.latency_ms, config.jitter_ms)
            return Fail(status_code=status_code, message=message, delay_ms=delay_ms)

        return Delay(delay_ms=self.compute_delay(config.latency_ms, config.jitter_ms))


__all__ = [
    "CHAOS_PREFIX",
    "ChaosEngine",
    "ChaosError",
    "ChaosNetworkError",
    "ChaosTimeoutError",
    "STATUS_REASONS",
    "failure_message",
    "is_chaos_message",
]
