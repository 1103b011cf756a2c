"""Interception contract between transport adapters and the chaos engine."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Mapping

from laggy.config import DEFAULT_CONFIG, config_from_environ
from laggy.core import ChaosEngine, ChaosError, ChaosNetworkError, ChaosTimeoutError
from laggy.filtering import in_scope
from laggy.log import configure_logging, log_request
from laggy.models import Decision, Delay, Fail, LaggyConfig, Passthrough, Timeout
from laggy.observer import InterceptRecorder
from laggy.rng import DeterministicRandom

logger = logging.getLogger(__name__)


def describe_decision(decision: Decision) -> str:
    """Short human-readable action for log lines."""
    if isinstance(decision, Timeout):
        return f"timeout (holding {decision.hold_ms}ms)"
    if isinstance(decision, Fail):
        return f"fail {decision.status_code}"
    if isinstance(decision, Delay) and decision.delay_ms > 0:
        return f"delay {decision.delay_ms}ms"
    return "passthrough"


def _hold_seconds(hold_ms: int, timeout_s: float | None) -> float:
    seconds = hold_ms / 1000.0
    if timeout_s is not None:
        seconds = min(seconds, timeout_s)
    return max(0.0, seconds)


class HoldGroup:
    """Timeout holds in progress on threads, released together.

    Each hold waits on its own event, so releasing the group ends the holds
    that are running now and leaves later ones untouched.
    """

    def __init__(self) -> None:
        self._events: set[threading.Event] = set()
        self._lock = threading.Lock()

    def wait(self, seconds: float) -> None:
        event = threading.Event()
        with self._lock:
            self._events.add(event)
        try:
            event.wait(seconds)
        finally:
            with self._lock:
                self._events.discard(event)

    def release(self) -> None:
        with self._lock:
            for event in self._events:
                event.set()


class AsyncHoldGroup:
    """Asyncio counterpart of :class:`HoldGroup`, used from one event loop."""

    def __init__(self) -> None:
        self._events: set[asyncio.Event] = set()

    async def wait(self, seconds: float) -> None:
        event = asyncio.Event()
        self._events.add(event)
        try:
            await asyncio.wait_for(event.wait(), seconds)
        except TimeoutError:
            pass
        finally:
            self._events.discard(event)

    def release(self) -> None:
        for event in self._events:
            event.set()


class ChaosInterceptor:
    """Scope, decide and apply chaos for requests issued by an adapter.

    One interceptor owns the run's single :class:`DeterministicRandom`, so
    every adapter sharing it draws from the same sequence.

    Adapters call :meth:`evaluate` for a decision and then either apply it
    themselves (as the httpx transports do, to synthesize native responses)
    or hand it to :meth:`apply` / :meth:`apply_async`, which sleep and raise
    the laggy exceptions.
    """

    def __init__(
        self,
        config: LaggyConfig | None = None,
        rng: DeterministicRandom | None = None,
        recorder: InterceptRecorder | None = None,
    ) -> None:
        self.config = config if config is not None else DEFAULT_CONFIG
        self.rng = rng if rng is not None else DeterministicRandom(self.config.seed)
        self.engine = ChaosEngine(self.rng)
        self.recorder = recorder if recorder is not None else InterceptRecorder()
        self._holds = HoldGroup()
        self._async_holds = AsyncHoldGroup()

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ChaosInterceptor:
        """Build an interceptor from ``LAGGY_CONFIG``.

        Without the variable the default configuration is used, which lets
        every request through untouched.  Logging is configured from the
        decoded ``verbose`` / ``silent`` flags.
        """
        config = config_from_environ(environ)
        if config is None:
            config = DEFAULT_CONFIG
        configure_logging(verbose=config.verbose, silent=config.silent)
        interceptor = cls(config)
        logger.debug("Network chaos enabled")
        return interceptor

    # ------------------------------------------------------------------
    # Deciding
    # ------------------------------------------------------------------

    def in_scope(self, target: str) -> bool:
        """Return True if *target* passes the include/exclude filters."""
        return in_scope(target, self.config.include, self.config.exclude)

    def evaluate(self, target: str, method: str = "GET") -> Decision:
        """Return the decision for one request without applying it."""
        if not self.in_scope(target):
            decision: Decision = Passthrough()
            log_request(logger, method, target, "passthrough (excluded)")
        else:
            decision = self.engine.decide(target, method, self.config)
            log_request(logger, method, target, describe_decision(decision))
        self.recorder.record(method, target, decision)
        return decision

    # ------------------------------------------------------------------
    # Applying
    # ------------------------------------------------------------------

    def apply(
        self,
        decision: Decision,
        timeout_s: float | None = None,
        holds: HoldGroup | None = None,
    ) -> None:
        """Apply *decision* by blocking the calling thread.

        Returns normally for passthrough and delay decisions, after the delay.
        A timeout hold joins *holds* when given (adapters pass their own
        group), otherwise the interceptor's group released by :meth:`close`.

        Raises:
            ChaosTimeoutError: After a timeout decision's hold ends, which is
                at most *timeout_s* seconds, or earlier if its group is
                released.
            ChaosNetworkError: For a failure with code ``0``.
            ChaosError: For any other failure.
        """
        if isinstance(decision, Timeout):
            group = holds if holds is not None else self._holds
            group.wait(_hold_seconds(decision.hold_ms, timeout_s))
            raise ChaosTimeoutError(decision.hold_ms)
        if isinstance(decision, Fail):
            if decision.delay_ms > 0:
                time.sleep(decision.delay_ms / 1000.0)
            raise self._failure_exception(decision)
        if isinstance(decision, Delay) and decision.delay_ms > 0:
            time.sleep(decision.delay_ms / 1000.0)

    async def apply_async(
        self,
        decision: Decision,
        timeout_s: float | None = None,
        holds: AsyncHoldGroup | None = None,
    ) -> None:
        """Asyncio counterpart of :meth:`apply`.

        Releasing the hold group (:meth:`aclose` for the default one) or
        cancelling the awaiting task ends a timeout hold immediately.
        """
        if isinstance(decision, Timeout):
            group = holds if holds is not None else self._async_holds
            await group.wait(_hold_seconds(decision.hold_ms, timeout_s))
            raise ChaosTimeoutError(decision.hold_ms)
        if isinstance(decision, Fail):
            if decision.delay_ms > 0:
                await asyncio.sleep(decision.delay_ms / 1000.0)
            raise self._failure_exception(decision)
        if isinstance(decision, Delay) and decision.delay_ms > 0:
            await asyncio.sleep(decision.delay_ms / 1000.0)

    def intercept(self, target: str, method: str = "GET") -> Decision:
        """Evaluate and apply a decision for *target* in one call."""
        decision = self.evaluate(target, method)
        self.apply(decision)
        return decision

    async def intercept_async(self, target: str, method: str = "GET") -> Decision:
        """Asyncio counterpart of :meth:`intercept`."""
        decision = self.evaluate(target, method)
        await self.apply_async(decision)
        return decision

    def close(self) -> None:
        """Release the threads currently held by :meth:`apply`.

        Holds started later run their full course.
        """
        self._holds.release()

    async def aclose(self) -> None:
        """Release the tasks currently held by :meth:`apply_async`."""
        self._async_holds.release()

    @staticmethod
    def _failure_exception(decision: Fail) -> Exception:
        if decision.is_network_error:
            return ChaosNetworkError(decision.message)
        return ChaosError(decision.status_code, decision.message)


__all__ = ["AsyncHoldGroup", "ChaosInterceptor", "HoldGroup", "describe_decision"]
