"""Shared pytest fixtures for the laggy test suite."""

from __future__ import annotations

import httpx
import pytest

from laggy.core import ChaosEngine
from laggy.interceptor import ChaosInterceptor
from laggy.models import LaggyConfig
from laggy.observer import InterceptRecorder
from laggy.rng import DeterministicRandom

# ---------------------------------------------------------------------------
# LaggyConfig fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def quiet_config() -> LaggyConfig:
    """Config that never delays, fails or times out."""
    return LaggyConfig()


@pytest.fixture()
def latency_config() -> LaggyConfig:
    """Config that always delays by exactly 20 ms."""
    return LaggyConfig(latency_ms=20, seed=42)


@pytest.fixture()
def fail_500_config() -> LaggyConfig:
    """Config that always fails with HTTP 500 and no delay."""
    return LaggyConfig(fail_rate=1.0, fail_codes=[500], seed=7)


@pytest.fixture()
def offline_config() -> LaggyConfig:
    """Config that always fails at the connection level."""
    return LaggyConfig(fail_rate=1.0, fail_codes=[0], seed=7)


@pytest.fixture()
def timeout_config() -> LaggyConfig:
    """Config that always times out after a short hold."""
    return LaggyConfig(timeout_rate=1.0, timeout_ms=30, seed=1)


# ---------------------------------------------------------------------------
# Core object fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def rng() -> DeterministicRandom:
    """A random source seeded with 42."""
    return DeterministicRandom(42)


@pytest.fixture()
def engine(rng: DeterministicRandom) -> ChaosEngine:
    """A ChaosEngine drawing from the seeded ``rng`` fixture."""
    return ChaosEngine(rng)


@pytest.fixture()
def recorder() -> InterceptRecorder:
    """A fresh InterceptRecorder instance."""
    return InterceptRecorder()


@pytest.fixture()
def make_interceptor(recorder: InterceptRecorder):
    """Factory building a ChaosInterceptor that shares the ``recorder`` fixture."""

    def _make(config: LaggyConfig) -> ChaosInterceptor:
        return ChaosInterceptor(config, recorder=recorder)

    return _make


# ---------------------------------------------------------------------------
# httpx fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def upstream() -> tuple[httpx.MockTransport, list[httpx.Request]]:
    """Mock upstream that answers 200 and remembers every forwarded request."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    return httpx.MockTransport(handler), seen
