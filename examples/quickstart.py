"""laggy quickstart — working demonstrations of the main features.

Run this file directly to verify your installation:

    python examples/quickstart.py

No network access is needed: every demo talks to an in-process
``httpx.MockTransport`` standing in for a real server.
"""

from __future__ import annotations

import time

import httpx

from laggy import (
    ChaosError,
    ChaosInterceptor,
    ChaosTransport,
    LaggyConfig,
    get_preset,
    list_presets,
    merge_config,
    with_chaos,
)
from laggy.presets import describe_preset


def _upstream() -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(200, text="hello"))


# ---------------------------------------------------------------------------
# Demo 1 — Presets
# ---------------------------------------------------------------------------

def demo_presets() -> None:
    """List the catalog and build a config from a preset plus an override."""

    print("\n=== Demo 1: Presets ===")
    for preset in list_presets():
        print(f"  {preset.name:<10} {describe_preset(preset)}")

    config = merge_config(preset="slow-3g", overrides={"latency_ms": 50})
    print(f"  slow-3g with latency override: {config.latency_ms}ms ±{config.jitter_ms}ms")
    assert get_preset("slow-3g").config.latency_ms == 400
    assert config.latency_ms == 50


# ---------------------------------------------------------------------------
# Demo 2 — Seeded decisions
# ---------------------------------------------------------------------------

def demo_seeded_decisions() -> None:
    """The same seed yields the same sequence of decisions."""

    print("\n=== Demo 2: Reproducible decisions ===")
    config = merge_config(preset="flaky", overrides={"seed": 42})

    def kinds() -> list[str]:
        interceptor = ChaosInterceptor(config)
        return [interceptor.evaluate("https://api.example.com").kind for _ in range(10)]

    first, second = kinds(), kinds()
    print(f"  run 1: {first}")
    print(f"  run 2: {second}")
    assert first == second


# ---------------------------------------------------------------------------
# Demo 3 — httpx transport
# ---------------------------------------------------------------------------

def demo_transport() -> None:
    """Mount ChaosTransport on an httpx client."""

    print("\n=== Demo 3: httpx transport ===")
    config = LaggyConfig(latency_ms=100, fail_rate=0.5, fail_codes=[503], seed=7)
    interceptor = ChaosInterceptor(config)
    transport = ChaosTransport(interceptor, transport=_upstream())

    with httpx.Client(transport=transport) as client:
        for _ in range(4):
            start = time.perf_counter()
            response = client.get("https://api.example.com/users")
            elapsed_ms = (time.perf_counter() - start) * 1000
            print(f"  GET -> {response.status_code} after {elapsed_ms:.0f}ms")

    print(f"  summary: {interceptor.recorder.summary()}")


# ---------------------------------------------------------------------------
# Demo 4 — Decorator
# ---------------------------------------------------------------------------

def demo_decorator() -> None:
    """Wrap a non-HTTP call with with_chaos."""

    print("\n=== Demo 4: with_chaos decorator ===")
    interceptor = ChaosInterceptor(LaggyConfig(fail_rate=1.0, fail_codes=[502]))

    @with_chaos(interceptor, "grpc://inventory/Reserve", method="RPC")
    def reserve(item_id: str) -> bool:
        return True

    try:
        reserve("sku-1")
    except ChaosError as exc:
        print(f"  caught ChaosError status={exc.status_code}: {exc}")


if __name__ == "__main__":
    demo_presets()
    demo_seeded_decisions()
    demo_transport()
    demo_decorator()
    print("\nAll demos completed.")
