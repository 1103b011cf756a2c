"""Named network presets for laggy.

Values approximate real-world conditions (browser devtools throttling
profiles, WebPageTest connectivity profiles).  They are illustrative, not
calibrated models.
"""

from __future__ import annotations

from types import MappingProxyType

from laggy.models import Preset, PresetSettings


class ConfigError(ValueError):
    """Raised for invalid user-supplied configuration."""


class UnknownPresetError(ConfigError):
    """Raised when a preset name is not in the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.valid_names = list(PRESETS)
        super().__init__(
            f"Unknown preset: '{name}'. Valid presets: {', '.join(self.valid_names)}"
        )


def _preset(name: str, description: str, **settings: object) -> Preset:
    return Preset(
        name=name,
        description=description,
        config=PresetSettings(**settings),  # type: ignore[arg-type]
    )


_CATALOG: dict[str, Preset] = {
    preset.name: preset
    for preset in (
        _preset("5g", "Fast 5G connection", latency_ms=10, jitter_ms=5),
        _preset("4g", "Standard 4G/LTE", latency_ms=50, jitter_ms=20),
        _preset(
            "fast-3g", "Fast 3G connection", latency_ms=150, jitter_ms=50, fail_rate=0.01
        ),
        _preset(
            "slow-3g",
            "Slow 3G connection",
            latency_ms=400,
            jitter_ms=100,
            fail_rate=0.02,
            timeout_rate=0.01,
        ),
        _preset(
            "edge",
            "EDGE/2G network",
            latency_ms=800,
            jitter_ms=200,
            fail_rate=0.05,
            timeout_rate=0.02,
        ),
        _preset("wifi", "Home WiFi", latency_ms=20, jitter_ms=10),
        _preset(
            "wifi-poor",
            "Coffee shop WiFi",
            latency_ms=100,
            jitter_ms=80,
            fail_rate=0.03,
            timeout_rate=0.01,
        ),
        _preset("offline", "No network connection", fail_rate=1.0, fail_codes=[0]),
        _preset(
            "flaky",
            "Unreliable connection with random failures",
            latency_ms=200,
            jitter_ms=300,
            fail_rate=0.3,
            timeout_rate=0.1,
        ),
        _preset(
            "chaos",
            "Maximum chaos for stress testing",
            latency_ms=500,
            jitter_ms=1500,
            fail_rate=0.2,
            timeout_rate=0.1,
        ),
        _preset(
            "lie-fi",
            "Connected but barely usable",
            latency_ms=2000,
            jitter_ms=500,
            fail_rate=0.1,
            timeout_rate=0.3,
        ),
    )
}

PRESETS = MappingProxyType(_CATALOG)


def get_preset(name: str) -> Preset:
    """Return the preset called *name*.

    Raises:
        UnknownPresetError: If *name* is not in the catalog.
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise UnknownPresetError(name) from None


def list_presets() -> list[Preset]:
    """Return every preset in catalog order."""
    return list(PRESETS.values())


def describe_preset(preset: Preset) -> str:
    """Render the non-zero settings of *preset*, e.g. ``latency: 400ms, fail: 2%``."""
    cfg = preset.config
    parts: list[str] = []
    if cfg.latency_ms:
        parts.append(f"latency: {cfg.latency_ms}ms")
    if cfg.jitter_ms:
        parts.append(f"jitter: {cfg.jitter_ms}ms")
    if cfg.fail_rate:
        parts.append(f"fail: {cfg.fail_rate * 100:.0f}%")
    if cfg.timeout_rate:
        parts.append(f"timeout: {cfg.timeout_rate * 100:.0f}%")
    if cfg.fail_codes is not None:
        parts.append(f"codes: {','.join(str(code) for code in cfg.fail_codes)}")
    return ", ".join(parts)


__all__ = [
    "ConfigError",
    "PRESETS",
    "UnknownPresetError",
    "describe_preset",
    "get_preset",
    "list_presets",
]
