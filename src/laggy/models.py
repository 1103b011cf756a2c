"""Pydantic models for laggy."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_FAIL_CODES: tuple[int, ...] = (500, 502, 503)


def _clamp_rate(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


class LaggyConfig(BaseModel):
    """Tunable parameters for one chaos run.

    Rates are clamped into ``[0, 1]`` on construction so the engine can treat
    them as probabilities without further checks.  ``verbose`` and ``silent``
    only affect logging.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    latency_ms: int = Field(default=0, ge=0)
    jitter_ms: int = Field(default=0, ge=0)
    fail_rate: float = 0.0
    fail_codes: list[int] = Field(default_factory=lambda: list(DEFAULT_FAIL_CODES))
    timeout_rate: float = 0.0
    timeout_ms: int = Field(default=30_000, ge=0)
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    seed: int | None = None
    verbose: bool = False
    silent: bool = False

    @field_validator("fail_rate", "timeout_rate")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return _clamp_rate(value)


class PresetSettings(BaseModel):
    """Partial :class:`LaggyConfig` carried by a preset.

    Presets never scope targets or fix a seed, so only the impairment fields
    are available here.  Unset fields are ``None``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    latency_ms: int | None = Field(default=None, ge=0)
    jitter_ms: int | None = Field(default=None, ge=0)
    fail_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    fail_codes: list[int] | None = None
    timeout_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    timeout_ms: int | None = Field(default=None, ge=0)


class Preset(BaseModel):
    """A named, curated bundle of settings approximating a real network."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    config: PresetSettings


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


class DecisionKind(str, Enum):
    """What should happen to one intercepted request."""

    passthrough = "passthrough"
    delay = "delay"
    fail = "fail"
    timeout = "timeout"


class Passthrough(BaseModel):
    """Forward the request unmodified."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["passthrough"] = "passthrough"


class Delay(BaseModel):
    """Wait *delay_ms* milliseconds, then forward the request unmodified."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["delay"] = "delay"
    delay_ms: int = Field(ge=0)


class Fail(BaseModel):
    """Wait *delay_ms*, then fail the request with a synthetic error.

    A ``status_code`` of ``0`` is a connection-level failure: no HTTP response
    exists at all.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["fail"] = "fail"
    status_code: int
    message: str
    delay_ms: int = Field(default=0, ge=0)

    @property
    def is_network_error(self) -> bool:
        return self.status_code == 0


class Timeout(BaseModel):
    """Never forward the request; hold it for *hold_ms* or until cancelled."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["timeout"] = "timeout"
    hold_ms: int = Field(ge=0)


Decision = Annotated[
    Union[Passthrough, Delay, Fail, Timeout],
    Field(discriminator="kind"),
]


__all__ = [
    "DEFAULT_FAIL_CODES",
    "Decision",
    "DecisionKind",
    "Delay",
    "Fail",
    "LaggyConfig",
    "Passthrough",
    "Preset",
    "PresetSettings",
    "Timeout",
]
