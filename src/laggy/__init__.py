"""laggy: Network chaos injection for exercising HTTP clients under bad conditions."""

from laggy.config import (
    DEFAULT_CONFIG,
    config_from_environ,
    decode_config,
    encode_config,
    load_config_file,
    merge_config,
    resolve_config,
)
from laggy.core import (
    CHAOS_PREFIX,
    ChaosEngine,
    ChaosError,
    ChaosNetworkError,
    ChaosTimeoutError,
    failure_message,
    is_chaos_message,
)
from laggy.decorators import with_chaos
from laggy.filtering import in_scope
from laggy.interceptor import ChaosInterceptor
from laggy.models import (
    Decision,
    DecisionKind,
    Delay,
    Fail,
    LaggyConfig,
    Passthrough,
    Preset,
    PresetSettings,
    Timeout,
)
from laggy.observer import InterceptRecord, InterceptRecorder
from laggy.presets import (
    PRESETS,
    ConfigError,
    UnknownPresetError,
    get_preset,
    list_presets,
)
from laggy.rng import DeterministicRandom
from laggy.transports import AsyncChaosTransport, ChaosTransport

__version__ = "0.1.0"

__all__ = [
    "AsyncChaosTransport",
    "CHAOS_PREFIX",
    "ChaosEngine",
    "ChaosError",
    "ChaosInterceptor",
    "ChaosNetworkError",
    "ChaosTimeoutError",
    "ChaosTransport",
    "ConfigError",
    "DEFAULT_CONFIG",
    "Decision",
    "DecisionKind",
    "Delay",
    "DeterministicRandom",
    "Fail",
    "InterceptRecord",
    "InterceptRecorder",
    "LaggyConfig",
    "PRESETS",
    "Passthrough",
    "Preset",
    "PresetSettings",
    "Timeout",
    "UnknownPresetError",
    "config_from_environ",
    "decode_config",
    "encode_config",
    "failure_message",
    "get_preset",
    "in_scope",
    "is_chaos_message",
    "list_presets",
    "load_config_file",
    "merge_config",
    "resolve_config",
    "with_chaos",
]
