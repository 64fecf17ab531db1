# aimp/config/__init__.py
# Version: 1.0.0

from aimp.config.exceptions import (
    ConfigError,
    ConfigNumericalError,
    ConfigValidationError,
    ConfigConsistencyError,
    ConfigLoadError,
)
from aimp.config.settings import (
    FreshnessThresholds,
    DecayParameters,
    GradeCutoffs,
    StatusRules,
    StatusProfile,
    EasingCurve,
    PersonaProfile,
    MotionTimings,
    EngineConfig,
    default_engine_config,
    DEFAULT_ENGINE_CONFIG,
)
from aimp.config.loader import (
    DEFAULT_MANIFEST_PATH,
    LoadedConfig,
    engine_config_from_dict,
    load_engine_config,
    manifest_hash,
)

__all__ = [
    "ConfigError",
    "ConfigNumericalError",
    "ConfigValidationError",
    "ConfigConsistencyError",
    "ConfigLoadError",
    "FreshnessThresholds",
    "DecayParameters",
    "GradeCutoffs",
    "StatusRules",
    "StatusProfile",
    "EasingCurve",
    "PersonaProfile",
    "MotionTimings",
    "EngineConfig",
    "default_engine_config",
    "DEFAULT_ENGINE_CONFIG",
    "DEFAULT_MANIFEST_PATH",
    "LoadedConfig",
    "engine_config_from_dict",
    "load_engine_config",
    "manifest_hash",
]
