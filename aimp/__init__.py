# aimp/__init__.py
# AIMP trust motion core.
#
# Standard import:
#   from aimp import SourceRecord, TrustMathematics, evaluate

__version__ = "1.0.0"

from aimp.core.domain import (
    AgentPersona,
    DerivedPresentationParams,
    GovernanceState,
    GradePolicy,
    Impact,
    MotionPreference,
    OperationalStatus,
    SourceRecord,
    SystemState,
    TrustMathematics,
)
from aimp.core.composition import CompositionPipeline, evaluate, evaluate_at_age
from aimp.config import (
    ConfigError,
    DEFAULT_ENGINE_CONFIG,
    EngineConfig,
    load_engine_config,
)
from aimp.runtime import EvaluationContext, MotionPreferenceSource

__all__ = [
    "__version__",
    "AgentPersona",
    "DerivedPresentationParams",
    "GovernanceState",
    "GradePolicy",
    "Impact",
    "MotionPreference",
    "OperationalStatus",
    "SourceRecord",
    "SystemState",
    "TrustMathematics",
    "CompositionPipeline",
    "evaluate",
    "evaluate_at_age",
    "ConfigError",
    "DEFAULT_ENGINE_CONFIG",
    "EngineConfig",
    "load_engine_config",
    "EvaluationContext",
    "MotionPreferenceSource",
]
