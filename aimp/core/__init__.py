# aimp/core/__init__.py
# Core canonical types for the trust motion core.
#
# Only dependency-free modules are re-exported here; aimp.config imports
# aimp.core.domain, so the computation modules (freshness, trust_score,
# temporal_decay, operational_status, persona, composition, batch) are
# imported from their own modules or from the top-level aimp package.

from aimp.core.domain import (
    TrustGrade,
    OperationalStatus,
    HealthCategory,
    FreshnessTier,
    AgentPersona,
    PulseSpeed,
    Impact,
    GovernanceState,
    SystemState,
    GradePolicy,
    TransactionStatus,
    AgentHealthStatus,
    TrustMathematics,
    SourceRecord,
    MotionPreference,
    DerivedPresentationParams,
)
from aimp.core.logging_layer import EventLogger, Event, EventFilter, LoggingError

__all__ = [
    "TrustGrade",
    "OperationalStatus",
    "HealthCategory",
    "FreshnessTier",
    "AgentPersona",
    "PulseSpeed",
    "Impact",
    "GovernanceState",
    "SystemState",
    "GradePolicy",
    "TransactionStatus",
    "AgentHealthStatus",
    "TrustMathematics",
    "SourceRecord",
    "MotionPreference",
    "DerivedPresentationParams",
    "EventLogger",
    "Event",
    "EventFilter",
    "LoggingError",
]
