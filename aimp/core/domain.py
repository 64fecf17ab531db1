# =============================================================================
# AIMP v1.0.0 -- TRUST MOTION CORE
# File:   aimp/core/domain.py
# =============================================================================
#
# SCOPE
# -----
# Enumerations and frozen value types shared by every component of the core:
#   - vocabulary enums (grades, statuses, tiers, personas, pulse speeds ...)
#   - TrustMathematics  -- upstream trust snapshot attached to a record
#   - SourceRecord      -- one decision / chat message / transaction
#   - MotionPreference  -- injected reduced-motion capability
#   - DerivedPresentationParams -- pipeline output
#
# No computation beyond input normalisation lives here.
#
# NORMALISATION PHILOSOPHY
# ------------------------
# This module sits on the UI hot path. Nothing in it raises on bad data.
# Every numeric field is normalised in __post_init__ in this fixed order:
#
#   N1  Finiteness -- NaN collapses to the field's floor; +Inf/-Inf clamp.
#   N2  Range      -- values are clamped into their documented interval.
#   N3  Enum       -- unknown strings fall back to a documented default
#                     (only in SourceRecord.from_feed; constructors expect
#                     enum members).
#
# Contrast with aimp.config, where invalid configuration raises.
#
# DETERMINISM CONSTRAINTS
# -----------------------
# DET-01  No stochastic operations.
# DET-02  No datetime.now() / time.time(). Evaluation instants are supplied
#         by the caller.
# DET-03  All dataclasses are frozen; normalisation uses object.__setattr__
#         once, inside __post_init__.
# =============================================================================

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from enum import Enum, unique
from typing import Any, Dict, Mapping, Optional


# =============================================================================
# SECTION 1 -- ENUMERATIONS
# =============================================================================

@unique
class TrustGrade(str, Enum):
    """Human-readable trust classification. Ordered best to worst."""
    EXCELLENT = "excellent"
    GOOD      = "good"
    FAIR      = "fair"
    POOR      = "poor"
    SUSPECT   = "suspect"


@unique
class OperationalStatus(str, Enum):
    """Discrete health state of a decision or process. Derived, never stored."""
    OPTIMAL     = "optimal"
    NOMINAL     = "nominal"
    DEGRADED    = "degraded"
    MAINTENANCE = "maintenance"
    FAULT       = "fault"


@unique
class HealthCategory(str, Enum):
    """
    Coarse four-value vocabulary for dense displays (sensor grids, health
    dots). Every OperationalStatus maps to exactly one category; OFFLINE is
    reserved for the absence of any status.
    """
    HEALTHY  = "healthy"
    DEGRADED = "degraded"
    CRITICAL = "critical"
    OFFLINE  = "offline"


@unique
class FreshnessTier(str, Enum):
    CRITICAL = "critical"
    WARNING  = "warning"
    NORMAL   = "normal"
    STALE    = "stale"


@unique
class AgentPersona(str, Enum):
    OPERATIONS = "operations"
    MARKETS    = "markets"
    SENTINEL   = "sentinel"
    GOVERNOR   = "governor"


@unique
class PulseSpeed(str, Enum):
    """Breathing cadence of a status indicator. NONE means steady."""
    NONE   = "none"
    SLOW   = "slow"
    MEDIUM = "medium"
    FAST   = "fast"


@unique
class Impact(str, Enum):
    LOW      = "low"
    MEDIUM   = "medium"
    HIGH     = "high"
    CRITICAL = "critical"


@unique
class GovernanceState(str, Enum):
    """
    Policy enforcement state for the domain-specific composition layer.

    ENFORCING -- policy actively applied; rendered in the neutral governance tone.
    VOTING    -- decision under vote; steady medium pulse.
    COMPLIANT -- no override.
    VIOLATED  -- policy breach; fast pulse.
    """
    ENFORCING = "enforcing"
    VOTING    = "voting"
    COMPLIANT = "compliant"
    VIOLATED  = "violated"


@unique
class SystemState(str, Enum):
    """
    Global system state feeding the emergency-override layer.

    EMERGENCY forces the override opacity and desaturation.
    PAUSED freezes motion (zero duration) without touching opacity.
    """
    NORMAL    = "normal"
    DEGRADED  = "degraded"
    EMERGENCY = "emergency"
    PAUSED    = "paused"


@unique
class GradePolicy(str, Enum):
    """
    Which confidence value a call site derives the trust grade from.

    RAW     -- the upstream trust_grade label when present, else the
               undecayed trust score.
    DECAYED -- the age-decayed displayed confidence.

    The two policies give different labels for old records. Call sites pick
    one explicitly; the pipeline default is RAW.
    """
    RAW     = "raw"
    DECAYED = "decayed"


@unique
class TransactionStatus(str, Enum):
    SUCCESS = "success"
    PENDING = "pending"
    FAILED  = "failed"


@unique
class AgentHealthStatus(str, Enum):
    ONLINE   = "online"
    THINKING = "thinking"
    ERROR    = "error"
    OFFLINE  = "offline"


# =============================================================================
# SECTION 2 -- INTERNAL NORMALISATION HELPERS
# =============================================================================

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})


def _clamp_float(value: Any, lo: float, hi: float, nan_value: float) -> float:
    """N1 + N2: coerce to float and clamp into [lo, hi]. NaN -> nan_value."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return nan_value
    if math.isnan(v):
        return nan_value
    return max(lo, min(hi, v))


def _non_negative_float(value: Any) -> float:
    """N1 + N2: coerce to a finite float >= 0. NaN and -Inf -> 0.0."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(v) or v < 0.0:
        return 0.0
    return v


def _non_negative_int(value: Any) -> int:
    """N1 + N2: coerce to an int >= 0. Non-finite or unparseable -> 0."""
    if isinstance(value, bool):
        return int(value)
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(v) or v < 0.0:
        return 0
    return int(v)


def _coerce_flag(value: Any) -> bool:
    """Feed boolean. Strings are parsed, so "false" and "0" read as False."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _enum_or_default(enum_cls, value: Any, default):
    """N3: parse an enum member from a string; unknown -> default."""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


def _pick(payload: Mapping[str, Any], *keys: str) -> Any:
    """Return the first key present in payload (snake_case or camelCase)."""
    for key in keys:
        if key in payload:
            return payload[key]
    return None


# =============================================================================
# SECTION 3 -- TRUST MATHEMATICS
# =============================================================================

@dataclass(frozen=True)
class TrustMathematics:
    """
    Quantified confidence attached to a record by its upstream producer.

    Normalisation (never raises):
      - confidence_score:  clamped to [0, 100]; NaN -> 0.
      - witness_count:     int >= 0.
      - deviation_sigma:   float >= 0; +Inf is kept (all caps saturate).
      - exceeds_threshold: coerced to bool ("false" strings read as False).
      - trust_grade:       upstream label, kept as supplied. None when the
                           producer attached no label; consumers derive one
                           with aimp.core.trust_score.grade_for_score().
    """

    confidence_score:  float
    witness_count:     int = 0
    deviation_sigma:   float = 0.0
    exceeds_threshold: bool = False
    trust_grade:       Optional[TrustGrade] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "confidence_score",
            _clamp_float(self.confidence_score, 0.0, 100.0, 0.0),
        )
        object.__setattr__(self, "witness_count", _non_negative_int(self.witness_count))
        object.__setattr__(self, "deviation_sigma", _non_negative_float(self.deviation_sigma))
        object.__setattr__(self, "exceeds_threshold", _coerce_flag(self.exceeds_threshold))
        if self.trust_grade is not None and not isinstance(self.trust_grade, TrustGrade):
            object.__setattr__(
                self, "trust_grade",
                _enum_or_default(TrustGrade, self.trust_grade, None),
            )

    @classmethod
    def from_feed(cls, payload: Mapping[str, Any]) -> "TrustMathematics":
        """Build from a feed dict. Accepts camelCase or snake_case keys."""
        return cls(
            confidence_score=_pick(payload, "confidence_score", "confidenceScore"),
            witness_count=_pick(payload, "witness_count", "witnessCount") or 0,
            deviation_sigma=_pick(payload, "deviation_sigma", "deviationSigma") or 0.0,
            exceeds_threshold=_coerce_flag(
                _pick(payload, "exceeds_threshold", "exceedsThreshold")
            ),
            trust_grade=_enum_or_default(
                TrustGrade, _pick(payload, "trust_grade", "trustGrade"), None
            ),
        )


# =============================================================================
# SECTION 4 -- SOURCE RECORD
# =============================================================================

@dataclass(frozen=True)
class SourceRecord:
    """
    One decision, chat message or transaction produced by the external feed.

    Created once with an immutable timestamp and trust snapshot; the core
    never mutates it.

    Fields:
        id:                 Stable record identifier (memoisation key).
        timestamp:          ISO 8601 string. Parsed lazily; an unparseable
                            value makes the record infinitely old.
        agent:              Producing persona. None -> fallback calibration.
        confidence:         Optional raw confidence, clamped to [0, 100].
        trust_math:         Optional TrustMathematics snapshot.
        operational_status: Optional explicit status. When None it is
                            derived by the operational status mapper.
        impact:             Optional impact class.
        is_in_maintenance:  Maintenance flag. Feed strings such as "false"
                            are parsed, not truth-tested.
        has_constraint_violation:
                            Optional policy-constraint flag for the
                            governance layer. None means no signal.
    """

    id:                 str
    timestamp:          str
    agent:              Optional[AgentPersona] = None
    confidence:         Optional[float] = None
    trust_math:         Optional[TrustMathematics] = None
    operational_status: Optional[OperationalStatus] = None
    impact:             Optional[Impact] = None
    is_in_maintenance:  bool = False
    has_constraint_violation: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.confidence is not None:
            object.__setattr__(
                self, "confidence",
                _clamp_float(self.confidence, 0.0, 100.0, 0.0),
            )
        object.__setattr__(self, "is_in_maintenance", _coerce_flag(self.is_in_maintenance))
        if self.has_constraint_violation is not None:
            object.__setattr__(
                self, "has_constraint_violation",
                _coerce_flag(self.has_constraint_violation),
            )

    @property
    def effective_confidence(self) -> Optional[float]:
        """
        The raw confidence used for status mapping.

        The explicit record confidence wins; otherwise the trust snapshot's
        score; otherwise None.
        """
        if self.confidence is not None:
            return self.confidence
        if self.trust_math is not None:
            return self.trust_math.confidence_score
        return None

    @property
    def trust_score(self) -> Optional[float]:
        """
        The score behind the displayed confidence and the raw grade.

        The trust snapshot's score wins; the record confidence is the
        fallback when no snapshot is attached.
        """
        if self.trust_math is not None:
            return self.trust_math.confidence_score
        return self.confidence

    @classmethod
    def from_feed(cls, payload: Mapping[str, Any]) -> "SourceRecord":
        """
        Build a record from a raw feed dict without ever raising on content.

        Unknown enum strings fall back to None (persona, status, impact).
        A missing id becomes the timestamp string.
        """
        trust_payload = _pick(payload, "trust_math", "trustMath")
        trust_math = (
            TrustMathematics.from_feed(trust_payload)
            if isinstance(trust_payload, Mapping) else None
        )
        timestamp = str(_pick(payload, "timestamp") or "")
        record_id = _pick(payload, "id")
        return cls(
            id=str(record_id) if record_id is not None else timestamp,
            timestamp=timestamp,
            agent=_enum_or_default(AgentPersona, _pick(payload, "agent"), None),
            confidence=_pick(payload, "confidence"),
            trust_math=trust_math,
            operational_status=_enum_or_default(
                OperationalStatus,
                _pick(payload, "operational_status", "operationalStatus"),
                None,
            ),
            impact=_enum_or_default(Impact, _pick(payload, "impact"), None),
            is_in_maintenance=_coerce_flag(
                _pick(payload, "is_in_maintenance", "isInMaintenance")
            ),
            has_constraint_violation=_pick(
                payload, "has_constraint_violation", "hasConstraintViolation"
            ),
        )


# =============================================================================
# SECTION 5 -- MOTION PREFERENCE
# =============================================================================

@dataclass(frozen=True)
class MotionPreference:
    """
    User motion preference, passed into every evaluation.

    reduce_motion -- True collapses every animation duration to the
                     configured instant value.
    """
    reduce_motion: bool = False


# =============================================================================
# SECTION 6 -- DERIVED PRESENTATION PARAMETERS (OUTPUT CONTRACT)
# =============================================================================

@dataclass(frozen=True)
class DerivedPresentationParams:
    """
    Immutable output of one pipeline evaluation.

    Recomputed on every evaluation; never persisted, never shared between
    callers, never mutated.

    Attributes:
        opacity:              In [0.5, 1.0].
        duration_multiplier:  Trust-derived motion slowdown. >= 1.0.
        duration_seconds:     Final animation duration (base duration scaled
                              by multiplier, freshness and persona; collapsed
                              under reduced motion; 0 when paused).
        pulse_speed:          Steady-state pulse cadence.
        should_alert:         True -> consumer plays alert_repetitions pulses
                              then settles at pulse_speed.
        alert_repetitions:    Bounded pulse count; 0 when not alerting.
        health_category:      Coarse health vocabulary.
        operational_status:   Status the category was derived from.
        trust_grade:          Grade under the call site's GradePolicy.
        freshness_tier:       Age bucket.
        age_seconds:          Clamped record age (+inf when unparseable).
        displayed_confidence: Age-decayed confidence; None when the record
                              carries no confidence at all.
        desaturate:           Emergency desaturation flag.
        neutral_tone:         Governance neutral-colour flag.
        motion_paused:        System paused; duration_seconds is 0.
        easing_id:            Persona easing identity.
    """

    opacity:              float
    duration_multiplier:  float
    duration_seconds:     float
    pulse_speed:          PulseSpeed
    should_alert:         bool
    alert_repetitions:    int
    health_category:      HealthCategory
    operational_status:   OperationalStatus
    trust_grade:          TrustGrade
    freshness_tier:       FreshnessTier
    age_seconds:          float
    displayed_confidence: Optional[float]
    desaturate:           bool
    neutral_tone:         bool
    motion_paused:        bool
    easing_id:            str

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with enum members replaced by their string values."""
        out: Dict[str, Any] = {}
        for key, value in asdict(self).items():
            out[key] = value.value if isinstance(value, Enum) else value
        return out

    def to_canonical_json(self) -> bytes:
        """
        Deterministic serialisation: sorted keys, compact separators, ASCII.
        Identical inputs produce byte-identical output.
        """
        return json.dumps(
            self.to_dict(), sort_keys=True, separators=(",", ":")
        ).encode("ascii")


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
]
