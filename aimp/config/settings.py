# =============================================================================
# AIMP v1.0.0 -- CONFIGURATION LAYER
# File:   aimp/config/settings.py
# =============================================================================
#
# SCOPE
# -----
# Frozen configuration dataclasses for the trust motion core, and the
# built-in default configuration assembled from aimp.utils.constants.
#
#   FreshnessThresholds  -- tier boundaries and duration modifiers
#   DecayParameters      -- per-minute decay rate and floor
#   GradeCutoffs         -- score -> TrustGrade lower bounds
#   StatusRules          -- score thresholds of the status decision table
#   StatusProfile        -- per-status motion constants
#   EasingCurve          -- named cubic-bezier curve
#   PersonaProfile       -- per-persona speed and easing
#   MotionTimings        -- base / instant durations, emergency opacity,
#                           alert repetitions, re-evaluation interval
#   EngineConfig         -- the aggregate passed to every evaluation
#
# VALIDATION PHILOSOPHY
# ---------------------
# Configuration is validated fail-fast in __post_init__, in this fixed
# order per dataclass:
#
#   V1  Finiteness   -- ConfigNumericalError(field_name, value).
#   V2  Sign / Range -- ConfigValidationError(field_name, value, constraint).
#   V3  Enum / Set   -- completeness of enum-keyed tables, known easing ids.
#   V4  Cross-field  -- ConfigConsistencyError.
#
# Nothing is clamped or defaulted silently here. Silent normalisation is
# reserved for record data on the evaluation hot path.
# =============================================================================

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from aimp.core.domain import AgentPersona, OperationalStatus
from aimp.utils import constants as C
from .exceptions import (
    ConfigConsistencyError,
    ConfigNumericalError,
    ConfigValidationError,
)


# =============================================================================
# SECTION 1 -- INTERNAL VALIDATION HELPERS
# =============================================================================

def _check_number(field_name: str, value: object) -> None:
    """V1 gate: value must be a real number (not bool) and finite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigValidationError(
            field_name=field_name, value=value, constraint="must be a number",
        )
    if not math.isfinite(value):
        raise ConfigNumericalError(field_name=field_name, value=value)


def _check_positive(field_name: str, value: float) -> None:
    if value <= 0.0:
        raise ConfigValidationError(
            field_name=field_name, value=value, constraint="must be > 0",
        )


def _check_non_negative(field_name: str, value: float) -> None:
    if value < 0.0:
        raise ConfigValidationError(
            field_name=field_name, value=value, constraint="must be >= 0",
        )


def _check_interval(
    field_name: str,
    value: float,
    lo: float,
    hi: float,
    lo_open: bool = False,
) -> None:
    """V2: value in [lo, hi], or (lo, hi] when lo_open."""
    inside = (lo < value <= hi) if lo_open else (lo <= value <= hi)
    if not inside:
        bracket = "(" if lo_open else "["
        raise ConfigValidationError(
            field_name=field_name,
            value=value,
            constraint="must be in " + bracket + repr(lo) + ", " + repr(hi) + "]",
        )


def _check_strictly_ascending(names: Tuple[str, ...], values: Tuple[float, ...],
                              description: str) -> None:
    """V4: values[i] < values[i+1] for every adjacent pair."""
    for i in range(len(values) - 1):
        if not values[i] < values[i + 1]:
            raise ConfigConsistencyError(
                field_a=names[i],
                value_a=values[i],
                field_b=names[i + 1],
                value_b=values[i + 1],
                invariant_description=description,
            )


# =============================================================================
# SECTION 2 -- FRESHNESS / DECAY / GRADES
# =============================================================================

@dataclass(frozen=True)
class FreshnessThresholds:
    """
    Three ascending thresholds partitioning [0, inf) into four tiers.

      [0, critical_sec)            -> CRITICAL  (modifier[0])
      [critical_sec, warning_sec)  -> WARNING   (modifier[1])
      [warning_sec, stale_sec]     -> NORMAL    (modifier[2])
      (stale_sec, inf)             -> STALE     (modifier[3])
    """

    critical_sec:       float = C.FRESHNESS_CRITICAL_SEC
    warning_sec:        float = C.FRESHNESS_WARNING_SEC
    stale_sec:          float = C.FRESHNESS_STALE_SEC
    duration_modifiers: Tuple[float, float, float, float] = C.FRESHNESS_DURATION_MODIFIERS

    def __post_init__(self) -> None:
        for fname in ("critical_sec", "warning_sec", "stale_sec"):
            value = getattr(self, fname)
            _check_number("freshness." + fname, value)
            _check_positive("freshness." + fname, value)

        mods = tuple(self.duration_modifiers)
        if len(mods) != 4:
            raise ConfigValidationError(
                field_name="freshness.duration_modifiers",
                value=self.duration_modifiers,
                constraint="must hold exactly 4 values",
            )
        for i, m in enumerate(mods):
            fname = "freshness.duration_modifiers[" + str(i) + "]"
            _check_number(fname, m)
            if m < 1.0:
                raise ConfigValidationError(
                    field_name=fname, value=m, constraint="must be >= 1.0",
                )
        object.__setattr__(self, "duration_modifiers", tuple(float(m) for m in mods))

        _check_strictly_ascending(
            ("freshness.critical_sec", "freshness.warning_sec", "freshness.stale_sec"),
            (self.critical_sec, self.warning_sec, self.stale_sec),
            "freshness thresholds must be strictly ascending",
        )


@dataclass(frozen=True)
class DecayParameters:
    """rate_per_minute in (0, 1]; floor in [0, 1]. rate 1.0 disables decay."""

    rate_per_minute: float = C.DECAY_RATE_PER_MINUTE
    floor:           float = C.DECAY_FLOOR

    def __post_init__(self) -> None:
        _check_number("decay.rate_per_minute", self.rate_per_minute)
        _check_number("decay.floor", self.floor)
        _check_interval("decay.rate_per_minute", self.rate_per_minute, 0.0, 1.0, lo_open=True)
        _check_interval("decay.floor", self.floor, 0.0, 1.0)


@dataclass(frozen=True)
class GradeCutoffs:
    """
    Inclusive lower bounds on the raw confidence score.
    poor_min < fair_min < good_min < excellent_min, all in [0, 100].
    """

    excellent_min: float = C.GRADE_EXCELLENT_MIN
    good_min:      float = C.GRADE_GOOD_MIN
    fair_min:      float = C.GRADE_FAIR_MIN
    poor_min:      float = C.GRADE_POOR_MIN

    def __post_init__(self) -> None:
        names = ("poor_min", "fair_min", "good_min", "excellent_min")
        for fname in names:
            value = getattr(self, fname)
            _check_number("grades." + fname, value)
            _check_interval("grades." + fname, value, 0.0, 100.0)
        _check_strictly_ascending(
            tuple("grades." + n for n in names),
            tuple(getattr(self, n) for n in names),
            "grade cutoffs must be strictly ascending from poor to excellent",
        )


# =============================================================================
# SECTION 3 -- OPERATIONAL STATUS
# =============================================================================

@dataclass(frozen=True)
class StatusRules:
    """
    Score thresholds of the operational status decision table.
    fault_below <= nominal_min < optimal_min.
    """

    fault_below: float = C.STATUS_FAULT_BELOW
    nominal_min: float = C.STATUS_NOMINAL_MIN
    optimal_min: float = C.STATUS_OPTIMAL_MIN

    def __post_init__(self) -> None:
        for fname in ("fault_below", "nominal_min", "optimal_min"):
            value = getattr(self, fname)
            _check_number("status_rules." + fname, value)
            _check_interval("status_rules." + fname, value, 0.0, 100.0)
        if self.fault_below > self.nominal_min:
            raise ConfigConsistencyError(
                field_a="status_rules.fault_below",
                value_a=self.fault_below,
                field_b="status_rules.nominal_min",
                value_b=self.nominal_min,
                invariant_description="fault_below must not exceed nominal_min",
            )
        _check_strictly_ascending(
            ("status_rules.nominal_min", "status_rules.optimal_min"),
            (self.nominal_min, self.optimal_min),
            "nominal_min must be strictly below optimal_min",
        )


@dataclass(frozen=True)
class StatusProfile:
    """Table-driven motion constants for one OperationalStatus."""

    speed_multiplier: float
    opacity_modifier: float
    should_pulse:     bool

    def __post_init__(self) -> None:
        _check_number("status.speed_multiplier", self.speed_multiplier)
        _check_positive("status.speed_multiplier", self.speed_multiplier)
        _check_number("status.opacity_modifier", self.opacity_modifier)
        _check_interval("status.opacity_modifier", self.opacity_modifier, 0.0, 1.0, lo_open=True)
        if not isinstance(self.should_pulse, bool):
            raise ConfigValidationError(
                field_name="status.should_pulse",
                value=self.should_pulse,
                constraint="must be a bool",
            )


# =============================================================================
# SECTION 4 -- PERSONAS AND EASING
# =============================================================================

@dataclass(frozen=True)
class EasingCurve:
    """Named cubic-bezier curve (x1, y1, x2, y2). x values in [0, 1]."""

    easing_id:      str
    control_points: Tuple[float, float, float, float]

    def __post_init__(self) -> None:
        if not isinstance(self.easing_id, str) or not self.easing_id:
            raise ConfigValidationError(
                field_name="easing.easing_id",
                value=self.easing_id,
                constraint="must be a non-empty string",
            )
        points = tuple(self.control_points)
        if len(points) != 4:
            raise ConfigValidationError(
                field_name="easing." + self.easing_id,
                value=self.control_points,
                constraint="must hold exactly 4 control points",
            )
        for i, p in enumerate(points):
            _check_number("easing." + self.easing_id + "[" + str(i) + "]", p)
        for i in (0, 2):
            _check_interval("easing." + self.easing_id + "[" + str(i) + "]", points[i], 0.0, 1.0)
        object.__setattr__(self, "control_points", tuple(float(p) for p in points))

    def as_css(self) -> str:
        return "cubic-bezier(" + ", ".join(repr(p) for p in self.control_points) + ")"


@dataclass(frozen=True)
class PersonaProfile:
    """speed_multiplier > 0 (higher = faster); easing_id names an EasingCurve."""

    speed_multiplier: float
    easing_id:        str

    def __post_init__(self) -> None:
        _check_number("persona.speed_multiplier", self.speed_multiplier)
        _check_positive("persona.speed_multiplier", self.speed_multiplier)
        if not isinstance(self.easing_id, str) or not self.easing_id:
            raise ConfigValidationError(
                field_name="persona.easing_id",
                value=self.easing_id,
                constraint="must be a non-empty string",
            )


# =============================================================================
# SECTION 5 -- MOTION TIMINGS
# =============================================================================

@dataclass(frozen=True)
class MotionTimings:
    base_duration_sec:         float = C.BASE_DURATION_SEC
    reduced_motion_sec:        float = C.REDUCED_MOTION_DURATION_SEC
    emergency_opacity:         float = C.EMERGENCY_OPACITY
    alert_repetitions:         int   = C.ALERT_PULSE_REPETITIONS
    reevaluation_interval_sec: float = C.REEVALUATION_INTERVAL_SEC

    def __post_init__(self) -> None:
        _check_number("timings.base_duration_sec", self.base_duration_sec)
        _check_positive("timings.base_duration_sec", self.base_duration_sec)
        _check_number("timings.reduced_motion_sec", self.reduced_motion_sec)
        _check_non_negative("timings.reduced_motion_sec", self.reduced_motion_sec)
        _check_number("timings.emergency_opacity", self.emergency_opacity)
        _check_interval(
            "timings.emergency_opacity", self.emergency_opacity,
            C.OPACITY_MIN, C.OPACITY_MAX,
        )
        if (isinstance(self.alert_repetitions, bool)
                or not isinstance(self.alert_repetitions, int)
                or self.alert_repetitions < 1):
            raise ConfigValidationError(
                field_name="timings.alert_repetitions",
                value=self.alert_repetitions,
                constraint="must be an integer >= 1",
            )
        _check_number("timings.reevaluation_interval_sec", self.reevaluation_interval_sec)
        _check_positive("timings.reevaluation_interval_sec", self.reevaluation_interval_sec)
        if self.reduced_motion_sec >= self.base_duration_sec:
            raise ConfigConsistencyError(
                field_a="timings.reduced_motion_sec",
                value_a=self.reduced_motion_sec,
                field_b="timings.base_duration_sec",
                value_b=self.base_duration_sec,
                invariant_description="the reduced-motion duration must be shorter "
                                      "than the base duration",
            )


# =============================================================================
# SECTION 6 -- ENGINE CONFIG (AGGREGATE)
# =============================================================================

@dataclass(frozen=True)
class EngineConfig:
    """
    Complete, validated configuration for one evaluation context.

    Invariants:
      - statuses covers every OperationalStatus member.
      - personas covers every AgentPersona member.
      - every persona easing_id is present in easings.
      - table fields are read-only mappings after construction.
    """

    freshness:    FreshnessThresholds
    decay:        DecayParameters
    grades:       GradeCutoffs
    status_rules: StatusRules
    statuses:     Mapping[OperationalStatus, StatusProfile]
    personas:     Mapping[AgentPersona, PersonaProfile]
    easings:      Mapping[str, EasingCurve]
    timings:      MotionTimings

    def __post_init__(self) -> None:
        missing_status = [s.value for s in OperationalStatus if s not in self.statuses]
        if missing_status:
            raise ConfigValidationError(
                field_name="statuses",
                value=sorted(missing_status),
                constraint="must define a profile for every OperationalStatus",
            )
        missing_persona = [p.value for p in AgentPersona if p not in self.personas]
        if missing_persona:
            raise ConfigValidationError(
                field_name="personas",
                value=sorted(missing_persona),
                constraint="must define a profile for every AgentPersona",
            )
        if C.FALLBACK_PERSONA_EASING not in self.easings:
            raise ConfigValidationError(
                field_name="easings",
                value=sorted(self.easings),
                constraint="must define the fallback easing "
                           + repr(C.FALLBACK_PERSONA_EASING),
            )
        for persona, profile in self.personas.items():
            if profile.easing_id not in self.easings:
                raise ConfigConsistencyError(
                    field_a="personas." + persona.value + ".easing_id",
                    value_a=profile.easing_id,
                    field_b="easings",
                    value_b=sorted(self.easings),
                    invariant_description="persona easing ids must name a defined easing curve",
                )
        object.__setattr__(self, "statuses", MappingProxyType(dict(self.statuses)))
        object.__setattr__(self, "personas", MappingProxyType(dict(self.personas)))
        object.__setattr__(self, "easings", MappingProxyType(dict(self.easings)))


def default_engine_config() -> EngineConfig:
    """Build the built-in configuration from aimp.utils.constants."""
    return EngineConfig(
        freshness=FreshnessThresholds(),
        decay=DecayParameters(),
        grades=GradeCutoffs(),
        status_rules=StatusRules(),
        statuses={
            status: StatusProfile(speed, opacity, pulse)
            for status, (speed, opacity, pulse) in C.STATUS_TABLE.items()
        },
        personas={
            persona: PersonaProfile(speed, easing)
            for persona, (speed, easing) in C.PERSONA_TABLE.items()
        },
        easings={
            easing_id: EasingCurve(easing_id, points)
            for easing_id, points in C.EASING_CURVES.items()
        },
        timings=MotionTimings(),
    )


DEFAULT_ENGINE_CONFIG: EngineConfig = default_engine_config()


__all__ = [
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
]
