# aimp/utils/constants.py
# Version: 1.0.0
# Default values for every tunable of the trust motion core.
#
# These are the built-in defaults. Deployments override them through
# aimp/config/TRUST_MANIFEST.json (loaded by aimp.config.loader); the shipped
# manifest must stay value-identical to this file. CI blocks merge when the
# two diverge (python -m aimp.config.ci_config_gate).
#
# Standard import pattern:
#   from aimp.utils.constants import (
#       FRESHNESS_CRITICAL_SEC,
#       DECAY_RATE_PER_MINUTE,
#       PERSONA_TABLE,
#       STATUS_TABLE,
#   )

from aimp.core.domain import AgentPersona, OperationalStatus


# ---------------------------------------------------------------------------
# FRESHNESS THRESHOLDS (seconds)
# ---------------------------------------------------------------------------

FRESHNESS_CRITICAL_SEC: float = 10.0    # below: real-time confidence
FRESHNESS_WARNING_SEC:  float = 60.0    # below: acceptable lag
FRESHNESS_STALE_SEC:    float = 300.0   # above: stale

# Duration modifiers for (critical, warning, normal, stale).
FRESHNESS_DURATION_MODIFIERS: tuple = (1.0, 1.1, 1.2, 1.3)


# ---------------------------------------------------------------------------
# TEMPORAL DECAY
# ---------------------------------------------------------------------------

DECAY_RATE_PER_MINUTE: float = 0.8
DECAY_FLOOR:           float = 0.5


# ---------------------------------------------------------------------------
# TRUST GRADE CUTOFFS (raw confidence score, 0-100, inclusive lower bounds)
# ---------------------------------------------------------------------------

GRADE_EXCELLENT_MIN: float = 90.0
GRADE_GOOD_MIN:      float = 70.0
GRADE_FAIR_MIN:      float = 50.0
GRADE_POOR_MIN:      float = 30.0


# ---------------------------------------------------------------------------
# TRUST SCORE COEFFICIENTS
# ---------------------------------------------------------------------------

OPACITY_MIN: float = 0.5
OPACITY_MAX: float = 1.0

WITNESS_OPACITY_STEP: float = 0.02
WITNESS_OPACITY_CAP:  float = 0.10
SIGMA_OPACITY_STEP:   float = 0.05
SIGMA_OPACITY_CAP:    float = 0.20

SIGMA_DURATION_STEP:    float = 0.15
SIGMA_DURATION_CAP:     float = 0.5
NO_WITNESS_DURATION:    float = 1.2
WITNESS_DURATION_STEP:  float = 0.1

ALERT_PULSE_REPETITIONS: int = 3


# ---------------------------------------------------------------------------
# OPERATIONAL STATUS
# ---------------------------------------------------------------------------

STATUS_FAULT_BELOW:   float = 50.0
STATUS_OPTIMAL_MIN:   float = 90.0
STATUS_NOMINAL_MIN:   float = 70.0

# status -> (speed_multiplier, opacity_modifier, should_pulse)
STATUS_TABLE: dict = {
    OperationalStatus.OPTIMAL:     (1.0, 1.0,  False),
    OperationalStatus.NOMINAL:     (1.0, 0.95, False),
    OperationalStatus.DEGRADED:    (1.3, 0.8,  True),
    OperationalStatus.MAINTENANCE: (1.2, 0.85, True),
    OperationalStatus.FAULT:       (0.8, 0.9,  True),
}


# ---------------------------------------------------------------------------
# AGENT PERSONAS
# ---------------------------------------------------------------------------

# easing id -> cubic-bezier control points
EASING_CURVES: dict = {
    "organic":     (0.25, 0.1, 0.25, 1.0),
    "glass":       (0.4, 0.0, 0.2, 1.0),
    "bounceSoft":  (0.68, -0.55, 0.265, 1.55),
    "easeOutBack": (0.34, 1.56, 0.64, 1.0),
}

# persona -> (speed_multiplier, easing_id)
PERSONA_TABLE: dict = {
    AgentPersona.OPERATIONS: (1.0, "organic"),
    AgentPersona.MARKETS:    (1.2, "bounceSoft"),
    AgentPersona.SENTINEL:   (0.9, "glass"),
    AgentPersona.GOVERNOR:   (1.1, "easeOutBack"),
}

FALLBACK_PERSONA_SPEED:  float = 1.0
FALLBACK_PERSONA_EASING: str   = "organic"


# ---------------------------------------------------------------------------
# MOTION TIMINGS (seconds)
# ---------------------------------------------------------------------------

BASE_DURATION_SEC:          float = 0.3     # standard transition
REDUCED_MOTION_DURATION_SEC: float = 0.05   # "instant" under reduced motion
EMERGENCY_OPACITY:          float = 0.7
REEVALUATION_INTERVAL_SEC:  float = 30.0
