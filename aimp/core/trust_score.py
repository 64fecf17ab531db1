# =============================================================================
# AIMP v1.0.0 -- TRUST MOTION CORE
# File:   aimp/core/trust_score.py
# =============================================================================
#
# SCOPE
# -----
# TrustScoreCalculator. Blends confidence, witness count and deviation into
# presentation values.
#
#   trust_opacity()            -- display opacity in [0.5, 1.0]
#   grade_for_score()          -- THE score -> TrustGrade mapping
#   trust_duration_modifier()  -- motion slowdown factor, >= 1.0
#   should_alert()             -- threshold breach flag
#   alert_pulse_plan()         -- bounded alert pulse sequence
#   trust_health_percentage()  -- integer health for status dots
#
# FORMULAS (default coefficients)
# --------
#   opacity  = clamp(score/100 + min(w*0.02, 0.10) - min(sigma*0.05, 0.20), 0.5, 1.0)
#   duration = (1 + min(sigma*0.15, 0.5)) * (1.2 if w == 0 else max(1.0, 1.2 - w*0.1))
#   grade    : >=90 excellent, >=70 good, >=50 fair, >=30 poor, else suspect
#
# INVARIANTS
# ----------
# INV-TS-01: grade_for_score is the only score -> grade mapping in the package.
# INV-TS-02: grade_for_score is monotonically non-increasing from EXCELLENT
#            to SUSPECT as the score falls.
# INV-TS-03: trust_duration_modifier() >= 1.0 for every input.
# INV-TS-04: AlertPulsePlan.phases() is finite.
#
# DETERMINISM CONSTRAINTS
# -----------------------
# DET-01  Pure functions. No state, no I/O.
# DET-02  Never raises. Inputs are normalised by TrustMathematics.
# =============================================================================

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional

from aimp.config.settings import DEFAULT_ENGINE_CONFIG, GradeCutoffs
from aimp.core.domain import PulseSpeed, TrustGrade, TrustMathematics
from aimp.utils.constants import (
    ALERT_PULSE_REPETITIONS,
    NO_WITNESS_DURATION,
    OPACITY_MAX,
    OPACITY_MIN,
    SIGMA_DURATION_CAP,
    SIGMA_DURATION_STEP,
    SIGMA_OPACITY_CAP,
    SIGMA_OPACITY_STEP,
    WITNESS_DURATION_STEP,
    WITNESS_OPACITY_CAP,
    WITNESS_OPACITY_STEP,
)


# =============================================================================
# SECTION 1 -- OPACITY
# =============================================================================

def clamp_opacity(value: float) -> float:
    """Clamp into [OPACITY_MIN, OPACITY_MAX]. NaN -> OPACITY_MIN."""
    if math.isnan(value):
        return OPACITY_MIN
    return max(OPACITY_MIN, min(OPACITY_MAX, value))


def trust_opacity(tm: TrustMathematics) -> float:
    witness_bonus = min(tm.witness_count * WITNESS_OPACITY_STEP, WITNESS_OPACITY_CAP)
    sigma_penalty = min(tm.deviation_sigma * SIGMA_OPACITY_STEP, SIGMA_OPACITY_CAP)
    return clamp_opacity(tm.confidence_score / 100.0 + witness_bonus - sigma_penalty)


# =============================================================================
# SECTION 2 -- GRADE
# =============================================================================

def grade_for_score(
    score: Optional[float],
    cutoffs: GradeCutoffs = DEFAULT_ENGINE_CONFIG.grades,
) -> TrustGrade:
    """
    Map a confidence score (0-100) to a TrustGrade.

    Cutoffs are inclusive lower bounds: with the defaults 89 -> GOOD,
    90 -> EXCELLENT, 69 -> FAIR, 70 -> GOOD.

    None (no confidence information) -> GOOD. NaN -> SUSPECT.
    """
    if score is None:
        return TrustGrade.GOOD
    if math.isnan(score):
        return TrustGrade.SUSPECT
    if score >= cutoffs.excellent_min:
        return TrustGrade.EXCELLENT
    if score >= cutoffs.good_min:
        return TrustGrade.GOOD
    if score >= cutoffs.fair_min:
        return TrustGrade.FAIR
    if score >= cutoffs.poor_min:
        return TrustGrade.POOR
    return TrustGrade.SUSPECT


# =============================================================================
# SECTION 3 -- DURATION MODIFIER
# =============================================================================

def trust_duration_modifier(tm: TrustMathematics) -> float:
    """
    Motion slowdown from deviation and missing corroboration.

    Both factors are >= 1.0, so the product never speeds motion up.
    """
    sigma_factor = 1.0 + min(tm.deviation_sigma * SIGMA_DURATION_STEP, SIGMA_DURATION_CAP)
    if tm.witness_count == 0:
        witness_factor = NO_WITNESS_DURATION
    else:
        witness_factor = max(1.0, NO_WITNESS_DURATION - tm.witness_count * WITNESS_DURATION_STEP)
    return sigma_factor * witness_factor


# =============================================================================
# SECTION 4 -- ALERTS
# =============================================================================

def should_alert(tm: Optional[TrustMathematics]) -> bool:
    return tm is not None and tm.exceeds_threshold


@dataclass(frozen=True)
class AlertPulsePlan:
    """
    Consumer-side pulse sequence for one evaluation.

    When alerting, exactly `repetitions` FAST pulses play, then the
    indicator settles at `steady`. Never an infinite loop.
    """

    alerting:    bool
    repetitions: int
    steady:      PulseSpeed

    def phases(self) -> Iterator[PulseSpeed]:
        """Yield each alert pulse, then the steady state once."""
        if self.alerting:
            for _ in range(self.repetitions):
                yield PulseSpeed.FAST
        yield self.steady

    @property
    def total_phases(self) -> int:
        return (self.repetitions if self.alerting else 0) + 1


def alert_pulse_plan(
    alerting: bool,
    steady: PulseSpeed = PulseSpeed.NONE,
    repetitions: int = ALERT_PULSE_REPETITIONS,
) -> AlertPulsePlan:
    return AlertPulsePlan(
        alerting=bool(alerting),
        repetitions=max(0, int(repetitions)) if alerting else 0,
        steady=steady,
    )


# =============================================================================
# SECTION 5 -- HEALTH PERCENTAGE
# =============================================================================

def trust_health_percentage(tm: TrustMathematics) -> int:
    """
    Integer health (0-100) for status dots.

    Starts from the confidence score, subtracts sigma*10 when the deviation
    threshold is exceeded, adds 2 per witness beyond the first. Halves round
    up.
    """
    health = tm.confidence_score
    if tm.exceeds_threshold:
        health = max(0.0, health - tm.deviation_sigma * 10.0)
    if tm.witness_count > 1:
        health = min(100.0, health + (tm.witness_count - 1) * 2.0)
    return int(math.floor(health + 0.5))


__all__ = [
    "clamp_opacity",
    "trust_opacity",
    "grade_for_score",
    "trust_duration_modifier",
    "should_alert",
    "AlertPulsePlan",
    "alert_pulse_plan",
    "trust_health_percentage",
]
