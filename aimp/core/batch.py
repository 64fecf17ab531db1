# aimp/core/batch.py
# Version: 1.0.0
# Vectorised trust evaluation for dense displays (sensor grids, panel maps).
#
# Module Boundary: array counterparts of the scalar functions in
# aimp.core.freshness, aimp.core.temporal_decay and aimp.core.trust_score.
# For every element the result equals the scalar function's result; the
# scalar modules stay authoritative.
#
# DETERMINISM GUARANTEE:
#   DET-01  No stochastic operations.
#   DET-02  Inputs are copied into new float arrays; caller arrays are never
#           modified.
#   DET-03  Non-finite inputs are normalised exactly like the scalar path:
#           NaN age -> +inf, negative age -> 0, NaN score -> 0.
#
# Standard import:
#   from aimp.core.batch import evaluate_grid, GridEvaluation

import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence

from aimp.config.settings import DEFAULT_ENGINE_CONFIG, EngineConfig
from aimp.core.domain import FreshnessTier, HealthCategory, OperationalStatus, TrustGrade
from aimp.core.operational_status import HEALTH_CATEGORY_FOR_STATUS
from aimp.utils.constants import (
    OPACITY_MAX,
    OPACITY_MIN,
    SIGMA_OPACITY_CAP,
    SIGMA_OPACITY_STEP,
    WITNESS_OPACITY_CAP,
    WITNESS_OPACITY_STEP,
)

# Index order of tier_index values returned by freshness_tier_indices().
TIER_ORDER = (
    FreshnessTier.CRITICAL,
    FreshnessTier.WARNING,
    FreshnessTier.NORMAL,
    FreshnessTier.STALE,
)

# Index order of grade_indices(); best to worst.
GRADE_ORDER = (
    TrustGrade.EXCELLENT,
    TrustGrade.GOOD,
    TrustGrade.FAIR,
    TrustGrade.POOR,
    TrustGrade.SUSPECT,
)


# ---------------------------------------------------------------------------
# NORMALISATION
# ---------------------------------------------------------------------------

def clamp_ages(ages: Sequence[float]) -> np.ndarray:
    arr = np.array(ages, dtype=float)
    arr = np.where(np.isnan(arr), np.inf, arr)
    return np.maximum(arr, 0.0)


def clamp_scores(scores: Sequence[float]) -> np.ndarray:
    arr = np.array(scores, dtype=float)
    arr = np.where(np.isnan(arr), 0.0, arr)
    return np.clip(arr, 0.0, 100.0)


# ---------------------------------------------------------------------------
# DECAY / FRESHNESS / GRADE
# ---------------------------------------------------------------------------

def decay_factors(ages: Sequence[float],
                  config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> np.ndarray:
    a = clamp_ages(ages)
    return np.power(config.decay.rate_per_minute, a / 60.0)


def decay_confidences(confidences: Sequence[float], ages: Sequence[float],
                      config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> np.ndarray:
    c = clamp_scores(confidences)
    factors = np.maximum(decay_factors(ages, config), config.decay.floor)
    return c * factors


def freshness_tier_indices(ages: Sequence[float],
                           config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> np.ndarray:
    """Integer index into TIER_ORDER for every age."""
    a = clamp_ages(ages)
    t = config.freshness
    return np.select(
        [a < t.critical_sec, a < t.warning_sec, a <= t.stale_sec],
        [0, 1, 2],
        default=3,
    )


def freshness_modifiers(ages: Sequence[float],
                        config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> np.ndarray:
    mods = np.array(config.freshness.duration_modifiers, dtype=float)
    return mods[freshness_tier_indices(ages, config)]


def grade_indices(scores: Sequence[float],
                  config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> np.ndarray:
    """Integer index into GRADE_ORDER for every score."""
    s = clamp_scores(scores)
    g = config.grades
    return np.select(
        [s >= g.excellent_min, s >= g.good_min, s >= g.fair_min, s >= g.poor_min],
        [0, 1, 2, 3],
        default=4,
    )


def trust_opacities(scores: Sequence[float],
                    witness_counts: Sequence[float],
                    deviation_sigmas: Sequence[float]) -> np.ndarray:
    s = clamp_scores(scores)
    w = np.array(witness_counts, dtype=float)
    w = np.where(np.isfinite(w) & (w > 0.0), np.floor(w), 0.0)
    sigma = np.array(deviation_sigmas, dtype=float)
    sigma = np.where(np.isnan(sigma) | (sigma < 0.0), 0.0, sigma)
    raw = (
        s / 100.0
        + np.minimum(w * WITNESS_OPACITY_STEP, WITNESS_OPACITY_CAP)
        - np.minimum(sigma * SIGMA_OPACITY_STEP, SIGMA_OPACITY_CAP)
    )
    return np.clip(raw, OPACITY_MIN, OPACITY_MAX)


# ---------------------------------------------------------------------------
# GRID EVALUATION
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GridEvaluation:
    """
    Per-cell results for a grid of readings.

    Fields:
      displayed_confidence -- decayed confidence per cell.
      decay_factor         -- unfloored decay factor per cell.
      tier_index           -- index into TIER_ORDER.
      grade_index          -- index into GRADE_ORDER (raw score policy).
      health               -- HealthCategory per cell.
    """
    displayed_confidence: np.ndarray
    decay_factor:         np.ndarray
    tier_index:           np.ndarray
    grade_index:          np.ndarray
    health:               List[HealthCategory]

    @property
    def tiers(self) -> List[FreshnessTier]:
        return [TIER_ORDER[i] for i in self.tier_index.tolist()]

    @property
    def grades(self) -> List[TrustGrade]:
        return [GRADE_ORDER[i] for i in self.grade_index.tolist()]

    def health_counts(self) -> dict:
        """Number of cells per HealthCategory, every category present."""
        counts = {category: 0 for category in HealthCategory}
        for category in self.health:
            counts[category] += 1
        return counts


def _status_indices(scores: np.ndarray, config: EngineConfig) -> np.ndarray:
    r = config.status_rules
    # 0 fault, 1 optimal, 2 nominal, 3 degraded
    return np.select(
        [scores < r.fault_below, scores >= r.optimal_min, scores >= r.nominal_min],
        [0, 1, 2],
        default=3,
    )


_STATUS_BY_INDEX = (
    OperationalStatus.FAULT,
    OperationalStatus.OPTIMAL,
    OperationalStatus.NOMINAL,
    OperationalStatus.DEGRADED,
)


def evaluate_grid(
    confidences: Sequence[float],
    ages: Sequence[float],
    maintenance: Optional[Sequence[bool]] = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> GridEvaluation:
    """
    Evaluate a grid of confidence readings in one pass.

    Raises:
        ValueError if the input sequences differ in length.
    """
    c = clamp_scores(confidences)
    a = clamp_ages(ages)
    if c.shape != a.shape:
        raise ValueError(
            "confidences and ages must have the same shape; got "
            + repr(c.shape) + " and " + repr(a.shape)
        )
    if maintenance is None:
        m = np.zeros(c.shape, dtype=bool)
    else:
        m = np.array(maintenance, dtype=bool)
        if m.shape != c.shape:
            raise ValueError(
                "maintenance must match confidences; got "
                + repr(m.shape) + " and " + repr(c.shape)
            )

    status_idx = _status_indices(c, config)
    health = [
        HEALTH_CATEGORY_FOR_STATUS[
            OperationalStatus.MAINTENANCE if in_maint else _STATUS_BY_INDEX[idx]
        ]
        for idx, in_maint in zip(status_idx.ravel().tolist(), m.ravel().tolist())
    ]
    factors = np.power(config.decay.rate_per_minute, a / 60.0)

    return GridEvaluation(
        displayed_confidence=c * np.maximum(factors, config.decay.floor),
        decay_factor=factors,
        tier_index=freshness_tier_indices(a, config),
        grade_index=grade_indices(c, config),
        health=health,
    )


__all__ = [
    "TIER_ORDER",
    "GRADE_ORDER",
    "clamp_ages",
    "clamp_scores",
    "decay_factors",
    "decay_confidences",
    "freshness_tier_indices",
    "freshness_modifiers",
    "grade_indices",
    "trust_opacities",
    "GridEvaluation",
    "evaluate_grid",
]
