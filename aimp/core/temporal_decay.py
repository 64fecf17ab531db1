# =============================================================================
# AIMP v1.0.0 -- TRUST MOTION CORE
# File:   aimp/core/temporal_decay.py
# =============================================================================
#
# SCOPE
# -----
# TemporalDecayEngine. Exponential, floored decay of displayed confidence.
#
#   decay_factor(age)              = rate ** (age / 60)
#   decay_confidence(conf, age)    = conf * max(decay_factor(age), floor)
#   decay_percentage(age)          = clamp(decay_factor(age) * 100, 0, 100)
#
# INVARIANTS
# ----------
# INV-TD-01: decay_confidence(c, 0) == c exactly.
# INV-TD-02: decay_confidence(c, age) is non-increasing in age.
# INV-TD-03: decay_confidence(c, age) >= c * floor for every age, +inf included.
#
# DETERMINISM CONSTRAINTS
# -----------------------
# DET-01  Pure functions; ages are normalised with clamp_age().
# =============================================================================

from __future__ import annotations

import math

from aimp.config.settings import DEFAULT_ENGINE_CONFIG, DecayParameters
from aimp.core.freshness import clamp_age

_SECONDS_PER_MINUTE: float = 60.0


def _clamp_score(confidence: float) -> float:
    """NaN or unparseable -> 0.0, then clipped to [0, 100]."""
    try:
        c = float(confidence)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(c):
        return 0.0
    return max(0.0, min(100.0, c))


def decay_factor(
    age: float,
    params: DecayParameters = DEFAULT_ENGINE_CONFIG.decay,
) -> float:
    """Unfloored decay factor in [0, 1]. Age 0 -> 1.0; age +inf -> 0.0."""
    age = clamp_age(age)
    if age == 0.0:
        return 1.0
    return params.rate_per_minute ** (age / _SECONDS_PER_MINUTE)


def effective_decay(
    age: float,
    params: DecayParameters = DEFAULT_ENGINE_CONFIG.decay,
) -> float:
    """Decay factor with the floor applied: max(decay_factor, floor)."""
    return max(decay_factor(age, params), params.floor)


def decay_confidence(
    confidence: float,
    age: float,
    params: DecayParameters = DEFAULT_ENGINE_CONFIG.decay,
) -> float:
    """
    Displayed confidence after ageing.

    Stale but valid data is down-weighted, never erased: the result
    approaches confidence * floor for very old records.
    """
    confidence = _clamp_score(confidence)
    if clamp_age(age) == 0.0:
        return confidence
    return confidence * effective_decay(age, params)


def decay_percentage(
    age: float,
    params: DecayParameters = DEFAULT_ENGINE_CONFIG.decay,
) -> float:
    """Remaining trust as a percentage, for tooltips. Not floored."""
    return max(0.0, min(100.0, decay_factor(age, params) * 100.0))


__all__ = [
    "decay_factor",
    "effective_decay",
    "decay_confidence",
    "decay_percentage",
]
