# =============================================================================
# AIMP v1.0.0 -- TRUST MOTION CORE
# File:   aimp/core/freshness.py
# =============================================================================
#
# SCOPE
# -----
# FreshnessClassifier. Buckets a record age (seconds) into a FreshnessTier
# and its motion duration modifier.
#
#   clamp_age()           -- clock-skew tolerant age normalisation.
#   parse_timestamp()     -- ISO 8601 -> aware datetime (None if invalid).
#   age_seconds()         -- now - timestamp, clamped.
#   classify_freshness()  -- FreshnessResult(tier, duration_modifier).
#   freshness_label()     -- narrative label for tooltips and receipts.
#
# PARTITION (default thresholds 10 / 60 / 300)
# ---------
#   [0, critical)           CRITICAL  1.0
#   [critical, warning)     WARNING   1.1
#   [warning, stale]        NORMAL    1.2
#   (stale, inf)            STALE     1.3
#
# Every age >= 0, including +inf, maps to exactly one tier.
#
# DETERMINISM CONSTRAINTS
# -----------------------
# DET-01  No datetime.now(). The evaluation instant is always an argument.
# DET-02  Total functions. Nothing in this module raises on record data.
# =============================================================================

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from aimp.config.settings import DEFAULT_ENGINE_CONFIG, FreshnessThresholds
from aimp.core.domain import FreshnessTier


# Seconds field followed by a fraction of any length, "." or "," separated.
_FRACTION = re.compile(r"(\d{2}:?\d{2}:?\d{2})[.,](\d+)")


@dataclass(frozen=True)
class FreshnessResult:
    tier:              FreshnessTier
    duration_modifier: float


def clamp_age(age: float) -> float:
    """
    Normalise an age in seconds.

    Negative (clock skew) -> 0.0. NaN -> +inf, so an unknowable age is
    treated as the oldest possible record rather than the freshest.
    """
    try:
        value = float(age)
    except (TypeError, ValueError):
        return math.inf
    if math.isnan(value):
        return math.inf
    return max(0.0, value)


def parse_timestamp(timestamp: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp into an aware UTC-comparable datetime.

    A trailing 'Z' is accepted. Fractional seconds of any length are
    padded or truncated to microseconds. Naive values are taken as UTC.
    Returns None for anything unparseable.
    """
    if not isinstance(timestamp, str) or not timestamp.strip():
        return None
    text = timestamp.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(
        lambda m: m.group(1) + "." + (m.group(2) + "000000")[:6], text, count=1,
    )
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def age_seconds(timestamp: str, now: datetime) -> float:
    """
    Seconds elapsed between `timestamp` and the caller-supplied `now`.

    Unparseable timestamps yield +inf (STALE). Future timestamps yield 0.0.
    """
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return math.inf
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return clamp_age((now - parsed).total_seconds())


def classify_freshness(
    age: float,
    thresholds: FreshnessThresholds = DEFAULT_ENGINE_CONFIG.freshness,
) -> FreshnessResult:
    age = clamp_age(age)
    mods = thresholds.duration_modifiers
    if age < thresholds.critical_sec:
        return FreshnessResult(FreshnessTier.CRITICAL, mods[0])
    if age < thresholds.warning_sec:
        return FreshnessResult(FreshnessTier.WARNING, mods[1])
    if age <= thresholds.stale_sec:
        return FreshnessResult(FreshnessTier.NORMAL, mods[2])
    return FreshnessResult(FreshnessTier.STALE, mods[3])


def freshness_label(
    age: float,
    thresholds: FreshnessThresholds = DEFAULT_ENGINE_CONFIG.freshness,
) -> str:
    """
    Narrative freshness label: 'fresh', 'recent', 'stale' or 'expired'.

    Uses half-open buckets over the same thresholds as classify_freshness,
    so an age of exactly stale_sec reads 'expired' here while still being
    NORMAL for motion purposes.
    """
    age = clamp_age(age)
    if age < thresholds.critical_sec:
        return "fresh"
    if age < thresholds.warning_sec:
        return "recent"
    if age < thresholds.stale_sec:
        return "stale"
    return "expired"


__all__ = [
    "FreshnessResult",
    "clamp_age",
    "parse_timestamp",
    "age_seconds",
    "classify_freshness",
    "freshness_label",
]
