# =============================================================================
# AIMP v1.0.0 -- TRUST MOTION CORE
# File:   aimp/core/operational_status.py
# =============================================================================
#
# SCOPE
# -----
# OperationalStatusMapper. Priority-ordered decision table from record
# attributes to OperationalStatus, plus the fixed translation tables used by
# dense displays.
#
# DECISION TABLE (first match wins)
# --------------
#   1. is_in_maintenance                         -> MAINTENANCE
#   2. impact == CRITICAL or confidence < 50     -> FAULT
#   3. confidence >= 90                          -> OPTIMAL
#   4. confidence >= 70                          -> NOMINAL
#   5. otherwise                                 -> DEGRADED
#
# A record with neither maintenance flag, critical impact nor confidence
# maps to NOMINAL.
#
# TRANSLATION TABLES
# ------------------
#   HEALTH_CATEGORY_FOR_STATUS : OperationalStatus -> HealthCategory
#   PULSE_SPEED_FOR_HEALTH     : HealthCategory    -> PulseSpeed
#   TRANSACTION_STATUS_MAPPING : TransactionStatus -> StatusMapping
#   AGENT_HEALTH_MAPPING       : AgentHealthStatus -> StatusMapping
#
# Every table is checked for completeness over its key enum at import time.
# =============================================================================

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from aimp.config.settings import (
    DEFAULT_ENGINE_CONFIG,
    EngineConfig,
    StatusProfile,
    StatusRules,
)
from aimp.core.domain import (
    AgentHealthStatus,
    HealthCategory,
    Impact,
    OperationalStatus,
    PulseSpeed,
    SourceRecord,
    TransactionStatus,
)


# =============================================================================
# SECTION 1 -- TABLES
# =============================================================================

HEALTH_CATEGORY_FOR_STATUS: Mapping[OperationalStatus, HealthCategory] = MappingProxyType({
    OperationalStatus.OPTIMAL:     HealthCategory.HEALTHY,
    OperationalStatus.NOMINAL:     HealthCategory.HEALTHY,
    OperationalStatus.DEGRADED:    HealthCategory.DEGRADED,
    OperationalStatus.MAINTENANCE: HealthCategory.CRITICAL,
    OperationalStatus.FAULT:       HealthCategory.CRITICAL,
})

PULSE_SPEED_FOR_HEALTH: Mapping[HealthCategory, PulseSpeed] = MappingProxyType({
    HealthCategory.HEALTHY:  PulseSpeed.SLOW,
    HealthCategory.DEGRADED: PulseSpeed.MEDIUM,
    HealthCategory.CRITICAL: PulseSpeed.FAST,
    HealthCategory.OFFLINE:  PulseSpeed.NONE,
})


@dataclass(frozen=True)
class StatusMapping:
    """Status triple for surfaces that start from a coarse external state."""
    operational_status: OperationalStatus
    health_category:    HealthCategory
    pulse_speed:        PulseSpeed


TRANSACTION_STATUS_MAPPING: Mapping[TransactionStatus, StatusMapping] = MappingProxyType({
    TransactionStatus.SUCCESS: StatusMapping(
        OperationalStatus.OPTIMAL, HealthCategory.HEALTHY, PulseSpeed.SLOW),
    TransactionStatus.PENDING: StatusMapping(
        OperationalStatus.NOMINAL, HealthCategory.OFFLINE, PulseSpeed.MEDIUM),
    TransactionStatus.FAILED: StatusMapping(
        OperationalStatus.FAULT, HealthCategory.CRITICAL, PulseSpeed.FAST),
})

AGENT_HEALTH_MAPPING: Mapping[AgentHealthStatus, StatusMapping] = MappingProxyType({
    AgentHealthStatus.ONLINE: StatusMapping(
        OperationalStatus.OPTIMAL, HealthCategory.HEALTHY, PulseSpeed.SLOW),
    AgentHealthStatus.THINKING: StatusMapping(
        OperationalStatus.NOMINAL, HealthCategory.HEALTHY, PulseSpeed.MEDIUM),
    AgentHealthStatus.ERROR: StatusMapping(
        OperationalStatus.FAULT, HealthCategory.CRITICAL, PulseSpeed.FAST),
    AgentHealthStatus.OFFLINE: StatusMapping(
        OperationalStatus.MAINTENANCE, HealthCategory.OFFLINE, PulseSpeed.NONE),
})


def _assert_complete(table: Mapping, enum_cls, name: str) -> None:
    missing = [m.value for m in enum_cls if m not in table]
    if missing:
        raise RuntimeError(name + " is missing entries for " + repr(missing))


_assert_complete(HEALTH_CATEGORY_FOR_STATUS, OperationalStatus, "HEALTH_CATEGORY_FOR_STATUS")
_assert_complete(PULSE_SPEED_FOR_HEALTH, HealthCategory, "PULSE_SPEED_FOR_HEALTH")
_assert_complete(TRANSACTION_STATUS_MAPPING, TransactionStatus, "TRANSACTION_STATUS_MAPPING")
_assert_complete(AGENT_HEALTH_MAPPING, AgentHealthStatus, "AGENT_HEALTH_MAPPING")


# =============================================================================
# SECTION 2 -- DECISION TABLE
# =============================================================================

def map_operational_status(
    confidence: Optional[float],
    impact: Optional[Impact] = None,
    is_in_maintenance: bool = False,
    rules: StatusRules = DEFAULT_ENGINE_CONFIG.status_rules,
) -> OperationalStatus:
    """
    Derive the OperationalStatus of a decision.

    Args:
        confidence:        Raw confidence 0-100, or None when unknown.
                           NaN is treated as 0.
        impact:            Optional impact class.
        is_in_maintenance: Maintenance flag; takes precedence over everything.
        rules:             Score thresholds.

    Returns:
        OperationalStatus. Never raises.
    """
    if is_in_maintenance:
        return OperationalStatus.MAINTENANCE
    if impact is Impact.CRITICAL:
        return OperationalStatus.FAULT
    if confidence is None:
        return OperationalStatus.NOMINAL
    if math.isnan(confidence):
        confidence = 0.0
    if confidence < rules.fault_below:
        return OperationalStatus.FAULT
    if confidence >= rules.optimal_min:
        return OperationalStatus.OPTIMAL
    if confidence >= rules.nominal_min:
        return OperationalStatus.NOMINAL
    return OperationalStatus.DEGRADED


def status_for_record(
    record: SourceRecord,
    rules: StatusRules = DEFAULT_ENGINE_CONFIG.status_rules,
) -> OperationalStatus:
    """Explicit record status if present, else the decision table."""
    if record.operational_status is not None:
        return record.operational_status
    return map_operational_status(
        record.effective_confidence,
        impact=record.impact,
        is_in_maintenance=record.is_in_maintenance,
        rules=rules,
    )


def status_profile(
    status: OperationalStatus,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> StatusProfile:
    return config.statuses[status]


# =============================================================================
# SECTION 3 -- HEALTH CATEGORY AND PULSE
# =============================================================================

def health_category_for(status: Optional[OperationalStatus]) -> HealthCategory:
    """Coarse category; the absence of any status is OFFLINE."""
    if status is None:
        return HealthCategory.OFFLINE
    return HEALTH_CATEGORY_FOR_STATUS[status]


def pulse_speed_for_health(category: HealthCategory) -> PulseSpeed:
    return PULSE_SPEED_FOR_HEALTH[category]


# =============================================================================
# SECTION 4 -- EXTERNAL STATE MAPPINGS
# =============================================================================

def _coerce(enum_cls, value: Any, default):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


def map_transaction_status(status: Any) -> StatusMapping:
    """success / pending / failed. Unknown values read as pending."""
    return TRANSACTION_STATUS_MAPPING[
        _coerce(TransactionStatus, status, TransactionStatus.PENDING)
    ]


def map_agent_health(health: Any) -> StatusMapping:
    """online / thinking / error / offline. Unknown values read as offline."""
    return AGENT_HEALTH_MAPPING[
        _coerce(AgentHealthStatus, health, AgentHealthStatus.OFFLINE)
    ]


__all__ = [
    "HEALTH_CATEGORY_FOR_STATUS",
    "PULSE_SPEED_FOR_HEALTH",
    "StatusMapping",
    "TRANSACTION_STATUS_MAPPING",
    "AGENT_HEALTH_MAPPING",
    "map_operational_status",
    "status_for_record",
    "status_profile",
    "health_category_for",
    "pulse_speed_for_health",
    "map_transaction_status",
    "map_agent_health",
]
