# =============================================================================
# AIMP v1.0.0 -- OPERATIONAL STATUS MAPPER TESTS
# File:   tests/unit/core/test_operational_status.py
# =============================================================================

import pytest

from aimp.config.settings import StatusRules
from aimp.core.domain import (
    AgentHealthStatus,
    HealthCategory,
    Impact,
    OperationalStatus,
    PulseSpeed,
    SourceRecord,
    TransactionStatus,
    TrustMathematics,
)
from aimp.core.operational_status import (
    AGENT_HEALTH_MAPPING,
    HEALTH_CATEGORY_FOR_STATUS,
    PULSE_SPEED_FOR_HEALTH,
    TRANSACTION_STATUS_MAPPING,
    StatusMapping,
    health_category_for,
    map_agent_health,
    map_operational_status,
    map_transaction_status,
    pulse_speed_for_health,
    status_for_record,
    status_profile,
)


# =============================================================================
# SECTION 1 -- Decision table
# =============================================================================

class TestMapOperationalStatus:

    def test_maintenance_beats_high_confidence(self):
        assert map_operational_status(95.0, is_in_maintenance=True) is OperationalStatus.MAINTENANCE

    def test_maintenance_beats_critical_impact(self):
        assert map_operational_status(
            10.0, impact=Impact.CRITICAL, is_in_maintenance=True
        ) is OperationalStatus.MAINTENANCE

    def test_critical_impact_is_fault_regardless_of_confidence(self):
        assert map_operational_status(99.0, impact=Impact.CRITICAL) is OperationalStatus.FAULT

    @pytest.mark.parametrize("confidence,status", [
        (0.0,    OperationalStatus.FAULT),
        (49.999, OperationalStatus.FAULT),
        (50.0,   OperationalStatus.DEGRADED),
        (69.999, OperationalStatus.DEGRADED),
        (70.0,   OperationalStatus.NOMINAL),
        (89.999, OperationalStatus.NOMINAL),
        (90.0,   OperationalStatus.OPTIMAL),
        (100.0,  OperationalStatus.OPTIMAL),
    ])
    def test_confidence_thresholds(self, confidence, status):
        assert map_operational_status(confidence) is status

    def test_non_critical_impact_does_not_change_result(self):
        for impact in (Impact.LOW, Impact.MEDIUM, Impact.HIGH):
            assert map_operational_status(95.0, impact=impact) is OperationalStatus.OPTIMAL

    def test_missing_confidence_is_nominal(self):
        assert map_operational_status(None) is OperationalStatus.NOMINAL

    def test_nan_confidence_is_fault(self):
        assert map_operational_status(float("nan")) is OperationalStatus.FAULT

    def test_custom_rules(self):
        rules = StatusRules(fault_below=20.0, nominal_min=40.0, optimal_min=60.0)
        assert map_operational_status(30.0, rules=rules) is OperationalStatus.DEGRADED
        assert map_operational_status(65.0, rules=rules) is OperationalStatus.OPTIMAL


class TestStatusForRecord:

    def test_explicit_status_wins(self):
        r = SourceRecord("r", "t", confidence=99.0, operational_status=OperationalStatus.DEGRADED)
        assert status_for_record(r) is OperationalStatus.DEGRADED

    def test_derived_from_trust_math_score(self):
        r = SourceRecord("r", "t", trust_math=TrustMathematics(72.0))
        assert status_for_record(r) is OperationalStatus.NOMINAL

    def test_maintenance_flag_on_record(self):
        r = SourceRecord("r", "t", confidence=95.0, is_in_maintenance=True)
        assert status_for_record(r) is OperationalStatus.MAINTENANCE

    def test_feed_string_false_does_not_force_maintenance(self):
        r = SourceRecord.from_feed({"timestamp": "t", "confidence": 95, "isInMaintenance": "false"})
        assert status_for_record(r) is OperationalStatus.OPTIMAL

    def test_empty_record_is_nominal(self):
        assert status_for_record(SourceRecord("r", "t")) is OperationalStatus.NOMINAL


# =============================================================================
# SECTION 2 -- Tables
# =============================================================================

class TestTables:

    @pytest.mark.parametrize("status,speed,opacity,pulse", [
        (OperationalStatus.OPTIMAL,     1.0, 1.0,  False),
        (OperationalStatus.NOMINAL,     1.0, 0.95, False),
        (OperationalStatus.DEGRADED,    1.3, 0.8,  True),
        (OperationalStatus.MAINTENANCE, 1.2, 0.85, True),
        (OperationalStatus.FAULT,       0.8, 0.9,  True),
    ])
    def test_status_profiles(self, status, speed, opacity, pulse):
        profile = status_profile(status)
        assert profile.speed_multiplier == speed
        assert profile.opacity_modifier == opacity
        assert profile.should_pulse is pulse

    def test_health_table_complete(self):
        assert set(HEALTH_CATEGORY_FOR_STATUS) == set(OperationalStatus)
        assert set(PULSE_SPEED_FOR_HEALTH) == set(HealthCategory)
        assert set(TRANSACTION_STATUS_MAPPING) == set(TransactionStatus)
        assert set(AGENT_HEALTH_MAPPING) == set(AgentHealthStatus)

    @pytest.mark.parametrize("status,category", [
        (OperationalStatus.OPTIMAL,     HealthCategory.HEALTHY),
        (OperationalStatus.NOMINAL,     HealthCategory.HEALTHY),
        (OperationalStatus.DEGRADED,    HealthCategory.DEGRADED),
        (OperationalStatus.MAINTENANCE, HealthCategory.CRITICAL),
        (OperationalStatus.FAULT,       HealthCategory.CRITICAL),
        (None,                          HealthCategory.OFFLINE),
    ])
    def test_health_category_for(self, status, category):
        assert health_category_for(status) is category

    @pytest.mark.parametrize("category,pulse", [
        (HealthCategory.HEALTHY,  PulseSpeed.SLOW),
        (HealthCategory.DEGRADED, PulseSpeed.MEDIUM),
        (HealthCategory.CRITICAL, PulseSpeed.FAST),
        (HealthCategory.OFFLINE,  PulseSpeed.NONE),
    ])
    def test_pulse_speed_for_health(self, category, pulse):
        assert pulse_speed_for_health(category) is pulse

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            HEALTH_CATEGORY_FOR_STATUS[OperationalStatus.FAULT] = HealthCategory.HEALTHY  # type: ignore[index]


# =============================================================================
# SECTION 3 -- External state mappings
# =============================================================================

class TestTransactionAndAgentMappings:

    def test_transaction_success(self):
        assert map_transaction_status("success") == StatusMapping(
            OperationalStatus.OPTIMAL, HealthCategory.HEALTHY, PulseSpeed.SLOW)

    def test_transaction_pending(self):
        m = map_transaction_status(TransactionStatus.PENDING)
        assert m.operational_status is OperationalStatus.NOMINAL
        assert m.health_category is HealthCategory.OFFLINE
        assert m.pulse_speed is PulseSpeed.MEDIUM

    def test_transaction_failed(self):
        m = map_transaction_status("FAILED")
        assert m.operational_status is OperationalStatus.FAULT
        assert m.health_category is HealthCategory.CRITICAL
        assert m.pulse_speed is PulseSpeed.FAST

    def test_unknown_transaction_reads_as_pending(self):
        assert map_transaction_status("reverted") == map_transaction_status("pending")

    @pytest.mark.parametrize("health,status,category,pulse", [
        ("online",   OperationalStatus.OPTIMAL,     HealthCategory.HEALTHY,  PulseSpeed.SLOW),
        ("thinking", OperationalStatus.NOMINAL,     HealthCategory.HEALTHY,  PulseSpeed.MEDIUM),
        ("error",    OperationalStatus.FAULT,       HealthCategory.CRITICAL, PulseSpeed.FAST),
        ("offline",  OperationalStatus.MAINTENANCE, HealthCategory.OFFLINE,  PulseSpeed.NONE),
    ])
    def test_agent_health(self, health, status, category, pulse):
        assert map_agent_health(health) == StatusMapping(status, category, pulse)

    def test_unknown_agent_health_reads_as_offline(self):
        assert map_agent_health(None) == map_agent_health(AgentHealthStatus.OFFLINE)
