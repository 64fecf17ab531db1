# =============================================================================
# AIMP v1.0.0 -- DOMAIN TESTS
# File:   tests/unit/core/test_domain.py
# =============================================================================

import dataclasses
import json
import math

import pytest

from aimp.core.domain import (
    AgentPersona,
    DerivedPresentationParams,
    FreshnessTier,
    HealthCategory,
    Impact,
    OperationalStatus,
    PulseSpeed,
    SourceRecord,
    TrustGrade,
    TrustMathematics,
)


def _params(**overrides) -> DerivedPresentationParams:
    values = dict(
        opacity=0.8,
        duration_multiplier=1.1,
        duration_seconds=0.33,
        pulse_speed=PulseSpeed.SLOW,
        should_alert=False,
        alert_repetitions=0,
        health_category=HealthCategory.HEALTHY,
        operational_status=OperationalStatus.NOMINAL,
        trust_grade=TrustGrade.GOOD,
        freshness_tier=FreshnessTier.WARNING,
        age_seconds=12.0,
        displayed_confidence=71.5,
        desaturate=False,
        neutral_tone=False,
        motion_paused=False,
        easing_id="organic",
    )
    values.update(overrides)
    return DerivedPresentationParams(**values)


# =============================================================================
# SECTION 1 -- Enums
# =============================================================================

class TestEnums:

    def test_enum_values_are_lowercase_strings(self):
        assert OperationalStatus.FAULT.value == "fault"
        assert TrustGrade.SUSPECT == "suspect"
        assert AgentPersona("governor") is AgentPersona.GOVERNOR

    def test_member_counts(self):
        assert len(TrustGrade) == 5
        assert len(OperationalStatus) == 5
        assert len(HealthCategory) == 4
        assert len(FreshnessTier) == 4
        assert len(AgentPersona) == 4
        assert len(PulseSpeed) == 4


# =============================================================================
# SECTION 2 -- TrustMathematics normalisation
# =============================================================================

class TestTrustMathematics:

    def test_valid_values_kept(self):
        tm = TrustMathematics(80.0, 2, 0.7, True, TrustGrade.GOOD)
        assert tm.confidence_score == 80.0
        assert tm.witness_count == 2
        assert tm.deviation_sigma == 0.7
        assert tm.exceeds_threshold is True
        assert tm.trust_grade is TrustGrade.GOOD

    def test_out_of_range_values_clamped(self):
        tm = TrustMathematics(150.0, -3, -1.0, 1)
        assert tm.confidence_score == 100.0
        assert tm.witness_count == 0
        assert tm.deviation_sigma == 0.0
        assert tm.exceeds_threshold is True

    def test_nan_score_becomes_zero(self):
        assert TrustMathematics(float("nan")).confidence_score == 0.0

    def test_negative_score_clamped_to_zero(self):
        assert TrustMathematics(-5.0).confidence_score == 0.0

    def test_infinite_sigma_kept(self):
        assert math.isinf(TrustMathematics(50.0, deviation_sigma=float("inf")).deviation_sigma)

    def test_fractional_witness_count_truncated(self):
        assert TrustMathematics(50.0, witness_count=2.9).witness_count == 2

    def test_grade_string_parsed(self):
        assert TrustMathematics(95.0, trust_grade="EXCELLENT").trust_grade is TrustGrade.EXCELLENT

    def test_unknown_grade_string_becomes_none(self):
        assert TrustMathematics(95.0, trust_grade="stellar").trust_grade is None

    def test_grade_defaults_to_none(self):
        assert TrustMathematics(95.0).trust_grade is None

    def test_frozen(self):
        tm = TrustMathematics(50.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            tm.confidence_score = 10.0  # type: ignore[misc]

    def test_from_feed_camel_case(self):
        tm = TrustMathematics.from_feed({
            "confidenceScore": 88,
            "witnessCount": 4,
            "deviationSigma": 0.8,
            "exceedsThreshold": True,
            "trustGrade": "good",
        })
        assert tm == TrustMathematics(88.0, 4, 0.8, True, TrustGrade.GOOD)

    def test_from_feed_snake_case(self):
        tm = TrustMathematics.from_feed({"confidence_score": 40, "witness_count": 1})
        assert tm.confidence_score == 40.0
        assert tm.witness_count == 1
        assert tm.deviation_sigma == 0.0
        assert tm.exceeds_threshold is False

    def test_from_feed_missing_score_becomes_zero(self):
        assert TrustMathematics.from_feed({}).confidence_score == 0.0

    @pytest.mark.parametrize("raw,expected", [
        ("false", False), ("False", False), ("0", False), ("", False),
        ("true", True), ("TRUE", True), ("1", True), (0, False), (1, True),
    ])
    def test_from_feed_threshold_flag_strings(self, raw, expected):
        assert TrustMathematics.from_feed({"exceedsThreshold": raw}).exceeds_threshold is expected


# =============================================================================
# SECTION 3 -- SourceRecord
# =============================================================================

class TestSourceRecord:

    def test_confidence_clamped(self):
        assert SourceRecord("r", "2026-01-01T00:00:00Z", confidence=120).confidence == 100.0

    def test_confidence_none_kept(self):
        assert SourceRecord("r", "2026-01-01T00:00:00Z").confidence is None

    def test_effective_confidence_prefers_record_confidence(self):
        r = SourceRecord("r", "t", confidence=60.0, trust_math=TrustMathematics(90.0))
        assert r.effective_confidence == 60.0

    def test_effective_confidence_falls_back_to_trust_math(self):
        r = SourceRecord("r", "t", trust_math=TrustMathematics(90.0))
        assert r.effective_confidence == 90.0

    def test_effective_confidence_none_without_either(self):
        assert SourceRecord("r", "t").effective_confidence is None

    def test_trust_score_prefers_trust_math(self):
        r = SourceRecord("r", "t", confidence=60.0, trust_math=TrustMathematics(95.0))
        assert r.trust_score == 95.0

    def test_trust_score_falls_back_to_record_confidence(self):
        assert SourceRecord("r", "t", confidence=60.0).trust_score == 60.0

    def test_trust_score_none_without_either(self):
        assert SourceRecord("r", "t").trust_score is None

    @pytest.mark.parametrize("raw,expected", [
        ("false", False), (" False ", False), ("no", False), (None, False),
        ("true", True), ("yes", True), (True, True),
    ])
    def test_from_feed_maintenance_flag_strings(self, raw, expected):
        r = SourceRecord.from_feed({"timestamp": "t", "isInMaintenance": raw})
        assert r.is_in_maintenance is expected

    def test_constraint_violation_defaults_to_none(self):
        assert SourceRecord.from_feed({"timestamp": "t"}).has_constraint_violation is None

    @pytest.mark.parametrize("raw,expected", [("true", True), ("false", False), (False, False)])
    def test_from_feed_constraint_violation(self, raw, expected):
        r = SourceRecord.from_feed({"timestamp": "t", "hasConstraintViolation": raw})
        assert r.has_constraint_violation is expected

    def test_from_feed_full_payload(self):
        r = SourceRecord.from_feed({
            "id": "d-1",
            "timestamp": "2026-01-01T11:59:00Z",
            "agent": "sentinel",
            "confidence": 77,
            "trustMath": {"confidenceScore": 77, "witnessCount": 2},
            "operationalStatus": "degraded",
            "impact": "high",
            "isInMaintenance": False,
        })
        assert r.id == "d-1"
        assert r.agent is AgentPersona.SENTINEL
        assert r.confidence == 77.0
        assert r.trust_math.witness_count == 2
        assert r.operational_status is OperationalStatus.DEGRADED
        assert r.impact is Impact.HIGH
        assert r.is_in_maintenance is False

    def test_from_feed_unknown_enums_become_none(self):
        r = SourceRecord.from_feed({
            "timestamp": "2026-01-01T11:59:00Z",
            "agent": "janitor",
            "operationalStatus": "on-fire",
            "impact": "apocalyptic",
        })
        assert r.agent is None
        assert r.operational_status is None
        assert r.impact is None

    def test_from_feed_missing_id_uses_timestamp(self):
        r = SourceRecord.from_feed({"timestamp": "2026-01-01T11:59:00Z"})
        assert r.id == "2026-01-01T11:59:00Z"

    def test_from_feed_non_mapping_trust_math_ignored(self):
        r = SourceRecord.from_feed({"timestamp": "x", "trustMath": "garbage"})
        assert r.trust_math is None


# =============================================================================
# SECTION 4 -- DerivedPresentationParams serialisation
# =============================================================================

class TestDerivedPresentationParams:

    def test_to_dict_uses_enum_values(self):
        d = _params().to_dict()
        assert d["pulse_speed"] == "slow"
        assert d["operational_status"] == "nominal"
        assert d["trust_grade"] == "good"
        assert d["freshness_tier"] == "warning"

    def test_to_dict_has_every_field(self):
        names = {f.name for f in dataclasses.fields(DerivedPresentationParams)}
        assert set(_params().to_dict()) == names

    def test_canonical_json_is_sorted_and_compact(self):
        raw = _params().to_canonical_json()
        assert isinstance(raw, bytes)
        decoded = json.loads(raw)
        assert list(decoded) == sorted(decoded)
        assert b": " not in raw
        assert b", " not in raw

    def test_canonical_json_identical_for_equal_params(self):
        assert _params().to_canonical_json() == _params().to_canonical_json()

    def test_canonical_json_differs_when_field_differs(self):
        assert _params().to_canonical_json() != _params(opacity=0.81).to_canonical_json()
