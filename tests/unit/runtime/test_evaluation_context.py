# =============================================================================
# AIMP v1.0.0 -- EVALUATION CONTEXT TESTS
# File:   tests/unit/runtime/test_evaluation_context.py
# =============================================================================
#
# Coverage:
#   Upsert / remove / tick / system state re-evaluation, sink delivery,
#   motion preference push, periodic timer, idempotent teardown, closed
#   context rejection, event log contents.
# =============================================================================

from __future__ import annotations

import asyncio

import pytest

from aimp.core.composition import CompositionPipeline
from aimp.core.domain import (
    FreshnessTier,
    GovernanceState,
    GradePolicy,
    MotionPreference,
    PulseSpeed,
    SourceRecord,
    SystemState,
    TrustGrade,
    TrustMathematics,
)
from aimp.core.logging_layer import (
    EVALUATION,
    MOTION_PREFERENCE_CHANGED,
    RECORD_REMOVED,
    RECORD_UPSERTED,
    TEARDOWN,
    TICK,
    TICK_FAILED,
    EventFilter,
)
from aimp.runtime import ContextClosedError, EvaluationContext, MotionPreferenceSource


def _record(record_id, timestamp, score=92.0):
    return SourceRecord(
        id=record_id,
        timestamp=timestamp,
        trust_math=TrustMathematics(score, 3, 0.5),
    )


def _count(ctx, event_type):
    return len(ctx.logger.query_events(EventFilter(event_type=event_type)))


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:

    def test_default_interval_from_config(self):
        ctx = EvaluationContext()
        assert ctx.interval_sec == 30.0
        ctx.close()

    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_non_positive_interval_rejected(self, interval):
        with pytest.raises(ValueError):
            EvaluationContext(interval_sec=interval)

    def test_subscribes_to_motion_source(self):
        source = MotionPreferenceSource()
        ctx = EvaluationContext(motion_source=source)
        assert source.listener_count == 1
        ctx.close()

    def test_initial_motion_taken_from_source(self):
        source = MotionPreferenceSource(MotionPreference(reduce_motion=True))
        ctx = EvaluationContext(motion_source=source)
        assert ctx.motion.reduce_motion is True
        ctx.close()


# ---------------------------------------------------------------------------
# Record updates
# ---------------------------------------------------------------------------

class TestRecordUpdates:

    def test_upsert_evaluates_immediately(self, fake_clock, iso_ago):
        delivered = []
        ctx = EvaluationContext(clock=fake_clock, sink=lambda rid, p: delivered.append((rid, p)))
        params = ctx.upsert_record(_record("a", iso_ago(45)))
        assert params.freshness_tier is FreshnessTier.WARNING
        assert ctx.get("a") == params
        assert delivered == [("a", params)]

    def test_upsert_replaces_record(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        ctx.upsert_record(_record("a", iso_ago(0), score=92.0))
        ctx.upsert_record(_record("a", iso_ago(0), score=40.0))
        assert ctx.get("a").trust_grade is TrustGrade.POOR
        assert list(ctx.outputs) == ["a"]

    def test_upsert_with_governance_state(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        params = ctx.upsert_record(_record("a", iso_ago(0)), governance_state=GovernanceState.VOTING)
        assert params.pulse_speed is PulseSpeed.MEDIUM

    def test_governance_state_cleared_by_plain_upsert(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        ctx.upsert_record(_record("a", iso_ago(0)), governance_state=GovernanceState.VOTING)
        assert ctx.upsert_record(_record("a", iso_ago(0))).pulse_speed is PulseSpeed.NONE

    def test_remove(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        ctx.upsert_record(_record("a", iso_ago(0)))
        assert ctx.remove_record("a") is True
        assert ctx.get("a") is None
        assert ctx.remove_record("a") is False
        assert _count(ctx, RECORD_REMOVED) == 1

    def test_outputs_is_a_copy(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        ctx.upsert_record(_record("a", iso_ago(0)))
        snapshot = ctx.outputs
        snapshot.clear()
        assert ctx.get("a") is not None

    def test_upsert_logs_update_then_evaluation(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        ctx.upsert_record(_record("a", iso_ago(0)))
        events = ctx.logger.query_events(EventFilter(record_id="a"))
        assert [e.type for e in events] == [RECORD_UPSERTED, EVALUATION]


# ---------------------------------------------------------------------------
# Re-evaluation triggers
# ---------------------------------------------------------------------------

class TestReevaluation:

    def test_tick_applies_decay_to_idle_records(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        first = ctx.upsert_record(_record("a", iso_ago(0)))
        fake_clock.advance(120)
        second = ctx.tick()["a"]
        assert second.displayed_confidence < first.displayed_confidence
        assert second.opacity < first.opacity
        assert second.freshness_tier is FreshnessTier.NORMAL

    def test_tick_evaluates_every_record_in_id_order(self, fake_clock, iso_ago):
        seen = []
        ctx = EvaluationContext(clock=fake_clock, sink=lambda rid, p: seen.append(rid))
        ctx.upsert_record(_record("b", iso_ago(0)))
        ctx.upsert_record(_record("a", iso_ago(0)))
        seen.clear()
        ctx.tick()
        assert seen == ["a", "b"]
        assert _count(ctx, TICK) == 1

    def test_motion_push_reevaluates(self, fake_clock, iso_ago):
        source = MotionPreferenceSource()
        ctx = EvaluationContext(motion_source=source, clock=fake_clock)
        before = ctx.upsert_record(_record("a", iso_ago(0)))
        source.set_reduce_motion(True)
        after = ctx.get("a")
        assert after.duration_seconds == 0.05
        assert after.duration_seconds < before.duration_seconds
        assert ctx.motion.reduce_motion is True
        assert _count(ctx, MOTION_PREFERENCE_CHANGED) == 1

    def test_system_state_reevaluates(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        ctx.upsert_record(_record("a", iso_ago(0)))
        outputs = ctx.set_system_state(SystemState.EMERGENCY)
        assert outputs["a"].opacity == 0.7
        assert ctx.system_state is SystemState.EMERGENCY

    def test_pipeline_grade_policy_used(self, fake_clock, iso_ago):
        ctx = EvaluationContext(CompositionPipeline(grade_policy=GradePolicy.DECAYED), clock=fake_clock)
        assert ctx.upsert_record(_record("a", iso_ago(45))).trust_grade is TrustGrade.GOOD


# ---------------------------------------------------------------------------
# Teardown
# ---------------------------------------------------------------------------

class TestTeardown:

    def test_close_idempotent(self, fake_clock):
        source = MotionPreferenceSource()
        ctx = EvaluationContext(motion_source=source, clock=fake_clock)
        ctx.close()
        ctx.close()
        assert ctx.closed is True
        assert source.listener_count == 0
        assert _count(ctx, TEARDOWN) == 1

    def test_closed_context_rejects_work(self, fake_clock, iso_ago):
        ctx = EvaluationContext(clock=fake_clock)
        ctx.close()
        with pytest.raises(ContextClosedError):
            ctx.upsert_record(_record("a", iso_ago(0)))
        with pytest.raises(ContextClosedError):
            ctx.tick()
        with pytest.raises(ContextClosedError):
            ctx.set_system_state(SystemState.PAUSED)
        with pytest.raises(ContextClosedError):
            ctx.remove_record("a")

    def test_motion_push_after_close_is_ignored(self, fake_clock, iso_ago):
        source = MotionPreferenceSource()
        other = EvaluationContext(motion_source=source, clock=fake_clock)
        ctx = EvaluationContext(motion_source=source, clock=fake_clock)
        ctx.upsert_record(_record("a", iso_ago(0)))
        ctx.close()
        source.set_reduce_motion(True)
        assert ctx.get("a").duration_seconds != 0.05
        assert _count(ctx, MOTION_PREFERENCE_CHANGED) == 0
        other.close()

    def test_start_requires_running_loop(self, fake_clock):
        ctx = EvaluationContext(clock=fake_clock)
        with pytest.raises(RuntimeError):
            ctx.start()
        ctx.close()


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------

class TestTimer:

    def test_periodic_tick(self, fake_clock, iso_ago):
        async def scenario():
            ctx = EvaluationContext(clock=fake_clock, interval_sec=0.01)
            ctx.upsert_record(_record("a", iso_ago(0)))
            task = ctx.start()
            assert ctx.start() is task
            assert ctx.timer_running is True
            for _ in range(200):
                await asyncio.sleep(0.01)
                if _count(ctx, TICK) > 0:
                    break
            await ctx.aclose()
            return ctx, task

        ctx, task = asyncio.run(scenario())
        assert _count(ctx, TICK) > 0
        assert task.cancelled()
        assert ctx.timer_running is False

    def test_failing_sink_does_not_stop_timer(self, fake_clock, iso_ago):
        state = {"fail": False}

        def sink(record_id, params):
            if state["fail"]:
                raise RuntimeError("sink unavailable")

        async def scenario():
            ctx = EvaluationContext(clock=fake_clock, sink=sink, interval_sec=0.01)
            ctx.upsert_record(_record("a", iso_ago(0)))
            state["fail"] = True
            ctx.start()
            for _ in range(200):
                await asyncio.sleep(0.01)
                if _count(ctx, TICK_FAILED) >= 2:
                    break
            running = ctx.timer_running
            await ctx.aclose()
            return ctx, running

        ctx, running = asyncio.run(scenario())
        assert running is True
        failures = ctx.logger.query_events(EventFilter(event_type=TICK_FAILED))
        assert len(failures) >= 2
        assert "sink unavailable" in failures[0].data["error"]
        assert _count(ctx, TEARDOWN) == 1

    def test_async_with_releases_resources(self, fake_clock):
        source = MotionPreferenceSource()

        async def scenario():
            async with EvaluationContext(motion_source=source, clock=fake_clock,
                                         interval_sec=10.0) as ctx:
                assert ctx.timer_running is True
            return ctx

        ctx = asyncio.run(scenario())
        assert ctx.closed is True
        assert ctx.timer_running is False
        assert source.listener_count == 0
        assert _count(ctx, TEARDOWN) == 1

    def test_aclose_without_start(self, fake_clock):
        ctx = EvaluationContext(clock=fake_clock)
        asyncio.run(ctx.aclose())
        assert ctx.closed is True
