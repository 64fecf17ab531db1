# =============================================================================
# AIMP v1.0.0 -- RUNTIME
# File:   aimp/runtime/context.py
# =============================================================================
#
# SCOPE
# -----
# EvaluationContext: owns the records of one presentation surface and keeps
# their DerivedPresentationParams current.
#
# Re-evaluation triggers:
#   (a) upsert_record()        -- new or updated record, evaluated alone
#   (b) periodic tick          -- every timings.reevaluation_interval_sec,
#                                 all records, so decay stays visible on idle
#                                 records
#                                 (a failing tick is logged as TICK_FAILED
#                                 and the timer keeps running)
#   (c) motion preference push -- all records, via a MotionPreferenceSource
#                                 subscription (never polled)
#   (d) set_system_state()     -- all records
#
# RESOURCES
# ---------
# The timer task and the preference subscription are released
# unconditionally by close() / aclose() / `async with` exit. Both calls are
# idempotent. A closed context rejects further updates with
# ContextClosedError.
#
# CONCURRENCY
# -----------
# Single-threaded asyncio. No locks: every mutation runs on the event loop
# thread and each evaluation is independent and side-effect free.
# =============================================================================

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Dict, Mapping, Optional

from aimp.core.composition import CompositionPipeline
from aimp.core.domain import (
    DerivedPresentationParams,
    GovernanceState,
    MotionPreference,
    SourceRecord,
    SystemState,
)
from aimp.core.logging_layer import (
    MOTION_PREFERENCE_CHANGED,
    RECORD_REMOVED,
    RECORD_UPSERTED,
    TEARDOWN,
    TICK,
    TICK_FAILED,
    EventLogger,
)
from aimp.runtime.motion import MotionPreferenceSource, Subscription

Clock = Callable[[], datetime]
Sink = Callable[[str, DerivedPresentationParams], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ContextClosedError(RuntimeError):
    """Raised when a closed EvaluationContext is asked to do work."""


class EvaluationContext:
    """
    Keeps derived presentation parameters current for a set of records.

    Args:
        pipeline:      CompositionPipeline (config + grade policy).
        motion_source: Reduced-motion source to subscribe to. None -> a
                       private source with reduce_motion=False.
        clock:         Returns the evaluation instant. Injected for tests.
        sink:          Called with (record_id, params) after every evaluation.
        logger:        EventLogger receiving context events.
        interval_sec:  Tick interval; None -> config timings.
    """

    def __init__(
        self,
        pipeline: Optional[CompositionPipeline] = None,
        motion_source: Optional[MotionPreferenceSource] = None,
        clock: Clock = utc_now,
        sink: Optional[Sink] = None,
        logger: Optional[EventLogger] = None,
        interval_sec: Optional[float] = None,
    ) -> None:
        self._pipeline = pipeline if pipeline is not None else CompositionPipeline()
        self._motion_source = motion_source if motion_source is not None else MotionPreferenceSource()
        self._clock = clock
        self._sink = sink
        self._logger = logger if logger is not None else EventLogger()
        if interval_sec is None:
            interval_sec = self._pipeline.config.timings.reevaluation_interval_sec
        if interval_sec <= 0:
            raise ValueError("interval_sec must be > 0; got {!r}".format(interval_sec))
        self._interval_sec = float(interval_sec)

        self._records: Dict[str, SourceRecord] = {}
        self._governance: Dict[str, GovernanceState] = {}
        self._outputs: Dict[str, DerivedPresentationParams] = {}
        self._system_state = SystemState.NORMAL
        self._motion = self._motion_source.current
        self._subscription: Optional[Subscription] = self._motion_source.subscribe(
            self._on_motion_change
        )
        self._timer: Optional[asyncio.Task] = None
        self._closed = False

    # -----------------------------------------------------------------------
    # Read access
    # -----------------------------------------------------------------------

    @property
    def logger(self) -> EventLogger:
        return self._logger

    @property
    def motion(self) -> MotionPreference:
        return self._motion

    @property
    def system_state(self) -> SystemState:
        return self._system_state

    @property
    def interval_sec(self) -> float:
        return self._interval_sec

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def outputs(self) -> Mapping[str, DerivedPresentationParams]:
        return dict(self._outputs)

    def get(self, record_id: str) -> Optional[DerivedPresentationParams]:
        return self._outputs.get(record_id)

    # -----------------------------------------------------------------------
    # Evaluation
    # -----------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise ContextClosedError("EvaluationContext is closed")

    def _evaluate(self, record_id: str, now: datetime) -> DerivedPresentationParams:
        params = self._pipeline.evaluate(
            self._records[record_id],
            now,
            motion=self._motion,
            system_state=self._system_state,
            governance_state=self._governance.get(record_id),
        )
        self._outputs[record_id] = params
        self._logger.log_evaluation(record_id, params, now)
        if self._sink is not None:
            self._sink(record_id, params)
        return params

    def _evaluate_all(self, now: datetime) -> Dict[str, DerivedPresentationParams]:
        return {record_id: self._evaluate(record_id, now) for record_id in sorted(self._records)}

    def upsert_record(
        self,
        record: SourceRecord,
        governance_state: Optional[GovernanceState] = None,
    ) -> DerivedPresentationParams:
        """Insert or replace a record and evaluate it immediately."""
        self._check_open()
        now = self._clock()
        self._records[record.id] = record
        if governance_state is None:
            self._governance.pop(record.id, None)
        else:
            self._governance[record.id] = governance_state
        self._logger.log_event(RECORD_UPSERTED, {"record_id": record.id}, now)
        return self._evaluate(record.id, now)

    def remove_record(self, record_id: str) -> bool:
        self._check_open()
        if record_id not in self._records:
            return False
        del self._records[record_id]
        self._governance.pop(record_id, None)
        self._outputs.pop(record_id, None)
        self._logger.log_event(RECORD_REMOVED, {"record_id": record_id}, self._clock())
        return True

    def tick(self) -> Dict[str, DerivedPresentationParams]:
        """Re-evaluate every record at the current clock instant."""
        self._check_open()
        now = self._clock()
        self._logger.log_event(TICK, {"record_count": len(self._records)}, now)
        return self._evaluate_all(now)

    def set_system_state(self, state: SystemState) -> Dict[str, DerivedPresentationParams]:
        self._check_open()
        self._system_state = state
        return self._evaluate_all(self._clock())

    def _on_motion_change(self, preference: MotionPreference) -> None:
        if self._closed:
            return
        self._motion = preference
        now = self._clock()
        self._logger.log_event(
            MOTION_PREFERENCE_CHANGED,
            {"reduce_motion": preference.reduce_motion},
            now,
        )
        self._evaluate_all(now)

    # -----------------------------------------------------------------------
    # Timer lifecycle
    # -----------------------------------------------------------------------

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval_sec)
            try:
                self.tick()
            except ContextClosedError:
                return
            except Exception as exc:
                # A failing sink must not stop later ticks.
                self._logger.log_event(TICK_FAILED, {"error": repr(exc)}, self._clock())

    def start(self) -> asyncio.Task:
        """
        Start the periodic re-evaluation task on the running loop.

        Calling start() while the timer is running returns the same task.
        """
        self._check_open()
        if self.timer_running:
            return self._timer
        self._timer = asyncio.get_running_loop().create_task(self._tick_loop())
        return self._timer

    def close(self) -> None:
        """
        Release the timer and the motion subscription. Idempotent.

        The timer task is cancelled but not awaited; use aclose() inside a
        coroutine to wait for it.
        """
        if self._closed:
            return
        self._closed = True
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        self._logger.log_event(TEARDOWN, {"record_count": len(self._records)}, self._clock())

    async def aclose(self) -> None:
        timer = self._timer
        self.close()
        if timer is not None:
            try:
                await timer
            except asyncio.CancelledError:
                pass
        self._timer = None

    async def __aenter__(self) -> "EvaluationContext":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = [
    "Clock",
    "Sink",
    "utc_now",
    "ContextClosedError",
    "EvaluationContext",
]
