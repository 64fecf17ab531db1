# aimp/core/logging_layer.py
# AIMP v1.0.0 -- Evaluation Event Log
#
# Scope: Event-sourced log of evaluation-context activity (record updates,
# ticks, motion preference changes, evaluations, teardown).
# Zero tolerance for lost events. No file IO. No global mutable state.
# All timestamps are caller-supplied. All hashes are deterministic.
#
# Canonical import:
#   from aimp.core.logging_layer import EventLogger, Event, EventFilter
#
# Prohibited: datetime.now(), uuid, random, file IO, global mutable state

# ===========================================================================
# SECTION 1 -- STDLIB IMPORTS
# ===========================================================================

import hashlib
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

# ===========================================================================
# SECTION 2 -- CONSTANTS
# ===========================================================================

# Logged in place of non-finite floats; the event is never dropped.
_NAN_SENTINEL: str = "NaN_DETECTED"
_INF_SENTINEL: str = "Inf_DETECTED"

_HASH_SEP: str = "|"

# Event types emitted by aimp.runtime.EvaluationContext.
RECORD_UPSERTED: str = "RECORD_UPSERTED"
RECORD_REMOVED: str = "RECORD_REMOVED"
TICK: str = "TICK"
MOTION_PREFERENCE_CHANGED: str = "MOTION_PREFERENCE_CHANGED"
EVALUATION: str = "EVALUATION"
TEARDOWN: str = "TEARDOWN"
TICK_FAILED: str = "TICK_FAILED"

# ===========================================================================
# SECTION 3 -- DATACLASSES: Event, EventFilter
# ===========================================================================

@dataclass(frozen=True)
class Event:
    """
    Immutable record of a single context event.

    Fields
    ------
    id        : Deterministic identifier derived from the logger's counter.
    type      : Category string (RECORD_UPSERTED, TICK, EVALUATION, ...).
    timestamp : Caller-supplied datetime. Never generated internally.
    data      : Sanitized payload. NaN/Inf replaced with sentinel strings.
    hash      : SHA-256 hex digest over (id, type, timestamp, data).
    """
    id: str
    type: str
    timestamp: datetime
    data: Dict[str, Any]
    hash: str


@dataclass(frozen=True)
class EventFilter:
    """
    Filter for EventLogger.query_events(). Omitted fields apply no constraint.

    record_id matches events whose payload carries that "record_id".
    limit keeps the oldest matches.
    """
    event_type: Optional[str] = None
    record_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    limit: Optional[int] = None


# ===========================================================================
# SECTION 4 -- INTERNAL HELPERS
# ===========================================================================

def _sanitize_numeric(value: Any) -> Any:
    if isinstance(value, float):
        if math.isnan(value):
            return _NAN_SENTINEL
        if math.isinf(value):
            return _INF_SENTINEL
    return value


def _sanitize_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """New dict with float values sanitized. Input is not mutated."""
    return {k: _sanitize_numeric(v) for k, v in data.items()}


def _compute_hash(
    event_id: str,
    event_type: str,
    timestamp: datetime,
    data: Dict[str, Any],
) -> str:
    """
    SHA-256 over id | type | timestamp.isoformat() | repr(sorted(data.items())).

    Insertion order of `data` does not affect the digest.
    """
    preimage: str = (
        event_id
        + _HASH_SEP
        + event_type
        + _HASH_SEP
        + timestamp.isoformat()
        + _HASH_SEP
        + repr(sorted(data.items()))
    )
    return hashlib.sha256(preimage.encode("ascii", errors="replace")).hexdigest()


def _make_event_id(counter: int) -> str:
    return "EVT-{:016d}".format(counter)


# ===========================================================================
# SECTION 5 -- EventLogger
# ===========================================================================

class EventLogger:
    """
    Event-sourced logger for one evaluation context.

    Events live in an instance-level list. Each logger is independent.
    log_event() raises LoggingError instead of silently discarding an event.
    """

    def __init__(self) -> None:
        self._store: List[Event] = []
        self._counter: int = 0

    def log_event(self, event_type: str, data: Dict[str, Any], timestamp: datetime) -> str:
        """
        Record one event. Return the assigned event ID.

        Raises
        ------
        LoggingError : empty event_type, or timestamp missing / not a datetime.
        """
        if not event_type:
            raise LoggingError("event_type must be a non-empty string")
        if timestamp is None:
            raise LoggingError("timestamp must be caller-supplied; None is not permitted")
        if not isinstance(timestamp, datetime):
            raise LoggingError(
                "timestamp must be a datetime instance; got: {}".format(type(timestamp))
            )

        self._counter += 1
        event_id: str = _make_event_id(self._counter)
        sanitized: Dict[str, Any] = _sanitize_data(data)
        event = Event(
            id=event_id,
            type=event_type,
            timestamp=timestamp,
            data=sanitized,
            hash=_compute_hash(event_id, event_type, timestamp, sanitized),
        )
        self._store.append(event)
        return event_id

    def log_evaluation(self, record_id: str, params: Any, timestamp: datetime) -> str:
        """
        Log one EVALUATION event.

        params is a DerivedPresentationParams (anything with to_dict()).
        """
        if params is None:
            raise LoggingError("params must not be None")
        data: Dict[str, Any] = {"record_id": record_id}
        data.update(params.to_dict())
        return self.log_event(EVALUATION, data, timestamp)

    def query_events(self, filter: EventFilter) -> List[Event]:
        """
        Events matching `filter`, oldest first.

        Applied in order: event_type, record_id, start_time (inclusive),
        end_time (inclusive), limit.
        """
        if filter is None:
            raise LoggingError("filter must not be None")

        results: List[Event] = []
        for event in self._store:
            if filter.event_type is not None and event.type != filter.event_type:
                continue
            if filter.record_id is not None and event.data.get("record_id") != filter.record_id:
                continue
            if filter.start_time is not None and event.timestamp < filter.start_time:
                continue
            if filter.end_time is not None and event.timestamp > filter.end_time:
                continue
            results.append(event)

        if filter.limit is not None:
            results = results[: filter.limit]
        return results

    def get_event_stream(self, start_time: datetime) -> Iterator[Event]:
        if start_time is None:
            raise LoggingError("start_time must be caller-supplied; None is not permitted")
        if not isinstance(start_time, datetime):
            raise LoggingError(
                "start_time must be a datetime instance; got: {}".format(type(start_time))
            )
        for event in self._store:
            if event.timestamp >= start_time:
                yield event

    def verify_event(self, event: Event) -> bool:
        """True iff event.hash matches its recomputed digest."""
        return event.hash == _compute_hash(event.id, event.type, event.timestamp, event.data)

    def event_count(self) -> int:
        return len(self._store)


# ===========================================================================
# SECTION 6 -- EXCEPTIONS
# ===========================================================================

class LoggingError(Exception):
    """
    Raised by EventLogger when an invariant is violated.

    Never silently swallowed; zero lost events.
    """


__all__ = [
    "Event",
    "EventFilter",
    "EventLogger",
    "LoggingError",
    "RECORD_UPSERTED",
    "RECORD_REMOVED",
    "TICK",
    "MOTION_PREFERENCE_CHANGED",
    "EVALUATION",
    "TEARDOWN",
    "TICK_FAILED",
]
