from datetime import datetime, timedelta, timezone

import pytest

from aimp.core.domain import AgentPersona, SourceRecord, TrustMathematics


NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _iso_ago(seconds: float, now: datetime = NOW) -> str:
    """ISO 8601 timestamp `seconds` before `now`, with a trailing Z."""
    return (now - timedelta(seconds=seconds)).strftime("%Y-%m-%dT%H:%M:%S.%f") + "Z"


class FakeClock:
    """Manually advanced clock for runtime tests."""

    def __init__(self, start: datetime = NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scenario_a_record() -> SourceRecord:
    """confidence 92, 3 witnesses, sigma 0.5, produced 45 s before NOW."""
    return SourceRecord(
        id="decision-a",
        timestamp=_iso_ago(45),
        agent=AgentPersona.OPERATIONS,
        trust_math=TrustMathematics(
            confidence_score=92.0,
            witness_count=3,
            deviation_sigma=0.5,
            exceeds_threshold=False,
        ),
    )


@pytest.fixture
def bare_record() -> SourceRecord:
    """No trust math, no confidence, no status, produced at NOW."""
    return SourceRecord(id="bare", timestamp=_iso_ago(0))


@pytest.fixture
def iso_ago():
    """Factory: iso_ago(seconds) -> timestamp string relative to NOW."""
    return _iso_ago
