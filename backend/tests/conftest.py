from datetime import datetime, timedelta, timezone

import pytest

from cadence.services.store import JsonSessionRepository, SessionRecordStore

T0 = datetime(2024, 1, 1, 8, 0, 0, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data" / "cadence.json"


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def store(data_file, clock):
    return SessionRecordStore(JsonSessionRepository(data_file), clock=clock)


def session_fields(**overrides):
    fields = {
        "timestamp": "2024-01-01T00:00:00Z",
        "averageCadence": 160.5,
        "totalSteps": 1200,
        "duration": 450.0,
    }
    fields.update(overrides)
    return fields
