import itertools
from datetime import datetime, timezone

import pytest

from features.activity import ActivityMonitor, RecordBuilder
from features.activity.models import (
    ActivityLevel,
    ActivityRecord,
    ActivityStatus,
    ActivityType,
)

FIXED_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"act-{next(counter)}"


@pytest.fixture
def builder(fixed_clock, id_factory):
    return RecordBuilder(clock=fixed_clock, id_factory=id_factory)


@pytest.fixture
def monitor():
    mon = ActivityMonitor(max_records=100, seed_agents=True)
    yield mon
    mon.close()


@pytest.fixture
def make_record():
    counter = itertools.count(1)

    def _make(**overrides) -> ActivityRecord:
        n = next(counter)
        fields = {
            "id": f"rec-{n}",
            "timestamp": FIXED_TIME,
            "type": ActivityType.SYSTEM,
            "status": ActivityStatus.IN_PROGRESS,
            "level": ActivityLevel.INFO,
            "agent": "System",
            "message": f"message {n}",
            "progress": None,
            "metadata": {},
        }
        fields.update(overrides)
        return ActivityRecord(**fields)

    return _make
