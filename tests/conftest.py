"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone

from horse_recovery.config import get_settings
from horse_recovery.models import ActivityRecord
from horse_recovery.service import set_recovery_service


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed evaluation instant."""
    return NOW


@pytest.fixture
def make_activity():
    """Factory for activities that started a number of hours before NOW."""

    def _make(
        hours_ago: float,
        workload=50.0,
        duration_seconds=3600,
        distance_meters=10000.0,
    ) -> ActivityRecord:
        return ActivityRecord(
            workload=workload,
            duration_seconds=duration_seconds,
            distance_meters=distance_meters,
            start_time=NOW - timedelta(hours=hours_ago),
        )

    return _make


@pytest.fixture
def activity_rows():
    """Rows as the data-retrieval layer returns them, for two horses."""
    return [
        {
            "horse_id": "h1",
            "workload": 85,
            "duration_seconds": 3600,
            "distance": 10000,
            "start_time": "2024-05-01T02:00:00Z",
        },
        {
            "horse_id": "h1",
            "workload": 40,
            "duration_seconds": 1800,
            "distance": 5000,
            "start_time": "2024-04-28T09:00:00+00:00",
        },
        {
            "horse_id": "h1",
            "workload": 90,
            "duration_seconds": 5400,
            "distance": 15000,
            "start_time": "2024-04-10T09:00:00+00:00",
        },
        {
            "horse_id": "h2",
            "workload": 10,
            "duration_seconds": 900,
            "distance": 2000,
            "start_time": "2024-04-30T18:00:00+00:00",
        },
    ]


@pytest.fixture(autouse=True)
def reset_singletons():
    """Start every test with fresh settings and service singletons."""
    get_settings.cache_clear()
    set_recovery_service(None)
    yield
    get_settings.cache_clear()
    set_recovery_service(None)
