"""Tests for the recovery service."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from horse_recovery.config import RecoveryConfig
from horse_recovery.exceptions import DataSourceError, ErrorCode, ValidationError
from horse_recovery.models import RecoveryRequest, WorkloadLevel
from horse_recovery.service import (
    RecoveryService,
    configure_recovery_service,
    get_recovery_service,
    lookback_start,
    parse_request,
    set_recovery_service,
)
from horse_recovery.sources import InMemoryActivitySource


class TestLookbackStart:
    """Tests for lookback window computation."""

    def test_days_before_now(self, now):
        assert lookback_start(now, 7) == now - timedelta(days=7)


class TestParseRequest:
    """Tests for request validation."""

    def test_camel_case_payload(self):
        request = parse_request({"horseId": "h1", "days": 3})
        assert request.horse_id == "h1"
        assert request.days == 3

    def test_snake_case_payload(self):
        assert parse_request({"horse_id": "h1"}).horse_id == "h1"

    def test_numeric_horse_id(self):
        """Numeric IDs are accepted and read as strings."""
        assert parse_request({"horseId": 42}).horse_id == "42"

    @pytest.mark.parametrize("payload", [{}, {"horseId": ""}, {"horseId": None}, {"days": 7}])
    def test_missing_horse_id(self, payload):
        with pytest.raises(ValidationError) as exc_info:
            parse_request(payload)

        assert exc_info.value.message == "Horse ID is required"
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.details["field"] == "horseId"

    def test_invalid_days(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_request({"horseId": "h1", "days": 0})

        assert exc_info.value.details["field"] == "days"


class TestRecoveryService:
    """Tests for RecoveryService."""

    def test_recommend_uses_window(self, now, activity_rows):
        """Only the horse's activities within the window are used."""
        service = RecoveryService(InMemoryActivitySource(activity_rows))

        result = service.recommend(RecoveryRequest(horse_id="h1"), now=now)

        # 85 and 40 in the last 7 days; the 90 from April 10th is outside
        assert result.stats.activities_count == 2
        assert result.stats.avg_workload == "62.5"
        assert result.workload_level == WorkloadLevel.INTENSE
        assert result.stats.hours_since_last_activity == "10.0"
        assert result.remaining_rest_hours == 38

    def test_request_days_override_config(self, now, activity_rows):
        """A longer window reaches older activities."""
        service = RecoveryService(InMemoryActivitySource(activity_rows))

        result = service.recommend(RecoveryRequest(horse_id="h1", days=30), now=now)

        assert result.stats.activities_count == 3

    def test_config_lookback_days(self, now):
        """Without days in the request the configured window is used."""
        source = MagicMock()
        source.fetch_activities.return_value = []
        service = RecoveryService(source, config=RecoveryConfig(lookback_days=3))

        service.recommend(RecoveryRequest(horse_id="h1"), now=now)

        source.fetch_activities.assert_called_once_with("h1", now - timedelta(days=3))

    def test_clock_used_when_now_omitted(self, now):
        """The injected clock supplies the evaluation instant."""
        rows = [{"workload": 10, "start_time": (now - timedelta(hours=20)).isoformat()}]
        service = RecoveryService(InMemoryActivitySource(rows), clock=lambda: now)

        result = service.recommend(RecoveryRequest(horse_id="h1"))

        assert result.can_ride is True
        assert result.stats.hours_since_last_activity == "20.0"

    def test_no_activities(self, now):
        service = RecoveryService(InMemoryActivitySource([]))

        result = service.recommend(RecoveryRequest(horse_id="h1"), now=now)

        assert result.workload_level == WorkloadLevel.NONE
        assert result.can_ride is True

    def test_source_failure_wrapped(self, now):
        """Unexpected source errors become DataSourceError."""
        source = MagicMock()
        source.fetch_activities.side_effect = ConnectionError("database unavailable")
        service = RecoveryService(source)

        with pytest.raises(DataSourceError) as exc_info:
            service.recommend(RecoveryRequest(horse_id="h1"), now=now)

        assert exc_info.value.details["horse_id"] == "h1"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_malformed_row(self, now):
        """Rows the calculator cannot use are reported as source errors."""
        source = MagicMock()
        source.fetch_activities.return_value = [{"workload": -5, "start_time": now.isoformat()}]
        service = RecoveryService(source)

        with pytest.raises(DataSourceError, match="Invalid activity row"):
            service.recommend(RecoveryRequest(horse_id="h1"), now=now)


class TestHandle:
    """Tests for the response envelope."""

    def test_success(self, now, activity_rows):
        service = RecoveryService(InMemoryActivitySource(activity_rows))

        response = service.handle({"horseId": "h2"}, now=now)

        assert response.success is True
        assert response.error is None
        data = response.to_api_dict()["data"]
        assert data["workloadLevel"] == "light"
        assert data["recommendedRestHours"] == 12
        assert data["canRide"] is True

    def test_missing_horse_id(self, now):
        service = RecoveryService(InMemoryActivitySource([]))

        response = service.handle({}, now=now)

        assert response.success is False
        assert response.data is None
        assert response.to_api_dict() == {"success": False, "error": "Horse ID is required"}

    def test_source_failure(self, now):
        source = MagicMock()
        source.fetch_activities.side_effect = RuntimeError("boom")
        service = RecoveryService(source)

        response = service.handle({"horseId": "h1"}, now=now)

        assert response.success is False
        assert response.error == "Failed to fetch activities"

    def test_naive_start_time(self, now):
        """A row without a timezone cannot be placed in time."""
        source = MagicMock()
        source.fetch_activities.return_value = [{"workload": 10, "start_time": "2024-05-01T02:00:00"}]
        service = RecoveryService(source)

        response = service.handle({"horseId": "h1"}, now=now)

        assert response.success is False
        assert response.error.startswith("Invalid activity row")


class TestSingleton:
    """Tests for the service singleton."""

    def test_unconfigured_service_raises(self):
        """Without a source there is nothing to base a recommendation on."""
        with pytest.raises(DataSourceError, match="No activity source configured"):
            get_recovery_service()

    def test_configure_binds_source(self, now, activity_rows):
        service = configure_recovery_service(InMemoryActivitySource(activity_rows))

        assert get_recovery_service() is service
        assert get_recovery_service() is get_recovery_service()
        assert service.handle({"horseId": "h1"}, now=now).data.workload_level == WorkloadLevel.INTENSE

    def test_configure_uses_settings(self, monkeypatch):
        monkeypatch.setenv("HORSE_RECOVERY_LOOKBACK_DAYS", "21")
        service = configure_recovery_service(InMemoryActivitySource([]))
        assert service.config.lookback_days == 21

    def test_set_recovery_service(self):
        service = RecoveryService(InMemoryActivitySource([]))
        set_recovery_service(service)
        assert get_recovery_service() is service

    def test_reset(self):
        set_recovery_service(RecoveryService(InMemoryActivitySource([])))
        set_recovery_service(None)
        with pytest.raises(DataSourceError):
            get_recovery_service()
