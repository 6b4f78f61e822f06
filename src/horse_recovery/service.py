"""
Recovery service: fetches a horse's recent activities and computes its rest
recommendation.

Transport concerns (HTTP, CORS, auth) stay with the caller; ``handle``
returns a ``RecoveryResponse`` envelope ready to be serialized.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from .calculator import compute_recovery_recommendation
from .config import RecoveryConfig, get_settings
from .exceptions import DataSourceError, HorseRecoveryError, ValidationError
from .models import ActivityRecord, RecoveryRecommendation, RecoveryRequest, RecoveryResponse
from .sources import ActivitySource


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current instant, timezone-aware."""
    return datetime.now(timezone.utc)


def lookback_start(now: datetime, days: int) -> datetime:
    """Start of the lookback window ending at ``now``."""
    return now - timedelta(days=days)


def parse_request(payload: Mapping[str, Any]) -> RecoveryRequest:
    """
    Validate a raw request payload.

    Accepts ``horseId`` or ``horse_id`` (numeric IDs are read as strings)
    and an optional ``days``.

    Raises:
        ValidationError: If the horse ID is missing or a field is invalid
    """
    horse_id = payload.get("horseId") or payload.get("horse_id")
    if not horse_id or not str(horse_id).strip():
        raise ValidationError("Horse ID is required", field="horseId")

    try:
        return RecoveryRequest.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(
            first.get("msg", "Invalid request"),
            field=field or None,
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


class RecoveryService:
    """Service computing rest recommendations from an activity source."""

    def __init__(
        self,
        source: ActivitySource,
        config: Optional[RecoveryConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._source = source
        self._config = config or RecoveryConfig()
        self._clock = clock or utc_now

    @property
    def config(self) -> RecoveryConfig:
        """The active recovery policy."""
        return self._config

    def _fetch_records(self, horse_id: str, since: datetime) -> List[ActivityRecord]:
        try:
            rows = self._source.fetch_activities(horse_id, since)
        except HorseRecoveryError:
            raise
        except Exception as e:
            logger.error(f"Failed to fetch activities for horse {horse_id}: {e}")
            raise DataSourceError("Failed to fetch activities", horse_id=horse_id) from e

        try:
            return [ActivityRecord.from_row(row) for row in rows]
        except (KeyError, PydanticValidationError) as e:
            raise DataSourceError(
                f"Invalid activity row: {e}",
                horse_id=horse_id,
            ) from e

    def recommend(
        self,
        request: RecoveryRequest,
        now: Optional[datetime] = None,
    ) -> RecoveryRecommendation:
        """
        Compute the recommendation for one horse.

        Args:
            request: Validated request (horse and optional window length)
            now: Evaluation instant, defaults to the service clock

        Returns:
            RecoveryRecommendation for the horse's lookback window

        Raises:
            DataSourceError: If the source fails or returns malformed rows
        """
        now = now or self._clock()
        days = request.days or self._config.lookback_days
        since = lookback_start(now, days)

        records = self._fetch_records(request.horse_id, since)
        logger.debug(f"Computing recovery for horse {request.horse_id} from {len(records)} activities over {days}d")

        recommendation = compute_recovery_recommendation(records, now, self._config)
        logger.info(
            f"Horse {request.horse_id}: level={recommendation.workload_level.value} "
            f"rest={recommendation.recommended_rest_hours}h can_ride={recommendation.can_ride}"
        )
        return recommendation

    def handle(
        self,
        payload: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> RecoveryResponse:
        """
        Validate a raw payload and wrap the outcome in a response envelope.

        Domain and validation failures become ``success=False`` responses
        carrying the error message.
        """
        try:
            request = parse_request(payload)
            recommendation = self.recommend(request, now=now)
        except HorseRecoveryError as e:
            logger.warning(f"Recovery request failed: {e!r}")
            return RecoveryResponse(success=False, error=e.message)

        return RecoveryResponse(success=True, data=recommendation)


# Singleton instance, unbound until an activity source is configured
_recovery_service: Optional[RecoveryService] = None


def configure_recovery_service(source: ActivitySource) -> RecoveryService:
    """Bind the singleton to ``source`` with the policy from settings."""
    global _recovery_service
    settings = get_settings()
    _recovery_service = RecoveryService(source=source, config=settings.to_recovery_config())
    logger.info(f"Recovery service bound to {type(source).__name__}")
    return _recovery_service


def get_recovery_service() -> RecoveryService:
    """
    Get the recovery service singleton.

    Raises:
        DataSourceError: If no activity source has been configured yet
    """
    if _recovery_service is None:
        raise DataSourceError("No activity source configured")
    return _recovery_service


def set_recovery_service(service: Optional[RecoveryService]) -> None:
    """Replace the singleton, or unbind it with ``None``."""
    global _recovery_service
    _recovery_service = service
