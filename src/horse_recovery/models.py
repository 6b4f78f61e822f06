"""Data models for activity records and rest recommendations."""

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


# =============================================================================
# Enums
# =============================================================================

class WorkloadLevel(str, Enum):
    """Workload category derived from the average workload over the window."""
    NONE = "none"                  # No activity in the window
    LIGHT = "light"                # avg < 30
    MODERATE = "moderate"          # 30 <= avg < 60
    INTENSE = "intense"            # 60 <= avg < 80
    VERY_INTENSE = "very_intense"  # avg >= 80


# =============================================================================
# Activity Models
# =============================================================================

class ActivityRecord(BaseModel):
    """A single logged activity for a horse."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    workload: Optional[float] = Field(None, ge=0, description="Training-load score (0 = no load)")
    duration_seconds: Optional[int] = Field(None, ge=0, description="Activity duration in seconds")
    distance_meters: Optional[float] = Field(None, ge=0, description="Distance covered in meters")
    start_time: AwareDatetime = Field(..., description="When the activity started (timezone-aware)")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ActivityRecord":
        """
        Build a record from a data-retrieval row.

        Rows use the storage column names: ``workload``, ``duration_seconds``,
        ``distance`` (meters) and ``start_time``.
        """
        return cls(
            workload=row.get("workload"),
            duration_seconds=row.get("duration_seconds"),
            distance_meters=row.get("distance"),
            start_time=row["start_time"],
        )


# =============================================================================
# Recommendation Models
# =============================================================================

class RecoveryStats(BaseModel):
    """Aggregate statistics over the activities in the lookback window."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    activities_count: int = Field(..., ge=1, description="Number of activities in the window")
    avg_workload: str = Field(..., description="Average workload, one decimal")
    total_distance_km: str = Field(..., description="Total distance, e.g. '10.00 km'")
    total_duration_formatted: str = Field(..., description="Total duration, e.g. '1h 0min'")
    hours_since_last_activity: str = Field(..., description="Hours since the most recent activity, one decimal")


class RecoveryRecommendation(BaseModel):
    """Rest recommendation produced for one set of activities."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    recommended_rest_hours: int = Field(..., ge=0, description="Recommended rest before riding again")
    workload_level: WorkloadLevel = Field(..., description="Workload category")
    message: str = Field(..., description="Human-readable explanation")
    can_ride: bool = Field(..., description="Whether enough rest has already been taken")
    remaining_rest_hours: int = Field(
        default=0, ge=0,
        description="Whole hours of rest still needed (0 when the horse can ride)"
    )
    stats: Optional[RecoveryStats] = Field(None, description="Present when there was recent activity")

    def to_api_dict(self) -> dict:
        """Serialize with camelCase keys, omitting the absent stats block."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Request/Response Models
# =============================================================================

class RecoveryRequest(BaseModel):
    """Request for a horse's rest recommendation."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    horse_id: str = Field(..., min_length=1, description="Horse to evaluate")
    days: Optional[int] = Field(
        None, ge=1, le=365,
        description="Lookback window in days (defaults to the configured window)"
    )

    @field_validator("horse_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Horse ID is required")
        return value


class RecoveryResponse(BaseModel):
    """Envelope handed to the serialization layer."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    success: bool = Field(..., description="Whether the request succeeded")
    data: Optional[RecoveryRecommendation] = Field(None, description="Recommendation on success")
    error: Optional[str] = Field(None, description="Error message if failed")

    def to_api_dict(self) -> dict:
        """Serialize with camelCase keys, omitting absent fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
