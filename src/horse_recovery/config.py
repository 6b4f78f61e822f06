"""Recovery policy and configuration settings."""

from functools import lru_cache
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import WorkloadLevel, to_camel


# =============================================================================
# Policy Models
# =============================================================================

class ThresholdTier(BaseModel):
    """One row of the workload threshold table."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    max_avg_workload: Optional[float] = Field(
        None, gt=0,
        description="Exclusive upper bound on average workload (None = unbounded)"
    )
    level: WorkloadLevel = Field(..., description="Level assigned to this tier")
    rest_hours: int = Field(..., ge=0, description="Recommended rest for this tier")
    message: str = Field(..., description="Explanation shown for this tier")


class RecoveryMessages(BaseModel):
    """Fixed wording used around the tier messages."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    no_recent_activity: str = "Aucune activité récente. Le cheval est bien reposé."
    rested_clause: str = "Le cheval est suffisamment reposé."
    remaining_clause: str = "Il reste {hours}h de repos recommandé."


DEFAULT_THRESHOLDS: Tuple[ThresholdTier, ...] = (
    ThresholdTier(
        max_avg_workload=30,
        level=WorkloadLevel.LIGHT,
        rest_hours=12,
        message="Charge de travail légère. Le cheval peut reprendre l'entraînement.",
    ),
    ThresholdTier(
        max_avg_workload=60,
        level=WorkloadLevel.MODERATE,
        rest_hours=24,
        message="Charge de travail modérée. Un jour de repos est recommandé.",
    ),
    ThresholdTier(
        max_avg_workload=80,
        level=WorkloadLevel.INTENSE,
        rest_hours=48,
        message="Charge de travail intense. Deux jours de repos sont recommandés.",
    ),
    ThresholdTier(
        max_avg_workload=None,
        level=WorkloadLevel.VERY_INTENSE,
        rest_hours=72,
        message="Charge de travail très intense. Trois jours de repos minimum sont nécessaires.",
    ),
)

DEFAULT_LOOKBACK_DAYS = 7


class RecoveryConfig(BaseModel):
    """
    Policy driving the recovery calculator.

    The threshold table is walked in order and the first tier whose
    ``max_avg_workload`` is strictly greater than the average wins, so the
    bounds must ascend and the last tier must be unbounded.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    lookback_days: int = Field(
        default=DEFAULT_LOOKBACK_DAYS, ge=1, le=365,
        description="Window used when querying activities"
    )
    thresholds: Tuple[ThresholdTier, ...] = Field(default=DEFAULT_THRESHOLDS)
    messages: RecoveryMessages = Field(default_factory=RecoveryMessages)
    assume_sorted: bool = Field(
        default=True,
        description="Trust that activities arrive most-recent-first; sort them otherwise"
    )

    @model_validator(mode="after")
    def _check_thresholds(self) -> "RecoveryConfig":
        if not self.thresholds:
            raise ValueError("At least one threshold tier is required")

        previous: Optional[float] = None
        for index, tier in enumerate(self.thresholds):
            is_last = index == len(self.thresholds) - 1
            if tier.level == WorkloadLevel.NONE:
                raise ValueError("Level 'none' is reserved for windows without activity")
            if tier.max_avg_workload is None:
                if not is_last:
                    raise ValueError("Only the last threshold tier may be unbounded")
                continue
            if is_last:
                raise ValueError("The last threshold tier must be unbounded")
            if previous is not None and tier.max_avg_workload <= previous:
                raise ValueError("Threshold bounds must be strictly ascending")
            previous = tier.max_avg_workload
        return self


# =============================================================================
# Settings
# =============================================================================

class Settings(BaseSettings):
    """Settings loaded from HORSE_RECOVERY_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HORSE_RECOVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    assume_sorted: bool = True
    log_level: str = "INFO"

    def to_recovery_config(self) -> RecoveryConfig:
        """Build the recovery policy with the default threshold table."""
        return RecoveryConfig(
            lookback_days=self.lookback_days,
            assume_sorted=self.assume_sorted,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
