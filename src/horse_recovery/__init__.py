"""Rest recommendations for horses from their recent training activities."""

from horse_recovery.calculator import (
    classify_workload,
    compute_recovery_recommendation,
    format_distance_km,
    format_duration,
    hours_between,
    to_fixed,
)
from horse_recovery.config import (
    DEFAULT_THRESHOLDS,
    RecoveryConfig,
    RecoveryMessages,
    Settings,
    ThresholdTier,
    get_settings,
)
from horse_recovery.exceptions import (
    DataSourceError,
    ErrorCode,
    HorseRecoveryError,
    InvalidActivitiesError,
    ValidationError,
)
from horse_recovery.models import (
    ActivityRecord,
    RecoveryRecommendation,
    RecoveryRequest,
    RecoveryResponse,
    RecoveryStats,
    WorkloadLevel,
)
from horse_recovery.service import (
    RecoveryService,
    configure_recovery_service,
    get_recovery_service,
    lookback_start,
    parse_request,
    set_recovery_service,
)
from horse_recovery.sources import (
    ActivitySource,
    InMemoryActivitySource,
    load_activity_rows,
)

__version__ = "0.1.0"

__all__ = [
    "classify_workload",
    "compute_recovery_recommendation",
    "format_distance_km",
    "format_duration",
    "hours_between",
    "to_fixed",
    "DEFAULT_THRESHOLDS",
    "RecoveryConfig",
    "RecoveryMessages",
    "Settings",
    "ThresholdTier",
    "get_settings",
    "DataSourceError",
    "ErrorCode",
    "HorseRecoveryError",
    "InvalidActivitiesError",
    "ValidationError",
    "ActivityRecord",
    "RecoveryRecommendation",
    "RecoveryRequest",
    "RecoveryResponse",
    "RecoveryStats",
    "WorkloadLevel",
    "RecoveryService",
    "configure_recovery_service",
    "get_recovery_service",
    "lookback_start",
    "parse_request",
    "set_recovery_service",
    "ActivitySource",
    "InMemoryActivitySource",
    "load_activity_rows",
]
