"""
Recovery calculator: turns recent activities into a rest recommendation.

The calculation is a pure function of the activities, the current instant
and the policy. It performs no I/O and keeps no state, so it can be called
concurrently from independent requests.

Steps:
1. No activity in the window -> fully rested, no stats
2. Aggregate workload, distance, duration and time since the last activity
3. Classify the average workload against the threshold table
4. Compare elapsed rest against the recommended rest
5. Format the statistics for display
"""

import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from .config import RecoveryConfig, ThresholdTier
from .exceptions import InvalidActivitiesError
from .models import (
    ActivityRecord,
    RecoveryRecommendation,
    RecoveryStats,
    WorkloadLevel,
)


SECONDS_PER_HOUR = 3600


# =============================================================================
# Formatting
# =============================================================================

def to_fixed(value: float, places: int) -> str:
    """
    Render a number with a fixed count of decimals, ties rounded away from zero.

    Rounds the exact binary value of ``value``, so 0.125 gives "0.13" while
    1.005 (stored just below) gives "1.00".
    """
    quantum = Decimal(1).scaleb(-places)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):f}"


def format_duration(seconds: int) -> str:
    """Render a duration as '1h 5min', or '45min' below one hour."""
    hours = seconds // SECONDS_PER_HOUR
    minutes = (seconds % SECONDS_PER_HOUR) // 60

    if hours > 0:
        return f"{hours}h {minutes}min"
    return f"{minutes}min"


def format_distance_km(meters: float) -> str:
    """Render meters as kilometers with two decimals, e.g. '10.00 km'."""
    return f"{to_fixed(meters / 1000, 2)} km"


def hours_between(earlier: datetime, later: datetime) -> float:
    """Fractional hours from ``earlier`` to ``later``."""
    return (later - earlier).total_seconds() / SECONDS_PER_HOUR


# =============================================================================
# Classification
# =============================================================================

def classify_workload(
    avg_workload: float,
    thresholds: Sequence[ThresholdTier],
) -> ThresholdTier:
    """
    Pick the tier for an average workload.

    Upper bounds are exclusive: with the default table an average of exactly
    30 is moderate, not light.

    Args:
        avg_workload: Mean workload over the window
        thresholds: Tiers ordered by ascending bound, last one unbounded

    Returns:
        The first tier whose bound exceeds the average
    """
    for tier in thresholds:
        if tier.max_avg_workload is None or avg_workload < tier.max_avg_workload:
            return tier
    # RecoveryConfig guarantees an unbounded last tier
    return thresholds[-1]


# =============================================================================
# Recommendation
# =============================================================================

def compute_recovery_recommendation(
    activities: Sequence[ActivityRecord],
    now: datetime,
    config: Optional[RecoveryConfig] = None,
) -> RecoveryRecommendation:
    """
    Compute the rest recommendation for a window of activities.

    The first activity is taken as the most recent one, so callers must pass
    activities sorted by ``start_time`` descending unless
    ``config.assume_sorted`` is False. Missing workload, distance or duration
    values count as 0.

    Args:
        activities: Activities in the lookback window, most recent first
        now: Current instant (timezone-aware, like the start times)
        config: Recovery policy (defaults to the standard threshold table)

    Returns:
        RecoveryRecommendation with level, rest hours, message and stats

    Raises:
        InvalidActivitiesError: If ``activities`` is None
    """
    if activities is None:
        raise InvalidActivitiesError()

    config = config or RecoveryConfig()
    messages = config.messages

    if len(activities) == 0:
        return RecoveryRecommendation(
            recommended_rest_hours=0,
            workload_level=WorkloadLevel.NONE,
            message=messages.no_recent_activity,
            can_ride=True,
        )

    records: List[ActivityRecord] = list(activities)
    if not config.assume_sorted:
        records.sort(key=lambda r: r.start_time, reverse=True)

    total_workload = sum(r.workload or 0 for r in records)
    avg_workload = total_workload / len(records)
    total_distance = sum(r.distance_meters or 0 for r in records)
    total_duration = sum(r.duration_seconds or 0 for r in records)

    hours_since_last = hours_between(records[0].start_time, now)

    tier = classify_workload(avg_workload, config.thresholds)

    remaining_hours = 0
    if hours_since_last >= tier.rest_hours:
        can_ride = True
        clause = messages.rested_clause
    else:
        can_ride = False
        remaining_hours = math.ceil(tier.rest_hours - hours_since_last)
        clause = messages.remaining_clause.format(hours=remaining_hours)

    stats = RecoveryStats(
        activities_count=len(records),
        avg_workload=to_fixed(avg_workload, 1),
        total_distance_km=format_distance_km(total_distance),
        total_duration_formatted=format_duration(total_duration),
        hours_since_last_activity=to_fixed(hours_since_last, 1),
    )

    return RecoveryRecommendation(
        recommended_rest_hours=tier.rest_hours,
        workload_level=tier.level,
        message=f"{tier.message} {clause}",
        can_ride=can_ride,
        remaining_rest_hours=remaining_hours,
        stats=stats,
    )
