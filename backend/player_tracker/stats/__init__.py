"""Rolling statistics and chart series derived from the ping history."""

from .aggregator import (
    BUCKET_WIDTH_MS,
    Observation,
    RollingStats,
    SeriesPoint,
    bucket_series,
    compute_rolling_stats,
    round_half_away_from_zero,
)
from .service import (
    InvalidRangeQuery,
    LatestStatsRow,
    RangeResult,
    ServerSeries,
    StatsService,
)

__all__ = [
    "BUCKET_WIDTH_MS",
    "InvalidRangeQuery",
    "LatestStatsRow",
    "Observation",
    "RangeResult",
    "RollingStats",
    "SeriesPoint",
    "ServerSeries",
    "StatsService",
    "bucket_series",
    "compute_rolling_stats",
    "round_half_away_from_zero",
]
