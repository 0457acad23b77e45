"""Pure derivations over the sample history.

Nothing here touches the database or the wall clock: every function takes
the samples and the reference time it needs, so the same input always gives
the same output.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..samples import Sample
from ..utils import DAY_MS

# Quarter-minute buckets used to downsample chart series
BUCKET_WIDTH_MS = 15_000

# A server is stale once it has missed this many expected ticks
STALE_AFTER_TICKS = 2


@dataclass(frozen=True)
class Observation:
    count: int = 0
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class RollingStats:
    server_id: int
    latest: Observation
    daily_peak: Observation
    record: Observation
    stale: bool

    @property
    def never_probed(self) -> bool:
        return self.latest.timestamp is None


@dataclass(frozen=True)
class SeriesPoint:
    x: int  # bucket start, ms
    y: int  # rounded mean player count in the bucket


def round_half_away_from_zero(numerator: int, denominator: int) -> int:
    """Round ``numerator / denominator`` to the nearest int, .5 away from zero.

    Works on integers only, so there is no float drift at the .5 boundary.
    """
    if denominator == 0:
        raise ZeroDivisionError("denominator must not be zero")
    sign = -1 if (numerator < 0) != (denominator < 0) else 1
    n, d = abs(numerator), abs(denominator)
    return sign * ((2 * n + d) // (2 * d))


def is_stale(
    latest_timestamp: Optional[int], now_ms: int, tick_interval_ms: int
) -> bool:
    if latest_timestamp is None:
        return True
    return now_ms - latest_timestamp > STALE_AFTER_TICKS * tick_interval_ms


class _ServerFold:
    __slots__ = ("latest", "daily_peak", "record")

    def __init__(self) -> None:
        self.latest: Optional[Observation] = None
        self.daily_peak: Optional[Observation] = None
        self.record: Optional[Observation] = None

    def add(self, count: int, timestamp: int, in_daily_window: bool) -> None:
        observation = Observation(count, timestamp)
        self.latest = observation
        # Strictly greater: on ties the earliest timestamp is kept
        if self.record is None or count > self.record.count:
            self.record = observation
        if in_daily_window and (
            self.daily_peak is None or count > self.daily_peak.count
        ):
            self.daily_peak = observation


def compute_rolling_stats(
    samples: Iterable[Sample],
    server_ids: Iterable[int],
    now_ms: int,
    tick_interval_ms: int,
) -> Dict[int, RollingStats]:
    """Latest value, daily peak, record and staleness per server.

    Args:
        samples: Sample history, in any order
        server_ids: Servers that must be reported even without any sample
        now_ms: Reference time for the daily window and staleness
        tick_interval_ms: Scheduler period the staleness threshold is based on

    Returns:
        Stats keyed by server id, ascending, covering ``server_ids`` plus
        every server seen in ``samples``
    """
    window_start = now_ms - DAY_MS
    folds: Dict[int, _ServerFold] = {server_id: _ServerFold() for server_id in server_ids}

    for sample in sorted(samples, key=lambda s: s.timestamp):
        in_window = window_start <= sample.timestamp <= now_ms
        for server_id, count in sample.counts.items():
            fold = folds.get(server_id)
            if fold is None:
                fold = folds[server_id] = _ServerFold()
            fold.add(count, sample.timestamp, in_window)

    stats = {}
    for server_id in sorted(folds):
        fold = folds[server_id]
        latest = fold.latest or Observation()
        stats[server_id] = RollingStats(
            server_id=server_id,
            latest=latest,
            daily_peak=fold.daily_peak or Observation(),
            record=fold.record or Observation(),
            stale=is_stale(latest.timestamp, now_ms, tick_interval_ms),
        )
    return stats


def bucket_series(
    samples: Iterable[Sample], bucket_width_ms: int = BUCKET_WIDTH_MS
) -> Dict[int, List[SeriesPoint]]:
    """Downsample samples into fixed-width buckets, one series per server.

    Each point is the rounded mean of the server's counts in the bucket,
    placed at the bucket start. Empty buckets are left out, points are in
    ascending time order and servers in ascending id order.
    """
    if bucket_width_ms <= 0:
        raise ValueError(f"bucket width must be positive, got {bucket_width_ms}")

    # server id -> bucket key -> [sum, count]
    buckets: Dict[int, Dict[int, List[int]]] = defaultdict(
        lambda: defaultdict(lambda: [0, 0])
    )
    for sample in samples:
        key = sample.timestamp // bucket_width_ms
        for server_id, count in sample.counts.items():
            acc = buckets[server_id][key]
            acc[0] += count
            acc[1] += 1

    series = {}
    for server_id in sorted(buckets):
        per_key = buckets[server_id]
        series[server_id] = [
            SeriesPoint(
                x=key * bucket_width_ms,
                y=round_half_away_from_zero(per_key[key][0], per_key[key][1]),
            )
            for key in sorted(per_key)
        ]
    return series
