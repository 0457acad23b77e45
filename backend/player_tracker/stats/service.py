"""Read paths over the ping history: chart ranges and latest stats."""

from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import settings
from ..samples import SampleStore
from ..servers import ServerInfo, ServerRegistry
from ..utils import now_ms
from .aggregator import bucket_series, compute_rolling_stats

# Display color for servers that are no longer registered
FALLBACK_COLOR = "#808080"


class InvalidRangeQuery(ValueError):
    """The requested time range is malformed, e.g. from > to."""


class ChartPoint(BaseModel):
    x: int
    y: int


class ServerSeries(BaseModel):
    server_id: int
    name: str
    color: str
    points: List[ChartPoint]


class RangeResult(BaseModel):
    """Bucketed series for every server with data in the range.

    ``from_ms``/``to_ms`` serialize as ``from``/``to``, matching the query
    parameters. They are None only when no bound was given and the history
    is empty.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_ms: Optional[int] = Field(alias="from")
    to_ms: Optional[int] = Field(alias="to")
    bucket_width_ms: int
    servers: List[ServerSeries]


class LatestStatsRow(BaseModel):
    server_id: int
    name: str
    color: str
    latest_count: int
    latest_timestamp: Optional[int]
    daily_peak: int
    daily_peak_timestamp: Optional[int]
    record: int
    record_timestamp: Optional[int]
    stale: bool
    never_probed: bool


class StatsService:
    """Serves chart ranges and latest-value rows.

    ``tick_interval_ms`` must be the scheduler's effective interval, since
    staleness is measured against it. The caller is expected to have
    authorized the request already.
    """

    def __init__(
        self,
        store: SampleStore,
        registry: ServerRegistry,
        tick_interval_ms: int,
        bucket_width_ms: int = settings.bucket_width_ms,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.registry = registry
        self.tick_interval_ms = tick_interval_ms
        self.bucket_width_ms = bucket_width_ms
        self._clock = clock

    async def _servers_by_id(self) -> Dict[int, ServerInfo]:
        return {server.id: server for server in await self.registry.list_servers()}

    async def query_range(
        self, from_ms: Optional[int] = None, to_ms: Optional[int] = None
    ) -> RangeResult:
        """Bucketed chart series for ``from_ms <= t <= to_ms``.

        Missing bounds default to the oldest/newest stored sample, never to
        the current time, so an unbounded query covers exactly the history.

        Raises:
            InvalidRangeQuery: If both bounds are given and from_ms > to_ms
        """
        if from_ms is not None and to_ms is not None and from_ms > to_ms:
            raise InvalidRangeQuery(
                f"'from' ({from_ms}) must not be after 'to' ({to_ms})"
            )

        if from_ms is None or to_ms is None:
            explicit_from = from_ms is not None
            bounds = await self.store.bounds()
            if bounds is not None:
                from_ms = bounds[0] if from_ms is None else from_ms
                to_ms = bounds[1] if to_ms is None else to_ms
            if from_ms is not None and to_ms is not None and from_ms > to_ms:
                # A single bound past the stored extent: empty, not inverted
                if explicit_from:
                    to_ms = from_ms
                else:
                    from_ms = to_ms

        samples = await self.store.range(from_ms, to_ms)
        series = bucket_series(samples, self.bucket_width_ms)
        servers = await self._servers_by_id()

        result = []
        for server_id, points in series.items():
            server = servers.get(server_id)
            result.append(
                ServerSeries(
                    server_id=server_id,
                    name=server.name if server else str(server_id),
                    color=server.color if server else FALLBACK_COLOR,
                    points=[ChartPoint(x=p.x, y=p.y) for p in points],
                )
            )

        return RangeResult(
            from_ms=from_ms,
            to_ms=to_ms,
            bucket_width_ms=self.bucket_width_ms,
            servers=result,
        )

    async def query_latest(self, now_ms: Optional[int] = None) -> List[LatestStatsRow]:
        """One row per server known to the registry or the history.

        Servers never probed successfully still get a row, zeroed and stale.
        """
        now = self._clock() if now_ms is None else now_ms
        servers = await self._servers_by_id()
        samples = await self.store.all()
        stats = compute_rolling_stats(samples, servers, now, self.tick_interval_ms)

        rows = []
        for server_id, s in stats.items():
            server = servers.get(server_id)
            rows.append(
                LatestStatsRow(
                    server_id=server_id,
                    name=server.name if server else str(server_id),
                    color=server.color if server else FALLBACK_COLOR,
                    latest_count=s.latest.count,
                    latest_timestamp=s.latest.timestamp,
                    daily_peak=s.daily_peak.count,
                    daily_peak_timestamp=s.daily_peak.timestamp,
                    record=s.record.count,
                    record_timestamp=s.record.timestamp,
                    stale=s.stale,
                    never_probed=s.never_probed,
                )
            )
        return rows
