"""Periodic ping rounds: probe every registered server, store one sample."""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Tuple

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config import MIN_PING_INTERVAL_MS, settings
from ..logger import log_exception, logger
from ..models import ServerEdition
from ..samples import Sample, SampleStore, StoreWriteFailure
from ..servers import ServerAddress, ServerInfo, ServerRegistry
from ..utils import now_ms
from .probe import ProbeFailure, ProbeResult, ProbeSuccess, probe

ProbeFunc = Callable[[ServerAddress, ServerEdition, int], Awaitable[ProbeResult]]


@dataclass(frozen=True)
class RoundReport:
    sample: Sample
    succeeded: Tuple[int, ...]
    failed: Tuple[int, ...]
    duration_ms: int


class PingScheduler:
    """Drives ping rounds at a fixed interval.

    Each round snapshots the registry, probes all servers concurrently and
    appends exactly one sample once every probe has settled. Servers whose
    probe failed are left out of the sample. Rounds never overlap: a tick
    that fires while a round is still running is skipped.
    """

    JOB_ID = "ping_round"

    def __init__(
        self,
        registry: ServerRegistry,
        store: SampleStore,
        interval_ms: int = settings.ping.interval_ms,
        probe_timeout_ms: int = settings.ping.probe_timeout_ms,
        max_concurrent_probes: int = settings.ping.max_concurrent_probes,
        probe_func: ProbeFunc = probe,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize the ping scheduler.

        Args:
            registry: Source of the servers to probe each round
            store: Where round samples are appended
            interval_ms: Tick period, raised to MIN_PING_INTERVAL_MS if lower
            probe_timeout_ms: Hard per-probe timeout
            max_concurrent_probes: Fan-out cap per round, 0 for no cap
            probe_func: Probe implementation, ``probe`` by default
            clock: Millisecond clock used to timestamp samples
        """
        if interval_ms < MIN_PING_INTERVAL_MS:
            logger.warning(
                f"Ping interval {interval_ms}ms is below the minimum, "
                f"using {MIN_PING_INTERVAL_MS}ms"
            )
            interval_ms = MIN_PING_INTERVAL_MS

        self.registry = registry
        self.store = store
        self.interval_ms = interval_ms
        self.probe_timeout_ms = probe_timeout_ms
        self.max_concurrent_probes = max_concurrent_probes
        self._probe = probe_func
        self._clock = clock

        self._scheduler: Optional[AsyncIOScheduler] = None
        self._round_lock = asyncio.Lock()

    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def start(self) -> None:
        """Start ticking; the first round fires immediately."""
        if self.is_running():
            logger.warning("Ping scheduler is already running")
            return

        logger.info(f"Starting ping scheduler (interval {self.interval_ms}ms)...")
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._tick,
            IntervalTrigger(seconds=self.interval_ms / 1000),
            id=self.JOB_ID,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        self._scheduler.start()
        logger.info("Ping scheduler started")

    async def stop(self) -> None:
        """Stop ticking and wait for a round in progress to be stored."""
        if not self.is_running():
            return

        logger.info("Stopping ping scheduler...")
        assert self._scheduler is not None
        # Shutting down the executor cancels running jobs, so let the
        # current round finish first
        self._scheduler.pause()
        async with self._round_lock:
            pass
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Ping scheduler stopped")

    async def run_round(self) -> Optional[RoundReport]:
        """Run one round and store its sample.

        Returns:
            The round report, or None if another round was still in progress

        Raises:
            StoreWriteFailure: If the sample could not be stored
        """
        if self._round_lock.locked():
            logger.warning("Previous ping round still running, skipping tick")
            return None

        async with self._round_lock:
            started = time.monotonic()
            servers = await self.registry.list_servers()

            semaphore = (
                asyncio.Semaphore(self.max_concurrent_probes)
                if self.max_concurrent_probes > 0
                else None
            )
            results = await asyncio.gather(
                *(self._probe_server(server, semaphore) for server in servers)
            )

            counts = {}
            failed = []
            for server, result in zip(servers, results):
                if isinstance(result, ProbeSuccess):
                    counts[server.id] = result.count
                else:
                    failed.append(server.id)

            sample = Sample(timestamp=self._clock(), counts=counts)
            await self.store.append(sample)

            return RoundReport(
                sample=sample,
                succeeded=tuple(counts),
                failed=tuple(failed),
                duration_ms=int((time.monotonic() - started) * 1000),
            )

    async def _probe_server(
        self, server: ServerInfo, semaphore: Optional[asyncio.Semaphore]
    ) -> ProbeResult:
        try:
            if semaphore is None:
                result = await self._probe(
                    server.address, server.edition, self.probe_timeout_ms
                )
            else:
                async with semaphore:
                    result = await self._probe(
                        server.address, server.edition, self.probe_timeout_ms
                    )
        except Exception as e:
            result = ProbeFailure(f"{type(e).__name__}: {e}")

        if isinstance(result, ProbeFailure):
            logger.debug(
                f"Probe of {server.name} ({server.address}) failed: {result.reason}"
            )
        return result

    @log_exception("Ping round failed")
    async def _tick(self) -> None:
        try:
            report = await self.run_round()
        except StoreWriteFailure as e:
            logger.error(f"Dropping ping round: {e}", exc_info=True)
            return

        if report is None:
            return
        logger.info(
            f"Ping round stored at {report.sample.timestamp}: "
            f"{len(report.succeeded)} ok, {len(report.failed)} failed "
            f"in {report.duration_ms}ms"
        )
