"""Append-only storage of ping samples."""

import asyncio
from typing import Callable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.database import get_async_session
from ..logger import logger
from ..models import PingSample
from .types import Sample


class StoreWriteFailure(Exception):
    """The database rejected a sample append."""


class SampleStore:
    """Durable, append-only sequence of samples ordered by timestamp.

    Appends go through a single lock so rounds never interleave their writes.
    Every sample is a single row written in its own transaction, so readers
    either see all of it or none of it.
    """

    def __init__(
        self, session_factory: Callable[[], AsyncSession] = get_async_session
    ):
        self._session_factory = session_factory
        self._write_lock = asyncio.Lock()

    async def append(self, sample: Sample) -> None:
        """Persist a sample; returns only after the commit succeeded.

        Raises:
            StoreWriteFailure: If the write or commit failed, including a
                second sample for an already stored timestamp
        """
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    session.add(sample.to_model())
                    await session.commit()
            except SQLAlchemyError as e:
                raise StoreWriteFailure(
                    f"Could not store sample at {sample.timestamp}: {e}"
                ) from e
        logger.debug(
            f"Stored sample at {sample.timestamp} with {len(sample.counts)} entries"
        )

    async def range(
        self, from_ms: Optional[int] = None, to_ms: Optional[int] = None
    ) -> List[Sample]:
        """Samples with ``from_ms <= timestamp <= to_ms``, oldest first.

        A missing bound leaves that side open, so ``range()`` returns the
        whole stored history.
        """
        stmt = select(PingSample).order_by(PingSample.timestamp.asc())
        if from_ms is not None:
            stmt = stmt.where(PingSample.timestamp >= from_ms)
        if to_ms is not None:
            stmt = stmt.where(PingSample.timestamp <= to_ms)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        return [Sample.from_model(row) for row in rows]

    async def all(self) -> List[Sample]:
        return await self.range()

    async def bounds(self) -> Optional[Tuple[int, int]]:
        """Oldest and newest stored timestamps, or None for an empty store."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.min(PingSample.timestamp), func.max(PingSample.timestamp))
            )
            oldest, newest = result.one()
        if oldest is None:
            return None
        return int(oldest), int(newest)
