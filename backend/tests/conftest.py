"""Shared fixtures: isolated databases and in-memory collaborators."""

import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from player_tracker.models import Base, ServerEdition
from player_tracker.samples import Sample
from player_tracker.servers import ServerAddress, ServerInfo


@pytest.fixture
async def test_database():
    """Create isolated test database, yields a session factory."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    db_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_async_engine(db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    yield async_session_maker

    await engine.dispose()
    Path(db_path).unlink(missing_ok=True)


def make_server(
    server_id: int,
    name: Optional[str] = None,
    host: str = "127.0.0.1",
    port: int = 25565,
    color: str = "#112233",
    edition: ServerEdition = ServerEdition.JAVA,
) -> ServerInfo:
    return ServerInfo(
        id=server_id,
        name=name or f"server-{server_id}",
        address=ServerAddress(host, port),
        color=color,
        edition=edition,
    )


class FakeRegistry:
    """Registry backed by a plain list."""

    def __init__(self, servers: Iterable[ServerInfo] = ()):
        self.servers: List[ServerInfo] = list(servers)

    async def list_servers(self) -> List[ServerInfo]:
        return list(self.servers)

    async def server_exists(self, server_id: int) -> bool:
        return any(server.id == server_id for server in self.servers)


class MemorySampleStore:
    """Sample store keeping everything in a list."""

    def __init__(self, samples: Iterable[Sample] = ()):
        self.samples: List[Sample] = sorted(samples, key=lambda s: s.timestamp)

    async def append(self, sample: Sample) -> None:
        self.samples.append(sample)
        self.samples.sort(key=lambda s: s.timestamp)

    async def range(
        self, from_ms: Optional[int] = None, to_ms: Optional[int] = None
    ) -> List[Sample]:
        return [
            s
            for s in self.samples
            if (from_ms is None or s.timestamp >= from_ms)
            and (to_ms is None or s.timestamp <= to_ms)
        ]

    async def all(self) -> List[Sample]:
        return list(self.samples)

    async def bounds(self) -> Optional[Tuple[int, int]]:
        if not self.samples:
            return None
        return self.samples[0].timestamp, self.samples[-1].timestamp


@pytest.fixture
def server_factory():
    return make_server


@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def memory_store():
    return MemorySampleStore()


def samples_from(rows: Dict[int, Dict[int, int]]) -> List[Sample]:
    return [Sample(timestamp=ts, counts=counts) for ts, counts in rows.items()]


@pytest.fixture
def build_samples():
    return samples_from
