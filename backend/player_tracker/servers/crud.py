"""CRUD operations for server records."""

import random
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import DEFAULT_PORTS, Server, ServerEdition, ServerStatus


class DuplicateServerName(ValueError):
    """An active server with the same name already exists."""


def random_color() -> str:
    return f"#{random.randint(0, 0xFFFFFF):06x}"


async def get_active_servers(session: AsyncSession) -> List[Server]:
    """Get all active servers ordered by id.

    Args:
        session: Database session

    Returns:
        List of active servers
    """
    result = await session.execute(
        select(Server)
        .where(Server.status == ServerStatus.ACTIVE)
        .order_by(Server.id.asc())
    )
    return list(result.scalars().all())


async def get_active_server_by_name(
    session: AsyncSession, name: str
) -> Optional[Server]:
    result = await session.execute(
        select(Server).where(
            Server.name == name, Server.status == ServerStatus.ACTIVE
        )
    )
    return result.scalar_one_or_none()


async def is_server_active(session: AsyncSession, server_id: int) -> bool:
    result = await session.execute(
        select(Server.id).where(
            Server.id == server_id, Server.status == ServerStatus.ACTIVE
        )
    )
    return result.scalar_one_or_none() is not None


async def create_server(
    session: AsyncSession,
    name: str,
    host: str,
    port: Optional[int] = None,
    color: Optional[str] = None,
    edition: ServerEdition = ServerEdition.JAVA,
) -> Server:
    """Register a new server.

    Args:
        session: Database session
        name: Display name, unique among active servers
        host: Hostname or IP address
        port: Port, defaults to the edition's standard port
        color: ``#rrggbb`` display color, random when omitted
        edition: Protocol used to probe the server

    Returns:
        Created server

    Raises:
        DuplicateServerName: If an active server already uses ``name``
    """
    if await get_active_server_by_name(session, name) is not None:
        raise DuplicateServerName(f"Server name '{name}' is already in use")

    server = Server(
        name=name,
        host=host,
        port=port if port is not None else DEFAULT_PORTS[edition],
        color=color or random_color(),
        edition=edition,
        status=ServerStatus.ACTIVE,
        created_at=datetime.now(timezone.utc),
    )
    session.add(server)
    await session.commit()
    await session.refresh(server)
    return server


async def remove_server(session: AsyncSession, server_id: int) -> bool:
    """Mark a server as removed.

    Its samples stay in the history and keep surfacing under the raw id.

    Returns:
        True if an active server was removed
    """
    result = await session.execute(
        update(Server)
        .where(Server.id == server_id)
        .where(Server.status == ServerStatus.ACTIVE)
        .values(
            status=ServerStatus.REMOVED,
            removed_at=datetime.now(timezone.utc),
        )
    )
    await session.commit()
    return result.rowcount > 0
