"""Server registry as seen by the pinger and the stats queries."""

from typing import Callable, List

from sqlalchemy.ext.asyncio import AsyncSession

from ..db.database import get_async_session
from .crud import get_active_servers, is_server_active
from .types import ServerInfo


class ServerRegistry:
    """Read-only access to the active servers."""

    def __init__(self, session_factory: Callable[[], AsyncSession] = get_async_session):
        self._session_factory = session_factory

    async def list_servers(self) -> List[ServerInfo]:
        async with self._session_factory() as session:
            servers = await get_active_servers(session)
        return [ServerInfo.from_model(server) for server in servers]

    async def server_exists(self, server_id: int) -> bool:
        async with self._session_factory() as session:
            return await is_server_active(session, server_id)
