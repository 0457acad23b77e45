"""Server registry: the servers that get probed and their display metadata."""

from .crud import (
    DuplicateServerName,
    create_server,
    get_active_server_by_name,
    get_active_servers,
    remove_server,
)
from .registry import ServerRegistry
from .types import ServerAddress, ServerInfo

__all__ = [
    "DuplicateServerName",
    "ServerAddress",
    "ServerInfo",
    "ServerRegistry",
    "create_server",
    "get_active_server_by_name",
    "get_active_servers",
    "remove_server",
]
