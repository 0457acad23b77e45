"""Single player-count query against one remote game server."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Union

import a2s
from mcstatus import BedrockServer, JavaServer

from ..models import DEFAULT_PORTS, ServerEdition
from ..servers.types import ServerAddress


@dataclass(frozen=True)
class ProbeSuccess:
    count: int


@dataclass(frozen=True)
class ProbeFailure:
    """Unreachable host, timeout or unusable reply."""

    reason: str


ProbeResult = Union[ProbeSuccess, ProbeFailure]

EditionQuery = Callable[[ServerAddress, float], Awaitable[object]]


async def _query_java(address: ServerAddress, timeout: float) -> object:
    # On the standard port the host may be published through an SRV record
    if address.port == DEFAULT_PORTS[ServerEdition.JAVA]:
        server = await JavaServer.async_lookup(address.host, timeout=timeout)
    else:
        server = JavaServer(address.host, address.port, timeout=timeout)
    status = await server.async_status()
    return status.players.online


async def _query_bedrock(address: ServerAddress, timeout: float) -> object:
    server = BedrockServer(address.host, address.port, timeout=timeout)
    status = await server.async_status()
    return status.players.online


async def _query_source(address: ServerAddress, timeout: float) -> object:
    info = await a2s.ainfo((address.host, address.port), timeout=timeout)
    return info.player_count


EDITION_QUERIES: Dict[ServerEdition, EditionQuery] = {
    ServerEdition.JAVA: _query_java,
    ServerEdition.BEDROCK: _query_bedrock,
    ServerEdition.SOURCE: _query_source,
}


async def probe(
    address: ServerAddress, edition: ServerEdition, timeout_ms: int
) -> ProbeResult:
    """Ask a server how many players are online.

    Never raises for network or protocol problems: every such outcome is
    reported as a ``ProbeFailure``. ``timeout_ms`` is a hard ceiling on the
    whole exchange, including DNS resolution. There are no retries.
    """
    timeout = timeout_ms / 1000
    query = EDITION_QUERIES[edition]

    try:
        count = await asyncio.wait_for(query(address, timeout), timeout=timeout)
    except asyncio.TimeoutError:
        return ProbeFailure(f"timed out after {timeout_ms}ms")
    except Exception as e:
        return ProbeFailure(f"{type(e).__name__}: {e}")

    # bool is an int subclass; a True player count is a broken reply
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        return ProbeFailure(f"malformed player count {count!r}")
    return ProbeSuccess(count)
