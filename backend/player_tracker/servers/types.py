"""Read-only views of registered servers handed to the pinger and queries."""

from dataclasses import dataclass

from ..models import Server, ServerEdition


@dataclass(frozen=True)
class ServerAddress:
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ServerInfo:
    id: int
    name: str
    address: ServerAddress
    color: str
    edition: ServerEdition = ServerEdition.JAVA

    @classmethod
    def from_model(cls, server: Server) -> "ServerInfo":
        return cls(
            id=server.id,
            name=server.name,
            address=ServerAddress(server.host, server.port),
            color=server.color,
            edition=server.edition,
        )
