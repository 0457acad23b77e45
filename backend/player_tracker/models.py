from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, BigInteger, DateTime, Index, Integer, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class TZDatetime(TypeDecorator):
    """Custom DateTime type that ensures timezone-aware datetimes."""

    impl = DateTime(timezone=True)

    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is None:
            raise ValueError(
                "Naive datetime is not allowed. Please provide a timezone-aware datetime."
            )
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            # Assume UTC if no timezone info is present
            return value.replace(tzinfo=timezone.utc)
        return value


class Base(AsyncAttrs, DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models with async support."""

    pass


class ServerEdition(str, Enum):
    """Wire protocol used to ask a server for its player count."""

    JAVA = "java"
    BEDROCK = "bedrock"
    SOURCE = "source"


DEFAULT_PORTS = {
    ServerEdition.JAVA: 25565,
    ServerEdition.BEDROCK: 19132,
    ServerEdition.SOURCE: 27015,
}


class ServerStatus(str, Enum):
    ACTIVE = "active"
    REMOVED = "removed"


class Server(Base):
    """Registered game server.

    Removal is soft so that samples keep pointing at a known row.
    """

    __tablename__ = "server"
    __table_args__ = (Index("idx_server_name_status", "name", "status"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    host: Mapped[str] = mapped_column(String(255))
    port: Mapped[int] = mapped_column(Integer)
    color: Mapped[str] = mapped_column(String(7))
    edition: Mapped[ServerEdition] = mapped_column(
        SQLAlchemyEnum(ServerEdition), default=ServerEdition.JAVA
    )
    status: Mapped[ServerStatus] = mapped_column(
        SQLAlchemyEnum(ServerStatus), default=ServerStatus.ACTIVE, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TZDatetime(), default=lambda: datetime.now(timezone.utc)
    )
    removed_at: Mapped[Optional[datetime]] = mapped_column(TZDatetime())


class PingSample(Base):
    """One scheduler round: player count per server id that answered.

    ``counts`` keys are stringified server ids (JSON object keys).
    """

    __tablename__ = "ping_sample"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    counts: Mapped[dict] = mapped_column(JSON)
