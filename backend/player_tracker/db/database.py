from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import settings
from ..models import Base


def to_async_url(database_url: str) -> str:
    """Rewrite a plain SQLite URL to use the aiosqlite driver."""
    return database_url.replace("sqlite:///", "sqlite+aiosqlite:///")


engine: AsyncEngine = create_async_engine(
    to_async_url(settings.database_url), echo=settings.database_echo
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_async_session() -> AsyncSession:
    """Get an async database session for use outside of FastAPI dependency injection."""
    return AsyncSessionLocal()


async def init_db(target: AsyncEngine = engine) -> None:
    """Create all tables that do not exist yet."""
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
