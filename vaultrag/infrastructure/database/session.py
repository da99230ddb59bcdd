from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import DatabaseEngineOption, settings


def _engine_options() -> Dict[str, Any]:
    """Build engine keyword arguments for the configured backend.

    Pool sizing only applies to PostgreSQL; SQLite connections are file handles
    and use SQLAlchemy's default pool for the aiosqlite dialect.
    """
    options: Dict[str, Any] = {"echo": False, "future": True}
    if settings.DATABASE_ENGINE == DatabaseEngineOption.POSTGRES:
        options["pool_size"] = settings.POSTGRES_POOL_SIZE
        options["max_overflow"] = settings.POSTGRES_MAX_OVERFLOW
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options())

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Base class for all database models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass so that models
    get dataclass ``__init__``/``__repr__`` generated from their mapped columns.
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database session management.

    Yields:
        AsyncSession: A configured async database session.
    """
    async_get_db = local_session
    async with async_get_db() as db:
        yield db


async def create_tables() -> None:
    """Create all tables in the database if they don't exist.

    The operation is idempotent; existing tables are left unchanged.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
