"""Test configuration and fixtures for the vault indexing project."""

import os

# Must be set before the application settings are imported.
os.environ["SQLITE_URI"] = ":memory:"
os.environ["SQLITE_ASYNC_PREFIX"] = "sqlite+aiosqlite:///"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from fakes import FakeEmbeddingModel, InMemoryVault, RecordingNotifier  # noqa: E402
from vaultrag.infrastructure.database.session import Base  # noqa: E402
from vaultrag.infrastructure.indexing import IndexManager  # noqa: E402
from vaultrag.infrastructure.logging import configure_testing_logging  # noqa: E402
from vaultrag.modules.common.utils.retry import RetryPolicy  # noqa: E402
from vaultrag.modules.vector import BatchingProfile, IndexingConfig, VectorManager, VectorRepository  # noqa: E402
from vaultrag.modules.vector.models import VaultVector  # noqa: E402,F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(autouse=True)
def quiet_logging():
    configure_testing_logging()


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """Create a fresh in-memory SQLite engine with the schema in place."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def index_manager() -> IndexManager:
    """A private index manager so tests never share loaded indexes."""
    return IndexManager()


@pytest.fixture
def repository(session_factory, index_manager) -> VectorRepository:
    return VectorRepository(session_factory=session_factory, indexes=index_manager)


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Retry policy without backoff delays."""
    return RetryPolicy(attempts=3, initial_delay=0.0, jitter="none")


@pytest.fixture
def indexing_config(fast_retry) -> IndexingConfig:
    return IndexingConfig(
        vault_profile=BatchingProfile(embedding_batch_size=4, insert_batch_size=4, max_concurrency=4),
        file_profile=BatchingProfile(embedding_batch_size=2, insert_batch_size=2, max_concurrency=2),
        retry_policy=fast_retry,
        memory_cleanup_interval=2,
        memory_cleanup_yield_seconds=0.0,
    )


@pytest.fixture
def embedding_model() -> FakeEmbeddingModel:
    return FakeEmbeddingModel()


@pytest.fixture
def vault() -> InMemoryVault:
    return InMemoryVault()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def vector_manager(repository, vault, notifier, indexing_config) -> VectorManager:
    return VectorManager(repository, vault, notifier=notifier, config=indexing_config)
