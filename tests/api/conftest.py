"""Fixtures wiring the FastAPI app to in-memory collaborators."""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vaultrag.interfaces.api.dependencies import (
    get_embedding_model,
    get_rag_engine,
    get_vault,
    get_vector_repository,
)
from vaultrag.interfaces.main import app
from vaultrag.modules.retrieval import RAGEngine, RetrievalOptions


@pytest_asyncio.fixture(scope="function")
async def client(vault, vector_manager, repository, embedding_model, fast_retry):
    """Create a test client whose dependencies use the in-memory vault and database."""
    app.dependency_overrides = {}

    engine = RAGEngine(
        vault,
        vector_manager,
        embedding_model,
        options=RetrievalOptions(chunk_size=200, update_index_on_query=False),
        retry_policy=fast_retry,
    )
    app.dependency_overrides[get_vault] = lambda: vault
    app.dependency_overrides[get_embedding_model] = lambda: embedding_model
    app.dependency_overrides[get_vector_repository] = lambda: repository
    app.dependency_overrides[get_rag_engine] = lambda: engine

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
