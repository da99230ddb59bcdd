"""FastAPI dependencies for use in API endpoints.

Long-lived collaborators (embedding model, vault, repository) are built once
per process; tests replace them through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from ...infrastructure.config.settings import Settings, get_settings
from ...infrastructure.embedding import EmbeddingModel, create_embedding_model
from ...infrastructure.vault import FileSystemVault, Vault
from ...modules.common.notifications import LoggingNotifier
from ...modules.retrieval import PromptGenerator, RAGEngine, RetrievalOptions
from ...modules.vector import IndexingConfig, VectorManager, VectorRepository


@lru_cache()
def get_embedding_model() -> EmbeddingModel:
    """Dependency for providing the configured embedding model."""
    return create_embedding_model(get_settings())


@lru_cache()
def get_vault() -> Vault:
    """Dependency for providing the vault being indexed."""
    return FileSystemVault(get_settings().VAULT_PATH)


@lru_cache()
def get_vector_repository() -> VectorRepository:
    """Dependency for providing the vector repository."""
    return VectorRepository()


def get_retrieval_options(settings: Annotated[Settings, Depends(get_settings)]) -> RetrievalOptions:
    return RetrievalOptions.from_settings(settings)


@lru_cache()
def get_vector_manager() -> VectorManager:
    """Dependency for providing the process-wide VectorManager."""
    settings = get_settings()
    return VectorManager(
        get_vector_repository(),
        get_vault(),
        notifier=LoggingNotifier(),
        config=IndexingConfig.from_settings(settings),
    )


def get_rag_engine(
    vault: Annotated[Vault, Depends(get_vault)],
    manager: Annotated[VectorManager, Depends(get_vector_manager)],
    model: Annotated[EmbeddingModel, Depends(get_embedding_model)],
    options: Annotated[RetrievalOptions, Depends(get_retrieval_options)],
) -> RAGEngine:
    """Dependency for providing a RAGEngine instance."""
    return RAGEngine(vault, manager, model, options)


def get_prompt_generator(
    vault: Annotated[Vault, Depends(get_vault)],
    engine: Annotated[RAGEngine, Depends(get_rag_engine)],
) -> PromptGenerator:
    """Dependency for providing a PromptGenerator instance."""
    return PromptGenerator(vault, engine)
