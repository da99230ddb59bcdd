"""Builds the configured embedding model."""

from typing import Optional

from ..config.settings import EmbeddingProviderOption, Settings
from .base import EmbeddingModel
from .model_cache import ModelListCache
from .openai_compatible import OpenAICompatibleEmbeddingModel
from .sentence_transformer import SentenceTransformerEmbeddingModel


def create_embedding_model(settings: Settings, model_cache: Optional[ModelListCache] = None) -> EmbeddingModel:
    """Create an embedding model from ``EMBEDDING_*`` settings.

    Args:
        settings: Application settings
        model_cache: Cache for provider model listings; a fresh one using
            ``MODEL_LIST_CACHE_TTL_SECONDS`` is created when omitted

    Returns:
        The embedding model selected by ``EMBEDDING_PROVIDER``
    """
    if settings.EMBEDDING_PROVIDER == EmbeddingProviderOption.OPENAI_COMPATIBLE:
        return OpenAICompatibleEmbeddingModel(
            model_id=settings.EMBEDDING_MODEL_ID,
            dimension=settings.EMBEDDING_DIMENSION,
            api_key=settings.EMBEDDING_API_KEY,
            base_url=settings.EMBEDDING_BASE_URL,
            supports_batch=settings.EMBEDDING_SUPPORTS_BATCH,
            timeout=settings.EMBEDDING_REQUEST_TIMEOUT,
            model_cache=model_cache or ModelListCache(ttl_seconds=settings.MODEL_LIST_CACHE_TTL_SECONDS),
        )

    return SentenceTransformerEmbeddingModel(
        model_name=settings.EMBEDDING_MODEL_ID,
        dimension=settings.EMBEDDING_DIMENSION,
    )
