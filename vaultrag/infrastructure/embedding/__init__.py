"""Embedding model capability for text-to-vector conversion."""

from .base import EmbeddingModel, EmbeddingModelIdentity
from .factory import create_embedding_model
from .model_cache import ModelListCache
from .openai_compatible import OpenAICompatibleEmbeddingModel
from .sentence_transformer import SentenceTransformerEmbeddingModel

__all__ = [
    "EmbeddingModel",
    "EmbeddingModelIdentity",
    "ModelListCache",
    "OpenAICompatibleEmbeddingModel",
    "SentenceTransformerEmbeddingModel",
    "create_embedding_model",
]
