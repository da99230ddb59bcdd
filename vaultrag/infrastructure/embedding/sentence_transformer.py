"""Local embedding model backed by sentence-transformers."""

import asyncio
from typing import List, Optional, cast

from sentence_transformers import SentenceTransformer

from ...modules.common.exceptions import EmbeddingProviderError
from .base import EmbeddingModel, EmbeddingModelIdentity

PROVIDER_NAME = "sentence-transformers"


class SentenceTransformerEmbeddingModel(EmbeddingModel):
    """Embeds text with a local sentence-transformers model.

    Features:
    - Lazy model loading for faster startup
    - Thread-offloaded encoding so the event loop stays responsive
    - Normalized embeddings, suitable for cosine similarity
    """

    def __init__(self, model_name: str = "all-mpnet-base-v2", dimension: int = 768, batch_size: int = 32):
        """Initialize the local model wrapper.

        Args:
            model_name: HuggingFace model name for sentence transformers
            dimension: Width of the vectors the model produces
            batch_size: Encoding batch size passed to the model
        """
        self.model_name = model_name
        self.batch_size = batch_size
        self._identity = EmbeddingModelIdentity(provider=PROVIDER_NAME, model_id=model_name, dimension=dimension)
        self._model: Optional[SentenceTransformer] = None
        self._model_lock = asyncio.Lock()

    @property
    def identity(self) -> EmbeddingModelIdentity:
        return self._identity

    @property
    def supports_batch(self) -> bool:
        return True

    async def _get_model(self) -> SentenceTransformer:
        """Get model instance, loading it if necessary (thread-safe)."""
        if self._model is None:
            async with self._model_lock:
                if self._model is None:
                    self._model = cast(SentenceTransformer, await asyncio.to_thread(SentenceTransformer, self.model_name))
        if self._model is None:
            raise EmbeddingProviderError(f"Model {self.model_name} failed to load")
        return self._model

    async def get_embedding(self, text: str) -> List[float]:
        embeddings = await self.get_batch_embeddings([text])
        return embeddings[0]

    async def get_batch_embeddings(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []

        model = await self._get_model()

        embeddings = await asyncio.to_thread(
            model.encode,
            texts,
            convert_to_tensor=False,
            normalize_embeddings=True,
            batch_size=self.batch_size,
        )

        vectors = cast(List[List[float]], embeddings.tolist())
        return [self.validate_vector(vector) for vector in vectors]

    async def is_loaded(self) -> bool:
        """Check if model is loaded."""
        return self._model is not None
