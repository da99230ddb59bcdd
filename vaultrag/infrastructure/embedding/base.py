"""Embedding model capability shared by the indexer and the retrieval engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from ...modules.common.exceptions import EmbeddingModelMismatchError, EmbeddingProviderError


@dataclass(frozen=True)
class EmbeddingModelIdentity:
    """The (provider, model id, dimension) tuple that partitions the vector space.

    Vectors produced under different identities are never compared.
    """

    provider: str
    model_id: str
    dimension: int

    @property
    def key(self) -> str:
        """Stable namespace key used to partition persisted vectors."""
        return f"{self.provider}/{self.model_id}:{self.dimension}"


class EmbeddingModel(ABC):
    """Turns text into fixed-width vectors.

    Implementations raise the classified provider errors from
    ``modules.common.exceptions``: a subclass of ``EmbeddingConfigurationError``
    when credentials or the base URL are missing or rejected,
    ``RateLimitExceededError`` when throttled, and ``EmbeddingProviderError``
    for anything else.
    """

    @property
    @abstractmethod
    def identity(self) -> EmbeddingModelIdentity:
        pass

    @property
    def dimension(self) -> int:
        return self.identity.dimension

    @property
    def supports_batch(self) -> bool:
        """Whether ``get_batch_embeddings`` may be called."""
        return False

    @abstractmethod
    async def get_embedding(self, text: str) -> List[float]:
        """Embed a single text."""
        pass

    async def get_batch_embeddings(self, texts: List[str]) -> List[List[float]]:
        """Embed several texts in one call, preserving input order."""
        raise EmbeddingProviderError(f"Embedding model {self.identity.key} does not support batch embedding")

    def validate_vector(self, vector: List[float]) -> List[float]:
        """Raise ``EmbeddingModelMismatchError`` if ``vector`` is not of this model's width."""
        if len(vector) != self.dimension:
            raise EmbeddingModelMismatchError(
                f"Embedding model {self.identity.key} returned a vector of width {len(vector)}, "
                f"expected {self.dimension}"
            )
        return vector
