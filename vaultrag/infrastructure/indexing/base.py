"""Abstract base classes for in-memory vector search indexes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

PathFilter = Callable[[str], bool]


@dataclass
class ChunkVector:
    """A persisted chunk together with its embedding."""

    chunk_id: int
    path: str
    content: str
    embedding: List[float]
    mtime: int
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchResult:
    """A chunk returned by a similarity search."""

    chunk_id: int
    path: str
    content: str
    mtime: int
    similarity: float
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IndexStats:
    """Statistics about an index."""

    total_vectors: int
    embedding_dimension: int
    algorithm_params: Optional[Dict[str, Any]] = None


class VectorIndex(ABC):
    """Interface for similarity indexes over one embedding-model namespace.

    Every vector in an index has the same width; mixing widths is rejected so
    vectors from different embedding models are never compared.
    """

    def __init__(self, dimension: int):
        self.dimension = dimension

    @abstractmethod
    def add_vectors(self, vectors: Iterable[ChunkVector]) -> None:
        """Add vectors; a chunk id already present is ignored."""
        pass

    @abstractmethod
    def remove_paths(self, paths: Iterable[str]) -> int:
        """Remove every vector belonging to ``paths`` and return how many were removed."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all vectors."""
        pass

    @abstractmethod
    def search(
        self,
        query_embedding: List[float],
        k: int,
        min_similarity: float = 0.0,
        path_filter: Optional[PathFilter] = None,
    ) -> List[SearchResult]:
        """Return at most ``k`` results with similarity strictly above ``min_similarity``.

        Results are sorted by descending similarity; ``path_filter`` restricts
        candidates to the paths it accepts.
        """
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def get_stats(self) -> IndexStats:
        """Get statistics about the current index."""
        return IndexStats(total_vectors=len(self), embedding_dimension=self.dimension)

    def _validate_embedding(self, embedding: List[float]) -> None:
        """Raise ValueError if ``embedding`` does not have the index dimension."""
        if len(embedding) != self.dimension:
            raise ValueError(f"Embedding dimension {len(embedding)} does not match index dimension {self.dimension}")
