"""In-memory similarity search over persisted chunk vectors."""

from .base import ChunkVector, SearchResult, VectorIndex
from .linear_search import LinearSearchIndex
from .manager import IndexManager, index_manager

__all__ = [
    "VectorIndex",
    "ChunkVector",
    "SearchResult",
    "LinearSearchIndex",
    "IndexManager",
    "index_manager",
]
