"""Coordinates one in-memory vector index per embedding-model namespace."""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from .base import ChunkVector, PathFilter, SearchResult, VectorIndex
from .linear_search import LinearSearchIndex

VectorLoader = Callable[[], Awaitable[List[ChunkVector]]]


class IndexManager:
    """Manages vector indexes keyed by embedding-model identity.

    Responsibilities:
    - One index per model key, so vectors of different models never meet
    - Lazy loading from the database on first search
    - Applying repository writes to already-loaded indexes

    Writes to a namespace that has not been loaded yet are ignored; the rows
    are picked up from the database when the index is first loaded.
    """

    def __init__(self) -> None:
        self._indexes: Dict[str, VectorIndex] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock(self, model_key: str) -> asyncio.Lock:
        if model_key not in self._locks:
            self._locks[model_key] = asyncio.Lock()
        return self._locks[model_key]

    def is_loaded(self, model_key: str) -> bool:
        return model_key in self._indexes

    async def get_or_load_index(self, model_key: str, dimension: int, loader: VectorLoader) -> VectorIndex:
        """Return the index for ``model_key``, loading it with ``loader`` if needed.

        Args:
            model_key: Embedding-model namespace key
            dimension: Vector width of the namespace
            loader: Coroutine factory returning every stored vector of the namespace

        Returns:
            The loaded vector index
        """
        async with self._lock(model_key):
            if model_key not in self._indexes:
                index = LinearSearchIndex(dimension=dimension)
                index.add_vectors(await loader())
                self._indexes[model_key] = index
            return self._indexes[model_key]

    async def search(
        self,
        model_key: str,
        dimension: int,
        loader: VectorLoader,
        query_embedding: List[float],
        k: int,
        min_similarity: float = 0.0,
        path_filter: Optional[PathFilter] = None,
    ) -> List[SearchResult]:
        """Search the namespace index, loading it first if necessary."""
        index = await self.get_or_load_index(model_key, dimension, loader)
        return index.search(query_embedding, k, min_similarity=min_similarity, path_filter=path_filter)

    async def add_vectors(self, model_key: str, vectors: Iterable[ChunkVector]) -> None:
        async with self._lock(model_key):
            if model_key in self._indexes:
                self._indexes[model_key].add_vectors(vectors)

    async def remove_paths(self, model_key: str, paths: Iterable[str]) -> int:
        async with self._lock(model_key):
            if model_key in self._indexes:
                return self._indexes[model_key].remove_paths(paths)
        return 0

    async def clear(self, model_key: str) -> None:
        async with self._lock(model_key):
            if model_key in self._indexes:
                self._indexes[model_key].clear()

    def drop(self, model_key: Optional[str] = None) -> None:
        """Forget loaded indexes so the next search reloads from the database."""
        if model_key is None:
            self._indexes.clear()
        else:
            self._indexes.pop(model_key, None)

    def get_index_stats(self, model_key: str) -> Optional[Dict[str, Any]]:
        """Get statistics for a namespace index, or None if it is not loaded."""
        if model_key not in self._indexes:
            return None

        stats = self._indexes[model_key].get_stats()
        result: Dict[str, Any] = {
            "total_vectors": stats.total_vectors,
            "embedding_dimension": stats.embedding_dimension,
        }
        if stats.algorithm_params:
            result.update(stats.algorithm_params)
        return result


index_manager = IndexManager()
