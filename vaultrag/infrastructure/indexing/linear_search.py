"""Exact cosine-similarity index backed by a numpy matrix."""

from typing import Dict, Iterable, List, Optional

import numpy as np

from .base import ChunkVector, IndexStats, PathFilter, SearchResult, VectorIndex


class LinearSearchIndex(VectorIndex):
    """Brute-force cosine similarity over every stored vector.

    Vectors are kept in insertion order keyed by chunk id. A normalized
    ``(n, d)`` matrix is built lazily on the first search after a mutation and
    reused until the next one, so a search costs one matrix-vector product.

    Characteristics:
    - Time Complexity (Search): O(n * d)
    - Accuracy: exact
    - Build Time: O(n * d), deferred to the first search after a write
    """

    def __init__(self, dimension: int):
        super().__init__(dimension)
        self._vectors: Dict[int, ChunkVector] = {}
        self._matrix: Optional[np.ndarray] = None
        self._entries: List[ChunkVector] = []

    def __len__(self) -> int:
        return len(self._vectors)

    def add_vectors(self, vectors: Iterable[ChunkVector]) -> None:
        batch = list(vectors)
        for vector in batch:
            self._validate_embedding(vector.embedding)

        for vector in batch:
            if vector.chunk_id not in self._vectors:
                self._vectors[vector.chunk_id] = vector
        self._invalidate()

    def remove_paths(self, paths: Iterable[str]) -> int:
        targets = set(paths)
        doomed = [chunk_id for chunk_id, vector in self._vectors.items() if vector.path in targets]
        for chunk_id in doomed:
            del self._vectors[chunk_id]
        if doomed:
            self._invalidate()
        return len(doomed)

    def clear(self) -> None:
        self._vectors.clear()
        self._invalidate()

    def search(
        self,
        query_embedding: List[float],
        k: int,
        min_similarity: float = 0.0,
        path_filter: Optional[PathFilter] = None,
    ) -> List[SearchResult]:
        self._validate_embedding(query_embedding)

        if k <= 0 or not self._vectors:
            return []

        matrix = self._normalized_matrix()
        query = np.asarray(query_embedding, dtype=np.float32)
        query_norm = float(np.linalg.norm(query))
        if query_norm == 0.0:
            scores = np.zeros(len(self._entries), dtype=np.float32)
        else:
            scores = matrix @ (query / query_norm)

        results: List[SearchResult] = []
        for position in np.argsort(-scores, kind="stable"):
            score = float(scores[position])
            if score <= min_similarity:
                break
            vector = self._entries[position]
            if path_filter is not None and not path_filter(vector.path):
                continue
            results.append(
                SearchResult(
                    chunk_id=vector.chunk_id,
                    path=vector.path,
                    content=vector.content,
                    mtime=vector.mtime,
                    similarity=score,
                    metadata=vector.metadata,
                )
            )
            if len(results) >= k:
                break

        return results

    def get_stats(self) -> IndexStats:
        return IndexStats(
            total_vectors=len(self),
            embedding_dimension=self.dimension,
            algorithm_params={"algorithm": "brute_force", "metric": "cosine", "exact_search": True},
        )

    def _invalidate(self) -> None:
        self._matrix = None
        self._entries = []

    def _normalized_matrix(self) -> np.ndarray:
        if self._matrix is None:
            self._entries = list(self._vectors.values())
            matrix = np.asarray([vector.embedding for vector in self._entries], dtype=np.float32)
            norms = np.linalg.norm(matrix, axis=1, keepdims=True)
            # Zero vectors score 0 against every query.
            norms[norms == 0.0] = 1.0
            self._matrix = matrix / norms
        return self._matrix
