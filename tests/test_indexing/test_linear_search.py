"""Tests for LinearSearchIndex vector indexing algorithm."""

from typing import List

import pytest

from vaultrag.infrastructure.indexing.base import ChunkVector
from vaultrag.infrastructure.indexing.linear_search import LinearSearchIndex


class TestLinearSearchIndex:
    """Test suite for LinearSearchIndex."""

    @pytest.fixture
    def index(self) -> LinearSearchIndex:
        """Create a LinearSearchIndex instance for testing."""
        return LinearSearchIndex(dimension=3)

    @pytest.fixture
    def sample_vectors(self) -> List[ChunkVector]:
        """Create sample vectors for testing."""
        return [
            ChunkVector(chunk_id=1, path="a.md", content="First chunk", embedding=[1.0, 0.0, 0.0], mtime=1),
            ChunkVector(chunk_id=2, path="a.md", content="Second chunk", embedding=[0.0, 1.0, 0.0], mtime=1),
            ChunkVector(chunk_id=3, path="b.md", content="Third chunk", embedding=[0.0, 0.0, 1.0], mtime=2),
            ChunkVector(
                chunk_id=4,
                path="b.md",
                content="Fourth chunk",
                embedding=[0.7071, 0.7071, 0.0],  # 45 degrees from first two
                mtime=2,
                metadata={"startLine": 3, "endLine": 4},
            ),
        ]

    def test_add_vectors(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        index.add_vectors(sample_vectors)

        assert len(index) == 4
        stats = index.get_stats()
        assert stats.total_vectors == 4
        assert stats.embedding_dimension == 3
        assert stats.algorithm_params["exact_search"] is True

    def test_duplicate_chunk_ids_are_ignored(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        index.add_vectors(sample_vectors)
        index.add_vectors(sample_vectors[:2])

        assert len(index) == 4

    def test_search_orders_by_similarity(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        index.add_vectors(sample_vectors)

        results = index.search([1.0, 0.0, 0.0], k=2)

        assert [result.chunk_id for result in results] == [1, 4]
        assert results[0].similarity == pytest.approx(1.0)
        assert results[1].similarity == pytest.approx(0.7071, abs=1e-3)
        assert results[1].metadata == {"startLine": 3, "endLine": 4}

    def test_similarity_must_exceed_threshold(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        """Orthogonal vectors score exactly 0 and are excluded at the default threshold."""
        index.add_vectors(sample_vectors)

        assert [result.chunk_id for result in index.search([1.0, 0.0, 0.0], k=10)] == [1, 4]
        assert [result.chunk_id for result in index.search([1.0, 0.0, 0.0], k=10, min_similarity=0.9)] == [1]

    def test_path_filter(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        index.add_vectors(sample_vectors)

        results = index.search([1.0, 0.0, 0.0], k=10, path_filter=lambda path: path == "b.md")

        assert [result.chunk_id for result in results] == [4]

    def test_ties_keep_insertion_order(self, index: LinearSearchIndex):
        index.add_vectors(
            [
                ChunkVector(chunk_id=5, path="x.md", content="same", embedding=[0.0, 1.0, 0.0], mtime=1),
                ChunkVector(chunk_id=6, path="y.md", content="same", embedding=[0.0, 2.0, 0.0], mtime=1),
            ]
        )

        results = index.search([0.0, 1.0, 0.0], k=2)

        assert [result.chunk_id for result in results] == [5, 6]

    def test_zero_query_matches_nothing(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        index.add_vectors(sample_vectors)

        assert index.search([0.0, 0.0, 0.0], k=5) == []

    def test_remove_paths(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        index.add_vectors(sample_vectors)
        index.search([1.0, 0.0, 0.0], k=1)

        removed = index.remove_paths(["b.md", "missing.md"])

        assert removed == 2
        assert len(index) == 2
        assert [result.chunk_id for result in index.search([1.0, 1.0, 1.0], k=10)] == [1, 2]

    def test_clear(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        index.add_vectors(sample_vectors)
        index.clear()

        assert len(index) == 0
        assert index.search([1.0, 0.0, 0.0], k=5) == []

    def test_dimension_mismatch(self, index: LinearSearchIndex):
        with pytest.raises(ValueError):
            index.add_vectors([ChunkVector(chunk_id=1, path="a.md", content="x", embedding=[1.0, 0.0], mtime=1)])
        with pytest.raises(ValueError):
            index.search([1.0, 0.0], k=1)

    def test_empty_index_or_zero_k(self, index: LinearSearchIndex, sample_vectors: List[ChunkVector]):
        assert index.search([1.0, 0.0, 0.0], k=3) == []

        index.add_vectors(sample_vectors)
        assert index.search([1.0, 0.0, 0.0], k=0) == []
