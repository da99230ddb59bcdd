"""Tests for IndexManager service."""

from unittest.mock import AsyncMock

import pytest

from vaultrag.infrastructure.indexing.base import ChunkVector
from vaultrag.infrastructure.indexing.manager import IndexManager


class TestIndexManager:
    """Test suite for IndexManager."""

    @pytest.fixture
    def manager(self) -> IndexManager:
        return IndexManager()

    @pytest.fixture
    def stored_vectors(self) -> list[ChunkVector]:
        return [
            ChunkVector(chunk_id=1, path="a.md", content="First chunk", embedding=[1.0, 0.0, 0.0], mtime=1),
            ChunkVector(chunk_id=2, path="b.md", content="Second chunk", embedding=[0.0, 1.0, 0.0], mtime=1),
        ]

    @pytest.mark.asyncio
    async def test_loads_index_once(self, manager: IndexManager, stored_vectors):
        loader = AsyncMock(return_value=stored_vectors)

        first = await manager.search("fake/m:3", 3, loader, [1.0, 0.0, 0.0], k=5)
        second = await manager.search("fake/m:3", 3, loader, [0.0, 1.0, 0.0], k=5)

        loader.assert_awaited_once()
        assert [result.chunk_id for result in first] == [1]
        assert [result.chunk_id for result in second] == [2]
        assert manager.is_loaded("fake/m:3")

    @pytest.mark.asyncio
    async def test_writes_to_unloaded_namespace_are_ignored(self, manager: IndexManager, stored_vectors):
        await manager.add_vectors("fake/m:3", stored_vectors)
        assert await manager.remove_paths("fake/m:3", ["a.md"]) == 0
        await manager.clear("fake/m:3")

        assert not manager.is_loaded("fake/m:3")

    @pytest.mark.asyncio
    async def test_writes_apply_to_loaded_index(self, manager: IndexManager, stored_vectors):
        await manager.get_or_load_index("fake/m:3", 3, AsyncMock(return_value=stored_vectors[:1]))

        await manager.add_vectors("fake/m:3", stored_vectors[1:])
        assert manager.get_index_stats("fake/m:3")["total_vectors"] == 2

        assert await manager.remove_paths("fake/m:3", ["a.md"]) == 1
        assert manager.get_index_stats("fake/m:3")["total_vectors"] == 1

        await manager.clear("fake/m:3")
        assert manager.get_index_stats("fake/m:3")["total_vectors"] == 0

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self, manager: IndexManager, stored_vectors):
        other = [ChunkVector(chunk_id=9, path="c.md", content="Other", embedding=[1.0, 0.0], mtime=1)]

        await manager.get_or_load_index("fake/m:3", 3, AsyncMock(return_value=stored_vectors))
        await manager.get_or_load_index("fake/n:2", 2, AsyncMock(return_value=other))

        results = await manager.search("fake/n:2", 2, AsyncMock(), [1.0, 0.0], k=5)

        assert [result.chunk_id for result in results] == [9]
        assert manager.get_index_stats("fake/m:3")["total_vectors"] == 2

    @pytest.mark.asyncio
    async def test_drop_forces_reload(self, manager: IndexManager, stored_vectors):
        loader = AsyncMock(return_value=stored_vectors)
        await manager.get_or_load_index("fake/m:3", 3, loader)

        manager.drop("fake/m:3")
        await manager.get_or_load_index("fake/m:3", 3, loader)

        assert loader.await_count == 2

    def test_stats_of_unloaded_namespace(self, manager: IndexManager):
        assert manager.get_index_stats("fake/m:3") is None
