"""Tests for VectorRepository."""

import pytest
import pytest_asyncio

from fakes import FakeEmbeddingModel, make_chunk, make_record
from vaultrag.modules.common.exceptions import EmbeddingModelMismatchError, ValidationError
from vaultrag.modules.vector import SearchScope, SimilaritySearchOptions, VectorRepository


@pytest.mark.asyncio
async def test_insert_and_read_back(repository: VectorRepository, embedding_model: FakeEmbeddingModel):
    records = [
        make_record(embedding_model, "notes/a.md", "first part", start_line=1, end_line=3, mtime=1_500),
        make_record(embedding_model, "notes/a.md", "second part", start_line=4, end_line=9, mtime=1_500),
    ]

    inserted = await repository.insert_vectors(records, embedding_model)
    stored = await repository.get_vectors_by_file_path("notes/a.md", embedding_model)

    assert inserted == 2
    assert [vector.content for vector in stored] == ["first part", "second part"]
    assert stored[0].id < stored[1].id
    assert stored[0].mtime == 1_500
    assert (stored[1].metadata.start_line, stored[1].metadata.end_line) == (4, 9)


@pytest.mark.asyncio
async def test_insert_nothing(repository: VectorRepository, embedding_model: FakeEmbeddingModel):
    assert await repository.insert_vectors([], embedding_model) == 0


@pytest.mark.asyncio
async def test_insert_rejects_unembedded_records(repository: VectorRepository, embedding_model: FakeEmbeddingModel):
    with pytest.raises(ValidationError):
        await repository.insert_vectors([make_chunk("a.md", "no vector")], embedding_model)

    assert await repository.count_vectors(embedding_model) == 0


@pytest.mark.asyncio
async def test_insert_rejects_wrong_width(repository: VectorRepository, embedding_model: FakeEmbeddingModel):
    narrow = FakeEmbeddingModel(dimension=4)
    good = make_record(embedding_model, "a.md", "fine")
    bad = make_record(narrow, "b.md", "too narrow")

    with pytest.raises(EmbeddingModelMismatchError):
        await repository.insert_vectors([good, bad], embedding_model)

    assert await repository.count_vectors(embedding_model) == 0


@pytest.mark.asyncio
async def test_delete_single_file(repository: VectorRepository, embedding_model: FakeEmbeddingModel):
    await repository.insert_vectors(
        [
            make_record(embedding_model, "a.md", "alpha one"),
            make_record(embedding_model, "a.md", "alpha two"),
            make_record(embedding_model, "b.md", "beta"),
        ],
        embedding_model,
    )

    assert await repository.delete_vectors_for_single_file("a.md", embedding_model) == 2
    assert await repository.delete_vectors_for_single_file("a.md", embedding_model) == 0
    assert await repository.get_all_indexed_file_paths(embedding_model) == ["b.md"]


@pytest.mark.asyncio
async def test_delete_multiple_files(repository: VectorRepository, embedding_model: FakeEmbeddingModel):
    await repository.insert_vectors(
        [make_record(embedding_model, f"{name}.md", f"content {name}") for name in ("a", "b", "c")],
        embedding_model,
    )

    deleted = await repository.delete_vectors_for_multiple_files(["a.md", "c.md", "a.md", "missing.md"], embedding_model)

    assert deleted == 2
    assert await repository.get_all_indexed_file_paths(embedding_model) == ["b.md"]
    assert await repository.delete_vectors_for_multiple_files([], embedding_model) == 0


@pytest.mark.asyncio
async def test_indexed_paths_are_distinct_and_sorted(repository: VectorRepository, embedding_model: FakeEmbeddingModel):
    await repository.insert_vectors(
        [
            make_record(embedding_model, "z.md", "last"),
            make_record(embedding_model, "a.md", "first"),
            make_record(embedding_model, "z.md", "last again"),
        ],
        embedding_model,
    )

    assert await repository.get_all_indexed_file_paths(embedding_model) == ["a.md", "z.md"]
    assert await repository.count_vectors(embedding_model) == 3


@pytest.mark.asyncio
async def test_models_have_separate_namespaces(repository: VectorRepository, embedding_model: FakeEmbeddingModel):
    other_model = FakeEmbeddingModel(model_id="other-model")
    await repository.insert_vectors([make_record(embedding_model, "a.md", "shared text")], embedding_model)
    await repository.insert_vectors([make_record(other_model, "b.md", "shared text")], other_model)

    cleared = await repository.clear_all_vectors(embedding_model)

    assert cleared == 1
    assert await repository.count_vectors(embedding_model) == 0
    assert await repository.get_all_indexed_file_paths(other_model) == ["b.md"]

    results = await repository.perform_similarity_search(
        other_model.vector_for("shared text"), other_model, SimilaritySearchOptions()
    )
    assert [result.path for result in results] == ["b.md"]


class TestSimilaritySearch:
    """Test suite for VectorRepository.perform_similarity_search."""

    @pytest_asyncio.fixture
    async def populated(self, repository: VectorRepository, embedding_model: FakeEmbeddingModel) -> VectorRepository:
        await repository.insert_vectors(
            [
                make_record(embedding_model, "notes/vector.md", "vector databases store embeddings", start_line=2, end_line=5),
                make_record(embedding_model, "journal/today.md", "walked the dog in the park"),
                make_record(embedding_model, "notes/cooking.md", "pasta recipe with garlic"),
            ],
            embedding_model,
        )
        return repository

    @pytest.mark.asyncio
    async def test_best_match_first(self, populated: VectorRepository, embedding_model: FakeEmbeddingModel):
        query = embedding_model.vector_for("vector databases store embeddings")

        results = await populated.perform_similarity_search(query, embedding_model, SimilaritySearchOptions(limit=2))

        assert 1 <= len(results) <= 2
        assert results[0].path == "notes/vector.md"
        assert results[0].similarity == pytest.approx(1.0)
        assert (results[0].metadata.start_line, results[0].metadata.end_line) == (2, 5)
        assert all(a.similarity >= b.similarity for a, b in zip(results, results[1:]))

    @pytest.mark.asyncio
    async def test_min_similarity_is_exclusive(self, populated: VectorRepository, embedding_model: FakeEmbeddingModel):
        query = embedding_model.vector_for("pasta recipe with garlic")

        results = await populated.perform_similarity_search(
            query, embedding_model, SimilaritySearchOptions(min_similarity=0.999)
        )

        assert [result.path for result in results] == ["notes/cooking.md"]

    @pytest.mark.asyncio
    async def test_scope_restricts_results(self, populated: VectorRepository, embedding_model: FakeEmbeddingModel):
        query = embedding_model.vector_for("vector databases store embeddings")
        options = SimilaritySearchOptions(scope=SearchScope(folders=["journal"]))

        results = await populated.perform_similarity_search(query, embedding_model, options)

        assert all(result.path.startswith("journal/") for result in results)

    @pytest.mark.asyncio
    async def test_query_width_must_match_model(self, populated: VectorRepository, embedding_model: FakeEmbeddingModel):
        with pytest.raises(EmbeddingModelMismatchError):
            await populated.perform_similarity_search([1.0, 0.0], embedding_model, SimilaritySearchOptions())

    @pytest.mark.asyncio
    async def test_index_follows_writes(self, populated: VectorRepository, embedding_model: FakeEmbeddingModel):
        query = embedding_model.vector_for("quantum entanglement notes")
        options = SimilaritySearchOptions(min_similarity=0.999)

        assert await populated.perform_similarity_search(query, embedding_model, options) == []
        assert populated.is_index_loaded(embedding_model)

        await populated.insert_vectors([make_record(embedding_model, "physics.md", "quantum entanglement notes")], embedding_model)
        results = await populated.perform_similarity_search(query, embedding_model, options)
        assert [result.path for result in results] == ["physics.md"]

        await populated.delete_vectors_for_single_file("physics.md", embedding_model)
        assert await populated.perform_similarity_search(query, embedding_model, options) == []
