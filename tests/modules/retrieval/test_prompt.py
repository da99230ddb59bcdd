"""Tests for PromptGenerator and the context rendering helpers."""

from typing import List

import pytest

from fakes import InMemoryVault
from vaultrag.infrastructure.vault.base import VaultFile
from vaultrag.modules.retrieval import PromptGenerator, RAGEngine, RetrievalOptions
from vaultrag.modules.retrieval.prompt import (
    NO_RESULTS_NOTE,
    OMITTED_CONTENT_NOTE,
    add_line_numbers,
    number_snippet_lines,
    render_folder_tree,
    render_similarity_results,
)
from vaultrag.modules.vector import ChunkMetadata, SimilarityResult


def result(path: str, content: str, start: int, end: int, similarity: float = 0.9) -> SimilarityResult:
    return SimilarityResult(
        id=1,
        path=path,
        mtime=1,
        content=content,
        metadata=ChunkMetadata(start_line=start, end_line=end),
        similarity=similarity,
    )


class TestRendering:
    def test_add_line_numbers_pads_to_common_width(self):
        assert add_line_numbers("a\nb", start_line=9) == " 9 | a\n10 | b"
        assert add_line_numbers("only") == "1 | only"

    def test_number_snippet_lines(self):
        assert number_snippet_lines("x\ny", 4) == "4|x\n5|y"

    def test_render_similarity_results(self):
        rendered = render_similarity_results([result("notes/a.md", "first\nsecond", 3, 4)])

        assert rendered == (
            "<similarity_search_results>\n"
            '<file_block_content location="notes/a.md#L3-4">\n'
            "3|first\n"
            "4|second\n"
            "</file_block_content>\n"
            "</similarity_search_results>"
        )

    def test_render_empty_results(self):
        assert render_similarity_results([]) == f"<similarity_search_results>\n{NO_RESULTS_NOTE}\n</similarity_search_results>"

    def test_render_folder_tree(self):
        files = [VaultFile(path="notes/a.md", mtime=1), VaultFile(path="notes/b.md", mtime=1)]

        assert render_folder_tree(files, "notes") == "├── a.md\n└── b.md"


class TestPromptGenerator:
    """Test suite for PromptGenerator.build_context."""

    @pytest.fixture
    def populated_vault(self, vault: InMemoryVault) -> InMemoryVault:
        vault.write("notes/a.md", "alpha line one\nalpha line two")
        vault.write("notes/b.md", "beta content")
        vault.write("journal/c.md", "gamma entry")
        return vault

    def make_generator(self, vault, vector_manager, embedding_model, fast_retry, **options) -> PromptGenerator:
        engine = RAGEngine(
            vault, vector_manager, embedding_model, options=RetrievalOptions(**options), retry_policy=fast_retry
        )
        return PromptGenerator(vault, engine)

    @pytest.mark.asyncio
    async def test_inlines_mentioned_files(self, populated_vault, vector_manager, embedding_model, fast_retry):
        generator = self.make_generator(populated_vault, vector_manager, embedding_model, fast_retry)
        states: List = []

        context = await generator.build_context("summarize", files=["notes/a.md"], on_progress=states.append)

        assert context.prompt.startswith("<task>\nsummarize\n</task>")
        assert '<file_content path="notes/a.md">\n1 | alpha line one\n2 | alpha line two\n</file_content>' in context.prompt
        assert context.over_threshold is False
        assert context.similarity_results == []
        assert [file.path for file in context.file_contents] == ["notes/a.md"]
        assert [state.type for state in states] == ["reading-mentionables", "reading-files", "reading-files-done"]

    @pytest.mark.asyncio
    async def test_inlines_mentioned_folders(self, populated_vault, vector_manager, embedding_model, fast_retry):
        generator = self.make_generator(populated_vault, vector_manager, embedding_model, fast_retry)

        context = await generator.build_context("summarize", folders=["notes"])

        assert '<folder_content path="notes">\n├── a.md\n└── b.md' in context.prompt
        assert '<file_content path="notes/b.md">\n1 | beta content\n</file_content>' in context.prompt
        assert "journal/c.md" not in context.prompt

    @pytest.mark.asyncio
    async def test_over_threshold_replaces_content_with_search(
        self, populated_vault, vector_manager, embedding_model, fast_retry
    ):
        generator = self.make_generator(
            populated_vault, vector_manager, embedding_model, fast_retry, threshold_tokens=1, chunk_size=1000
        )

        context = await generator.build_context("alpha line one\nalpha line two", files=["notes/a.md"])

        assert context.over_threshold is True
        assert OMITTED_CONTENT_NOTE in context.prompt
        assert "1 | alpha line one" not in context.prompt
        assert [r.path for r in context.similarity_results] == ["notes/a.md"]
        assert '<file_block_content location="notes/a.md#L1-2">' in context.prompt

    @pytest.mark.asyncio
    async def test_vault_search(self, populated_vault, vector_manager, embedding_model, fast_retry):
        generator = self.make_generator(populated_vault, vector_manager, embedding_model, fast_retry)
        states: List = []

        context = await generator.build_context("gamma entry", use_vault_search=True, on_progress=states.append)

        assert context.similarity_results[0].path == "journal/c.md"
        assert "<similarity_search_results>" in context.prompt
        assert states[0].type == "reading-mentionables"
        assert states[-1].type == "querying-done"
