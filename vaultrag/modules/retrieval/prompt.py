"""Assembles retrieval-augmented context blocks for a chat model."""

from typing import Callable, List, Optional, Sequence

from ...infrastructure.vault.base import Vault, VaultFile
from ..common.utils.logger import get_logger
from ..common.utils.token_estimator import TokenEstimator
from ..vector.schemas import SearchScope, SimilarityResult
from .rag_engine import RAGEngine
from .schemas import (
    FileContent,
    PromptContext,
    QueryProgressState,
    ReadingFilesDoneState,
    ReadingFilesState,
    ReadingMentionablesState,
    RetrievalOptions,
)

logger = get_logger(__name__)

OMITTED_CONTENT_NOTE = "(Content omitted due to token limit. Relevant sections will be provided by semantic search below.)"
NO_RESULTS_NOTE = "(No relevant results found)"


def add_line_numbers(content: str, start_line: int = 1) -> str:
    """Prefix every line with its right-aligned number, e.g. `` 9 | text``."""
    lines = content.split("\n")
    width = len(str(start_line + len(lines) - 1))
    return "\n".join(f"{str(start_line + index).rjust(width)} | {line}" for index, line in enumerate(lines))


def number_snippet_lines(content: str, start_line: int) -> str:
    """Prefix every line of a retrieved snippet with ``N|``."""
    return "\n".join(f"{start_line + index}|{line}" for index, line in enumerate(content.split("\n")))


def render_similarity_results(results: Sequence[SimilarityResult]) -> str:
    """Render search results as a ``<similarity_search_results>`` block."""
    snippets = "\n".join(
        f'<file_block_content location="{result.path}#L{result.metadata.start_line}-{result.metadata.end_line}">\n'
        f"{number_snippet_lines(result.content, result.metadata.start_line)}\n"
        "</file_block_content>"
        for result in results
    )
    return f"<similarity_search_results>\n{snippets or NO_RESULTS_NOTE}\n</similarity_search_results>"


def render_folder_tree(files: Sequence[VaultFile], folder: str) -> str:
    prefix = f"{folder.strip('/')}/" if folder.strip("/") else ""
    names = [file.path[len(prefix) :] for file in files]
    return "\n".join(
        f"{'└── ' if index == len(names) - 1 else '├── '}{name}" for index, name in enumerate(names)
    )


class PromptGenerator:
    """Builds the context a chat model sees for a user query.

    Mentioned files and folders are inlined with line numbers. When their
    estimated size exceeds ``threshold_tokens``, the bodies are replaced by a
    note and the most relevant excerpts of those files are retrieved instead.
    Vault-wide search retrieves excerpts from every indexed document.
    """

    def __init__(self, vault: Vault, rag_engine: RAGEngine, options: Optional[RetrievalOptions] = None):
        self.vault = vault
        self.rag_engine = rag_engine
        self.options = options or rag_engine.options

    render_similarity_results = staticmethod(render_similarity_results)
    add_line_numbers = staticmethod(add_line_numbers)

    async def build_context(
        self,
        query: str,
        files: Sequence[str] = (),
        folders: Sequence[str] = (),
        use_vault_search: bool = False,
        on_progress: Optional[Callable[[QueryProgressState], None]] = None,
    ) -> PromptContext:
        """Assemble the prompt for ``query``.

        Args:
            query: The user's request
            files: Vault paths mentioned by the user
            folders: Vault folders mentioned by the user
            use_vault_search: Retrieve from the whole vault
            on_progress: Receives reading, indexing and querying states

        Returns:
            The prompt text with the results and file contents it was built from
        """

        def emit(state: QueryProgressState) -> None:
            if on_progress is not None:
                on_progress(state)

        emit(ReadingMentionablesState())

        file_contents: List[FileContent] = []
        file_blocks: List[str] = []
        folder_blocks: List[str] = []
        folder_trees: List[str] = []
        total = len(files) + len(folders)
        completed = 0

        for path in files:
            emit(ReadingFilesState(current_file=path, total_files=total, completed_files=completed))
            content = await self.vault.read(path)
            file_contents.append(FileContent(path=path, content=content))
            file_blocks.append(f'<file_content path="{path}">\n{add_line_numbers(content)}\n</file_content>')
            completed += 1

        if folders:
            vault_files = await self.vault.list_markdown_files()
            for folder in folders:
                emit(ReadingFilesState(current_file=folder, total_files=total, completed_files=completed))
                scope = SearchScope(folders=[folder])
                members = [file for file in vault_files if scope.matches(file.path)]
                tree = render_folder_tree(members, folder)
                member_blocks = []
                for member in members:
                    content = await self.vault.read(member.path)
                    file_contents.append(FileContent(path=member.path, content=content))
                    member_blocks.append(
                        f'<file_content path="{member.path}">\n{add_line_numbers(content)}\n</file_content>'
                    )
                folder_trees.append(tree)
                folder_blocks.append(
                    f'<folder_content path="{folder}">\n{tree}\n' + "\n".join(member_blocks) + "\n</folder_content>"
                )
                completed += 1

        if total:
            emit(ReadingFilesDoneState(file_contents=file_contents))

        token_count = TokenEstimator.estimate_total(file_blocks + folder_blocks)
        over_threshold = token_count > self.options.threshold_tokens
        if over_threshold:
            logger.debug(f"Mentioned content is {token_count} tokens, above {self.options.threshold_tokens}")
            file_blocks = [f'<file_content path="{path}">\n{OMITTED_CONTENT_NOTE}\n</file_content>' for path in files]
            folder_blocks = [
                f'<folder_content path="{folder}">\n{tree}\n{OMITTED_CONTENT_NOTE}\n</folder_content>'
                for folder, tree in zip(folders, folder_trees)
            ]

        similarity_results: List[SimilarityResult] = []
        similarity_block = None
        if use_vault_search or over_threshold:
            scope = None if use_vault_search else SearchScope(files=list(files), folders=list(folders))
            similarity_results = await self.rag_engine.process_query(query, scope=scope, on_progress=on_progress)
            similarity_block = render_similarity_results(similarity_results)

        sections = [f"<task>\n{query}\n</task>", "\n".join(file_blocks), "\n".join(folder_blocks), similarity_block]
        return PromptContext(
            prompt="\n\n".join(section for section in sections if section),
            similarity_results=similarity_results,
            file_contents=file_contents,
            over_threshold=over_threshold,
        )
