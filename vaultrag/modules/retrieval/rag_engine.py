"""Retrieval engine: embeds a query and searches the vault index."""

from typing import Callable, List, Optional

from ...infrastructure.embedding.base import EmbeddingModel
from ...infrastructure.logging import generate_correlation_id, reset_correlation_id, set_correlation_id
from ...infrastructure.vault.base import Vault
from ..common.utils.logger import get_logger
from ..common.utils.retry import RetryPolicy, call_with_retry
from ..vector.manager import VectorManager
from ..vector.schemas import (
    IndexProgress,
    IndexRunResult,
    IndexUpdateOptions,
    SearchScope,
    SimilarityResult,
    SimilaritySearchOptions,
)
from .schemas import IndexingState, QueryingDoneState, QueryingState, QueryProgressState, RetrievalOptions

logger = get_logger(__name__)

QueryProgressCallback = Callable[[QueryProgressState], None]


class RAGEngine:
    """Answers free-text queries with the most similar vault chunks.

    The engine is bound to one embedding model, which is used both for keeping
    the index current and for embedding queries, so query vectors are always
    compared with vectors of the same model.
    """

    def __init__(
        self,
        vault: Vault,
        vector_manager: VectorManager,
        embedding_model: EmbeddingModel,
        options: Optional[RetrievalOptions] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.vault = vault
        self.vector_manager = vector_manager
        self.embedding_model = embedding_model
        self.options = options or RetrievalOptions()
        self.retry_policy = retry_policy or RetryPolicy()

    async def update_vault_index(
        self,
        reindex_all: bool = False,
        on_progress: Optional[QueryProgressCallback] = None,
    ) -> IndexRunResult:
        """Update the index of the whole vault, reporting ``indexing`` states."""

        def forward(progress: IndexProgress) -> None:
            if on_progress is not None:
                on_progress(IndexingState(index_progress=progress))

        return await self.vector_manager.update_vault_index(
            self.embedding_model, self.index_update_options(reindex_all), on_progress=forward
        )

    def index_update_options(self, reindex_all: bool = False) -> IndexUpdateOptions:
        return IndexUpdateOptions(
            chunk_size=self.options.chunk_size,
            exclude_patterns=self.options.exclude_patterns,
            include_patterns=self.options.include_patterns,
            reindex_all=reindex_all,
        )

    async def update_file_index(self, path: str) -> IndexRunResult:
        return await self.vector_manager.update_file_vector_index(self.embedding_model, self.options.chunk_size, path)

    async def delete_file_index(self, path: str) -> int:
        return await self.vector_manager.delete_file_vector_index(self.embedding_model, path)

    async def process_query(
        self,
        query: str,
        scope: Optional[SearchScope] = None,
        on_progress: Optional[QueryProgressCallback] = None,
    ) -> List[SimilarityResult]:
        """Return the chunks most similar to ``query``.

        Args:
            query: Free-text query
            scope: Optional restriction to files and folders
            on_progress: Receives ``indexing`` states while the index is
                updated, then ``querying`` and ``querying-done``

        Returns:
            Results sorted by descending similarity
        """
        if self.options.update_index_on_query:
            await self.update_vault_index(reindex_all=False, on_progress=on_progress)

        token = set_correlation_id(generate_correlation_id())
        try:
            if on_progress is not None:
                on_progress(QueryingState())

            query_vector = await call_with_retry(
                lambda: self.embedding_model.get_embedding(query),
                self.retry_policy,
                "query embedding",
            )
            results = await self.vector_manager.perform_similarity_search(
                query_vector,
                self.embedding_model,
                SimilaritySearchOptions(
                    min_similarity=self.options.min_similarity,
                    limit=self.options.limit,
                    scope=scope,
                ),
            )
            logger.debug(f"Query matched {len(results)} chunks")

            if on_progress is not None:
                on_progress(QueryingDoneState(query_result=results))
            return results
        finally:
            reset_correlation_id(token)
