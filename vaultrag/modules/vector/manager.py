"""Index orchestration: reconcile the vault with the vector repository."""

import asyncio
import gc
import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ...infrastructure.embedding.base import EmbeddingModel
from ...infrastructure.logging import generate_correlation_id, reset_correlation_id, set_correlation_id
from ...infrastructure.vault.base import Vault, VaultFile
from ..common.exceptions import EmbeddingConfigurationError, RateLimitExceededError
from ..common.notifications import LoggingNotifier, Notifier
from ..common.utils.logger import get_logger
from ..common.utils.patterns import filter_paths
from ..common.utils.retry import RetryPolicy
from ..common.utils.text import sanitize_content
from .chunking import MarkdownChunker
from .embedder import Embedder, create_embedder
from .repository import VectorRepository
from .schemas import (
    ChunkMetadata,
    IndexProgress,
    IndexRunResult,
    IndexRunStatus,
    IndexUpdateOptions,
    InsertVector,
    SimilarityResult,
    SimilaritySearchOptions,
)

logger = get_logger(__name__)

ProgressCallback = Callable[[IndexProgress], None]


@dataclass(frozen=True)
class BatchingProfile:
    """Batch sizes and concurrency cap for one kind of indexing run."""

    embedding_batch_size: int
    insert_batch_size: int
    max_concurrency: int


@dataclass(frozen=True)
class IndexingConfig:
    """Tuning constants of the indexer.

    Full-vault runs favour throughput; single-file runs use smaller batches so
    that an edit is reflected quickly.
    """

    vault_profile: BatchingProfile = BatchingProfile(embedding_batch_size=32, insert_batch_size=32, max_concurrency=32)
    file_profile: BatchingProfile = BatchingProfile(embedding_batch_size=16, insert_batch_size=16, max_concurrency=10)
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    memory_cleanup_interval: int = 10
    memory_cleanup_yield_seconds: float = 0.1

    @classmethod
    def from_settings(cls, settings: Any) -> "IndexingConfig":
        return cls(
            vault_profile=BatchingProfile(
                embedding_batch_size=settings.VAULT_EMBEDDING_BATCH_SIZE,
                insert_batch_size=settings.VAULT_INSERT_BATCH_SIZE,
                max_concurrency=settings.VAULT_MAX_CONCURRENCY,
            ),
            file_profile=BatchingProfile(
                embedding_batch_size=settings.FILE_EMBEDDING_BATCH_SIZE,
                insert_batch_size=settings.FILE_INSERT_BATCH_SIZE,
                max_concurrency=settings.FILE_MAX_CONCURRENCY,
            ),
            retry_policy=RetryPolicy.from_settings(settings),
            memory_cleanup_interval=settings.MEMORY_CLEANUP_INTERVAL,
            memory_cleanup_yield_seconds=settings.MEMORY_CLEANUP_YIELD_SECONDS,
        )


class VectorManager:
    """Keeps the persisted chunk set of an embedding model in step with the vault.

    Responsibilities:
    - Change detection (new, modified, deleted and filtered-out documents)
    - Chunking with content sanitization
    - Driving the embedding strategy of the model and inserting each embedded
      batch as soon as it is ready
    - Progress reporting and user-facing notices

    Mutating operations on the same embedding model run one at a time. Work
    already inserted when a run fails stays persisted.
    """

    def __init__(
        self,
        repository: VectorRepository,
        vault: Vault,
        notifier: Optional[Notifier] = None,
        config: Optional[IndexingConfig] = None,
    ):
        self.repository = repository
        self.vault = vault
        self.notifier = notifier or LoggingNotifier()
        self.config = config or IndexingConfig()
        self._embedders: "weakref.WeakKeyDictionary[EmbeddingModel, Dict[BatchingProfile, Embedder]]" = (
            weakref.WeakKeyDictionary()
        )
        self._run_locks: Dict[str, asyncio.Lock] = {}

    async def perform_similarity_search(
        self,
        query_vector: List[float],
        model: EmbeddingModel,
        options: SimilaritySearchOptions,
    ) -> List[SimilarityResult]:
        return await self.repository.perform_similarity_search(query_vector, model, options)

    async def update_vault_index(
        self,
        model: EmbeddingModel,
        options: IndexUpdateOptions,
        on_progress: Optional[ProgressCallback] = None,
    ) -> IndexRunResult:
        """Bring the persisted chunks of ``model`` into agreement with the vault.

        Args:
            model: Embedding model whose namespace is updated
            options: Chunk size, path filters and the full re-index flag
            on_progress: Called with a fresh ``IndexProgress`` before the
                embedding phase and after every inserted batch

        Returns:
            Summary of the run. Configuration problems and exhausted rate
            limits end the run with a matching status instead of raising.

        Raises:
            Exception: Any other embedding or repository error, after logging.
        """
        token = set_correlation_id(generate_correlation_id())
        try:
            async with self._run_lock(model):
                return await self._update_vault_index(model, options, on_progress)
        finally:
            reset_correlation_id(token)

    async def _update_vault_index(
        self,
        model: EmbeddingModel,
        options: IndexUpdateOptions,
        on_progress: Optional[ProgressCallback],
    ) -> IndexRunResult:
        vault_files = await self.vault.list_markdown_files()
        candidates = self._filter_candidates(vault_files, options)

        if options.reindex_all:
            removed = await self.repository.clear_all_vectors(model)
            logger.info(f"Full re-index of {len(candidates)} files requested, cleared {removed} vectors")
            files_to_index = candidates
        else:
            await self._remove_stale_paths(model, vault_files, candidates)
            files_to_index = await self._find_outdated_files(model, candidates)
            await self.repository.delete_vectors_for_multiple_files([file.path for file in files_to_index], model)

        if not files_to_index:
            logger.info("Vault index is up to date")
            return IndexRunResult(status=IndexRunStatus.UP_TO_DATE)

        chunks, skipped_files = await self._chunk_files(files_to_index, options.chunk_size)
        if skipped_files:
            logger.warning(f"Skipped {len(skipped_files)} files that could not be read: {skipped_files}")
            self.notifier.notify(f"Skipped {len(skipped_files)} files that could not be indexed")

        indexed_files = [file.path for file in files_to_index if file.path not in skipped_files]
        if not chunks:
            return IndexRunResult(
                status=IndexRunStatus.COMPLETED, indexed_files=indexed_files, skipped_files=skipped_files
            )

        progress = IndexProgress(completed_chunks=0, total_chunks=len(chunks), total_files=len(files_to_index))
        result = IndexRunResult(
            status=IndexRunStatus.COMPLETED,
            indexed_files=indexed_files,
            skipped_files=skipped_files,
            total_chunks=len(chunks),
        )
        self._emit(on_progress, progress)

        try:
            await self._embed_and_insert(model, chunks, self.config.vault_profile, progress, on_progress)
        except EmbeddingConfigurationError as e:
            self.notifier.request_configuration(str(e))
            result.status = IndexRunStatus.CONFIGURATION_REQUIRED
            result.message = str(e)
        except RateLimitExceededError as e:
            self.notifier.notify(str(e))
            result.status = IndexRunStatus.RATE_LIMITED
            result.message = str(e)
        except Exception as e:
            logger.error(f"Error embedding chunks: {e}")
            raise
        finally:
            gc.collect()

        result.completed_chunks = progress.completed_chunks
        logger.info(
            f"Indexing run finished with status {result.status.value}: "
            f"{progress.completed_chunks}/{progress.total_chunks} chunks from {len(indexed_files)} files"
        )
        return result

    async def update_file_vector_index(self, model: EmbeddingModel, chunk_size: int, path: str) -> IndexRunResult:
        """Re-index one document with the interactive batching profile.

        Never raises: every failure is logged, surfaced through the notifier and
        reported in the returned status.
        """
        token = set_correlation_id(generate_correlation_id())
        progress = IndexProgress(total_files=1)
        try:
            async with self._run_lock(model):
                await self.repository.delete_vectors_for_single_file(path, model)

                file = await self.vault.stat(path)
                content = await self.vault.read(path)
                chunks = self._build_chunks(file, content, chunk_size)
                progress.total_chunks = len(chunks)

                await self._embed_and_insert(model, chunks, self.config.file_profile, progress, None)
            return IndexRunResult(
                status=IndexRunStatus.COMPLETED,
                indexed_files=[path],
                total_chunks=progress.total_chunks,
                completed_chunks=progress.completed_chunks,
            )
        except EmbeddingConfigurationError as e:
            logger.error(f"Embedding configuration error while indexing {path}: {e}")
            self.notifier.request_configuration(str(e))
            status = IndexRunStatus.CONFIGURATION_REQUIRED
            message = str(e)
        except RateLimitExceededError as e:
            logger.warning(f"Rate limited while indexing {path}: {e}")
            self.notifier.notify(str(e))
            status = IndexRunStatus.RATE_LIMITED
            message = str(e)
        except Exception as e:
            logger.warning(f"Skipping file {path}: {e}")
            self.notifier.notify(f"Skipped file {path}: {e}")
            status = IndexRunStatus.FAILED
            message = str(e)
        finally:
            gc.collect()
            reset_correlation_id(token)

        return IndexRunResult(
            status=status,
            skipped_files=[path],
            total_chunks=progress.total_chunks,
            completed_chunks=progress.completed_chunks,
            message=message,
        )

    async def delete_file_vector_index(self, model: EmbeddingModel, path: str) -> int:
        """Remove every chunk of ``path``; a no-op for unindexed paths."""
        async with self._run_lock(model):
            return await self.repository.delete_vectors_for_single_file(path, model)

    def _run_lock(self, model: EmbeddingModel) -> asyncio.Lock:
        """Lock serializing index mutations of one embedding-model namespace."""
        key = model.identity.key
        if key not in self._run_locks:
            self._run_locks[key] = asyncio.Lock()
        return self._run_locks[key]

    def _filter_candidates(self, vault_files: Sequence[VaultFile], options: IndexUpdateOptions) -> List[VaultFile]:
        allowed = set(filter_paths([file.path for file in vault_files], options.exclude_patterns, options.include_patterns))
        return [file for file in vault_files if file.path in allowed]

    async def _remove_stale_paths(
        self,
        model: EmbeddingModel,
        vault_files: Sequence[VaultFile],
        candidates: Sequence[VaultFile],
    ) -> None:
        """Delete chunks of documents that were removed from the vault or are now filtered out."""
        existing = {file.path for file in vault_files}
        admitted = {file.path for file in candidates}
        indexed = await self.repository.get_all_indexed_file_paths(model)

        orphans = [path for path in indexed if path not in existing]
        filtered_out = [path for path in indexed if path in existing and path not in admitted]

        if orphans:
            logger.info(f"Removing vectors of {len(orphans)} deleted files")
        if filtered_out:
            logger.info(f"Removing vectors of {len(filtered_out)} files excluded by filters")
        if orphans or filtered_out:
            await self.repository.delete_vectors_for_multiple_files(orphans + filtered_out, model)

    async def _find_outdated_files(self, model: EmbeddingModel, candidates: Sequence[VaultFile]) -> List[VaultFile]:
        outdated = []
        for file in candidates:
            try:
                stored = await self.repository.get_vectors_by_file_path(file.path, model)
                if not stored:
                    content = sanitize_content(await self.vault.read(file.path))
                    if content.strip():
                        outdated.append(file)
                elif file.mtime > stored[0].mtime:
                    logger.info(f"File has changed and needs re-indexing: {file.path}")
                    outdated.append(file)
            except Exception as e:
                logger.warning(f"Could not check index state of {file.path}, skipping: {e}")
        return outdated

    async def _chunk_files(self, files: Sequence[VaultFile], chunk_size: int) -> tuple[List[InsertVector], List[str]]:
        chunks: List[InsertVector] = []
        skipped: List[str] = []
        for file in files:
            try:
                content = await self.vault.read(file.path)
                chunks.extend(self._build_chunks(file, content, chunk_size))
            except Exception as e:
                logger.warning(f"Skipping file {file.path}: {e}")
                skipped.append(file.path)
        return chunks, skipped

    def _build_chunks(self, file: VaultFile, content: str, chunk_size: int) -> List[InsertVector]:
        chunker = MarkdownChunker(chunk_size=chunk_size)
        return [
            InsertVector(
                path=file.path,
                mtime=file.mtime,
                content=sanitize_content(chunk.content),
                metadata=ChunkMetadata(start_line=chunk.start_line, end_line=chunk.end_line),
            )
            for chunk in chunker.split(sanitize_content(content))
        ]

    def _embedder_for(self, model: EmbeddingModel, profile: BatchingProfile) -> Embedder:
        strategies = self._embedders.setdefault(model, {})
        if profile not in strategies:
            strategies[profile] = create_embedder(
                model,
                self.config.retry_policy,
                embedding_batch_size=profile.embedding_batch_size,
                insert_batch_size=profile.insert_batch_size,
                max_concurrency=profile.max_concurrency,
            )
        return strategies[profile]

    async def _embed_and_insert(
        self,
        model: EmbeddingModel,
        chunks: List[InsertVector],
        profile: BatchingProfile,
        progress: IndexProgress,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        if not chunks:
            return

        embedder = self._embedder_for(model, profile)
        batch_count = 0
        async for batch in embedder.embed(chunks):
            batch_count += 1
            if batch.vectors:
                await self.repository.insert_vectors(batch.vectors, model)

            progress.completed_chunks += batch.processed
            self._emit(on_progress, progress)
            logger.debug(f"Embedded batch {batch_count}: {progress.completed_chunks}/{progress.total_chunks} chunks")

            await self._memory_cleanup(batch_count)

    async def _memory_cleanup(self, batch_count: int) -> None:
        interval = self.config.memory_cleanup_interval
        if interval > 0 and batch_count % interval == 0:
            gc.collect()
            await asyncio.sleep(self.config.memory_cleanup_yield_seconds)

    @staticmethod
    def _emit(on_progress: Optional[ProgressCallback], progress: IndexProgress) -> None:
        if on_progress is not None:
            on_progress(progress.model_copy())
