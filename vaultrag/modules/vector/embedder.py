"""Embedding strategies for the indexing pipeline.

An ``Embedder`` turns an ordered list of unembedded chunk records into a
stream of embedded batches. The indexer inserts each batch as soon as it is
yielded, so everything yielded before a failure stays persisted.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Sequence, Tuple

from ...infrastructure.embedding.base import EmbeddingModel
from ..common.exceptions import EmbeddingProviderError, IndexingAbortedError
from ..common.utils.logger import get_logger
from ..common.utils.retry import RetryPolicy, call_with_retry
from .schemas import InsertVector

logger = get_logger(__name__)


@dataclass
class EmbeddedBatch:
    """Records embedded by one batch and how many input chunks they account for."""

    vectors: List[InsertVector]
    processed: int


class Embedder(ABC):
    """Strategy for embedding chunk records with one embedding model."""

    def __init__(self, model: EmbeddingModel, retry_policy: RetryPolicy):
        self.model = model
        self.retry_policy = retry_policy

    @abstractmethod
    def embed(self, chunks: Sequence[InsertVector]) -> AsyncIterator[EmbeddedBatch]:
        """Yield embedded batches in input order.

        Raises the error that stopped embedding after yielding whatever was
        embedded before it.
        """
        pass


class BatchEmbedder(Embedder):
    """One retried batch-embedding call per fixed-size batch."""

    def __init__(self, model: EmbeddingModel, retry_policy: RetryPolicy, batch_size: int = 32):
        super().__init__(model, retry_policy)
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.batch_size = batch_size

    async def embed(self, chunks: Sequence[InsertVector]) -> AsyncIterator[EmbeddedBatch]:
        for start in range(0, len(chunks), self.batch_size):
            batch = chunks[start : start + self.batch_size]
            texts = [chunk.content for chunk in batch]

            embeddings = await call_with_retry(
                lambda: self.model.get_batch_embeddings(texts),
                self.retry_policy,
                f"batch embedding ({len(texts)} chunks)",
            )
            if len(embeddings) != len(batch):
                raise EmbeddingProviderError(f"Expected {len(batch)} embeddings, received {len(embeddings)}")

            yield EmbeddedBatch(
                vectors=[chunk.model_copy(update={"embedding": embedding}) for chunk, embedding in zip(batch, embeddings)],
                processed=len(batch),
            )


class SequentialEmbedder(Embedder):
    """Per-chunk embedding calls, bounded by a concurrency limit.

    Chunks are processed in sub-batches of ``batch_size``. Within a sub-batch at
    most ``max_concurrency`` calls are in flight. The first call that exhausts
    its retries trips the run's abort signal and cancels its siblings; the
    chunks of that sub-batch that were already embedded are yielded before the
    error is raised.
    """

    def __init__(
        self,
        model: EmbeddingModel,
        retry_policy: RetryPolicy,
        batch_size: int = 32,
        max_concurrency: int = 32,
    ):
        super().__init__(model, retry_policy)
        if batch_size <= 0 or max_concurrency <= 0:
            raise ValueError("batch_size and max_concurrency must be positive")
        self.batch_size = batch_size
        self.max_concurrency = max_concurrency

    async def embed(self, chunks: Sequence[InsertVector]) -> AsyncIterator[EmbeddedBatch]:
        abort = asyncio.Event()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        for start in range(0, len(chunks), self.batch_size):
            batch = chunks[start : start + self.batch_size]
            embedded, failure = await self._embed_sub_batch(batch, semaphore, abort)

            if failure is not None:
                if embedded:
                    yield EmbeddedBatch(vectors=embedded, processed=len(embedded))
                raise failure

            yield EmbeddedBatch(vectors=embedded, processed=len(batch))

    async def _embed_sub_batch(
        self,
        batch: Sequence[InsertVector],
        semaphore: asyncio.Semaphore,
        abort: asyncio.Event,
    ) -> Tuple[List[InsertVector], Optional[BaseException]]:
        tasks = [asyncio.create_task(self._embed_chunk(chunk, semaphore, abort)) for chunk in batch]

        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        failure = next((task.exception() for task in tasks if task in done and task.exception() is not None), None)
        if failure is not None:
            abort.set()
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            logger.error(f"Embedding failed, cancelled {len(pending)} in-flight calls: {failure}")

        embedded = [
            task.result() for task in tasks if task.done() and not task.cancelled() and task.exception() is None
        ]
        return embedded, failure

    async def _embed_chunk(
        self,
        chunk: InsertVector,
        semaphore: asyncio.Semaphore,
        abort: asyncio.Event,
    ) -> InsertVector:
        async def attempt() -> List[float]:
            if abort.is_set():
                raise IndexingAbortedError("Embedding run was aborted")
            return await self.model.get_embedding(chunk.content)

        async with semaphore:
            embedding = await call_with_retry(attempt, self.retry_policy, f"embedding chunk of {chunk.path}")
        return chunk.model_copy(update={"embedding": embedding})


def create_embedder(
    model: EmbeddingModel,
    retry_policy: RetryPolicy,
    embedding_batch_size: int,
    insert_batch_size: int,
    max_concurrency: int,
) -> Embedder:
    """Pick the embedding strategy for ``model``.

    Batch-capable models get one call per ``embedding_batch_size`` chunks;
    other models get concurrent per-chunk calls over sub-batches of
    ``insert_batch_size``.
    """
    if model.supports_batch:
        return BatchEmbedder(model, retry_policy, batch_size=embedding_batch_size)
    return SequentialEmbedder(model, retry_policy, batch_size=insert_batch_size, max_concurrency=max_concurrency)
