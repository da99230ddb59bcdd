"""Persistent vector store for vault chunks."""

from datetime import datetime, timezone
from typing import Any, List, Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...infrastructure.database.session import local_session
from ...infrastructure.embedding.base import EmbeddingModel
from ...infrastructure.indexing.base import ChunkVector
from ...infrastructure.indexing.manager import IndexManager, index_manager
from ..common.exceptions import EmbeddingModelMismatchError, ValidationError
from ..common.utils.logger import get_logger
from .crud import vault_vector_crud
from .models import VaultVector
from .schemas import ChunkMetadata, InsertVector, SelectVector, SimilarityResult, SimilaritySearchOptions

logger = get_logger(__name__)

# Keeps IN (...) lists below SQLite's bound-parameter limit.
DELETE_PATH_BATCH_SIZE = 500


class VectorRepository:
    """Stores chunk vectors, partitioned by embedding-model identity.

    Every operation takes the embedding model whose namespace it acts on. The
    database is the source of truth; an in-memory index per namespace serves
    similarity searches and is kept in step with inserts and deletes.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = local_session,
        indexes: IndexManager = index_manager,
    ):
        self._session_factory = session_factory
        self._indexes = indexes

    async def insert_vectors(self, records: Sequence[InsertVector], model: EmbeddingModel) -> int:
        """Bulk-insert embedded records.

        Args:
            records: Records whose ``embedding`` has been filled in
            model: Embedding model that produced the vectors

        Returns:
            Number of inserted rows, always ``len(records)``

        Raises:
            ValidationError: If a record has no embedding.
            EmbeddingModelMismatchError: If an embedding is not of the model's width.
        """
        if not records:
            return 0

        identity = model.identity
        now = datetime.now(timezone.utc)
        rows = []
        for record in records:
            if not record.embedding:
                raise ValidationError(f"Cannot insert unembedded chunk of {record.path}")
            if len(record.embedding) != identity.dimension:
                raise EmbeddingModelMismatchError(
                    f"Chunk of {record.path} has width {len(record.embedding)}, "
                    f"model {identity.key} expects {identity.dimension}"
                )
            rows.append(
                {
                    "embedding_model": identity.key,
                    "path": record.path,
                    "mtime": record.mtime,
                    "content": record.content,
                    "embedding": record.embedding,
                    "dimension": identity.dimension,
                    "extra_metadata": record.metadata.model_dump(by_alias=True),
                    "created_at": now,
                    "updated_at": now,
                }
            )

        async with self._session_factory() as db:
            stmt = insert(VaultVector).returning(VaultVector.id, sort_by_parameter_order=True)
            result = await db.execute(stmt, rows)
            ids = list(result.scalars().all())
            await db.commit()

        await self._indexes.add_vectors(
            identity.key,
            [
                ChunkVector(
                    chunk_id=chunk_id,
                    path=row["path"],
                    content=row["content"],
                    embedding=row["embedding"],
                    mtime=row["mtime"],
                    metadata=row["extra_metadata"],
                )
                for chunk_id, row in zip(ids, rows)
            ],
        )

        logger.debug(f"Inserted {len(ids)} vectors for model {identity.key}")
        return len(ids)

    async def delete_vectors_for_single_file(self, path: str, model: EmbeddingModel) -> int:
        """Delete every chunk of ``path``; deleting an unindexed path is a no-op."""
        return await self.delete_vectors_for_multiple_files([path], model)

    async def delete_vectors_for_multiple_files(self, paths: Sequence[str], model: EmbeddingModel) -> int:
        """Delete every chunk of ``paths`` and return the number of removed rows."""
        unique_paths = list(dict.fromkeys(paths))
        if not unique_paths:
            return 0

        key = model.identity.key
        deleted = 0
        async with self._session_factory() as db:
            for start in range(0, len(unique_paths), DELETE_PATH_BATCH_SIZE):
                group = unique_paths[start : start + DELETE_PATH_BATCH_SIZE]
                stmt = delete(VaultVector).where(VaultVector.embedding_model == key, VaultVector.path.in_(group))
                result: Any = await db.execute(stmt)
                deleted += result.rowcount or 0
            await db.commit()

        await self._indexes.remove_paths(key, unique_paths)
        return deleted

    async def clear_all_vectors(self, model: EmbeddingModel) -> int:
        """Delete every chunk stored for ``model``."""
        key = model.identity.key
        async with self._session_factory() as db:
            result: Any = await db.execute(delete(VaultVector).where(VaultVector.embedding_model == key))
            await db.commit()

        await self._indexes.clear(key)
        return result.rowcount or 0

    async def get_vectors_by_file_path(self, path: str, model: EmbeddingModel) -> List[SelectVector]:
        """Return the chunks of ``path`` in insertion order."""
        stmt = await vault_vector_crud.select(
            sort_columns="id",
            sort_orders="asc",
            embedding_model=model.identity.key,
            path=path,
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            rows = result.fetchall()

        return [
            SelectVector(
                id=row.id,
                path=row.path,
                mtime=row.mtime,
                content=row.content,
                metadata=ChunkMetadata.model_validate(row.extra_metadata),
            )
            for row in rows
        ]

    async def get_all_indexed_file_paths(self, model: EmbeddingModel) -> List[str]:
        """Return the distinct indexed paths, sorted."""
        stmt = (
            select(VaultVector.path)
            .where(VaultVector.embedding_model == model.identity.key)
            .distinct()
            .order_by(VaultVector.path)
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def count_vectors(self, model: EmbeddingModel) -> int:
        async with self._session_factory() as db:
            return await vault_vector_crud.count(db=db, embedding_model=model.identity.key)

    def is_index_loaded(self, model: EmbeddingModel) -> bool:
        """Whether the in-memory search index of ``model`` has been loaded."""
        return self._indexes.is_loaded(model.identity.key)

    async def perform_similarity_search(
        self,
        query_vector: List[float],
        model: EmbeddingModel,
        options: SimilaritySearchOptions,
    ) -> List[SimilarityResult]:
        """Rank stored chunks of ``model`` by cosine similarity to ``query_vector``.

        Returns at most ``options.limit`` results with similarity strictly above
        ``options.min_similarity``, sorted by descending similarity.

        Raises:
            EmbeddingModelMismatchError: If the query vector is not of the model's width.
        """
        identity = model.identity
        if len(query_vector) != identity.dimension:
            raise EmbeddingModelMismatchError(
                f"Query vector has width {len(query_vector)}, model {identity.key} expects {identity.dimension}"
            )

        scope = options.scope
        path_filter = scope.matches if scope is not None and not scope.is_empty else None

        results = await self._indexes.search(
            identity.key,
            identity.dimension,
            lambda: self._load_chunk_vectors(model),
            query_vector,
            options.limit,
            min_similarity=options.min_similarity,
            path_filter=path_filter,
        )

        return [
            SimilarityResult(
                id=result.chunk_id,
                path=result.path,
                mtime=result.mtime,
                content=result.content,
                metadata=ChunkMetadata.model_validate(result.metadata),
                similarity=result.similarity,
            )
            for result in results
        ]

    async def _load_chunk_vectors(self, model: EmbeddingModel) -> List[ChunkVector]:
        stmt = await vault_vector_crud.select(sort_columns="id", sort_orders="asc", embedding_model=model.identity.key)
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            rows = result.fetchall()

        logger.info(f"Loaded {len(rows)} vectors for model {model.identity.key} into the search index")
        return [
            ChunkVector(
                chunk_id=row.id,
                path=row.path,
                content=row.content,
                embedding=row.embedding,
                mtime=row.mtime,
                metadata=row.extra_metadata or {},
            )
            for row in rows
        ]
