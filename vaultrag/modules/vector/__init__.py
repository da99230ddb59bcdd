"""Vault chunk vectors: chunking, embedding, persistence and index orchestration."""

from .chunking import MarkdownChunker, TextChunk
from .embedder import BatchEmbedder, Embedder, SequentialEmbedder, create_embedder
from .manager import BatchingProfile, IndexingConfig, VectorManager
from .repository import VectorRepository
from .schemas import (
    ChunkMetadata,
    IndexProgress,
    IndexRunResult,
    IndexRunStatus,
    IndexUpdateOptions,
    InsertVector,
    SearchScope,
    SelectVector,
    SimilarityResult,
    SimilaritySearchOptions,
)

__all__ = [
    "BatchEmbedder",
    "BatchingProfile",
    "ChunkMetadata",
    "Embedder",
    "IndexProgress",
    "IndexRunResult",
    "IndexRunStatus",
    "IndexUpdateOptions",
    "IndexingConfig",
    "InsertVector",
    "MarkdownChunker",
    "SearchScope",
    "SelectVector",
    "SequentialEmbedder",
    "SimilarityResult",
    "SimilaritySearchOptions",
    "TextChunk",
    "VectorManager",
    "VectorRepository",
    "create_embedder",
]
