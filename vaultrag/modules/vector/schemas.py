"""Pydantic schemas for chunks, search options and indexing runs."""

from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChunkMetadata(BaseModel):
    """1-based inclusive line range of a chunk within its document.

    Serialized as ``{"startLine": ..., "endLine": ...}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    start_line: int = Field(alias="startLine", ge=1)
    end_line: int = Field(alias="endLine", ge=1)


class InsertVector(BaseModel):
    """A chunk record on its way into the repository.

    ``embedding`` stays ``None`` until the embedding phase fills it in.
    """

    path: str
    mtime: int
    content: str
    metadata: ChunkMetadata
    embedding: Optional[List[float]] = None


class SelectVector(BaseModel):
    """A persisted chunk, without its embedding."""

    id: int
    path: str
    mtime: int
    content: str
    metadata: ChunkMetadata


class SimilarityResult(SelectVector):
    """A persisted chunk ranked against a query vector."""

    similarity: float


class SearchScope(BaseModel):
    """Restricts a similarity search to some files and folders.

    An empty scope matches everything.
    """

    files: List[str] = Field(default_factory=list)
    folders: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.files and not self.folders

    def matches(self, path: str) -> bool:
        if self.is_empty or path in self.files:
            return True
        for folder in self.folders:
            prefix = folder.strip("/")
            if not prefix or path.startswith(f"{prefix}/"):
                return True
        return False


class SimilaritySearchOptions(BaseModel):
    """Threshold, result cap and optional scope of a similarity search."""

    min_similarity: float = 0.0
    limit: Annotated[int, Field(ge=1)] = 10
    scope: Optional[SearchScope] = None


class IndexProgress(BaseModel):
    """Progress of one indexing run."""

    completed_chunks: int = 0
    total_chunks: int = 0
    total_files: int = 0


class IndexUpdateOptions(BaseModel):
    """Inputs of a full-vault index update."""

    chunk_size: Annotated[int, Field(gt=0)] = 1000
    exclude_patterns: List[str] = Field(default_factory=list)
    include_patterns: List[str] = Field(default_factory=list)
    reindex_all: bool = False


class IndexRunStatus(str, Enum):
    """How an indexing run ended."""

    COMPLETED = "completed"
    UP_TO_DATE = "up_to_date"
    CONFIGURATION_REQUIRED = "configuration_required"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


class IndexRunResult(BaseModel):
    """Summary of an indexing run."""

    status: IndexRunStatus
    indexed_files: List[str] = Field(default_factory=list)
    skipped_files: List[str] = Field(default_factory=list)
    total_chunks: int = 0
    completed_chunks: int = 0
    message: Optional[str] = None


class IndexRequest(BaseModel):
    """Request body of a full-vault index update."""

    reindex_all: bool = Field(default=False, description="Delete every stored vector and index all files again")


class FileIndexRequest(BaseModel):
    """Request body of a single-file index update."""

    path: Annotated[str, Field(min_length=1, description="Vault-relative path of the document")]


class FileDeleteResponse(BaseModel):
    path: str
    deleted_vectors: int


class EmbeddingInfo(BaseModel):
    """Identity of the configured embedding model and the size of its namespace."""

    provider: str
    model_id: str
    dimension: int
    key: str
    supports_batch: bool
    stored_vectors: int
    index_loaded: bool
