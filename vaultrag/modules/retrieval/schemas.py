"""Pydantic schemas for retrieval queries and their progress states."""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..vector.schemas import IndexProgress, SimilarityResult


class FileContent(BaseModel):
    path: str
    content: str


class WebsiteContent(BaseModel):
    url: str
    content: str


class IdleState(BaseModel):
    type: Literal["idle"] = "idle"


class ReadingMentionablesState(BaseModel):
    type: Literal["reading-mentionables"] = "reading-mentionables"


class ReadingFilesState(BaseModel):
    type: Literal["reading-files"] = "reading-files"
    current_file: Optional[str] = None
    total_files: Optional[int] = None
    completed_files: Optional[int] = None


class ReadingFilesDoneState(BaseModel):
    type: Literal["reading-files-done"] = "reading-files-done"
    file_contents: List[FileContent] = Field(default_factory=list)


class ReadingWebsitesState(BaseModel):
    type: Literal["reading-websites"] = "reading-websites"
    current_url: Optional[str] = None
    total_urls: Optional[int] = None
    completed_urls: Optional[int] = None


class ReadingWebsitesDoneState(BaseModel):
    type: Literal["reading-websites-done"] = "reading-websites-done"
    website_contents: List[WebsiteContent] = Field(default_factory=list)


class IndexingState(BaseModel):
    type: Literal["indexing"] = "indexing"
    index_progress: IndexProgress


class QueryingState(BaseModel):
    type: Literal["querying"] = "querying"


class QueryingDoneState(BaseModel):
    type: Literal["querying-done"] = "querying-done"
    query_result: List[SimilarityResult] = Field(default_factory=list)


# Progress of a retrieval request: reading-mentionables -> reading-files -> reading-files-done
# -> querying -> querying-done -> idle. "indexing" is emitted while the index is brought up to date
# before querying; the reading-websites states form a parallel branch.
QueryProgressState = Annotated[
    Union[
        IdleState,
        ReadingMentionablesState,
        ReadingFilesState,
        ReadingFilesDoneState,
        ReadingWebsitesState,
        ReadingWebsitesDoneState,
        IndexingState,
        QueryingState,
        QueryingDoneState,
    ],
    Field(discriminator="type"),
]


class RetrievalOptions(BaseModel):
    """Indexing and search settings used by the retrieval engine."""

    chunk_size: Annotated[int, Field(gt=0)] = 1000
    exclude_patterns: List[str] = Field(default_factory=list)
    include_patterns: List[str] = Field(default_factory=list)
    min_similarity: float = 0.0
    limit: Annotated[int, Field(ge=1)] = 10
    threshold_tokens: Annotated[int, Field(gt=0)] = 8192
    update_index_on_query: bool = True

    @classmethod
    def from_settings(cls, settings) -> "RetrievalOptions":
        return cls(
            chunk_size=settings.CHUNK_SIZE,
            exclude_patterns=settings.INDEX_EXCLUDE_PATTERNS_LIST,
            include_patterns=settings.INDEX_INCLUDE_PATTERNS_LIST,
            min_similarity=settings.RAG_MIN_SIMILARITY,
            limit=settings.RAG_LIMIT,
            threshold_tokens=settings.RAG_THRESHOLD_TOKENS,
            update_index_on_query=settings.RAG_UPDATE_INDEX_ON_QUERY,
        )


class PromptContext(BaseModel):
    """Context block assembled for a chat model."""

    prompt: str
    similarity_results: List[SimilarityResult] = Field(default_factory=list)
    file_contents: List[FileContent] = Field(default_factory=list)
    over_threshold: bool = False


class SearchRequest(BaseModel):
    """Request body of a similarity search."""

    query: Annotated[str, Field(min_length=1, description="Free-text query")]
    files: List[str] = Field(default_factory=list, description="Restrict results to these documents")
    folders: List[str] = Field(default_factory=list, description="Restrict results to these folders")


class SearchResponse(BaseModel):
    results: List[SimilarityResult]
    context: str


class ContextRequest(BaseModel):
    """Request body for assembling a prompt context."""

    query: Annotated[str, Field(min_length=1)]
    files: List[str] = Field(default_factory=list, description="Mentioned documents to inline")
    folders: List[str] = Field(default_factory=list, description="Mentioned folders to inline")
    use_vault_search: bool = Field(default=False, description="Retrieve excerpts from the whole vault")
