"""API endpoints for maintaining the vault index."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ....modules.retrieval import RAGEngine
from ....modules.vector.schemas import FileDeleteResponse, FileIndexRequest, IndexRequest, IndexRunResult
from ..dependencies import get_rag_engine

router = APIRouter(prefix="/index", tags=["Index"])


@router.post(
    "",
    summary="Update Vault Index",
    description="""Bring the stored vectors into agreement with the vault.

    Without `reindex_all`, only new and modified documents are embedded, and
    vectors of deleted or filtered-out documents are removed. Embedding
    configuration problems and exhausted rate limits are reported in the
    `status` field rather than as errors.
    """,
    responses={
        200: {"description": "Indexing run finished"},
        502: {"description": "Embedding provider failed"},
    },
)
async def update_vault_index(
    request: IndexRequest, engine: Annotated[RAGEngine, Depends(get_rag_engine)]
) -> IndexRunResult:
    """Run an index update for the whole vault."""
    return await engine.update_vault_index(reindex_all=request.reindex_all)


@router.post(
    "/files",
    summary="Update File Index",
    description="Re-index one document. Failures are reported in the response status, never raised.",
)
async def update_file_index(
    request: FileIndexRequest, engine: Annotated[RAGEngine, Depends(get_rag_engine)]
) -> IndexRunResult:
    return await engine.update_file_index(request.path)


@router.delete(
    "/files",
    summary="Delete File Index",
    description="Remove the vectors of one document. Deleting an unindexed path is not an error.",
)
async def delete_file_index(
    path: Annotated[str, Query(min_length=1)], engine: Annotated[RAGEngine, Depends(get_rag_engine)]
) -> FileDeleteResponse:
    deleted = await engine.delete_file_index(path)
    return FileDeleteResponse(path=path, deleted_vectors=deleted)
