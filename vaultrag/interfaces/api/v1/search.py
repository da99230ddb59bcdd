"""API endpoints for semantic search over the vault."""

from typing import Annotated

from fastapi import APIRouter, Depends

from ....modules.retrieval import PromptGenerator, RAGEngine, render_similarity_results
from ....modules.retrieval.schemas import ContextRequest, PromptContext, SearchRequest, SearchResponse
from ....modules.vector.schemas import SearchScope
from ..dependencies import get_prompt_generator, get_rag_engine

router = APIRouter(prefix="/search", tags=["Search"])


@router.post(
    "",
    summary="Semantic Search",
    description="""Find the vault excerpts most similar to a query.

    The index is brought up to date first when `RAG_UPDATE_INDEX_ON_QUERY` is
    enabled. Results can be restricted to documents and folders, and are also
    returned rendered as a line-numbered context block.
    """,
    responses={
        200: {"description": "Results sorted by descending similarity"},
        422: {"description": "Invalid request or query vector of the wrong width"},
        424: {"description": "Embedding provider is not configured"},
        429: {"description": "Embedding provider rate limit exceeded"},
    },
)
async def search(request: SearchRequest, engine: Annotated[RAGEngine, Depends(get_rag_engine)]) -> SearchResponse:
    scope = SearchScope(files=request.files, folders=request.folders)
    results = await engine.process_query(request.query, scope=None if scope.is_empty else scope)
    return SearchResponse(results=results, context=render_similarity_results(results))


@router.post(
    "/context",
    summary="Build Prompt Context",
    description="""Assemble the context a chat model would receive for a query.

    Mentioned files and folders are inlined with line numbers; when they exceed
    the token threshold they are replaced by the most relevant excerpts.
    """,
)
async def build_context(
    request: ContextRequest, generator: Annotated[PromptGenerator, Depends(get_prompt_generator)]
) -> PromptContext:
    return await generator.build_context(
        request.query,
        files=request.files,
        folders=request.folders,
        use_vault_search=request.use_vault_search,
    )
