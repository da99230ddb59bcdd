from fastapi import APIRouter

from .embedding import router as embedding_router
from .index import router as index_router
from .search import router as search_router

router = APIRouter(prefix="/v1")
router.include_router(index_router)
router.include_router(search_router)
router.include_router(embedding_router)


@router.get(
    "/health",
    summary="API Health Check",
    description="Simple health check endpoint for monitoring and container orchestration.",
    responses={
        200: {"description": "API is healthy and responding"},
    },
)
async def health_check():
    """Health check endpoint for Docker health checks."""
    return {"status": "healthy", "message": "Vault RAG API is running"}
