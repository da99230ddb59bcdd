"""API endpoints describing the embedding model."""

from typing import Annotated, List

from fastapi import APIRouter, Depends

from ....infrastructure.embedding import EmbeddingModel, OpenAICompatibleEmbeddingModel
from ....modules.vector import VectorRepository
from ....modules.vector.schemas import EmbeddingInfo
from ..dependencies import get_embedding_model, get_vector_repository

router = APIRouter(prefix="/embedding", tags=["Embedding"])


@router.get(
    "/info",
    summary="Get Embedding Model Information",
    description="""Get the identity of the configured embedding model.

    Includes the namespace key under which its vectors are stored and how many
    vectors are currently stored for it.
    """,
)
async def get_embedding_info(
    model: Annotated[EmbeddingModel, Depends(get_embedding_model)],
    repository: Annotated[VectorRepository, Depends(get_vector_repository)],
) -> EmbeddingInfo:
    identity = model.identity
    return EmbeddingInfo(
        provider=identity.provider,
        model_id=identity.model_id,
        dimension=identity.dimension,
        key=identity.key,
        supports_batch=model.supports_batch,
        stored_vectors=await repository.count_vectors(model),
        index_loaded=repository.is_index_loaded(model),
    )


@router.get(
    "/models",
    summary="List Provider Models",
    description="Model ids offered by the embedding provider. Remote listings are cached.",
)
async def list_models(model: Annotated[EmbeddingModel, Depends(get_embedding_model)]) -> List[str]:
    if isinstance(model, OpenAICompatibleEmbeddingModel):
        return await model.list_models()
    return [model.identity.model_id]
