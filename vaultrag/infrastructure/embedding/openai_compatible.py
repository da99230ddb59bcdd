"""Embedding model speaking the OpenAI-compatible ``/embeddings`` HTTP API."""

from typing import Any, Dict, List, Optional

import httpx

from ...modules.common.exceptions import (
    BaseUrlMissingError,
    CredentialsInvalidError,
    CredentialsMissingError,
    EmbeddingProviderError,
    RateLimitExceededError,
)
from ...modules.common.utils.logger import get_logger
from .base import EmbeddingModel, EmbeddingModelIdentity
from .model_cache import ModelListCache

logger = get_logger(__name__)

PROVIDER_NAME = "openai-compatible"


class OpenAICompatibleEmbeddingModel(EmbeddingModel):
    """Remote embedding model reached over HTTP.

    Works with any service exposing ``POST {base_url}/embeddings`` and
    ``GET {base_url}/models`` in the OpenAI response shape. Provider failures
    are classified into the domain error taxonomy so that the indexer can tell
    configuration problems from throttling.
    """

    def __init__(
        self,
        model_id: str,
        dimension: int,
        api_key: str,
        base_url: str,
        supports_batch: bool = True,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
        model_cache: Optional[ModelListCache] = None,
    ):
        self.model_id = model_id
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.model_cache = model_cache
        self._supports_batch = supports_batch
        self._client = client
        self._identity = EmbeddingModelIdentity(provider=PROVIDER_NAME, model_id=model_id, dimension=dimension)

    @property
    def identity(self) -> EmbeddingModelIdentity:
        return self._identity

    @property
    def supports_batch(self) -> bool:
        return self._supports_batch

    async def get_embedding(self, text: str) -> List[float]:
        vectors = await self._embed([text])
        return vectors[0]

    async def get_batch_embeddings(self, texts: List[str]) -> List[List[float]]:
        if not self._supports_batch:
            return await super().get_batch_embeddings(texts)
        if not texts:
            return []
        return await self._embed(texts)

    async def list_models(self) -> List[str]:
        """Return the model ids offered by the provider, cached when a cache is attached."""
        if self.model_cache is None:
            return await self._fetch_models()
        return await self.model_cache.get_or_fetch(f"{PROVIDER_NAME}:{self.base_url}", self._fetch_models)

    async def _fetch_models(self) -> List[str]:
        payload = await self._request("GET", "/models")
        return sorted(str(item["id"]) for item in payload.get("data", []) if "id" in item)

    async def _embed(self, texts: List[str]) -> List[List[float]]:
        payload = await self._request("POST", "/embeddings", json={"model": self.model_id, "input": texts})

        data = payload.get("data")
        if not isinstance(data, list) or len(data) != len(texts):
            raise EmbeddingProviderError(
                f"Embedding response contained {len(data) if isinstance(data, list) else 0} vectors "
                f"for {len(texts)} inputs"
            )

        ordered = sorted(data, key=lambda item: item.get("index", 0))
        return [self.validate_vector([float(value) for value in item["embedding"]]) for item in ordered]

    def _ensure_configured(self) -> None:
        if not self.base_url:
            raise BaseUrlMissingError(f"Base URL is not set for embedding provider {PROVIDER_NAME}")
        if not self.api_key:
            raise CredentialsMissingError(f"API key is not set for embedding provider {PROVIDER_NAME}")

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self._ensure_configured()
        headers = {"Authorization": f"Bearer {self.api_key}"}
        url = f"{self.base_url}{path}"

        try:
            if self._client is not None:
                response = await self._client.request(method, url, json=json, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise EmbeddingProviderError(f"Embedding request to {url} failed: {e}") from e

        self._raise_for_status(response)
        return response.json()

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return

        detail = response.text[:200]
        if response.status_code in (401, 403):
            raise CredentialsInvalidError(f"Embedding provider rejected the API key ({response.status_code}): {detail}")
        if response.status_code == 429:
            raise RateLimitExceededError(f"Embedding provider rate limit exceeded: {detail}")

        logger.error(f"Embedding provider returned {response.status_code}: {detail}")
        raise EmbeddingProviderError(f"Embedding provider returned {response.status_code}: {detail}")
