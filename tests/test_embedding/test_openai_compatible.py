"""Tests for OpenAICompatibleEmbeddingModel against a mocked HTTP transport."""

import json
from typing import List

import httpx
import pytest

from vaultrag.infrastructure.embedding import ModelListCache, OpenAICompatibleEmbeddingModel
from vaultrag.modules.common.exceptions import (
    BaseUrlMissingError,
    CredentialsInvalidError,
    CredentialsMissingError,
    EmbeddingModelMismatchError,
    EmbeddingProviderError,
    RateLimitExceededError,
)

BASE_URL = "https://embeddings.example.com/v1"


class FakeProvider:
    """Request handler emulating an OpenAI-compatible embeddings service."""

    def __init__(self, dimension: int = 3, status_code: int = 200):
        self.dimension = dimension
        self.status_code = status_code
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="provider error")

        if request.url.path.endswith("/models"):
            return httpx.Response(200, json={"data": [{"id": "text-embed-b"}, {"id": "text-embed-a"}]})

        body = json.loads(request.content)
        data = [
            {"index": index, "embedding": [float(index + 1)] * self.dimension}
            for index, _ in enumerate(body["input"])
        ]
        # Providers may return entries out of order.
        return httpx.Response(200, json={"data": list(reversed(data))})


def make_model(provider: FakeProvider, **kwargs) -> OpenAICompatibleEmbeddingModel:
    options = {"model_id": "text-embed-a", "dimension": 3, "api_key": "secret", "base_url": BASE_URL}
    options.update(kwargs)
    return OpenAICompatibleEmbeddingModel(client=httpx.AsyncClient(transport=httpx.MockTransport(provider)), **options)


@pytest.mark.asyncio
async def test_batch_embeddings_follow_input_order():
    provider = FakeProvider()
    model = make_model(provider)

    vectors = await model.get_batch_embeddings(["first", "second"])

    assert vectors == [[1.0, 1.0, 1.0], [2.0, 2.0, 2.0]]
    request = provider.requests[0]
    assert str(request.url) == f"{BASE_URL}/embeddings"
    assert request.headers["Authorization"] == "Bearer secret"
    assert json.loads(request.content) == {"model": "text-embed-a", "input": ["first", "second"]}


@pytest.mark.asyncio
async def test_single_embedding():
    model = make_model(FakeProvider())

    assert await model.get_embedding("hello") == [1.0, 1.0, 1.0]


def test_identity():
    model = make_model(FakeProvider(), base_url=f"{BASE_URL}/")

    assert model.identity.key == "openai-compatible/text-embed-a:3"
    assert model.base_url == BASE_URL
    assert model.supports_batch is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, error",
    [
        (401, CredentialsInvalidError),
        (403, CredentialsInvalidError),
        (429, RateLimitExceededError),
        (500, EmbeddingProviderError),
    ],
)
async def test_http_errors_are_classified(status_code: int, error: type):
    model = make_model(FakeProvider(status_code=status_code))

    with pytest.raises(error):
        await model.get_embedding("hello")


@pytest.mark.asyncio
async def test_missing_credentials_fail_before_any_request():
    provider = FakeProvider()

    with pytest.raises(CredentialsMissingError):
        await make_model(provider, api_key="").get_embedding("hello")
    with pytest.raises(BaseUrlMissingError):
        await make_model(provider, base_url="").get_embedding("hello")

    assert provider.requests == []


@pytest.mark.asyncio
async def test_transport_errors_become_provider_errors():
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    model = OpenAICompatibleEmbeddingModel(
        model_id="text-embed-a",
        dimension=3,
        api_key="secret",
        base_url=BASE_URL,
        client=httpx.AsyncClient(transport=httpx.MockTransport(unreachable)),
    )

    with pytest.raises(EmbeddingProviderError, match="connection refused"):
        await model.get_embedding("hello")


@pytest.mark.asyncio
async def test_wrong_vector_width_is_rejected():
    model = make_model(FakeProvider(dimension=5))

    with pytest.raises(EmbeddingModelMismatchError):
        await model.get_embedding("hello")


@pytest.mark.asyncio
async def test_batch_disabled():
    model = make_model(FakeProvider(), supports_batch=False)

    assert model.supports_batch is False
    with pytest.raises(EmbeddingProviderError):
        await model.get_batch_embeddings(["a", "b"])


@pytest.mark.asyncio
async def test_list_models_is_cached():
    provider = FakeProvider()
    model = make_model(provider, model_cache=ModelListCache(ttl_seconds=60))

    first = await model.list_models()
    second = await model.list_models()

    assert first == second == ["text-embed-a", "text-embed-b"]
    assert len(provider.requests) == 1
