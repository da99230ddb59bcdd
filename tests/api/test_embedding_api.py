"""Tests for embedding API endpoints."""

import pytest
from httpx import AsyncClient

from fakes import InMemoryVault


@pytest.mark.asyncio
async def test_get_embedding_info(client: AsyncClient, vault: InMemoryVault):
    vault.write("a.md", "first note")
    await client.post("/api/v1/index", json={})

    response = await client.get("/api/v1/embedding/info")

    assert response.status_code == 200
    assert response.json() == {
        "provider": "fake",
        "model_id": "fake-model",
        "dimension": 64,
        "key": "fake/fake-model:64",
        "supports_batch": True,
        "stored_vectors": 1,
        "index_loaded": False,
    }


@pytest.mark.asyncio
async def test_list_models_of_local_model(client: AsyncClient):
    response = await client.get("/api/v1/embedding/models")

    assert response.status_code == 200
    assert response.json() == ["fake-model"]
