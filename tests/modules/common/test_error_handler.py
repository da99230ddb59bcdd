"""Tests for mapping domain exceptions to HTTP responses."""

import pytest

from vaultrag.modules.common.exceptions import (
    BaseUrlMissingError,
    DomainError,
    EmbeddingModelMismatchError,
    EmbeddingProviderError,
    RateLimitExceededError,
    ResourceNotFoundError,
)
from vaultrag.modules.common.utils.error_handler import map_exception


@pytest.mark.parametrize(
    "error, status_code",
    [
        (ResourceNotFoundError("missing"), 404),
        (EmbeddingModelMismatchError("wrong width"), 422),
        (BaseUrlMissingError("no url"), 424),
        (RateLimitExceededError("slow down"), 429),
        (EmbeddingProviderError("provider down"), 502),
        (DomainError("other"), 500),
    ],
)
def test_map_exception(error: DomainError, status_code: int):
    http_exception = map_exception(error)

    assert http_exception.status_code == status_code
    assert str(error) in http_exception.detail
