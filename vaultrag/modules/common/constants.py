"""Common constants used across the application."""

from typing import Callable, Dict, Type

from fastapi import HTTPException, status

from .exceptions import (
    DomainError,
    EmbeddingConfigurationError,
    EmbeddingProviderError,
    RateLimitExceededError,
    ResourceNotFoundError,
    ValidationError,
)

# Ordered from most to least specific; the first isinstance match wins.
EXCEPTION_MAPPING: Dict[Type[DomainError], Callable[[str], HTTPException]] = {
    ResourceNotFoundError: lambda message: HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message),
    ValidationError: lambda message: HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message),
    EmbeddingConfigurationError: lambda message: HTTPException(status_code=status.HTTP_424_FAILED_DEPENDENCY, detail=message),
    RateLimitExceededError: lambda message: HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=message),
    EmbeddingProviderError: lambda message: HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message),
}
