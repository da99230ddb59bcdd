"""Domain exception classes for indexing and retrieval errors."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class ValidationError(DomainError):
    """Raised when data validation fails."""

    pass


class EmbeddingModelMismatchError(ValidationError):
    """Raised when a vector does not belong to the embedding model it is used with."""

    pass


class EmbeddingProviderError(DomainError):
    """Raised when an embedding provider call fails."""

    pass


class EmbeddingConfigurationError(EmbeddingProviderError):
    """Raised when the embedding provider is not usable until its settings are repaired.

    These errors are never retried.
    """

    pass


class CredentialsMissingError(EmbeddingConfigurationError):
    """Raised when no API key is configured for the embedding provider."""

    pass


class CredentialsInvalidError(EmbeddingConfigurationError):
    """Raised when the embedding provider rejects the configured API key."""

    pass


class BaseUrlMissingError(EmbeddingConfigurationError):
    """Raised when the embedding provider requires a base URL and none is configured."""

    pass


class RateLimitExceededError(EmbeddingProviderError):
    """Raised when the embedding provider throttles requests."""

    pass


class IndexingAbortedError(DomainError):
    """Raised by embedding calls that observe a tripped abort signal."""

    pass
