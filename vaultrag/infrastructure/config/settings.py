import logging
import os
from enum import Enum
from typing import List

from pydantic_settings import BaseSettings
from starlette.config import Config

logger = logging.getLogger(__name__)

current_file_dir = os.path.dirname(os.path.realpath(__file__))
project_root = os.path.abspath(os.path.join(current_file_dir, "..", "..", ".."))

env_paths = [
    "/code/.env",
    os.path.join(project_root, ".env"),
    "/.env",
]

env_path = next((path for path in env_paths if os.path.isfile(path)), env_paths[0])
logger.info(f"Using environment file at: {env_path}")

config = Config(env_path)


def _split_patterns(value: str) -> List[str]:
    return [x.strip() for x in value.split(",") if x.strip()]


class EnvironmentOption(str, Enum):
    """Environment options for the application."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    LOCAL = "local"


class EnvironmentSettings(BaseSettings):
    """Environment-related settings."""

    ENVIRONMENT: EnvironmentOption = config("ENVIRONMENT", default=EnvironmentOption.DEVELOPMENT, cast=EnvironmentOption)


class DatabaseEngineOption(str, Enum):
    """Supported vector store backends."""

    SQLITE = "sqlite"
    POSTGRES = "postgres"


class DatabaseSettings(BaseSettings):
    """Database-related settings.

    The vector store lives next to the vault by default (SQLite file), mirroring
    an embedded per-vault database. PostgreSQL is available for shared deployments.
    """

    DATABASE_ENGINE: DatabaseEngineOption = config(
        "DATABASE_ENGINE", default=DatabaseEngineOption.SQLITE, cast=DatabaseEngineOption
    )

    SQLITE_URI: str = config("SQLITE_URI", default="./vaultrag.db")
    SQLITE_ASYNC_PREFIX: str = config("SQLITE_ASYNC_PREFIX", default="sqlite+aiosqlite:///")

    POSTGRES_USER: str = config("POSTGRES_USER", default="postgres")
    POSTGRES_PASSWORD: str = config("POSTGRES_PASSWORD", default="postgres")
    POSTGRES_SERVER: str = config("POSTGRES_SERVER", default="localhost")
    POSTGRES_PORT: int = config("POSTGRES_PORT", default=5432, cast=int)
    POSTGRES_DB: str = config("POSTGRES_DB", default="postgres")
    POSTGRES_ASYNC_PREFIX: str = config("POSTGRES_ASYNC_PREFIX", default="postgresql+asyncpg://")
    POSTGRES_POOL_SIZE: int = config("POSTGRES_POOL_SIZE", default=20, cast=int)
    POSTGRES_MAX_OVERFLOW: int = config("POSTGRES_MAX_OVERFLOW", default=0, cast=int)

    CREATE_TABLES_ON_STARTUP: bool = config("CREATE_TABLES_ON_STARTUP", default=True, cast=bool)

    @property
    def DATABASE_URL(self) -> str:
        """Get the full database URL."""
        if self.DATABASE_ENGINE == DatabaseEngineOption.SQLITE:
            return f"{self.SQLITE_ASYNC_PREFIX}{self.SQLITE_URI}"
        return (
            f"{self.POSTGRES_ASYNC_PREFIX}{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:"
            f"{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


class EmbeddingProviderOption(str, Enum):
    """Embedding backends available to the indexer."""

    SENTENCE_TRANSFORMERS = "sentence-transformers"
    OPENAI_COMPATIBLE = "openai-compatible"


class EmbeddingSettings(BaseSettings):
    """Embedding model selection and credentials."""

    EMBEDDING_PROVIDER: EmbeddingProviderOption = config(
        "EMBEDDING_PROVIDER", default=EmbeddingProviderOption.SENTENCE_TRANSFORMERS, cast=EmbeddingProviderOption
    )
    EMBEDDING_MODEL_ID: str = config("EMBEDDING_MODEL_ID", default="all-mpnet-base-v2")
    EMBEDDING_DIMENSION: int = config("EMBEDDING_DIMENSION", default=768, cast=int)
    EMBEDDING_API_KEY: str = config("EMBEDDING_API_KEY", default="")
    EMBEDDING_BASE_URL: str = config("EMBEDDING_BASE_URL", default="")
    EMBEDDING_SUPPORTS_BATCH: bool = config("EMBEDDING_SUPPORTS_BATCH", default=True, cast=bool)
    EMBEDDING_REQUEST_TIMEOUT: float = config("EMBEDDING_REQUEST_TIMEOUT", default=60.0, cast=float)


class IndexingSettings(BaseSettings):
    """Vault indexing tuning constants."""

    VAULT_PATH: str = config("VAULT_PATH", default=".")
    CHUNK_SIZE: int = config("CHUNK_SIZE", default=1000, cast=int)
    INDEX_EXCLUDE_PATTERNS: str = config("INDEX_EXCLUDE_PATTERNS", default="")
    INDEX_INCLUDE_PATTERNS: str = config("INDEX_INCLUDE_PATTERNS", default="")

    VAULT_EMBEDDING_BATCH_SIZE: int = config("VAULT_EMBEDDING_BATCH_SIZE", default=32, cast=int)
    VAULT_INSERT_BATCH_SIZE: int = config("VAULT_INSERT_BATCH_SIZE", default=32, cast=int)
    VAULT_MAX_CONCURRENCY: int = config("VAULT_MAX_CONCURRENCY", default=32, cast=int)

    FILE_EMBEDDING_BATCH_SIZE: int = config("FILE_EMBEDDING_BATCH_SIZE", default=16, cast=int)
    FILE_INSERT_BATCH_SIZE: int = config("FILE_INSERT_BATCH_SIZE", default=16, cast=int)
    FILE_MAX_CONCURRENCY: int = config("FILE_MAX_CONCURRENCY", default=10, cast=int)

    EMBEDDING_RETRY_ATTEMPTS: int = config("EMBEDDING_RETRY_ATTEMPTS", default=3, cast=int)
    EMBEDDING_RETRY_INITIAL_DELAY: float = config("EMBEDDING_RETRY_INITIAL_DELAY", default=0.5, cast=float)
    EMBEDDING_RETRY_MULTIPLIER: float = config("EMBEDDING_RETRY_MULTIPLIER", default=1.5, cast=float)
    EMBEDDING_RETRY_MAX_DELAY: float = config("EMBEDDING_RETRY_MAX_DELAY", default=30.0, cast=float)
    EMBEDDING_RETRY_JITTER: str = config("EMBEDDING_RETRY_JITTER", default="full")

    MEMORY_CLEANUP_INTERVAL: int = config("MEMORY_CLEANUP_INTERVAL", default=10, cast=int)
    MEMORY_CLEANUP_YIELD_SECONDS: float = config("MEMORY_CLEANUP_YIELD_SECONDS", default=0.1, cast=float)

    @property
    def INDEX_EXCLUDE_PATTERNS_LIST(self) -> List[str]:
        """Get exclude glob patterns as a list."""
        return _split_patterns(self.INDEX_EXCLUDE_PATTERNS)

    @property
    def INDEX_INCLUDE_PATTERNS_LIST(self) -> List[str]:
        """Get include glob patterns as a list."""
        return _split_patterns(self.INDEX_INCLUDE_PATTERNS)


class RetrievalSettings(BaseSettings):
    """Similarity search and context assembly settings."""

    RAG_MIN_SIMILARITY: float = config("RAG_MIN_SIMILARITY", default=0.0, cast=float)
    RAG_LIMIT: int = config("RAG_LIMIT", default=10, cast=int)
    RAG_THRESHOLD_TOKENS: int = config("RAG_THRESHOLD_TOKENS", default=8192, cast=int)
    RAG_UPDATE_INDEX_ON_QUERY: bool = config("RAG_UPDATE_INDEX_ON_QUERY", default=True, cast=bool)


class ModelCacheSettings(BaseSettings):
    """Provider model-list cache settings."""

    MODEL_LIST_CACHE_TTL_SECONDS: float = config("MODEL_LIST_CACHE_TTL_SECONDS", default=3600.0, cast=float)


class CORSSettings(BaseSettings):
    """CORS-related settings."""

    CORS_ENABLED: bool = config("CORS_ENABLED", default=True, cast=bool)
    CORS_ORIGINS: str = config("CORS_ORIGINS", default="*")
    CORS_ALLOW_CREDENTIALS: bool = config("CORS_ALLOW_CREDENTIALS", default=True, cast=bool)

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        """Get CORS origins as a list."""
        if not self.CORS_ORIGINS:
            return ["*"]
        return _split_patterns(self.CORS_ORIGINS)

    CORS_ALLOW_METHODS: str = config("CORS_ALLOW_METHODS", default="*")
    CORS_ALLOW_HEADERS: str = config("CORS_ALLOW_HEADERS", default="*")


class CompressionSettings(BaseSettings):
    """Compression-related settings."""

    GZIP_ENABLED: bool = config("GZIP_ENABLED", default=True, cast=bool)
    GZIP_MINIMUM_SIZE: int = config("GZIP_MINIMUM_SIZE", default=1000, cast=int)


class APIDocSettings(BaseSettings):
    """API documentation settings."""

    ENABLE_DOCS_IN_PRODUCTION: bool = config("ENABLE_DOCS_IN_PRODUCTION", default=False, cast=bool)
    DOCS_URL: str = config("DOCS_URL", default="/docs")
    REDOC_URL: str = config("REDOC_URL", default="/redoc")
    OPENAPI_URL: str = config("OPENAPI_URL", default="/openapi.json")


class APISettings(BaseSettings):
    """API-related settings."""

    API_PREFIX: str = "/api"


class AppSettings(BaseSettings):
    """Application-related settings."""

    APP_NAME: str = "Vault RAG API"
    APP_DESCRIPTION: str = "Incremental vault indexing and semantic retrieval"
    DEBUG: bool = config("DEBUG", default=False, cast=bool)
    VERSION: str = "0.1.0"


class LoggingSettings(BaseSettings):
    """Centralized logging configuration settings."""

    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")
    LOG_FORMAT: str = config("LOG_FORMAT", default="structured")  # "simple", "detailed", "structured", "json"

    LOG_CONSOLE_ENABLED: bool = config("LOG_CONSOLE_ENABLED", default=True, cast=bool)
    LOG_FILE_ENABLED: bool = config("LOG_FILE_ENABLED", default=False, cast=bool)
    LOG_FILE_PATH: str = config("LOG_FILE_PATH", default="logs/vaultrag.log")
    LOG_FILE_MAX_SIZE: int = config("LOG_FILE_MAX_SIZE", default=10485760, cast=int)
    LOG_FILE_BACKUP_COUNT: int = config("LOG_FILE_BACKUP_COUNT", default=5, cast=int)

    LOG_CORRELATION_ID: bool = config("LOG_CORRELATION_ID", default=True, cast=bool)

    LOG_DEVELOPMENT_VERBOSE: bool = config("LOG_DEVELOPMENT_VERBOSE", default=True, cast=bool)
    LOG_PRODUCTION_OPTIMIZE: bool = config("LOG_PRODUCTION_OPTIMIZE", default=True, cast=bool)

    @property
    def LOG_LEVEL_INT(self) -> int:
        """Convert string log level to integer."""
        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return level_map.get(self.LOG_LEVEL.upper(), logging.INFO)


class Settings(
    EnvironmentSettings,
    DatabaseSettings,
    EmbeddingSettings,
    IndexingSettings,
    RetrievalSettings,
    ModelCacheSettings,
    CORSSettings,
    CompressionSettings,
    APIDocSettings,
    APISettings,
    AppSettings,
    LoggingSettings,
):
    """Main settings class that combines all setting categories."""

    pass


settings = Settings()


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        The application settings.
    """
    return settings
