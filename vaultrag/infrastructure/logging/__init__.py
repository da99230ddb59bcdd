"""Centralized logging infrastructure for vaultrag.

Loggers are obtained through a single factory that configures the root logger
once, based on the environment found in the application settings. Indexing runs
and retrieval queries attach a correlation id so that every record emitted while
a run is in flight can be grouped together.

Usage:
    ```python
    from vaultrag.infrastructure.logging import get_logger

    logger = get_logger()  # Auto-detects module name
    logger.info("Vault index updated", extra={"indexed_files": 12})
    ```
"""

from .config import (
    configure_testing_logging,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
    setup_logging_configuration,
)
from .factory import configure_logging, get_logger

__all__ = [
    "get_logger",
    "configure_logging",
    "configure_testing_logging",
    "setup_logging_configuration",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "reset_correlation_id",
]
