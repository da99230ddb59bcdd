"""Logger factory with lazy configuration and settings integration.

This is the single entry point for obtaining loggers. The first call configures
the root logger from the application settings; later calls only resolve names.
"""

import inspect
import logging
from threading import Lock
from typing import Any, MutableMapping, Optional, Tuple, Union

from ..config.settings import get_settings
from .config import setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a configured logger, detecting the calling module when no name is given.

    Args:
        name: Logger name. If None, automatically detects from calling module.
        **extra_context: Context added to every record emitted through the logger.

    Returns:
        Configured logger instance ready for use.

    Example:
        ```python
        logger = get_logger(component="vector-manager")
        logger.info("Indexing started", extra={"total_files": 4})
        ```
    """
    _ensure_logging_configured()

    if name is None:
        name = _detect_calling_module()

    base_logger = logging.getLogger(name)

    if extra_context:
        return ContextLoggerAdapter(base_logger, extra_context)
    return base_logger


def configure_logging() -> None:
    """Configure logging now instead of on the first ``get_logger`` call."""
    global _logging_configured

    with _configuration_lock:
        if _logging_configured:
            return
        setup_logging_configuration()
        _logging_configured = True

        settings = get_settings()
        logging.getLogger(__name__).debug(
            f"Logging configured for {settings.ENVIRONMENT.value} environment",
            extra={
                "log_level": settings.LOG_LEVEL,
                "log_format": settings.LOG_FORMAT,
                "console_enabled": settings.LOG_CONSOLE_ENABLED,
                "file_enabled": settings.LOG_FILE_ENABLED,
            },
        )


def _ensure_logging_configured() -> None:
    if not _logging_configured:
        configure_logging()


def _detect_calling_module() -> str:
    """Return the ``__name__`` of the module that called ``get_logger``."""
    frame = inspect.currentframe()

    try:
        for _ in range(2):
            if frame is None:
                break
            frame = frame.f_back

        if frame is None:
            return "unknown"
        return str(frame.f_globals.get("__name__", "unknown"))
    finally:
        del frame


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges its context with per-call ``extra``."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        adapter_extra = self.extra if isinstance(self.extra, dict) else {}

        if isinstance(extra, dict):
            kwargs["extra"] = {**adapter_extra, **extra}
        else:
            kwargs["extra"] = dict(adapter_extra)

        return msg, kwargs
