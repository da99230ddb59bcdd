"""Environment-aware logging setup.

Configuration Logic:
- Development: Verbose console logging with colors
- Staging: Structured console logging, optional rotating file
- Production: JSON console logging, noisy third-party loggers quieted
- Testing: Null handler, errors only
"""

import contextvars
import logging
import uuid

from ..config.settings import EnvironmentOption, get_settings
from .handlers import (
    create_console_handler,
    create_file_handler,
    create_null_handler,
)


def setup_logging_configuration() -> None:
    """Set up the root logger based on application settings.

    Called once, lazily, by the logger factory.
    """
    settings = get_settings()

    logging.getLogger().handlers.clear()

    if settings.ENVIRONMENT == EnvironmentOption.STAGING:
        _configure_staging_logging(settings)
    elif settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        _configure_production_logging(settings)
    else:
        _configure_development_logging(settings)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL_INT)

    if settings.LOG_CORRELATION_ID:
        add_correlation_id_filter()

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        _configure_noisy_loggers()


def _configure_development_logging(settings) -> None:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.DEBUG if settings.LOG_DEVELOPMENT_VERBOSE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="detailed", level=console_level, use_colors=True))

    if settings.LOG_FILE_ENABLED:
        handlers.append(
            create_file_handler(
                filepath=settings.LOG_FILE_PATH,
                format_type="structured",
                level=logging.DEBUG,
                max_bytes=settings.LOG_FILE_MAX_SIZE,
                backup_count=settings.LOG_FILE_BACKUP_COUNT,
            )
        )

    _attach(handlers)


def _configure_staging_logging(settings) -> None:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(create_console_handler(format_type=settings.LOG_FORMAT, level=settings.LOG_LEVEL_INT, use_colors=False))

    if settings.LOG_FILE_ENABLED:
        handlers.append(
            create_file_handler(
                filepath=settings.LOG_FILE_PATH,
                format_type="structured",
                level=logging.DEBUG,
                max_bytes=settings.LOG_FILE_MAX_SIZE,
                backup_count=settings.LOG_FILE_BACKUP_COUNT,
            )
        )

    _attach(handlers)


def _configure_production_logging(settings) -> None:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.WARNING if settings.LOG_PRODUCTION_OPTIMIZE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="json", level=console_level, use_colors=False))

    _attach(handlers)


def _attach(handlers: list[logging.Handler]) -> None:
    root_logger = logging.getLogger()
    for handler in handlers:
        root_logger.addHandler(handler)


def _configure_noisy_loggers() -> None:
    """Quiet chatty third-party loggers in production."""
    noisy_loggers = {
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "aiosqlite": logging.WARNING,
        "asyncpg": logging.WARNING,
        "sqlalchemy.engine": logging.WARNING,
        "sqlalchemy.pool": logging.WARNING,
        "sentence_transformers": logging.WARNING,
        "urllib3.connectionpool": logging.WARNING,
    }

    for logger_name, level in noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


def configure_testing_logging() -> None:
    """Configure minimal logging for test runs.

    Can be called from fixtures to override the normal configuration.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(create_null_handler())
    root_logger.setLevel(logging.ERROR)

    for logger_name in ("sqlalchemy.engine", "aiosqlite", "httpx"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)


def add_correlation_id_filter() -> None:
    """Attach the correlation id filter to every root handler."""
    correlation_filter = CorrelationIdFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(correlation_filter)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that stamps records with the current correlation id.

    The id is set per indexing run or per query, so all records produced while
    that operation is in flight share it.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, "correlation_id", get_correlation_id() or "no-correlation")
        return True


correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id")


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """Set the correlation id for the current context.

    Args:
        correlation_id: Identifier of the run or query being processed

    Returns:
        Token that can be passed to ``correlation_id_var.reset``
    """
    return correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    try:
        return correlation_id_var.get()
    except LookupError:
        return None


def generate_correlation_id() -> str:
    """Generate a new UUID-based correlation ID."""
    return str(uuid.uuid4())


def reset_correlation_id(token: contextvars.Token) -> None:
    """Restore the correlation id that was active before ``set_correlation_id``."""
    correlation_id_var.reset(token)
