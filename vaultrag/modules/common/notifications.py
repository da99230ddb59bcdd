"""User-facing notices raised by indexing runs."""

from abc import ABC, abstractmethod

from .utils.logger import get_logger

logger = get_logger(__name__)


class Notifier(ABC):
    """Sink for messages that the host should surface to the user."""

    @abstractmethod
    def notify(self, message: str) -> None:
        """Show a transient, non-blocking notice."""
        pass

    @abstractmethod
    def request_configuration(self, message: str) -> None:
        """Ask the user to repair the embedding provider configuration."""
        pass


class LoggingNotifier(Notifier):
    """Notifier that writes notices to the application log.

    Used when no interactive host is attached, e.g. behind the HTTP API.
    """

    def notify(self, message: str) -> None:
        logger.warning(f"Notice: {message}")

    def request_configuration(self, message: str) -> None:
        logger.error(f"Embedding configuration required: {message}")
