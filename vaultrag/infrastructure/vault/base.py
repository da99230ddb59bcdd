"""Vault capability: enumerate, stat and read markdown documents."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class VaultFile:
    """A markdown document in the vault.

    Attributes:
        path: Vault-relative POSIX path, e.g. ``notes/today.md``
        mtime: Last-modified time in integer milliseconds
        size: Size in bytes
    """

    path: str
    mtime: int
    size: int = 0


class Vault(ABC):
    """Read-only view of the documents being indexed."""

    @abstractmethod
    async def list_markdown_files(self) -> List[VaultFile]:
        """Return every markdown document, sorted by path."""
        pass

    @abstractmethod
    async def read(self, path: str) -> str:
        """Return the current text content of ``path``."""
        pass

    @abstractmethod
    async def stat(self, path: str) -> VaultFile:
        """Return current metadata for ``path``.

        Raises:
            ResourceNotFoundError: If the document does not exist.
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass
