"""Vault access for the indexer."""

from .base import Vault, VaultFile
from .filesystem import FileSystemVault

__all__ = ["FileSystemVault", "Vault", "VaultFile"]
