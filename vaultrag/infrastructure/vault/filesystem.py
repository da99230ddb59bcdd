"""Vault backed by a directory on the local file system."""

import asyncio
import os
from pathlib import Path, PurePosixPath
from typing import List

from ...modules.common.exceptions import ResourceNotFoundError, ValidationError
from .base import Vault, VaultFile

MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})


class FileSystemVault(Vault):
    """Markdown files under a root directory.

    Hidden files and directories (names starting with ``.``) are skipped, which
    keeps editor metadata such as ``.obsidian/`` out of the index. Blocking
    file-system calls run in a worker thread.
    """

    def __init__(self, root: str | os.PathLike[str], encoding: str = "utf-8"):
        self.root = Path(root).resolve()
        self.encoding = encoding

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValidationError(f"Path must be relative to the vault root: {path}")
        return self.root.joinpath(*relative.parts)

    def _to_vault_file(self, relative: str, stat_result: os.stat_result) -> VaultFile:
        return VaultFile(path=relative, mtime=stat_result.st_mtime_ns // 1_000_000, size=stat_result.st_size)

    def _scan(self) -> List[VaultFile]:
        files = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
            for filename in filenames:
                if filename.startswith(".") or Path(filename).suffix.lower() not in MARKDOWN_SUFFIXES:
                    continue
                absolute = Path(dirpath) / filename
                relative = absolute.relative_to(self.root).as_posix()
                files.append(self._to_vault_file(relative, absolute.stat()))
        return sorted(files, key=lambda file: file.path)

    async def list_markdown_files(self) -> List[VaultFile]:
        return await asyncio.to_thread(self._scan)

    async def read(self, path: str) -> str:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_text, encoding=self.encoding, errors="replace")
        except FileNotFoundError as e:
            raise ResourceNotFoundError(f"Vault file not found: {path}") from e

    async def stat(self, path: str) -> VaultFile:
        target = self._resolve(path)
        try:
            stat_result = await asyncio.to_thread(target.stat)
        except FileNotFoundError as e:
            raise ResourceNotFoundError(f"Vault file not found: {path}") from e
        return self._to_vault_file(path, stat_result)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).is_file)
