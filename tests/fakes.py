"""In-memory collaborators shared by the test suite."""

import zlib
from typing import Callable, Dict, List, Optional, Tuple

from vaultrag.infrastructure.embedding.base import EmbeddingModel, EmbeddingModelIdentity
from vaultrag.infrastructure.vault.base import Vault, VaultFile
from vaultrag.modules.common.exceptions import ResourceNotFoundError
from vaultrag.modules.common.notifications import Notifier
from vaultrag.modules.vector.schemas import ChunkMetadata, InsertVector

FailurePolicy = Callable[[str], Optional[Exception]]


class FakeEmbeddingModel(EmbeddingModel):
    """Deterministic bag-of-words embedding model.

    Every word is hashed into one of ``dimension`` buckets, so texts that
    share words are similar and identical texts get identical vectors.
    """

    def __init__(self, dimension: int = 64, model_id: str = "fake-model", batch: bool = True):
        self._identity = EmbeddingModelIdentity(provider="fake", model_id=model_id, dimension=dimension)
        self._batch = batch
        self.fail_when: Optional[FailurePolicy] = None
        self.single_calls: List[str] = []
        self.batch_calls: List[List[str]] = []

    @property
    def identity(self) -> EmbeddingModelIdentity:
        return self._identity

    @property
    def supports_batch(self) -> bool:
        return self._batch

    def vector_for(self, text: str) -> List[float]:
        vector = [0.0] * self.dimension
        for word in text.lower().split():
            vector[zlib.crc32(word.encode()) % self.dimension] += 1.0
        if not any(vector):
            vector[0] = 1.0
        return vector

    def _check(self, text: str) -> None:
        if self.fail_when is not None:
            error = self.fail_when(text)
            if error is not None:
                raise error

    async def get_embedding(self, text: str) -> List[float]:
        self.single_calls.append(text)
        self._check(text)
        return self.vector_for(text)

    async def get_batch_embeddings(self, texts: List[str]) -> List[List[float]]:
        if not self._batch:
            return await super().get_batch_embeddings(texts)
        self.batch_calls.append(list(texts))
        for text in texts:
            self._check(text)
        return [self.vector_for(text) for text in texts]


class InMemoryVault(Vault):
    """Vault whose documents live in a dict of ``path -> (content, mtime)``."""

    def __init__(self) -> None:
        self.files: Dict[str, Tuple[str, int]] = {}
        self.unreadable: set[str] = set()

    def write(self, path: str, content: str, mtime: int = 1_000) -> None:
        self.files[path] = (content, mtime)

    def remove(self, path: str) -> None:
        self.files.pop(path, None)

    async def list_markdown_files(self) -> List[VaultFile]:
        return [
            VaultFile(path=path, mtime=mtime, size=len(content))
            for path, (content, mtime) in sorted(self.files.items())
        ]

    async def read(self, path: str) -> str:
        if path in self.unreadable:
            raise OSError(f"Permission denied: {path}")
        if path not in self.files:
            raise ResourceNotFoundError(f"Vault file not found: {path}")
        return self.files[path][0]

    async def stat(self, path: str) -> VaultFile:
        if path not in self.files:
            raise ResourceNotFoundError(f"Vault file not found: {path}")
        content, mtime = self.files[path]
        return VaultFile(path=path, mtime=mtime, size=len(content))

    async def exists(self, path: str) -> bool:
        return path in self.files


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.notices: List[str] = []
        self.configuration_requests: List[str] = []

    def notify(self, message: str) -> None:
        self.notices.append(message)

    def request_configuration(self, message: str) -> None:
        self.configuration_requests.append(message)


def make_chunk(path: str, content: str, start_line: int = 1, end_line: int = 1, mtime: int = 1_000) -> InsertVector:
    """An unembedded chunk record."""
    return InsertVector(
        path=path,
        mtime=mtime,
        content=content,
        metadata=ChunkMetadata(start_line=start_line, end_line=end_line),
    )


def make_record(model: FakeEmbeddingModel, path: str, content: str, **kwargs) -> InsertVector:
    """A chunk record embedded with ``model``."""
    return make_chunk(path, content, **kwargs).model_copy(update={"embedding": model.vector_for(content)})


def numbered_lines(name: str, count: int) -> str:
    """Document body whose lines each become one chunk at ``chunk_size=20``."""
    return "\n".join(f"line {i} of {name}" for i in range(count))
