"""SQLAlchemy models for indexed vault chunks."""

from typing import Any, Dict, List

from sqlalchemy import JSON, BigInteger, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class VaultVector(Base, TimestampMixin):
    """A chunk of a vault document with its embedding.

    Rows are partitioned by ``embedding_model`` (the model identity key), so
    several embedding models can share the table without their vectors ever
    being compared. Rows are never updated; re-indexing deletes and recreates.
    """

    __tablename__ = "vault_vectors"
    __table_args__ = (Index("ix_vault_vectors_model_path", "embedding_model", "path"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    embedding_model: Mapped[str] = mapped_column(String(255))
    path: Mapped[str] = mapped_column(Text)
    mtime: Mapped[int] = mapped_column(BigInteger)
    content: Mapped[str] = mapped_column(Text)
    embedding: Mapped[List[float]] = mapped_column(JSON)
    dimension: Mapped[int] = mapped_column(Integer)
    extra_metadata: Mapped[Dict[str, Any]] = mapped_column(JSON, default_factory=dict)
