"""Immutable vector index over document chunks."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ArtifactError, ModelMismatchError

INDEX_VERSION = "1.0"
EXCERPT_CHARS = 200


@dataclass(frozen=True)
class IndexEntry:
    """One embedded chunk. ``text`` is a stored excerpt, not the full chunk."""
    doc_id: str
    chunk_index: int
    text: str
    title: Optional[str]
    source: str
    embedding: Tuple[float, ...]

    def to_dict(self) -> Dict:
        return {
            "docId": self.doc_id,
            "chunkIndex": self.chunk_index,
            "text": self.text,
            "title": self.title,
            "source": self.source,
            "embedding": list(self.embedding),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "IndexEntry":
        return cls(
            doc_id=data["docId"],
            chunk_index=data["chunkIndex"],
            text=data.get("text", ""),
            title=data.get("title"),
            source=data.get("source", ""),
            embedding=tuple(data["embedding"]),
        )


@dataclass(frozen=True)
class VectorIndex:
    """Embeddings of a corpus snapshot, tied to one model.

    Every entry's embedding has exactly ``dimensions`` components; this is
    checked on construction.
    """
    model: str
    dimensions: int
    entries: Tuple[IndexEntry, ...] = field(default_factory=tuple)
    document_count: int = 0
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )
    version: str = INDEX_VERSION

    def __post_init__(self):
        if self.dimensions < 1:
            raise ArtifactError(f"Invalid index dimensions: {self.dimensions}")
        for entry in self.entries:
            if len(entry.embedding) != self.dimensions:
                raise ArtifactError(
                    f"Entry {entry.doc_id}#{entry.chunk_index} has "
                    f"{len(entry.embedding)} dims, index has {self.dimensions}"
                )

    @property
    def chunk_count(self) -> int:
        return len(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def matrix(self) -> np.ndarray:
        """Embeddings as an (entries, dimensions) float array."""
        if not self.entries:
            return np.zeros((0, self.dimensions), dtype=np.float32)
        return np.array([e.embedding for e in self.entries], dtype=np.float32)

    def is_compatible(self, model: str, dimensions: int) -> bool:
        return self.model == model and self.dimensions == dimensions

    def assert_compatible(self, model: str, dimensions: int) -> None:
        """Refuse to mix vectors from a different model.

        Raises:
            ModelMismatchError: If model or dimensionality differ.
        """
        if not self.is_compatible(model, dimensions):
            raise ModelMismatchError(self.model, self.dimensions, model, dimensions)

    def to_dict(self) -> Dict:
        """Convert to dictionary for storage."""
        return {
            "version": self.version,
            "model": self.model,
            "dimensions": self.dimensions,
            "createdAt": self.created_at,
            "documentCount": self.document_count,
            "chunkCount": self.chunk_count,
            "embeddings": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "VectorIndex":
        """Create from dictionary.

        Raises:
            ArtifactError: If required fields are missing or vectors are malformed.
        """
        try:
            return cls(
                version=data.get("version", INDEX_VERSION),
                model=data["model"],
                dimensions=int(data["dimensions"]),
                created_at=data.get("createdAt", ""),
                document_count=data.get("documentCount", 0),
                entries=tuple(IndexEntry.from_dict(e) for e in data.get("embeddings", [])),
            )
        except (KeyError, TypeError) as e:
            raise ArtifactError(f"Malformed vector index: {e}")


def build_entries(chunks: Sequence, vectors: Iterable[Sequence[float]]) -> List[IndexEntry]:
    """Pair chunks with their vectors, truncating stored text to an excerpt."""
    return [
        IndexEntry(
            doc_id=chunk.doc_id,
            chunk_index=chunk.chunk_index,
            text=chunk.text[:EXCERPT_CHARS],
            title=chunk.title,
            source=chunk.source,
            embedding=tuple(float(x) for x in vector),
        )
        for chunk, vector in zip(chunks, vectors)
    ]
