"""Semantic retrieval over a VectorIndex.

The default backend is an exact linear scan (cosine similarity over the
whole embedding matrix). ChromaSearchBackend is an approximate alternative
behind the same contract.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..config import RetrievalConfig
from ..utils.logging import get_logger
from .chunker import SUMMARY_CHUNK_INDEX
from .embeddings import EmbeddingProvider
from .vector_index import IndexEntry, VectorIndex

logger = get_logger(__name__)

# Chroma results are over-fetched by this factor before cap and threshold
CHROMA_OVERFETCH = 5

# Lazy-loaded module
_chromadb = None


def get_chromadb():
    """Lazy-load ChromaDB."""
    global _chromadb
    if _chromadb is None:
        try:
            import chromadb
            _chromadb = chromadb
        except ImportError:
            raise ImportError("chromadb required. Install with: pip install chromadb")
    return _chromadb


@dataclass
class RankedChunk:
    """A search hit."""
    doc_id: str
    chunk_index: int
    title: Optional[str]
    text: str
    source: str
    score: float
    rank: int = 0

    @property
    def is_summary(self) -> bool:
        return self.chunk_index == SUMMARY_CHUNK_INDEX

    @classmethod
    def from_entry(cls, entry: IndexEntry, score: float) -> "RankedChunk":
        return cls(
            doc_id=entry.doc_id,
            chunk_index=entry.chunk_index,
            title=entry.title,
            text=entry.text,
            source=entry.source,
            score=float(score),
        )


def cosine_similarities(matrix: np.ndarray, query: Sequence[float]) -> np.ndarray:
    """Cosine similarity of each row against the query.

    Rows or queries with zero magnitude score 0.0.
    """
    q = np.asarray(query, dtype=np.float32)
    if matrix.shape[0] == 0:
        return np.zeros(0, dtype=np.float32)

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    scores = np.zeros_like(dots)
    nonzero = norms > 0
    scores[nonzero] = dots[nonzero] / norms[nonzero]
    return scores


def apply_document_cap(results: Sequence[RankedChunk], per_doc_cap: int) -> List[RankedChunk]:
    """Keep at most ``per_doc_cap`` hits per document, preserving order."""
    counts = {}
    capped = []
    for result in results:
        seen = counts.get(result.doc_id, 0)
        if seen < per_doc_cap:
            capped.append(result)
            counts[result.doc_id] = seen + 1
    return capped


def rank_results(
    candidates: Sequence[RankedChunk],
    top_k: int,
    threshold: float,
    per_doc_cap: int
) -> List[RankedChunk]:
    """Filter by threshold, sort, cap per document and assign 1-based ranks."""
    passing = [c for c in candidates if c.score >= threshold]
    # sorted() is stable with reverse=True, so equal scores keep index order
    ordered = sorted(passing, key=lambda c: c.score, reverse=True)
    top = apply_document_cap(ordered, per_doc_cap)[:top_k]
    for rank, result in enumerate(top, start=1):
        result.rank = rank
    return top


class LinearSearchBackend:
    """Exact cosine search over the full embedding matrix."""

    name = "linear"

    def __init__(self, index: VectorIndex):
        self.index = index
        self._matrix = index.matrix()

    def candidates(self, query_vector: Sequence[float], top_k: int, per_doc_cap: int) -> List[RankedChunk]:
        scores = cosine_similarities(self._matrix, query_vector)
        return [
            RankedChunk.from_entry(entry, score)
            for entry, score in zip(self.index.entries, scores)
        ]


class ChromaSearchBackend:
    """Approximate nearest-neighbour search with an in-memory ChromaDB collection.

    Cosine HNSW space; results are over-fetched so the threshold and
    per-document cap are applied the same way as the linear backend. Every
    backend gets its own collection so two indexes searched in one process
    never share vectors.
    """

    name = "chroma"

    def __init__(self, index: VectorIndex, collection_prefix: str = "style_chunks"):
        self.index = index
        self.collection_name = f"{collection_prefix}-{uuid.uuid4().hex[:12]}"
        self._collection = None

    @property
    def collection(self):
        """Build the collection on first use."""
        if self._collection is None:
            chromadb = get_chromadb()
            client = chromadb.Client()
            self._collection = client.create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": "cosine"},
            )
            if self.index.entries:
                self._collection.add(
                    ids=[str(i) for i in range(len(self.index.entries))],
                    embeddings=[list(e.embedding) for e in self.index.entries],
                )
            logger.info(f"Collection '{self.collection_name}' has {self._collection.count()} chunks")
        return self._collection

    def candidates(self, query_vector: Sequence[float], top_k: int, per_doc_cap: int) -> List[RankedChunk]:
        if not self.index.entries:
            return []

        n_results = min(len(self.index.entries), top_k * per_doc_cap * CHROMA_OVERFETCH)
        results = self.collection.query(
            query_embeddings=[list(query_vector)],
            n_results=n_results,
            include=["distances"],
        )

        candidates = []
        for chunk_id, distance in zip(results["ids"][0], results["distances"][0]):
            entry = self.index.entries[int(chunk_id)]
            # Cosine distance -> similarity
            candidates.append(RankedChunk.from_entry(entry, 1.0 - distance))
        return candidates


BACKENDS = {
    LinearSearchBackend.name: LinearSearchBackend,
    ChromaSearchBackend.name: ChromaSearchBackend,
}


class SemanticRetriever:
    """Answers natural-language queries against a vector index."""

    def __init__(
        self,
        index: VectorIndex,
        provider: EmbeddingProvider,
        config: Optional[RetrievalConfig] = None
    ):
        """Initialize the retriever.

        Args:
            index: Vector index to search.
            provider: Provider for query embeddings; must match the index model.
            config: Defaults for top_k, threshold, per-document cap and backend.

        Raises:
            ModelMismatchError: If the provider does not match the index.
        """
        index.assert_compatible(provider.model, provider.dimensions)
        self.index = index
        self.provider = provider
        self.config = config or RetrievalConfig()
        self.backend = BACKENDS[self.config.backend](index)

    def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
        per_doc_cap: Optional[int] = None
    ) -> List[RankedChunk]:
        """Rank index entries by similarity to the query.

        Args:
            query: Query text.
            top_k: Maximum results.
            threshold: Minimum cosine similarity.
            per_doc_cap: Maximum results per document.

        Returns:
            RankedChunk list, best first, ranks starting at 1.
        """
        top_k = self.config.top_k if top_k is None else top_k
        threshold = self.config.threshold if threshold is None else threshold
        per_doc_cap = self.config.per_doc_cap if per_doc_cap is None else per_doc_cap

        if not query or not query.strip():
            logger.warning("Empty query")
            return []

        query_vector = self.provider.embed(query)
        candidates = self.backend.candidates(query_vector, top_k, per_doc_cap)
        results = rank_results(candidates, top_k, threshold, per_doc_cap)

        logger.info(
            f"Query matched {len(results)} chunks"
            + (f", best score {results[0].score:.3f}" if results else ""),
            extra_data={"results": len(results), "backend": self.backend.name}
        )
        return results


def search(
    query: str,
    index: VectorIndex,
    provider: EmbeddingProvider,
    top_k: int = 10,
    threshold: float = 0.3,
    per_doc_cap: int = 2
) -> List[RankedChunk]:
    """Linear-scan semantic search.

    Raises:
        ModelMismatchError: If the provider does not match the index.
    """
    retriever = SemanticRetriever(index, provider)
    return retriever.search(query, top_k=top_k, threshold=threshold, per_doc_cap=per_doc_cap)
