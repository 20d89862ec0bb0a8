"""Corpus indexer: chunks documents and embeds them into a VectorIndex.

Embedding runs in fixed-size batches, optionally on a thread pool. A batch
that fails is retried one item at a time; items that still fail get a zero
vector and are reported, so one bad chunk never sinks a whole run.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from tqdm import tqdm

from ..config import EmbeddingConfig
from ..corpus.preprocessor import Document
from ..errors import EmbeddingCancelledError, EmbeddingError
from ..lexicon import DEFAULT_ABBREVIATIONS
from ..utils.logging import get_logger, log_embedding_batch
from .chunker import Chunk, chunk_documents
from .embeddings import EmbeddingProvider
from .vector_index import VectorIndex, build_entries

logger = get_logger(__name__)


@dataclass
class FailedChunk:
    """A chunk stored with a zero vector because embedding failed."""
    doc_id: str
    chunk_index: int
    error: str


@dataclass
class EmbedReport:
    """Outcome of an indexing run."""
    model: str
    chunk_count: int = 0
    batch_count: int = 0
    failed: List[FailedChunk] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def complete(self) -> bool:
        return not self.failed


@dataclass
class _BatchResult:
    start: int
    vectors: List[List[float]]
    failures: List[Tuple[int, str]]


class CorpusIndexer:
    """Builds vector indexes from documents with a given provider."""

    def __init__(
        self,
        config: Optional[EmbeddingConfig] = None,
        abbreviations: Sequence[str] = DEFAULT_ABBREVIATIONS
    ):
        """Initialize the indexer.

        Args:
            config: Chunking, batching and concurrency settings.
            abbreviations: Abbreviations the sentence splitter protects.
        """
        self.config = config or EmbeddingConfig()
        self.abbreviations = list(abbreviations)

    def chunk(self, documents: Sequence[Document]) -> List[Chunk]:
        return chunk_documents(
            documents,
            max_chunk_chars=self.config.max_chunk_chars,
            fast_mode=self.config.fast_mode,
            abbreviations=self.abbreviations,
        )

    def build(
        self,
        documents: Sequence[Document],
        provider: EmbeddingProvider,
        cancel_event: Optional[threading.Event] = None
    ) -> Tuple[VectorIndex, EmbedReport]:
        """Chunk and embed documents.

        Args:
            documents: Documents to index.
            provider: Embedding provider.
            cancel_event: Optional event; once set, remaining batches are skipped.

        Returns:
            Tuple of (VectorIndex, EmbedReport).

        Raises:
            EmbeddingCancelledError: If cancelled before all batches ran.
        """
        started = time.time()
        chunks = self.chunk(documents)
        dimensions = provider.dimensions
        batch_size = self.config.batch_size
        batches = [
            (start, chunks[start:start + batch_size])
            for start in range(0, len(chunks), batch_size)
        ]

        logger.info(
            f"Embedding {len(chunks)} chunks from {len(documents)} documents "
            f"with {provider.model} ({len(batches)} batches)"
        )

        vectors: List[Optional[List[float]]] = [None] * len(chunks)
        report = EmbedReport(model=provider.model, chunk_count=len(chunks))
        completed = 0

        with tqdm(
            total=len(chunks),
            desc="Embedding",
            unit="chunk",
            disable=not self.config.show_progress
        ) as progress:
            for result in self._run_batches(batches, provider, dimensions, cancel_event):
                if result is None:
                    continue
                completed += 1
                vectors[result.start:result.start + len(result.vectors)] = result.vectors
                for offset, error in result.failures:
                    chunk = chunks[offset]
                    report.failed.append(FailedChunk(chunk.doc_id, chunk.chunk_index, error))
                progress.update(len(result.vectors))

        if completed < len(batches):
            logger.warning(f"Embedding cancelled after {completed}/{len(batches)} batches")
            raise EmbeddingCancelledError(completed, len(batches))

        report.batch_count = len(batches)
        report.failed.sort(key=lambda f: (f.doc_id, f.chunk_index))
        report.duration_ms = int((time.time() - started) * 1000)

        index = VectorIndex(
            model=provider.model,
            dimensions=dimensions,
            entries=tuple(build_entries(chunks, vectors)),
            document_count=len(documents),
        )

        if report.failed:
            logger.warning(
                f"{len(report.failed)} chunks stored with zero vectors",
                extra_data={"failed": len(report.failed), "model": provider.model}
            )
        logger.info(
            f"Indexed {index.chunk_count} chunks in {report.duration_ms}ms",
            extra_data={"chunks": index.chunk_count, "documents": len(documents)}
        )
        return index, report

    def _run_batches(self, batches, provider, dimensions, cancel_event):
        """Yield batch results; skipped (cancelled) batches yield None."""
        def run(start: int, batch: List[Chunk]) -> Optional[_BatchResult]:
            if cancel_event is not None and cancel_event.is_set():
                return None
            return self._embed_batch(start, batch, provider, dimensions)

        if self.config.workers <= 1:
            for start, batch in batches:
                yield run(start, batch)
            return

        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = [executor.submit(run, start, batch) for start, batch in batches]
            for future in futures:
                yield future.result()

    def _embed_batch(
        self,
        start: int,
        batch: List[Chunk],
        provider: EmbeddingProvider,
        dimensions: int
    ) -> _BatchResult:
        batch_started = time.time()
        texts = [c.text for c in batch]

        try:
            vectors = provider.embed_batch(texts)
            self._check_vectors(vectors, len(texts), dimensions)
            log_embedding_batch(
                logger, provider.model, start, len(batch),
                int((time.time() - batch_started) * 1000)
            )
            return _BatchResult(start=start, vectors=[list(v) for v in vectors], failures=[])
        except EmbeddingError as e:
            batch_error = str(e)
            logger.debug(f"Batch at {start} failed, retrying items singly: {e}")

        vectors = []
        failures = []
        for offset, text in enumerate(texts):
            try:
                single = provider.embed_batch([text])
                self._check_vectors(single, 1, dimensions)
                vectors.append(list(single[0]))
            except EmbeddingError as e:
                vectors.append([0.0] * dimensions)
                failures.append((start + offset, str(e)))

        log_embedding_batch(
            logger, provider.model, start, len(batch),
            int((time.time() - batch_started) * 1000),
            failed=len(failures),
            error=batch_error,
        )
        return _BatchResult(start=start, vectors=vectors, failures=failures)

    @staticmethod
    def _check_vectors(vectors, expected_count: int, dimensions: int) -> None:
        if len(vectors) != expected_count:
            raise EmbeddingError(f"Expected {expected_count} vectors, got {len(vectors)}")
        for vector in vectors:
            if len(vector) != dimensions:
                raise EmbeddingError(f"Expected {dimensions} dims, got {len(vector)}")
