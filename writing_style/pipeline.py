"""The six public pipeline operations.

Each operation is a thin composition of the components in the corpus, rag,
codify and validation packages; configuration and lexicon default to the
built-in values.
"""

import threading
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .codify.codifier import RuleCodifier
from .codify.models import StyleSpec
from .config import Config
from .corpus.analyzer import StyleProfileAnalyzer
from .corpus.loader import CorpusLoader, IngestReport
from .corpus.preprocessor import Document, TextPreprocessor
from .corpus.profile import StyleProfile
from .lexicon import Lexicon, load_lexicon
from .rag.corpus_indexer import CorpusIndexer
from .rag.embeddings import EmbeddingProvider
from .rag.retriever import RankedChunk, SemanticRetriever
from .rag.vector_index import VectorIndex
from .storage import ArtifactStore
from .utils.logging import get_logger, set_run_id, setup_logging
from .utils.nlp import get_voice_detector
from .validation.validator import StyleValidator, ValidationResult

logger = get_logger(__name__)


def resolve_lexicon(lexicon: Optional[Lexicon], config: Optional[Config]) -> Lexicon:
    """Explicit lexicon, else the configured lexicon file, else the default."""
    if lexicon is not None:
        return lexicon
    if config is not None and config.lexicon_path:
        return load_lexicon(config.lexicon_path)
    return Lexicon.default()


def voice_detector_for(lexicon: Lexicon, config: Config):
    """Voice detector selected in the analysis config, used by every stage."""
    return get_voice_detector(config.analysis.voice_detector, lexicon.voice)


def configure_logging(config: Optional[Config] = None) -> str:
    """Apply the configured log level and format to the root logger.

    Returns:
        A fresh run id, attached to every log line that follows.
    """
    config = config or Config()
    setup_logging(level=config.log_level, json_format=config.log_json)
    return set_run_id()


def open_store(config: Optional[Config] = None) -> ArtifactStore:
    """Artifact store rooted at the configured storage directory."""
    config = config or Config()
    return ArtifactStore(config.storage_root)


def ingest(
    raw_docs: Iterable[Tuple[str, str]],
    lexicon: Optional[Lexicon] = None,
    config: Optional[Config] = None
) -> IngestReport:
    """Normalize (source, text) pairs into Documents.

    Empty inputs are skipped and reported; they never abort the batch.
    """
    config = config or Config()
    lexicon = resolve_lexicon(lexicon, config)
    loader = CorpusLoader(TextPreprocessor(lexicon.abbreviations), config.ingest)
    return loader.ingest_texts(raw_docs)


def analyze(
    documents: Sequence[Document],
    lexicon: Optional[Lexicon] = None,
    config: Optional[Config] = None
) -> StyleProfile:
    """Compute the StyleProfile of a document set."""
    config = config or Config()
    analyzer = StyleProfileAnalyzer(resolve_lexicon(lexicon, config), config.analysis)
    return analyzer.analyze(documents)


def embed(
    documents: Sequence[Document],
    provider: EmbeddingProvider,
    chunk_budget: int = 512,
    fast_mode: bool = False,
    config: Optional[Config] = None,
    cancel_event: Optional[threading.Event] = None,
    lexicon: Optional[Lexicon] = None
) -> VectorIndex:
    """Chunk and embed documents into a VectorIndex.

    Chunks that fail to embed are stored as zero vectors and logged.

    Raises:
        EmbeddingCancelledError: If ``cancel_event`` is set mid-run.
    """
    config = config or Config()
    lexicon = resolve_lexicon(lexicon, config)
    embedding_config = replace(config.embedding, max_chunk_chars=chunk_budget, fast_mode=fast_mode)

    indexer = CorpusIndexer(embedding_config, lexicon.abbreviations)
    index, report = indexer.build(documents, provider, cancel_event=cancel_event)
    for failed in report.failed:
        logger.warning(f"Zero vector for {failed.doc_id}#{failed.chunk_index}: {failed.error}")
    return index


def search(
    query: str,
    index: VectorIndex,
    provider: EmbeddingProvider,
    top_k: Optional[int] = None,
    threshold: Optional[float] = None,
    per_doc_cap: Optional[int] = None,
    config: Optional[Config] = None
) -> List[RankedChunk]:
    """Rank index chunks by semantic similarity to the query.

    Explicit arguments override the retrieval config (top_k 10, threshold
    0.3 and two chunks per document by default), which also selects the
    search backend.

    Raises:
        ModelMismatchError: If the provider's model differs from the index's.
    """
    config = config or Config()
    retriever = SemanticRetriever(index, provider, config.retrieval)
    return retriever.search(query, top_k=top_k, threshold=threshold, per_doc_cap=per_doc_cap)


def codify(
    profile: StyleProfile,
    exemplars: Sequence[Document],
    lexicon: Optional[Lexicon] = None,
    config: Optional[Config] = None
) -> StyleSpec:
    """Compile a profile and exemplars into a StyleSpec.

    Raises:
        InsufficientExemplarsError: If too few exemplars are given.
    """
    config = config or Config()
    lexicon = resolve_lexicon(lexicon, config)
    codifier = RuleCodifier(lexicon, config.codify, voice_detector_for(lexicon, config))
    return codifier.codify(profile, exemplars)


def validate(
    text: str,
    spec: StyleSpec,
    config: Optional[Config] = None,
    lexicon: Optional[Lexicon] = None
) -> ValidationResult:
    """Check text against a StyleSpec."""
    config = config or Config()
    lexicon = resolve_lexicon(lexicon, config)
    validator = StyleValidator(
        spec, config.validation, lexicon, voice_detector_for(lexicon, config)
    )
    return validator.validate(text)
