"""Corpus-driven writing style learning, retrieval and validation."""

from .config import Config, create_default_config, load_config
from .errors import (
    ArtifactError,
    ConfigError,
    DocumentReadError,
    EmbeddingCancelledError,
    EmbeddingError,
    EmptyDocumentError,
    InsufficientExemplarsError,
    ModelMismatchError,
    PreconditionError,
    SkippableError,
    StyleSystemError,
)
from .lexicon import Lexicon, load_lexicon
from .pipeline import (
    analyze,
    codify,
    configure_logging,
    embed,
    ingest,
    open_store,
    search,
    validate,
)
from .storage import ArtifactStore

__version__ = "0.1.0"

__all__ = [
    # Operations
    "ingest",
    "analyze",
    "embed",
    "search",
    "codify",
    "validate",
    # Configuration
    "Config",
    "load_config",
    "create_default_config",
    "configure_logging",
    "open_store",
    "Lexicon",
    "load_lexicon",
    "ArtifactStore",
    # Errors
    "StyleSystemError",
    "SkippableError",
    "EmptyDocumentError",
    "DocumentReadError",
    "EmbeddingError",
    "PreconditionError",
    "InsufficientExemplarsError",
    "ModelMismatchError",
    "EmbeddingCancelledError",
    "ArtifactError",
    "ConfigError",
]
