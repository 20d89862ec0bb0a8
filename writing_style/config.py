"""Configuration management for the writing style pipeline."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError
from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class IngestConfig:
    """Configuration for corpus ingestion."""
    min_words: int = 100
    max_words: int = 10000
    extensions: List[str] = field(default_factory=lambda: [".md", ".txt"])


@dataclass
class AnalysisConfig:
    """Configuration for style profile analysis."""
    top_frequent_words: int = 100
    distinctive_threshold: float = 0.001
    distinctive_limit: int = 50
    avoided_max_count: int = 3
    transition_limit: int = 20
    voice_detector: str = "regex"  # regex, spacy

    def validate_voice_detector(self) -> bool:
        """Check if voice detector setting is valid."""
        return self.voice_detector in {"regex", "spacy"}


@dataclass
class EmbeddingConfig:
    """Configuration for chunking and embedding."""
    provider: str = "sentence-transformers"
    model: str = ""  # empty: provider default
    base_url: str = ""
    timeout: int = 60
    batch_size: int = 32
    max_chunk_chars: int = 512
    fast_mode: bool = False
    workers: int = 1
    show_progress: bool = False


@dataclass
class RetrievalConfig:
    """Configuration for semantic search."""
    top_k: int = 10
    threshold: float = 0.3
    per_doc_cap: int = 2
    backend: str = "linear"  # linear, chroma


@dataclass
class CodifyConfig:
    """Configuration for rule codification."""
    min_exemplars: int = 5
    examples_per_rule: int = 3


@dataclass
class ValidationConfig:
    """Configuration for validation scoring."""
    pass_score: int = 70
    max_major_violations: int = 2
    major_penalty: int = 10
    minor_penalty: int = 3
    min_sentences_for_transitions: int = 8


@dataclass
class Config:
    """Main configuration container."""
    ingest: IngestConfig = field(default_factory=IngestConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    codify: CodifyConfig = field(default_factory=CodifyConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    lexicon_path: Optional[str] = None
    storage_root: str = "writing-system"
    log_level: str = "INFO"
    log_json: bool = False


def _resolve_env_vars(value: Any) -> Any:
    """Resolve environment variables in string values."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_var = value[2:-1]
        resolved = os.environ.get(env_var, "")
        if not resolved:
            logger.warning(f"Environment variable {env_var} not set")
        return resolved
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(v) for v in value]
    return value


def _parse_embedding_config(data: Dict) -> EmbeddingConfig:
    """Parse embedding configuration section."""
    config = EmbeddingConfig(
        provider=data.get("provider", "sentence-transformers"),
        model=data.get("model", ""),
        base_url=data.get("base_url", ""),
        timeout=data.get("timeout", 60),
        batch_size=data.get("batch_size", 32),
        max_chunk_chars=data.get("max_chunk_chars", 512),
        fast_mode=data.get("fast_mode", False),
        workers=data.get("workers", 1),
        show_progress=data.get("show_progress", False),
    )
    if config.batch_size < 1:
        raise ConfigError(f"embedding.batch_size must be >= 1, got {config.batch_size}")
    if config.max_chunk_chars < 1:
        raise ConfigError(
            f"embedding.max_chunk_chars must be >= 1, got {config.max_chunk_chars}"
        )
    if config.workers < 1:
        raise ConfigError(f"embedding.workers must be >= 1, got {config.workers}")
    return config


def _parse_retrieval_config(data: Dict) -> RetrievalConfig:
    """Parse retrieval configuration section."""
    config = RetrievalConfig(
        top_k=data.get("top_k", 10),
        threshold=data.get("threshold", 0.3),
        per_doc_cap=data.get("per_doc_cap", 2),
        backend=data.get("backend", "linear"),
    )
    if config.backend not in {"linear", "chroma"}:
        raise ConfigError(f"Unknown retrieval backend: {config.backend}")
    if not -1.0 <= config.threshold <= 1.0:
        raise ConfigError(f"retrieval.threshold must be in [-1, 1], got {config.threshold}")
    return config


def load_config(config_path: str = "config.json") -> Config:
    """Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Parsed configuration object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If config file is invalid.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}")

    data = _resolve_env_vars(data)
    config = Config()

    if "ingest" in data:
        config.ingest = IngestConfig(
            min_words=data["ingest"].get("min_words", 100),
            max_words=data["ingest"].get("max_words", 10000),
            extensions=data["ingest"].get("extensions", [".md", ".txt"]),
        )

    if "analysis" in data:
        config.analysis = AnalysisConfig(
            top_frequent_words=data["analysis"].get("top_frequent_words", 100),
            distinctive_threshold=data["analysis"].get("distinctive_threshold", 0.001),
            distinctive_limit=data["analysis"].get("distinctive_limit", 50),
            avoided_max_count=data["analysis"].get("avoided_max_count", 3),
            transition_limit=data["analysis"].get("transition_limit", 20),
            voice_detector=data["analysis"].get("voice_detector", "regex"),
        )
        if not config.analysis.validate_voice_detector():
            logger.warning(
                f"Invalid voice detector '{config.analysis.voice_detector}', using 'regex'"
            )
            config.analysis.voice_detector = "regex"

    if "embedding" in data:
        config.embedding = _parse_embedding_config(data["embedding"])

    if "retrieval" in data:
        config.retrieval = _parse_retrieval_config(data["retrieval"])

    if "codify" in data:
        config.codify = CodifyConfig(
            min_exemplars=data["codify"].get("min_exemplars", 5),
            examples_per_rule=data["codify"].get("examples_per_rule", 3),
        )

    if "validation" in data:
        config.validation = ValidationConfig(
            pass_score=data["validation"].get("pass_score", 70),
            max_major_violations=data["validation"].get("max_major_violations", 2),
            major_penalty=data["validation"].get("major_penalty", 10),
            minor_penalty=data["validation"].get("minor_penalty", 3),
            min_sentences_for_transitions=data["validation"].get(
                "min_sentences_for_transitions", 8
            ),
        )

    config.lexicon_path = data.get("lexicon_path")
    config.storage_root = data.get("storage_root", "writing-system")
    config.log_level = data.get("log_level", "INFO")
    config.log_json = data.get("log_json", False)

    logger.info(f"Loaded configuration from {config_path}")
    return config


def create_default_config() -> Dict:
    """Create a default configuration dictionary."""
    return {
        "ingest": {
            "min_words": 100,
            "max_words": 10000,
            "extensions": [".md", ".txt"]
        },
        "analysis": {
            "top_frequent_words": 100,
            "distinctive_threshold": 0.001,
            "avoided_max_count": 3,
            "voice_detector": "regex"
        },
        "embedding": {
            "provider": "sentence-transformers",
            "model": "all-MiniLM-L6-v2",
            "batch_size": 32,
            "max_chunk_chars": 512,
            "fast_mode": False,
            "workers": 1
        },
        "retrieval": {
            "top_k": 10,
            "threshold": 0.3,
            "per_doc_cap": 2,
            "backend": "linear"
        },
        "codify": {
            "min_exemplars": 5,
            "examples_per_rule": 3
        },
        "validation": {
            "pass_score": 70,
            "max_major_violations": 2,
            "major_penalty": 10,
            "minor_penalty": 3
        },
        "storage_root": "writing-system",
        "log_level": "INFO",
        "log_json": False
    }
