"""Embedding providers.

A provider turns a batch of texts into vectors. Its model identity and
dimensionality are recorded in the vector index so that an index is never
queried with vectors from a different model.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Type

import requests

from ..config import EmbeddingConfig
from ..errors import ConfigError, EmbeddingError
from ..utils.logging import get_logger

logger = get_logger(__name__)

_PROVIDERS: Dict[str, Type["EmbeddingProvider"]] = {}


def register_provider(name: str) -> Callable:
    """Class decorator registering an embedding provider under a name."""
    def decorator(cls: Type["EmbeddingProvider"]) -> Type["EmbeddingProvider"]:
        _PROVIDERS[name] = cls
        return cls
    return decorator


def available_providers() -> List[str]:
    return sorted(_PROVIDERS)


def create_provider(config: Optional[EmbeddingConfig] = None) -> "EmbeddingProvider":
    """Create the provider named in the embedding config.

    Raises:
        ConfigError: If no provider is registered under that name.
    """
    config = config or EmbeddingConfig()
    if config.provider not in _PROVIDERS:
        raise ConfigError(
            f"Unknown embedding provider: {config.provider}. "
            f"Available: {', '.join(available_providers())}"
        )
    return _PROVIDERS[config.provider](config)


class EmbeddingProvider(ABC):
    """Base class for embedding providers."""

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        self.config = config or EmbeddingConfig()

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identity recorded in the index."""
        pass

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Length of every vector this provider returns."""
        pass

    @abstractmethod
    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts, one vector per text, in input order.

        Raises:
            EmbeddingError: If the batch cannot be embedded.
        """
        pass

    def embed(self, text: str) -> List[float]:
        """Embed a single text."""
        return self.embed_batch([text])[0]


@register_provider("sentence-transformers")
class SentenceTransformerProvider(EmbeddingProvider):
    """Local embeddings with sentence-transformers.

    The model is loaded on first use and produces normalized vectors.
    """

    DEFAULT_MODEL = "all-MiniLM-L6-v2"
    KNOWN_DIMENSIONS = {
        "all-MiniLM-L6-v2": 384,
        "all-MiniLM-L12-v2": 384,
        "all-mpnet-base-v2": 768,
    }

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        super().__init__(config)
        self._model_name = self.config.model or self.DEFAULT_MODEL
        self._model = None

    @property
    def model(self) -> str:
        return self._model_name

    @property
    def encoder(self):
        """Lazy-load the sentence transformer."""
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError:
                raise ImportError(
                    "sentence-transformers required. "
                    "Install with: pip install sentence-transformers"
                )
            self._model = SentenceTransformer(self._model_name)
            logger.info(f"Loaded sentence transformer: {self._model_name}")
        return self._model

    @property
    def dimensions(self) -> int:
        if self._model_name in self.KNOWN_DIMENSIONS and self._model is None:
            return self.KNOWN_DIMENSIONS[self._model_name]
        return int(self.encoder.get_sentence_embedding_dimension())

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        try:
            vectors = self.encoder.encode(
                list(texts),
                batch_size=len(texts),
                normalize_embeddings=True,
                show_progress_bar=False,
            )
        except ImportError:
            raise
        except Exception as e:
            raise EmbeddingError(f"sentence-transformers failed: {e}")
        return [v.tolist() for v in vectors]


@register_provider("ollama")
class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embeddings from a local Ollama instance over HTTP."""

    DEFAULT_MODEL = "nomic-embed-text"
    DEFAULT_URL = "http://localhost:11434"
    KNOWN_DIMENSIONS = {
        "nomic-embed-text": 768,
        "mxbai-embed-large": 1024,
        "all-minilm": 384,
    }

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        super().__init__(config)
        self._model_name = self.config.model or self.DEFAULT_MODEL
        self.base_url = self.config.base_url.rstrip("/") or self.DEFAULT_URL
        self._dimensions = self.KNOWN_DIMENSIONS.get(self._model_name)

    @property
    def model(self) -> str:
        return self._model_name

    @property
    def dimensions(self) -> int:
        if self._dimensions is None:
            # Unknown model: measure once
            self._dimensions = len(self.embed("dimensions"))
        return self._dimensions

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        url = f"{self.base_url}/api/embed"
        payload = {"model": self._model_name, "input": list(texts)}

        try:
            response = requests.post(url, json=payload, timeout=self.config.timeout)
        except requests.exceptions.Timeout:
            raise EmbeddingError(f"Ollama request timed out after {self.config.timeout}s")
        except requests.exceptions.ConnectionError as e:
            raise EmbeddingError(f"Ollama connection error: {e}. Is Ollama running?")
        except requests.exceptions.RequestException as e:
            raise EmbeddingError(f"Ollama request error: {e}")

        if response.status_code != 200:
            error_msg = f"Ollama API error: {response.status_code}"
            try:
                error_data = response.json()
                if "error" in error_data:
                    error_msg = f"{error_msg} - {error_data['error']}"
            except ValueError:
                error_msg = f"{error_msg} - {response.text[:200]}"
            raise EmbeddingError(error_msg)

        try:
            embeddings = response.json().get("embeddings", [])
        except (ValueError, AttributeError) as e:
            raise EmbeddingError(f"Ollama returned an unreadable response: {e}")
        if not isinstance(embeddings, list) or not all(isinstance(v, list) for v in embeddings):
            raise EmbeddingError("Ollama response has no embedding vectors")
        if len(embeddings) != len(texts):
            raise EmbeddingError(
                f"Ollama returned {len(embeddings)} embeddings for {len(texts)} texts"
            )
        return embeddings
