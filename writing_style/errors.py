"""Exception hierarchy for the writing style pipeline.

Three families:
- Skippable defects: logged and excluded from output, never abort a batch.
- Preconditions: raised immediately, the operation refuses to proceed.
- Artifact/config problems: raised when persisted state or settings are unusable.
"""


class StyleSystemError(Exception):
    """Base class for all pipeline errors."""
    pass


class SkippableError(StyleSystemError):
    """A per-item defect that callers record and skip."""
    pass


class EmptyDocumentError(SkippableError):
    """Raised when a source document is empty or whitespace-only."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Empty document: {source}")


class DocumentReadError(SkippableError):
    """Raised when a source document cannot be read or converted."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to read {source}: {reason}")


class EmbeddingError(SkippableError):
    """Raised by providers when an embedding call fails."""
    pass


class PreconditionError(StyleSystemError):
    """An input contract violation; continuing would give misleading results."""
    pass


class InsufficientExemplarsError(PreconditionError):
    """Raised when codification gets fewer exemplars than required."""

    def __init__(self, found: int, required: int):
        self.found = found
        self.required = required
        super().__init__(
            f"Need at least {required} exemplar documents, got {found}"
        )


class ModelMismatchError(PreconditionError):
    """Raised when a vector index is used with a different embedding model."""

    def __init__(self, index_model: str, index_dims: int, other_model: str, other_dims: int):
        self.index_model = index_model
        self.other_model = other_model
        super().__init__(
            f"Index built with {index_model} ({index_dims} dims) "
            f"cannot be queried with {other_model} ({other_dims} dims)"
        )


class EmbeddingCancelledError(StyleSystemError):
    """Raised when an embedding run is cancelled before completion."""

    def __init__(self, completed: int, total: int):
        self.completed = completed
        self.total = total
        super().__init__(f"Embedding cancelled after {completed}/{total} batches")


class ArtifactError(StyleSystemError):
    """Raised when a persisted artifact is missing or corrupt."""
    pass


class ConfigError(StyleSystemError, ValueError):
    """Raised for invalid configuration files or values."""
    pass
