"""Corpus loader: reads source files and ingests them as Documents."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..config import IngestConfig
from ..errors import DocumentReadError, SkippableError
from ..utils.logging import get_logger
from .preprocessor import Document, TextPreprocessor

logger = get_logger(__name__)

# suffix -> callable returning plain text for that file
Converter = Callable[[Path], str]


@dataclass
class SkippedItem:
    """A source that was excluded from the corpus."""
    source: str
    reason: str


@dataclass
class DataWarning:
    """A data-quality note about a document that was still ingested."""
    source: str
    message: str


@dataclass
class IngestReport:
    """Result of an ingestion batch."""
    documents: List[Document] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)
    warnings: List[DataWarning] = field(default_factory=list)
    ingested_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )

    @property
    def total_words(self) -> int:
        return sum(d.word_count for d in self.documents)

    @property
    def avg_words_per_doc(self) -> int:
        if not self.documents:
            return 0
        return round(self.total_words / len(self.documents))

    def to_index(self) -> Dict:
        """Corpus index summary for storage."""
        return {
            "totalDocuments": len(self.documents),
            "totalWords": self.total_words,
            "avgWordsPerDoc": self.avg_words_per_doc,
            "ingestedAt": self.ingested_at,
            "documents": [
                {"id": d.id, "source": d.source, "wordCount": d.word_count}
                for d in self.documents
            ],
        }


class CorpusLoader:
    """Loads documents from text or from a directory tree.

    Plain text and markdown are read directly; other formats need a
    converter registered for their suffix.
    """

    def __init__(
        self,
        preprocessor: Optional[TextPreprocessor] = None,
        config: Optional[IngestConfig] = None,
        converters: Optional[Dict[str, Converter]] = None
    ):
        """Initialize corpus loader.

        Args:
            preprocessor: Optional preprocessor instance.
            config: Ingestion thresholds and extensions.
            converters: Optional suffix -> converter mapping (e.g. ".docx").
        """
        self.preprocessor = preprocessor or TextPreprocessor()
        self.config = config or IngestConfig()
        self.converters = {k.lower(): v for k, v in (converters or {}).items()}

    @property
    def supported_extensions(self) -> set:
        return {e.lower() for e in self.config.extensions} | set(self.converters)

    def ingest_texts(self, raw_docs: Iterable[Tuple[str, str]]) -> IngestReport:
        """Ingest (source, text) pairs.

        Empty texts and duplicate content are skipped; out-of-range lengths
        and unparseable prose produce warnings.

        Args:
            raw_docs: Iterable of (source, text) pairs.

        Returns:
            IngestReport with documents, skipped items and warnings.
        """
        report = IngestReport()
        seen_ids = set()

        for source, text in raw_docs:
            try:
                doc = self.preprocessor.process(text, source)
            except SkippableError as e:
                logger.warning(f"Skipping {source}: {e}")
                report.skipped.append(SkippedItem(source=source, reason=str(e)))
                continue

            if doc.id in seen_ids:
                logger.debug(f"Duplicate content skipped: {source} ({doc.id})")
                report.skipped.append(SkippedItem(source=source, reason=f"Duplicate of {doc.id}"))
                continue
            seen_ids.add(doc.id)

            report.warnings.extend(self._quality_warnings(doc))
            report.documents.append(doc)

        self._log_summary(report)
        return report

    def load_directory(self, path: str) -> IngestReport:
        """Ingest every supported file below a directory.

        Args:
            path: Directory to scan recursively.

        Returns:
            IngestReport; unreadable files appear in ``skipped``.
        """
        base = Path(path)
        if not base.exists():
            logger.warning(f"Source path does not exist: {base}")
            return IngestReport()

        files = sorted(
            p for p in base.rglob("*")
            if p.is_file() and p.suffix.lower() in self.supported_extensions
        )
        logger.info(f"Found {len(files)} documents in {base}")

        unreadable = []

        def read_all():
            for file_path in files:
                try:
                    yield str(file_path), self.read_file(file_path)
                except DocumentReadError as e:
                    logger.warning(str(e))
                    unreadable.append(SkippedItem(source=str(file_path), reason=e.reason))

        report = self.ingest_texts(read_all())
        report.skipped = unreadable + report.skipped
        return report

    def load_file(self, file_path: str) -> Document:
        """Load a single file.

        Raises:
            DocumentReadError: If the file cannot be read or converted.
            EmptyDocumentError: If the file has no content.
        """
        path = Path(file_path)
        return self.preprocessor.process(self.read_file(path), str(path))

    def load_text(self, text: str, source: str = "<direct_input>") -> Document:
        """Load text directly (not from file)."""
        return self.preprocessor.process(text, source)

    def read_file(self, path: Path) -> str:
        """Read a file as text, converting non-text formats.

        Raises:
            DocumentReadError: If reading or conversion fails.
        """
        suffix = path.suffix.lower()
        if suffix in self.converters:
            try:
                return self.converters[suffix](path)
            except Exception as e:
                raise DocumentReadError(str(path), f"conversion failed: {e}")

        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            # Try with latin-1 as fallback
            try:
                return path.read_text(encoding="latin-1")
            except OSError as e:
                raise DocumentReadError(str(path), str(e))
        except OSError as e:
            raise DocumentReadError(str(path), str(e))

    def _quality_warnings(self, doc: Document) -> List[DataWarning]:
        warnings = []
        if doc.word_count < self.config.min_words:
            warnings.append(DataWarning(doc.source, f"Too short ({doc.word_count} words)"))
        if doc.word_count > self.config.max_words:
            warnings.append(DataWarning(doc.source, f"Very long ({doc.word_count} words)"))
        if doc.sentence_count == 0:
            warnings.append(DataWarning(doc.source, "No sentences parsed"))
        return warnings

    def _log_summary(self, report: IngestReport) -> None:
        logger.info(
            f"Ingested {len(report.documents)} documents "
            f"({report.total_words} words), skipped {len(report.skipped)}, "
            f"{len(report.warnings)} warnings",
            extra_data={
                "documents": len(report.documents),
                "skipped": len(report.skipped),
                "warnings": len(report.warnings),
            }
        )
        for warning in report.warnings[:10]:
            logger.debug(f"{warning.source}: {warning.message}")
