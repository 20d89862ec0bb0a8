"""Document normalization: raw text into structured, content-addressed records."""

import hashlib
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import EmptyDocumentError
from ..lexicon import DEFAULT_ABBREVIATIONS
from ..utils.logging import get_logger
from ..utils.nlp import (
    clean_markdown,
    count_words,
    extract_headings,
    extract_title,
    normalize_text,
    split_into_paragraphs,
    split_into_sentences,
)

logger = get_logger(__name__)

WORDS_PER_MINUTE = 200


@dataclass(frozen=True)
class Heading:
    """A markdown heading line."""
    level: int
    text: str


@dataclass(frozen=True)
class Document:
    """An ingested document.

    The id is derived from the raw content, so identical content always
    maps to the same id regardless of where it came from.
    """
    id: str
    source: str
    raw_content: str
    title: Optional[str]
    sentences: Tuple[str, ...]
    paragraphs: Tuple[str, ...]
    headings: Tuple[Heading, ...] = field(default_factory=tuple)
    word_count: int = 0
    sentence_count: int = 0
    character_count: int = 0

    @property
    def paragraph_count(self) -> int:
        return len(self.paragraphs)

    @property
    def estimated_reading_time(self) -> int:
        """Reading time in minutes."""
        return math.ceil(self.word_count / WORDS_PER_MINUTE)

    def to_dict(self) -> Dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "source": self.source,
            "content": self.raw_content,
            "metadata": {
                "wordCount": self.word_count,
                "characterCount": self.character_count,
                "paragraphCount": self.paragraph_count,
                "sentenceCount": self.sentence_count,
                "estimatedReadingTime": self.estimated_reading_time,
            },
            "parsed": {
                "title": self.title,
                "sentences": list(self.sentences),
                "paragraphs": list(self.paragraphs),
                "headings": [{"level": h.level, "text": h.text} for h in self.headings],
            },
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Document":
        """Create from dictionary."""
        metadata = data.get("metadata", {})
        parsed = data.get("parsed", {})
        sentences = tuple(parsed.get("sentences", []))
        return cls(
            id=data["id"],
            source=data.get("source", ""),
            raw_content=data.get("content", ""),
            title=parsed.get("title"),
            sentences=sentences,
            paragraphs=tuple(parsed.get("paragraphs", [])),
            headings=tuple(
                Heading(level=h["level"], text=h["text"])
                for h in parsed.get("headings", [])
            ),
            word_count=metadata.get("wordCount", 0),
            sentence_count=metadata.get("sentenceCount", len(sentences)),
            character_count=metadata.get("characterCount", 0),
        )


def compute_document_id(content: str) -> str:
    """Content address of a document: first 12 hex chars of SHA-256."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:12]


@dataclass
class DecomposedText:
    """Cleaned text with its paragraphs and sentences."""
    cleaned_text: str
    paragraphs: List[str]
    sentences: List[str]

    def paragraph_sentences(self, abbreviations: Sequence[str] = DEFAULT_ABBREVIATIONS) -> List[List[str]]:
        """Sentences of each paragraph, in order."""
        return [split_into_sentences(p, abbreviations) for p in self.paragraphs]


class TextPreprocessor:
    """Normalizes raw text into Document records.

    Handles:
    - Unicode and line-ending normalization
    - Heading and title extraction
    - Markdown cleanup
    - Paragraph and sentence splitting with abbreviation protection
    """

    def __init__(self, abbreviations: Optional[Sequence[str]] = None):
        """Initialize preprocessor.

        Args:
            abbreviations: Abbreviations that never end a sentence.
        """
        self.abbreviations = list(abbreviations or DEFAULT_ABBREVIATIONS)

    def decompose(self, text: str) -> DecomposedText:
        """Split text the same way for ingestion and validation.

        Args:
            text: Raw text, possibly markdown.

        Returns:
            DecomposedText with cleaned text, paragraphs and sentences.
        """
        cleaned = clean_markdown(normalize_text(text))
        paragraphs = split_into_paragraphs(cleaned)
        # Split per paragraph so unterminated lines (headings) never merge
        # into the following sentence
        sentences = [
            s for p in paragraphs for s in split_into_sentences(p, self.abbreviations)
        ]
        return DecomposedText(cleaned_text=cleaned, paragraphs=paragraphs, sentences=sentences)

    def process(self, text: str, source: str = "<direct_input>") -> Document:
        """Process raw text into a Document.

        Args:
            text: Raw input text.
            source: Where the text came from (path or identifier).

        Returns:
            Document record.

        Raises:
            EmptyDocumentError: If the text is empty or whitespace-only.
        """
        if not text or not text.strip():
            raise EmptyDocumentError(source)

        normalized = normalize_text(text)
        decomposed = self.decompose(text)
        title = extract_title(normalized)
        if title is None and source and not source.startswith("<"):
            title = Path(source).stem

        doc = Document(
            id=compute_document_id(text),
            source=source,
            raw_content=text,
            title=title,
            sentences=tuple(decomposed.sentences),
            paragraphs=tuple(decomposed.paragraphs),
            headings=tuple(Heading(level, heading) for level, heading in extract_headings(normalized)),
            word_count=count_words(decomposed.cleaned_text),
            sentence_count=len(decomposed.sentences),
            character_count=len(text),
        )

        logger.debug(
            f"Processed {source}: {doc.paragraph_count} paragraphs, "
            f"{doc.sentence_count} sentences"
        )

        return doc
