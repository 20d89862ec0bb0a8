"""Paragraph-based chunking of documents for embedding."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..lexicon import DEFAULT_ABBREVIATIONS
from ..utils.nlp import count_words, split_into_sentences
from ..corpus.preprocessor import Document

# Chunk index reserved for the document-level summary chunk
SUMMARY_CHUNK_INDEX = -1

DEFAULT_MAX_CHUNK_CHARS = 512
FAST_MODE_PARAGRAPHS = 3


@dataclass(frozen=True)
class Chunk:
    """A span of a document that gets one embedding."""
    doc_id: str
    chunk_index: int
    text: str
    title: Optional[str]
    source: str
    word_count: int

    @property
    def is_summary(self) -> bool:
        return self.chunk_index == SUMMARY_CHUNK_INDEX


def _summary_text(doc: Document, paragraphs: Sequence[str], limit: int) -> str:
    parts = [p for p in (doc.title, " ".join(paragraphs)) if p]
    return ": ".join(parts)[:limit]


def _split_long_paragraph(
    paragraph: str,
    max_chars: int,
    abbreviations: Sequence[str]
) -> List[str]:
    """Accumulate sentences until the next one would exceed the budget.

    A single sentence longer than the budget becomes its own chunk.
    """
    pieces = []
    current = ""
    for sentence in split_into_sentences(paragraph, abbreviations):
        candidate = f"{current} {sentence}" if current else sentence
        if len(candidate) <= max_chars:
            current = candidate
            continue
        if current:
            pieces.append(current)
        current = sentence
    if current:
        pieces.append(current)
    return pieces


def chunk_document(
    doc: Document,
    max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
    fast_mode: bool = False,
    abbreviations: Sequence[str] = DEFAULT_ABBREVIATIONS
) -> List[Chunk]:
    """Split a document into embedding chunks.

    Full mode yields one chunk per paragraph (long paragraphs are split on
    sentence boundaries) plus a summary chunk of title and first paragraph.
    Fast mode yields only a larger summary chunk.

    Args:
        doc: Document to chunk.
        max_chunk_chars: Character budget per chunk.
        fast_mode: Only produce the summary chunk.
        abbreviations: Abbreviations the sentence splitter protects.

    Returns:
        Chunks in document order, summary first.
    """
    def make_chunk(index: int, text: str) -> Chunk:
        return Chunk(
            doc_id=doc.id,
            chunk_index=index,
            text=text,
            title=doc.title,
            source=doc.source,
            word_count=count_words(text),
        )

    if fast_mode:
        summary = _summary_text(
            doc, doc.paragraphs[:FAST_MODE_PARAGRAPHS], max_chunk_chars * 2
        )
        return [make_chunk(SUMMARY_CHUNK_INDEX, summary)] if summary else []

    texts: List[str] = []
    for para in doc.paragraphs:
        if len(para) <= max_chunk_chars:
            texts.append(para)
        else:
            texts.extend(_split_long_paragraph(para, max_chunk_chars, abbreviations))

    chunks = [make_chunk(i, text) for i, text in enumerate(texts)]

    summary = _summary_text(doc, doc.paragraphs[:1], max_chunk_chars)
    if summary and summary not in texts:
        chunks.insert(0, make_chunk(SUMMARY_CHUNK_INDEX, summary))

    return chunks


def chunk_documents(
    documents: Iterable[Document],
    max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
    fast_mode: bool = False,
    abbreviations: Sequence[str] = DEFAULT_ABBREVIATIONS
) -> List[Chunk]:
    """Chunk several documents, preserving document order."""
    chunks = []
    for doc in documents:
        chunks.extend(chunk_document(doc, max_chunk_chars, fast_mode, abbreviations))
    return chunks
