"""Text decomposition shared by ingestion, analysis and validation.

Sentence and paragraph splitting are regex heuristics so that every stage
sees exactly the same representation of a text. spaCy is only loaded for the
optional dependency-based voice detector.
"""

import re
import unicodedata
from typing import List, Optional, Sequence, Tuple

from ..lexicon import DEFAULT_ABBREVIATIONS, VoiceHeuristics
from .logging import get_logger

logger = get_logger(__name__)

# Lazy-loaded spaCy model
_nlp = None

SENTENCE_BOUNDARY = re.compile(
    r"(?:(?<=[.!?])|(?<=[.!?][\"')]))\s+(?=[\"'(]?[A-Z])"
)
PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")
HEADING_LINE = re.compile(r"^(#{1,6})\s+(.+)$")
TITLE_LINE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
TOKEN_STRIP = re.compile(r"[^a-z\s'-]")

_UNICODE_REPLACEMENTS = {
    "\u2018": "'",   # Left single quote
    "\u2019": "'",   # Right single quote
    "\u201c": '"',   # Left double quote
    "\u201d": '"',   # Right double quote
    "\u2013": "-",   # En dash
    "\u2026": "...",  # Ellipsis
    "\u00a0": " ",   # Non-breaking space
}


def get_nlp():
    """Get the spaCy NLP model, loading it if necessary.

    Returns:
        spaCy Language model.

    Raises:
        RuntimeError: If spaCy is not installed.
    """
    global _nlp
    if _nlp is None:
        try:
            import spacy
            models = ["en_core_web_lg", "en_core_web_md", "en_core_web_sm"]
            for model_name in models:
                try:
                    _nlp = spacy.load(model_name)
                    logger.info(f"Loaded spaCy model: {model_name}")
                    break
                except OSError:
                    continue
            else:
                logger.info("Downloading spaCy model en_core_web_sm...")
                from spacy.cli import download
                download("en_core_web_sm")
                _nlp = spacy.load("en_core_web_sm")
                logger.info("Downloaded and loaded spaCy model: en_core_web_sm")
        except ImportError:
            raise RuntimeError("spaCy is required. Install with: pip install spacy")
    return _nlp


def normalize_text(text: str) -> str:
    """Normalize unicode punctuation and line endings."""
    text = unicodedata.normalize("NFC", text)
    for old, new in _UNICODE_REPLACEMENTS.items():
        text = text.replace(old, new)
    return text.replace("\r\n", "\n").replace("\r", "\n")


def clean_markdown(text: str) -> str:
    """Strip markdown formatting, keeping the prose."""
    text = re.sub(r"```[\s\S]*?```", "", text)             # Code blocks
    # Headings become their own paragraph even without surrounding blank lines
    text = re.sub(r"^#{1,6}[ \t]+(.+)$", r"\n\1\n", text, flags=re.MULTILINE)
    text = re.sub(r"\*\*|__", "", text)                     # Bold
    text = re.sub(r"(?<!\w)[*_]|[*_](?!\w)", "", text)      # Italic
    text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", text)    # Links keep text
    text = re.sub(r"`[^`]+`", "", text)                     # Inline code
    return text


def split_into_sentences(
    text: str,
    abbreviations: Sequence[str] = DEFAULT_ABBREVIATIONS
) -> List[str]:
    """Split text into sentences.

    Known abbreviations are masked before splitting so "Dr. Smith" does not
    end a sentence.

    Args:
        text: Input text.
        abbreviations: Abbreviations that never terminate a sentence.

    Returns:
        List of sentence strings (non-empty, stripped).
    """
    if not text or not text.strip():
        return []

    masked = text
    for i, abbr in enumerate(abbreviations):
        masked = re.sub(rf"(?<!\w){re.escape(abbr)}", f"__ABBR{i}__", masked)

    sentences = []
    for part in SENTENCE_BOUNDARY.split(masked):
        for i, abbr in enumerate(abbreviations):
            part = part.replace(f"__ABBR{i}__", abbr)
        part = part.strip()
        if part:
            sentences.append(part)

    return sentences


def split_into_paragraphs(text: str) -> List[str]:
    """Split text into paragraphs on blank lines.

    Args:
        text: Input text.

    Returns:
        List of paragraph strings (non-empty).
    """
    if not text or not text.strip():
        return []
    return [p.strip() for p in PARAGRAPH_BREAK.split(text) if p.strip()]


def extract_headings(text: str) -> List[Tuple[int, str]]:
    """Extract markdown headings as (level, text) pairs."""
    headings = []
    for line in text.split("\n"):
        match = HEADING_LINE.match(line)
        if match:
            headings.append((len(match.group(1)), match.group(2).strip()))
    return headings


def extract_title(text: str) -> Optional[str]:
    """Return the first level-one heading, if any."""
    match = TITLE_LINE.search(text)
    return match.group(1).strip() if match else None


def count_words(text: str) -> int:
    """Count whitespace-separated words in text.

    Args:
        text: Input text.

    Returns:
        Word count.
    """
    if not text:
        return 0
    return len(text.split())


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens for frequency analysis (length > 1)."""
    return [w for w in TOKEN_STRIP.sub(" ", text.lower()).split() if len(w) > 1]


def is_question(sentence: str) -> bool:
    return sentence.rstrip().endswith("?")


class RegexVoiceDetector:
    """Passive voice detection with be-verb/participle/agent regexes."""

    name = "regex"

    def __init__(self, heuristics: Optional[VoiceHeuristics] = None):
        self.heuristics = heuristics or VoiceHeuristics()
        self._patterns = self.heuristics.passive_patterns()

    def is_passive(self, sentence: str) -> bool:
        return any(p.search(sentence) for p in self._patterns)


class SpacyVoiceDetector:
    """Passive voice detection from spaCy dependency labels."""

    name = "spacy"
    PASSIVE_DEPS = {"nsubjpass", "auxpass", "csubjpass", "nsubj:pass", "aux:pass"}

    def __init__(self, nlp=None):
        self._nlp = nlp

    @property
    def nlp(self):
        """Lazy-load spaCy model."""
        if self._nlp is None:
            self._nlp = get_nlp()
        return self._nlp

    def is_passive(self, sentence: str) -> bool:
        doc = self.nlp(sentence)
        return any(token.dep_ in self.PASSIVE_DEPS for token in doc)


def get_voice_detector(name: str = "regex", heuristics: Optional[VoiceHeuristics] = None):
    """Create a voice detector by name.

    Raises:
        ValueError: If the detector name is unknown.
    """
    if name == "regex":
        return RegexVoiceDetector(heuristics)
    if name == "spacy":
        return SpacyVoiceDetector()
    raise ValueError(f"Unknown voice detector: {name}")
