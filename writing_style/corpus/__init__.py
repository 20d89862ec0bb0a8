"""Corpus loading, normalization and style profiling."""

from .loader import CorpusLoader, DataWarning, IngestReport, SkippedItem
from .preprocessor import Document, Heading, TextPreprocessor, compute_document_id
from .analyzer import StyleProfileAnalyzer
from .profile import StyleProfile

__all__ = [
    "CorpusLoader",
    "DataWarning",
    "IngestReport",
    "SkippedItem",
    "Document",
    "Heading",
    "TextPreprocessor",
    "compute_document_id",
    "StyleProfileAnalyzer",
    "StyleProfile",
]
