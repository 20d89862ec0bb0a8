"""Statistical analysis of a corpus into a StyleProfile."""

import re
from collections import Counter
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import numpy as np

from ..config import AnalysisConfig
from ..lexicon import Lexicon
from ..utils.logging import get_logger
from ..utils.nlp import (
    count_words,
    get_voice_detector,
    is_question,
    split_into_sentences,
    tokenize,
)
from .preprocessor import Document
from .profile import (
    CorpusStats,
    FrequentWord,
    LexicalProfile,
    RhythmicProfile,
    StructuralProfile,
    StyleProfile,
    SyntacticProfile,
    TransitionCount,
)

logger = get_logger(__name__)

HISTOGRAM_BINS = 10
HISTOGRAM_BIN_WIDTH = 10
MIN_CONTENT_WORD_LENGTH = 3


class StyleProfileAnalyzer:
    """Computes lexical, syntactic, rhythmic and structural metrics.

    All metrics are pure functions of the document set; the only
    non-deterministic field is the generation timestamp, which callers
    can pin with ``generated_at``.
    """

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        config: Optional[AnalysisConfig] = None,
        voice_detector=None
    ):
        """Initialize analyzer.

        Args:
            lexicon: Word lists and heuristics.
            config: Analysis thresholds.
            voice_detector: Optional detector with ``is_passive(sentence)``.
        """
        self.lexicon = lexicon or Lexicon.default()
        self.config = config or AnalysisConfig()
        self.voice_detector = voice_detector or get_voice_detector(
            self.config.voice_detector, self.lexicon.voice
        )
        self._stopwords = self.lexicon.stopword_set

    def analyze(
        self,
        documents: Sequence[Document],
        generated_at: Optional[str] = None
    ) -> StyleProfile:
        """Analyze a document set.

        Args:
            documents: Ingested documents.
            generated_at: Optional fixed ISO timestamp.

        Returns:
            StyleProfile for the corpus.
        """
        if generated_at is None:
            generated_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

        if not documents:
            logger.warning("Analyzing empty corpus")

        profile = StyleProfile(
            generated_at=generated_at,
            corpus_stats=CorpusStats(
                document_count=len(documents),
                total_words=sum(d.word_count for d in documents),
                total_sentences=sum(d.sentence_count for d in documents),
            ),
            lexical=self.analyze_lexical(documents),
            syntactic=self.analyze_syntactic(documents),
            rhythmic=self.analyze_rhythmic(documents),
            structural=self.analyze_structural(documents),
        )

        logger.info(
            f"Analyzed {len(documents)} documents: "
            f"avg sentence {profile.syntactic.avg_sentence_length:.1f} words, "
            f"{profile.syntactic.active_voice_ratio:.0%} active voice"
        )
        return profile

    def analyze_lexical(self, documents: Sequence[Document]) -> LexicalProfile:
        """Word frequency, vocabulary richness and avoided words."""
        words: List[str] = []
        for doc in documents:
            words.extend(tokenize(" ".join(doc.paragraphs)))

        if not words:
            return LexicalProfile(avoided_words=list(self.lexicon.buzzwords))

        total = len(words)
        word_freq = Counter(words)

        # Stable sort keeps first-seen order for ties
        content_words = sorted(
            (
                (word, count) for word, count in word_freq.items()
                if word not in self._stopwords and len(word) >= MIN_CONTENT_WORD_LENGTH
            ),
            key=lambda item: item[1],
            reverse=True,
        )

        frequent_words = [
            FrequentWord(word=word, count=count, frequency=count / total)
            for word, count in content_words[:self.config.top_frequent_words]
        ]

        distinctive_words = [
            word for word, count in content_words
            if count / total > self.config.distinctive_threshold
        ][:self.config.distinctive_limit]

        avoided_words = [
            word for word in self.lexicon.buzzwords
            if word_freq.get(word.lower(), 0) < self.config.avoided_max_count
        ]

        return LexicalProfile(
            vocabulary_size=len(word_freq),
            type_token_ratio=len(word_freq) / total,
            avg_word_length=float(np.mean([len(w) for w in words])),
            frequent_words=frequent_words,
            distinctive_words=distinctive_words,
            avoided_words=avoided_words,
        )

    def analyze_syntactic(self, documents: Sequence[Document]) -> SyntacticProfile:
        """Sentence length statistics, voice and question usage."""
        sentences = [s for doc in documents for s in doc.sentences]
        if not sentences:
            return SyntacticProfile()

        lengths = np.array([count_words(s) for s in sentences])
        passive = sum(1 for s in sentences if self.voice_detector.is_passive(s))
        questions = sum(1 for s in sentences if is_question(s))

        return SyntacticProfile(
            avg_sentence_length=float(lengths.mean()),
            sentence_length_std_dev=float(lengths.std()),
            sentence_length_min=int(lengths.min()),
            sentence_length_max=int(lengths.max()),
            active_voice_ratio=1 - passive / len(sentences),
            question_ratio=questions / len(sentences),
        )

    def analyze_rhythmic(self, documents: Sequence[Document]) -> RhythmicProfile:
        """Sentence-length histogram and paragraph length in sentences."""
        lengths = [count_words(s) for doc in documents for s in doc.sentences]

        distribution = [0.0] * HISTOGRAM_BINS
        for length in lengths:
            distribution[min(length // HISTOGRAM_BIN_WIDTH, HISTOGRAM_BINS - 1)] += 1
        if lengths:
            distribution = [count / len(lengths) for count in distribution]

        paragraph_lengths = [
            len(split_into_sentences(p, self.lexicon.abbreviations))
            for doc in documents for p in doc.paragraphs
        ]
        if not paragraph_lengths:
            return RhythmicProfile(sentence_length_distribution=distribution)

        return RhythmicProfile(
            sentence_length_distribution=distribution,
            avg_paragraph_length=float(np.mean(paragraph_lengths)),
            paragraph_length_variance=float(np.var(paragraph_lengths)),
        )

    def analyze_structural(self, documents: Sequence[Document]) -> StructuralProfile:
        """Paragraphs per document and transition phrase usage."""
        if not documents:
            return StructuralProfile()

        all_text = " ".join(" ".join(doc.paragraphs) for doc in documents).lower()

        counts = []
        for phrase in self.lexicon.transitions:
            pattern = re.compile(rf"\b{re.escape(phrase.lower())}\b")
            count = len(pattern.findall(all_text))
            if count > 0:
                counts.append(TransitionCount(phrase=phrase, count=count))
        counts.sort(key=lambda t: t.count, reverse=True)

        return StructuralProfile(
            avg_paragraphs_per_doc=float(np.mean([d.paragraph_count for d in documents])),
            transition_phrases=counts[:self.config.transition_limit],
        )
