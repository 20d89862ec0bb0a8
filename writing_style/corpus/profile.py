"""Style profile data model: the aggregate metrics of one corpus snapshot."""

from dataclasses import dataclass, field
from typing import Dict, List

PROFILE_VERSION = "1.0"


@dataclass
class FrequentWord:
    word: str
    count: int
    frequency: float


@dataclass
class TransitionCount:
    phrase: str
    count: int


@dataclass
class CorpusStats:
    """Size of the corpus a profile was computed from."""
    document_count: int = 0
    total_words: int = 0
    total_sentences: int = 0

    def to_dict(self) -> Dict:
        return {
            "documentCount": self.document_count,
            "totalWords": self.total_words,
            "totalSentences": self.total_sentences,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CorpusStats":
        return cls(
            document_count=data.get("documentCount", 0),
            total_words=data.get("totalWords", 0),
            total_sentences=data.get("totalSentences", 0),
        )


@dataclass
class LexicalProfile:
    """Vocabulary metrics."""
    vocabulary_size: int = 0
    type_token_ratio: float = 0.0
    avg_word_length: float = 0.0
    frequent_words: List[FrequentWord] = field(default_factory=list)
    distinctive_words: List[str] = field(default_factory=list)
    avoided_words: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "vocabularySize": self.vocabulary_size,
            "typeTokenRatio": self.type_token_ratio,
            "avgWordLength": self.avg_word_length,
            "frequentWords": [
                {"word": w.word, "count": w.count, "frequency": w.frequency}
                for w in self.frequent_words
            ],
            "distinctiveWords": list(self.distinctive_words),
            "avoidedWords": list(self.avoided_words),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "LexicalProfile":
        return cls(
            vocabulary_size=data.get("vocabularySize", 0),
            type_token_ratio=data.get("typeTokenRatio", 0.0),
            avg_word_length=data.get("avgWordLength", 0.0),
            frequent_words=[
                FrequentWord(w["word"], w["count"], w["frequency"])
                for w in data.get("frequentWords", [])
            ],
            distinctive_words=list(data.get("distinctiveWords", [])),
            avoided_words=list(data.get("avoidedWords", [])),
        )


@dataclass
class SyntacticProfile:
    """Sentence-level metrics."""
    avg_sentence_length: float = 0.0
    sentence_length_std_dev: float = 0.0
    sentence_length_min: int = 0
    sentence_length_max: int = 0
    active_voice_ratio: float = 0.0
    question_ratio: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "avgSentenceLength": self.avg_sentence_length,
            "sentenceLengthStdDev": self.sentence_length_std_dev,
            "sentenceLengthMin": self.sentence_length_min,
            "sentenceLengthMax": self.sentence_length_max,
            "activeVoiceRatio": self.active_voice_ratio,
            "questionRatio": self.question_ratio,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "SyntacticProfile":
        return cls(
            avg_sentence_length=data.get("avgSentenceLength", 0.0),
            sentence_length_std_dev=data.get("sentenceLengthStdDev", 0.0),
            sentence_length_min=data.get("sentenceLengthMin", 0),
            sentence_length_max=data.get("sentenceLengthMax", 0),
            active_voice_ratio=data.get("activeVoiceRatio", 0.0),
            question_ratio=data.get("questionRatio", 0.0),
        )


@dataclass
class RhythmicProfile:
    """Sentence-length distribution and paragraph rhythm."""
    sentence_length_distribution: List[float] = field(default_factory=list)
    avg_paragraph_length: float = 0.0
    paragraph_length_variance: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "sentenceLengthDistribution": list(self.sentence_length_distribution),
            "avgParagraphLength": self.avg_paragraph_length,
            "paragraphLengthVariance": self.paragraph_length_variance,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "RhythmicProfile":
        return cls(
            sentence_length_distribution=list(data.get("sentenceLengthDistribution", [])),
            avg_paragraph_length=data.get("avgParagraphLength", 0.0),
            paragraph_length_variance=data.get("paragraphLengthVariance", 0.0),
        )


@dataclass
class StructuralProfile:
    """Document-level structure."""
    avg_paragraphs_per_doc: float = 0.0
    transition_phrases: List[TransitionCount] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "avgParagraphsPerDoc": self.avg_paragraphs_per_doc,
            "transitionPhrases": [
                {"phrase": t.phrase, "count": t.count} for t in self.transition_phrases
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "StructuralProfile":
        return cls(
            avg_paragraphs_per_doc=data.get("avgParagraphsPerDoc", 0.0),
            transition_phrases=[
                TransitionCount(t["phrase"], t["count"])
                for t in data.get("transitionPhrases", [])
            ],
        )


@dataclass
class StyleProfile:
    """Aggregate style metrics for a corpus snapshot.

    Regenerated wholesale whenever the corpus changes.
    """
    generated_at: str
    corpus_stats: CorpusStats = field(default_factory=CorpusStats)
    lexical: LexicalProfile = field(default_factory=LexicalProfile)
    syntactic: SyntacticProfile = field(default_factory=SyntacticProfile)
    rhythmic: RhythmicProfile = field(default_factory=RhythmicProfile)
    structural: StructuralProfile = field(default_factory=StructuralProfile)
    version: str = PROFILE_VERSION

    def to_dict(self) -> Dict:
        """Convert to dictionary for storage."""
        return {
            "version": self.version,
            "generatedAt": self.generated_at,
            "corpusStats": self.corpus_stats.to_dict(),
            "lexical": self.lexical.to_dict(),
            "syntactic": self.syntactic.to_dict(),
            "rhythmic": self.rhythmic.to_dict(),
            "structural": self.structural.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "StyleProfile":
        """Create from dictionary."""
        return cls(
            version=data.get("version", PROFILE_VERSION),
            generated_at=data.get("generatedAt", ""),
            corpus_stats=CorpusStats.from_dict(data.get("corpusStats", {})),
            lexical=LexicalProfile.from_dict(data.get("lexical", {})),
            syntactic=SyntacticProfile.from_dict(data.get("syntactic", {})),
            rhythmic=RhythmicProfile.from_dict(data.get("rhythmic", {})),
            structural=StructuralProfile.from_dict(data.get("structural", {})),
        )
