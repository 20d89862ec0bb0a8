"""Word lists and heuristic constants used by the analyzer, codifier and validator.

Everything language-specific lives here so the pipeline can be retargeted to
another language or domain by loading a different lexicon file.
"""

import json
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Pattern

from .errors import ConfigError
from .utils.logging import get_logger

logger = get_logger(__name__)


DEFAULT_STOPWORDS = [
    "the", "be", "to", "of", "and", "a", "in", "that", "have", "i",
    "it", "for", "not", "on", "with", "he", "as", "you", "do", "at",
    "this", "but", "his", "by", "from", "they", "we", "say", "her", "she",
    "or", "an", "will", "my", "one", "all", "would", "there", "their", "what",
    "so", "up", "out", "if", "about", "who", "get", "which", "go", "me",
    "is", "are", "was", "were", "been", "being", "has", "had", "having",
    "does", "did", "doing", "can", "could", "should", "may", "might",
    "must", "shall", "just", "also", "very", "much", "more", "most",
    "no", "yes", "any", "some", "than", "then", "now", "only", "other",
]

# Generic words a distinctive voice tends to avoid
DEFAULT_BUZZWORDS = [
    "very", "really", "actually", "basically", "literally",
    "utilize", "leverage", "synergy", "paradigm", "holistic",
    "robust", "scalable", "ecosystem", "disrupt", "innovative",
]

DEFAULT_TRANSITIONS = [
    "however", "therefore", "moreover", "furthermore", "in addition",
    "on the other hand", "in contrast", "for example", "for instance",
    "in fact", "as a result", "consequently", "meanwhile", "nevertheless",
    "in other words", "to put it simply", "that said", "in short",
    "first", "second", "third", "finally", "next", "then",
]

DEFAULT_ABBREVIATIONS = [
    "Mr.", "Mrs.", "Ms.", "Dr.", "Prof.", "Inc.", "Ltd.", "etc.", "e.g.", "i.e.",
]

DEFAULT_BANNED = [
    "synergy", "leverage", "paradigm", "holistic", "robust", "scalable",
    "ecosystem", "disruptive", "innovative", "cutting-edge", "best-in-class",
    "game-changer", "low-hanging fruit", "move the needle", "circle back",
    "deep dive", "bandwidth", "take offline",
]

# plain word -> inflated alternatives it replaces
DEFAULT_PREFERRED = {
    "use": ["utilize", "utilise"],
    "help": ["assist", "facilitate"],
    "show": ["demonstrate", "illustrate", "exhibit"],
    "make": ["fabricate", "construct", "manufacture"],
    "start": ["commence", "initiate"],
    "end": ["terminate", "conclude", "finalize"],
    "get": ["obtain", "acquire", "procure"],
    "need": ["require", "necessitate"],
    "think": ["believe", "opine", "surmise"],
    "many": ["numerous", "myriad", "multitudinous"],
}

# name -> regex tested against the opening sentence
DEFAULT_OPENING_ANTI_PATTERNS = {
    "meta-reference": r"In this (article|post|piece)",
    "throat-clearing": r"(It is|It's) important to",
    "dictionary-definition": r"According to (the )?dictionary",
    "unnecessary-preamble": r"Let me (start|begin) by",
}

DEFAULT_VERB_HINTS = [
    "is", "are", "was", "were", "have", "has", "had", "do", "does",
    "can", "will", "would", "should", "could", "may", "might",
]


@dataclass
class VoiceHeuristics:
    """Regex heuristics for passive voice detection.

    These are pattern guesses, not a grammatical parse. On typical essay
    prose they flag most "was written"-style constructions; adjectival
    participles ("is interested") are false positives and irregular
    participles outside the suffix list are missed.
    """
    be_verbs: List[str] = field(default_factory=lambda: [
        "was", "were", "been", "being", "is", "are",
    ])
    participle_suffixes: List[str] = field(default_factory=lambda: ["ed", "en"])
    agent_pattern: str = r"\bby\s+(the|a|an)\s+\w+"
    use_agent_pattern: bool = True

    def passive_patterns(self) -> List[Pattern]:
        """Compile the passive-voice patterns."""
        be = "|".join(re.escape(v) for v in self.be_verbs)
        patterns = [
            re.compile(rf"\b({be})\s+\w+{re.escape(suffix)}\b", re.IGNORECASE)
            for suffix in self.participle_suffixes
        ]
        if self.use_agent_pattern:
            patterns.append(re.compile(self.agent_pattern, re.IGNORECASE))
        return patterns


@dataclass
class Lexicon:
    """Injectable word lists and heuristic constants."""
    stopwords: List[str] = field(default_factory=lambda: list(DEFAULT_STOPWORDS))
    buzzwords: List[str] = field(default_factory=lambda: list(DEFAULT_BUZZWORDS))
    transitions: List[str] = field(default_factory=lambda: list(DEFAULT_TRANSITIONS))
    abbreviations: List[str] = field(default_factory=lambda: list(DEFAULT_ABBREVIATIONS))
    banned: List[str] = field(default_factory=lambda: list(DEFAULT_BANNED))
    preferred: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_PREFERRED.items()}
    )
    opening_anti_patterns: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_OPENING_ANTI_PATTERNS)
    )
    verb_hints: List[str] = field(default_factory=lambda: list(DEFAULT_VERB_HINTS))
    voice: VoiceHeuristics = field(default_factory=VoiceHeuristics)

    @classmethod
    def default(cls) -> "Lexicon":
        """The built-in English lexicon."""
        return cls()

    @property
    def stopword_set(self) -> frozenset:
        return frozenset(w.lower() for w in self.stopwords)

    def to_dict(self) -> Dict:
        """Convert to dictionary for storage."""
        return {
            "stopwords": self.stopwords,
            "buzzwords": self.buzzwords,
            "transitions": self.transitions,
            "abbreviations": self.abbreviations,
            "banned": self.banned,
            "preferred": self.preferred,
            "opening_anti_patterns": self.opening_anti_patterns,
            "verb_hints": self.verb_hints,
            "voice": {
                "be_verbs": self.voice.be_verbs,
                "participle_suffixes": self.voice.participle_suffixes,
                "agent_pattern": self.voice.agent_pattern,
                "use_agent_pattern": self.voice.use_agent_pattern,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Lexicon":
        """Create from dictionary, keeping defaults for missing keys."""
        lexicon = cls()
        known = {f.name for f in fields(cls)} - {"voice"}
        unknown = set(data) - known - {"voice"}
        if unknown:
            raise ConfigError(f"Unknown lexicon keys: {sorted(unknown)}")

        for key in known:
            if key in data:
                setattr(lexicon, key, data[key])

        voice_data = data.get("voice", {})
        if voice_data:
            lexicon.voice = VoiceHeuristics(
                be_verbs=voice_data.get("be_verbs", lexicon.voice.be_verbs),
                participle_suffixes=voice_data.get(
                    "participle_suffixes", lexicon.voice.participle_suffixes
                ),
                agent_pattern=voice_data.get("agent_pattern", lexicon.voice.agent_pattern),
                use_agent_pattern=voice_data.get(
                    "use_agent_pattern", lexicon.voice.use_agent_pattern
                ),
            )

        for name, pattern in lexicon.opening_anti_patterns.items():
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigError(f"Invalid opening pattern '{name}': {e}")

        return lexicon


def load_lexicon(path: str) -> Lexicon:
    """Load a lexicon JSON file, overlaying it on the defaults.

    Raises:
        ConfigError: If the file is missing, not JSON, or has unknown keys.
    """
    lexicon_path = Path(path)
    if not lexicon_path.exists():
        raise ConfigError(f"Lexicon file not found: {path}")

    try:
        data = json.loads(lexicon_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in lexicon file: {e}")

    lexicon = Lexicon.from_dict(data)
    logger.info(f"Loaded lexicon from {path}")
    return lexicon
