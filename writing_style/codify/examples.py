"""Example mining: pick exemplar sentences that illustrate each rule.

The sentence-quality filter is a set of regex guesses for rejecting
front-matter, headings and other non-prose lines. It is tunable and does
not catch everything.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from ..corpus.preprocessor import Document
from ..lexicon import DEFAULT_VERB_HINTS, Lexicon
from ..utils.nlp import count_words, get_voice_detector, is_question, split_into_sentences
from .models import RuleExamples, StyleRule

ACTIVE_EXAMPLE_MIN_WORDS = 8
ACTIVE_EXAMPLE_MAX_WORDS = 25
MAX_BAD_EXAMPLES = 2


@dataclass
class SentenceFilter:
    """Heuristic filter for sentences worth quoting as examples."""
    min_chars: int = 20
    max_lines: int = 3
    rejected_prefixes: List[str] = field(default_factory=lambda: [
        "---", "title:", "author:", "date:", "tags:", "aliases:", "sourcetxt:",
        "#", ">", "@",
    ])
    rejected_fragments: List[str] = field(default_factory=lambda: ["```", ".txt", ".md"])
    verb_hints: List[str] = field(default_factory=lambda: list(DEFAULT_VERB_HINTS))

    def __post_init__(self):
        hints = "|".join(re.escape(v) for v in self.verb_hints)
        self._verb_hint = re.compile(rf"\b({hints})\b", re.IGNORECASE)
        self._verb_suffix = re.compile(r"\b\w+(ed|ing|s)\b", re.IGNORECASE)

    def __call__(self, sentence: str) -> bool:
        s = sentence
        if not s or len(s) < self.min_chars:
            return False
        if any(s.startswith(p) for p in self.rejected_prefixes):
            return False
        if any(f in s for f in self.rejected_fragments):
            return False
        if re.match(r"^\s*-\s*#", s):        # YAML list items
            return False
        if re.match(r"^\s*\$", s):           # LaTeX
            return False
        if re.match(r"^[A-Z][a-z]+:", s):    # Header keys
            return False
        if re.search(r"\n{2,}", s) or len(s.split("\n")) > self.max_lines:
            return False
        if not re.match(r"^[A-Z][a-z]", s):
            return False
        return bool(self._verb_hint.search(s) or self._verb_suffix.search(s))


_DEFAULT_FILTER = SentenceFilter()


def is_clean_sentence(sentence: str) -> bool:
    """Check a sentence with the default filter."""
    return _DEFAULT_FILTER(sentence)


class ExampleMiner:
    """Selects good (and sometimes bad) examples for codified rules."""

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        per_rule: int = 3,
        sentence_filter: Optional[SentenceFilter] = None,
        voice_detector=None
    ):
        self.lexicon = lexicon or Lexicon.default()
        self.per_rule = per_rule
        self.is_clean = sentence_filter or SentenceFilter(verb_hints=self.lexicon.verb_hints)
        self.voice_detector = voice_detector or get_voice_detector("regex", self.lexicon.voice)
        self._miners: Dict[str, Callable] = {
            "sentence-length": self._sentence_length,
            "active-voice": self._active_voice,
            "opening-pattern": self._opening,
            "question-usage": self._questions,
            "transitions": self._transitions,
            "paragraph-length": self._paragraph_openers,
            "avoided-vocabulary": self._blacklist,
        }

    def attach(self, rules: Sequence[StyleRule], exemplars: Sequence[Document]) -> None:
        """Set ``examples`` on every rule that has any."""
        sentences = [s for doc in exemplars for s in doc.sentences if self.is_clean(s)]
        for rule in rules:
            miner = self._miners.get(rule.id)
            if miner is None:
                continue
            examples = miner(rule, sentences, exemplars)
            if examples is not None and (examples.good or examples.bad):
                rule.examples = examples

    def _sentence_length(self, rule, sentences, exemplars) -> RuleExamples:
        low, high = rule.validation.min, rule.validation.max
        centre = low + (high - low) / 2
        in_range = [s for s in sentences if low <= count_words(s) <= high]
        in_range.sort(key=lambda s: abs(count_words(s) - centre))
        return RuleExamples(good=in_range[:self.per_rule])

    def _active_voice(self, rule, sentences, exemplars) -> RuleExamples:
        good = [
            s for s in sentences
            if not self.voice_detector.is_passive(s)
            and ACTIVE_EXAMPLE_MIN_WORDS <= count_words(s) <= ACTIVE_EXAMPLE_MAX_WORDS
        ][:self.per_rule]
        bad = [s for s in sentences if self.voice_detector.is_passive(s)][:MAX_BAD_EXAMPLES]
        return RuleExamples(good=good, bad=bad or None)

    def _opening(self, rule, sentences, exemplars) -> RuleExamples:
        pattern = re.compile(rule.validation.pattern, re.IGNORECASE)
        openings = []
        for doc in exemplars:
            for s in doc.sentences:
                if self.is_clean(s) and pattern.match(s):
                    openings.append(s)
                    break
        return RuleExamples(good=openings[:self.per_rule])

    def _questions(self, rule, sentences, exemplars) -> RuleExamples:
        return RuleExamples(good=[s for s in sentences if is_question(s)][:self.per_rule])

    def _transitions(self, rule, sentences, exemplars) -> RuleExamples:
        pattern = re.compile(rf"\b(?:{rule.validation.pattern})\b", re.IGNORECASE)
        return RuleExamples(good=[s for s in sentences if pattern.search(s)][:self.per_rule])

    def _paragraph_openers(self, rule, sentences, exemplars) -> RuleExamples:
        low, high = rule.validation.min, rule.validation.max
        openers = []
        for doc in exemplars:
            for para in doc.paragraphs:
                para_sentences = split_into_sentences(para, self.lexicon.abbreviations)
                if para_sentences and low <= len(para_sentences) <= high \
                        and self.is_clean(para_sentences[0]):
                    openers.append(para_sentences[0])
                if len(openers) >= self.per_rule:
                    return RuleExamples(good=openers)
        return RuleExamples(good=openers)

    def _blacklist(self, rule, sentences, exemplars) -> RuleExamples:
        words = rule.validation.words or []
        if not words:
            return RuleExamples()
        pattern = re.compile(
            r"\b(" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE
        )
        bad = [s for s in sentences if pattern.search(s)][:MAX_BAD_EXAMPLES]
        return RuleExamples(good=[], bad=bad or None)
