"""Rule codifier: compiles a StyleProfile and exemplars into a StyleSpec."""

import math
import re
from typing import List, Optional, Sequence

from ..config import CodifyConfig
from ..corpus.preprocessor import Document
from ..corpus.profile import StyleProfile
from ..errors import InsufficientExemplarsError
from ..lexicon import Lexicon
from ..utils.logging import get_logger
from .examples import ExampleMiner
from .models import (
    RuleCategory,
    RuleValidation,
    Severity,
    StyleRule,
    StyleSpec,
    ValidationType,
    VocabularyGuide,
)

logger = get_logger(__name__)

MIN_SENTENCE_LENGTH = 5
SENTENCE_LENGTH_SD_FACTOR = 0.5
ACTIVE_VOICE_TOLERANCE = 0.1
QUESTION_RATIO_FLOOR = 0.02
QUESTION_MIN = 0.01
QUESTION_HEADROOM = 0.02
PARAGRAPH_LENGTH_TOLERANCE = 2
TOP_TRANSITIONS = 5
JARGON_PREVIEW = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _ratio(value: float) -> float:
    return round(value, 4)


class RuleCodifier:
    """Turns corpus statistics into validation rules with examples.

    Pure: the StyleSpec timestamp is the profile's, so identical inputs always
    serialize to identical JSON.
    """

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        config: Optional[CodifyConfig] = None,
        voice_detector=None
    ):
        self.lexicon = lexicon or Lexicon.default()
        self.config = config or CodifyConfig()
        self.miner = ExampleMiner(
            self.lexicon,
            per_rule=self.config.examples_per_rule,
            voice_detector=voice_detector,
        )

    def codify(self, profile: StyleProfile, exemplars: Sequence[Document]) -> StyleSpec:
        """Compile a style spec.

        Args:
            profile: Style profile of the corpus.
            exemplars: Hand-picked documents that best represent the style.

        Returns:
            StyleSpec with rules, examples and vocabulary guide.

        Raises:
            InsufficientExemplarsError: If there are too few exemplars.
        """
        if len(exemplars) < self.config.min_exemplars:
            raise InsufficientExemplarsError(len(exemplars), self.config.min_exemplars)

        rules = self.generate_rules(profile)
        self.miner.attach(rules, exemplars)

        spec = StyleSpec(
            generated_at=profile.generated_at,
            document_count=profile.corpus_stats.document_count,
            total_words=profile.corpus_stats.total_words,
            rules=rules,
            vocabulary=self.vocabulary_guide(profile),
            exemplar_ids=[doc.id for doc in exemplars],
        )

        logger.info(
            f"Codified {len(rules)} rules from {len(exemplars)} exemplars",
            extra_data={"rules": [r.id for r in rules], "exemplars": len(exemplars)}
        )
        return spec

    def generate_rules(self, profile: StyleProfile) -> List[StyleRule]:
        """Derive rules from the profile's metrics."""
        syntactic = profile.syntactic
        rules = []

        spread = syntactic.sentence_length_std_dev * SENTENCE_LENGTH_SD_FACTOR
        min_len = max(MIN_SENTENCE_LENGTH, round_half_up(syntactic.avg_sentence_length - spread))
        max_len = round_half_up(syntactic.avg_sentence_length + spread)
        rules.append(StyleRule(
            id="sentence-length",
            category=RuleCategory.SYNTACTIC,
            rule=(
                f"Target {min_len}-{max_len} words per sentence. "
                f"Your corpus average: {round_half_up(syntactic.avg_sentence_length)} words."
            ),
            validation=RuleValidation(
                type=ValidationType.RANGE,
                metric="avgSentenceLength",
                min=min_len,
                max=max_len,
            ),
            severity=Severity.MINOR,
        ))

        active_pct = round_half_up(syntactic.active_voice_ratio * 100)
        rules.append(StyleRule(
            id="active-voice",
            category=RuleCategory.SYNTACTIC,
            rule=(
                f"Use active voice in >{active_pct - 10}% of sentences. "
                f"Your corpus: {active_pct}% active voice."
            ),
            validation=RuleValidation(
                type=ValidationType.THRESHOLD,
                metric="activeVoiceRatio",
                min=_ratio(syntactic.active_voice_ratio - ACTIVE_VOICE_TOLERANCE),
            ),
            severity=Severity.MAJOR,
        ))

        if syntactic.question_ratio > QUESTION_RATIO_FLOOR:
            rules.append(StyleRule(
                id="question-usage",
                category=RuleCategory.RHETORICAL,
                rule=(
                    f"Use rhetorical questions sparingly "
                    f"(~{syntactic.question_ratio * 100:.1f}% of sentences)."
                ),
                validation=RuleValidation(
                    type=ValidationType.RANGE,
                    metric="questionRatio",
                    min=QUESTION_MIN,
                    max=_ratio(syntactic.question_ratio + QUESTION_HEADROOM),
                ),
                severity=Severity.MINOR,
            ))

        avg_para = profile.rhythmic.avg_paragraph_length
        rules.append(StyleRule(
            id="paragraph-length",
            category=RuleCategory.STRUCTURAL,
            rule=f"Keep paragraphs around {round_half_up(avg_para)} sentences. Vary for rhythm.",
            validation=RuleValidation(
                type=ValidationType.RANGE,
                metric="avgParagraphLength",
                min=_ratio(max(1, avg_para - PARAGRAPH_LENGTH_TOLERANCE)),
                max=_ratio(avg_para + PARAGRAPH_LENGTH_TOLERANCE),
            ),
            severity=Severity.MINOR,
        ))

        transitions = [t.phrase for t in profile.structural.transition_phrases[:TOP_TRANSITIONS]]
        if transitions:
            rules.append(StyleRule(
                id="transitions",
                category=RuleCategory.STRUCTURAL,
                rule=f"Use clear transitions. Preferred: {', '.join(transitions)}.",
                validation=RuleValidation(
                    type=ValidationType.PATTERN,
                    pattern="|".join(re.escape(t) for t in transitions),
                ),
                severity=Severity.MINOR,
            ))

        rules.append(StyleRule(
            id="opening-pattern",
            category=RuleCategory.RHETORICAL,
            rule=(
                "Start with a hook: bold claim, specific example, or direct statement. "
                "Never meta-reference ('In this article...')."
            ),
            validation=RuleValidation(
                type=ValidationType.PATTERN,
                pattern=self.opening_pattern(),
            ),
            severity=Severity.MAJOR,
        ))

        avoided = profile.lexical.avoided_words
        if avoided:
            rules.append(StyleRule(
                id="avoided-vocabulary",
                category=RuleCategory.LEXICAL,
                rule=f"Avoid corporate jargon: {', '.join(avoided[:JARGON_PREVIEW])}.",
                validation=RuleValidation(
                    type=ValidationType.BLACKLIST,
                    words=list(avoided),
                ),
                severity=Severity.MAJOR,
            ))

        return rules

    def opening_pattern(self) -> str:
        """Anchored, case-insensitive negative lookaheads, one per opening anti-pattern."""
        lookaheads = "".join(f"(?!{p})" for p in self.lexicon.opening_anti_patterns.values())
        return f"(?i)^{lookaheads}"

    def vocabulary_guide(self, profile: StyleProfile) -> VocabularyGuide:
        """Preferred replacements and the deduplicated banned list."""
        banned = list(dict.fromkeys(list(profile.lexical.avoided_words) + list(self.lexicon.banned)))
        return VocabularyGuide(
            preferred={k: list(v) for k, v in self.lexicon.preferred.items()},
            banned=banned,
        )
