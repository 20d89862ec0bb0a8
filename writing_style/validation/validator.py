"""Validates candidate text against a StyleSpec.

Text is decomposed with the same preprocessing as corpus ingestion, so the
metrics a rule was derived from and the metrics it is checked against are
computed the same way.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from ..codify.models import Severity, StyleRule, StyleSpec, ValidationType
from ..config import ValidationConfig
from ..corpus.preprocessor import DecomposedText, TextPreprocessor
from ..lexicon import Lexicon
from ..utils.logging import get_logger
from ..utils.nlp import count_words, extract_headings, get_voice_detector, is_question, normalize_text

logger = get_logger(__name__)

SENTENCE_LENGTH_METRIC = "avgSentenceLength"
OPENING_RULE_ID = "opening-pattern"
BANNED_VOCABULARY_RULE_ID = "banned-vocabulary"
MAJOR_LENGTH_FACTOR = 1.5
MINOR_LENGTH_FACTOR = 0.5


@dataclass
class Violation:
    """A single rule violation."""
    rule: str
    severity: Severity
    message: str
    line: Optional[int] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {"rule": self.rule, "severity": self.severity.value, "message": self.message}
        if self.line is not None:
            data["line"] = self.line
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


@dataclass
class TextMetrics:
    """Metrics of a candidate text, named as rule metrics are."""
    avg_sentence_length: float = 0.0
    active_voice_ratio: float = 0.0
    question_ratio: float = 0.0
    avg_paragraph_length: float = 0.0
    banned_words_found: int = 0

    def get(self, metric: str) -> Optional[float]:
        return {
            "avgSentenceLength": self.avg_sentence_length,
            "activeVoiceRatio": self.active_voice_ratio,
            "questionRatio": self.question_ratio,
            "avgParagraphLength": self.avg_paragraph_length,
        }.get(metric)

    def to_dict(self) -> Dict:
        return {
            "avgSentenceLength": self.avg_sentence_length,
            "activeVoiceRatio": self.active_voice_ratio,
            "questionRatio": self.question_ratio,
            "avgParagraphLength": self.avg_paragraph_length,
            "bannedWordsFound": self.banned_words_found,
        }


@dataclass
class ValidationResult:
    """Outcome of validating one text."""
    passed: bool
    score: int
    total_checks: int = 0
    violations: List[Violation] = field(default_factory=list)
    metrics: TextMetrics = field(default_factory=TextMetrics)

    @property
    def major_violations(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.MAJOR)

    @property
    def minor_violations(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.MINOR)

    def to_dict(self) -> Dict:
        return {
            "passed": self.passed,
            "score": self.score,
            "summary": {
                "totalChecks": self.total_checks,
                "majorViolations": self.major_violations,
                "minorViolations": self.minor_violations,
            },
            "violations": [v.to_dict() for v in self.violations],
            "metrics": self.metrics.to_dict(),
        }


class StyleValidator:
    """Checks text against every rule of a StyleSpec and scores it."""

    def __init__(
        self,
        spec: StyleSpec,
        config: Optional[ValidationConfig] = None,
        lexicon: Optional[Lexicon] = None,
        voice_detector=None
    ):
        """Initialize validator.

        Args:
            spec: Rules to check.
            config: Scoring thresholds and penalties.
            lexicon: Abbreviations, voice heuristics and opening anti-patterns.
            voice_detector: Optional detector; defaults to the regex heuristics.
        """
        self.spec = spec
        self.config = config or ValidationConfig()
        self.lexicon = lexicon or Lexicon.default()
        self.preprocessor = TextPreprocessor(self.lexicon.abbreviations)
        self.voice_detector = voice_detector or get_voice_detector("regex", self.lexicon.voice)

    def validate(self, text: str) -> ValidationResult:
        """Validate text.

        Args:
            text: Candidate text, possibly markdown.

        Returns:
            ValidationResult with score, violations and metrics.
        """
        decomposed = self.preprocessor.decompose(text or "")
        if not decomposed.sentences:
            logger.warning("Nothing to validate: text has no sentences")
            return ValidationResult(passed=True, score=100)

        metrics = self.compute_metrics(decomposed)
        violations: List[Violation] = []
        checks = 0

        for rule in self.spec.rules:
            found = self._check_rule(rule, text, decomposed, metrics)
            if found is None:
                logger.debug(f"Skipping rule {rule.id}: unsupported validation")
                continue
            checks += 1
            violations.extend(found)

        vocabulary_violations = self._check_vocabulary(text)
        if self.spec.vocabulary.banned:
            checks += 1
        violations.extend(vocabulary_violations)

        metrics.banned_words_found = sum(
            1 for v in violations if v.rule in self._blacklist_rule_ids()
        )

        score = self.calculate_score(violations)
        result = ValidationResult(
            passed=False,
            score=score,
            total_checks=checks,
            violations=violations,
            metrics=metrics,
        )
        result.passed = (
            score >= self.config.pass_score
            and result.major_violations <= self.config.max_major_violations
        )

        logger.info(
            f"Validation {'passed' if result.passed else 'failed'} with score {score}",
            extra_data={
                "score": score,
                "major": result.major_violations,
                "minor": result.minor_violations,
            }
        )
        return result

    def compute_metrics(self, decomposed: DecomposedText) -> TextMetrics:
        sentences = decomposed.sentences
        lengths = [count_words(s) for s in sentences]
        passive = sum(1 for s in sentences if self.voice_detector.is_passive(s))
        paragraph_lengths = [
            len(p) for p in decomposed.paragraph_sentences(self.lexicon.abbreviations)
        ]
        return TextMetrics(
            avg_sentence_length=float(np.mean(lengths)),
            active_voice_ratio=1 - passive / len(sentences),
            question_ratio=sum(1 for s in sentences if is_question(s)) / len(sentences),
            avg_paragraph_length=float(np.mean(paragraph_lengths)) if paragraph_lengths else 0.0,
        )

    def calculate_score(self, violations: List[Violation]) -> int:
        score = 100
        for v in violations:
            if v.severity == Severity.MAJOR:
                score -= self.config.major_penalty
            else:
                score -= self.config.minor_penalty
        return max(0, score)

    def _check_rule(
        self,
        rule: StyleRule,
        text: str,
        decomposed: DecomposedText,
        metrics: TextMetrics
    ) -> Optional[List[Violation]]:
        vtype = rule.validation.type
        if vtype == ValidationType.RANGE and rule.validation.metric == SENTENCE_LENGTH_METRIC:
            return self._check_sentence_lengths(rule, decomposed.sentences)
        if vtype in (ValidationType.RANGE, ValidationType.THRESHOLD):
            return self._check_metric(rule, metrics)
        if vtype == ValidationType.BLACKLIST:
            return self._check_blacklist(rule.id, rule.validation.words or [], text, rule.severity)
        if vtype == ValidationType.PATTERN:
            if rule.id == OPENING_RULE_ID:
                return self._check_opening(rule, text, decomposed)
            return self._check_advisory_pattern(rule, decomposed.sentences)
        return None

    def _check_sentence_lengths(self, rule: StyleRule, sentences: List[str]) -> List[Violation]:
        low = rule.validation.min
        high = rule.validation.max
        violations = []
        for idx, sentence in enumerate(sentences):
            words = count_words(sentence)
            too_short = low is not None and words < low
            too_long = high is not None and words > high
            if not (too_short or too_long):
                continue
            major = (
                (high is not None and words > high * MAJOR_LENGTH_FACTOR)
                or (low is not None and words < low * MINOR_LENGTH_FACTOR)
            )
            violations.append(Violation(
                rule=rule.id,
                severity=Severity.MAJOR if major else Severity.MINOR,
                message=f"Sentence {idx + 1} has {words} words (target: {low}-{high})",
                suggestion="Break into multiple sentences" if too_long else "Consider expanding for clarity",
            ))
        return violations

    def _check_metric(self, rule: StyleRule, metrics: TextMetrics) -> Optional[List[Violation]]:
        value = metrics.get(rule.validation.metric)
        if value is None:
            return None
        low = rule.validation.min
        high = rule.validation.max
        if low is not None and value < low:
            bound = f"min {low:.2f}"
        elif high is not None and value > high:
            bound = f"max {high:.2f}"
        else:
            return []
        return [Violation(
            rule=rule.id,
            severity=rule.severity,
            message=f"{rule.validation.metric} is {value:.2f} ({bound})",
            suggestion=rule.rule,
        )]

    def _check_blacklist(
        self,
        rule_id: str,
        words: List[str],
        text: str,
        severity: Severity
    ) -> List[Violation]:
        violations = []
        lines = normalize_text(text).split("\n")
        for word in words:
            pattern = re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)
            for line_no, line in enumerate(lines, start=1):
                count = len(pattern.findall(line))
                if not count:
                    continue
                plain = self.spec.vocabulary.suggestion_for(word)
                violations.append(Violation(
                    rule=rule_id,
                    severity=severity,
                    message=f'Avoided word "{word}" found ({count}x)',
                    line=line_no,
                    suggestion=f'Use "{plain}" instead' if plain else "Remove or rephrase",
                ))
        return violations

    def _check_vocabulary(self, text: str) -> List[Violation]:
        """Banned vocabulary not already covered by a blacklist rule."""
        covered = {
            w.lower()
            for rule in self.spec.rules if rule.validation.type == ValidationType.BLACKLIST
            for w in (rule.validation.words or [])
        }
        extra = [w for w in self.spec.vocabulary.banned if w.lower() not in covered]
        return self._check_blacklist(BANNED_VOCABULARY_RULE_ID, extra, text, Severity.MAJOR)

    def _check_opening(self, rule: StyleRule, text: str, decomposed: DecomposedText) -> List[Violation]:
        headings = {h for _, h in extract_headings(normalize_text(text))}
        opening = next((s for s in decomposed.sentences if s not in headings), None)
        if opening is None or re.match(rule.validation.pattern, opening, re.IGNORECASE):
            return []

        name = next(
            (n for n, p in self.lexicon.opening_anti_patterns.items()
             if re.match(p, opening, re.IGNORECASE)),
            None
        )
        message = (
            f"Opening uses discouraged pattern: {name}" if name
            else "Opening does not match the required pattern"
        )
        return [Violation(
            rule=rule.id,
            severity=rule.severity,
            message=message,
            line=self._line_of(text, opening),
            suggestion="Start with a hook: question, bold claim, or specific example",
        )]

    def _check_advisory_pattern(self, rule: StyleRule, sentences: List[str]) -> List[Violation]:
        if len(sentences) < self.config.min_sentences_for_transitions:
            return []
        pattern = re.compile(rf"\b(?:{rule.validation.pattern})\b", re.IGNORECASE)
        if any(pattern.search(s) for s in sentences):
            return []
        return [Violation(
            rule=rule.id,
            severity=Severity.MINOR,
            message="No preferred transitions used",
            suggestion=rule.rule,
        )]

    def _blacklist_rule_ids(self) -> set:
        ids = {r.id for r in self.spec.rules if r.validation.type == ValidationType.BLACKLIST}
        ids.add(BANNED_VOCABULARY_RULE_ID)
        return ids

    @staticmethod
    def _line_of(text: str, sentence: str) -> Optional[int]:
        needle = sentence.split("\n")[0][:40]
        for line_no, line in enumerate(normalize_text(text).split("\n"), start=1):
            if needle and needle in line:
                return line_no
        return None
