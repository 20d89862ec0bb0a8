"""Unit tests for style validation."""

import pytest

from writing_style.codify.codifier import RuleCodifier
from writing_style.codify.models import (
    RuleCategory,
    RuleValidation,
    Severity,
    StyleRule,
    StyleSpec,
    ValidationType,
    VocabularyGuide,
)
from writing_style.config import ValidationConfig
from writing_style.corpus.analyzer import StyleProfileAnalyzer
from writing_style.pipeline import ingest
from writing_style.validation.validator import StyleValidator, Violation

from tests.fixtures.sample_corpus import style_corpus, style_document


def make_spec(*rules, preferred=None, banned=None):
    return StyleSpec(
        generated_at="2026-01-01T00:00:00Z",
        rules=list(rules),
        vocabulary=VocabularyGuide(preferred=preferred or {}, banned=banned or []),
    )


def sentence_length_rule(low=12, high=24):
    return StyleRule(
        id="sentence-length",
        category=RuleCategory.SYNTACTIC,
        rule=f"Target {low}-{high} words per sentence.",
        validation=RuleValidation(
            type=ValidationType.RANGE, metric="avgSentenceLength", min=low, max=high
        ),
        severity=Severity.MINOR,
    )


def blacklist_rule(words):
    return StyleRule(
        id="avoided-vocabulary",
        category=RuleCategory.LEXICAL,
        rule="Avoid jargon.",
        validation=RuleValidation(type=ValidationType.BLACKLIST, words=words),
        severity=Severity.MAJOR,
    )


def words(n, word="word"):
    return " ".join([word.capitalize()] + [word] * (n - 1)) + "."


@pytest.fixture(scope="module")
def corpus_spec():
    documents = ingest(style_corpus(50)).documents
    profile = StyleProfileAnalyzer().analyze(documents)
    return RuleCodifier().codify(profile, documents[:5])


class TestSentenceLength:
    """Test per-sentence length checks."""

    def test_very_long_sentence_is_major(self):
        validator = StyleValidator(make_spec(sentence_length_rule()))
        result = validator.validate(words(45))

        assert len(result.violations) == 1
        violation = result.violations[0]
        assert violation.severity == Severity.MAJOR
        assert "45 words" in violation.message
        assert violation.suggestion == "Break into multiple sentences"

    def test_slightly_long_sentence_is_minor(self):
        result = StyleValidator(make_spec(sentence_length_rule())).validate(words(30))
        assert result.violations[0].severity == Severity.MINOR

    def test_short_sentence(self):
        result = StyleValidator(make_spec(sentence_length_rule())).validate(words(8))

        assert result.violations[0].severity == Severity.MINOR
        assert result.violations[0].suggestion == "Consider expanding for clarity"

    def test_very_short_sentence_is_major(self):
        result = StyleValidator(make_spec(sentence_length_rule())).validate(words(4))
        assert result.violations[0].severity == Severity.MAJOR

    def test_in_range(self):
        result = StyleValidator(make_spec(sentence_length_rule())).validate(words(18))

        assert result.violations == []
        assert result.score == 100


class TestVocabulary:
    """Test blacklist and banned vocabulary checks."""

    def test_one_violation_per_word_and_line(self):
        spec = make_spec(
            blacklist_rule(["leverage", "synergy"]),
            preferred={"use": ["leverage"]},
        )
        text = "We leverage synergy daily.\nThen we Leverage it again and leverage more."
        violations = StyleValidator(spec).validate(text).violations

        found = sorted((v.message.split('"')[1], v.line) for v in violations)
        assert found == [("leverage", 1), ("leverage", 2), ("synergy", 1)]
        second_line = next(v for v in violations if v.line == 2)
        assert "(2x)" in second_line.message
        assert second_line.suggestion == 'Use "use" instead'

    def test_whole_words_only(self):
        spec = make_spec(blacklist_rule(["paradigm"]))
        assert StyleValidator(spec).validate("Paradigms shift slowly here.").violations == []

    def test_banned_vocabulary_outside_rules(self):
        spec = make_spec(blacklist_rule(["synergy"]), banned=["synergy", "bandwidth"])
        result = StyleValidator(spec).validate("We lack bandwidth. We want synergy.")

        rules = sorted(v.rule for v in result.violations)
        assert rules == ["avoided-vocabulary", "banned-vocabulary"]
        assert result.metrics.banned_words_found == 2
        assert result.total_checks == 2


class TestOpening:
    """Test opening anti-pattern detection."""

    @pytest.fixture
    def validator(self):
        pattern = RuleCodifier().opening_pattern()
        opening = StyleRule(
            id="opening-pattern",
            category=RuleCategory.RHETORICAL,
            rule="Start with a hook.",
            validation=RuleValidation(type=ValidationType.PATTERN, pattern=pattern),
            severity=Severity.MAJOR,
        )
        return StyleValidator(make_spec(opening))

    def test_meta_reference(self, validator):
        result = validator.validate("In this article we cover fees. Fees fell.")

        assert len(result.violations) == 1
        assert "meta-reference" in result.violations[0].message
        assert result.violations[0].line == 1

    def test_heading_skipped(self, validator):
        result = validator.validate("# Fees\n\nIn this post we cover fees.")

        assert result.violations[0].line == 3

    def test_heading_directly_above_opening(self, validator):
        result = validator.validate("# Title\nIn this article we explain the plan.")

        assert len(result.violations) == 1
        assert "meta-reference" in result.violations[0].message
        assert result.violations[0].line == 2

    @pytest.mark.parametrize("text,name", [
        ("in this article we cover fees.", "meta-reference"),
        ("IT IS IMPORTANT TO understand fees.", "throat-clearing"),
        ("let me begin by defining fees.", "unnecessary-preamble"),
    ])
    def test_anti_patterns_ignore_case(self, validator, text, name):
        result = validator.validate(text)

        assert len(result.violations) == 1
        assert name in result.violations[0].message

    def test_good_opening(self, validator):
        assert validator.validate("# Fees\n\nFees fell by ninety percent.").violations == []


class TestMetricRules:
    """Test threshold and advisory pattern rules."""

    def test_active_voice_threshold(self):
        rule = StyleRule(
            id="active-voice",
            category=RuleCategory.SYNTACTIC,
            rule="Prefer active voice.",
            validation=RuleValidation(
                type=ValidationType.THRESHOLD, metric="activeVoiceRatio", min=0.7
            ),
            severity=Severity.MAJOR,
        )
        text = "The bill was passed by the senate. The law was signed by the president."
        result = StyleValidator(make_spec(rule)).validate(text)

        assert result.metrics.active_voice_ratio == 0
        assert result.violations[0].severity == Severity.MAJOR
        assert "min 0.70" in result.violations[0].message

    def test_transitions_advisory(self):
        rule = StyleRule(
            id="transitions",
            category=RuleCategory.STRUCTURAL,
            rule="Use clear transitions.",
            validation=RuleValidation(type=ValidationType.PATTERN, pattern="however|for\\ example"),
            severity=Severity.MINOR,
        )
        validator = StyleValidator(make_spec(rule))
        eight = " ".join(words(6, w) for w in ["alpha", "beta", "gamma", "delta",
                                                "epsilon", "zeta", "eta", "theta"])

        assert len(validator.validate(eight).violations) == 1
        assert validator.validate(eight + " However, it works.").violations == []
        assert validator.validate(" ".join(words(6) for _ in range(7))).violations == []


class TestScoring:
    """Test score and pass/fail logic."""

    def test_empty_text_passes(self):
        result = StyleValidator(make_spec(sentence_length_rule())).validate("  ")

        assert result.passed
        assert result.score == 100
        assert result.total_checks == 0

    def test_score_deductions(self):
        validator = StyleValidator(make_spec())
        violations = [
            Violation("a", Severity.MAJOR, "m"),
            Violation("b", Severity.MINOR, "m"),
        ]
        assert validator.calculate_score(violations) == 87
        assert validator.calculate_score([Violation("a", Severity.MAJOR, "m")] * 20) == 0

    def test_too_many_majors_fail(self):
        validator = StyleValidator(make_spec(sentence_length_rule()))
        text = " ".join(words(45) for _ in range(3))
        result = validator.validate(text)

        assert result.score == 70
        assert result.major_violations == 3
        assert not result.passed

    def test_low_score_fails(self):
        config = ValidationConfig(pass_score=95)
        result = StyleValidator(make_spec(sentence_length_rule()), config).validate(words(30))

        assert result.score == 97
        assert result.passed
        result = StyleValidator(make_spec(sentence_length_rule()), config).validate(
            f"{words(30)} {words(30)}"
        )
        assert result.score == 94
        assert not result.passed

    def test_result_dict(self):
        result = StyleValidator(make_spec(sentence_length_rule())).validate(words(45))
        data = result.to_dict()

        assert data["summary"] == {"totalChecks": 1, "majorViolations": 1, "minorViolations": 0}
        assert data["violations"][0]["severity"] == "major"
        assert data["metrics"]["avgSentenceLength"] == 45


class TestCorpusConformance:
    """Text from the corpus satisfies the rules derived from it."""

    def test_corpus_document_passes(self, corpus_spec):
        result = StyleValidator(corpus_spec).validate(style_document(7))

        assert result.violations == []
        assert result.passed
        assert result.score == 100

    def test_jargon_fails(self, corpus_spec):
        text = "In this article we leverage synergy to disrupt the paradigm."
        result = StyleValidator(corpus_spec).validate(text)

        assert not result.passed
        assert result.major_violations >= 3
