"""Compiling style profiles into executable rule sets."""

from .models import (
    RuleCategory,
    RuleExamples,
    RuleValidation,
    Severity,
    StyleRule,
    StyleSpec,
    ValidationType,
    VocabularyGuide,
)
from .examples import ExampleMiner, SentenceFilter, is_clean_sentence
from .codifier import RuleCodifier

__all__ = [
    "RuleCategory",
    "RuleExamples",
    "RuleValidation",
    "Severity",
    "StyleRule",
    "StyleSpec",
    "ValidationType",
    "VocabularyGuide",
    "ExampleMiner",
    "SentenceFilter",
    "is_clean_sentence",
    "RuleCodifier",
]
