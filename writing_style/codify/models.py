"""Data models for codified style rules."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

SPEC_VERSION = "1.0"


class RuleCategory(Enum):
    """Which aspect of style a rule governs."""
    LEXICAL = "lexical"
    SYNTACTIC = "syntactic"
    RHYTHMIC = "rhythmic"
    STRUCTURAL = "structural"
    RHETORICAL = "rhetorical"


class ValidationType(Enum):
    """How a rule is checked."""
    RANGE = "range"           # metric within [min, max]
    THRESHOLD = "threshold"   # metric >= min
    BLACKLIST = "blacklist"   # none of the words appear
    PATTERN = "pattern"       # regex matches


class Severity(Enum):
    MAJOR = "major"
    MINOR = "minor"


@dataclass
class RuleValidation:
    """Machine-checkable part of a rule."""
    type: ValidationType
    metric: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    words: Optional[List[str]] = None
    pattern: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {"type": self.type.value}
        for key in ("metric", "min", "max", "words", "pattern"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "RuleValidation":
        return cls(
            type=ValidationType(data["type"]),
            metric=data.get("metric"),
            min=data.get("min"),
            max=data.get("max"),
            words=data.get("words"),
            pattern=data.get("pattern"),
        )


@dataclass
class RuleExamples:
    """Sentences from the exemplars illustrating a rule."""
    good: List[str] = field(default_factory=list)
    bad: Optional[List[str]] = None

    def to_dict(self) -> Dict:
        data = {"good": list(self.good)}
        if self.bad:
            data["bad"] = list(self.bad)
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "RuleExamples":
        return cls(good=list(data.get("good", [])), bad=data.get("bad"))


@dataclass
class StyleRule:
    """A single style rule."""
    id: str
    category: RuleCategory
    rule: str
    validation: RuleValidation
    severity: Severity
    examples: Optional[RuleExamples] = None

    @property
    def is_major(self) -> bool:
        return self.severity == Severity.MAJOR

    def to_dict(self) -> Dict:
        data = {
            "id": self.id,
            "category": self.category.value,
            "rule": self.rule,
            "validation": self.validation.to_dict(),
            "severity": self.severity.value,
        }
        if self.examples is not None:
            data["examples"] = self.examples.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "StyleRule":
        examples = data.get("examples")
        return cls(
            id=data["id"],
            category=RuleCategory(data["category"]),
            rule=data.get("rule", ""),
            validation=RuleValidation.from_dict(data["validation"]),
            severity=Severity(data["severity"]),
            examples=RuleExamples.from_dict(examples) if examples else None,
        )


@dataclass
class VocabularyGuide:
    """Preferred plain words and banned terms."""
    preferred: Dict[str, List[str]] = field(default_factory=dict)
    banned: List[str] = field(default_factory=list)

    def suggestion_for(self, word: str) -> Optional[str]:
        """The plain word that replaces ``word``, if any."""
        word = word.lower()
        for plain, avoided in self.preferred.items():
            if word in (a.lower() for a in avoided):
                return plain
        return None

    def to_dict(self) -> Dict:
        return {
            "preferred": {k: list(v) for k, v in self.preferred.items()},
            "banned": list(self.banned),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "VocabularyGuide":
        return cls(
            preferred={k: list(v) for k, v in data.get("preferred", {}).items()},
            banned=list(data.get("banned", [])),
        )


@dataclass
class StyleSpec:
    """Executable rule set compiled from a style profile."""
    generated_at: str
    document_count: int = 0
    total_words: int = 0
    rules: List[StyleRule] = field(default_factory=list)
    vocabulary: VocabularyGuide = field(default_factory=VocabularyGuide)
    exemplar_ids: List[str] = field(default_factory=list)
    version: str = SPEC_VERSION

    def get_rule(self, rule_id: str) -> Optional[StyleRule]:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def to_dict(self) -> Dict:
        """Convert to dictionary for storage."""
        return {
            "version": self.version,
            "generatedAt": self.generated_at,
            "corpusStats": {
                "documentCount": self.document_count,
                "totalWords": self.total_words,
            },
            "rules": [r.to_dict() for r in self.rules],
            "vocabulary": self.vocabulary.to_dict(),
            "exemplarIds": list(self.exemplar_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "StyleSpec":
        """Create from dictionary."""
        stats = data.get("corpusStats", {})
        return cls(
            version=data.get("version", SPEC_VERSION),
            generated_at=data.get("generatedAt", ""),
            document_count=stats.get("documentCount", 0),
            total_words=stats.get("totalWords", 0),
            rules=[StyleRule.from_dict(r) for r in data.get("rules", [])],
            vocabulary=VocabularyGuide.from_dict(data.get("vocabulary", {})),
            exemplar_ids=list(data.get("exemplarIds", [])),
        )
