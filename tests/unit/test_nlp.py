"""Unit tests for shared text decomposition."""

import pytest
from unittest.mock import MagicMock

from writing_style.utils.nlp import (
    RegexVoiceDetector,
    SpacyVoiceDetector,
    clean_markdown,
    count_words,
    extract_headings,
    extract_title,
    get_voice_detector,
    is_question,
    normalize_text,
    split_into_paragraphs,
    split_into_sentences,
    tokenize,
)


class TestSentenceSplitting:
    """Test sentence boundary heuristics."""

    def test_basic_split(self):
        sentences = split_into_sentences("First one. Second one! Third one?")
        assert sentences == ["First one.", "Second one!", "Third one?"]

    def test_abbreviations_protected(self):
        text = "Dr. Smith met Mr. Jones at noon. They talked."
        assert split_into_sentences(text) == [
            "Dr. Smith met Mr. Jones at noon.",
            "They talked.",
        ]

    def test_lowercase_continuation_not_split(self):
        text = "Bring fruit, e.g. apples and pears. Then rest."
        assert len(split_into_sentences(text)) == 2

    def test_custom_abbreviations(self):
        text = "See Fig. Three for details. Done."
        assert len(split_into_sentences(text, ["Fig."])) == 2
        assert len(split_into_sentences(text, [])) == 3

    def test_empty(self):
        assert split_into_sentences("") == []
        assert split_into_sentences("   \n ") == []


class TestParagraphs:
    """Test paragraph splitting and markdown handling."""

    def test_split_on_blank_lines(self):
        text = "One.\n\nTwo.\n   \nThree."
        assert split_into_paragraphs(text) == ["One.", "Two.", "Three."]

    def test_extract_headings(self):
        text = "# Title\n\nBody.\n\n## Section two\n\nMore."
        assert extract_headings(text) == [(1, "Title"), (2, "Section two")]

    def test_extract_title(self):
        assert extract_title("Intro\n# The Title\n") == "The Title"
        assert extract_title("No heading here.") is None

    def test_clean_markdown(self):
        text = "## Head\n\nSome **bold** and _italic_ with a [link](http://x.y).\n\n```\ncode\n```"
        cleaned = clean_markdown(text)

        assert "##" not in cleaned
        assert "**" not in cleaned
        assert "link" in cleaned
        assert "http" not in cleaned
        assert "code" not in cleaned

    def test_normalize_text(self):
        text = "“Quoted” it’s here\r\n"
        assert normalize_text(text) == "\"Quoted\" it's here\n"


class TestTokens:
    """Test word-level helpers."""

    def test_count_words(self):
        assert count_words("one  two\nthree") == 3
        assert count_words("") == 0

    def test_tokenize(self):
        assert tokenize("It's a well-known FACT, 42 times.") == ["it's", "well-known", "fact", "times"]

    def test_is_question(self):
        assert is_question("Why not?")
        assert not is_question("Because.")


class TestVoiceDetectors:
    """Test voice detector selection."""

    def test_regex_detector(self):
        detector = get_voice_detector("regex")
        assert isinstance(detector, RegexVoiceDetector)
        assert detector.is_passive("The cake was eaten.")
        assert not detector.is_passive("We ate the cake.")

    def test_spacy_detector_uses_dependency_labels(self):
        token = MagicMock()
        token.dep_ = "auxpass"
        nlp = MagicMock(return_value=[token])

        detector = SpacyVoiceDetector(nlp=nlp)

        assert detector.is_passive("The cake was eaten.")
        nlp.assert_called_once_with("The cake was eaten.")

    def test_unknown_detector(self):
        with pytest.raises(ValueError):
            get_voice_detector("crystal-ball")
