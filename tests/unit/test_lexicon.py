"""Unit tests for the injectable lexicon."""

import json
import pytest

from writing_style.errors import ConfigError
from writing_style.lexicon import Lexicon, VoiceHeuristics, load_lexicon


class TestVoiceHeuristics:
    """Test passive voice patterns."""

    @pytest.fixture
    def patterns(self):
        return VoiceHeuristics().passive_patterns()

    def _passive(self, patterns, sentence):
        return any(p.search(sentence) for p in patterns)

    def test_be_verb_participle(self, patterns):
        assert self._passive(patterns, "The letter was written yesterday.")
        assert self._passive(patterns, "The bugs were fixed quickly.")

    def test_agent_pattern(self, patterns):
        assert self._passive(patterns, "It got approved by the board.")

    def test_active_sentence(self, patterns):
        assert not self._passive(patterns, "She wrote the letter yesterday.")

    def test_agent_pattern_can_be_disabled(self):
        patterns = VoiceHeuristics(use_agent_pattern=False).passive_patterns()
        assert not any(p.search("It got approved by the board.") for p in patterns)


class TestLexicon:
    """Test lexicon defaults and overlays."""

    def test_default_lists(self):
        lexicon = Lexicon.default()

        assert "Dr." in lexicon.abbreviations
        assert "synergy" in lexicon.banned
        assert lexicon.preferred["use"] == ["utilize", "utilise"]
        assert "meta-reference" in lexicon.opening_anti_patterns
        assert "the" in lexicon.stopword_set

    def test_defaults_are_not_shared(self):
        a = Lexicon.default()
        b = Lexicon.default()
        a.banned.append("thing")

        assert "thing" not in b.banned

    def test_from_dict_overlays(self):
        lexicon = Lexicon.from_dict({"banned": ["foo"], "voice": {"be_verbs": ["was"]}})

        assert lexicon.banned == ["foo"]
        assert lexicon.voice.be_verbs == ["was"]
        assert lexicon.voice.participle_suffixes == ["ed", "en"]
        assert "Dr." in lexicon.abbreviations

    def test_unknown_keys_rejected(self):
        with pytest.raises(ConfigError):
            Lexicon.from_dict({"colours": ["red"]})

    def test_invalid_opening_pattern_rejected(self):
        with pytest.raises(ConfigError):
            Lexicon.from_dict({"opening_anti_patterns": {"broken": "(unclosed"}})

    def test_round_trip(self):
        lexicon = Lexicon.default()
        assert Lexicon.from_dict(lexicon.to_dict()) == lexicon

    def test_load_lexicon(self, tmp_path):
        path = tmp_path / "lexicon.json"
        path.write_text(json.dumps({"transitions": ["meanwhile"]}))

        assert load_lexicon(str(path)).transitions == ["meanwhile"]

    def test_load_missing_lexicon(self, tmp_path):
        with pytest.raises(ConfigError):
            load_lexicon(str(tmp_path / "missing.json"))
