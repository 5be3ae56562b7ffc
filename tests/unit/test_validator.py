"""Unit tests for skill_emulator.validator."""

import pytest

from skill_emulator.response import SkillResponse
from skill_emulator.script import TurnExpectation
from skill_emulator.validator import ResponseValidator, _contains, _normalize


def _response(text="Welcome to pet match", end=False, directives=None, card_title=None):
    body = {
        "shouldEndSession": end,
        "outputSpeech": {"type": "SSML", "ssml": f"<speak>{text}</speak>"},
        "reprompt": {"outputSpeech": {"type": "PlainText", "text": "What size?"}},
    }
    if directives:
        body["directives"] = directives
    if card_title:
        body["card"] = {"type": "Simple", "title": card_title}
    return SkillResponse({"version": "1.0", "response": body})


class TestNormalize:
    def test_strips_ssml_and_punctuation(self):
        assert _normalize("<speak>Hello, <break/>World!</speak>") == ["hello", "world"]

    def test_empty_string(self):
        assert _normalize("") == []


class TestContains:
    def test_contiguous_run(self):
        assert _contains(["a", "b", "c"], ["b", "c"])

    def test_out_of_order(self):
        assert not _contains(["a", "b", "c"], ["c", "b"])

    def test_empty_needle(self):
        assert _contains(["a"], [])


class TestResponseValidator:
    def setup_method(self):
        self.v = ResponseValidator()

    # -- text validation -------------------------------------------------

    def test_text_match_ignores_case_and_ssml(self):
        result = self.v.validate_text("<speak>Welcome to Pet Match!</speak>", "welcome to pet match")
        assert result.passed
        assert result.score == pytest.approx(1.0)

    def test_partial_text_scores_fraction(self):
        result = self.v.validate_text("welcome to the shop", "welcome to pet match")
        assert not result.passed
        assert result.score == pytest.approx(0.5)

    def test_missing_text(self):
        result = self.v.validate_text(None, "hello")
        assert not result.passed
        assert "<none>" in result.details

    # -- response validation ---------------------------------------------

    def test_no_expectations_pass(self):
        assert self.v.validate_response(_response(), TurnExpectation()).passed

    def test_all_checks_pass(self):
        response = _response(
            end=True,
            directives=[{"type": "Dialog.Delegate"}],
            card_title="Pet Match",
        )
        expect = TurnExpectation(
            prompt="pet match",
            reprompt="what size",
            card_title="pet match",
            directive="Dialog.Delegate",
            session_ended=True,
        )
        result = self.v.validate_response(response, expect)
        assert result.passed
        assert result.details == "all checks passed"

    def test_failures_are_reported(self):
        expect = TurnExpectation(prompt="goodbye", directive="AudioPlayer.Play", session_ended=False)
        result = self.v.validate_response(_response(), expect)
        assert not result.passed
        assert result.score == pytest.approx(1 / 3)
        assert "prompt:" in result.details
        assert "directive AudioPlayer.Play: missing" in result.details
        assert "session_ended" not in result.details
