"""Unit tests for skill_emulator.response."""

import pytest

from skill_emulator.errors import SkillInvocationError
from skill_emulator.response import SkillResponse, get_path

FULL_RESPONSE = {
    "version": "1.0",
    "sessionAttributes": {"counter": 2, "user": {"name": "jo"}},
    "response": {
        "shouldEndSession": False,
        "outputSpeech": {"type": "SSML", "ssml": "<speak>Hello</speak>"},
        "reprompt": {"outputSpeech": {"type": "PlainText", "text": "Still there?"}},
        "card": {
            "type": "Standard",
            "title": "Greeting",
            "content": "Hello",
            "image": {"smallImageUrl": "https://img/s.png", "largeImageUrl": "https://img/l.png"},
        },
        "directives": [
            {
                "type": "Display.RenderTemplate",
                "template": {
                    "type": "ListTemplate1",
                    "textContent": {"primaryText": {"text": "Main"}},
                    "listItems": [
                        {
                            "token": "item-1",
                            "textContent": {
                                "primaryText": {"text": "First"},
                                "secondaryText": {"text": "One"},
                            },
                        }
                    ],
                },
            },
            {"type": "Hint", "hint": {"text": "try again"}},
        ],
    },
}


@pytest.fixture
def response() -> SkillResponse:
    return SkillResponse(FULL_RESPONSE)


def test_get_path():
    data = {"a": {"b": [{"c": 1}]}}
    assert get_path(data, "a.b.0.c") == 1
    assert get_path(data, "a.x", "default") == "default"
    assert get_path(data, "a.b.5") is None


def test_basic_fields(response):
    assert response.version == "1.0"
    assert response.should_end_session is False
    assert response.get("response.card.type") == "Standard"


def test_speech_prefers_ssml(response):
    assert response.prompt() == "<speak>Hello</speak>"
    assert response.reprompt() == "Still there?"


def test_card_accessors(response):
    assert response.card()["title"] == "Greeting"
    assert response.card_title() == "Greeting"
    assert response.card_content() == "Hello"
    assert response.card_small_image() == "https://img/s.png"
    assert response.card_large_image() == "https://img/l.png"
    assert response.card_image()["smallImageUrl"] == "https://img/s.png"


def test_session_attributes(response):
    assert response.attr("counter") == 2
    assert response.attr("user.name") == "jo"
    assert response.attrs("counter", "missing") == {"counter": 2}


def test_directives(response):
    assert len(response.directives) == 2
    assert response.directive("Hint")["hint"]["text"] == "try again"
    assert response.directive("AudioPlayer.Play") is None


def test_display_text(response):
    assert response.display()["type"] == "ListTemplate1"
    assert response.primary_text() == "Main"
    assert response.primary_text("item-1") == "First"
    assert response.secondary_text("item-1") == "One"
    assert response.tertiary_text("item-1") is None
    assert response.primary_text("item-9") is None


def test_empty_response():
    response = SkillResponse({"version": "1.0", "response": {}})
    assert response.prompt() is None
    assert response.reprompt() is None
    assert response.card() is None
    assert response.directives == []
    assert response.display() is None
    assert response.should_end_session is False
    assert response.session_attributes == {}


def test_null_directives_tolerated():
    assert SkillResponse({"response": {"directives": None}}).directives == []


@pytest.mark.parametrize("raw", [["not", "a", "dict"], "text"])
def test_non_object_rejected(raw):
    with pytest.raises(SkillInvocationError, match="must be a JSON object"):
        SkillResponse(raw)


def test_malformed_envelope_rejected():
    with pytest.raises(SkillInvocationError, match="Malformed skill response"):
        SkillResponse({"response": {"shouldEndSession": {"nested": True}}})
