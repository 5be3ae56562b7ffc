"""Unit tests for utterance matching (skill_emulator.matcher via InteractionModel)."""

import pytest

from skill_emulator.errors import NoMatchError
from skill_emulator.loader import load_intent_schema
from skill_emulator.model import InteractionModel
from skill_emulator.slot_types import SlotType

INTENT_SCHEMA = {
    "intents": [
        {"intent": "Play"},
        {"intent": "Hello"},
        {"intent": "NoSampleUtterances"},
        {"intent": "SlottedIntent", "slots": [{"name": "SlotName", "type": "SLOT_TYPE"}]},
        {
            "intent": "MultipleSlots",
            "slots": [
                {"name": "SlotA", "type": "SLOT_TYPE"},
                {"name": "SlotB", "type": "SLOT_TYPE"},
            ],
        },
        {"intent": "CustomSlot", "slots": [{"name": "country", "type": "COUNTRY_CODE"}]},
        {"intent": "NumberSlot", "slots": [{"name": "number", "type": "AMAZON.NUMBER"}]},
        {"intent": "StringSlot", "slots": [{"name": "stringSlot", "type": "StringSlotType"}]},
        {"intent": "AMAZON.HelpIntent"},
    ]
}

SAMPLE_UTTERANCES = {
    "CustomSlot": ["{country}"],
    "Hello": ["hi", "hello", "hi there", "good morning"],
    "MultipleSlots": ["multiple {SlotA} and {SlotB}", "reversed {SlotB} then {SlotA}", "{SlotA}"],
    "NumberSlot": ["{number}", "{number} test"],
    "Play": ["play", "play next", "play now"],
    "SlottedIntent": ["slot {SlotName}"],
    "StringSlot": ["{stringSlot}"],
}

COUNTRY_CODE = {
    "name": "COUNTRY_CODE",
    "values": [
        {"id": "US", "name": {"value": "US", "synonyms": ["USA", "America", "US"]}},
        {"id": "DE", "name": {"value": "DE", "synonyms": ["Germany", "DE"]}},
        {
            "id": "UK",
            "name": {
                "value": "UK",
                "synonyms": ["England", "Britain", "UK", "United Kingdom", "Great Britain"],
            },
        },
    ],
}


@pytest.fixture(scope="module")
def model() -> InteractionModel:
    base = load_intent_schema(INTENT_SCHEMA, SAMPLE_UTTERANCES)
    return InteractionModel(base.intents, [SlotType.from_json(COUNTRY_CODE)])


# ---------------------------------------------------------------------------
# Intent selection
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("utterance", ["play", "Play", "play?"])
def test_simple_phrase(model, utterance):
    assert model.utterance(utterance).intent == "Play"


def test_builtin_phrase(model):
    assert model.utterance("help").intent == "AMAZON.HelpIntent"


@pytest.mark.parametrize("utterance", ["good? #%.morning", "good, -morning:", "hi"])
def test_punctuation_and_literal_phrases(model, utterance):
    assert model.utterance(utterance).intent == "Hello"


def test_no_match_raises(model):
    model_without_catch_all = load_intent_schema(
        {"intents": [{"intent": "Play"}]}, {"Play": ["play"]}
    )
    with pytest.raises(NoMatchError, match="Unable to match utterance: dance to an intent"):
        model_without_catch_all.utterance("dance")


# ---------------------------------------------------------------------------
# Slots
# ---------------------------------------------------------------------------


def test_slotted_phrase(model):
    match = model.utterance("slot value")
    assert match.intent == "SlottedIntent"
    assert match.slots() == {"SlotName": "value"}
    assert match.slot("slotname") == "value"


def test_slotted_phrase_without_value(model):
    match = model.utterance("slot")
    assert match.intent == "SlottedIntent"
    assert match.slots() == {}


def test_multiple_slots(model):
    match = model.utterance("multiple a and b")
    assert match.intent == "MultipleSlots"
    assert match.slots() == {"SlotA": "a", "SlotB": "b"}


def test_multiple_slots_reversed(model):
    match = model.utterance("reversed a then b")
    assert match.intent == "MultipleSlots"
    assert match.slot_names == ("SlotB", "SlotA")
    assert match.slots() == {"SlotA": "b", "SlotB": "a"}


def test_enumerated_slot_beats_free_text(model):
    match = model.utterance("US")
    assert match.intent == "CustomSlot"
    assert match.slots() == {"country": "US"}


def test_number_slot(model):
    match = model.utterance("19801")
    assert match.intent == "NumberSlot"
    assert match.slots() == {"number": "19801"}


@pytest.mark.parametrize(
    "utterance, expected",
    [("one", "one"), ("Thirteen", "Thirteen"), (" ten ", "ten")],
)
def test_long_form_number_slot(model, utterance, expected):
    match = model.utterance(utterance)
    assert match.intent == "NumberSlot"
    assert match.slot("number") == expected


def test_letters_do_not_fill_number_slot(model):
    assert model.utterance("19801a test").intent == "MultipleSlots"


def test_more_literal_text_wins(model):
    match = model.utterance("1900 test")
    assert match.intent == "NumberSlot"
    assert match.sample.phrase == "{number} test"


def test_capture_must_sit_on_word_boundaries():
    model = load_intent_schema(
        {"intents": [{"intent": "Slotted", "slots": [{"name": "thing"}]}, {"intent": "Other"}]},
        {"Slotted": ["slot {thing}"], "Other": ["slotted"]},
    )
    assert model.utterance("slotted").intent == "Other"
    assert model.utterance("slot machine").slots() == {"thing": "machine"}
