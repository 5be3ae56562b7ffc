"""Unit tests for skill_emulator.loader."""

import json

import pytest

from skill_emulator.errors import ModelError
from skill_emulator.loader import (
    default_model_path,
    load_intent_schema_files,
    load_interaction_model,
    load_interaction_model_file,
    parse_sample_utterances,
)

LANGUAGE_MODEL = {
    "invocationName": "greeter",
    "intents": [{"name": "Hello", "samples": ["hi", "hello {name}"], "slots": [{"name": "name"}]}],
    "types": [{"name": "GREETING", "values": [{"id": "hi", "name": {"value": "hi"}}]}],
}


# ---------------------------------------------------------------------------
# Unified model
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "document",
    [
        LANGUAGE_MODEL,
        {"languageModel": LANGUAGE_MODEL},
        {"interactionModel": {"languageModel": LANGUAGE_MODEL}},
    ],
)
def test_accepts_every_wrapping(document):
    model = load_interaction_model(document)
    assert model.has_intent("Hello")
    assert "GREETING" in model.slot_types
    assert model.utterance("hello bob").slots() == {"name": "bob"}


def test_no_intents_raises():
    with pytest.raises(ModelError, match="no intents"):
        load_interaction_model({"interactionModel": {"languageModel": {"types": []}}})


def test_malformed_slot_type_raises():
    document = {"intents": [{"name": "Hello"}], "types": [{"values": []}]}
    with pytest.raises(ModelError, match="Malformed interaction model"):
        load_interaction_model(document)


def test_dialog_and_prompts_are_loaded(pet_match_model_path):
    model = load_interaction_model_file(pet_match_model_path)
    assert model.dialog_intent("PetMatchIntent") is not None
    prompt = model.prompt("Elicit.Slot.temperament")
    assert prompt.text({"size": "small"}).endswith("your small dog?")


def test_missing_file(tmp_path):
    missing = tmp_path / "en-US.json"
    with pytest.raises(ModelError, match="interaction model could not be found"):
        load_interaction_model_file(missing)


def test_malformed_json(tmp_path):
    path = tmp_path / "en-US.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ModelError, match="Malformed interaction model"):
        load_interaction_model_file(path)


def test_default_model_path():
    assert default_model_path("de-DE").as_posix() == "models/de-DE.json"


# ---------------------------------------------------------------------------
# Legacy intent schema + sample utterances
# ---------------------------------------------------------------------------


class TestSampleUtterances:
    def test_parses_lines_and_skips_blanks(self):
        utterances = parse_sample_utterances("Play play\n\nPlay play next\nHello hi\n")
        assert utterances == {"Play": ["play", "play next"], "Hello": ["hi"]}

    def test_line_without_sample_raises(self):
        with pytest.raises(ModelError, match="Invalid sample utterance: Play"):
            parse_sample_utterances("Play")


def test_schema_with_text_utterances(schema_paths):
    schema, utterances = schema_paths
    model = load_intent_schema_files(schema, utterances)
    assert model.utterance("good morning").intent == "Hello"
    assert model.utterance("play next").intent == "Play"
    assert model.utterance("slot value").slots() == {"SlotName": "value"}
    assert model.utterance("help me").intent == "AMAZON.HelpIntent"


def test_schema_with_json_utterances(tmp_path, schema_paths):
    schema, _ = schema_paths
    utterances = tmp_path / "utterances.json"
    utterances.write_text(json.dumps({"Hello": ["howdy"]}), encoding="utf-8")
    model = load_intent_schema_files(schema, utterances)
    assert model.utterance("howdy").intent == "Hello"
    assert model.samples_for("Play") == []


def test_schema_missing_utterances(tmp_path, schema_paths):
    schema, _ = schema_paths
    with pytest.raises(ModelError):
        load_intent_schema_files(schema, tmp_path / "missing.txt")
