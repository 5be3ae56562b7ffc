"""Interaction model loading from JSON documents and files.

Two formats are understood:

* The unified model, as exported from the developer console::

    {"interactionModel": {"languageModel": {"intents": [...], "types": [...]},
                          "dialog": {"intents": [...]},
                          "prompts": [...]}}

  The ``languageModel`` object may also be passed on its own, or wrapped only
  in ``{"languageModel": ...}``.

* The legacy intent schema ``{"intents": [{"intent": "Name", "slots": [...]}]}``
  plus sample utterances, either as ``{"Intent": ["sample", ...]}`` or as a
  text file of ``Intent sample text`` lines.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from skill_emulator.errors import ModelError
from skill_emulator.model import DialogIntent, IntentDefinition, InteractionModel, Prompt
from skill_emulator.slot_types import SlotType

logger = logging.getLogger(__name__)

MODELS_DIR = "models"


def default_model_path(locale: str) -> Path:
    """Where a model is looked for when none is configured: ``./models/<locale>.json``."""
    return Path(MODELS_DIR) / f"{locale}.json"


def _read_json(path: Path, what: str) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ModelError(
            f"The {what} could not be found under:\n{path}\n"
            f"Please provide the correct location of the {what}."
        ) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ModelError(f"Malformed {what}: {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Unified model
# ---------------------------------------------------------------------------


def load_interaction_model(document: Mapping[str, Any]) -> InteractionModel:
    """Build a model from a unified interaction model document.

    Raises:
        ModelError: If the document has no intents or is otherwise malformed.
    """
    wrapper = document.get("interactionModel") or {}
    language_model = (
        document.get("languageModel") or wrapper.get("languageModel") or document
    )
    if "intents" not in language_model:
        raise ModelError("Interaction model has no intents")

    try:
        intents = [IntentDefinition.from_json(i) for i in language_model["intents"]]
        slot_types = [SlotType.from_json(t) for t in language_model.get("types") or []]

        dialog = document.get("dialog") or wrapper.get("dialog") or {}
        dialog_intents = [DialogIntent.from_json(d) for d in dialog.get("intents") or []]

        raw_prompts = document.get("prompts") or wrapper.get("prompts") or []
        prompts = [Prompt.from_json(p) for p in raw_prompts]
    except (KeyError, TypeError) as exc:
        raise ModelError(f"Malformed interaction model: {exc}") from exc

    return InteractionModel(intents, slot_types, dialog_intents, prompts)


def load_interaction_model_file(path: str | Path) -> InteractionModel:
    """Read and build a unified interaction model from ``path``.

    Raises:
        ModelError: If the file is missing or is not valid JSON.
    """
    path = Path(path)
    model = load_interaction_model(_read_json(path, "interaction model"))
    logger.info("Loaded interaction model from %s", path)
    return model


# ---------------------------------------------------------------------------
# Legacy intent schema + sample utterances
# ---------------------------------------------------------------------------


def parse_sample_utterances(text: str) -> dict[str, list[str]]:
    """Parse ``Intent sample text`` lines into ``{intent: [samples]}``.

    Blank lines are skipped.

    Raises:
        ModelError: If a non-blank line has no sample after the intent name.
    """
    utterances: dict[str, list[str]] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        intent, sep, sample = line.partition(" ")
        if not sep:
            raise ModelError(f"Invalid sample utterance: {line}")
        utterances.setdefault(intent, []).append(sample.strip())
    return utterances


def load_intent_schema(
    schema: Mapping[str, Any], utterances: Mapping[str, list[str]]
) -> InteractionModel:
    """Build a model from a legacy intent schema and its sample utterances."""
    try:
        intents = [IntentDefinition.from_json(i) for i in schema["intents"]]
    except (KeyError, TypeError) as exc:
        raise ModelError(f"Malformed intent schema: {exc}") from exc

    for intent in intents:
        intent.samples = list(utterances.get(intent.name, []))
    return InteractionModel(intents)


def load_intent_schema_files(
    schema_path: str | Path, utterances_path: str | Path
) -> InteractionModel:
    """Read a legacy intent schema and its sample utterances from disk.

    The utterances file may be JSON (``.json``) or the plain text line format.
    """
    schema = _read_json(Path(schema_path), "intent schema")

    utterances_path = Path(utterances_path)
    if utterances_path.suffix == ".json":
        utterances = _read_json(utterances_path, "sample utterances")
    else:
        try:
            text = utterances_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ModelError(f"Sample utterances not found: {utterances_path}") from exc
        utterances = parse_sample_utterances(text)

    model = load_intent_schema(schema, utterances)
    logger.info("Loaded intent schema from %s and %s", schema_path, utterances_path)
    return model
