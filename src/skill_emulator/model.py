"""
Interaction model: intents, slots, sample phrases, slot types, dialog
metadata and prompts.

Builtin intents declared by the model receive the platform's canonical
phrases in addition to any the model supplies. A model that declares both
``AMAZON.PauseIntent`` and ``AMAZON.ResumeIntent`` is treated as an audio
skill, and every builtin audio-control intent it does not declare is added.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from skill_emulator.errors import ModelError
from skill_emulator.matcher import UtteranceMatch, UtteranceMatcher
from skill_emulator.phrases import SamplePhrase
from skill_emulator.slot_types import SlotType, SlotTypeRegistry, is_builtin_name

logger = logging.getLogger(__name__)

PAUSE_INTENT = "AMAZON.PauseIntent"
RESUME_INTENT = "AMAZON.ResumeIntent"

BUILTIN_INTENT_PHRASES: dict[str, list[str]] = {
    "AMAZON.CancelIntent": ["cancel", "never mind"],
    "AMAZON.HelpIntent": ["help", "help me"],
    "AMAZON.LoopOffIntent": ["loop off"],
    "AMAZON.LoopOnIntent": ["loop", "loop on", "keep repeating this song"],
    "AMAZON.MoreIntent": ["more"],
    "AMAZON.NavigateHomeIntent": ["home", "go home"],
    "AMAZON.NavigateSettingsIntent": ["settings"],
    "AMAZON.NextIntent": ["next", "skip", "skip forward"],
    "AMAZON.NoIntent": ["no", "no thanks"],
    "AMAZON.PageDownIntent": ["page down"],
    "AMAZON.PageUpIntent": ["page up"],
    "AMAZON.PauseIntent": ["pause", "pause that"],
    "AMAZON.PreviousIntent": ["go back", "previous", "skip back", "back up"],
    "AMAZON.RepeatIntent": ["repeat", "say that again", "repeat that"],
    "AMAZON.ResumeIntent": ["resume", "continue", "keep going"],
    "AMAZON.ScrollDownIntent": ["scroll down"],
    "AMAZON.ScrollLeftIntent": ["scroll left"],
    "AMAZON.ScrollRightIntent": ["scroll right"],
    "AMAZON.ScrollUpIntent": ["scroll up"],
    "AMAZON.ShuffleOffIntent": ["shuffle off", "stop shuffling", "turn off shuffle"],
    "AMAZON.ShuffleOnIntent": ["shuffle", "shuffle on", "shuffle the music", "shuffle mode"],
    "AMAZON.StartOverIntent": ["start over", "restart", "start again"],
    "AMAZON.StopIntent": ["stop", "off", "shut up"],
    "AMAZON.YesIntent": ["yes", "yes please", "sure"],
}

_PROMPT_SLOT_RE = re.compile(r"\{([^}]+)\}")


# ---------------------------------------------------------------------------
# Intents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SlotDefinition:
    name: str
    type: str | None = None


@dataclass
class IntentDefinition:
    """An intent as declared by the model.

    Attributes:
        name: Intent name, e.g. ``"PlayIntent"``.
        slots: Declared slots, in declaration order.
        samples: Sample phrase templates.
    """

    name: str
    slots: list[SlotDefinition] = field(default_factory=list)
    samples: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> IntentDefinition:
        """Accept both ``{"name": ..}`` and the legacy ``{"intent": ..}`` keys."""
        name = data.get("name") or data.get("intent")
        if not name:
            raise ModelError(f"Intent is missing a name: {dict(data)}")
        slots = [
            SlotDefinition(name=s["name"], type=s.get("type"))
            for s in data.get("slots") or []
        ]
        return cls(name=name, slots=slots, samples=list(data.get("samples") or []))

    @property
    def has_slots(self) -> bool:
        return bool(self.slots)

    def slot(self, name: str) -> SlotDefinition | None:
        """Case-insensitive slot lookup."""
        wanted = name.strip().lower()
        for slot in self.slots:
            if slot.name.strip().lower() == wanted:
                return slot
        return None


# ---------------------------------------------------------------------------
# Dialog metadata and prompts
# ---------------------------------------------------------------------------


@dataclass
class DialogSlot:
    name: str
    type: str | None = None
    confirmation_required: bool = False
    elicitation_required: bool = False
    prompts: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> DialogSlot:
        return cls(
            name=data["name"],
            type=data.get("type"),
            confirmation_required=bool(data.get("confirmationRequired", False)),
            elicitation_required=bool(data.get("elicitationRequired", False)),
            prompts=dict(data.get("prompts") or {}),
        )

    @property
    def elicitation_prompt_id(self) -> str | None:
        return self.prompts.get("elicitation")

    @property
    def confirmation_prompt_id(self) -> str | None:
        return self.prompts.get("confirmation")


@dataclass
class DialogIntent:
    """An intent whose slots are collected over several turns."""

    name: str
    confirmation_required: bool = False
    prompts: dict[str, str] = field(default_factory=dict)
    slots: list[DialogSlot] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> DialogIntent:
        return cls(
            name=data["name"],
            confirmation_required=bool(data.get("confirmationRequired", False)),
            prompts=dict(data.get("prompts") or {}),
            slots=[DialogSlot.from_json(s) for s in data.get("slots") or []],
        )

    def slot(self, name: str) -> DialogSlot | None:
        for slot in self.slots:
            if slot.name.lower() == name.lower():
                return slot
        return None


@dataclass
class Prompt:
    """A prompt with one or more spoken variations.

    ``text`` renders the first variation, replacing ``{slot}`` references
    with the supplied slot values. Unknown references are left untouched.
    """

    id: str
    variations: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Prompt:
        return cls(id=data["id"], variations=list(data.get("variations") or []))

    def text(self, slots: Mapping[str, str | None] | None = None) -> str:
        if not self.variations:
            return ""
        template = self.variations[0].get("value", "")
        values = {k.lower(): v for k, v in (slots or {}).items()}

        def _substitute(match: re.Match) -> str:
            value = values.get(match.group(1).strip().lower())
            return value if value is not None else match.group(0)

        return _PROMPT_SLOT_RE.sub(_substitute, template)


# ---------------------------------------------------------------------------
# Interaction model
# ---------------------------------------------------------------------------


class InteractionModel:
    """Intents, slot types and sample phrases for one skill locale.

    Args:
        intents: Declared intents, in declaration order.
        slot_types: Custom slot types (and builtin extensions).
        dialog_intents: Intents that take part in multi-turn dialog.
        prompts: Prompts referenced by the dialog metadata.

    Raises:
        ModelError: If a sample phrase references a slot its intent does
            not declare.
    """

    def __init__(
        self,
        intents: Iterable[IntentDefinition],
        slot_types: Iterable[SlotType] = (),
        dialog_intents: Iterable[DialogIntent] = (),
        prompts: Iterable[Prompt] = (),
    ) -> None:
        self._intents: dict[str, IntentDefinition] = {}
        for intent in intents:
            self._intents[intent.name] = intent

        self.slot_types = SlotTypeRegistry(slot_types)
        self._dialog_intents = {d.name: d for d in dialog_intents}
        self._prompts = {p.id: p for p in prompts}

        if PAUSE_INTENT in self._intents and RESUME_INTENT in self._intents:
            self._add_audio_intents()

        self._phrases: dict[str, list[SamplePhrase]] = {}
        for intent in self._intents.values():
            samples = list(intent.samples)
            samples.extend(BUILTIN_INTENT_PHRASES.get(intent.name, []))
            self._phrases[intent.name] = [self._compile(intent, s) for s in samples]

        self._matcher = UtteranceMatcher(self)
        logger.info(
            "Interaction model ready: %d intents, %d sample phrases",
            len(self._intents),
            sum(len(p) for p in self._phrases.values()),
        )

    def _add_audio_intents(self) -> None:
        for name in BUILTIN_INTENT_PHRASES:
            if name not in self._intents:
                self._intents[name] = IntentDefinition(name=name)
        logger.debug("Audio intents enabled for interaction model")

    @staticmethod
    def _compile(intent: IntentDefinition, template: str) -> SamplePhrase:
        sample = SamplePhrase.compile(intent.name, template)
        for slot_name in sample.slot_names:
            if intent.slot(slot_name) is None:
                raise ModelError(
                    f"Invalid schema - no slot: {slot_name} for intent: {intent.name}"
                )
        return sample

    # -- Lookups ----------------------------------------------------------------

    @property
    def intents(self) -> list[IntentDefinition]:
        return list(self._intents.values())

    def intent(self, name: str) -> IntentDefinition | None:
        return self._intents.get(name)

    def has_intent(self, name: str) -> bool:
        return name in self._intents

    def samples_for(self, intent_name: str) -> list[SamplePhrase]:
        return self._phrases.get(intent_name, [])

    @property
    def audio_enabled(self) -> bool:
        return PAUSE_INTENT in self._intents and RESUME_INTENT in self._intents

    def dialog_intent(self, name: str) -> DialogIntent | None:
        return self._dialog_intents.get(name)

    def prompt(self, prompt_id: str) -> Prompt | None:
        return self._prompts.get(prompt_id)

    def is_builtin_intent(self, name: str) -> bool:
        return is_builtin_name(name)

    def utterance(self, utterance: str) -> UtteranceMatch:
        """Match free text to an intent and its slot captures.

        Raises:
            NoMatchError: If no sample phrase accepts the utterance.
        """
        return self._matcher.match(utterance)
