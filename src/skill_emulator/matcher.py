"""
Utterance to intent matching.

Every sample phrase of every intent is tried against the cleaned utterance.
Candidates whose captures are not separated from the surrounding literal text
by whitespace, or whose captures fail their slot type, are dropped. The
survivors are scored by how much of the utterance was consumed by literal
text (higher is more specific), and ties are broken by how many slots were
validated against a real type rather than accepted as free text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from skill_emulator.errors import NoMatchError
from skill_emulator.phrases import SamplePhrase, clean
from skill_emulator.slot_types import SlotMatch

if TYPE_CHECKING:
    from skill_emulator.model import InteractionModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UtteranceMatch:
    """The winning sample phrase for an utterance.

    Attributes:
        sample: The matched sample phrase.
        slot_values: Resolved capture for each slot, in placeholder order.
        score: Matched length minus the length of all slot captures.
        typed_slots: Number of captures validated against a declared type.
    """

    sample: SamplePhrase
    slot_values: tuple[str, ...]
    score: int
    typed_slots: int

    @property
    def intent(self) -> str:
        return self.sample.intent

    @property
    def slot_names(self) -> tuple[str, ...]:
        return self.sample.slot_names

    def slots(self) -> dict[str, str]:
        """Captured slot values by name, trimmed, empty captures omitted."""
        result: dict[str, str] = {}
        for name, value in zip(self.slot_names, self.slot_values):
            value = value.strip()
            if value:
                result[name] = value
        return result

    def slot(self, name: str) -> str | None:
        for slot_name, value in zip(self.slot_names, self.slot_values):
            if slot_name.lower() == name.lower():
                return value.strip()
        return None


def _has_boundaries(whole: str, captures: tuple[str, ...]) -> bool:
    for value in captures:
        if value == whole or not value.strip():
            continue
        if not value.startswith(" ") and not value.endswith(" "):
            return False
    return True


class UtteranceMatcher:
    """Matches free text against the sample phrases of an interaction model."""

    def __init__(self, model: InteractionModel) -> None:
        self._model = model

    def match(self, utterance: str) -> UtteranceMatch:
        """Return the best-scoring sample phrase for ``utterance``.

        Raises:
            NoMatchError: If no sample phrase accepts the utterance.
        """
        cleaned = clean(utterance).strip()
        best: UtteranceMatch | None = None

        for intent in self._model.intents:
            for sample in self._model.samples_for(intent.name):
                candidate = self._evaluate(sample, cleaned)
                if candidate is None:
                    continue
                if (
                    best is None
                    or candidate.score > best.score
                    or (candidate.score == best.score and candidate.typed_slots > best.typed_slots)
                ):
                    best = candidate

        if best is None:
            raise NoMatchError(utterance)

        logger.debug(
            "Matched %r to %s via %r (score=%d, typed=%d)",
            utterance,
            best.intent,
            best.sample.phrase,
            best.score,
            best.typed_slots,
        )
        return best

    def _evaluate(self, sample: SamplePhrase, utterance: str) -> UtteranceMatch | None:
        found = sample.match(utterance)
        if found is None:
            return None

        whole = found.group(0)
        captures = found.groups()
        if not _has_boundaries(whole, captures):
            return None

        slot_matches: list[SlotMatch] = []
        for name, raw in zip(sample.slot_names, captures):
            slot = self._model.intent(sample.intent).slot(name)
            slot_match = self._model.slot_types.resolve(slot.type, raw)
            if not slot_match.matched:
                return None
            slot_matches.append(slot_match)

        score = len(whole) - sum(len(m.value) for m in slot_matches)
        typed = sum(1 for m in slot_matches if not m.untyped)
        return UtteranceMatch(
            sample=sample,
            slot_values=tuple(m.value for m in slot_matches),
            score=score,
            typed_slots=typed,
        )
