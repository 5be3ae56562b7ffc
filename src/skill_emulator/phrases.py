"""
Sample phrase compilation.

A sample phrase such as ``"play {Song} by {Artist}"`` compiles to an anchored,
case-insensitive pattern with one greedy capture group per placeholder, plus
the ordered list of slot names. The ``{literal text | Slot}`` form names its
slot after the bar.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Characters ignored when comparing an utterance against a sample phrase.
PUNCTUATION = "!\"¿?|#$%/()=+-_<>*{}·¡[].,;:"

_PUNCTUATION_RE = re.compile("[" + re.escape(PUNCTUATION) + "]")
_PLACEHOLDER_RE = re.compile(r"\s*\{([^}]*)\}\s*")
_CAPTURE = "(.*)"


def clean(text: str) -> str:
    """Strip the ignored punctuation characters from ``text``."""
    return _PUNCTUATION_RE.sub("", text)


def _slot_name(placeholder: str) -> str:
    if "|" in placeholder:
        return placeholder.split("|", 1)[1].strip()
    return placeholder.strip()


@dataclass(frozen=True)
class SamplePhrase:
    """A compiled sample phrase belonging to one intent.

    Attributes:
        intent: Name of the owning intent.
        phrase: The template exactly as written in the model.
        slot_names: Slot names in the order their placeholders appear.
        pattern: Compiled, anchored, case-insensitive matcher.
    """

    intent: str
    phrase: str
    slot_names: tuple[str, ...] = field(default=())
    pattern: re.Pattern = field(default=None, compare=False, repr=False)

    @classmethod
    def compile(cls, intent: str, phrase: str) -> SamplePhrase:
        slot_names: list[str] = []
        parts: list[str] = []
        position = 0
        for placeholder in _PLACEHOLDER_RE.finditer(phrase):
            parts.append(re.escape(clean(phrase[position:placeholder.start()])))
            parts.append(_CAPTURE)
            slot_names.append(_slot_name(placeholder.group(1)))
            position = placeholder.end()
        parts.append(re.escape(clean(phrase[position:])))

        pattern = re.compile("^" + "".join(parts) + "$", re.IGNORECASE)
        return cls(intent, phrase, tuple(slot_names), pattern)

    def match(self, utterance: str) -> re.Match | None:
        """Match an already-cleaned utterance against this phrase."""
        return self.pattern.match(utterance)
