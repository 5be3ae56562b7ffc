"""
Slot type catalog and entity resolution.

A slot type is either *custom* (declared by the interaction model, its values
are authoritative), a *builtin* (``AMAZON.*``) that accepts free-form text, or
a builtin that is fully enumerated (``AMAZON.NUMBER``: a digit pattern plus
the long-form words "one" .. "twenty").

Usage::

    registry = SlotTypeRegistry([SlotType.from_json(t) for t in model["types"]])
    match = registry.resolve("COUNTRY", "america")
    if match.matched:
        print(match.enumerated_value.id)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from skill_emulator.protocol import (
    EntityResolution,
    ResolutionStatus,
    ResolutionStatusCode,
    ResolutionValue,
    ResolvedValue,
)

logger = logging.getLogger(__name__)

BUILTIN_PREFIX = "AMAZON."
NUMBER_TYPE = "AMAZON.NUMBER"

_NUMBER_WORDS = (
    "one", "two", "three", "four", "five", "six", "seven", "eight", "nine",
    "ten", "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen",
    "seventeen", "eighteen", "nineteen", "twenty",
)


def is_builtin_name(name: str) -> bool:
    return name.upper().startswith(BUILTIN_PREFIX.upper())


# ---------------------------------------------------------------------------
# Values and matches
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SlotTypeValue:
    """One enumerated value of a slot type.

    Attributes:
        value: Canonical form, e.g. ``"US"``.
        id: Identifier reported by entity resolution (may be ``None``).
        synonyms: Alternative spoken forms that resolve to this value.
        builtin: ``True`` for values supplied by the platform itself.
    """

    value: str
    id: str | None = None
    synonyms: tuple[str, ...] = ()
    builtin: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> SlotTypeValue:
        """Build from ``{"id": .., "name": {"value": .., "synonyms": [..]}}``."""
        name = data.get("name") or {}
        return cls(
            value=str(name.get("value", "")),
            id=data.get("id"),
            synonyms=tuple(name.get("synonyms") or ()),
            builtin=bool(data.get("builtin", False)),
        )


@dataclass(frozen=True)
class SlotMatch:
    """Outcome of checking a raw value against a slot type."""

    matched: bool
    value: str | None = None
    enumerated_value: SlotTypeValue | None = None
    synonym: str | None = None
    untyped: bool = False


_NO_MATCH = SlotMatch(matched=False)


# ---------------------------------------------------------------------------
# Slot types
# ---------------------------------------------------------------------------


@dataclass
class SlotType:
    name: str
    values: list[SlotTypeValue] = field(default_factory=list)
    regex: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> SlotType:
        return cls(
            name=data["name"],
            values=[SlotTypeValue.from_json(v) for v in data.get("values") or []],
        )

    @property
    def is_builtin(self) -> bool:
        return is_builtin_name(self.name)

    def is_enumerated(self) -> bool:
        """A custom type, or a builtin whose values are all known."""
        return self.name.upper() == NUMBER_TYPE or not self.is_builtin

    def is_custom(self) -> bool:
        """A custom type, or a builtin extended with model-supplied values."""
        return not self.is_builtin or any(not v.builtin for v in self.values)

    def match_all(self, raw: str) -> list[SlotMatch]:
        """Return every enumerated value that ``raw`` names.

        A canonical-value hit yields one match for that value. Otherwise each
        equal synonym yields its own match, so a value with a repeated synonym
        is reported once per occurrence.
        """
        value = raw.strip()
        wanted = value.lower()
        matches: list[SlotMatch] = []
        for slot_value in self.values:
            if slot_value.value.lower() == wanted:
                matches.append(SlotMatch(True, value, slot_value))
                continue
            for synonym in slot_value.synonyms:
                if synonym.lower() == wanted:
                    matches.append(SlotMatch(True, value, slot_value, synonym))
        return matches

    def resolve(self, raw: str) -> SlotMatch:
        trimmed = raw.strip()
        if self.regex and re.search(self.regex, trimmed):
            return SlotMatch(True, trimmed)

        matches = self.match_all(raw)
        if matches:
            return matches[0]
        if self.is_builtin and not self.is_enumerated():
            # Builtins without an explicit enumeration are free-form.
            return SlotMatch(True, raw)
        return _NO_MATCH


def builtin_slot_types() -> list[SlotType]:
    """Platform slot types that carry values of their own."""
    number_values = [
        SlotTypeValue(value=str(i), id=str(i), synonyms=(word,), builtin=True)
        for i, word in enumerate(_NUMBER_WORDS, start=1)
    ]
    return [SlotType(NUMBER_TYPE, number_values, regex=r"^[0-9]*$")]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class SlotTypeRegistry:
    """Case-insensitive catalog of slot types, builtins included.

    A model type that shares its name with a builtin is merged into it: the
    model's values are appended to the builtin's, and the builtin's pattern
    is kept.
    """

    def __init__(self, slot_types: Iterable[SlotType] = ()) -> None:
        self._types: dict[str, SlotType] = {}
        for builtin in builtin_slot_types():
            self._types[builtin.name.lower()] = builtin
        for slot_type in slot_types:
            self.add(slot_type)

    def add(self, slot_type: SlotType) -> None:
        key = slot_type.name.lower()
        existing = self._types.get(key)
        if existing is not None and existing.is_builtin:
            self._types[key] = SlotType(
                existing.name,
                existing.values + list(slot_type.values),
                regex=existing.regex,
            )
            logger.debug("Extended builtin slot type %s", existing.name)
        else:
            self._types[key] = slot_type

    def get(self, name: str | None) -> SlotType | None:
        if not name:
            return None
        return self._types.get(name.lower())

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._types

    def __iter__(self) -> Iterator[SlotType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def resolve(self, type_name: str | None, raw: str) -> SlotMatch:
        """Check ``raw`` against the named type.

        An undeclared type name (or none at all) is treated as untyped and
        always matches, keeping the raw text.
        """
        slot_type = self.get(type_name)
        if slot_type is None:
            return SlotMatch(True, raw, untyped=True)
        return slot_type.resolve(raw)

    def entity_resolutions(
        self, type_name: str | None, raw: str, application_id: str
    ) -> list[EntityResolution] | None:
        """Build the ``resolutionsPerAuthority`` record for a slot value.

        Returns ``None`` when the type is unknown or has no model-supplied
        values.
        """
        slot_type = self.get(type_name)
        if slot_type is None or not any(not v.builtin for v in slot_type.values):
            return None

        authority = f"amzn1.er-authority.echo-sdk.{application_id}.{slot_type.name}"
        matches = [m for m in slot_type.match_all(raw) if not m.enumerated_value.builtin]
        if not matches:
            return [
                EntityResolution(
                    authority=authority,
                    status=ResolutionStatusCode(code=ResolutionStatus.ER_SUCCESS_NO_MATCH),
                    values=[],
                )
            ]
        return [
            EntityResolution(
                authority=authority,
                status=ResolutionStatusCode(code=ResolutionStatus.ER_SUCCESS_MATCH),
                values=[
                    ResolutionValue(
                        value=ResolvedValue(
                            id=m.enumerated_value.id, name=m.enumerated_value.value
                        )
                    )
                    for m in matches
                ],
            )
        ]
