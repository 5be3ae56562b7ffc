"""Convenience wrapper around a skill's response JSON."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import ValidationError

from skill_emulator.errors import SkillInvocationError
from skill_emulator.protocol import ResponseEnvelope

RENDER_TEMPLATE = "Display.RenderTemplate"

_MISSING = object()


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Look up a dotted path such as ``"response.card.title"`` in nested dicts."""
    current = data
    for key in path.split("."):
        if isinstance(current, Mapping) and key in current:
            current = current[key]
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return default
    return current


class SkillResponse:
    """A skill response with accessors for the parts tests usually check.

    The raw JSON is available as :attr:`json`; :attr:`envelope` is the same
    data validated into typed models.

    Raises:
        SkillInvocationError: If the handler's result is not a response
            envelope.
    """

    def __init__(self, raw: Mapping[str, Any]) -> None:
        if not isinstance(raw, Mapping):
            raise SkillInvocationError(
                f"Skill response must be a JSON object, got {type(raw).__name__}"
            )
        try:
            self.envelope = ResponseEnvelope.model_validate(raw)
        except ValidationError as exc:
            raise SkillInvocationError(f"Malformed skill response: {exc}") from exc
        self.json: dict[str, Any] = dict(raw)

    def __repr__(self) -> str:
        return f"SkillResponse({self.json!r})"

    def get(self, path: str, default: Any = None) -> Any:
        return get_path(self.json, path, default)

    @property
    def response(self) -> dict[str, Any]:
        return self.json.get("response") or {}

    @property
    def version(self) -> str | None:
        return self.json.get("version")

    @property
    def should_end_session(self) -> bool:
        return bool(self.response.get("shouldEndSession"))

    # -- Session attributes ----------------------------------------------------

    @property
    def session_attributes(self) -> dict[str, Any]:
        return self.json.get("sessionAttributes") or {}

    def attr(self, key: str) -> Any:
        return get_path(self.session_attributes, key)

    def attrs(self, *keys: str) -> dict[str, Any]:
        """Pick the given keys, skipping any that are absent."""
        picked = {}
        for key in keys:
            value = get_path(self.session_attributes, key, _MISSING)
            if value is not _MISSING:
                picked[key] = value
        return picked

    # -- Speech ----------------------------------------------------------------

    @staticmethod
    def _speech(output_speech: Any) -> str | None:
        if not isinstance(output_speech, Mapping):
            return None
        if "ssml" in output_speech:
            return output_speech["ssml"]
        return output_speech.get("text")

    def prompt(self) -> str | None:
        """The SSML of the output speech if present, else its plain text."""
        return self._speech(self.response.get("outputSpeech"))

    def reprompt(self) -> str | None:
        return self._speech(self.get("response.reprompt.outputSpeech"))

    # -- Cards -----------------------------------------------------------------

    def card(self) -> dict[str, Any] | None:
        return self.response.get("card")

    def card_title(self) -> str | None:
        return self.get("response.card.title")

    def card_content(self) -> str | None:
        return self.get("response.card.content")

    def card_image(self) -> dict[str, Any] | None:
        return self.get("response.card.image")

    def card_small_image(self) -> str | None:
        return self.get("response.card.image.smallImageUrl")

    def card_large_image(self) -> str | None:
        return self.get("response.card.image.largeImageUrl")

    # -- Directives and display ------------------------------------------------

    @property
    def directives(self) -> list[dict[str, Any]]:
        return self.response.get("directives") or []

    def directive(self, directive_type: str) -> dict[str, Any] | None:
        """The first directive of the given type, or ``None``."""
        for directive in self.directives:
            if directive.get("type") == directive_type:
                return directive
        return None

    def display(self) -> dict[str, Any] | None:
        directive = self.directive(RENDER_TEMPLATE)
        return directive.get("template") if directive else None

    def _display_text(self, element: str, list_token: str | None) -> str | None:
        template = self.display()
        if not template:
            return None
        if list_token is None:
            return get_path(template, f"textContent.{element}.text")
        for item in template.get("listItems") or []:
            if item.get("token") == list_token:
                return get_path(item, f"textContent.{element}.text")
        return None

    def primary_text(self, list_token: str | None = None) -> str | None:
        """Primary text of the display template, or of the list item with ``list_token``."""
        return self._display_text("primaryText", list_token)

    def secondary_text(self, list_token: str | None = None) -> str | None:
        return self._display_text("secondaryText", list_token)

    def tertiary_text(self, list_token: str | None = None) -> str | None:
        return self._display_text("tertiaryText", list_token)
