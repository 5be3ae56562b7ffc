"""
Fluent construction of a :class:`SkillEmulator`.

Callers provide an interaction model (unified JSON, or a legacy intent
schema plus sample utterances, as objects or files) and a way to reach the
skill (a handler or a URL)::

    emulator = (
        EmulatorBuilder()
        .interaction_model_file("models/en-US.json")
        .handler("index.handler")
        .create()
    )
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import httpx

from skill_emulator.config import Settings
from skill_emulator.emulator import SkillEmulator
from skill_emulator.errors import InvocationError, ModelError
from skill_emulator.interactor import (
    Handler,
    LocalSkillInteractor,
    RemoteSkillInteractor,
    SkillInteractor,
)
from skill_emulator.loader import (
    default_model_path,
    load_intent_schema,
    load_intent_schema_files,
    load_interaction_model,
    load_interaction_model_file,
)
from skill_emulator.model import InteractionModel

logger = logging.getLogger(__name__)


class EmulatorBuilder:
    """Collects configuration and creates a :class:`SkillEmulator`."""

    def __init__(self) -> None:
        self._application_id: str | None = None
        self._locale = "en-US"
        self._model: InteractionModel | None = None
        self._handler: Handler | str | None = None
        self._url: str | None = None
        self._timeout: float | None = None
        self._transport: httpx.AsyncBaseTransport | None = None
        self._interactor: SkillInteractor | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> EmulatorBuilder:
        """Start from environment-driven settings; later calls override them."""
        builder = cls().locale(settings.locale).timeout(settings.request_timeout)
        if settings.application_id:
            builder.application_id(settings.application_id)
        if settings.interaction_model:
            builder.interaction_model_file(settings.interaction_model)
        if settings.handler:
            builder.handler(settings.handler)
        if settings.skill_url:
            builder.skill_url(settings.skill_url)
        return builder

    # -- Interaction model -----------------------------------------------------

    def interaction_model(self, document: Mapping[str, Any]) -> EmulatorBuilder:
        """A unified interaction model, as parsed JSON."""
        self._model = load_interaction_model(document)
        return self

    def interaction_model_file(self, path: str | Path) -> EmulatorBuilder:
        self._model = load_interaction_model_file(path)
        return self

    def intent_schema(
        self, schema: Mapping[str, Any], utterances: Mapping[str, list[str]]
    ) -> EmulatorBuilder:
        """A legacy intent schema with ``{intent: [samples]}`` utterances."""
        self._model = load_intent_schema(schema, utterances)
        return self

    def intent_schema_file(
        self, schema_path: str | Path, utterances_path: str | Path
    ) -> EmulatorBuilder:
        self._model = load_intent_schema_files(schema_path, utterances_path)
        return self

    # -- Skill target ----------------------------------------------------------

    def handler(self, handler: Handler | str) -> EmulatorBuilder:
        """A handler function, ``"module.function"``, or a ``.py`` file."""
        self._handler = handler
        self._url = None
        return self

    def skill_url(self, url: str) -> EmulatorBuilder:
        self._url = url
        self._handler = None
        return self

    def transport(self, transport: httpx.AsyncBaseTransport) -> EmulatorBuilder:
        """httpx transport for a remote skill, e.g. ``httpx.ASGITransport(app)``."""
        self._transport = transport
        return self

    def interactor(self, interactor: SkillInteractor) -> EmulatorBuilder:
        """Use a custom interactor instead of a handler or URL."""
        self._interactor = interactor
        return self

    # -- Identity --------------------------------------------------------------

    def locale(self, locale: str) -> EmulatorBuilder:
        self._locale = locale
        return self

    def application_id(self, application_id: str) -> EmulatorBuilder:
        self._application_id = application_id
        return self

    def timeout(self, seconds: float | None) -> EmulatorBuilder:
        self._timeout = seconds
        return self

    # -- Build -----------------------------------------------------------------

    def _build_interactor(self) -> SkillInteractor:
        if self._interactor is not None:
            return self._interactor
        if self._handler is not None:
            return LocalSkillInteractor(self._handler)
        if self._url is not None:
            return RemoteSkillInteractor(self._url, self._timeout, self._transport)
        raise InvocationError("Either a handler or skill URL must be provided.")

    def create(self) -> SkillEmulator:
        """Create the emulator.

        Without an explicit model, ``./models/<locale>.json`` is used.

        Raises:
            ModelError: If no interaction model is available.
            InvocationError: If neither a handler nor a URL was given.
        """
        model = self._model
        if model is None:
            path = default_model_path(self._locale)
            if not path.exists():
                raise ModelError(
                    "Either an interaction model or intent schema and sample utterances "
                    "must be provided.\nAlternatively, if you specify a locale, the "
                    "interaction model is looked up under the directory \"./models\" - "
                    f"e.g., \"{path}\""
                )
            model = load_interaction_model_file(path)

        interactor = self._build_interactor()
        logger.info("Created skill emulator (locale=%s)", self._locale)
        return SkillEmulator(interactor, model, self._locale, self._application_id)
