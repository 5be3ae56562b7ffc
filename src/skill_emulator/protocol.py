"""
Wire types for the skill request/response protocol.

Each request kind is its own pydantic model with a literal ``type`` tag, so a
request body is validated when it is built rather than when the skill trips
over it. Field names are snake_case in Python and camelCase on the wire.

The outer envelope (``version`` / ``context`` / ``session``) depends on live
emulator state and is assembled by ``SkillEmulator``; only the ``request``
member is modelled here.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PROTOCOL_VERSION = "1.0"


class RequestType(str, Enum):
    LAUNCH = "LaunchRequest"
    INTENT = "IntentRequest"
    SESSION_ENDED = "SessionEndedRequest"
    ELEMENT_SELECTED = "Display.ElementSelected"
    CONNECTIONS_RESPONSE = "Connections.Response"
    PLAYBACK_STARTED = "AudioPlayer.PlaybackStarted"
    PLAYBACK_STOPPED = "AudioPlayer.PlaybackStopped"
    PLAYBACK_NEARLY_FINISHED = "AudioPlayer.PlaybackNearlyFinished"
    PLAYBACK_FINISHED = "AudioPlayer.PlaybackFinished"


# Request types that carry a ``session`` block.
SESSION_REQUEST_TYPES = frozenset(
    {
        RequestType.LAUNCH.value,
        RequestType.INTENT.value,
        RequestType.SESSION_ENDED.value,
        RequestType.ELEMENT_SELECTED.value,
        RequestType.CONNECTIONS_RESPONSE.value,
    }
)


class SessionEndedReason(str, Enum):
    ERROR = "ERROR"
    EXCEEDED_MAX_REPROMPTS = "EXCEEDED_MAX_REPROMPTS"
    USER_INITIATED = "USER_INITIATED"


class ConfirmationStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    DENIED = "DENIED"
    NONE = "NONE"


class DialogState(str, Enum):
    STARTED = "STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ResolutionStatus(str, Enum):
    ER_SUCCESS_MATCH = "ER_SUCCESS_MATCH"
    ER_SUCCESS_NO_MATCH = "ER_SUCCESS_NO_MATCH"


def _request_id() -> str:
    return f"amzn1.echo-external.request.{uuid.uuid4()}"


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ProtocolModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        """Serialise to the wire format, omitting unset optional members."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Slots and entity resolution
# ---------------------------------------------------------------------------


class ResolvedValue(ProtocolModel):
    id: str | None = None
    name: str


class ResolutionValue(ProtocolModel):
    value: ResolvedValue


class ResolutionStatusCode(ProtocolModel):
    code: ResolutionStatus


class EntityResolution(ProtocolModel):
    """Resolution of a slot value under one authority (one slot type)."""

    authority: str
    status: ResolutionStatusCode
    values: list[ResolutionValue] = Field(default_factory=list)


class Slot(ProtocolModel):
    """A slot on an intent request. ``value`` is ``None`` for an unfilled slot."""

    name: str
    value: str | None = None
    confirmation_status: ConfirmationStatus = ConfirmationStatus.NONE
    resolutions_per_authority: list[EntityResolution] | None = None


class Intent(ProtocolModel):
    name: str
    confirmation_status: ConfirmationStatus = ConfirmationStatus.NONE
    slots: dict[str, Slot] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request variants
# ---------------------------------------------------------------------------


class BaseRequest(ProtocolModel):
    locale: str
    request_id: str = Field(default_factory=_request_id)
    timestamp: str = Field(default_factory=_timestamp)


class LaunchRequest(BaseRequest):
    type: Literal["LaunchRequest"] = "LaunchRequest"


class IntentRequest(BaseRequest):
    type: Literal["IntentRequest"] = "IntentRequest"
    intent: Intent
    dialog_state: DialogState | None = None


class SessionError(ProtocolModel):
    type: str
    message: str


class SessionEndedRequest(BaseRequest):
    type: Literal["SessionEndedRequest"] = "SessionEndedRequest"
    reason: SessionEndedReason = SessionEndedReason.USER_INITIATED
    error: SessionError | None = None


class ElementSelectedRequest(BaseRequest):
    type: Literal["Display.ElementSelected"] = "Display.ElementSelected"
    token: str


class ConnectionsStatus(ProtocolModel):
    code: int = 200
    message: str = "OK"


class ConnectionsResponseRequest(BaseRequest):
    type: Literal["Connections.Response"] = "Connections.Response"
    name: str
    payload: dict[str, Any] = Field(default_factory=dict)
    token: str
    status: ConnectionsStatus = Field(default_factory=ConnectionsStatus)


class AudioPlayerRequest(BaseRequest):
    type: Literal[
        "AudioPlayer.PlaybackStarted",
        "AudioPlayer.PlaybackStopped",
        "AudioPlayer.PlaybackNearlyFinished",
        "AudioPlayer.PlaybackFinished",
    ]
    token: str | None = None
    offset_in_milliseconds: int = 0


# ---------------------------------------------------------------------------
# Response envelope
# ---------------------------------------------------------------------------


class ResponseBody(ProtocolModel):
    """The ``response`` member returned by a skill. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    should_end_session: bool | None = None
    output_speech: dict[str, Any] | None = None
    reprompt: dict[str, Any] | None = None
    card: dict[str, Any] | None = None
    directives: list[dict[str, Any]] | None = None


class ResponseEnvelope(ProtocolModel):
    """Top-level skill response. Handlers may return extra keys freely."""

    model_config = ConfigDict(extra="allow")

    version: str | None = None
    response: ResponseBody | None = None
    session_attributes: dict[str, Any] | None = None
