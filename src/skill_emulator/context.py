"""Device, user and session state carried in every request envelope."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

API_ENDPOINT = "https://api.amazonalexa.com"

AUDIO_PLAYER = "AudioPlayer"
DISPLAY = "Display"
VIDEO_APP = "VideoApp"


@dataclass
class Device:
    """The emulated device. Audio playback is supported by default."""

    id: str | None = None
    supported_interfaces: dict[str, dict] = field(
        default_factory=lambda: {AUDIO_PLAYER: {}}
    )

    def generate_id(self) -> str:
        if not self.id:
            self.id = f"virtualAlexa.deviceID.{uuid.uuid4()}"
        return self.id

    def _set_interface(self, name: str, supported: bool) -> None:
        if supported:
            self.supported_interfaces[name] = {}
        else:
            self.supported_interfaces.pop(name, None)

    @property
    def audio_player_supported(self) -> bool:
        return AUDIO_PLAYER in self.supported_interfaces

    @audio_player_supported.setter
    def audio_player_supported(self, value: bool) -> None:
        self._set_interface(AUDIO_PLAYER, value)

    @property
    def display_supported(self) -> bool:
        return DISPLAY in self.supported_interfaces

    @display_supported.setter
    def display_supported(self, value: bool) -> None:
        self._set_interface(DISPLAY, value)

    @property
    def video_app_supported(self) -> bool:
        return VIDEO_APP in self.supported_interfaces

    @video_app_supported.setter
    def video_app_supported(self, value: bool) -> None:
        self._set_interface(VIDEO_APP, value)


@dataclass
class SkillSession:
    id: str = field(default_factory=lambda: f"SessionID.{uuid.uuid4()}")
    new: bool = True
    attributes: dict[str, Any] = field(default_factory=dict)


class SkillContext:
    """Identity of the user, skill and device, plus the open session.

    Everything here outlives a single session except ``session`` itself,
    which is created lazily by :meth:`ensure_session` and dropped by
    :meth:`end_session`.

    Attributes:
        access_token: Account-linking token echoed to the skill, if set.
    """

    def __init__(self, locale: str = "en-US", application_id: str | None = None) -> None:
        self.locale = locale or "en-US"
        self.application_id = application_id or f"amzn1.echo-sdk-ams.app.{uuid.uuid4()}"
        self.user_id = f"amzn1.ask.account.{uuid.uuid4()}"
        self.api_access_token = f"virtualAlexa.accessToken.{uuid.uuid4()}"
        self.api_endpoint = API_ENDPOINT
        self.device = Device()
        self.access_token: str | None = None
        self.session: SkillSession | None = None

    def ensure_session(self) -> SkillSession:
        if self.session is None:
            self.session = SkillSession()
            logger.info("Session started: %s", self.session.id)
        return self.session

    def end_session(self) -> None:
        if self.session is not None:
            logger.info("Session ended: %s", self.session.id)
        self.session = None

    # -- Envelope blocks --------------------------------------------------------

    def user(self) -> dict[str, Any]:
        block: dict[str, Any] = {"userId": self.user_id}
        if self.device.id:
            block["permissions"] = {"consentToken": str(uuid.uuid4())}
        if self.access_token:
            block["accessToken"] = self.access_token
        return block

    def system(self) -> dict[str, Any]:
        device: dict[str, Any] = {"supportedInterfaces": dict(self.device.supported_interfaces)}
        if self.device.id:
            device["deviceId"] = self.device.id

        block: dict[str, Any] = {
            "application": {"applicationId": self.application_id},
            "device": device,
            "user": self.user(),
        }
        if self.device.id:
            block["apiAccessToken"] = self.api_access_token
            block["apiEndpoint"] = self.api_endpoint
        return block

    def session_block(self, include_attributes: bool) -> dict[str, Any]:
        session = self.ensure_session()
        block: dict[str, Any] = {
            "application": {"applicationId": self.application_id},
            "new": session.new,
            "sessionId": session.id,
            "user": self.user(),
        }
        if include_attributes:
            block["attributes"] = dict(session.attributes)
        return block
