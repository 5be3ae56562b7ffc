"""Skill Emulator — voice assistant skill test harness.

Emulates the platform's request/response protocol so a skill's handler can
be driven end to end, locally or over HTTP, without a device or a live
platform connection.

Quick Start:
    >>> from skill_emulator import EmulatorBuilder
    >>> emulator = (
    ...     EmulatorBuilder()
    ...     .interaction_model_file("models/en-US.json")
    ...     .handler("index.handler")
    ...     .create()
    ... )
    >>> response = await emulator.utter("play the news")
    >>> response.prompt()
"""

from .audio import AudioItem, AudioPlayer, AudioPlayerActivity
from .builder import EmulatorBuilder
from .config import Settings, get_settings
from .context import Device, SkillSession
from .dialog import DialogManager
from .emulator import SkillEmulator
from .errors import (
    DialogError,
    EmulatorError,
    InvocationError,
    ModelError,
    NoMatchError,
    SkillInvocationError,
)
from .interactor import LambdaContext, LocalSkillInteractor, RemoteSkillInteractor, SkillInteractor
from .model import InteractionModel
from .protocol import ConfirmationStatus, DialogState, RequestType, SessionEndedReason
from .response import SkillResponse

__version__ = "0.1.0"
__all__ = [
    "SkillEmulator",
    "EmulatorBuilder",
    "SkillResponse",
    "InteractionModel",
    "Settings",
    "get_settings",
    "SkillInteractor",
    "LocalSkillInteractor",
    "RemoteSkillInteractor",
    "LambdaContext",
    "AudioPlayer",
    "AudioItem",
    "AudioPlayerActivity",
    "DialogManager",
    "Device",
    "SkillSession",
    "ConfirmationStatus",
    "DialogState",
    "RequestType",
    "SessionEndedReason",
    "EmulatorError",
    "ModelError",
    "InvocationError",
    "NoMatchError",
    "DialogError",
    "SkillInvocationError",
]
