"""
Exception hierarchy for the skill emulator.

Every failure the emulator detects is raised synchronously to the test author
so that defects in the skill (or its interaction model) surface immediately.
The one exception is an invalid ``AudioPlayer.Play`` URL, which the platform
reports back to the skill as a ``SessionEndedRequest`` instead of raising.
"""

from __future__ import annotations


class EmulatorError(Exception):
    """Base exception for all skill emulator errors."""


class ModelError(EmulatorError):
    """Raised when the interaction model is missing or malformed."""


class InvocationError(EmulatorError):
    """Raised when a request cannot be built for the interaction model."""


class NoMatchError(InvocationError):
    """Raised when no sample phrase matches an utterance.

    Attributes:
        utterance: The rejected utterance, as supplied by the caller.
    """

    def __init__(self, utterance: str) -> None:
        super().__init__(
            f"Unable to match utterance: {utterance} to an intent. "
            "Try a different utterance, or explicitly set the intent"
        )
        self.utterance = utterance


class DialogError(EmulatorError):
    """Raised when a dialog directive names an intent with no dialog model."""


class SkillInvocationError(EmulatorError):
    """Raised when the skill handler cannot be invoked or returns garbage.

    Attributes:
        status_code: HTTP status code from a remote skill, or ``None``.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
