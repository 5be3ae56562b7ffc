"""
Audio player emulation.

The player tracks the item currently loaded, a FIFO queue of items waiting
to play, the playback activity and a ``suspended`` flag that is set while a
user's utterance interrupts playback.

State changes never talk to the skill directly. Each operation returns the
notifications it produced, as ``AudioPlayerEvent`` objects captured at the
moment of the change, and the emulator dispatches them in order.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping

from skill_emulator.errors import InvocationError
from skill_emulator.protocol import RequestType, SessionError

logger = logging.getLogger(__name__)

PLAY = "AudioPlayer.Play"
STOP = "AudioPlayer.Stop"

INVALID_RESPONSE = "INVALID_RESPONSE"
URL_UNDEFINED = "The URL specified in the Play directive must be defined and a valid HTTPS url"
URL_NOT_HTTPS = "The URL specified in the Play directive must be HTTPS"


class AudioPlayerActivity(str, Enum):
    IDLE = "IDLE"
    PLAYING = "PLAYING"
    STOPPED = "STOPPED"
    FINISHED = "FINISHED"


class PlayBehavior(str, Enum):
    REPLACE_ALL = "REPLACE_ALL"
    ENQUEUE = "ENQUEUE"
    REPLACE_ENQUEUED = "REPLACE_ENQUEUED"


@dataclass
class AudioItem:
    url: str | None = None
    token: str | None = None
    expected_previous_token: str | None = None
    offset_in_milliseconds: int = 0

    @classmethod
    def from_directive(cls, directive: Mapping[str, Any]) -> AudioItem:
        stream = (directive.get("audioItem") or {}).get("stream") or {}
        return cls(
            url=stream.get("url"),
            token=stream.get("token"),
            expected_previous_token=stream.get("expectedPreviousToken"),
            offset_in_milliseconds=int(stream.get("offsetInMilliseconds") or 0),
        )


@dataclass(frozen=True)
class PlayerSnapshot:
    """Player state as the skill should see it in one request."""

    activity: AudioPlayerActivity
    token: str | None = None
    offset_in_milliseconds: int = 0

    def context(self) -> dict[str, Any]:
        """The ``context.AudioPlayer`` block for a request."""
        block: dict[str, Any] = {"playerActivity": self.activity.value}
        if self.activity != AudioPlayerActivity.IDLE:
            if self.token is not None:
                block["token"] = self.token
            block["offsetInMilliseconds"] = self.offset_in_milliseconds
        return block


@dataclass(frozen=True)
class AudioPlayerEvent:
    """A notification the skill must receive.

    ``request_type`` is one of the ``AudioPlayer.*`` request types, or
    ``SessionEndedRequest`` (with ``error`` set) when a Play directive was
    rejected.
    """

    request_type: RequestType
    snapshot: PlayerSnapshot
    error: SessionError | None = None


@dataclass
class AudioPlayer:
    activity: AudioPlayerActivity = AudioPlayerActivity.IDLE
    suspended: bool = False
    current: AudioItem | None = None
    queue: deque[AudioItem] = field(default_factory=deque)

    def snapshot(self) -> PlayerSnapshot:
        if self.current is None:
            return PlayerSnapshot(self.activity)
        return PlayerSnapshot(
            self.activity, self.current.token, self.current.offset_in_milliseconds
        )

    def _event(self, request_type: RequestType) -> AudioPlayerEvent:
        return AudioPlayerEvent(request_type, self.snapshot())

    # -- Directives -------------------------------------------------------------

    def handle_directive(self, directive: Mapping[str, Any]) -> list[AudioPlayerEvent]:
        """Apply an ``AudioPlayer.*`` directive; other directives are ignored."""
        directive_type = directive.get("type")
        if directive_type == PLAY:
            return self._play(directive)
        if directive_type == STOP:
            return self._stop()
        return []

    def _play(self, directive: Mapping[str, Any]) -> list[AudioPlayerEvent]:
        events: list[AudioPlayerEvent] = []
        item = AudioItem.from_directive(directive)
        behavior = directive.get("playBehavior")

        if behavior == PlayBehavior.ENQUEUE:
            self.queue.append(item)
        elif behavior == PlayBehavior.REPLACE_ALL:
            if self.activity == AudioPlayerActivity.PLAYING:
                self.activity = AudioPlayerActivity.STOPPED
                events.append(self._event(RequestType.PLAYBACK_STOPPED))
            self.queue = deque([item])
        elif behavior == PlayBehavior.REPLACE_ENQUEUED:
            self.queue = deque([item])
        else:
            logger.warning("Ignoring Play directive with playBehavior %r", behavior)
            return events

        if self.activity != AudioPlayerActivity.PLAYING and self.queue:
            events.append(self._start_next())
        return events

    def _start_next(self) -> AudioPlayerEvent:
        item = self.queue.popleft()
        if not item.url:
            return self._rejected(URL_UNDEFINED)
        if not item.url.lower().startswith("https://"):
            return self._rejected(URL_NOT_HTTPS)

        self.current = item
        self.activity = AudioPlayerActivity.PLAYING
        logger.debug("Audio playing %s (token=%s)", item.url, item.token)
        return self._event(RequestType.PLAYBACK_STARTED)

    def _rejected(self, message: str) -> AudioPlayerEvent:
        logger.warning("Rejected Play directive: %s", message)
        return AudioPlayerEvent(
            RequestType.SESSION_ENDED,
            self.snapshot(),
            SessionError(type=INVALID_RESPONSE, message=message),
        )

    def _stop(self) -> list[AudioPlayerEvent]:
        if self.suspended:
            self.suspended = False
            return []
        if self.activity == AudioPlayerActivity.PLAYING:
            self.activity = AudioPlayerActivity.STOPPED
            return [self._event(RequestType.PLAYBACK_STOPPED)]
        return []

    # -- Interruptions ----------------------------------------------------------

    def suspend(self) -> list[AudioPlayerEvent]:
        """Pause playback while the user speaks to the skill."""
        if self.activity != AudioPlayerActivity.PLAYING:
            return []
        self.suspended = True
        self.activity = AudioPlayerActivity.STOPPED
        return [self._event(RequestType.PLAYBACK_STOPPED)]

    def resume(self) -> list[AudioPlayerEvent]:
        """Restart playback suspended by :meth:`suspend`, unless the skill stopped it."""
        if not self.suspended:
            return []
        self.suspended = False
        if self.activity == AudioPlayerActivity.PLAYING:
            return []
        self.activity = AudioPlayerActivity.PLAYING
        return [self._event(RequestType.PLAYBACK_STARTED)]

    # -- Device-side playback progress -----------------------------------------

    def _require_current(self) -> AudioItem:
        if self.current is None:
            raise InvocationError("No audio item is loaded in the audio player")
        return self.current

    def set_offset(self, offset_in_milliseconds: int) -> None:
        self.current = replace(
            self._require_current(), offset_in_milliseconds=offset_in_milliseconds
        )

    def playback_nearly_finished(self) -> list[AudioPlayerEvent]:
        self._require_current()
        return [self._event(RequestType.PLAYBACK_NEARLY_FINISHED)]

    def playback_finished(self) -> list[AudioPlayerEvent]:
        """Finish the current item and start the next queued one, if any."""
        self._require_current()
        self.activity = AudioPlayerActivity.FINISHED
        events = [self._event(RequestType.PLAYBACK_FINISHED)]
        if self.queue:
            events.append(self._start_next())
        return events
