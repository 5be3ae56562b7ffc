"""
SkillEmulator: drives a skill through the platform request/response protocol.

One emulator models one device talking to one skill. It owns the session,
the dialog state and the audio player, and every call is a full turn::

    emulator = EmulatorBuilder().interaction_model_file("models/en-US.json") \\
        .handler("index.handler").create()
    response = await emulator.utter("play the news")
    assert response.directive("AudioPlayer.Play")

Directives returned by the skill are folded back into the dialog and audio
state. Audio state changes produce notification requests (playback started,
stopped, ...) that are sent to the skill before the outer call returns, in
the order they occurred.
"""

from __future__ import annotations

import inspect
import logging
import re
from typing import Any, Callable, Mapping

from skill_emulator.audio import AudioPlayer, AudioPlayerEvent, PlayerSnapshot
from skill_emulator.context import Device, SkillContext, SkillSession
from skill_emulator.dialog import DialogManager
from skill_emulator.errors import InvocationError
from skill_emulator.interactor import SkillInteractor
from skill_emulator.model import IntentDefinition, InteractionModel
from skill_emulator.protocol import (
    PROTOCOL_VERSION,
    SESSION_REQUEST_TYPES,
    AudioPlayerRequest,
    BaseRequest,
    ConfirmationStatus,
    ConnectionsResponseRequest,
    ConnectionsStatus,
    DialogState,
    ElementSelectedRequest,
    Intent,
    IntentRequest,
    LaunchRequest,
    RequestType,
    SessionEndedReason,
    SessionEndedRequest,
    SessionError,
    Slot,
)
from skill_emulator.response import SkillResponse

logger = logging.getLogger(__name__)

RequestFilter = Callable[[dict[str, Any]], Any]

EXIT_UTTERANCE = "exit"

_INVOCATION_RE = re.compile(r"^(ask|open|launch|talk to|tell)\b", re.IGNORECASE)
_REDIRECT_RE = re.compile(r"^(?:ask|open|launch|talk to|tell) .* to (.*)", re.IGNORECASE)


class SkillEmulator:
    """Emulated device plus platform for a single skill.

    Args:
        interactor: How the skill is reached (local handler or remote URL).
        model: The skill's interaction model.
        locale: Locale reported in every request.
        application_id: Skill id; generated when omitted.

    Attributes:
        audio_player: Emulated audio player; survives across sessions.
        dialog: Dialog state for the current session.
        request_log: Every request dispatched to the skill, in dispatch
            order, including notifications sent on the skill's behalf.
    """

    def __init__(
        self,
        interactor: SkillInteractor,
        model: InteractionModel,
        locale: str = "en-US",
        application_id: str | None = None,
    ) -> None:
        self.interactor = interactor
        self.model = model
        self.context = SkillContext(locale, application_id)
        self.audio_player = AudioPlayer()
        self.dialog = DialogManager(model)
        self.request_log: list[dict[str, Any]] = []
        self._filter: RequestFilter | None = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def locale(self) -> str:
        return self.context.locale

    @property
    def application_id(self) -> str:
        return self.context.application_id

    @property
    def user_id(self) -> str:
        return self.context.user_id

    @property
    def device(self) -> Device:
        return self.context.device

    @property
    def session(self) -> SkillSession | None:
        return self.context.session

    @property
    def access_token(self) -> str | None:
        return self.context.access_token

    @access_token.setter
    def access_token(self, value: str | None) -> None:
        self.context.access_token = value

    @property
    def dialog_state(self) -> DialogState | None:
        return self.dialog.dialog_state

    def set_slot_status(self, slot_name: str, status: ConfirmationStatus) -> None:
        """Set the confirmation status of a slot collected by the dialog."""
        self.dialog.set_slot_status(slot_name, status)

    def filter(self, request_filter: RequestFilter) -> SkillEmulator:
        """Install a hook that may modify each request before it is sent."""
        self._filter = request_filter
        return self

    def reset_filter(self) -> SkillEmulator:
        self._filter = None
        return self

    # ------------------------------------------------------------------
    # Public API: one call per user or device action
    # ------------------------------------------------------------------

    async def utter(self, utterance: str) -> SkillResponse:
        """Say something to the skill.

        ``"exit"`` ends the session. Invocation phrases such as ``"open my
        skill"`` launch it, and ``"ask my skill to <phrase>"`` sends
        ``<phrase>`` as the utterance.

        Raises:
            NoMatchError: If no sample phrase matches the utterance.
        """
        if utterance == EXIT_UTTERANCE:
            return await self.end_session()

        resolved = utterance
        if _INVOCATION_RE.match(utterance):
            redirect = _REDIRECT_RE.match(utterance)
            if redirect is None:
                return await self.launch()
            resolved = redirect.group(1)

        match = self.model.utterance(resolved)
        return await self.intend(match.intent, match.slots())

    async def intend(
        self,
        intent_name: str,
        slots: Mapping[str, str] | None = None,
        confirmation_status: ConfirmationStatus | None = None,
        slot_statuses: Mapping[str, ConfirmationStatus] | None = None,
    ) -> SkillResponse:
        """Send an intent with optional slot values.

        Raises:
            InvocationError: If the intent or one of the slots is not declared.
        """
        request = self.intent_request(intent_name, slots, confirmation_status, slot_statuses)
        return await self.send(request)

    async def launch(self) -> SkillResponse:
        return await self.send(LaunchRequest(locale=self.locale))

    async def end_session(
        self,
        reason: SessionEndedReason = SessionEndedReason.USER_INITIATED,
        error: SessionError | Mapping[str, str] | None = None,
    ) -> SkillResponse:
        if error is not None and not isinstance(error, SessionError):
            error = SessionError.model_validate(error)
        request = SessionEndedRequest(locale=self.locale, reason=reason, error=error)
        return await self.send(request)

    async def select_element(self, token: str) -> SkillResponse:
        """The user touched a list item on a display template."""
        return await self.send(ElementSelectedRequest(locale=self.locale, token=token))

    async def connections_response(
        self,
        name: str,
        payload: Mapping[str, Any],
        token: str,
        code: int = 200,
        message: str = "OK",
    ) -> SkillResponse:
        request = ConnectionsResponseRequest(
            locale=self.locale,
            name=name,
            payload=dict(payload),
            token=token,
            status=ConnectionsStatus(code=code, message=message),
        )
        return await self.send(request)

    async def in_skill_purchase_response(
        self,
        name: str,
        purchase_result: str,
        product_id: str,
        token: str,
        code: int = 200,
        message: str = "OK",
    ) -> SkillResponse:
        """The result of an in-skill purchase flow (``Buy``, ``Upsell``, ``Cancel``)."""
        payload = {"productId": product_id, "purchaseResult": purchase_result}
        return await self.connections_response(name, payload, token, code, message)

    # -- Device-side playback progress ------------------------------------------

    async def playback_nearly_finished(self) -> SkillResponse:
        responses = await self._dispatch(self.audio_player.playback_nearly_finished())
        return responses[0]

    async def playback_finished(self) -> SkillResponse:
        """Finish the current track; the next queued track, if any, starts."""
        responses = await self._dispatch(self.audio_player.playback_finished())
        return responses[0]

    def playback_offset(self, offset_in_milliseconds: int) -> None:
        """Move the playback position reported for the current track."""
        self.audio_player.set_offset(offset_in_milliseconds)

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def intent_request(
        self,
        intent_name: str,
        slots: Mapping[str, str] | None = None,
        confirmation_status: ConfirmationStatus | None = None,
        slot_statuses: Mapping[str, ConfirmationStatus] | None = None,
    ) -> IntentRequest:
        """Build, but do not send, an intent request.

        For dialog intents the request starts from the slots collected on
        earlier turns, and the supplied slots are layered on top.

        Raises:
            InvocationError: If the intent or one of the slots is not declared.
        """
        intent = self.model.intent(intent_name)
        if intent is None and not self.model.is_builtin_intent(intent_name):
            raise InvocationError(f"Interaction model has no intentName named: {intent_name}")

        request_slots: dict[str, Slot] = {}
        if intent is not None:
            request_slots = {s.name: Slot(name=s.name) for s in intent.slots}

        is_dialog = self.model.dialog_intent(intent_name) is not None
        dialog_state = None
        if is_dialog:
            dialog_state = self.dialog.begin()
            request_slots = dict(self.dialog.update_slots(request_slots))

        statuses = slot_statuses or {}
        for name, value in (slots or {}).items():
            slot = self._slot(intent, name, value, statuses.get(name, ConfirmationStatus.NONE))
            request_slots[slot.name] = slot
            if is_dialog:
                self.dialog.update_slot(slot.name, slot)

        if confirmation_status is None:
            confirmation_status = ConfirmationStatus.NONE
            if is_dialog and self.dialog.confirmation_status is not None:
                confirmation_status = self.dialog.confirmation_status

        return IntentRequest(
            locale=self.locale,
            intent=Intent(
                name=intent_name,
                confirmation_status=confirmation_status,
                slots=request_slots,
            ),
            dialog_state=dialog_state,
        )

    def _slot(
        self,
        intent: IntentDefinition | None,
        name: str,
        value: str,
        status: ConfirmationStatus,
    ) -> Slot:
        if intent is None or not intent.has_slots:
            raise InvocationError(
                "Trying to add slot to intent that does not have any slots defined"
            )
        declared = intent.slot(name)
        if declared is None:
            raise InvocationError(f"Trying to add undefined slot to intent: {name}")

        slot = Slot(name=declared.name, value=value, confirmation_status=status)
        authorities = self.model.slot_types.entity_resolutions(
            declared.type, value, self.application_id
        )
        if authorities is not None:
            slot.resolutions_per_authority = authorities
        return slot

    def _envelope(self, request: BaseRequest, snapshot: PlayerSnapshot | None) -> dict[str, Any]:
        device = self.context.device
        context: dict[str, Any] = {"System": self.context.system()}
        if device.display_supported:
            context["Display"] = {}
        if device.audio_player_supported:
            context["AudioPlayer"] = (snapshot or self.audio_player.snapshot()).context()

        envelope: dict[str, Any] = {"version": PROTOCOL_VERSION}
        if request.type in SESSION_REQUEST_TYPES:
            envelope["session"] = self.context.session_block(
                include_attributes=request.type != RequestType.LAUNCH.value
            )
        envelope["context"] = context
        envelope["request"] = request.to_json()
        return envelope

    def _event_request(self, event: AudioPlayerEvent) -> BaseRequest:
        if event.request_type == RequestType.SESSION_ENDED:
            return SessionEndedRequest(
                locale=self.locale, reason=SessionEndedReason.ERROR, error=event.error
            )
        return AudioPlayerRequest(
            locale=self.locale,
            type=event.request_type.value,
            token=event.snapshot.token,
            offset_in_milliseconds=event.snapshot.offset_in_milliseconds,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch(self, events: list[AudioPlayerEvent]) -> list[SkillResponse]:
        responses = []
        for event in events:
            request = self._event_request(event)
            responses.append(await self.send(request, snapshot=event.snapshot))
        return responses

    async def send(
        self, request: BaseRequest, snapshot: PlayerSnapshot | None = None
    ) -> SkillResponse:
        """Send one request and fold the skill's answer into emulator state.

        Args:
            request: Any request variant from :mod:`skill_emulator.protocol`.
            snapshot: Audio player state to report instead of the live state,
                used for notifications captured earlier in the turn.
        """
        payload = self._envelope(request, snapshot)
        is_intent = isinstance(request, IntentRequest)
        audio_supported = self.context.device.audio_player_supported

        if is_intent and audio_supported:
            await self._dispatch(self.audio_player.suspend())

        if self._filter is not None:
            filtered = self._filter(payload)
            if inspect.isawaitable(filtered):
                await filtered

        logger.debug("Sending %s to skill", request.type)
        self.request_log.append(payload)
        response = SkillResponse(await self.interactor.invoke(payload))

        self._fold_session(request, response)

        for directive in response.directives:
            await self._dispatch(self.audio_player.handle_directive(directive))
            if str(directive.get("type", "")).startswith("Dialog."):
                self.dialog.handle_directive(directive)

        if is_intent and audio_supported:
            await self._dispatch(self.audio_player.resume())

        return response

    def _fold_session(self, request: BaseRequest, response: SkillResponse) -> None:
        if request.type not in SESSION_REQUEST_TYPES:
            return
        session = self.context.session
        ended = request.type == RequestType.SESSION_ENDED.value or (
            session is not None and response.should_end_session
        )
        if ended:
            self.dialog.reset()
            self.context.end_session()
        elif session is not None:
            session.new = False
            attributes = response.json.get("sessionAttributes")
            if attributes is not None:
                session.attributes = dict(attributes)
