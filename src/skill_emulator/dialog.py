"""
Multi-turn dialog state.

The dialog manager is driven by the ``Dialog.*`` directives a skill returns,
never by the emulator itself. It accumulates slot observations across turns
so that each new request for a dialog intent carries the full picture, and it
forgets everything when the session ends.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

from skill_emulator.errors import DialogError
from skill_emulator.protocol import ConfirmationStatus, DialogState, Slot

if TYPE_CHECKING:
    from skill_emulator.model import InteractionModel

logger = logging.getLogger(__name__)

DELEGATE = "Dialog.Delegate"
ELICIT_SLOT = "Dialog.ElicitSlot"
CONFIRM_SLOT = "Dialog.ConfirmSlot"
CONFIRM_INTENT = "Dialog.ConfirmIntent"

_SLOT_DIRECTIVES = (ELICIT_SLOT, CONFIRM_SLOT, CONFIRM_INTENT)

# No transition ever moves a dialog backwards within a session.
_NEXT_STATE = {
    None: DialogState.STARTED,
    DialogState.STARTED: DialogState.IN_PROGRESS,
    DialogState.IN_PROGRESS: DialogState.IN_PROGRESS,
    DialogState.COMPLETED: DialogState.COMPLETED,
}


def _as_slot(name: str, data: Slot | Mapping[str, Any]) -> Slot:
    if isinstance(data, Slot):
        return data
    return Slot.model_validate({"name": name, **data})


class DialogManager:
    """Dialog state for the current session.

    Attributes:
        dialog_state: Current phase, or ``None`` before the first dialog turn.
        confirmation_status: Aggregate intent confirmation, or ``None``.
        slots: Accumulated slot observations, keyed by slot name.
    """

    def __init__(self, model: InteractionModel) -> None:
        self._model = model
        self.dialog_state: DialogState | None = None
        self.confirmation_status: ConfirmationStatus | None = None
        self.slots: dict[str, Slot] = {}

    def begin(self) -> DialogState:
        """Return the state for an outgoing dialog request, starting if needed."""
        if self.dialog_state is None:
            self.dialog_state = DialogState.STARTED
        return self.dialog_state

    def handle_directive(self, directive: Mapping[str, Any]) -> None:
        """Fold a ``Dialog.*`` directive returned by the skill into the state.

        Raises:
            DialogError: If ``updatedIntent`` names an intent without dialog
                metadata.
        """
        directive_type = directive.get("type", "")
        updated = directive.get("updatedIntent")
        if updated and self._model.dialog_intent(updated.get("name")) is None:
            raise DialogError(f"No match for dialog name: {updated.get('name')}")

        self.dialog_state = _NEXT_STATE[self.dialog_state]

        if directive_type == DELEGATE:
            self.confirmation_status = ConfirmationStatus.NONE
        elif directive_type in _SLOT_DIRECTIVES:
            if self.confirmation_status is None:
                self.confirmation_status = ConfirmationStatus.NONE
            if updated:
                self.update_slots(updated.get("slots") or {})
            if directive_type == CONFIRM_INTENT:
                self.dialog_state = DialogState.COMPLETED

        logger.debug("Dialog directive %s -> state %s", directive_type, self.dialog_state)

    def update_slot(self, name: str, slot: Slot | Mapping[str, Any]) -> None:
        """Merge one slot observation.

        A name-only observation (no value) is stored only when the slot is
        new, so it never erases a value collected on an earlier turn.
        """
        observed = _as_slot(name, slot)
        existing = self.slots.get(name)
        if existing is None:
            self.slots[name] = observed
        elif observed.value is not None:
            self.slots[name] = existing.model_copy(
                update={
                    "value": observed.value,
                    "resolutions_per_authority": observed.resolutions_per_authority,
                    "confirmation_status": observed.confirmation_status,
                }
            )

    def update_slots(self, slots: Mapping[str, Slot | Mapping[str, Any]]) -> dict[str, Slot]:
        """Merge several observations and return the accumulated slots."""
        for name, slot in slots.items():
            self.update_slot(name, slot)
        return self.slots

    def set_slot_status(self, name: str, status: ConfirmationStatus) -> None:
        """Set the confirmation status of an accumulated slot.

        Raises:
            DialogError: If the slot has not been observed in this dialog.
        """
        slot = self.slots.get(name)
        if slot is None:
            raise DialogError(f"No dialog slot named: {name}")
        self.slots[name] = slot.model_copy(update={"confirmation_status": status})

    def reset(self) -> None:
        self.dialog_state = None
        self.confirmation_status = None
        self.slots = {}
