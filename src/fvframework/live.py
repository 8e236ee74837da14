"""
Contains the scheduler which decides whether an input event triggers a new validation.
"""
import logging
from typing import TYPE_CHECKING

from .elements import FieldElement
from .types import LiveMode, Status

if TYPE_CHECKING:
    from .execution import ValidationManager

logger = logging.getLogger(__name__)


class LiveTriggerScheduler:
    """
    Routes input events of field elements.

    The change event of an element (`input` or `change`, depending on its kind) resets the status of the element's
    field and withdraws a pending submit request. If live validation is active and the event is one of the field's
    trigger events, the field is validated again.
    In `submitted` mode live validation is inactive until the first failed submit attempt.
    """

    def __init__(self, manager: "ValidationManager", mode: LiveMode = LiveMode.ENABLED):
        self._manager = manager
        self.mode = mode

    def set_mode(self, mode: LiveMode) -> None:
        """Switches the live mode"""
        if mode != self.mode:
            logger.debug("Live mode: %s -> %s", self.mode.value, mode.value)
        self.mode = mode

    @property
    def active(self) -> bool:
        """True if input events trigger validations"""
        return self.mode == LiveMode.ENABLED

    def dispatch(self, element: FieldElement, event: str) -> None:
        """Handles `event` which occurred on `element`"""
        manager = self._manager
        field = manager.fields.field_of(element)
        if field is None:
            return
        unit = field.unit_of(element)
        if event == field.change_event:
            manager.submit_requested = False
            if field.grouped:
                manager.update_status(field.name, Status.NOT_VALIDATED)
            else:
                manager.update_element_status(field.name, unit, Status.NOT_VALIDATED)
        if self.active and event in field.trigger_events:
            if field.grouped:
                manager.validate_field(field.name)
            else:
                manager.validate_field_element(field.name, unit)
