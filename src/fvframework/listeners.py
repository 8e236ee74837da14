"""
Contains the interface through which the validation manager reports to the presentation layer.
"""
from typing import TYPE_CHECKING, Optional, Protocol

from .types import Status

if TYPE_CHECKING:
    from .execution import ValidationManager
    from .registry import Field


class ValidationListener(Protocol):
    """
    Receives the changes of the validation state. All methods are called on the thread running the event loop.
    """

    def on_status_changed(self, field: "Field", unit: int, validator_name: Optional[str], status: Status) -> None:
        """The status of a binding changed. `validator_name` is None if all bindings of the unit changed."""

    def on_submit_gate_changed(self, allowed: bool) -> None:
        """Submitting became allowed or got blocked"""

    def on_focus_target(self, field: Optional["Field"]) -> None:
        """The user should be directed to `field`"""

    def on_submitted(self, manager: "ValidationManager") -> None:
        """The form got submitted without a custom submit handler"""


class NullListener:
    """A listener which ignores everything"""

    def on_status_changed(self, field: "Field", unit: int, validator_name: Optional[str], status: Status) -> None:
        pass

    def on_submit_gate_changed(self, allowed: bool) -> None:
        pass

    def on_focus_target(self, field: Optional["Field"]) -> None:
        pass

    def on_submitted(self, manager: "ValidationManager") -> None:
        pass
