"""
Contains the context which is handed to a validator on every check.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .elements import FieldElement
from .types import Status

if TYPE_CHECKING:
    from .execution import ValidationManager
    from .registry import Field


@dataclass(frozen=True)
class ValidationContext:
    """
    Describes the check a validator is currently performing and gives access to the rest of the form.
    """

    manager: "ValidationManager"
    field: "Field"
    element: FieldElement
    validator_name: str

    def elements_of(self, field_name: str) -> Optional[list[FieldElement]]:
        """The elements of another field or None if there is no such field"""
        other = self.manager.fields.resolve(field_name)
        return None if other is None else list(other.elements)

    def value_of(self, field_name: str) -> Optional[str]:
        """The value of the first element of another field or None if there is no such field"""
        elements = self.elements_of(field_name)
        return None if not elements else elements[0].value

    def force_valid(self, field_name: str, validator_name: Optional[str] = None) -> None:
        """
        Settles the binding of another field to VALID. By default the binding with the name of the running validator
        is settled.
        """
        self.manager.force_status(field_name, validator_name or self.validator_name, Status.VALID)
