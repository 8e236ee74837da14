"""
Contains functionality to analyze the validation state of a form
"""
import itertools
from typing import TYPE_CHECKING, Optional

from frozendict import frozendict

from .state import BindingKey
from .types import Status

if TYPE_CHECKING:
    from .registry import FieldRegistry


def _extract_field(key: BindingKey) -> str:
    return key.field


# pylint: disable=too-many-instance-attributes
class ValidationResult:
    """
    The function `ValidationManager.result` will return an instance of this class. It analyzes a snapshot of the
    binding statuses, so it does not change if the validation goes on. Note that the values are calculated only
    if you use them - this saves some CPU time if you are only interested in e.g. the invalid fields.
    Disabled fields are not taken into account.
    """

    def __init__(self, fields: "FieldRegistry", statuses: frozendict[BindingKey, Status]):
        self._fields = fields
        self._statuses = frozendict(
            {
                key: status
                for key, status in statuses.items()
                if (field := fields.resolve(key.field)) is not None and field.enabled
            }
        )

        self._field_statuses: Optional[dict[str, Status]] = None
        self._failed_validators: Optional[dict[str, list[str]]] = None
        self._num_bindings_per_status: Optional[dict[Status, int]] = None

    def _determine_field_statuses(self):
        """Combines the binding statuses of each field and collects the failed validators"""
        self._field_statuses = {}
        self._failed_validators = {}
        for field_name, keys_iter in itertools.groupby(sorted(self._statuses, key=_extract_field), _extract_field):
            statuses = {key: self._statuses[key] for key in keys_iter}
            failed = [key.validator for key, status in statuses.items() if status == Status.INVALID]
            if failed:
                self._failed_validators[field_name] = sorted(set(failed))
            combined = Status.VALID
            for status in (Status.INVALID, Status.VALIDATING, Status.NOT_VALIDATED):
                if status in statuses.values():
                    combined = status
                    break
            self._field_statuses[field_name] = combined

    @property
    def field_statuses(self) -> dict[str, Status]:
        """Maps each enabled field onto its combined status"""
        if self._field_statuses is None:
            self._determine_field_statuses()
            assert self._field_statuses is not None
        return self._field_statuses

    @property
    def failed_validators(self) -> dict[str, list[str]]:
        """Maps each invalid field onto the names of its failed validators"""
        if self._failed_validators is None:
            self._determine_field_statuses()
            assert self._failed_validators is not None
        return self._failed_validators

    def _fields_with_status(self, status: Status) -> list[str]:
        return [field.name for field in self._fields if self.field_statuses.get(field.name) == status]

    @property
    def valid_fields(self) -> list[str]:
        """Fields whose bindings are all VALID, in registration order"""
        return self._fields_with_status(Status.VALID)

    @property
    def invalid_fields(self) -> list[str]:
        """Fields with at least one INVALID binding, in registration order"""
        return self._fields_with_status(Status.INVALID)

    @property
    def undecided_fields(self) -> list[str]:
        """Fields which are neither valid nor invalid yet, in registration order"""
        return [
            field.name
            for field in self._fields
            if self.field_statuses.get(field.name) in (Status.NOT_VALIDATED, Status.VALIDATING)
        ]

    @property
    def total(self) -> int:
        """Number of bindings of all enabled fields"""
        return len(self._statuses)

    @property
    def num_bindings_per_status(self) -> dict[Status, int]:
        """Maps every status onto the number of bindings having it"""
        if self._num_bindings_per_status is None:
            self._num_bindings_per_status = {status: 0 for status in Status}
            for status in self._statuses.values():
                self._num_bindings_per_status[status] += 1
        return self._num_bindings_per_status

    @property
    def num_pending(self) -> int:
        """Number of bindings with a running check"""
        return self.num_bindings_per_status[Status.VALIDATING]

    @property
    def num_invalid(self) -> int:
        """Number of INVALID bindings"""
        return self.num_bindings_per_status[Status.INVALID]

    @property
    def decided(self) -> bool:
        """True if every binding is either VALID or INVALID"""
        counts = self.num_bindings_per_status
        return counts[Status.NOT_VALIDATED] == 0 and counts[Status.VALIDATING] == 0
