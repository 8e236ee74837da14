"""
Contains the store which keeps the validation status and the in-flight task of every validator binding.
"""
import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from frozendict import frozendict

from .errors import InvalidTransitionError
from .tasks import ValidationTask
from .types import Status

logger = logging.getLogger(__name__)

_TRANSITIONS: frozendict[Status, frozenset[Status]] = frozendict(
    {
        Status.NOT_VALIDATED: frozenset({Status.NOT_VALIDATED, Status.VALIDATING}),
        Status.VALIDATING: frozenset({Status.NOT_VALIDATED, Status.VALID, Status.INVALID}),
        Status.VALID: frozenset({Status.NOT_VALIDATED}),
        Status.INVALID: frozenset({Status.NOT_VALIDATED}),
    }
)


@dataclass(frozen=True)
class BindingKey:
    """
    Identifies the binding of one validator to one validation unit of a field. Choice groups and single element fields
    have exactly one unit (index 0).
    """

    field: str
    unit: int
    validator: str

    def __str__(self):
        return f"{self.field}[{self.unit}].{self.validator}"


@dataclass
class _BindingState:
    status: Status = Status.NOT_VALIDATED
    task: Optional[ValidationTask] = None


class ValidationStateStore:
    """
    Keeps the status of each binding. The store guards the state machine:

        NOT_VALIDATED -> VALIDATING -> VALID | INVALID -> NOT_VALIDATED

    A task is attached to a binding only while its status is VALIDATING. Leaving VALIDATING detaches the task and
    cancels it if it is still running.
    """

    def __init__(self):
        self._states: dict[BindingKey, _BindingState] = {}

    def register(self, key: BindingKey) -> None:
        """Adds a binding in status NOT_VALIDATED. Registering a key twice does not touch the existing binding."""
        self._states.setdefault(key, _BindingState())

    def _state(self, key: BindingKey) -> _BindingState:
        try:
            return self._states[key]
        except KeyError as error:
            raise KeyError(f"Binding {key} is not registered") from error

    def status(self, key: BindingKey) -> Status:
        """The current status of the binding"""
        return self._state(key).status

    def pending(self, key: BindingKey) -> Optional[ValidationTask]:
        """The in-flight task of the binding or None"""
        return self._state(key).task

    def transition(self, key: BindingKey, status: Status, force: bool = False) -> bool:
        """
        Sets the status of the binding and returns True if it changed. If `force` is set, the binding may be settled
        to VALID or INVALID from any status; this is reserved for validators which settle other fields.
        """
        state = self._state(key)
        allowed = _TRANSITIONS[state.status]
        if force and status.settled:
            allowed = allowed | {status}
        if status not in allowed:
            raise InvalidTransitionError(f"{key}: {state.status.value} -> {status.value} is not allowed")
        if status != Status.VALIDATING:
            self.cancel(key)
        changed = state.status != status
        state.status = status
        if changed:
            logger.debug("%s: %s", key, status.value)
        return changed

    def attach(self, key: BindingKey, task: ValidationTask) -> None:
        """Stores the in-flight task of a VALIDATING binding. An existing task has to be cancelled before."""
        state = self._state(key)
        if state.status != Status.VALIDATING:
            raise InvalidTransitionError(f"{key}: cannot attach a task in status {state.status.value}")
        if state.task is not None:
            raise InvalidTransitionError(f"{key}: there is already a pending task {state.task}")
        state.task = task

    def detach(self, key: BindingKey) -> Optional[ValidationTask]:
        """Removes the in-flight task from the binding without cancelling it"""
        state = self._state(key)
        task, state.task = state.task, None
        return task

    def cancel(self, key: BindingKey) -> bool:
        """Detaches and cancels the in-flight task. Returns True if there was one."""
        task = self.detach(key)
        if task is None:
            return False
        logger.debug("%s: cancelling %s", key, task)
        task.cancel()
        return True

    def keys(self, field: Optional[str] = None, unit: Optional[int] = None) -> list[BindingKey]:
        """All registered keys in registration order, optionally restricted to a field (and a unit of it)"""
        return [
            key
            for key in self._states
            if (field is None or key.field == field) and (unit is None or key.unit == unit)
        ]

    def pending_tasks(self) -> list[ValidationTask]:
        """All tasks which are currently attached"""
        return [state.task for state in self._states.values() if state.task is not None]

    def snapshot(self) -> frozendict[BindingKey, Status]:
        """An immutable copy of all statuses"""
        return frozendict({key: state.status for key, state in self._states.items()})

    def __iter__(self) -> Iterator[BindingKey]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)
