from typing import Any, Optional

import pytest
from frozendict import frozendict

from fvframework import ElementKind, Field, FieldElement, Form, Status, ValidationManager, ValidationTask, Validator


class RecordingListener:
    """Records every notification of the validation manager"""

    def __init__(self):
        self.statuses: list[tuple[str, int, Optional[str], Status]] = []
        self.gate: list[bool] = []
        self.focus: list[Optional[str]] = []
        self.submitted = 0

    def on_status_changed(self, field: Field, unit: int, validator_name: Optional[str], status: Status) -> None:
        self.statuses.append((field.name, unit, validator_name, status))

    def on_submit_gate_changed(self, allowed: bool) -> None:
        self.gate.append(allowed)

    def on_focus_target(self, field: Optional[Field]) -> None:
        self.focus.append(None if field is None else field.name)

    def on_submitted(self, manager: ValidationManager) -> None:
        self.submitted += 1

    def statuses_of(self, field_name: str, validator_name: Optional[str] = None) -> list[Status]:
        return [
            status
            for name, _, validator, status in self.statuses
            if name == field_name and (validator_name is None or validator == validator_name)
        ]


class StubbornTask(ValidationTask):
    """A task which ignores cancellation, like a response which is already on its way"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cancel_calls = 0

    def cancel(self) -> None:
        self.cancel_calls += 1


class ControlledValidator(Validator):
    """An asynchronous validator whose checks are settled by the test"""

    def __init__(self, task_type: type[ValidationTask] = ValidationTask):
        self.task_type = task_type
        self.tasks: list[ValidationTask] = []
        self.values: list[str] = []

    def validate(self, context, value: str, options: frozendict[str, Any]) -> ValidationTask:
        task = self.task_type.deferred(name=f"{context.field.name}={value}")
        self.tasks.append(task)
        self.values.append(value)
        return task


class CountingValidator(Validator):
    """A synchronous validator which counts its invocations"""

    def __init__(self, result: bool = True):
        self.result = result
        self.calls = 0

    def validate(self, context, value: str, options: frozendict[str, Any]) -> bool:
        self.calls += 1
        return self.result


def text_form(**values: str) -> Form:
    return Form(FieldElement(name, value=value) for name, value in values.items())


def checkbox_form(name: str, count: int, kind: ElementKind = ElementKind.CHECKBOX) -> Form:
    return Form(FieldElement(name, kind=kind, value=str(index)) for index in range(count))


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()
