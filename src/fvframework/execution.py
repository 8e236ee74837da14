"""
Contains the ValidationManager which runs the validators of a form, keeps track of their asynchronous checks and
decides whether the form may be submitted.
"""
import asyncio
import functools
import inspect
import logging
from typing import Any, Mapping, Optional

from .analysis import ValidationResult
from .config import FormOptions
from .context import ValidationContext
from .elements import ElementKind, FieldElement, Form
from .listeners import NullListener, ValidationListener
from .live import LiveTriggerScheduler
from .registry import Field, FieldRegistry
from .state import BindingKey, ValidationStateStore
from .tasks import TaskOutcome, ValidationTask
from .types import FormVerdict, LiveMode, Status
from .validators import ValidatorRegistry, default_registry

logger = logging.getLogger(__name__)


# pylint: disable=too-many-instance-attributes, too-many-public-methods
class ValidationManager:
    """
    The validation manager owns the validation state of a form.

    Synchronous validators are applied within the call which started them. Asynchronous validators run as
    `ValidationTask`s on the running event loop; starting a check for a binding cancels the previous task of that
    binding and a settlement is only applied if it comes from the task which is still attached to the binding.
    All methods have to be called from the thread running the event loop.
    """

    def __init__(
        self,
        form: Form,
        options: FormOptions | Mapping[str, Any],
        validators: Optional[ValidatorRegistry] = None,
        listener: Optional[ValidationListener] = None,
    ):
        self.form = form
        self.options = options if isinstance(options, FormOptions) else FormOptions.from_mapping(options)
        self.validators = validators if validators is not None else default_registry()
        self.listener: ValidationListener = listener if listener is not None else NullListener()
        self.fields = FieldRegistry.build(form, self.options, self.validators)
        self.store = ValidationStateStore()
        for field in self.fields:
            for unit in range(len(field.units)):
                for validator_name in field.bindings:
                    self.store.register(BindingKey(field.name, unit, validator_name))
        self.live = LiveTriggerScheduler(self, self.options.live)
        self.submit_requested = False
        self._first_invalid_field_name: Optional[str] = None
        self._submit_allowed = True
        self._background: set[asyncio.Future] = set()

    # --- validation ---

    def validate_form(self) -> None:
        """Validates every enabled field. If a submit was requested, the form gets submitted if it is valid."""
        for field in self.fields:
            self._validate_field(field)
        if self.submit_requested:
            self._submit()

    def validate_field(self, name: str) -> None:
        """Validates all units of the field. Unknown field names are ignored."""
        field = self.fields.resolve(name)
        if field is None:
            logger.debug("Skipping validation of unknown field '%s'", name)
            return
        self._validate_field(field)

    def validate_field_element(self, name: str, unit: int) -> None:
        """Validates a single unit of the field"""
        field = self.fields.resolve(name)
        if field is None:
            logger.debug("Skipping validation of unknown field '%s'", name)
            return
        self._validate_unit(field, unit)

    def _validate_field(self, field: Field) -> None:
        for unit in range(len(field.units)):
            self._validate_unit(field, unit)

    def _validate_unit(self, field: Field, unit: int) -> None:
        element = field.units[unit]
        if not field.enabled or self.is_excluded(element):
            return
        for validator_name, binding in field.bindings.items():
            key = BindingKey(field.name, unit, validator_name)
            status = self.store.status(key)
            if status.settled:
                continue
            if status == Status.VALIDATING:
                # supersedes the running check
                self._set_status(field, key, Status.NOT_VALIDATED)
            self._set_status(field, key, Status.VALIDATING)
            context = ValidationContext(self, field, element, validator_name)
            result: bool | ValidationTask
            outcome = None
            try:
                outcome = binding.validator.validate(context, element.value, binding.options)
                if isinstance(outcome, (bool, ValidationTask)):
                    result = outcome
                else:
                    result = ValidationTask(outcome, name=str(key))
            except Exception:  # pylint: disable=broad-except
                logger.exception("Validator '%s' failed on field '%s'", validator_name, field.name)
                if inspect.iscoroutine(outcome):
                    outcome.close()
                result = False
            if self.store.status(key) != Status.VALIDATING:
                # the binding got settled or reset while the validator was running
                if isinstance(result, ValidationTask):
                    result.cancel()
                continue
            if isinstance(result, bool):
                self._set_status(field, key, Status.VALID if result else Status.INVALID)
                continue
            self.store.attach(key, result)
            result.add_done_callback(functools.partial(self._on_task_done, field, key))

    def _on_task_done(self, field: Field, key: BindingKey, task: ValidationTask, outcome: TaskOutcome) -> None:
        if self.store.pending(key) is not task:
            logger.debug("%s: discarding the result of superseded %s", key, task)
            return
        self.store.detach(key)
        if outcome.error is not None:
            logger.warning("%s: asynchronous check failed", key, exc_info=outcome.error)
        elif outcome.cancelled:
            logger.warning("%s: asynchronous check was cancelled by its validator", key)
        self._set_status(field, key, Status.VALID if outcome.valid else Status.INVALID)
        if outcome.valid and self.submit_requested:
            self._submit()

    async def wait_until_settled(self) -> None:
        """Waits until no asynchronous check is running anymore, including checks started while waiting"""
        while True:
            tasks = self.store.pending_tasks()
            if not tasks:
                return
            await asyncio.gather(*(task.wait() for task in tasks))

    # --- status updates ---

    def update_status(self, name: str, status: Status, validator_name: Optional[str] = None) -> None:
        """
        Updates the bindings of all units of the field; all bindings if `validator_name` is None.
        NOT_VALIDATED resets the bindings and cancels their checks, VALID and INVALID settle them directly.
        """
        field = self.fields[name]
        for unit in range(len(field.units)):
            self._update_unit(field, unit, status, validator_name)

    def update_element_status(
        self, name: str, unit: int, status: Status, validator_name: Optional[str] = None
    ) -> None:
        """Same as `update_status` but restricted to one unit of the field"""
        self._update_unit(self.fields[name], unit, status, validator_name)

    def force_status(self, name: str, validator_name: str, status: Status = Status.VALID) -> None:
        """
        Settles the binding `validator_name` of another field. This is used by validators which compare two fields:
        if the comparison succeeds, the counterpart is settled as well. Unknown fields and fields without such a
        binding are ignored.
        """
        field = self.fields.resolve(name)
        if field is None or validator_name not in field.bindings:
            logger.debug("Ignoring forced status of %s.%s", name, validator_name)
            return
        self.update_status(name, status, validator_name)

    def _update_unit(self, field: Field, unit: int, status: Status, validator_name: Optional[str]) -> None:
        if status == Status.VALIDATING:
            raise ValueError("VALIDATING can only be set by starting a check")
        names = list(field.bindings) if validator_name is None else [validator_name]
        for name in names:
            if name not in field.bindings:
                continue
            self._set_status(field, BindingKey(field.name, unit, name), status, force=status.settled)

    def _set_status(self, field: Field, key: BindingKey, status: Status, force: bool = False) -> None:
        if self.store.transition(key, status, force=force):
            self.listener.on_status_changed(field, key.unit, key.validator, status)
        self._update_submit_gate()

    # --- aggregation ---

    def is_excluded(self, element: FieldElement) -> bool:
        """True if one of the exclusion filters matches the element"""
        return any(predicate(element, self) for predicate in self.options.excluded)

    def _relevant_keys(self):
        for field in self.fields:
            if not field.enabled:
                continue
            for unit, element in enumerate(field.units):
                if self.is_excluded(element):
                    continue
                for validator_name in field.bindings:
                    yield field, BindingKey(field.name, unit, validator_name)

    def evaluate(self) -> FormVerdict:
        """
        Aggregates the bindings of all enabled fields in registration order. The first binding which is not VALID
        decides: NOT_VALIDATED or VALIDATING make the form UNDECIDED, INVALID records its field as the first invalid
        field.
        """
        self._first_invalid_field_name = None
        for field, key in self._relevant_keys():
            status = self.store.status(key)
            if status in (Status.NOT_VALIDATED, Status.VALIDATING):
                return FormVerdict.UNDECIDED
            if status == Status.INVALID:
                self._first_invalid_field_name = field.name
                return FormVerdict.INVALID
        return FormVerdict.VALID

    def is_form_valid(self) -> bool:
        """True if every binding of every enabled field is VALID"""
        return self.evaluate() == FormVerdict.VALID

    @property
    def first_invalid_field(self) -> Optional[Field]:
        """The field found invalid by the last aggregation"""
        if self._first_invalid_field_name is None:
            return None
        return self.fields.resolve(self._first_invalid_field_name)

    def field_status(self, name: str) -> Status:
        """
        The combined status of a field: INVALID if any binding is INVALID, else VALIDATING if any binding is
        VALIDATING, else NOT_VALIDATED if any binding is NOT_VALIDATED, else VALID.
        """
        field = self.fields[name]
        statuses = {self.store.status(key) for key in self.store.keys(field.name)}
        for status in (Status.INVALID, Status.VALIDATING, Status.NOT_VALIDATED):
            if status in statuses:
                return status
        return Status.VALID

    def is_field_valid(self, name: str) -> bool:
        """True if all bindings of the field are VALID"""
        return self.field_status(name) == Status.VALID

    def result(self) -> ValidationResult:
        """An analysis of the current validation state"""
        return ValidationResult(self.fields, self.store.snapshot())

    # --- submit gate ---

    def request_submit(self) -> None:
        """
        Requests the submission of the form and validates it. The request stays open until the form is submitted or
        a field value changes: an asynchronous check settling VALID submits the form if it completes the validation.
        """
        self.submit_requested = True
        self.validate_form()

    def _submit(self) -> bool:
        if self.evaluate() != FormVerdict.VALID:
            if self.live.mode == LiveMode.SUBMITTED:
                self.live.set_mode(LiveMode.ENABLED)
            field = self.first_invalid_field
            if field is not None:
                self.listener.on_focus_target(field)
            return False
        self.submit_requested = False
        handler = self.options.submit_handler
        if handler is None:
            self.default_submit()
            return True
        logger.info("Submitting form")
        result = handler(self)
        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result)
            self._background.add(future)
            future.add_done_callback(self._on_submit_done)
        return True

    def _on_submit_done(self, future: asyncio.Future) -> None:
        self._background.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.error("Submit handler failed", exc_info=future.exception())

    def default_submit(self) -> None:
        """Blocks further submits and hands the form over to the listener"""
        logger.info("Submitting form")
        self._set_submit_allowed(False)
        self.listener.on_submitted(self)

    @property
    def submit_allowed(self) -> bool:
        """False while a check is running or a binding is INVALID"""
        return self._submit_allowed

    def _update_submit_gate(self) -> None:
        blocked = any(
            self.store.status(key) in (Status.VALIDATING, Status.INVALID) for _, key in self._relevant_keys()
        )
        self._set_submit_allowed(not blocked)

    def _set_submit_allowed(self, allowed: bool) -> None:
        if not allowed and self.live.mode == LiveMode.DISABLED:
            return
        if allowed != self._submit_allowed:
            self._submit_allowed = allowed
            self.listener.on_submit_gate_changed(allowed)

    # --- form manipulation ---

    def reset_form(self, clear_values: bool = False) -> None:
        """Cancels all running checks and resets every binding. If `clear_values` is set, the user input is cleared."""
        for field in self.fields:
            self.update_status(field.name, Status.NOT_VALIDATED)
            if clear_values:
                for element in field.elements:
                    element.clear()
        self._first_invalid_field_name = None
        self.submit_requested = False
        self._set_submit_allowed(True)

    def set_field_enabled(self, name: str, enabled: bool) -> None:
        """Enables or disables all validators of a field. The bindings of the field are reset."""
        field = self.fields[name]
        field.enabled = enabled
        self.update_status(name, Status.NOT_VALIDATED)

    def dispatch(self, element: FieldElement, event: str) -> None:
        """Handles an input event which occurred on `element`"""
        self.live.dispatch(element, event)

    def set_value(self, name: str, value: str, index: int = 0) -> None:
        """Changes the value of an element of the field and dispatches its change event"""
        element = self.fields[name].elements[index]
        element.value = value
        self.dispatch(element, element.kind.change_event)

    def set_checked(self, name: str, index: int, checked: bool = True) -> None:
        """Checks or unchecks a radio button or checkbox of the field and dispatches its change event"""
        field = self.fields[name]
        element = field.elements[index]
        if checked and field.kind == ElementKind.RADIO:
            for other in field.elements:
                other.checked = False
        element.checked = checked
        self.dispatch(element, element.kind.change_event)
