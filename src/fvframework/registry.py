"""
Contains the field registry which resolves field names to their elements and validator bindings.
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

from frozendict import frozendict
from typeguard import TypeCheckError

from .config import FormOptions
from .elements import ElementKind, FieldElement, Form
from .errors import ConfigurationError, UnknownFieldError
from .validators.base import Validator, ValidatorRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatorBinding:
    """
    The resolved configuration of one validator on one field. The status of a binding is kept by the
    `ValidationStateStore`.
    """

    name: str
    validator: Validator
    options: frozendict[str, Any]

    @property
    def message(self) -> str:
        """The message to show if the check fails"""
        return self.options["message"]


@dataclass(eq=False)
class Field:
    """
    A logical input. All elements of a field are bound to the field name.
    """

    name: str
    elements: tuple[FieldElement, ...]
    bindings: frozendict[str, ValidatorBinding]
    trigger: Optional[str] = None
    enabled: bool = True

    def __post_init__(self):
        if len(self.elements) == 0:
            raise ValueError(f"Field '{self.name}' has no elements")

    @property
    def kind(self) -> ElementKind:
        """The kind of the first element"""
        return self.elements[0].kind

    @property
    def grouped(self) -> bool:
        """
        True if the field is scored as one unit: it has exactly one element or it is a group of radio buttons or
        checkboxes.
        """
        return len(self.elements) == 1 or self.kind.is_choice

    @property
    def units(self) -> tuple[FieldElement, ...]:
        """
        The elements which are validated independently. A choice group is represented by its first element, for
        every other kind each element is a unit of its own.
        """
        if self.kind.is_choice:
            return self.elements[:1]
        return self.elements

    def unit_of(self, element: FieldElement) -> int:
        """The index of the unit which `element` belongs to"""
        for index, candidate in enumerate(self.elements):
            if candidate is element:
                return 0 if self.kind.is_choice else index
        raise ValueError(f"{element!r} is not an element of field '{self.name}'")

    @property
    def change_event(self) -> str:
        """The event which signals a value change of this field"""
        return self.kind.change_event

    @property
    def trigger_events(self) -> frozenset[str]:
        """The events which trigger a live validation"""
        return frozenset((self.trigger or self.change_event).split())


class FieldRegistry:
    """
    Maps field names to fields in the order of their registration.
    """

    def __init__(self, fields: Iterable[Field] = ()):
        self._fields: dict[str, Field] = {}
        for field in fields:
            self.add(field)

    @classmethod
    def build(cls, form: Form, options: FormOptions, validators: ValidatorRegistry) -> "FieldRegistry":
        """
        Resolves the configured fields against the form. Fields without elements and validators without a registered
        implementation are dropped.
        """
        registry = cls()
        for field_name, field_options in options.fields.items():
            if field_options.selector is not None:
                elements = tuple(field_options.selector(form))
            else:
                elements = tuple(form.elements(field_name))
            if len(elements) == 0:
                logger.warning("Field '%s' has no elements and will not be validated", field_name)
                continue
            bindings: dict[str, ValidatorBinding] = {}
            for validator_name in field_options.validators:
                validator = validators.get(validator_name)
                if validator is None:
                    logger.warning("Field '%s': dropping unknown validator '%s'", field_name, validator_name)
                    continue
                validator_options = options.validator_options(field_name, validator_name)
                try:
                    validator.check_options(validator_options)
                except (KeyError, TypeCheckError) as error:
                    raise ConfigurationError(
                        str(error.args[0]), f"fields.{field_name}.validators.{validator_name}"
                    ) from error
                bindings[validator_name] = ValidatorBinding(
                    name=validator_name, validator=validator, options=validator_options
                )
            registry.add(
                Field(
                    name=field_name,
                    elements=elements,
                    bindings=frozendict(bindings),
                    trigger=field_options.trigger or options.trigger,
                    enabled=field_options.enabled,
                )
            )
        return registry

    def add(self, field: Field) -> None:
        """Registers a field. Each element may only belong to one field."""
        if field.name in self._fields:
            raise ValueError(f"Field '{field.name}' is already registered")
        for element in field.elements:
            owner = self.field_of(element)
            if owner is not None:
                raise ValueError(f"{element!r} already belongs to field '{owner.name}'")
        self._fields[field.name] = field

    def resolve(self, name: str) -> Optional[Field]:
        """The field with the given name or None if there is no such field"""
        return self._fields.get(name)

    def field_of(self, element: FieldElement) -> Optional[Field]:
        """The field which owns the element"""
        for field in self._fields.values():
            if any(candidate is element for candidate in field.elements):
                return field
        return None

    def __getitem__(self, name: str) -> Field:
        try:
            return self._fields[name]
        except KeyError as error:
            raise UnknownFieldError(name) from error

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)
