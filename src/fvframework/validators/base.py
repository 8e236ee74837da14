"""
Contains the validator base class and the registry which maps validator names onto validator instances.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Iterator, Mapping, Optional

from frozendict import frozendict

from fvframework.types import ValidatorResult
from fvframework.utils import optional_option, required_option

if TYPE_CHECKING:
    from fvframework.context import ValidationContext


class Validator(ABC):
    """
    A stateless predicate which checks the value of a field element.

    `validate` returns either a boolean or - for checks which need a round trip - an awaitable resolving to a boolean
    or a `ValidationTask`. Implementations must treat an empty value as valid unless their purpose is to check for
    emptiness.

    `option_types` declares the types of the options a validator understands, `required_options` the ones it can't do
    without. Both are checked once when the fields of a form are set up.
    """

    option_types: ClassVar[Mapping[str, Any]] = frozendict()
    required_options: ClassVar[frozenset[str]] = frozenset()

    @abstractmethod
    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> ValidatorResult:
        """Checks the `value` of `context.element`"""

    def check_options(self, options: Mapping[str, Any]) -> None:
        """
        Raises a KeyError if a required option is missing and a TypeCheckError if an option has the wrong type.
        Options which are not declared are not checked.
        """
        for name in sorted(self.required_options):
            required_option(options, name, self.option_types.get(name, Any))
        for name, option_type in self.option_types.items():
            optional_option(options, name, option_type)

    def __repr__(self):
        return f"{type(self).__name__}()"


class ValidatorRegistry:
    """
    Maps validator names onto validator instances. The mapping is resolved once when the fields of a form are set up.
    """

    def __init__(self, validators: Optional[Mapping[str, Validator]] = None):
        self._validators: dict[str, Validator] = {}
        for name, validator in (validators or {}).items():
            self.register(name, validator)

    def register(self, name: str, validator: Validator) -> None:
        """Registers the validator under `name`. An existing validator with the same name gets replaced."""
        if not isinstance(validator, Validator):
            raise TypeError(f"{name}: {validator!r} is not a Validator")
        self._validators[name] = validator

    def get(self, name: str) -> Optional[Validator]:
        """The validator registered under `name` or None"""
        return self._validators.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._validators

    def __iter__(self) -> Iterator[str]:
        return iter(self._validators)

    def __len__(self) -> int:
        return len(self._validators)
