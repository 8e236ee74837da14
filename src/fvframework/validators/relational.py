"""
Contains validators which relate the validated element to other elements of the form.
"""
from typing import TYPE_CHECKING, Any

from frozendict import frozendict

from fvframework.elements import ElementKind
from fvframework.utils import optional_option, required_option

from .base import Validator

if TYPE_CHECKING:
    from fvframework.context import ValidationContext


class Identical(Validator):
    """
    Checks if the value equals the value of the field named by the `field` option. If so, the binding of the same
    name on the other field is settled as VALID, too.
    """

    option_types = frozendict({"field": str})
    required_options = frozenset({"field"})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        other_name: str = required_option(options, "field", str)
        other_value = context.value_of(other_name)
        if other_value is None:
            return True
        if value == other_value:
            context.force_valid(other_name)
            return True
        return False


class Different(Validator):
    """
    Checks if the value differs from the value of the field named by the `field` option. If so, the binding of the
    same name on the other field is settled as VALID, too.
    """

    option_types = frozendict({"field": str})
    required_options = frozenset({"field"})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        other_name: str = required_option(options, "field", str)
        other_value = context.value_of(other_name)
        if other_value is None:
            return True
        if value != other_value:
            context.force_valid(other_name)
            return True
        return False


class Choice(Validator):
    """
    Checks if the number of checked elements of a radio/checkbox group (or the number of selected options of a select)
    lies within the `min` and `max` options.
    """

    option_types = frozendict({"min": int, "max": int})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if context.element.kind == ElementKind.SELECT:
            num_choices = len(context.element.selected)
        else:
            num_choices = sum(1 for element in context.field.elements if element.checked)
        minimum = optional_option(options, "min", int)
        maximum = optional_option(options, "max", int)
        if minimum is not None and num_choices < minimum:
            return False
        if maximum is not None and num_choices > maximum:
            return False
        return True
