"""
Contains validators which only look at the value of the validated element.
"""
import math
import re
from typing import TYPE_CHECKING, Any, Optional

from frozendict import frozendict

from fvframework.elements import ElementKind
from fvframework.utils import optional_option, required_option

from .base import Validator

if TYPE_CHECKING:
    from fvframework.context import ValidationContext

_INTEGER = re.compile(r"-?(?:0|[1-9][0-9]*)")
_DIGITS = re.compile(r"[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_EMAIL = re.compile(
    r"(([^<>()\[\]\\.,;:\s@\"]+(\.[^<>()\[\]\\.,;:\s@\"]+)*)|(\".+\"))@"
    r"((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))"
)


def parse_number(value: str) -> Optional[float]:
    """
    Parses a finite decimal number, surrounding whitespace is ignored. Returns None if `value` is no such number.
    Python specific spellings which `float` accepts as well (`"1_000"`, `"nan"`, `"inf"`) are rejected.
    """
    if _DECIMAL.fullmatch(value.strip()) is None:
        return None
    number = float(value)
    return number if math.isfinite(number) else None


class NotEmpty(Validator):
    """
    Fails if the value is empty. A group of radio buttons or checkboxes fails if no element is checked.
    """

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if context.element.kind.is_choice:
            return any(element.checked for element in context.field.elements)
        if context.element.kind == ElementKind.SELECT:
            return len(context.element.selected) > 0
        return value.strip() != ""


class Integer(Validator):
    """Checks if the value is an integer without leading zeros"""

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        return _INTEGER.fullmatch(value) is not None


class Numeric(Validator):
    """Checks if the value is a finite decimal number"""

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        return parse_number(value) is not None


class Digits(Validator):
    """Checks if the value contains digits only"""

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        return _DIGITS.fullmatch(value) is not None


class EmailAddress(Validator):
    """Checks if the value looks like an email address"""

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        return _EMAIL.fullmatch(value) is not None


class Regexp(Validator):
    """
    Checks if the value matches the `regexp` option. The option may be a pattern string or a compiled pattern.
    """

    option_types = frozendict({"regexp": str | re.Pattern})
    required_options = frozenset({"regexp"})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        pattern: str | re.Pattern = required_option(options, "regexp", str | re.Pattern)
        regexp = re.compile(pattern) if isinstance(pattern, str) else pattern
        return regexp.search(value) is not None


class StringLength(Validator):
    """
    Checks if the length of the stripped value lies within the `min` and `max` options. At least one of them should be
    set.
    """

    option_types = frozendict({"min": int, "max": int})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        length = len(value.strip())
        minimum = optional_option(options, "min", int)
        maximum = optional_option(options, "max", int)
        if minimum is not None and length < minimum:
            return False
        if maximum is not None and length > maximum:
            return False
        return True


class StringCase(Validator):
    """Checks if the value is lower case (default) or upper case, depending on the `case` option"""

    option_types = frozendict({"case": str})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        case = (optional_option(options, "case", str) or "lower").lower()
        if case == "upper":
            return value == value.upper()
        return value == value.lower()


class Between(Validator):
    """
    Checks if the number lies between the `min` and `max` options. The bounds are included unless `inclusive` is
    False.
    """

    option_types = frozendict({"min": int | float | str, "max": int | float | str, "inclusive": bool})
    required_options = frozenset({"min", "max"})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        number = parse_number(value)
        if number is None:
            return False
        minimum = float(required_option(options, "min", int | float | str))
        maximum = float(required_option(options, "max", int | float | str))
        if optional_option(options, "inclusive", bool, True):
            return minimum <= number <= maximum
        return minimum < number < maximum


class GreaterThan(Validator):
    """Checks if the number is greater than (or equal to, if `inclusive`) the `value` option"""

    option_types = frozendict({"value": int | float | str, "inclusive": bool})
    required_options = frozenset({"value"})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        number = parse_number(value)
        if number is None:
            return False
        bound = float(required_option(options, "value", int | float | str))
        if optional_option(options, "inclusive", bool, True):
            return number >= bound
        return number > bound


class LessThan(Validator):
    """Checks if the number is less than (or equal to, if `inclusive`) the `value` option"""

    option_types = frozendict({"value": int | float | str, "inclusive": bool})
    required_options = frozenset({"value"})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> bool:
        if value == "":
            return True
        number = parse_number(value)
        if number is None:
            return False
        bound = float(required_option(options, "value", int | float | str))
        if optional_option(options, "inclusive", bool, True):
            return number <= bound
        return number < bound
