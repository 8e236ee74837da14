"""
Contains the built-in validators and the registry they are looked up from.
"""
from .base import Validator, ValidatorRegistry
from .basic import (
    Between,
    Digits,
    EmailAddress,
    GreaterThan,
    Integer,
    LessThan,
    NotEmpty,
    Numeric,
    Regexp,
    StringCase,
    StringLength,
)
from .callback import Callback
from .relational import Choice, Different, Identical
from .remote import Remote


def default_registry() -> ValidatorRegistry:
    """A new registry containing all built-in validators"""
    return ValidatorRegistry(
        {
            "between": Between(),
            "callback": Callback(),
            "choice": Choice(),
            "different": Different(),
            "digits": Digits(),
            "emailAddress": EmailAddress(),
            "greaterThan": GreaterThan(),
            "identical": Identical(),
            "integer": Integer(),
            "lessThan": LessThan(),
            "notEmpty": NotEmpty(),
            "numeric": Numeric(),
            "regexp": Regexp(),
            "remote": Remote(),
            "stringCase": StringCase(),
            "stringLength": StringLength(),
        }
    )
