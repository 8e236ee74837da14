"""
Contains the exceptions raised by the validation framework.
Note that failing validators are not reported by exceptions: a validator which raises is treated as a failed check.
"""
from typing import Optional


class ConfigurationError(ValueError):
    """
    Raised if the form or field options are malformed, e.g. an option has a wrong type or an unknown live mode is used.
    """

    def __init__(self, message: str, option_path: Optional[str] = None):
        if option_path is not None:
            message = f"{option_path}: {message}"
        super().__init__(message)
        self.option_path = option_path


class UnknownFieldError(KeyError):
    """
    Raised if a field name could not be resolved by the field registry.
    """

    def __init__(self, field_name: str):
        super().__init__(field_name)
        self.field_name = field_name

    def __str__(self):
        return f"Field '{self.field_name}' is not registered"


class InvalidTransitionError(RuntimeError):
    """
    Raised if a status change is attempted which is not allowed by the validation state machine.
    """
