"""
Contains the validator which delegates the check to a user supplied function.
"""
import inspect
from typing import TYPE_CHECKING, Any, Callable

from frozendict import frozendict

from fvframework.tasks import ValidationTask
from fvframework.types import ValidatorResult
from fvframework.utils import optional_option

from .base import Validator

if TYPE_CHECKING:
    from fvframework.context import ValidationContext


class Callback(Validator):
    """
    Calls the `callback` option with the value and the validation context. The callback may return a boolean, an
    awaitable (e.g. if it is a coroutine function) or a `ValidationTask`.
    Without a callback every value is valid.
    """

    option_types = frozendict({"callback": Callable[..., Any]})

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]) -> ValidatorResult:
        callback = optional_option(options, "callback", Callable[..., Any])
        if callback is None:
            return True
        result = callback(value, context)
        if isinstance(result, (bool, ValidationTask)) or inspect.isawaitable(result):
            return result
        return bool(result)
