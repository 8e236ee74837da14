"""
Contains the types used in the validation framework
"""
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Coroutine, TypeAlias, Union

if TYPE_CHECKING:
    from .elements import FieldElement
    from .execution import ValidationManager
    from .tasks import ValidationTask


class Status(str, Enum):
    """
    The validation status of a single validator binding.
    """

    NOT_VALIDATED = "NOT_VALIDATED"
    VALIDATING = "VALIDATING"
    VALID = "VALID"
    INVALID = "INVALID"

    @property
    def settled(self) -> bool:
        """True for `VALID` and `INVALID`"""
        return self in (Status.VALID, Status.INVALID)


class LiveMode(str, Enum):
    """
    Determines when a field mutation triggers a new validation of the field.
    """

    ENABLED = "enabled"
    DISABLED = "disabled"
    SUBMITTED = "submitted"


class FormVerdict(str, Enum):
    """
    The outcome of aggregating all bindings of a form.
    """

    VALID = "VALID"
    INVALID = "INVALID"
    UNDECIDED = "UNDECIDED"


ValidatorResult: TypeAlias = Union[bool, Awaitable[bool], "ValidationTask"]
ExcludedPredicate: TypeAlias = Callable[["FieldElement", "ValidationManager"], bool]
AsyncSubmitHandler: TypeAlias = Callable[["ValidationManager"], Coroutine[Any, Any, None]]
SyncSubmitHandler: TypeAlias = Callable[["ValidationManager"], None]
SubmitHandler: TypeAlias = AsyncSubmitHandler | SyncSubmitHandler
