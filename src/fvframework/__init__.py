"""
This package drives the client side validation of a form. It runs synchronous and asynchronous validators per field,
keeps track of their status and decides when the form may be submitted.
"""

from .analysis import ValidationResult
from .config import FieldOptions, FormOptions
from .context import ValidationContext
from .elements import ElementKind, FieldElement, Form
from .errors import ConfigurationError, InvalidTransitionError, UnknownFieldError
from .execution import ValidationManager
from .listeners import NullListener, ValidationListener
from .registry import Field, FieldRegistry, ValidatorBinding
from .state import BindingKey, ValidationStateStore
from .tasks import TaskOutcome, ValidationTask
from .types import FormVerdict, LiveMode, Status
from .validators import Validator, ValidatorRegistry, default_registry
