"""
Contains the options of a form and its fields. Plain mappings (e.g. produced by a configuration loader) are converted
into immutable option objects by `FormOptions.from_mapping` before any validation runs.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from frozendict import frozendict
from typeguard import TypeCheckError

from .elements import ElementKind, FieldElement, Form
from .errors import ConfigurationError
from .types import ExcludedPredicate, LiveMode, SubmitHandler
from .utils import optional_option

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "This value is not valid"

Selector = Callable[[Form], Sequence[FieldElement]]


def _is_disabled(element: FieldElement, _manager: Any) -> bool:
    return element.disabled


def _is_hidden(element: FieldElement, _manager: Any) -> bool:
    return element.hidden or element.kind == ElementKind.HIDDEN


def _is_invisible(element: FieldElement, _manager: Any) -> bool:
    return not element.visible


EXCLUSION_FILTERS: frozendict[str, ExcludedPredicate] = frozendict(
    {
        ":disabled": _is_disabled,
        ":hidden": _is_hidden,
        ":not(:visible)": _is_invisible,
    }
)
DEFAULT_EXCLUDED: tuple[ExcludedPredicate, ...] = tuple(EXCLUSION_FILTERS.values())

_FORM_KEYS = frozenset({"fields", "live", "trigger", "message", "excluded", "submit_handler"})
_FIELD_KEYS = frozenset({"validators", "selector", "trigger", "message", "enabled"})


@dataclass(frozen=True)
class FieldOptions:
    """
    The options of a single field. `validators` maps validator names to the options of the respective validator.
    """

    validators: frozendict[str, frozendict[str, Any]] = field(default_factory=frozendict)
    selector: Optional[Selector] = None
    trigger: Optional[str] = None
    message: Optional[str] = None
    enabled: bool = True


@dataclass(frozen=True)
class FormOptions:
    """
    The options of a whole form.
    """

    fields: frozendict[str, FieldOptions] = field(default_factory=frozendict)
    live: LiveMode = LiveMode.ENABLED
    trigger: Optional[str] = None
    message: str = DEFAULT_MESSAGE
    excluded: tuple[ExcludedPredicate, ...] = DEFAULT_EXCLUDED
    submit_handler: Optional[SubmitHandler] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "FormOptions":
        """
        Builds the options from a plain mapping. Every value is type checked, a ConfigurationError naming the option
        path is raised if a value doesn't fit. Unknown keys are ignored.
        """
        _warn_unknown_keys(raw, _FORM_KEYS, "")
        raw_fields = _option(raw, "fields", Mapping[str, Mapping[str, Any]]) or {}
        live = _option(raw, "live", str | LiveMode)
        try:
            live_mode = LiveMode(live) if live is not None else LiveMode.ENABLED
        except ValueError as error:
            raise ConfigurationError(f"Unknown live mode '{live}'", "live") from error
        excluded = _option(raw, "excluded", str | Sequence[str | Callable[..., Any]])
        return cls(
            fields=frozendict(
                {name: _field_options(field_raw, f"fields.{name}") for name, field_raw in raw_fields.items()}
            ),
            live=live_mode,
            trigger=_option(raw, "trigger", str),
            message=_option(raw, "message", str) or DEFAULT_MESSAGE,
            excluded=DEFAULT_EXCLUDED if excluded is None else parse_excluded(excluded),
            submit_handler=_option(raw, "submit_handler", Callable[..., Any]),
        )

    def validator_options(self, field_name: str, validator_name: str) -> frozendict[str, Any]:
        """
        Resolves the options of a validator binding. The message is taken from the validator options, the field
        options or the form options - whichever is set first.
        """
        field_options = self.fields[field_name]
        options = dict(field_options.validators.get(validator_name, {}))
        options["message"] = options.get("message") or field_options.message or self.message
        return frozendict(options)


def parse_excluded(excluded: str | Sequence[str | Callable[..., Any]]) -> tuple[ExcludedPredicate, ...]:
    """
    Converts the `excluded` option into predicates. The option may be a comma separated string of filters or a
    sequence of filters and callables.
    """
    items: Sequence[str | Callable[..., Any]]
    if isinstance(excluded, str):
        items = [item.strip() for item in excluded.split(",") if item.strip()]
    else:
        items = excluded
    predicates: list[ExcludedPredicate] = []
    for index, item in enumerate(items):
        if callable(item):
            predicates.append(item)
            continue
        try:
            predicates.append(EXCLUSION_FILTERS[item.strip()])
        except KeyError as error:
            raise ConfigurationError(f"Unknown exclusion filter '{item}'", f"excluded[{index}]") from error
    return tuple(predicates)


def _field_options(raw: Mapping[str, Any], path: str) -> FieldOptions:
    _warn_unknown_keys(raw, _FIELD_KEYS, f"{path}.")
    validators = _option(raw, "validators", Mapping[str, Optional[Mapping[str, Any]]], path) or {}
    enabled = _option(raw, "enabled", bool, path)
    return FieldOptions(
        validators=frozendict({name: frozendict(options or {}) for name, options in validators.items()}),
        selector=_option(raw, "selector", Callable[..., Any], path),
        trigger=_option(raw, "trigger", str, path),
        message=_option(raw, "message", str, path),
        enabled=True if enabled is None else enabled,
    )


def _option(raw: Mapping[str, Any], key: str, option_type: Any, path: Optional[str] = None) -> Any:
    try:
        return optional_option(raw, key, option_type)
    except TypeCheckError as error:
        raise ConfigurationError(str(error), f"{path}.{key}" if path else key) from error


def _warn_unknown_keys(raw: Mapping[str, Any], known: frozenset[str], prefix: str) -> None:
    for key in raw:
        if key not in known:
            logger.warning("Ignoring unknown option '%s%s'", prefix, key)
