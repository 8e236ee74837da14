"""
Contains some useful utility functions to read validator and form options.
"""
from typing import Any, Mapping, Optional, TypeVar, overload

from typeguard import CollectionCheckStrategy, TypeCheckError, check_type

OptionT = TypeVar("OptionT")

_MISSING = object()


def optional_option(
    options: Mapping[str, Any], option_path: str, option_type: type[OptionT], default: Optional[OptionT] = None
) -> Optional[OptionT]:
    """
    Tries to query the `options` with the provided `option_path`. If it is not existent or None, `default` will be
    returned. If the option is found, the type will be checked and a TypeCheckError will be raised if the type doesn't
    match the value.
    """
    try:
        value = required_option(options, option_path, Any)
    except KeyError:
        return default
    if value is None:
        return default
    return required_option(options, option_path, option_type)


@overload
def required_option(
    options: Mapping[str, Any], option_path: str, option_type: type[OptionT], param_base_path: Optional[str] = None
) -> OptionT:
    ...


@overload
def required_option(
    options: Mapping[str, Any], option_path: str, option_type: Any, param_base_path: Optional[str] = None
) -> Any:
    ...


def required_option(
    options: Mapping[str, Any], option_path: str, option_type: Any, param_base_path: Optional[str] = None
) -> Any:
    """
    Tries to query the `options` with the provided dot separated `option_path`. If it is not existent,
    a KeyError will be raised.
    If the option is found, the type will be checked and a TypeCheckError will be raised if the type doesn't match the
    value.
    Every item of a collection is checked, not only the first one.
    """
    current: Any = options
    splitted_path = option_path.split(".")
    for index, key in enumerate(splitted_path):
        value = current.get(key, _MISSING) if isinstance(current, Mapping) else _MISSING
        if value is _MISSING:
            current_path = ".".join(splitted_path[0 : index + 1])
            if param_base_path is not None:
                current_path = f"{param_base_path}.{current_path}"
            raise KeyError(f"{current_path}: Not found")
        current = value
    try:
        check_type(current, option_type, collection_check_strategy=CollectionCheckStrategy.ALL_ITEMS)
    except TypeCheckError as error:
        current_path = option_path
        if param_base_path is not None:
            current_path = f"{param_base_path}.{option_path}"
        raise TypeCheckError(f"{current_path}: {error}") from error
    return current
