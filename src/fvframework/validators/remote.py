"""
Contains the validator which asks a server whether a value is valid.
"""
import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

import httpx
from frozendict import frozendict

from fvframework.utils import optional_option, required_option

from .base import Validator

if TYPE_CHECKING:
    from fvframework.context import ValidationContext

logger = logging.getLogger(__name__)


class Remote(Validator):
    """
    Posts the value to the `url` option and expects a JSON response like `{"valid": true}`.

    The request body contains `{name: value}` where `name` is the `name` option or the field name. Additional form
    data can be passed with the `data` option, either as a mapping or as a function receiving the validation context.
    Cancelling the check aborts the request.
    """

    option_types = frozendict({"url": str, "name": str, "data": Mapping[str, Any] | Callable[..., Any]})
    required_options = frozenset({"url"})

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    def validate(self, context: "ValidationContext", value: str, options: frozendict[str, Any]):
        if value == "":
            return True
        url: str = required_option(options, "url", str)
        data = optional_option(options, "data", Mapping[str, Any] | Callable[..., Any])
        if callable(data):
            data = data(context)
        payload = dict(data or {})
        payload[optional_option(options, "name", str) or context.field.name] = value
        return self._request(url, payload)

    async def _request(self, url: str, payload: dict[str, Any]) -> bool:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(url, data=payload)
            response.raise_for_status()
            valid = response.json().get("valid")
        logger.debug("%s answered %r for %r", url, valid, payload)
        return valid is True or valid == "true"
