"""Module API endpoints, API errors and the inter-module call interface."""

from __future__ import annotations

import dataclasses
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from .types import Amount


class ApiError(Exception):
    """An error returned by an API endpoint, with an HTTP-like status code."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message

    @classmethod
    def not_found(cls, message: str) -> ApiError:
        return cls(404, message)

    @classmethod
    def bad_request(cls, message: str) -> ApiError:
        return cls(400, message)


@dataclass
class InputMeta:
    """The amount an input carries and the keys that must sign for it."""

    amount: Amount
    puk_keys: Iterable[bytes] = field(default_factory=tuple)


Handler = Callable[[Any, Any], Awaitable[Any]]


@dataclass(frozen=True)
class ApiEndpoint:
    """An API endpoint reachable under ``path`` within its module's base path."""

    path: str
    handler: Handler

    async def call(self, state: Any, params: Any) -> Any:
        """Handle a request with JSON ``params`` and return a JSON value."""
        return await self.handler(state, params)


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def _to_json_value(value: Any) -> Any:
    return json.loads(json.dumps(value, default=_json_default))


def api_endpoint(
    path: str, parse: Optional[Callable[[Any], Any]] = None
) -> Callable[[Handler], ApiEndpoint]:
    """Turn an ``async def handler(state, params)`` into an :class:`ApiEndpoint`.

    ``parse`` converts the incoming JSON value into the handler's parameters;
    a failure there becomes a bad-request :class:`ApiError`. The handler's
    result is converted into a JSON value.
    """

    def decorate(handler: Handler) -> ApiEndpoint:
        async def handle(state: Any, params: Any) -> Any:
            if parse is not None:
                try:
                    params = parse(params)
                except ApiError:
                    raise
                except (ValueError, TypeError, KeyError) as exc:
                    raise ApiError.bad_request(str(exc)) from exc
            result = await handler(state, params)
            return _to_json_value(result)

        return ApiEndpoint(path, handle)

    return decorate


class ModuleInterconnect(ABC):
    """Interface to call the API of other modules."""

    @abstractmethod
    async def call(self, module: str, path: str, data: Any) -> Any:
        """Call the endpoint ``path`` of ``module`` with JSON ``data``.

        Raises :class:`ApiError` if the endpoint reports an error.
        """