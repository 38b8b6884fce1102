"""Stack builder: flatten, validate, and classify handlers.

A stack is an immutable tuple of ``Layer`` objects, built once when a
pipeline is composed and shared read-only by every run of it.

Handler kinds are resolved here, once, never per request:

1. an explicit tag from ``request_handler()`` / ``error_handler()``
2. a ``handler_kind`` attribute (composed pipelines carry one)
3. the declared signature: exactly four required positional parameters
   means an error handler, anything else a request handler
"""

import inspect
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from compose_middleware.exceptions import InvalidHandlerError

logger = logging.getLogger("compose_middleware.stack")

_ERROR_ARITY = 4

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class HandlerKind(StrEnum):
    REQUEST = "request"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Tagged:
    """A handler with an explicitly declared kind."""

    fn: Callable[..., Any]
    kind: HandlerKind

    def __call__(self, *args: Any) -> Any:
        return self.fn(*args)

    @property
    def handler_kind(self) -> HandlerKind:
        return self.kind


def request_handler(fn: Callable[..., Any]) -> Tagged:
    """Mark *fn* as a request handler, called as ``(request, response, next)``.

    Useful for callables whose signature cannot be read or takes ``*args``::

        @request_handler
        def passthrough(*args):
            args[-1]()
    """
    if not callable(fn):
        raise InvalidHandlerError(fn)
    return Tagged(fn, HandlerKind.REQUEST)


def error_handler(fn: Callable[..., Any]) -> Tagged:
    """Mark *fn* as an error handler, called as ``(error, request, response, next)``."""
    if not callable(fn):
        raise InvalidHandlerError(fn)
    return Tagged(fn, HandlerKind.ERROR)


@dataclass(frozen=True, slots=True)
class Layer:
    """One resolved stack entry."""

    handler: Callable[..., Any]
    kind: HandlerKind
    name: str


def handler_name(handler: object) -> str:
    if isinstance(handler, Tagged):
        handler = handler.fn
    name = getattr(handler, "__name__", None)
    if isinstance(name, str) and name:
        return name
    return type(handler).__name__


def resolve_kind(handler: Callable[..., Any]) -> HandlerKind:
    """Decide whether *handler* is a request or an error handler."""
    kind = getattr(handler, "handler_kind", None)
    if isinstance(kind, HandlerKind):
        return kind

    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        # Some builtins expose no signature
        return HandlerKind.REQUEST

    positional = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return HandlerKind.REQUEST
        if param.kind in _POSITIONAL and param.default is inspect.Parameter.empty:
            positional += 1

    return HandlerKind.ERROR if positional == _ERROR_ARITY else HandlerKind.REQUEST


def flatten(handlers: Any) -> Iterator[Any]:
    """Yield entries of arbitrarily nested lists/tuples, depth-first.

    Anything that is not a list or tuple is yielded as-is, strings included.
    """
    if not isinstance(handlers, (list, tuple)):
        yield handlers
        return
    for entry in handlers:
        if isinstance(entry, (list, tuple)):
            yield from flatten(entry)
        else:
            yield entry


def build_stack(handlers: Any) -> tuple[Layer, ...]:
    """Flatten *handlers* and validate every entry is callable.

    Raises:
        InvalidHandlerError: on the first non-callable entry.
    """
    entries = list(flatten(handlers))

    for position, entry in enumerate(entries):
        if not callable(entry):
            raise InvalidHandlerError(entry, position)

    stack = tuple(Layer(entry, resolve_kind(entry), handler_name(entry)) for entry in entries)
    logger.debug(
        "built stack: %s",
        ", ".join(f"{layer.name}[{layer.kind}]" for layer in stack) or "<empty>",
    )
    return stack
