"""Composition entry points.

``compose()`` builds a request handler, ``errors()`` an error handler.
Both accept handlers, lists of handlers, or arbitrarily nested lists, and
both validate everything up front::

    app = compose(
        parse_body,
        [authenticate, load_user],
        render,
        report_error,  # (err, request, response, next)
    )
    app(request, response, done)

A composed pipeline is itself a handler, so it can be nested inside
another ``compose()`` or ``errors()`` call.
"""

from collections.abc import Iterator
from typing import Any, ClassVar

from compose_middleware.config import ComposeConfig
from compose_middleware.dispatch import Next, Run
from compose_middleware.stack import HandlerKind, Layer, build_stack

_DEFAULT_CONFIG = ComposeConfig()


class _Pipeline:
    __slots__ = ("config", "stack")

    handler_kind: ClassVar[HandlerKind]

    def __init__(self, handlers: tuple[Any, ...], config: ComposeConfig | None = None) -> None:
        self.stack: tuple[Layer, ...] = build_stack(handlers)
        self.config = config or _DEFAULT_CONFIG

    def __len__(self) -> int:
        return len(self.stack)

    def __iter__(self) -> Iterator[Any]:
        return (layer.handler for layer in self.stack)

    def __repr__(self) -> str:
        label = f"{self.config.name!r}, " if self.config.name else ""
        names = ", ".join(layer.name for layer in self.stack)
        return f"{type(self).__name__}({label}[{names}])"

    def _run(self, error: Any, request: Any, response: Any, done: Next) -> Any:
        return Run(self.stack, request, response, done, self.config).start(error)


class RequestPipeline(_Pipeline):
    """Composed pipeline invoked as ``(request, response, done)``."""

    __slots__ = ()

    handler_kind = HandlerKind.REQUEST

    def __call__(self, request: Any, response: Any, done: Next) -> Any:
        return self._run(None, request, response, done)


class ErrorPipeline(_Pipeline):
    """Composed pipeline invoked as ``(error, request, response, done)``.

    The run starts with *error* pending, so leading request handlers are
    skipped until an error handler recovers it.
    """

    __slots__ = ()

    handler_kind = HandlerKind.ERROR

    def __call__(self, error: Any, request: Any, response: Any, done: Next) -> Any:
        return self._run(error, request, response, done)


def compose(*handlers: Any, config: ComposeConfig | None = None) -> RequestPipeline:
    """Compose *handlers* into a single request handler.

    Raises:
        InvalidHandlerError: if any flattened entry is not callable.
    """
    return RequestPipeline(handlers, config)


def errors(*handlers: Any, config: ComposeConfig | None = None) -> ErrorPipeline:
    """Compose *handlers* into a single error handler.

    Raises:
        InvalidHandlerError: if any flattened entry is not callable.
    """
    return ErrorPipeline(handlers, config)
