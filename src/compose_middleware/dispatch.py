"""Dispatcher: walk a stack for one invocation of a composed pipeline.

Each invocation owns a ``Run``: the cursor, the payload pair, and the
final ``done`` callback. Handlers advance the run by calling the
``Continuation`` they were given, synchronously or at any later time.

Selection at each position::

    request handler, no pending error  -> handler(request, response, next)
    error handler, pending error       -> handler(error, request, response, next)
    anything else                      -> skipped, error carried forward

When the cursor reaches ``len(stack)`` the run calls ``done(error)``.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeAlias

from compose_middleware.config import ComposeConfig
from compose_middleware.exceptions import DoubleInvocationError
from compose_middleware.observe import DispatchEvent, EventAction
from compose_middleware.stack import HandlerKind, Layer

logger = logging.getLogger("compose_middleware.dispatch")

# The callable handed to each handler as its last argument
Next: TypeAlias = Callable[..., Any]


class Continuation:
    """Single-use ``next`` bound to one stack position.

    Calling it with no argument (or any falsy value) continues without
    error; a truthy value becomes the pending error for the rest of the run.
    """

    __slots__ = ("_position", "_run")

    def __init__(self, run: "Run", position: int) -> None:
        self._run = run
        self._position = position

    @property
    def position(self) -> int:
        return self._position

    def __call__(self, error: Any = None) -> Any:
        if self._position < self._run.index:
            raise DoubleInvocationError(self._position)
        return self._run.dispatch(self._position + 1, error)

    def __repr__(self) -> str:
        return f"Continuation(position={self._position}, index={self._run.index})"


class Run:
    """State for one invocation of a composed pipeline.

    ``index`` only moves forward. A continuation whose position is behind
    it has already been used (or overtaken) and refuses to run again.
    """

    __slots__ = ("config", "done", "index", "request", "response", "stack")

    def __init__(
        self,
        stack: tuple[Layer, ...],
        request: Any,
        response: Any,
        done: Next,
        config: ComposeConfig,
    ) -> None:
        self.stack = stack
        self.request = request
        self.response = response
        self.done = done
        self.config = config
        self.index = -1

    def start(self, error: Any = None) -> Any:
        return self.dispatch(0, error)

    def _emit(self, action: EventAction, position: int, name: str = "", error: Any = None) -> None:
        observer = self.config.observer
        if observer is not None:
            observer(DispatchEvent(action, position, name, error))

    def dispatch(self, pos: int, error: Any = None) -> Any:
        """Invoke the first eligible handler at or after *pos*."""
        stack = self.stack

        while True:
            self.index = pos

            if pos == len(stack):
                self._emit(EventAction.DONE, pos, error=error)
                return self.done(error)

            layer = stack[pos]
            if (layer.kind is HandlerKind.ERROR) == bool(error):
                break

            self._emit(EventAction.SKIP, pos, layer.name, error)
            pos += 1

        next = Continuation(self, pos)

        if error:
            logger.debug("handle(err) %s", layer.name)
            self._emit(EventAction.HANDLE_ERROR, pos, layer.name, error)
        else:
            logger.debug("handle() %s", layer.name)
            self._emit(EventAction.HANDLE, pos, layer.name)

        try:
            if error:
                return layer.handler(error, self.request, self.response, next)
            return layer.handler(self.request, self.response, next)
        except self.config.catch as exc:
            # The handler already advanced the run; this is not its result.
            if self.index > pos:
                raise

            logger.debug("try..catch %s: %r", layer.name, exc)
            self._emit(EventAction.CAUGHT, pos, layer.name, exc)
            return next(exc)
