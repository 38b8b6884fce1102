"""Dispatch observation.

An observer is any callable accepting a single ``DispatchEvent``::

    def record(event: DispatchEvent) -> None:
        events.append(event)

    app = compose(a, b, config=ComposeConfig(observer=record))

Observers are attached per pipeline; there is no global registry.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class EventAction(Enum):
    """What the dispatcher did at one position."""

    HANDLE = "handle()"
    HANDLE_ERROR = "handle(err)"
    SKIP = "skip"
    CAUGHT = "try..catch"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class DispatchEvent:
    """One step of a run.

    ``position`` is the stack index (``len(stack)`` for DONE) and ``name``
    the handler's name, empty for DONE.
    """

    action: EventAction
    position: int
    name: str = ""
    error: Any = None

    def __str__(self) -> str:
        parts = [self.action.value, f"#{self.position}"]
        if self.name:
            parts.append(self.name)
        if self.error is not None:
            parts.append(f"error={self.error!r}")
        return " ".join(parts)


class DispatchObserver(Protocol):
    """Protocol for dispatch observers."""

    def __call__(self, event: DispatchEvent) -> None: ...


class LoggingObserver:
    """Forward dispatch events to a logger.

    Usage::

        compose(a, b, config=ComposeConfig(observer=LoggingObserver()))
    """

    __slots__ = ("level", "logger")

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG) -> None:
        self.logger = logger or logging.getLogger("compose_middleware.dispatch")
        self.level = level

    def __call__(self, event: DispatchEvent) -> None:
        self.logger.log(self.level, "%s", event)
