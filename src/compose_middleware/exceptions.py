"""compose_middleware exception hierarchy.

Shared by the stack builder, the dispatcher, and the pipelines so every
module raises and catches the same types.
"""


class ComposeError(Exception):
    """Base for all compose_middleware errors."""


class ConfigurationError(ComposeError):
    """Raised when a composition or its configuration is invalid.

    Always raised at composition time, before any handler runs.
    """


class InvalidHandlerError(ConfigurationError, TypeError):
    """A non-callable entry was supplied to ``compose()`` or ``errors()``.

    The message always starts with ``"Handlers must be a function"``.
    """

    def __init__(self, entry: object = None, position: int | None = None) -> None:
        self.entry = entry
        self.position = position
        msg = "Handlers must be a function"
        if position is not None:
            msg = f"{msg}, got {type(entry).__name__!r} at position {position}"
        super().__init__(msg)


class DoubleInvocationError(ComposeError, TypeError):
    """A continuation was called after the run already moved past it.

    Raised synchronously at the offending ``next()`` call site and never
    routed through the pipeline.
    """

    def __init__(self, position: int | None = None) -> None:
        self.position = position
        super().__init__("`next()` called multiple times")
