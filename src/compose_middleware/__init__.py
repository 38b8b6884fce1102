"""compose_middleware — compose request and error handlers into one pipeline.

A handler is any callable shaped like one of::

    def handler(request, response, next): ...         # request handler
    def handler(error, request, response, next): ...  # error handler

Basic usage::

    from compose_middleware import compose

    def parse(request, response, next):
        request["body"] = load(request["raw"])
        next()

    def recover(error, request, response, next):
        response["status"] = 400
        next()

    app = compose(parse, [validate, store], recover)
    app(request, response, lambda err=None: finish(err))

Errors passed to ``next(err)`` or raised by a handler skip the remaining
request handlers until an error handler clears them.
"""

__version__ = "0.1.0"
__all__ = [
    "ComposeConfig",
    "ComposeError",
    "ConfigurationError",
    "Continuation",
    "DispatchEvent",
    "DispatchObserver",
    "DoubleInvocationError",
    "ErrorPipeline",
    "EventAction",
    "HandlerKind",
    "InvalidHandlerError",
    "LoggingObserver",
    "Next",
    "RequestPipeline",
    "compose",
    "error_handler",
    "errors",
    "request_handler",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API."""
    if name in ("compose", "errors", "RequestPipeline", "ErrorPipeline"):
        from compose_middleware import pipeline as _pipeline

        return getattr(_pipeline, name)

    if name in ("Continuation", "Next"):
        from compose_middleware import dispatch as _dispatch

        return getattr(_dispatch, name)

    if name in ("HandlerKind", "error_handler", "request_handler"):
        from compose_middleware import stack as _stack

        return getattr(_stack, name)

    if name == "ComposeConfig":
        from compose_middleware.config import ComposeConfig

        return ComposeConfig

    if name in ("DispatchEvent", "DispatchObserver", "EventAction", "LoggingObserver"):
        from compose_middleware import observe as _observe

        return getattr(_observe, name)

    if name in (
        "ComposeError",
        "ConfigurationError",
        "DoubleInvocationError",
        "InvalidHandlerError",
    ):
        from compose_middleware import exceptions as _exceptions

        return getattr(_exceptions, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
