"""Composition configuration.

ComposeConfig is a frozen dataclass: immutable after creation and shared
by every run of the pipeline it configures.
"""

from dataclasses import dataclass

from compose_middleware.exceptions import ConfigurationError
from compose_middleware.observe import DispatchObserver


@dataclass(frozen=True, slots=True)
class ComposeConfig:
    """Per-pipeline configuration. All fields have sensible defaults::

        config = ComposeConfig(name="api", observer=LoggingObserver())
        app = compose(auth, load_user, render, config=config)
    """

    # Label used in log lines and repr()
    name: str = ""

    # Receives a DispatchEvent for every dispatch step
    observer: DispatchObserver | None = None

    # Exceptions raised by a handler that become pipeline errors.
    # Anything else (KeyboardInterrupt, SystemExit) propagates.
    catch: tuple[type[BaseException], ...] = (Exception,)

    def __post_init__(self) -> None:
        if not self.catch:
            msg = "ComposeConfig.catch must name at least one exception type"
            raise ConfigurationError(msg)
        for exc_type in self.catch:
            if not (isinstance(exc_type, type) and issubclass(exc_type, BaseException)):
                msg = f"ComposeConfig.catch entries must be exception types, got {exc_type!r}"
                raise ConfigurationError(msg)
        if self.observer is not None and not callable(self.observer):
            msg = f"ComposeConfig.observer must be callable, got {type(self.observer).__name__}"
            raise ConfigurationError(msg)
