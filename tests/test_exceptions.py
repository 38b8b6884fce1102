"""Tests for compose_middleware.exceptions — hierarchy and messages."""

import pytest

from compose_middleware.exceptions import (
    ComposeError,
    ConfigurationError,
    DoubleInvocationError,
    InvalidHandlerError,
)


class TestHierarchy:
    def test_configuration_error_is_compose_error(self) -> None:
        assert issubclass(ConfigurationError, ComposeError)

    def test_invalid_handler_is_configuration_error(self) -> None:
        assert issubclass(InvalidHandlerError, ConfigurationError)

    def test_invalid_handler_is_type_error(self) -> None:
        assert issubclass(InvalidHandlerError, TypeError)

    def test_double_invocation_is_type_error(self) -> None:
        assert issubclass(DoubleInvocationError, ComposeError)
        assert issubclass(DoubleInvocationError, TypeError)


class TestInvalidHandlerError:
    def test_plain_message(self) -> None:
        assert str(InvalidHandlerError()) == "Handlers must be a function"

    def test_message_names_entry_and_position(self) -> None:
        err = InvalidHandlerError("foo", 2)
        assert str(err) == "Handlers must be a function, got 'str' at position 2"
        assert err.entry == "foo"
        assert err.position == 2

    def test_catchable_as_type_error(self) -> None:
        with pytest.raises(TypeError, match="Handlers must be a function"):
            raise InvalidHandlerError(None, 0)


class TestDoubleInvocationError:
    def test_message(self) -> None:
        err = DoubleInvocationError(3)
        assert str(err) == "`next()` called multiple times"
        assert err.position == 3
