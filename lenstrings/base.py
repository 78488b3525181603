from __future__ import annotations

import functools
import logging
from collections.abc import Callable

from typing_extensions import TYPE_CHECKING, Any, Optional, ParamSpec, TypeVar, cast

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from .binary import Binary


class BinaryEntity:
    """
    Base class for all Binary entities.
    """

    def __init__(self, binary: Optional[Binary]):
        """
        Constructs an entity for the given binary.

        Args:
            binary: Reference to the open binary handle.
        """
        self.m_binary = binary

    @property
    def binary(self) -> Binary:
        """
        Get the binary reference, guaranteed to be non-None when called from
        methods decorated with @check_binary_open.

        Returns:
            The open binary instance.
        """
        if TYPE_CHECKING:
            from .binary import Binary

            return cast('Binary', self.m_binary)

        assert self.m_binary is not None, (
            'Binary is None - ensure method is decorated with @check_binary_open'
        )
        return self.m_binary


F = TypeVar('F', bound=Callable[..., Any])
C = TypeVar('C', bound=type)
P = ParamSpec('P')
R = TypeVar('R')


class InvalidParameterError(ValueError):
    """
    Raised when a function receives invalid arguments.
    """

    def __init__(self, parameter: str, value: object, message: str) -> None:
        super().__init__(f'Invalid parameter {parameter} value {str(value)}: {message}')


class WordBoundsError(IndexError):
    """
    Raised when a word read would run past the end of its buffer.
    """

    def __init__(self, offset: int, width: int, size: int) -> None:
        super().__init__(
            f'Cannot read {width} bytes at offset 0x{offset:x} from a {size} byte buffer'
        )


class UnsupportedArchitectureError(LookupError):
    """
    Raised when the pointer width of a binary's architecture cannot be determined.
    """

    def __init__(self, architecture: object) -> None:
        super().__init__(f'Unsupported architecture: {architecture}')


class BinaryLoadError(RuntimeError):
    """Raised when a binary cannot be read or parsed."""

    pass


class UnknownFormatError(BinaryLoadError):
    """Raised when a file is not a recognized executable format."""

    pass


class BinaryNotLoadedError(RuntimeError):
    """
    Raised when an operation is attempted on a closed binary.
    """

    pass


def decorate_all_methods(decorator: Callable[[F], F]) -> Callable[[C], C]:
    """
    Class decorator factory that applies `decorator` to all methods
    of the class (excluding dunder methods and static methods).
    """

    def decorate(cls: C) -> C:
        for name, attr in cls.__dict__.items():
            if name.startswith('__'):
                continue
            if isinstance(attr, (staticmethod, classmethod, property)):
                continue
            if callable(attr):
                setattr(cls, name, decorator(attr))
        return cls

    return decorate


def check_binary_open(fn: Callable[P, R]) -> Callable[P, R]:
    """
    Decorator that checks that a binary is open.
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if args:
            self = args[0]

            # Check class name as string (avoid circular dependency)
            if self.__class__.__name__ == 'Binary':
                if hasattr(self, 'is_open') and not self.is_open():
                    raise BinaryNotLoadedError(
                        f'{fn.__qualname__}: Binary is not loaded. Please open a binary first.'
                    )

            if isinstance(self, BinaryEntity):
                if not self.m_binary or not self.m_binary.is_open():
                    raise BinaryNotLoadedError(
                        f'{fn.__qualname__}: Binary is not loaded. Please open a binary first.'
                    )

        return fn(*args, **kwargs)

    return wrapper
