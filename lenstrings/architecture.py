from __future__ import annotations

import logging
from enum import Enum

from typing_extensions import Dict, Tuple

from .base import InvalidParameterError, UnsupportedArchitectureError

logger = logging.getLogger(__name__)


POINTER_WIDTHS = (4, 8)


class ByteOrder(Enum):
    """Byte order of a binary's words."""

    LITTLE = 'little'
    BIG = 'big'

    @property
    def struct_prefix(self) -> str:
        """The `struct` format prefix for this byte order."""
        return '<' if self is ByteOrder.LITTLE else '>'


class Architecture(Enum):
    """Processor architectures with a known pointer width."""

    X86 = 'x86'
    X86_64 = 'x86_64'
    ARM = 'arm'
    ARM64 = 'arm64'
    POWERPC = 'powerpc'
    POWERPC64 = 'powerpc64'
    UNKNOWN = 'unknown'


# Native pointer width and byte order per architecture.
_ARCHITECTURE_LAYOUT: Dict[Architecture, Tuple[int, ByteOrder]] = {
    Architecture.X86: (4, ByteOrder.LITTLE),
    Architecture.X86_64: (8, ByteOrder.LITTLE),
    Architecture.ARM: (4, ByteOrder.LITTLE),
    Architecture.ARM64: (8, ByteOrder.LITTLE),
    Architecture.POWERPC: (4, ByteOrder.BIG),
    Architecture.POWERPC64: (8, ByteOrder.BIG),
}


def pointer_width_for(architecture: Architecture) -> int:
    """
    Resolves the native pointer width of an architecture.

    Args:
        architecture: The architecture to resolve.

    Returns:
        The pointer width in bytes (4 or 8).

    Raises:
        UnsupportedArchitectureError: If the architecture has no known pointer width.
    """
    return layout_for(architecture)[0]


def layout_for(architecture: Architecture) -> Tuple[int, ByteOrder]:
    """
    Resolves the native pointer width and byte order of an architecture.

    Raises:
        UnsupportedArchitectureError: If the architecture is unknown.
    """
    try:
        return _ARCHITECTURE_LAYOUT[architecture]
    except KeyError:
        raise UnsupportedArchitectureError(architecture) from None


def check_pointer_width(pointer_width: int) -> int:
    """
    Validates a pointer width.

    Raises:
        InvalidParameterError: If the width is not 4 or 8.
    """
    if pointer_width not in POINTER_WIDTHS:
        raise InvalidParameterError('pointer_width', pointer_width, 'must be 4 or 8')
    return pointer_width
