from __future__ import annotations

import logging
import struct

from typing_extensions import Iterator

from .architecture import ByteOrder, check_pointer_width
from .base import WordBoundsError

logger = logging.getLogger(__name__)


# Unsigned formats, so narrower words are zero-extended.
_WORD_FORMATS = {4: 'I', 8: 'Q'}


def word_format(pointer_width: int, byte_order: ByteOrder) -> str:
    """
    Builds the `struct` format for one unsigned word.

    Args:
        pointer_width: Word size in bytes (4 or 8).
        byte_order: Byte order of the word.

    Returns:
        A `struct` format string.
    """
    check_pointer_width(pointer_width)
    return byte_order.struct_prefix + _WORD_FORMATS[pointer_width]


def read_word(buffer: bytes, offset: int, pointer_width: int, byte_order: ByteOrder) -> int:
    """
    Reads one unsigned word of `pointer_width` bytes.

    Exactly `pointer_width` bytes are consumed; a 4-byte word is zero-extended,
    never read as part of a wider field.

    Args:
        buffer: The bytes to read from.
        offset: Offset of the first byte of the word.
        pointer_width: Word size in bytes (4 or 8).
        byte_order: Byte order of the word.

    Returns:
        The word as a non-negative integer.

    Raises:
        WordBoundsError: If the word does not fit inside the buffer.
        InvalidParameterError: If the pointer width is not 4 or 8.
    """
    fmt = word_format(pointer_width, byte_order)
    if offset < 0 or offset + pointer_width > len(buffer):
        raise WordBoundsError(offset, pointer_width, len(buffer))
    return struct.unpack_from(fmt, buffer, offset)[0]


def iter_words(buffer: bytes, pointer_width: int, byte_order: ByteOrder) -> Iterator[int]:
    """
    Iterates over every complete aligned word in a buffer.

    Trailing bytes that do not form a full word are ignored.
    """
    fmt = word_format(pointer_width, byte_order)
    usable = len(buffer) - len(buffer) % pointer_width
    if usable != len(buffer):
        logger.debug(f'Ignoring {len(buffer) - usable} trailing bytes')
    for (word,) in struct.iter_unpack(fmt, memoryview(buffer)[:usable]):
        yield word
