from __future__ import annotations

import logging
from dataclasses import dataclass

from typing_extensions import Iterable, Iterator, NamedTuple, Optional

from .architecture import ByteOrder, check_pointer_width
from .base import InvalidParameterError
from .collector import StringCollector
from .sections import AddressIndex, Section
from .words import iter_words

logger = logging.getLogger(__name__)


MIN_LEN = 4
MAX_LEN = 2048

# Values in the top 64KB of the address space come from misaligned reads of
# non-pointer data, never from real addresses.
POINTER_LIMIT = 0xFFFFFFFFFFFF0000

PRINTABLE_ASCII = frozenset(range(0x20, 0x7F))  # space..~ (no tab, no newline)


@dataclass(frozen=True)
class ScanConfig:
    """
    Bounds applied to candidate descriptors.

    Attributes:
        min_length: Shortest accepted string length.
        max_length: Longest accepted string length.
        pointer_limit: Candidates whose pointer is at or above this value are rejected.
    """

    min_length: int = MIN_LEN
    max_length: int = MAX_LEN
    pointer_limit: int = POINTER_LIMIT

    def __post_init__(self) -> None:
        if self.min_length < 1:
            raise InvalidParameterError('min_length', self.min_length, 'must be at least 1')
        if self.max_length < self.min_length:
            raise InvalidParameterError(
                'max_length', self.max_length, f'must not be less than min_length {self.min_length}'
            )
        if self.pointer_limit < 0:
            raise InvalidParameterError('pointer_limit', self.pointer_limit, 'must not be negative')


DEFAULT_CONFIG = ScanConfig()


class Descriptor(NamedTuple):
    """A candidate (pointer, length) pair read at `offset` within a section."""

    offset: int
    pointer: int
    length: int

    def is_plausible(self, config: ScanConfig = DEFAULT_CONFIG) -> bool:
        """Whether the candidate passes the length bounds and the pointer sentinel."""
        if self.length < config.min_length or self.length > config.max_length:
            return False
        return self.pointer < config.pointer_limit


def is_printable(data: bytes) -> bool:
    """True if every byte is printable ASCII (0x20-0x7E)."""
    return all(b in PRINTABLE_ASCII for b in data)


def iter_descriptors(
    data: bytes, pointer_width: int, byte_order: ByteOrder
) -> Iterator[Descriptor]:
    """
    Iterates over every candidate descriptor in a section.

    A candidate starts at each word-aligned offset that leaves room for two
    words, so consecutive candidates overlap by one word.

    Args:
        data: Section contents.
        pointer_width: Word size in bytes (4 or 8).
        byte_order: Byte order of the words.

    Returns:
        An iterator over candidates in ascending offset order.
    """
    offset = 0
    previous = None
    for word in iter_words(data, pointer_width, byte_order):
        if previous is not None:
            yield Descriptor(offset, previous, word)
            offset += pointer_width
        previous = word


def scan_section(
    data: bytes,
    pointer_width: int,
    byte_order: ByteOrder,
    index: AddressIndex,
    config: ScanConfig = DEFAULT_CONFIG,
) -> Iterator[bytes]:
    """
    Extracts the strings described by descriptors found in one section.

    Every plausible candidate is resolved against every indexed section whose
    range contains it; each resolution that is entirely printable is yielded.
    No candidate is skipped because a neighbouring one matched.

    Args:
        data: Section contents to scan for descriptors.
        pointer_width: Word size in bytes (4 or 8).
        byte_order: Byte order of the words.
        index: Address index used to resolve pointers.
        config: Candidate bounds.

    Returns:
        An iterator over extracted strings, each a detached copy. Duplicates
        are possible.
    """
    check_pointer_width(pointer_width)
    for descriptor in iter_descriptors(data, pointer_width, byte_order):
        if not descriptor.is_plausible(config):
            continue
        for contents in index.resolve(descriptor.pointer, descriptor.length):
            if is_printable(contents):
                yield contents


def scan_sections(
    sections: Iterable[Section],
    pointer_width: int,
    byte_order: ByteOrder,
    config: ScanConfig = DEFAULT_CONFIG,
    collector: Optional[StringCollector] = None,
) -> StringCollector:
    """
    Scans every section of one binary image.

    The address index is built once from all sections; each section with
    content is then scanned against it, including for pointers into itself.

    Args:
        sections: All sections of the image.
        pointer_width: Native pointer width of the image (4 or 8).
        byte_order: Native byte order of the image.
        config: Candidate bounds.
        collector: Collector to add to; a new one is created when omitted.

    Returns:
        The collector holding every unique extracted string.
    """
    check_pointer_width(pointer_width)
    sections = list(sections)
    index = AddressIndex(sections)
    if collector is None:
        collector = StringCollector()

    for section in sections:
        if section.data is None:
            logger.debug(f'Skipping section {section.name or hex(section.address)} without content')
            continue
        before = len(collector)
        collector.update(scan_section(section.data, pointer_width, byte_order, index, config))
        logger.debug(
            f'Section {section.name or hex(section.address)}: '
            f'{len(collector) - before} new strings'
        )

    return collector
