from __future__ import annotations

import logging
from dataclasses import dataclass

from typing_extensions import TYPE_CHECKING, Iterator, List, Optional, Union

from .base import BinaryEntity, check_binary_open, decorate_all_methods
from .collector import StringCollector
from .scanner import ScanConfig, scan_sections

if TYPE_CHECKING:
    from .binary import Binary


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StringItem:
    """
    A string recovered from a (pointer, length) descriptor.
    """

    contents: bytes

    @property
    def length(self) -> int:
        return len(self.contents)

    def __str__(self) -> str:
        return self.contents.decode('ascii')

    def __bytes__(self) -> bytes:
        return self.contents


@decorate_all_methods(check_binary_open)
class Strings(BinaryEntity):
    """
    Provides access to the length-prefixed strings of an open binary.

    Strings are extracted on first access and kept until `rebuild` or `clear`
    is called. Iteration yields them in ascending byte order.

    Args:
        binary: Reference to the open binary.
    """

    def __init__(self, binary: Binary) -> None:
        super().__init__(binary)

    def __iter__(self) -> Iterator[StringItem]:
        return self.get_all()

    def __getitem__(self, index: int) -> StringItem:
        return self.get_at_index(index)

    def __len__(self) -> int:
        """
        Returns the total number of extracted strings.
        """
        return len(self._contents())

    def _contents(self) -> List[bytes]:
        binary = self.binary
        if binary._string_cache is None:
            collector = StringCollector()
            for image in binary.images:
                scan_sections(
                    image.sections, image.pointer_width, image.byte_order, binary.config, collector
                )
            binary._string_cache = collector.finalize()
            binary._string_lookup = frozenset(binary._string_cache)
            logger.info(f'Extracted {len(binary._string_cache)} strings')
        return binary._string_cache

    def get_at_index(self, index: int) -> StringItem:
        """
        Retrieves the string at the specified index.

        Args:
            index: Index of the string to retrieve.

        Returns:
            A StringItem object at the given index.

        Raises:
            IndexError: If the index is out of range.
        """
        contents = self._contents()
        if 0 <= index < len(contents):
            return StringItem(contents[index])
        raise IndexError(f'String index {index} out of range [0, {len(contents)})')

    def get_all(self) -> Iterator[StringItem]:
        """
        Retrieves an iterator over all extracted strings, sorted by byte value.
        """
        return (StringItem(contents) for contents in self._contents())

    def contains(self, text: Union[str, bytes]) -> bool:
        """
        Checks whether a string was extracted.

        Args:
            text: The string, as text (ASCII) or bytes.
        """
        if isinstance(text, str):
            try:
                text = text.encode('ascii')
            except UnicodeEncodeError:
                return False
        self._contents()
        assert self.binary._string_lookup is not None
        return text in self.binary._string_lookup

    def rebuild(self, config: Optional[ScanConfig] = None) -> None:
        """
        Rebuild the string list from scratch.

        Args:
            config: New candidate bounds; the current ones are kept when omitted.
        """
        if config is not None:
            self.binary.config = config
        self.binary._string_cache = None
        self.binary._string_lookup = None
        self._contents()

    def clear(self) -> None:
        """
        Drop the extracted strings; they are recomputed on next access.
        """
        self.binary._string_cache = None
        self.binary._string_lookup = None
