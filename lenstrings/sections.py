from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field

from typing_extensions import TYPE_CHECKING, Iterable, Iterator, List, Optional

from .base import BinaryEntity, check_binary_open, decorate_all_methods

if TYPE_CHECKING:
    from .binary import Binary


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Section:
    """
    A contiguous region of a binary's address space.

    `data` is None for sections with no on-disk content (zero-initialized),
    which are neither indexed nor scanned.
    """

    address: int
    data: Optional[bytes] = field(default=None, repr=False)
    name: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return self.data is not None

    @property
    def size(self) -> int:
        return len(self.data) if self.data is not None else 0

    @property
    def end_address(self) -> int:
        """End address of the section contents (exclusive)."""
        return self.address + self.size

    def contains(self, address: int, length: int = 1) -> bool:
        """Whether `[address, address + length)` lies entirely inside the section."""
        return self.address <= address and address + length <= self.end_address


class AddressIndex:
    """
    Maps virtual address ranges to section contents.

    Ranges may overlap, so a lookup answers with every section that fully
    contains the requested range rather than a single owner.

    Args:
        sections: Sections to index; sections without content are ignored.
    """

    def __init__(self, sections: Iterable[Section]) -> None:
        self._sections: List[Section] = sorted(
            (s for s in sections if s.data is not None), key=lambda s: s.address
        )
        self._starts: List[int] = [s.address for s in self._sections]
        self._max_size = max((s.size for s in self._sections), default=0)

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[Section]:
        return iter(self._sections)

    def sections_containing(self, address: int, length: int = 1) -> Iterator[Section]:
        """
        Iterates over every indexed section containing `[address, address + length)`.

        Args:
            address: Start of the range.
            length: Size of the range in bytes.

        Returns:
            An iterator over matching sections, in ascending address order.
        """
        # Only sections starting at or below `address` can contain it, and none
        # starting further back than the largest section size.
        hi = bisect.bisect_right(self._starts, address)
        lo = bisect.bisect_left(self._starts, address - self._max_size)
        for section in self._sections[lo:hi]:
            if section.contains(address, length):
                yield section

    def resolve(self, pointer: int, length: int) -> List[bytes]:
        """
        Resolves a pointer and length to the backing bytes.

        Args:
            pointer: Virtual address of the first byte.
            length: Number of bytes.

        Returns:
            One detached byte string per section whose range fully contains
            `[pointer, pointer + length)`. Empty when no section does.
        """
        result = []
        for section in self.sections_containing(pointer, length):
            assert section.data is not None
            offset = pointer - section.address
            result.append(bytes(section.data[offset : offset + length]))
        return result


@decorate_all_methods(check_binary_open)
class Sections(BinaryEntity):
    """
    Provides access to the sections of an open binary.

    Can be used to iterate over all sections, including the ones without content.

    Args:
        binary: Reference to the open binary.
    """

    def __init__(self, binary: Binary) -> None:
        super().__init__(binary)

    def __iter__(self) -> Iterator[Section]:
        return self.get_all()

    def __len__(self) -> int:
        """
        Returns the number of sections in the binary.
        """
        return sum(len(image.sections) for image in self.binary.images)

    def get_all(self) -> Iterator[Section]:
        """
        Retrieves an iterator over all sections of every loaded image.
        """
        for image in self.binary.images:
            yield from image.sections

    def get_by_name(self, name: str) -> Optional[Section]:
        """Find the first section with the given name.

        Args:
            name: Section name to search for

        Returns:
            The section if found, None otherwise
        """
        for section in self:
            if section.name == name:
                return section
        return None

    def get_at(self, address: int) -> List[Section]:
        """
        Retrieves the sections with content that contain the given address.

        Args:
            address: The virtual address to search.

        Returns:
            Every matching section; an empty list if none.
        """
        return list(self.index.sections_containing(address))

    def get_size(self, section: Section) -> int:
        """Section content size in bytes."""
        return section.size

    @property
    def index(self) -> AddressIndex:
        """Address index over the sections of every loaded image, built once per binary."""
        binary = self.binary
        if binary._address_index is None:
            binary._address_index = AddressIndex(self.get_all())
        return binary._address_index
