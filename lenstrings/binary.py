from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from types import TracebackType

from typing_extensions import FrozenSet, Iterable, List, Literal, Optional, Type, Union

from .architecture import Architecture, ByteOrder
from .base import check_binary_open
from .loader import BinaryFormat, LoadedImage, load_images
from .scanner import DEFAULT_CONFIG, ScanConfig
from .sections import AddressIndex, Section, Sections
from .strings import Strings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BinaryMetadata:
    """
    Metadata information about an open binary.
    """

    path: Optional[str] = None
    module: Optional[str] = None
    filesize: Optional[int] = None
    md5: Optional[str] = None
    sha256: Optional[str] = None
    format: Optional[str] = None
    architecture: Optional[str] = None
    bitness: Optional[int] = None
    byte_order: Optional[str] = None


class Binary:
    """
    Provides access to the sections and length-prefixed strings of one binary.

    Can be used as a context manager for automatic resource cleanup.

    Args:
        images: The executable images making up the binary.
        path: Path the images were loaded from, if any.
        config: Candidate bounds used when extracting strings.

    Note:
        Use the `Binary.open()` or `Binary.from_sections()` class methods to
        create an instance.

    Example:
        ```python
        with Binary.open("path/to/file") as binary:
            for item in binary.strings:
                print(item)
        ```
    """

    def __init__(
        self,
        images: List[LoadedImage],
        path: Optional[Path] = None,
        config: ScanConfig = DEFAULT_CONFIG,
    ) -> None:
        self._images: Optional[List[LoadedImage]] = images
        self._path = path
        self._digests: Optional[dict] = None
        self.config = config
        self._string_cache: Optional[List[bytes]] = None
        self._string_lookup: Optional[FrozenSet[bytes]] = None
        self._address_index: Optional[AddressIndex] = None

    def __enter__(self) -> Binary:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> Literal[False]:
        """
        Exit the context manager, closing the binary.

        Returns:
            False to allow exceptions to propagate (does not suppress exceptions).
        """
        if self.is_open():
            self.close()
        return False

    @classmethod
    def open(cls, path: Union[str, Path], config: Optional[ScanConfig] = None) -> Binary:
        """
        Opens a binary file.

        Args:
            path: Path to an ELF, Mach-O or PE file.
            config: Candidate bounds; defaults apply when omitted.

        Returns:
            An open Binary.

        Raises:
            BinaryLoadError: If the file cannot be read or parsed.
            UnknownFormatError: If the file is not a recognized executable format.
            UnsupportedArchitectureError: If no pointer width can be determined.
        """
        path = Path(path)
        images = load_images(path)
        logger.info(
            f'Opened {path}: {len(images)} image(s), '
            f'{sum(len(image.sections) for image in images)} sections'
        )
        return cls(images, path, config or DEFAULT_CONFIG)

    @classmethod
    def from_sections(
        cls,
        sections: Iterable[Section],
        pointer_width: int,
        byte_order: ByteOrder = ByteOrder.LITTLE,
        architecture: Architecture = Architecture.UNKNOWN,
        config: Optional[ScanConfig] = None,
    ) -> Binary:
        """
        Creates a binary over in-memory sections.

        Args:
            sections: The sections of the image.
            pointer_width: Native pointer width (4 or 8).
            byte_order: Native byte order.
            architecture: Architecture, for metadata only.
            config: Candidate bounds; defaults apply when omitted.

        Raises:
            InvalidParameterError: If the pointer width is not 4 or 8.
        """
        image = LoadedImage(
            format=BinaryFormat.RAW,
            architecture=architecture,
            pointer_width=pointer_width,
            byte_order=byte_order,
            sections=list(sections),
        )
        return cls([image], None, config or DEFAULT_CONFIG)

    def is_open(self) -> bool:
        """
        Checks if the binary is loaded.

        Returns:
            True if the binary is open, false otherwise.
        """
        return self._images is not None

    @check_binary_open
    def close(self) -> None:
        """
        Releases the section contents and extracted strings.
        """
        self._images = None
        self._string_cache = None
        self._string_lookup = None
        self._address_index = None

    @property
    @check_binary_open
    def images(self) -> List[LoadedImage]:
        """The loaded executable images (several for fat Mach-O files)."""
        assert self._images is not None
        return self._images

    @property
    def _primary(self) -> LoadedImage:
        return self.images[0]

    @property
    @check_binary_open
    def path(self) -> Optional[str]:
        """The input file path."""
        return str(self._path) if self._path else None

    @property
    @check_binary_open
    def module(self) -> Optional[str]:
        """The input file name."""
        return self._path.name if self._path else None

    @property
    @check_binary_open
    def filesize(self) -> Optional[int]:
        """The input file size."""
        return self._path.stat().st_size if self._path else None

    def _file_digest(self, name: str) -> Optional[str]:
        if not self._path:
            return None
        if self._digests is None:
            data = self._path.read_bytes()
            self._digests = {
                'md5': hashlib.md5(data).hexdigest(),
                'sha256': hashlib.sha256(data).hexdigest(),
            }
        return self._digests[name]

    @property
    @check_binary_open
    def md5(self) -> Optional[str]:
        """The MD5 hash of the input file."""
        return self._file_digest('md5')

    @property
    @check_binary_open
    def sha256(self) -> Optional[str]:
        """The SHA256 hash of the input file."""
        return self._file_digest('sha256')

    @property
    @check_binary_open
    def format(self) -> str:
        """The file format type."""
        return self._primary.format.value

    @property
    @check_binary_open
    def architecture(self) -> Optional[str]:
        """The processor architecture of the first image."""
        architecture = self._primary.architecture
        return architecture.value if architecture is not Architecture.UNKNOWN else None

    @property
    @check_binary_open
    def pointer_width(self) -> int:
        """The native pointer width of the first image, in bytes."""
        return self._primary.pointer_width

    @property
    @check_binary_open
    def bitness(self) -> int:
        """The application bitness (32/64) of the first image."""
        return self._primary.bitness

    @property
    @check_binary_open
    def byte_order(self) -> ByteOrder:
        """The byte order of the first image."""
        return self._primary.byte_order

    @property
    @check_binary_open
    def metadata(self) -> BinaryMetadata:
        """
        Metadata about the binary.
        Dynamically built from BinaryMetadata dataclass fields.
        """
        metadata_values = {}
        for field in fields(BinaryMetadata):
            value = getattr(self, field.name)
            if isinstance(value, ByteOrder):
                value = value.value
            if value is not None:
                metadata_values[field.name] = value
        return BinaryMetadata(**metadata_values)

    @property
    def sections(self) -> Sections:
        """Handler that provides access to section-related operations."""
        return Sections(self)

    @property
    def strings(self) -> Strings:
        """Handler that provides access to the extracted strings."""
        return Strings(self)
