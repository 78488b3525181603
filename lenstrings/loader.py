from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import lief
from typing_extensions import List, Optional, Tuple, Union

from .architecture import Architecture, ByteOrder, check_pointer_width, layout_for
from .base import BinaryLoadError, UnknownFormatError, UnsupportedArchitectureError
from .sections import Section

logger = logging.getLogger(__name__)


class BinaryFormat(Enum):
    ELF = 'ELF'
    MACHO = 'Mach-O'
    PE = 'PE'
    RAW = 'raw'


@dataclass(frozen=True)
class LoadedImage:
    """
    One executable image: its sections plus the word layout needed to scan them.

    A fat Mach-O file produces one image per architecture slice.
    """

    format: BinaryFormat
    architecture: Architecture
    pointer_width: int
    byte_order: ByteOrder
    sections: List[Section] = field(default_factory=list)

    def __post_init__(self) -> None:
        check_pointer_width(self.pointer_width)

    @property
    def bitness(self) -> int:
        return self.pointer_width * 8


_ELF_CLASS_WIDTHS = {
    lief.ELF.Header.CLASS.ELF32: 4,
    lief.ELF.Header.CLASS.ELF64: 8,
}

_ELF_BYTE_ORDERS = {
    lief.ELF.Header.ELF_DATA.LSB: ByteOrder.LITTLE,
    lief.ELF.Header.ELF_DATA.MSB: ByteOrder.BIG,
}

_ELF_MACHINES = {
    lief.ELF.ARCH.I386: Architecture.X86,
    lief.ELF.ARCH.X86_64: Architecture.X86_64,
    lief.ELF.ARCH.ARM: Architecture.ARM,
    lief.ELF.ARCH.AARCH64: Architecture.ARM64,
    lief.ELF.ARCH.PPC: Architecture.POWERPC,
    lief.ELF.ARCH.PPC64: Architecture.POWERPC64,
}

_MACHO_CPUS = {
    lief.MachO.Header.CPU_TYPE.X86: Architecture.X86,
    lief.MachO.Header.CPU_TYPE.X86_64: Architecture.X86_64,
    lief.MachO.Header.CPU_TYPE.ARM: Architecture.ARM,
    lief.MachO.Header.CPU_TYPE.ARM64: Architecture.ARM64,
    lief.MachO.Header.CPU_TYPE.POWERPC: Architecture.POWERPC,
    lief.MachO.Header.CPU_TYPE.POWERPC64: Architecture.POWERPC64,
}

_PE_MACHINES = {
    lief.PE.Header.MACHINE_TYPES.I386: Architecture.X86,
    lief.PE.Header.MACHINE_TYPES.AMD64: Architecture.X86_64,
    lief.PE.Header.MACHINE_TYPES.ARM: Architecture.ARM,
    lief.PE.Header.MACHINE_TYPES.ARMNT: Architecture.ARM,
    lief.PE.Header.MACHINE_TYPES.ARM64: Architecture.ARM64,
}


def _content(raw: object) -> Optional[bytes]:
    """Detached copy of a lief content buffer; None when there is nothing to read."""
    data = bytes(raw)  # type: ignore[call-overload]
    return data if data else None


def elf_layout(identity_class: object, identity_data: object) -> Tuple[int, ByteOrder]:
    """
    Resolves pointer width and byte order from an ELF class and data encoding.

    Raises:
        UnsupportedArchitectureError: If either is not a known value.
    """
    width = _ELF_CLASS_WIDTHS.get(identity_class)  # type: ignore[call-overload]
    if width is None:
        raise UnsupportedArchitectureError(identity_class)
    byte_order = _ELF_BYTE_ORDERS.get(identity_data)  # type: ignore[call-overload]
    if byte_order is None:
        raise UnsupportedArchitectureError(identity_data)
    return width, byte_order


def _load_elf(path: str) -> LoadedImage:
    binary = lief.ELF.parse(path)
    if binary is None:
        raise BinaryLoadError(f'{path}: failed to parse ELF file')

    header = binary.header
    width, byte_order = elf_layout(header.identity_class, header.identity_data)

    sections = []
    for section in binary.sections:
        if section.type == lief.ELF.Section.TYPE.NOBITS:
            data = None
        else:
            data = _content(section.content)
        sections.append(Section(section.virtual_address, data, section.name or None))

    return LoadedImage(
        format=BinaryFormat.ELF,
        architecture=_ELF_MACHINES.get(header.machine_type, Architecture.UNKNOWN),
        pointer_width=width,
        byte_order=byte_order,
        sections=sections,
    )


def _load_macho_slice(binary: lief.MachO.Binary) -> LoadedImage:
    cpu_type = binary.header.cpu_type
    architecture = _MACHO_CPUS.get(cpu_type, Architecture.UNKNOWN)
    if architecture is Architecture.UNKNOWN:
        raise UnsupportedArchitectureError(cpu_type)
    width, byte_order = layout_for(architecture)

    sections = []
    for section in binary.sections:
        if section.type == lief.MachO.Section.TYPE.ZEROFILL:
            data = None
        else:
            data = _content(section.content)
        name = f'{section.segment_name},{section.name}'
        sections.append(Section(section.virtual_address, data, name))

    return LoadedImage(
        format=BinaryFormat.MACHO,
        architecture=architecture,
        pointer_width=width,
        byte_order=byte_order,
        sections=sections,
    )


def _load_macho(path: str) -> List[LoadedImage]:
    fat = lief.MachO.parse(path)
    if fat is None:
        raise BinaryLoadError(f'{path}: failed to parse Mach-O file')

    images = []
    errors = []
    for binary in fat:
        try:
            images.append(_load_macho_slice(binary))
        except UnsupportedArchitectureError as e:
            logger.warning(f'{path}: skipping Mach-O slice: {e}')
            errors.append(e)

    if not images:
        if errors:
            raise errors[0]
        raise BinaryLoadError(f'{path}: Mach-O file has no slices')
    return images


def _load_pe(path: str) -> LoadedImage:
    binary = lief.PE.parse(path)
    if binary is None:
        raise BinaryLoadError(f'{path}: failed to parse PE file')

    machine = binary.header.machine
    architecture = _PE_MACHINES.get(machine, Architecture.UNKNOWN)
    if architecture is Architecture.UNKNOWN:
        raise UnsupportedArchitectureError(machine)
    width, byte_order = layout_for(architecture)

    imagebase = binary.optional_header.imagebase
    sections = [
        Section(imagebase + section.virtual_address, _content(section.content), section.name)
        for section in binary.sections
    ]

    return LoadedImage(
        format=BinaryFormat.PE,
        architecture=architecture,
        pointer_width=width,
        byte_order=byte_order,
        sections=sections,
    )


def detect_format(path: Union[str, Path]) -> Optional[BinaryFormat]:
    """
    Identifies the executable format of a file.

    Returns:
        The detected format, or None if the file is not ELF, Mach-O or PE.
    """
    name = str(path)
    if lief.is_elf(name):
        return BinaryFormat.ELF
    if lief.is_macho(name):
        return BinaryFormat.MACHO
    if lief.is_pe(name):
        return BinaryFormat.PE
    return None


def load_images(path: Union[str, Path]) -> List[LoadedImage]:
    """
    Loads every executable image contained in a file.

    Args:
        path: Path to an ELF, Mach-O (thin or fat) or PE file.

    Returns:
        The loaded images; one per slice for fat Mach-O files, otherwise one.

    Raises:
        BinaryLoadError: If the file cannot be read or parsed.
        UnknownFormatError: If the file is not a recognized executable format.
        UnsupportedArchitectureError: If no pointer width can be determined.
    """
    path = Path(path)
    if not path.is_file():
        raise BinaryLoadError(f'{path} does not exist or is not a file')

    binary_format = detect_format(path)
    logger.debug(f'{path}: detected format {binary_format}')
    if binary_format is BinaryFormat.ELF:
        return [_load_elf(str(path))]
    if binary_format is BinaryFormat.MACHO:
        return _load_macho(str(path))
    if binary_format is BinaryFormat.PE:
        return [_load_pe(str(path))]
    raise UnknownFormatError(f'{path}: unknown binary format')
