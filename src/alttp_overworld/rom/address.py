"""SNES LoROM bank addresses and file offsets.

The console sees the cartridge through 32KB windows in the upper half of
each bank; the file stores those windows back to back. The two address
spaces get separate types so that one is never used where the other is
meant.
"""

from __future__ import annotations

from dataclasses import dataclass

from alttp_overworld.rom.errors import AddressTranslationError, RomFormatError


@dataclass(frozen=True, order=True)
class FileOffset:
    """Linear index into the ROM image."""
    value: int

    def __post_init__(self):
        if not isinstance(self.value, int) or self.value < 0:
            raise ValueError(f"invalid file offset: {self.value!r}")

    def __add__(self, other: int) -> FileOffset:
        if not isinstance(other, int):
            return NotImplemented
        return FileOffset(self.value + other)

    def __str__(self) -> str:
        return f"0x{self.value:06X}"


@dataclass(frozen=True, order=True)
class BankAddress:
    """24-bit console address (bank:offset)."""
    value: int

    def __post_init__(self):
        if not isinstance(self.value, int) or not 0 <= self.value <= 0xFFFFFF:
            raise ValueError(f"invalid bank address: {self.value!r}")

    @property
    def bank(self) -> int:
        return self.value >> 16

    @property
    def is_rom_mapped(self) -> bool:
        # Upper half of a bank, banks $00-$3F only.
        return bool(self.value & 0x8000) and not self.value & 0xC00000

    def to_file_offset(self) -> FileOffset:
        return snes_to_pc(self)

    def __str__(self) -> str:
        return f"${self.bank:02X}:{self.value & 0xFFFF:04X}"


def snes_to_pc(addr: BankAddress) -> FileOffset:
    """Convert a LoROM bank address to a file offset (headerless)."""
    if not isinstance(addr, BankAddress):
        raise TypeError(f"expected BankAddress, got {type(addr).__name__}")
    if not addr.is_rom_mapped:
        raise AddressTranslationError(f"{addr} is not ROM-mapped")
    value = addr.value
    return FileOffset((value >> 1) & 0x3F8000 | value & 0x7FFF)


def rom_pointer(value: int, what: str) -> BankAddress:
    """Wrap a pointer read out of ROM data.

    Unlike a Constants entry, a bad pointer here is bad ROM content.
    """
    addr = BankAddress(value)
    if not addr.is_rom_mapped:
        raise RomFormatError(f"{what} points at {addr}, outside ROM")
    return addr
