"""Bounds-checked, read-only access to a ROM image."""

from __future__ import annotations

from typing import Union

from alttp_overworld.rom.address import FileOffset
from alttp_overworld.rom.errors import RomReadError


COPIER_HEADER_SIZE = 512


def detect_header(rom_data: bytes) -> int:
    """Detect and return SMC header size (0 or 512)."""
    if len(rom_data) % 1024 == COPIER_HEADER_SIZE:
        return COPIER_HEADER_SIZE
    return 0


class RomBuffer:
    """Immutable ROM image with little-endian fixed-width reads."""

    __slots__ = ("_data",)

    def __init__(self, data: Union[bytes, bytearray]):
        self._data = bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        return self._data

    def _check(self, offset: FileOffset, size: int) -> int:
        if not isinstance(offset, FileOffset):
            raise TypeError(f"expected FileOffset, got {type(offset).__name__}")
        if offset.value + size > len(self._data):
            raise RomReadError(
                f"read of {size} byte(s) at {offset} is past the end of the ROM "
                f"(0x{len(self._data):06X} bytes)")
        return offset.value

    def read_u8(self, offset: FileOffset) -> int:
        pos = self._check(offset, 1)
        return self._data[pos]

    def read_u16(self, offset: FileOffset) -> int:
        pos = self._check(offset, 2)
        return self._data[pos] | self._data[pos + 1] << 8

    def read_u24(self, offset: FileOffset) -> int:
        pos = self._check(offset, 3)
        return self._data[pos] | self._data[pos + 1] << 8 | self._data[pos + 2] << 16

    def read_n(self, offset: FileOffset, n: int) -> bytes:
        pos = self._check(offset, n)
        return self._data[pos:pos + n]
