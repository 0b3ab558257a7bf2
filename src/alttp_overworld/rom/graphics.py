"""Graphics sheet decoding.

Sheets are compressed 3bpp planar graphics, 64 tiles of 24 bytes each.
The first 16 bytes of a tile interleave bitplanes 0 and 1 row by row;
the last 8 hold bitplane 2.
"""

from __future__ import annotations

import logging

from alttp_overworld.rom.address import BankAddress, rom_pointer
from alttp_overworld.rom.buffer import RomBuffer
from alttp_overworld.rom.compression import decompress
from alttp_overworld.rom.data import (
    BYTES_PER_TILE_3BPP,
    SHEET_BYTES,
    SHEET_COUNT,
    TILES_PER_SHEET,
    Pixels,
)
from alttp_overworld.rom.errors import RomFormatError
from alttp_overworld.rom.variants import Constants

logger = logging.getLogger(__name__)


def unpack_3bpp_tile(data: bytes, j: int) -> Pixels:
    """Unpack tile `j` of a decompressed sheet into 8 rows of colour indices."""
    base = j * BYTES_PER_TILE_3BPP
    rows = []
    for y in range(8):
        p0 = data[base + y * 2]
        p1 = data[base + y * 2 + 1]
        p2 = data[base + y + 16]
        rows.append(tuple(
            ((p0 >> (7 - x)) & 1)
            | ((p1 >> (7 - x)) & 1) << 1
            | ((p2 >> (7 - x)) & 1) << 2
            for x in range(8)
        ))
    return tuple(rows)


def unpack_sheet(data: bytes) -> list[Pixels]:
    return [unpack_3bpp_tile(data, j) for j in range(TILES_PER_SHEET)]


def sheet_address(rom: RomBuffer, constants: Constants, sheet: int) -> BankAddress:
    """Look up the bank:high:low address of a graphics sheet."""
    low_table = rom_pointer(rom.read_u16(constants.gfx_ptr_low), "sheet low-byte table").to_file_offset()
    high_table = rom_pointer(rom.read_u16(constants.gfx_ptr_high), "sheet high-byte table").to_file_offset()
    bank_table = rom_pointer(rom.read_u16(constants.gfx_ptr_bank), "sheet bank table").to_file_offset()
    low = rom.read_u8(low_table + sheet)
    high = rom.read_u8(high_table + sheet)
    bank = rom.read_u8(bank_table + sheet)
    return rom_pointer(low | high << 8 | bank << 16, f"graphics sheet 0x{sheet:02X}")


def load_graphics(rom: RomBuffer, constants: Constants) -> tuple[Pixels, ...]:
    """Decode every graphics sheet into one flat tuple of 8x8 tiles.

    Tile `t` of sheet `s` ends up at index `s * 64 + t`.
    """
    tiles: list[Pixels] = []
    for sheet in range(SHEET_COUNT):
        addr = sheet_address(rom, constants, sheet)
        data = decompress(rom, addr.to_file_offset())
        if len(data) != SHEET_BYTES:
            raise RomFormatError(
                f"graphics sheet 0x{sheet:02X} at {addr} decompressed to "
                f"0x{len(data):X} bytes, expected 0x{SHEET_BYTES:X}")
        tiles.extend(unpack_sheet(data))
    logger.debug("Decoded %d graphics sheets (%d tiles)", SHEET_COUNT, len(tiles))
    return tuple(tiles)
