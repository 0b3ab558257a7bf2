"""Composite 16x16 and 32x32 overworld tiles.

A 16x16 tile is four 8x8 character references; a 32x32 tile is four
16x16 tile indices. Quadrants are always ordered top-left, top-right,
bottom-left, bottom-right.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from alttp_overworld.rom.buffer import RomBuffer
from alttp_overworld.rom.data import Flip
from alttp_overworld.rom.errors import RomFormatError
from alttp_overworld.rom.variants import Constants

logger = logging.getLogger(__name__)

QUADRANT_NAMES = ("top-left", "top-right", "bottom-left", "bottom-right")
TILE32_GROUP_BYTES = 6
TILE32_GROUP_ENTRIES = 4


@dataclass(frozen=True)
class Tile8Ref:
    """Reference to an 8x8 graphics character, as stored in tile16 data."""
    char: int
    palette: int
    priority: bool
    flip: Flip

    @classmethod
    def decode(cls, word: int) -> Tile8Ref:
        return cls(
            char=word & 0x3FF,
            palette=(word >> 10) & 7,
            priority=bool(word & 0x2000),
            flip=Flip((word >> 14) & 3),
        )


@dataclass(frozen=True)
class Composite16:
    tl: Tile8Ref
    tr: Tile8Ref
    bl: Tile8Ref
    br: Tile8Ref

    @property
    def quadrants(self) -> tuple[Tile8Ref, Tile8Ref, Tile8Ref, Tile8Ref]:
        return (self.tl, self.tr, self.bl, self.br)


@dataclass(frozen=True)
class Composite32:
    tl: int
    tr: int
    bl: int
    br: int

    @property
    def quadrants(self) -> tuple[int, int, int, int]:
        return (self.tl, self.tr, self.bl, self.br)


def load_tiles16(rom: RomBuffer, constants: Constants) -> tuple[Composite16, ...]:
    base = constants.tiles16.to_file_offset()
    tiles = []
    for i in range(constants.tiles16_count):
        entry = base + i * 8
        refs = [Tile8Ref.decode(rom.read_u16(entry + q * 2)) for q in range(4)]
        tiles.append(Composite16(*refs))
    logger.debug("Loaded %d tile16 entries from %s", len(tiles), base)
    return tuple(tiles)


def _tile32_quadrant(table: bytes, group: int, k: int) -> int:
    pos = group * TILE32_GROUP_BYTES
    low = table[pos + k]
    high = table[pos + (4 if k <= 1 else 5)]
    nibble = (high >> 4) if k % 2 == 0 else high
    return low | (nibble & 0x0F) << 8


def load_tiles32(rom: RomBuffer, constants: Constants) -> tuple[Composite32, ...]:
    """Unpack the four quadrant tables into tile32 entries.

    Every group of four entries shares a 6-byte window per table: four low
    bytes, then two bytes holding the high nibbles of entries 0/1 and 2/3.
    """
    count = constants.tiles32_count
    groups = -(-count // TILE32_GROUP_ENTRIES)
    tables = [
        rom.read_n(addr.to_file_offset(), groups * TILE32_GROUP_BYTES)
        for addr in (constants.tiles32_tl, constants.tiles32_tr,
                     constants.tiles32_bl, constants.tiles32_br)
    ]
    tiles = []
    for i in range(count):
        group, k = divmod(i, TILE32_GROUP_ENTRIES)
        quadrants = [_tile32_quadrant(table, group, k) for table in tables]
        for q, idx in enumerate(quadrants):
            if idx >= constants.tiles16_count:
                raise RomFormatError(
                    f"tile32 0x{i:04X} {QUADRANT_NAMES[q]} quadrant references "
                    f"tile16 0x{idx:04X}, only {constants.tiles16_count} exist")
        tiles.append(Composite32(*quadrants))
    logger.debug("Loaded %d tile32 entries", len(tiles))
    return tuple(tiles)
