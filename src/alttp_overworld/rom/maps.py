"""Overworld map slots: tile32 grids and parent/child grouping."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from alttp_overworld.rom.address import BankAddress, rom_pointer
from alttp_overworld.rom.buffer import RomBuffer
from alttp_overworld.rom.compression import decompress
from alttp_overworld.rom.data import (
    IRREGULAR_PARENTS,
    LARGE_AREA_CHILD_OFFSETS,
    LARGE_AREA_SLOTS,
    MAP_ROW_STRIDE,
    SLOT_TILES32,
)
from alttp_overworld.rom.errors import RomFormatError
from alttp_overworld.rom.variants import Constants

logger = logging.getLogger(__name__)

PLANE_BYTES = SLOT_TILES32 * SLOT_TILES32


@dataclass(frozen=True)
class MapPalettes:
    """Palette groups selected for one top-level region."""
    main: int
    aux1: int
    aux2: int
    animated: int
    pal_set: int


@dataclass(frozen=True)
class Region:
    """One map slot."""
    index: int
    parent: int
    tiles32: tuple[tuple[int, ...], ...]    # 16 rows of 16 tile32 indices
    palettes: Optional[MapPalettes] = None

    @property
    def is_parent(self) -> bool:
        return self.parent == self.index

    @property
    def is_large(self) -> bool:
        return self.index in LARGE_AREA_SLOTS

    @property
    def slot_size(self) -> tuple[int, int]:
        return (2, 2) if self.is_large else (1, 1)

    def block_slots(self) -> list[tuple[int, int, int]]:
        """(dx, dy, slot) for every slot in this region's block, row-major."""
        w, h = self.slot_size
        return [(dx, dy, self.index + dx + dy * MAP_ROW_STRIDE)
                for dy in range(h) for dx in range(w)]


def compute_parents(map_count: int) -> list[int]:
    """Map every slot to the top-level slot whose area contains it."""
    parents = list(range(map_count))
    for top_left in LARGE_AREA_SLOTS:
        if top_left >= map_count:
            continue
        for offset in LARGE_AREA_CHILD_OFFSETS:
            if top_left + offset < map_count:
                parents[top_left + offset] = top_left
    for child, parent in IRREGULAR_PARENTS.items():
        if child < map_count:
            parents[child] = parent
    return parents


def _plane_address(rom: RomBuffer, table: BankAddress, slot: int) -> BankAddress:
    return rom_pointer(rom.read_u24(table.to_file_offset() + slot * 3), f"map 0x{slot:02X}")


def _load_plane(rom: RomBuffer, table: BankAddress, slot: int, which: str) -> bytes:
    addr = _plane_address(rom, table, slot)
    data = decompress(rom, addr.to_file_offset(), big_endian=True)
    if len(data) != PLANE_BYTES:
        raise RomFormatError(
            f"map 0x{slot:02X} {which} plane at {addr} decompressed to "
            f"{len(data)} bytes, expected {PLANE_BYTES}")
    return data


def load_map_grid(rom: RomBuffer, constants: Constants, slot: int) -> tuple[tuple[int, ...], ...]:
    """Decompress one slot's 16x16 grid of tile32 indices."""
    high = _load_plane(rom, constants.map_high_ptrs, slot, "high")
    low = _load_plane(rom, constants.map_low_ptrs, slot, "low")
    rows = []
    for y in range(SLOT_TILES32):
        row = []
        for x in range(SLOT_TILES32):
            i = y * SLOT_TILES32 + x
            idx = high[i] << 8 | low[i]
            if idx >= constants.tiles32_count:
                logger.warning(
                    "Map 0x%02X (%d, %d): tile32 index 0x%04X out of range, using 0",
                    slot, x, y, idx)
                idx = 0
            row.append(idx)
        rows.append(tuple(row))
    return tuple(rows)


def load_regions(rom: RomBuffer, constants: Constants) -> tuple[Region, ...]:
    parents = compute_parents(constants.map_count)
    regions = tuple(
        Region(index=slot, parent=parents[slot], tiles32=load_map_grid(rom, constants, slot))
        for slot in range(constants.map_count)
    )
    logger.debug("Loaded %d map slots (%d top-level)",
                 len(regions), sum(r.is_parent for r in regions))
    return regions
