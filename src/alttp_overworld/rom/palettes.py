"""Overworld palette import and per-area palette selection.

The game builds the background palette of an area from four pieces: a
main group (5 rows), two auxiliary groups (3 rows each) and an animated
group (1 row), plus the two HUD rows. Each row holds 7 colours; colour 0
of every row is the shared background.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from alttp_overworld.rom.address import BankAddress
from alttp_overworld.rom.buffer import RomBuffer
from alttp_overworld.rom.data import (
    ANIMATED_PALETTE_LIMIT,
    ANIMATED_PALETTE_ROWS,
    AUX_PALETTE_LIMIT,
    AUX_PALETTE_ROWS,
    BLACK,
    COLORS_PER_ROW,
    DARK_WORLD_END,
    HUD_ROWS,
    LIGHT_WORLD_END,
    MAIN_PALETTE_DARK_WORLD,
    MAIN_PALETTE_LIGHT_WORLD,
    MAIN_PALETTE_OVERRIDES,
    MAIN_PALETTE_ROWS,
    SPECIAL_TABLE_MASK,
    TRIFORCE_ROOM,
    TRIFORCE_ROOM_PAL_SET,
    Color,
    Palette,
)
from alttp_overworld.rom.maps import MapPalettes, Region
from alttp_overworld.rom.variants import Constants

logger = logging.getLogger(__name__)

GROUP_HUD = "HUD"
GROUP_MAIN = "Main"
GROUP_AUX = "Aux"
GROUP_ANIMATED = "Animated"


@dataclass(frozen=True)
class PaletteGroup:
    name: str
    base: BankAddress
    sets: int
    rows: int
    row_stride: int     # bytes from one row to the next
    first_color: int    # colours skipped at the start of each row


def palette_groups(constants: Constants) -> tuple[PaletteGroup, ...]:
    row_bytes = COLORS_PER_ROW * 2
    return (
        # HUD rows are full 16-colour CGRAM rows; colour 0 is transparent.
        PaletteGroup(GROUP_HUD, constants.hud_palettes, 1, HUD_ROWS, 32, 1),
        PaletteGroup(GROUP_MAIN, constants.main_palettes,
                     constants.main_palette_count, MAIN_PALETTE_ROWS, row_bytes, 0),
        PaletteGroup(GROUP_AUX, constants.aux_palettes,
                     constants.aux_palette_count, AUX_PALETTE_ROWS, row_bytes, 0),
        PaletteGroup(GROUP_ANIMATED, constants.animated_palettes,
                     constants.animated_palette_count, ANIMATED_PALETTE_ROWS, row_bytes, 0),
    )


@dataclass(frozen=True)
class PaletteTable:
    """Palette ids keyed by (group, set, row)."""
    ids: dict[tuple[str, int, int], int]

    def hud(self, row: int) -> int:
        return self.ids[(GROUP_HUD, 0, row)]

    def main(self, pal: int, row: int) -> int:
        return self.ids[(GROUP_MAIN, pal, row)]

    def aux(self, pal: int, row: int) -> int:
        return self.ids[(GROUP_AUX, pal, row)]

    def animated(self, pal: int) -> int:
        return self.ids[(GROUP_ANIMATED, pal, 0)]


def import_palette(rom: RomBuffer, group: PaletteGroup, pal: int, row: int,
                   palette_id: int) -> Palette:
    addr = group.base.to_file_offset() + (pal * group.rows + row) * group.row_stride
    addr += group.first_color * 2
    colors = [BLACK] * 16
    for i in range(COLORS_PER_ROW):
        colors[i + 1] = Color.from_snes(rom.read_u16(addr + i * 2))
    return Palette(id=palette_id, name=f"{group.name} {pal:x}-{row}", colors=colors)


def import_all_palettes(rom: RomBuffer, constants: Constants,
                        first_id: int = 0) -> tuple[list[Palette], PaletteTable]:
    palettes: list[Palette] = []
    ids: dict[tuple[str, int, int], int] = {}
    palette_id = first_id
    for group in palette_groups(constants):
        for pal in range(group.sets):
            for row in range(group.rows):
                palettes.append(import_palette(rom, group, pal, row, palette_id))
                ids[(group.name, pal, row)] = palette_id
                palette_id += 1
    logger.debug("Imported %d palettes", len(palettes))
    return palettes, PaletteTable(ids)


# ─── Palette resolution ──────────────────────────────────────────────────────

def default_main_palette(parent: int) -> int:
    if parent in MAIN_PALETTE_OVERRIDES:
        return MAIN_PALETTE_OVERRIDES[parent]
    if LIGHT_WORLD_END <= parent < DARK_WORLD_END:
        return MAIN_PALETTE_DARK_WORLD
    return MAIN_PALETTE_LIGHT_WORLD


def resolve_main_palette(rom: RomBuffer, constants: Constants, parent: int) -> int:
    if constants.custom_main_palettes is None:
        return default_main_palette(parent)
    main = rom.read_u8(constants.custom_main_palettes.to_file_offset() + parent)
    if main >= constants.main_palette_count:
        fallback = default_main_palette(parent)
        logger.warning("Map 0x%02X: custom main palette %d out of range, using %d",
                       parent, main, fallback)
        return fallback
    return main


def pal_set_for(rom: RomBuffer, constants: Constants, slot: int) -> int:
    """Palette set index of a slot, before any correction."""
    if slot == TRIFORCE_ROOM:
        return TRIFORCE_ROOM_PAL_SET
    if slot < DARK_WORLD_END:
        return rom.read_u8(constants.area_pal_sets.to_file_offset() + slot)
    special = (slot - DARK_WORLD_END) & SPECIAL_TABLE_MASK
    return rom.read_u8(constants.special_pal_sets.to_file_offset() + special)


def _read_group(rom: RomBuffer, constants: Constants, pal_set: int, k: int) -> int:
    return rom.read_u8(constants.pal_set_groups.to_file_offset() + pal_set * 4 + k)


def resolve_palettes(rom: RomBuffer, constants: Constants, parent: int) -> MapPalettes:
    """Select the main, aux and animated palette groups for a top-level slot."""
    main = resolve_main_palette(rom, constants, parent)
    pal_set = pal_set_for(rom, constants, parent)
    aux1 = _read_group(rom, constants, pal_set, 0)
    aux2 = _read_group(rom, constants, pal_set, 1)
    animated = _read_group(rom, constants, pal_set, 2)

    if aux1 >= AUX_PALETTE_LIMIT:
        logger.warning("Map 0x%02X: aux1 palette %d out of range, using 0", parent, aux1)
        aux1 = 0
    if aux2 >= AUX_PALETTE_LIMIT:
        # The game keeps the previous area's aux2 in this case.
        prev_pal_set = pal_set_for(rom, constants, parent - 1) if parent > 0 else pal_set
        aux2 = _read_group(rom, constants, prev_pal_set, 1)
        logger.debug("Map 0x%02X: aux2 taken from palette set 0x%02X", parent, prev_pal_set)
        if aux2 >= AUX_PALETTE_LIMIT:
            logger.warning("Map 0x%02X: inherited aux2 palette %d out of range, using 0",
                           parent, aux2)
            aux2 = 0
    if animated >= ANIMATED_PALETTE_LIMIT:
        logger.warning("Map 0x%02X: animated palette %d out of range, using 0",
                       parent, animated)
        animated = 0

    return MapPalettes(main=main, aux1=aux1, aux2=aux2, animated=animated, pal_set=pal_set)


def resolve_regions(rom: RomBuffer, constants: Constants,
                    regions: tuple[Region, ...]) -> tuple[Region, ...]:
    """Attach MapPalettes to every top-level region."""
    return tuple(
        replace(region, palettes=resolve_palettes(rom, constants, region.index))
        if region.is_parent else region
        for region in regions
    )
