"""ROM layout detection.

Three layouts are recognised: the Japanese and North American retail
releases, and ROMs saved by the ZScream overworld editor, which moves the
composite tile tables to expanded space and can add per-area tables for
background colours, main palettes and graphics sets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from alttp_overworld.rom.address import BankAddress, FileOffset
from alttp_overworld.rom.buffer import RomBuffer
from alttp_overworld.rom.data import MAP_COUNT
from alttp_overworld.rom.errors import UnknownRomError

logger = logging.getLogger(__name__)


VARIANT_JP = "jp"
VARIANT_US = "us"
VARIANT_ZSCREAM = "zscream"

# First two bytes of the internal title at SNES $00:FFC0.
TITLE_OFFSET = FileOffset(0x7FC0)
JP_SIGNATURE = 0x455A   # "ZE" (ZELDANODENSETSU)
US_SIGNATURE = 0x4854   # "TH" (THE LEGEND OF ZELDA)

# ZScream patches a JSL over the vanilla instruction here.
ZSCREAM_MARKER = FileOffset(0x1772E)
ZSCREAM_MARKER_OPCODE = 0x22

ZSCREAM_BG_COLORS_FLAG = FileOffset(0x140140)
ZSCREAM_MAIN_PALETTES_FLAG = FileOffset(0x140141)
ZSCREAM_GFX_SETS_FLAG = FileOffset(0x140148)


@dataclass(frozen=True)
class Constants:
    """Resolved table locations and sizes for one ROM layout."""
    variant: str

    # Code operands holding the bank-$00 addresses of the sheet pointer tables.
    gfx_ptr_low: FileOffset
    gfx_ptr_high: FileOffset
    gfx_ptr_bank: FileOffset

    hud_palettes: BankAddress = BankAddress(0x1BD660)
    main_palettes: BankAddress = BankAddress(0x1BE6C8)
    aux_palettes: BankAddress = BankAddress(0x1BE86C)
    animated_palettes: BankAddress = BankAddress(0x1BE604)
    main_palette_count: int = 6
    aux_palette_count: int = 20
    animated_palette_count: int = 14

    tiles16: BankAddress = BankAddress(0x0F8000)
    tiles16_count: int = 3752
    tiles32_tl: BankAddress = BankAddress(0x038000)
    tiles32_tr: BankAddress = BankAddress(0x03B400)
    tiles32_bl: BankAddress = BankAddress(0x048000)
    tiles32_br: BankAddress = BankAddress(0x04B400)
    tiles32_count: int = 8864

    map_high_ptrs: BankAddress = BankAddress(0x02F94D)
    map_low_ptrs: BankAddress = BankAddress(0x02FB2D)
    map_count: int = MAP_COUNT

    area_gfx: BankAddress = BankAddress(0x00FC9C)
    special_gfx: BankAddress = BankAddress(0x02E821)
    area_pal_sets: BankAddress = BankAddress(0x00FD1C)
    special_pal_sets: BankAddress = BankAddress(0x02E831)
    pal_set_groups: BankAddress = BankAddress(0x0ED504)
    world_gfx_sets: BankAddress = BankAddress(0x00E073)
    area_gfx_sets: BankAddress = BankAddress(0x00DD97)
    collision: BankAddress = BankAddress(0x0E9459)

    # Per-area override tables, present only when a tool enabled them.
    custom_bg_colors: Optional[BankAddress] = None
    custom_main_palettes: Optional[BankAddress] = None
    custom_gfx_sets: Optional[BankAddress] = None


JP_CONSTANTS = Constants(
    variant=VARIANT_JP,
    gfx_ptr_low=FileOffset(0x67DA),
    gfx_ptr_high=FileOffset(0x67D5),
    gfx_ptr_bank=FileOffset(0x67D0),
)

US_CONSTANTS = Constants(
    variant=VARIANT_US,
    gfx_ptr_low=FileOffset(0x679A),
    gfx_ptr_high=FileOffset(0x6795),
    gfx_ptr_bank=FileOffset(0x6790),
)


def _peek_u8(rom: RomBuffer, offset: FileOffset) -> Optional[int]:
    if offset.value >= len(rom):
        return None
    return rom.read_u8(offset)


def _peek_u16(rom: RomBuffer, offset: FileOffset) -> Optional[int]:
    if offset.value + 2 > len(rom):
        return None
    return rom.read_u16(offset)


def _detect_retail(rom: RomBuffer) -> Optional[Constants]:
    signature = _peek_u16(rom, TITLE_OFFSET)
    if signature == JP_SIGNATURE:
        return JP_CONSTANTS
    if signature == US_SIGNATURE:
        return US_CONSTANTS
    return None


def _zscream_constants(rom: RomBuffer, base: Constants) -> Constants:
    constants = replace(
        base,
        variant=VARIANT_ZSCREAM,
        tiles16=BankAddress(0x3C8000),
        tiles16_count=4096,
        tiles32_tl=BankAddress(0x3D8000),
        tiles32_tr=BankAddress(0x3E8000),
        tiles32_bl=BankAddress(0x3F8000),
        tiles32_br=BankAddress(0x3B8000),
        tiles32_count=0x5400,
    )
    overrides = {}
    if rom.read_u8(ZSCREAM_BG_COLORS_FLAG):
        overrides["custom_bg_colors"] = BankAddress(0x288000)
    if rom.read_u8(ZSCREAM_MAIN_PALETTES_FLAG):
        overrides["custom_main_palettes"] = BankAddress(0x288160)
    if rom.read_u8(ZSCREAM_GFX_SETS_FLAG):
        overrides["custom_gfx_sets"] = BankAddress(0x288480)
    if overrides:
        logger.info("ZScream overrides enabled: %s", ", ".join(sorted(overrides)))
    return replace(constants, **overrides)


def detect_variant(rom: RomBuffer) -> Constants:
    """Pick the layout of `rom` from its signature bytes."""
    retail = _detect_retail(rom)
    if _peek_u8(rom, ZSCREAM_MARKER) == ZSCREAM_MARKER_OPCODE:
        return _zscream_constants(rom, retail or US_CONSTANTS)
    if retail is None:
        raise UnknownRomError(
            f"unrecognised ROM: no tooling marker at {ZSCREAM_MARKER} and "
            f"no known title signature at {TITLE_OFFSET}")
    return retail
