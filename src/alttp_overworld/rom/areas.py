"""Area assembly: turn map slots into editable areas of palette-local tiles."""

from __future__ import annotations

import logging
from dataclasses import replace

from alttp_overworld.constants import area_name
from alttp_overworld.rom.buffer import RomBuffer
from alttp_overworld.rom.canonical import TileCanonicalizer
from alttp_overworld.rom.composites import Composite16, Composite32, Tile8Ref
from alttp_overworld.rom.data import (
    ANIMATED_CHARS,
    ANIMATED_SHEET,
    ANIMATED_SHEET_DEATH_MOUNTAIN,
    BLACK,
    COLLISION_TABLE_SIZE,
    DARK_WORLD_BG,
    DARK_WORLD_END,
    DEATH_MOUNTAIN_SLOTS,
    GFX_REMAP_SIZE,
    GFX_SLOTS,
    HIGH_SHEET_SLOTS,
    HUD_ROWS,
    LIGHT_WORLD_BG,
    LIGHT_WORLD_END,
    SHEET_COUNT,
    SLOT_TILES32,
    SPECIAL_TABLE_MASK,
    SPECIAL_WORLD_BG,
    TILES_PER_SHEET,
    TRIFORCE_ROOM,
    TRIFORCE_ROOM_GFX,
    WORLD_GFX_DARK,
    WORLD_GFX_LIGHT,
    WORLD_GFX_TRIFORCE,
    Area,
    Color,
    Flip,
    Palette,
    Pixels,
    Tile,
)
from alttp_overworld.rom.errors import RomFormatError
from alttp_overworld.rom.maps import MapPalettes, Region
from alttp_overworld.rom.palettes import PaletteTable
from alttp_overworld.rom.variants import Constants

logger = logging.getLogger(__name__)


# ─── Per-area lookups ────────────────────────────────────────────────────────

def background_color(rom: RomBuffer, constants: Constants, parent: int) -> Color:
    if constants.custom_bg_colors is not None:
        return Color.from_snes(rom.read_u16(constants.custom_bg_colors.to_file_offset() + parent * 2))
    if parent < LIGHT_WORLD_END:
        return LIGHT_WORLD_BG
    if parent < DARK_WORLD_END:
        return DARK_WORLD_BG
    return SPECIAL_WORLD_BG


def sheet_codes(rom: RomBuffer, constants: Constants, parent: int) -> list[int]:
    """The eight graphics sheets loaded for an area, one per 64-char slot."""
    if constants.custom_gfx_sets is not None:
        return list(rom.read_n(constants.custom_gfx_sets.to_file_offset() + parent * GFX_SLOTS,
                               GFX_SLOTS))

    if parent == TRIFORCE_ROOM:
        world, gfx_id = WORLD_GFX_TRIFORCE, TRIFORCE_ROOM_GFX
    elif parent < DARK_WORLD_END:
        world = WORLD_GFX_LIGHT if parent < LIGHT_WORLD_END else WORLD_GFX_DARK
        gfx_id = rom.read_u8(constants.area_gfx.to_file_offset() + parent)
    else:
        world = WORLD_GFX_LIGHT
        special = (parent - DARK_WORLD_END) & SPECIAL_TABLE_MASK
        gfx_id = rom.read_u8(constants.special_gfx.to_file_offset() + special)

    codes = list(rom.read_n(constants.world_gfx_sets.to_file_offset() + world * GFX_SLOTS,
                            GFX_SLOTS))
    area_codes = rom.read_n(constants.area_gfx_sets.to_file_offset() + gfx_id * 4, 4)
    for i, code in enumerate(area_codes):
        if code:
            codes[3 + i] = code
    return codes


def build_gfx_remap(codes: list[int], animated_sheet: int) -> list[int]:
    """Map each of the 1024 character numbers to a flat graphics tile index."""
    for code in (*codes, animated_sheet):
        if code >= SHEET_COUNT:
            raise RomFormatError(f"graphics sheet 0x{code:02X} does not exist")
    remap = [codes[(c >> 6) & 7] * TILES_PER_SHEET + (c & 63) for c in range(GFX_REMAP_SIZE)]
    # Characters 512-1023 wrap onto the first 512, animated frames included.
    for i, c in enumerate(ANIMATED_CHARS):
        for char in range(c, GFX_REMAP_SIZE, GFX_SLOTS * TILES_PER_SHEET):
            remap[char] = animated_sheet * TILES_PER_SHEET + i
    return remap


def animated_sheet_for(parent: int) -> int:
    if parent in DEATH_MOUNTAIN_SLOTS:
        return ANIMATED_SHEET_DEATH_MOUNTAIN
    return ANIMATED_SHEET


def cell_palette(table: PaletteTable, pals: MapPalettes, ref: Tile8Ref) -> int:
    """Resolve a tile's 3-bit palette selector to a palette id."""
    sel = ref.palette
    if sel < HUD_ROWS:
        return table.hud(sel)
    if (ref.char >> 6) & 7 in HIGH_SHEET_SLOTS:
        if sel < 5:
            return table.aux(pals.aux1, sel - 2)
        return table.aux(pals.aux2, sel - 5)
    if sel < 7:
        return table.main(pals.main, sel - 2)
    return table.animated(pals.animated)


# ─── Builder ─────────────────────────────────────────────────────────────────

class AreaBuilder:
    """Builds every area of one import run and collects its stored tiles."""

    def __init__(self, rom: RomBuffer, constants: Constants, graphics: tuple[Pixels, ...],
                 tiles16: tuple[Composite16, ...], tiles32: tuple[Composite32, ...],
                 palette_table: PaletteTable):
        self.rom = rom
        self.constants = constants
        self.graphics = graphics
        self.tiles16 = tiles16
        self.tiles32 = tiles32
        self.palette_table = palette_table
        self.collision = rom.read_n(constants.collision.to_file_offset(), COLLISION_TABLE_SIZE)
        self.canonicalizer = TileCanonicalizer()
        self.palette_bg: dict[int, Color] = {}
        self.bg_conflicts: set[int] = set()
        self._cache: dict[tuple[int, int, Flip], tuple[int, Flip]] = {}

    def _canonical(self, palette_id: int, gfx_idx: int, ref: Tile8Ref) -> tuple[int, Flip]:
        key = (palette_id, gfx_idx, ref.flip)
        hit = self._cache.get(key)
        if hit is None:
            tile = Tile(
                pixels=self.graphics[gfx_idx],
                priority=ref.priority,
                collision=self.collision[ref.char & (COLLISION_TABLE_SIZE - 1)],
            )
            hit = self.canonicalizer.canonicalize(palette_id, tile, ref.flip)
            self._cache[key] = hit
        return hit

    def _record_background(self, palette_ids: set[int], color: Color) -> None:
        for pid in palette_ids:
            seen = self.palette_bg.setdefault(pid, color)
            if seen != color:
                self.bg_conflicts.add(pid)

    def build(self, region: Region, regions: tuple[Region, ...]) -> Area:
        if not region.is_parent or region.palettes is None:
            raise ValueError(f"map 0x{region.index:02X} is not a resolved top-level region")
        parent = region.index
        area = Area.blank(
            name=area_name(parent),
            bg_color=background_color(self.rom, self.constants, parent),
            slot_size=region.slot_size,
            vanilla_map_id=parent,
        )
        remap = build_gfx_remap(sheet_codes(self.rom, self.constants, parent),
                                animated_sheet_for(parent))
        used: set[int] = set()

        for dx, dy, slot in region.block_slots():
            grid = regions[slot].tiles32
            for ty in range(SLOT_TILES32):
                for tx in range(SLOT_TILES32):
                    t32 = self.tiles32[grid[ty][tx]]
                    for q32, t16_idx in enumerate(t32.quadrants):
                        x16 = ((dx * SLOT_TILES32 + tx) * 2 + (q32 & 1)) * 2
                        y16 = ((dy * SLOT_TILES32 + ty) * 2 + (q32 >> 1)) * 2
                        for q16, ref in enumerate(self.tiles16[t16_idx].quadrants):
                            palette_id = cell_palette(self.palette_table, region.palettes, ref)
                            tile_idx, flip = self._canonical(palette_id, remap[ref.char], ref)
                            area.set_cell(x16 + (q16 & 1), y16 + (q16 >> 1),
                                          palette_id, tile_idx, flip)
                            used.add(palette_id)

        self._record_background(used, area.bg_color)
        logger.debug("Built area %s (0x%02X): %d palettes", area.name, parent, len(used))
        return area

    def build_all(self, regions: tuple[Region, ...]) -> list[Area]:
        return [self.build(region, regions) for region in regions if region.is_parent]

    def finalize_palettes(self, palettes: list[Palette]) -> list[Palette]:
        """Attach stored tiles and backgrounds; drop palettes nothing uses."""
        out = []
        for pal in palettes:
            tiles = self.canonicalizer.tiles(pal.id)
            if not tiles:
                continue
            colors = list(pal.colors)
            if pal.id in self.bg_conflicts:
                colors[0] = BLACK
            else:
                colors[0] = self.palette_bg.get(pal.id, BLACK)
            out.append(replace(pal, colors=colors, tiles=tiles))
        logger.debug("Kept %d of %d palettes", len(out), len(palettes))
        return out


def find_broken_references(palettes: list[Palette], areas: list[Area]) -> list[str]:
    """Describe every area cell whose palette/tile pair does not resolve."""
    tile_counts = {pal.id: len(pal.tiles) for pal in palettes}
    problems = []
    for area in areas:
        for x, y, palette_id, tile_idx, _ in area.iter_cells():
            count = tile_counts.get(palette_id)
            if count is None:
                problems.append(f"{area.name} ({x}, {y}): palette {palette_id} missing")
            elif tile_idx >= count:
                problems.append(
                    f"{area.name} ({x}, {y}): tile {tile_idx} not in palette {palette_id}")
    return problems
