"""Overworld format facts and the editable data model produced by an import."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from alttp_overworld.rom.tiles import COLLISION_NAMES


# ─── Constants ───────────────────────────────────────────────────────────────
#
# Facts about the overworld layout that the ROM does not encode anywhere
# a general rule could recover them from.

# Map slots: 0x00-0x3F Light World, 0x40-0x7F Dark World, 0x80-0x9F special.
MAP_COUNT = 160
LIGHT_WORLD_END = 0x40
DARK_WORLD_END = 0x80
MAP_ROW_STRIDE = 8          # slots per row of the world grid
SLOT_TILES32 = 16           # each slot is 16x16 composite32 tiles (512x512 px)
SCREEN_TILES = 32           # a screen is 32x32 8x8 cells (256x256 px)
SCREENS_PER_SLOT = 2

# Top-left slots of the 2x2-slot areas. Children are +1, +8 and +9.
LARGE_AREA_SLOTS = (
    0x00, 0x03, 0x05, 0x18, 0x1B, 0x1E, 0x30, 0x35,
    0x40, 0x43, 0x45, 0x58, 0x5B, 0x5E, 0x70, 0x75,
    0x81,
)
LARGE_AREA_CHILD_OFFSETS = (1, MAP_ROW_STRIDE, MAP_ROW_STRIDE + 1)

TRIFORCE_ROOM = 0x88

# Slots owned by a parent that is not adjacent to them.
IRREGULAR_PARENTS: dict[int, int] = {
    0x93: TRIFORCE_ROOM,  # triforce room backdrop
}

# Main palette group by slot; anything not listed falls back by world.
MAIN_PALETTE_LIGHT_WORLD = 0
MAIN_PALETTE_DARK_WORLD = 1
MAIN_PALETTE_OVERRIDES: dict[int, int] = {
    0x03: 2, 0x05: 2, 0x07: 2,      # Light World Death Mountain
    0x43: 3, 0x45: 3, 0x47: 3,      # Dark World Death Mountain
    TRIFORCE_ROOM: 4,
}

TRIFORCE_ROOM_PAL_SET = 0x00
TRIFORCE_ROOM_GFX = 0x51
SPECIAL_TABLE_MASK = 0x0F       # special-world lookup tables have 16 entries

# Palette groups: (name, sets, rows per set)
HUD_ROWS = 2
MAIN_PALETTE_ROWS = 5
AUX_PALETTE_ROWS = 3
ANIMATED_PALETTE_ROWS = 1
COLORS_PER_ROW = 7

AUX_PALETTE_LIMIT = 20
ANIMATED_PALETTE_LIMIT = 14

# Graphics
SHEET_COUNT = 113
TILES_PER_SHEET = 64
SHEET_BYTES = 0x600
BYTES_PER_TILE_3BPP = 24
GFX_REMAP_SIZE = 1024
GFX_SLOTS = 8
COLLISION_TABLE_SIZE = 512

# World rows of the world graphics-set table.
WORLD_GFX_LIGHT = 0x20
WORLD_GFX_DARK = 0x21
WORLD_GFX_TRIFORCE = 0x24

# Sheet slots whose 3bpp tiles use the upper half of a palette row (aux).
HIGH_SHEET_SLOTS = frozenset({0, 3, 4, 5})

# Animated water/lava frames are streamed over part of sheet slot 7.
ANIMATED_CHARS = range(0x1C0, 0x1E0)
ANIMATED_SHEET = 0x5B
ANIMATED_SHEET_DEATH_MOUNTAIN = 0x59
DEATH_MOUNTAIN_SLOTS = frozenset(
    list(range(0x03, 0x08)) + list(range(0x0B, 0x0F))
    + list(range(0x43, 0x48)) + list(range(0x4B, 0x4F))
)


# ─── Model ───────────────────────────────────────────────────────────────────

Pixels = tuple[tuple[int, ...], ...]


class Flip(IntEnum):
    """Mirroring applied to an 8x8 tile. Composition is XOR."""
    NONE = 0
    HORIZONTAL = 1
    VERTICAL = 2
    BOTH = 3

    @property
    def horizontal(self) -> bool:
        return bool(self & Flip.HORIZONTAL)

    @property
    def vertical(self) -> bool:
        return bool(self & Flip.VERTICAL)

    def apply(self, pixels: Pixels) -> Pixels:
        if self.horizontal:
            pixels = tuple(tuple(reversed(row)) for row in pixels)
        if self.vertical:
            pixels = tuple(reversed(pixels))
        return pixels


@dataclass(frozen=True)
class Color:
    """SNES colour, 5 bits per channel."""
    red: int
    green: int
    blue: int

    @classmethod
    def from_snes(cls, word: int) -> Color:
        return cls(word & 31, (word >> 5) & 31, (word >> 10) & 31)

    @property
    def rgb888(self) -> tuple[int, int, int]:
        return (self.red * 255 // 31, self.green * 255 // 31, self.blue * 255 // 31)

    def __str__(self) -> str:
        return "#{:02X}{:02X}{:02X}".format(*self.rgb888)


BLACK = Color(0, 0, 0)

LIGHT_WORLD_BG = Color(9, 19, 9)
DARK_WORLD_BG = Color(18, 17, 10)
SPECIAL_WORLD_BG = Color(11, 20, 11)


@dataclass(frozen=True)
class Tile:
    """An 8x8 tile stored in a palette. Compared on pixel content only."""
    pixels: Pixels
    priority: bool = field(default=False, compare=False)
    collision: int = field(default=0, compare=False)
    h_flippable: bool = field(default=False, compare=False)
    v_flippable: bool = field(default=False, compare=False)

    @property
    def collision_name(self) -> str:
        return COLLISION_NAMES.get(self.collision, "ground")


@dataclass
class Palette:
    id: int
    name: str
    colors: list[Color] = field(default_factory=lambda: [BLACK] * 16)
    tiles: list[Tile] = field(default_factory=list, repr=False)


@dataclass
class Screen:
    """A 256x256 pixel section of an area, stored as 32x32 cells."""
    position: tuple[int, int]
    palettes: list[list[int]] = field(repr=False)
    tiles: list[list[int]] = field(repr=False)
    flips: list[list[Flip]] = field(repr=False)

    @classmethod
    def blank(cls, x: int, y: int) -> Screen:
        return cls(
            position=(x, y),
            palettes=[[0] * SCREEN_TILES for _ in range(SCREEN_TILES)],
            tiles=[[0] * SCREEN_TILES for _ in range(SCREEN_TILES)],
            flips=[[Flip.NONE] * SCREEN_TILES for _ in range(SCREEN_TILES)],
        )


@dataclass
class Area:
    """One editable overworld area, built from a top-level map slot."""
    name: str
    bg_color: Color
    size: tuple[int, int]           # in screens
    slot_size: tuple[int, int]      # in map slots
    vanilla_map_id: Optional[int] = None
    screens: list[Screen] = field(default_factory=list, repr=False)

    @classmethod
    def blank(cls, name: str, bg_color: Color, slot_size: tuple[int, int],
              vanilla_map_id: Optional[int] = None) -> Area:
        size = (slot_size[0] * SCREENS_PER_SLOT, slot_size[1] * SCREENS_PER_SLOT)
        screens = [Screen.blank(x, y) for y in range(size[1]) for x in range(size[0])]
        return cls(name=name, bg_color=bg_color, size=size, slot_size=slot_size,
                   vanilla_map_id=vanilla_map_id, screens=screens)

    @property
    def width(self) -> int:
        """Width in 8x8 cells."""
        return self.size[0] * SCREEN_TILES

    @property
    def height(self) -> int:
        return self.size[1] * SCREEN_TILES

    def get_screen_coords(self, x: int, y: int) -> tuple[int, int, int]:
        screen_i = (y // SCREEN_TILES) * self.size[0] + x // SCREEN_TILES
        return screen_i, x % SCREEN_TILES, y % SCREEN_TILES

    def get_palette(self, x: int, y: int) -> int:
        i, sx, sy = self.get_screen_coords(x, y)
        return self.screens[i].palettes[sy][sx]

    def get_tile(self, x: int, y: int) -> int:
        i, sx, sy = self.get_screen_coords(x, y)
        return self.screens[i].tiles[sy][sx]

    def get_flip(self, x: int, y: int) -> Flip:
        i, sx, sy = self.get_screen_coords(x, y)
        return self.screens[i].flips[sy][sx]

    def set_cell(self, x: int, y: int, palette_id: int, tile_idx: int, flip: Flip) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) outside {self.width}x{self.height} area")
        i, sx, sy = self.get_screen_coords(x, y)
        screen = self.screens[i]
        screen.palettes[sy][sx] = palette_id
        screen.tiles[sy][sx] = tile_idx
        screen.flips[sy][sx] = flip

    def iter_cells(self):
        """Yield (x, y, palette_id, tile_idx, flip) for every cell."""
        for screen in self.screens:
            ox = screen.position[0] * SCREEN_TILES
            oy = screen.position[1] * SCREEN_TILES
            for sy in range(SCREEN_TILES):
                for sx in range(SCREEN_TILES):
                    yield (ox + sx, oy + sy, screen.palettes[sy][sx],
                           screen.tiles[sy][sx], screen.flips[sy][sx])

    def unique_palettes(self) -> list[int]:
        seen: set[int] = set()
        for screen in self.screens:
            for row in screen.palettes:
                seen.update(row)
        return sorted(seen)


@dataclass
class ImportResult:
    """Everything one import run hands to the persistence layer."""
    variant: str
    palettes: list[Palette] = field(default_factory=list)
    areas: list[Area] = field(default_factory=list)

    def palette_by_id(self, palette_id: int) -> Optional[Palette]:
        for pal in self.palettes:
            if pal.id == palette_id:
                return pal
        return None

    def get_area(self, map_id: int) -> Optional[Area]:
        for area in self.areas:
            if area.vanilla_map_id == map_id:
                return area
        return None

    @property
    def tile_count(self) -> int:
        return sum(len(p.tiles) for p in self.palettes)
