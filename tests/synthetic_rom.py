"""Builder for small synthetic ROM images in the retail US layout.

Every map slot `s` is filled with composite32 tile `s + 1`; that tile's
four quadrants are composite16 tile `s + 1`, whose four characters are
character `s + 1` drawn with no flip, H, V and both flips. Sheet codes
are 0-7 in order, so character `c` shows graphics tile `c` and every
cell of slot `s` shows `graphics_tile(s + 1)` under the quadrant's flip.
"""

from __future__ import annotations

from typing import Optional

from alttp_overworld.rom.address import BankAddress
from alttp_overworld.rom.variants import US_CONSTANTS, Constants

ROM_SIZE = 0x100000
SHEET_DATA = 0x80000
STREAM_DATA = 0xB0000
SHEET_TABLES = (0x7E00, 0x7E80, 0x7F00)     # low, high, bank bytes

SHEET_COUNT = 113
COLLISION = {1: 0x09, 2: 0x02, 3: 0x1C}
PAL_SET_GROUP_0 = (1, 2, 3)


def pc(addr: BankAddress) -> int:
    return addr.to_file_offset().value


def pc_to_snes(offset: int) -> int:
    return ((offset << 1) & 0x7F0000) | 0x8000 | (offset & 0x7FFF)


def compress_raw(data: bytes) -> bytes:
    """Encode `data` as extended raw blocks."""
    out = bytearray()
    for i in range(0, len(data), 1024):
        chunk = data[i:i + 1024]
        n = len(chunk) - 1
        out += bytes([0xE0 | n >> 8, n & 0xFF]) + chunk
    out.append(0xFF)
    return bytes(out)


def compress_fill(value: int, size: int) -> bytes:
    """Encode `size` (at most 1024) copies of one byte as an extended run."""
    n = size - 1
    return bytes([0xE4 | n >> 8, n & 0xFF, value, 0xFF])


def tile_bytes(index: int) -> bytes:
    """24 bytes of 3bpp data that differ for every flat tile index."""
    out = bytearray(24)
    for y in range(8):
        out[y * 2] = (index + y * 37) & 0xFF
        out[y * 2 + 1] = ((index >> 8) ^ (y * 11)) & 0xFF
        out[16 + y] = (index * 3 + y) & 0xFF
    return bytes(out)


def sheet_bytes(sheet: int) -> bytes:
    return b"".join(tile_bytes(sheet * 64 + t) for t in range(64))


def tile16_word(char: int, palette: int = 2, priority: bool = False, flip: int = 0) -> int:
    return char | palette << 10 | (0x2000 if priority else 0) | flip << 14


class SyntheticRom:

    def __init__(self, constants: Constants = US_CONSTANTS, size: int = ROM_SIZE):
        self.constants = constants
        self.data = bytearray(size)
        self._stream_cursor = STREAM_DATA
        self._zero_plane: Optional[int] = None

    # ─── Raw writes ──────────────────────────────────────────────────────────

    def write(self, offset: int, data: bytes):
        self.data[offset:offset + len(data)] = data

    def write_u16(self, offset: int, value: int):
        self.write(offset, bytes([value & 0xFF, value >> 8 & 0xFF]))

    def write_u24(self, offset: int, value: int):
        self.write(offset, bytes([value & 0xFF, value >> 8 & 0xFF, value >> 16 & 0xFF]))

    def add_stream(self, stream: bytes) -> int:
        """Store a compressed stream in free space; return its bank address."""
        offset = self._stream_cursor
        self.write(offset, stream)
        self._stream_cursor += len(stream)
        return pc_to_snes(offset)

    # ─── Tables ──────────────────────────────────────────────────────────────

    def set_title(self, title: bytes = b"THE LEGEND OF ZELDA"):
        self.write(0x7FC0, title)

    def set_sheets(self):
        c = self.constants
        for table, operand in zip(SHEET_TABLES, (c.gfx_ptr_low, c.gfx_ptr_high, c.gfx_ptr_bank)):
            self.write_u16(operand.value, pc_to_snes(table))
        cursor = SHEET_DATA
        for sheet in range(SHEET_COUNT):
            self.set_sheet_pointer(sheet, pc_to_snes(cursor))
            stream = compress_raw(sheet_bytes(sheet))
            self.write(cursor, stream)
            cursor += len(stream)

    def set_sheet_pointer(self, sheet: int, snes: int):
        low, high, bank = SHEET_TABLES
        self.data[low + sheet] = snes & 0xFF
        self.data[high + sheet] = snes >> 8 & 0xFF
        self.data[bank + sheet] = snes >> 16

    def set_palettes(self):
        c = self.constants
        groups = (
            (c.hud_palettes, 2 * 32),
            (c.main_palettes, c.main_palette_count * 5 * 14),
            (c.aux_palettes, c.aux_palette_count * 3 * 14),
            (c.animated_palettes, c.animated_palette_count * 14),
        )
        for n, (addr, size) in enumerate(groups):
            base = pc(addr)
            for i in range(0, size, 2):
                self.write_u16(base + i, (n << 12 | i) & 0x7FFF)

    def set_gfx_sets(self):
        base = pc(self.constants.world_gfx_sets)
        for world in (0x20, 0x21, 0x24):
            self.write(base + world * 8, bytes(range(8)))

    def set_area_gfx(self, gfx_id: int, codes: bytes):
        self.write(pc(self.constants.area_gfx_sets) + gfx_id * 4, codes)

    def set_pal_set(self, slot: int, pal_set: int):
        if slot < 0x80:
            self.data[pc(self.constants.area_pal_sets) + slot] = pal_set
        else:
            self.data[pc(self.constants.special_pal_sets) + ((slot - 0x80) & 0x0F)] = pal_set

    def set_pal_set_group(self, pal_set: int, aux1: int, aux2: int, animated: int):
        self.write(pc(self.constants.pal_set_groups) + pal_set * 4, bytes([aux1, aux2, animated, 0]))

    def set_collision(self):
        base = pc(self.constants.collision)
        for char, code in COLLISION.items():
            self.data[base + char] = code

    def set_tile16(self, index: int, words: tuple[int, int, int, int]):
        base = pc(self.constants.tiles16) + index * 8
        for q, word in enumerate(words):
            self.write_u16(base + q * 2, word)

    def set_tile32(self, index: int, quadrants: tuple[int, int, int, int]):
        group, k = divmod(index, 4)
        c = self.constants
        for addr, value in zip((c.tiles32_tl, c.tiles32_tr, c.tiles32_bl, c.tiles32_br),
                               quadrants):
            pos = pc(addr) + group * 6
            self.data[pos + k] = value & 0xFF
            nibble_at = pos + (4 if k <= 1 else 5)
            if k % 2 == 0:
                self.data[nibble_at] = (self.data[nibble_at] & 0x0F) | (value >> 8 & 0x0F) << 4
            else:
                self.data[nibble_at] = (self.data[nibble_at] & 0xF0) | (value >> 8 & 0x0F)

    def set_map(self, slot: int, low: bytes, high: Optional[bytes] = None):
        """Point a slot at raw-compressed planes of 256 index bytes each."""
        c = self.constants
        if high is None:
            if self._zero_plane is None:
                self._zero_plane = self.add_stream(compress_fill(0, 256))
            high_addr = self._zero_plane
        else:
            high_addr = self.add_stream(compress_raw(high))
        self.write_u24(pc(c.map_high_ptrs) + slot * 3, high_addr)
        self.write_u24(pc(c.map_low_ptrs) + slot * 3, self.add_stream(compress_raw(low)))

    def set_uniform_map(self, slot: int, tile32: int):
        c = self.constants
        if self._zero_plane is None:
            self._zero_plane = self.add_stream(compress_fill(0, 256))
        self.write_u24(pc(c.map_high_ptrs) + slot * 3, self._zero_plane)
        self.write_u24(pc(c.map_low_ptrs) + slot * 3,
                       self.add_stream(compress_fill(tile32, 256)))

    # ─── Whole image ─────────────────────────────────────────────────────────

    @classmethod
    def standard(cls) -> SyntheticRom:
        rom = cls()
        rom.set_title()
        rom.set_sheets()
        rom.set_palettes()
        rom.set_gfx_sets()
        rom.set_pal_set_group(0, *PAL_SET_GROUP_0)
        rom.set_collision()
        for index in range(1, 0x100):
            rom.set_tile16(index, tuple(tile16_word(index, flip=f) for f in range(4)))
            rom.set_tile32(index, (index,) * 4)
        for slot in range(rom.constants.map_count):
            rom.set_uniform_map(slot, slot + 1)
        return rom

    def build(self) -> bytes:
        return bytes(self.data)
