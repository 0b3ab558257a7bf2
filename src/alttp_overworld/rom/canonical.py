"""Per-palette tile deduplication under horizontal/vertical flips.

Every stored tile is registered under the pixel patterns of all four of
its flips, so any later tile that is a mirror image of it resolves to the
same entry together with the flip needed to draw it. Flips that the ROM
is actually seen using are recorded as legal for the stored tile.
"""

from __future__ import annotations

from dataclasses import replace

from alttp_overworld.rom.data import Flip, Pixels, Tile


class TileCanonicalizer:

    def __init__(self):
        self._index: dict[int, dict[Pixels, tuple[int, Flip]]] = {}
        self._tiles: dict[int, list[Tile]] = {}
        self._h_flippable: dict[int, list[bool]] = {}
        self._v_flippable: dict[int, list[bool]] = {}

    def canonicalize(self, palette_id: int, tile: Tile, flip: Flip = Flip.NONE) -> tuple[int, Flip]:
        """Return (stored index, flip to apply) for `tile` drawn with `flip`."""
        pixels = flip.apply(tile.pixels)
        index = self._index.setdefault(palette_id, {})
        found = index.get(pixels)
        if found is not None:
            idx, needed = found
            self._mark(palette_id, idx, needed)
            return idx, needed

        stored = self._tiles.setdefault(palette_id, [])
        h_bits = self._h_flippable.setdefault(palette_id, [])
        v_bits = self._v_flippable.setdefault(palette_id, [])
        idx = len(stored)
        stored.append(replace(tile, pixels=pixels))
        h_bits.append(False)
        v_bits.append(False)
        for f in Flip:
            image = f.apply(pixels)
            index.setdefault(image, (idx, f))
            if f is not Flip.NONE and image == pixels:
                # A flip that leaves the tile unchanged is always safe.
                self._mark(palette_id, idx, f)
        return idx, Flip.NONE

    def _mark(self, palette_id: int, idx: int, flip: Flip) -> None:
        if flip.horizontal:
            self._h_flippable[palette_id][idx] = True
        if flip.vertical:
            self._v_flippable[palette_id][idx] = True

    def tiles(self, palette_id: int) -> list[Tile]:
        """Stored tiles of a palette with their legal-flip flags filled in."""
        return [
            replace(tile, h_flippable=h, v_flippable=v)
            for tile, h, v in zip(self._tiles.get(palette_id, ()),
                                  self._h_flippable.get(palette_id, ()),
                                  self._v_flippable.get(palette_id, ()))
        ]
