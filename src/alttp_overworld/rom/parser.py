"""Overworld import pipeline.

Runs every stage in order over one ROM image: layout detection, palettes,
graphics, composite tiles, maps, palette resolution, area building and a
final reference check. Each stage finishes before the next one starts; a
format error in any of them aborts the run with a RomImportError naming
the stage.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from alttp_overworld.rom.areas import AreaBuilder, find_broken_references
from alttp_overworld.rom.buffer import RomBuffer, detect_header
from alttp_overworld.rom.composites import load_tiles16, load_tiles32
from alttp_overworld.rom.data import ImportResult
from alttp_overworld.rom.errors import RomFormatError, RomImportError
from alttp_overworld.rom.graphics import load_graphics
from alttp_overworld.rom.maps import load_regions
from alttp_overworld.rom.palettes import import_all_palettes, resolve_regions
from alttp_overworld.rom.variants import detect_variant

logger = logging.getLogger(__name__)

# Broken references listed in the failure message before it is cut short.
MAX_REPORTED_PROBLEMS = 5


@contextmanager
def _stage(name: str) -> Iterator[None]:
    try:
        yield
    except RomFormatError as e:
        raise RomImportError(name, str(e), e) from e


def import_rom(data: bytes, verbose: bool = False, first_palette_id: int = 0) -> ImportResult:
    """Import the overworld from a ROM image held in memory.

    A leading 512-byte copier header is skipped. Raises RomImportError if
    any stage finds the image malformed; nothing is returned in that case.
    """
    header_size = detect_header(data)
    if header_size and verbose:
        print(f"Detected {header_size}-byte SMC header, skipping.")
    rom = RomBuffer(data[header_size:])

    with _stage("detect"):
        constants = detect_variant(rom)
    if verbose:
        print(f"Detected {constants.variant} ROM layout.")

    with _stage("palettes"):
        palettes, palette_table = import_all_palettes(rom, constants, first_palette_id)
    if verbose:
        print(f"Imported {len(palettes)} palettes.")

    with _stage("graphics"):
        graphics = load_graphics(rom, constants)
    if verbose:
        print(f"Decoded {len(graphics)} graphics tiles.")

    with _stage("tiles16"):
        tiles16 = load_tiles16(rom, constants)
    with _stage("tiles32"):
        tiles32 = load_tiles32(rom, constants)
    if verbose:
        print(f"Loaded {len(tiles16)} 16x16 and {len(tiles32)} 32x32 composite tiles.")

    with _stage("maps"):
        regions = load_regions(rom, constants)
    with _stage("palette resolution"):
        regions = resolve_regions(rom, constants, regions)
    if verbose:
        parents = sum(r.is_parent for r in regions)
        print(f"Loaded {len(regions)} map slots ({parents} areas).")

    with _stage("areas"):
        builder = AreaBuilder(rom, constants, graphics, tiles16, tiles32, palette_table)
        areas = builder.build_all(regions)
        palettes = builder.finalize_palettes(palettes)
    result = ImportResult(variant=constants.variant, palettes=palettes, areas=areas)
    if verbose:
        print(f"Built {len(areas)} areas using {len(palettes)} palettes "
              f"({result.tile_count} unique tiles).")

    problems = find_broken_references(palettes, areas)
    if problems:
        shown = "; ".join(problems[:MAX_REPORTED_PROBLEMS])
        more = len(problems) - MAX_REPORTED_PROBLEMS
        if more > 0:
            shown += f"; and {more} more"
        raise RomImportError("verify", f"{len(problems)} broken tile reference(s): {shown}")

    logger.info("Imported %s ROM: %d areas, %d palettes, %d tiles",
                constants.variant, len(areas), len(palettes), result.tile_count)
    return result


def load_rom(path: Union[str, Path], verbose: bool = False,
             first_palette_id: int = 0) -> ImportResult:
    """Load a ROM file and import its overworld."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise RomImportError("read", f"cannot read {path}: {e.strerror or e}", e) from e
    return import_rom(data, verbose=verbose, first_palette_id=first_palette_id)
