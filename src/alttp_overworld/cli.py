"""CLI entry point for the ALttP overworld importer."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from alttp_overworld.rom.data import Area, ImportResult
from alttp_overworld.rom.errors import RomImportError
from alttp_overworld.rom.parser import load_rom
from alttp_overworld.rom.tiles import collision_summary


def _map_id(text: str) -> int:
    try:
        value = int(text, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex map id: {text!r}") from None
    if not 0 <= value <= 0xFF:
        raise argparse.ArgumentTypeError(f"map id out of range: {text!r}")
    return value


def _print_summary(result: ImportResult):
    print(f"Variant:  {result.variant}")
    print(f"Palettes: {len(result.palettes)}")
    print(f"Tiles:    {result.tile_count}")
    print(f"Areas:    {len(result.areas)}")
    print()
    print(f"{'Map':<5}{'Size':<7}{'Palettes':>9}  Name")
    for area in result.areas:
        w, h = area.size
        print(f"{area.vanilla_map_id:02X}   {w}x{h:<5}{len(area.unique_palettes()):>9}  {area.name}")


def _print_area(result: ImportResult, area: Area):
    w, h = area.size
    print(f"{area.name} (map {area.vanilla_map_id:02X})")
    print(f"  Size:       {w}x{h} screens ({area.width}x{area.height} tiles)")
    print(f"  Background: {area.bg_color}")

    codes = []
    for _, _, palette_id, tile_idx, _ in area.iter_cells():
        codes.append(result.palette_by_id(palette_id).tiles[tile_idx].collision)
    summary = collision_summary(codes)
    if not summary:
        print("  No special collision tiles.")
        return
    print("  Collision:")
    for name, count in sorted(summary.items(), key=lambda kv: (-kv[1], kv[0])):
        print(f"    {name:<20}{count:>6}")


def main(argv: Optional[list[str]] = None):
    parser = argparse.ArgumentParser(
        description="Import and summarise the overworld of an ALttP ROM",
    )
    parser.add_argument("rom", help="Path to the ROM file (.sfc/.smc)")
    parser.add_argument("--verbose", action="store_true",
                        help="Print progress for every import stage")
    parser.add_argument("--area", type=_map_id, default=None, metavar="ID",
                        help="Show one area, by the hex id of its top-level map slot")
    parser.add_argument("--first-palette-id", type=int, default=0, metavar="N",
                        help="Id given to the first imported palette (default: 0)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        result = load_rom(args.rom, verbose=args.verbose,
                          first_palette_id=args.first_palette_id)
    except RomImportError as e:
        print(f"Import failed: {e}", file=sys.stderr)
        sys.exit(1)

    if args.area is None:
        _print_summary(result)
        return

    area = result.get_area(args.area)
    if area is None:
        print(f"No area starts at map {args.area:02X}.", file=sys.stderr)
        sys.exit(1)
    _print_area(result, area)


if __name__ == "__main__":
    main()
