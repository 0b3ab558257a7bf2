"""Collision codes of overworld 8x8 tiles.

Each graphics character has one collision byte in a 512-entry ROM table.
The importer copies that byte onto every tile it stores; this table only
gives the overworld codes a readable name.
"""

from __future__ import annotations


# Unlisted codes are plain walkable ground.
COLLISION_NAMES: dict[int, str] = {
    0x01: "wall", 0x02: "wall", 0x03: "wall",
    0x08: "deep water",
    0x09: "shallow water",
    0x1C: "ledge",
    0x20: "pit",
    0x22: "stairs",
    0x27: "hookshot target",
    **{code: "ledge" for code in range(0x28, 0x30)},
    0x40: "thick grass",
    0x42: "gravestone",
    0x44: "cactus",
    0x48: "diggable ground", 0x4A: "diggable ground",
    0x4B: "warp tile",
    0x50: "bush", 0x51: "bush",
    0x52: "liftable rock", 0x53: "liftable rock",
    0x54: "liftable boulder", 0x55: "liftable boulder", 0x56: "liftable boulder",
    0x57: "dashable rocks",
}


def collision_summary(codes) -> dict[str, int]:
    """Count collision codes by name, skipping plain ground."""
    counts: dict[str, int] = {}
    for code in codes:
        name = COLLISION_NAMES.get(code)
        if name:
            counts[name] = counts.get(name, 0) + 1
    return counts
