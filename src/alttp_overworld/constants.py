"""Human-readable names for overworld map slots."""

from __future__ import annotations

# Kept free of package imports: the area builder imports this module.


# ─── Overworld Area Names ────────────────────────────────────────────────────

OVERWORLD_NAMES = {
    # Light World
    0x00: "Lost Woods",
    0x02: "Lumberjack Tree area",
    0x03: "West Death Mountain",
    0x05: "East Death Mountain",
    0x07: "Death Mountain Summit",
    0x0A: "Death Mountain Foothills",
    0x0F: "Zora's Waterfall",
    0x10: "Lost Woods Path",
    0x11: "Kakariko Fortune Teller",
    0x12: "Pond of Happiness area",
    0x13: "Sanctuary",
    0x14: "Graveyard",
    0x15: "River Bend",
    0x16: "Witch's Hut area",
    0x17: "Zora's River",
    0x18: "Kakariko Village",
    0x1A: "Forest Clearing",
    0x1B: "Hyrule Castle",
    0x1D: "Wooden Bridge",
    0x1E: "Eastern Palace",
    0x22: "Smithy",
    0x25: "Hyrule Field (north)",
    0x28: "Kakariko (south)",
    0x29: "Library",
    0x2A: "Haunted Grove",
    0x2B: "West of Link's House",
    0x2C: "Link's House",
    0x2D: "East of Link's House",
    0x2E: "Eastern Hyrule",
    0x2F: "Eastern Hyrule (south)",
    0x30: "Desert of Mystery",
    0x32: "Flute Boy's Meadow",
    0x33: "Great Swamp (north)",
    0x34: "Great Swamp (east)",
    0x35: "Lake Hylia",
    0x37: "Ice Rod Cave area",
    0x3A: "Great Swamp (west)",
    0x3B: "Dam",
    0x3C: "South of Great Swamp",
    0x3F: "Octorok Pit",

    # Dark World
    0x40: "Skull Woods",
    0x42: "Dark Lumberjack area",
    0x43: "West Dark Death Mountain",
    0x45: "East Dark Death Mountain",
    0x47: "Turtle Rock",
    0x4A: "Bumper Cave area",
    0x4F: "Catfish",
    0x50: "Dark Lost Woods Path",
    0x51: "Dark Fortune Teller",
    0x53: "Dark Chapel",
    0x54: "Dark Graveyard",
    0x55: "Dark River Bend",
    0x56: "Dark Witch's Hut",
    0x57: "Dark Zora's River",
    0x58: "Village of Outcasts",
    0x5A: "Dark Forest Clearing",
    0x5B: "Pyramid of Power",
    0x5E: "Palace of Darkness",
    0x62: "Hammer Peg Cave",
    0x68: "Dig Game",
    0x69: "Archery Game",
    0x6A: "Stumpy's Grove",
    0x6C: "Bomb Shop",
    0x6E: "Hammer Bridge",
    0x70: "Misery Mire",
    0x72: "Dark Flute Boy's Meadow",
    0x73: "Swamp of Evil (north)",
    0x75: "Ice Palace area",
    0x7B: "Swamp Palace area",

    # Special areas
    0x80: "Master Sword Pedestal",
    0x81: "Zora's Domain",
    0x88: "Triforce Room",
}


def area_name(map_id: int) -> str:
    """Name of the area whose top-level slot is `map_id`."""
    name = OVERWORLD_NAMES.get(map_id)
    if name is not None:
        return name
    if map_id < 0x40:
        return f"Light World {map_id:02X}"
    if map_id < 0x80:
        return f"Dark World {map_id:02X}"
    return f"Special {map_id:02X}"
