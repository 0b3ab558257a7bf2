"""ALttP overworld ROM import package."""

from alttp_overworld.rom.data import (
    Area,
    Color,
    Flip,
    ImportResult,
    Palette,
    Screen,
    Tile,
)
from alttp_overworld.rom.errors import (
    AddressTranslationError,
    DecompressionError,
    RomFormatError,
    RomImportError,
    RomReadError,
    UnknownRomError,
)
from alttp_overworld.rom.parser import import_rom, load_rom
from alttp_overworld.rom.tiles import COLLISION_NAMES

__all__ = [
    "Area",
    "Color",
    "Flip",
    "ImportResult",
    "Palette",
    "Screen",
    "Tile",
    "AddressTranslationError",
    "DecompressionError",
    "RomFormatError",
    "RomImportError",
    "RomReadError",
    "UnknownRomError",
    "import_rom",
    "load_rom",
    "COLLISION_NAMES",
]
