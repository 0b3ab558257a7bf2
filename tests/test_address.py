from __future__ import annotations

import pytest

from alttp_overworld.rom.address import BankAddress, FileOffset, rom_pointer, snes_to_pc
from alttp_overworld.rom.errors import AddressTranslationError, RomFormatError


@pytest.mark.parametrize(
    "snes, expected",
    [
        (0x008000, 0x000000),
        (0x00FFFF, 0x007FFF),
        (0x018000, 0x008000),
        (0x1BE6C8, 0x0DE6C8),
        (0x0ED504, 0x075504),
        (0x3FFFFF, 0x1FFFFF),
    ],
)
def test_snes_to_pc_known_addresses(snes, expected):
    assert snes_to_pc(BankAddress(snes)) == FileOffset(expected)


@pytest.mark.parametrize("snes", [0x007FFF, 0x000000, 0x7E8000, 0x7F0000, 0x808000, 0xC08000])
def test_snes_to_pc_rejects_unmapped_space(snes):
    with pytest.raises(AddressTranslationError):
        snes_to_pc(BankAddress(snes))


def test_translation_is_injective():
    seen = {}
    for bank in range(0x40):
        for low in (0x8000, 0x8001, 0xC000, 0xFFFE, 0xFFFF):
            addr = BankAddress(bank << 16 | low)
            offset = addr.to_file_offset()
            assert offset not in seen, f"{addr} and {seen[offset]} collide"
            seen[offset] = addr


def test_translation_requires_bank_address():
    with pytest.raises(TypeError):
        snes_to_pc(0x008000)
    with pytest.raises(TypeError):
        snes_to_pc(FileOffset(0x8000))


def test_bank_address_range_is_checked():
    with pytest.raises(ValueError):
        BankAddress(0x1000000)
    with pytest.raises(ValueError):
        BankAddress(-1)


def test_file_offset_arithmetic_stays_typed():
    offset = FileOffset(0x100) + 0x20
    assert offset == FileOffset(0x120)
    with pytest.raises(TypeError):
        FileOffset(0x100) + FileOffset(0x20)
    with pytest.raises(TypeError):
        FileOffset(0x100) + BankAddress(0x8000)


def test_address_formatting():
    assert str(BankAddress(0x1BE6C8)) == "$1B:E6C8"
    assert str(FileOffset(0xDE6C8)) == "0x0DE6C8"
    assert BankAddress(0x1BE6C8).bank == 0x1B


def test_rom_pointer_reports_bad_content():
    assert rom_pointer(0x108000, "sheet") == BankAddress(0x108000)
    with pytest.raises(RomFormatError, match="sheet 0x05"):
        rom_pointer(0x7E2000, "sheet 0x05")
