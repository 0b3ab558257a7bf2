"""Pytest configuration: make the src/ package importable and share ROM fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

_SRC = Path(__file__).resolve().parents[1] / "src"
_src_str = str(_SRC)
if _src_str not in sys.path:
    sys.path.insert(0, _src_str)

from alttp_overworld.rom.buffer import RomBuffer  # noqa: E402
from alttp_overworld.rom.parser import import_rom  # noqa: E402
from synthetic_rom import SyntheticRom  # noqa: E402


@pytest.fixture(scope="session")
def standard_rom_bytes() -> bytes:
    return SyntheticRom.standard().build()


@pytest.fixture
def synthetic_rom() -> SyntheticRom:
    """A fresh standard image that a test may modify before building."""
    return SyntheticRom.standard()


@pytest.fixture
def rom_buffer(standard_rom_bytes) -> RomBuffer:
    return RomBuffer(standard_rom_bytes)


@pytest.fixture(scope="session")
def imported(standard_rom_bytes):
    return import_rom(standard_rom_bytes)
