"""Decoder for the LZ-style compression used by graphics sheets and map data.

Each block starts with a control byte. The top three bits are the block
type and the low five bits are the length minus one; type 7 means the
block has an extended header, where bits 2-4 hold the real type and the
low two bits plus the next byte form a 10-bit length minus one. A control
byte of 0xFF ends the stream.

  0  raw       copy `length` bytes from the stream
  1  byte run  repeat the next byte
  2  word run  repeat the next two bytes
  3  sequence  emit the next byte, incrementing by one each time
  4  copy      repeat `length` bytes of earlier output at a 16-bit offset
"""

from __future__ import annotations

import logging

from alttp_overworld.rom.address import FileOffset
from alttp_overworld.rom.buffer import RomBuffer
from alttp_overworld.rom.errors import DecompressionError, RomReadError

logger = logging.getLogger(__name__)

END_OF_STREAM = 0xFF
EXTENDED_HEADER = 7

BLOCK_RAW = 0
BLOCK_BYTE_RUN = 1
BLOCK_WORD_RUN = 2
BLOCK_SEQUENCE = 3
BLOCK_COPY = 4


def decompress(rom: RomBuffer, offset: FileOffset, big_endian: bool = False) -> bytes:
    """Decompress the stream starting at `offset`.

    `big_endian` selects the byte order of back-reference offsets; the
    overworld map planes store them high byte first.
    """
    try:
        return _decompress(rom, offset, big_endian)
    except RomReadError as e:
        raise DecompressionError(f"stream at {offset} runs past the end of the ROM") from e


def _decompress(rom: RomBuffer, start: FileOffset, big_endian: bool) -> bytes:
    out = bytearray()
    pos = start
    while True:
        byte = rom.read_u8(pos)
        pos += 1
        if byte == END_OF_STREAM:
            logger.debug("Decompressed %d bytes from %s", len(out), start)
            return bytes(out)

        block_type = byte >> 5
        if block_type != EXTENDED_HEADER:
            size = (byte & 0x1F) + 1
        else:
            size = ((byte & 3) << 8 | rom.read_u8(pos)) + 1
            pos += 1
            block_type = (byte >> 2) & 7

        if block_type == BLOCK_RAW:
            out += rom.read_n(pos, size)
            pos += size
        elif block_type == BLOCK_BYTE_RUN:
            out += bytes([rom.read_u8(pos)]) * size
            pos += 1
        elif block_type == BLOCK_WORD_RUN:
            pair = rom.read_n(pos, 2)
            pos += 2
            out += pair * (size >> 1)
            if size & 1:
                out.append(pair[0])
        elif block_type == BLOCK_SEQUENCE:
            value = rom.read_u8(pos)
            pos += 1
            out += bytes((value + i) & 0xFF for i in range(size))
        elif block_type == BLOCK_COPY:
            b0 = rom.read_u8(pos)
            b1 = rom.read_u8(pos + 1)
            pos += 2
            src = (b0 << 8 | b1) if big_endian else (b0 | b1 << 8)
            if src >= len(out):
                raise DecompressionError(
                    f"back-reference to 0x{src:04X} with only {len(out)} bytes "
                    f"decoded (stream at {start})")
            # Byte by byte: the source may overlap what is being written.
            for i in range(src, src + size):
                out.append(out[i])
        else:
            raise DecompressionError(
                f"invalid block type {block_type} at {pos} (stream at {start})")
