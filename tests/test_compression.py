from __future__ import annotations

import random

import pytest

from alttp_overworld.rom.address import FileOffset
from alttp_overworld.rom.buffer import RomBuffer
from alttp_overworld.rom.compression import decompress
from alttp_overworld.rom.errors import DecompressionError, RomFormatError


def _decompress(stream: bytes, **kwargs) -> bytes:
    return decompress(RomBuffer(stream), FileOffset(0), **kwargs)


def test_empty_stream():
    assert _decompress(b"\xFF") == b""


def test_raw_block():
    data = bytes(range(1, 9))
    assert _decompress(b"\x07" + data + b"\xFF") == data


def test_byte_run():
    assert _decompress(b"\x23\x41\xFF") == b"AAAA"


def test_word_run_with_odd_length():
    assert _decompress(b"\x44\x01\x02\xFF") == b"\x01\x02\x01\x02\x01"


def test_sequence_wraps_at_256():
    assert _decompress(b"\x62\xFE\xFF") == b"\xFE\xFF\x00"


def test_overlapping_back_reference():
    # "A", then copy 5 bytes starting at offset 0 of the output so far.
    assert _decompress(b"\x00\x41\x84\x00\x00\xFF") == b"AAAAAA"


def test_back_reference_byte_order():
    stream = b"\x02ABC" + b"\x81\x00\x01" + b"\xFF"
    assert _decompress(stream, big_endian=True) == b"ABCBC"
    # Read little-endian the same bytes point at 0x0100, past the output.
    with pytest.raises(DecompressionError):
        _decompress(stream)


def test_extended_header_length():
    assert _decompress(b"\xE4\xFF\x11\xFF") == b"\x11" * 256
    assert _decompress(b"\xE7\xFF\x22\xFF") == b"\x22" * 1024


def test_back_reference_before_any_output():
    with pytest.raises(DecompressionError, match="back-reference"):
        _decompress(b"\x80\x05\x00\xFF")


@pytest.mark.parametrize("control", [0xA0, 0xC3, 0xFC])
def test_invalid_block_type(control):
    with pytest.raises(DecompressionError, match="invalid block type"):
        _decompress(bytes([control, 0x00, 0x00, 0x00, 0xFF]))


def test_stream_running_off_the_end():
    with pytest.raises(DecompressionError) as info:
        _decompress(b"\x03\x01\x02")
    assert isinstance(info.value, RomFormatError)


def test_stream_at_offset():
    rom = RomBuffer(b"\x00\x00\x00\x21\x7A\xFF")
    assert decompress(rom, FileOffset(3)) == b"zz"


# ─── Mixed streams ───────────────────────────────────────────────────────────

def _encode(kind: int, size: int, payload: bytes) -> bytes:
    n = size - 1
    if n < 32:
        return bytes([kind << 5 | n]) + payload
    return bytes([0xE0 | kind << 2 | n >> 8, n & 0xFF]) + payload


def _expand(kind: int, size: int, payload: bytes, out: bytes) -> bytes:
    """What one block appends to `out`, worked out independently of the decoder."""
    if kind == 0:
        return payload
    if kind == 1:
        return payload * size
    if kind == 2:
        return (payload * size)[:size]
    if kind == 3:
        return bytes((payload[0] + i) & 0xFF for i in range(size))
    src = payload[0] | payload[1] << 8
    buf = bytearray(out)
    for i in range(size):
        buf.append(buf[src + i])
    return bytes(buf[len(out):])


def _stream(blocks):
    stream = b""
    out = b""
    for kind, size, payload in blocks:
        stream += _encode(kind, size, payload)
        out += _expand(kind, size, payload, out)
    return stream + b"\xFF", out


def _random_blocks(seed: int, count: int = 12):
    rng = random.Random(seed)
    blocks = []
    length = 0
    for _ in range(count):
        kind = rng.randrange(5) if length else 0
        size = rng.choice([1, 2, 7, 32, 33, 200, 1024])
        if kind == 0:
            payload = bytes(rng.randrange(256) for _ in range(size))
        elif kind in (1, 3):
            payload = bytes([rng.randrange(256)])
        elif kind == 2:
            payload = bytes([rng.randrange(256), rng.randrange(256)])
        else:
            payload = rng.randrange(length).to_bytes(2, "little")
        blocks.append((kind, size, payload))
        length += size
    return blocks


def test_every_block_type_in_one_stream():
    stream = (b"\x01AB" + b"\x22C" + b"\x44\x01\x02" + b"\x62\xFE"
              + b"\x82\x00\x00" + b"\xFF")
    assert _decompress(stream) == (b"AB" + b"CCC" + b"\x01\x02\x01\x02\x01"
                                   + b"\xFE\xFF\x00" + b"ABC")


def test_mixed_stream_with_extended_headers():
    stream, expected = _stream([
        (1, 300, b"\x11"),
        (0, 3, b"xyz"),
        (4, 40, b"\x00\x01"),
        (3, 70, b"\xF0"),
        (2, 33, b"\xAB\xCD"),
        (4, 1024, b"\x2C\x01"),
    ])
    assert len(expected) == 300 + 3 + 40 + 70 + 33 + 1024
    assert _decompress(stream) == expected


@pytest.mark.parametrize("seed", range(6))
def test_generated_block_sequences(seed):
    stream, expected = _stream(_random_blocks(seed))
    assert _decompress(stream) == expected
