"""Exception types raised while importing overworld data from a ROM."""

from __future__ import annotations

from typing import Optional


class RomFormatError(ValueError):
    """The ROM content does not match the layout the importer expects."""


class RomReadError(RomFormatError):
    """A read ran past the end of the ROM image."""


class DecompressionError(RomFormatError):
    """A compressed stream is malformed."""


class UnknownRomError(RomFormatError):
    """None of the known layout signatures matched."""


class AddressTranslationError(RuntimeError):
    """A bank address outside ROM-mapped space was translated.

    This points at a bad entry in a Constants table rather than at bad ROM
    content, so it is never folded into RomImportError.
    """


class RomImportError(Exception):
    """Aggregate failure of one import run."""

    def __init__(self, stage: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.cause = cause
