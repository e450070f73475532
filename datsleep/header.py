"""
SLEEP header codec.

Every SLEEP file starts with a fixed 32-byte header describing what the rest
of the file holds:

    Bytes 0-2:   Magic bytes 0x05 0x02 0x57
    Byte 3:      Record kind (0 = bitfield, 1 = signatures, 2 = tree)
    Byte 4:      Format version (0 is the only version)
    Bytes 5-6:   Record size (2 bytes, big-endian)
    Byte 7:      Algorithm name length L
    Bytes 8-8+L: Algorithm name (UTF-8)
    Remainder:   Zero padding up to 32 bytes

The tail of the file is a sequence of records of ``record_size`` bytes.
Decoding is read-only: this module does not write headers.
"""

import enum
import struct
from dataclasses import dataclass
from typing import Union

from .errors import (
    HeaderParseError,
    IncorrectFileTypeError,
    IncorrectFormatError,
    InvalidVersionError,
)

__all__ = [
    "MAGIC",
    "HEADER_SIZE",
    "ALGORITHM_NAME_MAX",
    "RecordKind",
    "FormatVersion",
    "Header",
    "parse_header",
]

# ==============================================================================
# FORMAT CONSTANTS
# ==============================================================================

MAGIC = bytes([0x05, 0x02, 0x57])

HEADER_SIZE = 32

# magic(3) + kind(1) + version(1) + record_size(2)
_FIXED_FMT = ">3sBBH"
_FIXED_SIZE = struct.calcsize(_FIXED_FMT)

# The length byte sits right after the fixed fields; the name must fit in
# what is left of the header.
ALGORITHM_NAME_MAX = HEADER_SIZE - _FIXED_SIZE - 1


class RecordKind(enum.IntEnum):
    """Which typed view a file resolves to."""

    BITFIELD = 0
    SIGNATURES = 1
    TREE = 2


class FormatVersion(enum.IntEnum):
    """Header format version."""

    V0 = 0


@dataclass(frozen=True)
class Header:
    """
    Decoded SLEEP header.

    Attributes:
        record_kind (RecordKind): Declared kind of the records in the tail
        version (FormatVersion): Header format version
        record_size (int): Byte length of every record in the tail
        algorithm_name (str): Signature scheme name, e.g. "Ed25519"
    """

    record_kind: RecordKind
    version: FormatVersion
    record_size: int
    algorithm_name: str


# ==============================================================================
# DECODING
# ==============================================================================

def parse_header(data: Union[bytes, bytearray, memoryview], strict_padding: bool = False) -> Header:
    """
    Decode the first 32 bytes of a SLEEP file.

    Args:
        data: At least HEADER_SIZE bytes; anything past the header is ignored
        strict_padding (bool): Reject headers whose padding is not all zero.
            The default tolerates non-zero padding.

    Returns:
        Header: The decoded header

    Raises:
        HeaderParseError: If fewer than HEADER_SIZE bytes are given, the name
            length overruns the header, the name is not UTF-8, or (strict
            mode only) the padding holds non-zero bytes
        IncorrectFormatError: If the magic bytes do not match
        IncorrectFileTypeError: If the record kind byte is unknown
        InvalidVersionError: If the version byte is not 0
    """
    buf = bytes(data[:HEADER_SIZE])
    if len(buf) < HEADER_SIZE:
        raise HeaderParseError(f"header needs {HEADER_SIZE} bytes, got {len(buf)}")

    magic, kind_byte, version_byte, record_size = struct.unpack_from(_FIXED_FMT, buf, 0)

    if magic != MAGIC:
        raise IncorrectFormatError(f"bad magic bytes {magic.hex()} (expected {MAGIC.hex()})")

    try:
        record_kind = RecordKind(kind_byte)
    except ValueError:
        raise IncorrectFileTypeError(f"unknown record kind {kind_byte}") from None

    try:
        version = FormatVersion(version_byte)
    except ValueError:
        raise InvalidVersionError(f"unsupported header version {version_byte}") from None

    name_len = buf[_FIXED_SIZE]
    name_start = _FIXED_SIZE + 1
    name_end = name_start + name_len
    if name_len > ALGORITHM_NAME_MAX:
        raise HeaderParseError(
            f"algorithm name length {name_len} exceeds the {ALGORITHM_NAME_MAX} bytes left in the header"
        )

    try:
        algorithm_name = buf[name_start:name_end].decode("utf-8")
    except UnicodeDecodeError as e:
        raise HeaderParseError(f"algorithm name is not valid UTF-8: {e}") from e

    if strict_padding and any(buf[name_end:]):
        raise HeaderParseError("non-zero bytes in header padding")

    return Header(
        record_kind=record_kind,
        version=version,
        record_size=record_size,
        algorithm_name=algorithm_name,
    )
