"""Little-endian integer helpers shared by the instruction encoders — no I/O."""
from __future__ import annotations

import struct

U64_MAX = 2**64 - 1

_U64 = struct.Struct("<Q")
_U16 = struct.Struct("<H")


def check_u64(value: int) -> int:
    """Return ``value`` unchanged if it fits in an unsigned 64-bit integer."""
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"Amount {value} does not fit in an unsigned 64-bit integer")
    return value


def encode_u64(value: int) -> bytes:
    """Encode an unsigned 64-bit integer as 8 little-endian bytes."""
    return _U64.pack(check_u64(value))


def read_u64(data: bytes, offset: int) -> int:
    return _U64.unpack_from(data, offset)[0]


def read_u16(data: bytes, offset: int) -> int:
    return _U16.unpack_from(data, offset)[0]


def with_amount(discriminator: bytes, amount: int) -> bytes:
    """Instruction data of the form ``[discriminator:8][amount:u64 LE]``."""
    return discriminator + encode_u64(amount)
