"""
Canonical 32-byte fixed-point encoding of LedgerDecimal amounts.

    encoded = big-endian unsigned  trunc(value * 2**214)

The 256-bit word holds 42 integer bits and 214 fractional bits.  There
is no header, sign bit, or length prefix, and the scaling is truncating
(digits below 2**-214 are dropped, never rounded up).

Decoding rebuilds ``m * 2**-214`` straight from the integer and the
exponent, so any value produced by ``encode`` decodes to itself exactly.
"""

from __future__ import annotations

import logging
from typing import Optional

from mpmath import libmp

from ledgerdecimal.number import LedgerDecimal
from ledgerdecimal.precision import (
    ENCODED_SIZE,
    FRACTION_BITS,
    ROUNDING,
    WORKING_PRECISION,
)

logger = logging.getLogger("ledgerdecimal.codec")


def encode(a: LedgerDecimal) -> Optional[bytes]:
    """Serialize *a* to exactly ``ENCODED_SIZE`` bytes.

    Returns ``None`` for negative values and for values whose integer
    part needs more than 42 bits.
    """
    if not a.is_valid_amount():
        logger.debug(f"Refusing to encode out-of-range amount {a!r}")
        return None

    _sign, man, exp, _bc = a._mpf
    shift = FRACTION_BITS + exp
    if shift >= 0:
        scaled = int(man) << shift
    else:
        scaled = int(man) >> -shift
    return scaled.to_bytes(ENCODED_SIZE, "big")


def decode(data: bytes) -> LedgerDecimal:
    """Rebuild an amount from its ``ENCODED_SIZE``-byte encoding.

    Every 32-byte pattern is a valid non-negative amount below ``2**42``.
    Input of any other length is a framing error and raises ``ValueError``.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"expected bytes, got {type(data).__name__}")
    if len(data) != ENCODED_SIZE:
        raise ValueError(f"encoded amount must be {ENCODED_SIZE} bytes, got {len(data)}")
    m = int.from_bytes(data, "big")
    return LedgerDecimal(libmp.from_man_exp(m, -FRACTION_BITS, WORKING_PRECISION, ROUNDING))
