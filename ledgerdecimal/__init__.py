"""
LedgerDecimal - bounded 256-bit amounts for token ledgers.

Key features:
- Validated constructors from strings, machine integers and floats
- Non-negative amounts with an integer part below 2**42
- Pure arithmetic at a fixed 256-bit working precision
- Newton-Raphson n-th roots with a bounded iteration count
- Lossless 32-byte fixed-point encoding (42 integer / 214 fractional bits)
"""

import logging

from ledgerdecimal.codec import decode, encode
from ledgerdecimal.number import (
    DivisionByZeroError,
    InvalidAmountError,
    LedgerDecimal,
    LedgerDecimalError,
    NonConvergenceError,
)
from ledgerdecimal.roots import root, sqrt

logging.getLogger("ledgerdecimal").addHandler(logging.NullHandler())

__version__ = "1.0.0"
__all__ = [
    "LedgerDecimal",
    "LedgerDecimalError",
    "InvalidAmountError",
    "DivisionByZeroError",
    "NonConvergenceError",
    "encode",
    "decode",
    "root",
    "sqrt",
]
