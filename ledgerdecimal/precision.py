"""
Precision constants for LedgerDecimal.

Every value is held at a fixed 256-bit binary significand and rounded
half-to-even.  The canonical 32-byte encoding splits those 256 bits as:

    42 integer bits + 214 fractional bits

so the largest admissible integer part is ``2**42 - 1``
(4,398,046,511,103).
"""

from __future__ import annotations

from mpmath import libmp

# Binary significand width of every intermediate value.
WORKING_PRECISION: int = 256

# Rounding mode for every engine call (round half to even).
ROUNDING: str = libmp.round_nearest

# Fixed-point split of the wire format.
INTEGER_BITS: int = 42
FRACTION_BITS: int = WORKING_PRECISION - INTEGER_BITS  # 214

# Exact size of an encoded amount.
ENCODED_SIZE: int = WORKING_PRECISION // 8  # 32

# Largest integer part an amount may carry.
MAX_INTEGER_PART: int = (1 << INTEGER_BITS) - 1  # 4_398_046_511_103

# Root convergence: stop once |step| * 2**margin < estimate. One bit below
# WORKING_PRECISION: a two-ulp step passes unless the estimate is a power of two.
PRECISION_MARGIN: int = 254

# Hard cap on Newton-Raphson steps before reporting non-convergence.
MAX_ROOT_ITERATIONS: int = 16 * WORKING_PRECISION  # 4096

# Significant decimal digits carried by 256 bits (floor(256 * log10(2))).
DECIMAL_DIGITS: int = 77

# Machine integer ranges for the 64-bit constructors / extractors.
INT64_MIN: int = -(1 << 63)
INT64_MAX: int = (1 << 63) - 1
UINT64_MAX: int = (1 << 64) - 1
