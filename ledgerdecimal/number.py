"""
LedgerDecimal: a bounded, non-negative 256-bit amount type.

A ``LedgerDecimal`` wraps one raw mpmath float ``(sign, man, exp, bc)``
held at ``WORKING_PRECISION`` bits.  Instances are immutable; every
operation returns a fresh value and never touches its operands.

Untrusted input enters through the validated constructors, which return
``None`` instead of a value when the input is malformed, negative, or
has an integer part of ``2**42`` or more:

    amt = LedgerDecimal.from_string("125.5")
    if amt is None:
        ...  # reject

``zero()`` and ``new()`` skip validation and are meant for constants.

Arithmetic accepts out-of-domain operands (subtraction may go negative)
so the root finder can compose freely; re-validate with
``is_valid_amount()`` or the codec before persisting a result.
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, Optional

from mpmath import libmp

from ledgerdecimal.precision import (
    DECIMAL_DIGITS,
    INT64_MAX,
    INT64_MIN,
    INTEGER_BITS,
    ROUNDING,
    UINT64_MAX,
    WORKING_PRECISION,
)

if TYPE_CHECKING:
    from ledgerdecimal.config import RootConfig

logger = logging.getLogger("ledgerdecimal.number")

_PREC = WORKING_PRECISION
_SPECIALS = (libmp.finf, libmp.fninf, libmp.fnan)
_HALF = libmp.from_man_exp(1, -1)

# Plain or scientific decimal with an optional leading sign.
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


# ── Errors ──────────────────────────────────────────────────────

class LedgerDecimalError(ArithmeticError):
    """Base class for LedgerDecimal failures."""


class InvalidAmountError(LedgerDecimalError, ValueError):
    """A degenerate argument (negative radicand, n < 1, negative power)."""


class DivisionByZeroError(InvalidAmountError, ZeroDivisionError):
    """Division or remainder by a zero-valued amount."""


class NonConvergenceError(LedgerDecimalError):
    """Newton-Raphson did not meet its convergence bound within the cap."""

    def __init__(self, message: str, estimate: LedgerDecimal, iterations: int):
        super().__init__(message)
        self.estimate = estimate
        self.iterations = iterations


# ── Value type ──────────────────────────────────────────────────

class LedgerDecimal:
    """Immutable 256-bit binary float constrained to ledger amounts."""

    __slots__ = ("_mpf",)

    def __init__(self, raw: tuple) -> None:
        # Raw mpf tuple; callers outside this package use the constructors.
        self._mpf = raw

    # ── Unchecked constructors ───────────────────────────────────

    @classmethod
    def zero(cls) -> LedgerDecimal:
        return cls(libmp.fzero)

    @classmethod
    def new(cls, literal: int | float) -> LedgerDecimal:
        """Build a constant from an ``int`` or ``float`` literal, unchecked."""
        if isinstance(literal, int):
            return cls(libmp.from_int(literal, _PREC, ROUNDING))
        return cls(libmp.from_float(float(literal), _PREC, ROUNDING))

    # ── Validated constructors ───────────────────────────────────

    @classmethod
    def _admit(cls, raw: tuple, source: object) -> Optional[LedgerDecimal]:
        value = cls(raw)
        if not value.is_valid_amount():
            logger.debug(f"Rejected amount {source!r}: negative or >= 2^{INTEGER_BITS}")
            return None
        return value

    @classmethod
    def from_string(cls, s: str) -> Optional[LedgerDecimal]:
        """Parse a decimal literal such as ``"123"`` or ``"123.456"``.

        Returns ``None`` when the literal is not a plain or scientific decimal
        (``inf``, ``nan``, ``1/3``, ``0x10`` and ``1_000`` included), is
        negative, or has an integer part of ``2**42`` or more.
        """
        if not isinstance(s, str):
            raise TypeError(f"expected str, got {type(s).__name__}")
        literal = s.strip()
        if not _DECIMAL_LITERAL.fullmatch(literal):
            logger.debug(f"Rejected amount {s!r}: not a decimal literal")
            return None
        raw = libmp.from_str(literal, _PREC, ROUNDING)
        return cls._admit(raw, s)

    @classmethod
    def from_int(cls, n: int) -> Optional[LedgerDecimal]:
        if isinstance(n, bool) or not isinstance(n, int):
            raise TypeError(f"expected int, got {type(n).__name__}")
        return cls._admit(libmp.from_int(n, _PREC, ROUNDING), n)

    @classmethod
    def from_int64(cls, n: int) -> Optional[LedgerDecimal]:
        if isinstance(n, int) and not isinstance(n, bool) and not INT64_MIN <= n <= INT64_MAX:
            logger.debug(f"Rejected amount {n!r}: outside int64")
            return None
        return cls.from_int(n)

    @classmethod
    def from_uint64(cls, n: int) -> Optional[LedgerDecimal]:
        if isinstance(n, int) and not isinstance(n, bool) and not 0 <= n <= UINT64_MAX:
            logger.debug(f"Rejected amount {n!r}: outside uint64")
            return None
        return cls.from_int(n)

    @classmethod
    def from_float(cls, f: float) -> Optional[LedgerDecimal]:
        """Convert a binary double exactly; ``None`` for nan/inf or out of range."""
        f = float(f)
        if not math.isfinite(f):
            logger.debug(f"Rejected amount {f!r}: not finite")
            return None
        return cls._admit(libmp.from_float(f, _PREC, ROUNDING), f)

    @classmethod
    def from_bytes(cls, data: bytes) -> LedgerDecimal:
        from ledgerdecimal.codec import decode
        return decode(data)

    @classmethod
    def from_hex(cls, text: str) -> LedgerDecimal:
        return cls.from_bytes(bytes.fromhex(text))

    # ── Inspection ───────────────────────────────────────────────

    def mant_exp(self) -> int:
        """Binary exponent ``e`` with ``self == m * 2**e`` and ``0.5 <= |m| < 1``.

        Zero reports ``0``.  The integer part fits in ``k`` bits exactly
        when ``mant_exp() <= k``.
        """
        _sign, man, exp, bc = self._mpf
        if not man:
            return 0
        return exp + bc

    def sign(self) -> int:
        return libmp.mpf_sign(self._mpf)

    def is_zero(self) -> bool:
        return self._mpf == libmp.fzero

    def is_negative(self) -> bool:
        return self.sign() < 0

    def is_valid_amount(self) -> bool:
        """True when the value may be stored as a ledger amount."""
        if self._mpf in _SPECIALS:
            return False
        return not self.is_negative() and self.mant_exp() <= INTEGER_BITS

    # ── Extractors ───────────────────────────────────────────────

    def to_int(self) -> int:
        """Truncate toward zero, keeping the sign."""
        return int(libmp.to_int(self._mpf))

    def to_int64(self) -> int:
        i = self.to_int()
        if not INT64_MIN <= i <= INT64_MAX:
            raise OverflowError(f"{i} does not fit in int64")
        return i

    def to_uint64(self) -> int:
        i = self.to_int()
        if not 0 <= i <= UINT64_MAX:
            raise OverflowError(f"{i} does not fit in uint64")
        return i

    def to_float(self) -> float:
        return libmp.to_float(self._mpf)

    def to_bytes(self) -> Optional[bytes]:
        from ledgerdecimal.codec import encode
        return encode(self)

    def to_hex(self) -> Optional[str]:
        data = self.to_bytes()
        return None if data is None else data.hex()

    def to_string(self, digits: int = DECIMAL_DIGITS) -> str:
        """Render with at most *digits* significant decimal digits."""
        return libmp.to_str(self._mpf, digits)

    def format_amount(self, places: int = 8, unit: str = "") -> str:
        """Fixed-point display string, rounded half away from zero.

        >>> LedgerDecimal.new(1.5).format_amount(8, "NXF")
        '1.50000000 NXF'
        """
        scale = 10 ** places
        # prec=0 keeps both steps exact
        scaled = libmp.mpf_mul(self._mpf, libmp.from_int(scale))
        half = _HALF if libmp.mpf_sign(scaled) >= 0 else libmp.mpf_neg(_HALF)
        units = int(libmp.to_int(libmp.mpf_add(scaled, half)))
        whole, frac = divmod(abs(units), scale)
        text = f"{'-' if units < 0 else ''}{whole}"
        if places:
            text += f".{frac:0{places}d}"
        return f"{text} {unit}" if unit else text

    # ── Arithmetic composition ───────────────────────────────────

    def add(self, other: LedgerDecimal) -> LedgerDecimal:
        return LedgerDecimal(libmp.mpf_add(self._mpf, other._mpf, _PREC, ROUNDING))

    def sub(self, other: LedgerDecimal) -> LedgerDecimal:
        return LedgerDecimal(libmp.mpf_sub(self._mpf, other._mpf, _PREC, ROUNDING))

    def mul(self, other: LedgerDecimal) -> LedgerDecimal:
        return LedgerDecimal(libmp.mpf_mul(self._mpf, other._mpf, _PREC, ROUNDING))

    def div(self, other: LedgerDecimal) -> LedgerDecimal:
        if other.is_zero():
            raise DivisionByZeroError("division by zero amount")
        return LedgerDecimal(libmp.mpf_div(self._mpf, other._mpf, _PREC, ROUNDING))

    def mod(self, other: LedgerDecimal) -> LedgerDecimal:
        """Truncating remainder ``a - b * trunc(a / b)``; ``-7 mod 3 == -1``."""
        q = self.div(other)
        whole = LedgerDecimal(libmp.from_int(q.to_int(), _PREC, ROUNDING))
        return self.sub(other.mul(whole))

    def abs(self) -> LedgerDecimal:
        return LedgerDecimal(libmp.mpf_abs(self._mpf, _PREC, ROUNDING))

    def neg(self) -> LedgerDecimal:
        return LedgerDecimal(libmp.mpf_neg(self._mpf, _PREC, ROUNDING))

    def exp(self, e: int) -> LedgerDecimal:
        """``self ** e`` by ``e - 1`` sequential multiplications.

        ``exp(0)`` is one and ``exp(1)`` is a copy of ``self``.
        """
        if e < 0:
            raise InvalidAmountError(f"negative exponent {e}")
        if e == 0:
            return LedgerDecimal(libmp.fone)
        result = LedgerDecimal(self._mpf)
        for _ in range(e - 1):
            result = result.mul(self)
        return result

    def root(self, n: int, settings: Optional[RootConfig] = None) -> LedgerDecimal:
        from ledgerdecimal.roots import root
        return root(self, n, settings)

    def sqrt(self, settings: Optional[RootConfig] = None) -> LedgerDecimal:
        from ledgerdecimal.roots import sqrt
        return sqrt(self, settings)

    # ── Comparison ───────────────────────────────────────────────

    def equal(self, other: LedgerDecimal) -> bool:
        return libmp.mpf_eq(self._mpf, other._mpf)

    def greater(self, other: LedgerDecimal) -> bool:
        return libmp.mpf_gt(self._mpf, other._mpf)

    def lesser(self, other: LedgerDecimal) -> bool:
        return libmp.mpf_lt(self._mpf, other._mpf)

    # ── Python protocol ──────────────────────────────────────────

    def __add__(self, other: object) -> LedgerDecimal:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: object) -> LedgerDecimal:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, other: object) -> LedgerDecimal:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return self.mul(other)

    def __truediv__(self, other: object) -> LedgerDecimal:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return self.div(other)

    def __mod__(self, other: object) -> LedgerDecimal:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return self.mod(other)

    def __pow__(self, e: object) -> LedgerDecimal:
        if isinstance(e, bool) or not isinstance(e, int):
            return NotImplemented
        return self.exp(e)

    def __neg__(self) -> LedgerDecimal:
        return self.neg()

    def __pos__(self) -> LedgerDecimal:
        return LedgerDecimal(self._mpf)

    def __abs__(self) -> LedgerDecimal:
        return self.abs()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return self.equal(other)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return self.lesser(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return libmp.mpf_le(self._mpf, other._mpf)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return self.greater(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, LedgerDecimal):
            return NotImplemented
        return libmp.mpf_ge(self._mpf, other._mpf)

    def __hash__(self) -> int:
        sign, man, exp, bc = self._mpf
        return hash((sign, int(man), exp, bc))

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __int__(self) -> int:
        return self.to_int()

    def __float__(self) -> float:
        return self.to_float()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"LedgerDecimal('{self.to_string()}')"
