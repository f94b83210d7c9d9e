"""
Tests for the Newton-Raphson root finder (roots.py).

Covers:
  - Square and cube root accuracy at the default margin
  - Sweeps of orders and magnitudes at the default settings, including
    radicands whose iterates end up alternating between neighbours
  - n == 1, zero radicand and method delegation
  - Degenerate arguments (n < 1, negative radicand, bad settings)
  - Iteration cap: bounded failure instead of a hang
  - Logging of convergence / non-convergence
"""

from __future__ import annotations

import logging
import time

import pytest

from ledgerdecimal.config import RootConfig
from ledgerdecimal.number import (
    InvalidAmountError,
    LedgerDecimal,
    NonConvergenceError,
)
from ledgerdecimal.roots import root, sqrt


def _close(a: LedgerDecimal, b: LedgerDecimal, bits: int) -> bool:
    """|a - b| < |b| * 2**-bits"""
    return (a - b).abs() < b.abs() * LedgerDecimal.new(2.0 ** -bits)


# ═══════════════════════════════════════════════════════════════════
#  Accuracy
# ═══════════════════════════════════════════════════════════════════

class TestAccuracy:

    def test_sqrt_two_squared(self, two):
        s = sqrt(two)
        assert _close(s * s, two, 250)

    def test_sqrt_two_digits(self, two):
        s = sqrt(two)
        assert s.to_string(30) == "1.41421356237309504880168872421"

    def test_cube_root_of_eight(self, eight, two):
        assert _close(root(eight, 3), two, 250)

    def test_sqrt_of_perfect_square(self):
        assert _close(sqrt(LedgerDecimal.new(4)), LedgerDecimal.new(2), 250)

    def test_sqrt_max_amount(self, max_amount):
        s = sqrt(max_amount)
        assert _close(s * s, max_amount, 230)

    def test_sqrt_tiny_amount(self):
        a = LedgerDecimal.from_string("1e-60")
        s = sqrt(a)
        assert _close(s * s, a, 230)

    @pytest.mark.parametrize("n", [2, 3, 4, 5, 7, 10])
    @pytest.mark.parametrize(
        "text",
        [
            "0.001", "0.7", "2", "223.19578", "245.098004", "878.717898",
            "12345.6789", "4398046511103",
        ],
    )
    def test_power_of_root_recovers_radicand(self, text, n):
        a = LedgerDecimal.from_string(text)
        r = root(a, n)
        assert _close(r.exp(n), a, 220)

    def test_first_root_is_identity(self):
        a = LedgerDecimal.from_string("5.5")
        assert root(a, 1) == a

    def test_root_of_zero(self):
        assert root(LedgerDecimal.zero(), 3).is_zero()

    @pytest.mark.parametrize(
        "text, n",
        [("223.195780", 2), ("878.717898", 2), ("245.098004", 3), ("0.7", 7)],
    )
    def test_default_settings_converge(self, text, n):
        """Iterates that end up alternating between neighbours still terminate."""
        a = LedgerDecimal.from_string(text)
        r = root(a, n)
        assert _close(r.exp(n), a, 240)

    def test_uniform_sweep_at_default_settings(self):
        for i in range(1, 400):
            a = LedgerDecimal.from_string(f"{i * 2.718281:.6f}")
            for n in (2, 3):
                r = root(a, n)
                assert _close(r.exp(n), a, 240), (a, n)

    def test_root_of_one(self):
        one = LedgerDecimal.new(1)
        assert _close(root(one, 5), one, 250)

    def test_coarser_margin_still_close(self, two):
        s = sqrt(two, RootConfig(margin_bits=64))
        assert _close(s * s, two, 60)


class TestMethodDelegation:

    def test_sqrt_method(self):
        assert _close(LedgerDecimal.new(9).sqrt(), LedgerDecimal.new(3), 250)

    def test_root_method(self):
        assert _close(LedgerDecimal.new(27).root(3), LedgerDecimal.new(3), 250)

    def test_does_not_mutate_radicand(self, two):
        sqrt(two)
        assert two == LedgerDecimal.new(2)


# ═══════════════════════════════════════════════════════════════════
#  Degenerate arguments
# ═══════════════════════════════════════════════════════════════════

class TestDegenerate:

    def test_zero_order(self, two):
        with pytest.raises(InvalidAmountError):
            root(two, 0)

    def test_negative_order(self, two):
        with pytest.raises(InvalidAmountError):
            root(two, -2)

    def test_non_integer_order(self, two):
        with pytest.raises(TypeError):
            root(two, 2.0)  # type: ignore[arg-type]

    def test_negative_radicand(self):
        with pytest.raises(InvalidAmountError):
            sqrt(LedgerDecimal.new(-4))

    def test_invalid_settings(self, two):
        with pytest.raises(ValueError):
            root(two, 2, RootConfig(margin_bits=0))
        with pytest.raises(ValueError):
            root(two, 2, RootConfig(max_iterations=0))


# ═══════════════════════════════════════════════════════════════════
#  Iteration cap
# ═══════════════════════════════════════════════════════════════════

class TestNonConvergence:

    def test_cap_raises(self, two):
        with pytest.raises(NonConvergenceError) as exc_info:
            sqrt(two, RootConfig(max_iterations=3))
        err = exc_info.value
        assert err.iterations == 3
        # 1 -> 1.5 -> 1.41666 -> 1.414215
        assert 1.414 < err.estimate.to_float() < 1.415

    def test_slow_linear_phase_fails_within_budget(self):
        """A high-order root of a large radicand needs ~11k steps from x0 = 1."""
        a = LedgerDecimal.from_int(2 ** 41)
        started = time.monotonic()
        with pytest.raises(NonConvergenceError):
            root(a, 500)
        assert time.monotonic() - started < 60

    def test_raising_the_cap_recovers(self):
        a = LedgerDecimal.from_int(2 ** 41)
        r = root(a, 500, RootConfig(max_iterations=20_000))
        assert _close(r.exp(500), a, 200)

    def test_is_ledger_decimal_error(self, two):
        from ledgerdecimal.number import LedgerDecimalError
        with pytest.raises(LedgerDecimalError):
            sqrt(two, RootConfig(max_iterations=1))


# ═══════════════════════════════════════════════════════════════════
#  Logging
# ═══════════════════════════════════════════════════════════════════

class TestLogging:

    def test_convergence_logged(self, two, caplog):
        with caplog.at_level(logging.DEBUG, logger="ledgerdecimal.roots"):
            sqrt(two)
        assert any("converged" in r.getMessage() for r in caplog.records)

    def test_non_convergence_warned(self, two, caplog):
        with caplog.at_level(logging.WARNING, logger="ledgerdecimal.roots"):
            with pytest.raises(NonConvergenceError):
                sqrt(two, RootConfig(max_iterations=2))
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "did not converge" in warnings[0].getMessage()
