"""
Newton-Raphson n-th roots for LedgerDecimal.

The engine has no native root, so ``root(a, n)`` iterates

    x' = (1/n) * ((n - 1) * x + a * (1/x)**(n - 1))

from ``x = 1``, building ``(1/x)**(n - 1)`` by square-and-multiply over
the bits of ``n - 1``.  The loop stops once the step is small relative
to the estimate:

    |x' - x| * 2**margin_bits < x'

or once the iterate revisits the value from two steps back, which happens
when rounding leaves it alternating between two neighbouring 256-bit values.

Convergence is only linear while the estimate is far above the root
(large ``n`` with a large radicand), so the loop is capped and raises
``NonConvergenceError`` rather than spinning.
"""

from __future__ import annotations

import logging
from typing import Optional

from ledgerdecimal.config import RootConfig
from ledgerdecimal.number import InvalidAmountError, LedgerDecimal, NonConvergenceError

logger = logging.getLogger("ledgerdecimal.roots")

_ONE = LedgerDecimal.new(1)


def root(a: LedgerDecimal, n: int, settings: Optional[RootConfig] = None) -> LedgerDecimal:
    """Return the real *n*-th root of non-negative *a*.

    Raises ``InvalidAmountError`` for ``n < 1`` or negative *a*, and
    ``NonConvergenceError`` when ``settings.max_iterations`` is exhausted.
    """
    cfg = settings or RootConfig()
    cfg.validate()
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"root order must be int, got {type(n).__name__}")
    if n < 1:
        raise InvalidAmountError(f"root order must be >= 1, got {n}")
    if a.is_negative():
        raise InvalidAmountError("root of a negative amount")
    if a.is_zero():
        # relative bound is unreachable at zero
        return LedgerDecimal.zero()

    limit = LedgerDecimal.new(1 << cfg.margin_bits)
    n1 = n - 1
    n1f, rn = LedgerDecimal.new(n1), _ONE / LedgerDecimal.new(n)
    x = _ONE
    x_prev: Optional[LedgerDecimal] = None

    for iteration in range(1, cfg.max_iterations + 1):
        potx, t2 = _ONE / x, a
        b = n1
        while b > 0:
            if b & 1:
                t2 = t2 * potx
            potx = potx * potx
            b >>= 1
        x_next = rn * (n1f * x + t2)
        if (x_next - x).abs() * limit < x_next:
            logger.debug(
                f"root(n={n}) converged after {iteration} iterations",
                extra={"order": n, "iterations": iteration},
            )
            return x_next
        if x_next == x_prev:
            # two-ulp limit cycle at working precision; no further step moves it
            logger.debug(
                f"root(n={n}) settled into a rounding cycle after {iteration} iterations",
                extra={"order": n, "iterations": iteration},
            )
            return min(x_next, x)
        x_prev, x = x, x_next

    logger.warning(
        f"root(n={n}) did not converge within {cfg.max_iterations} iterations",
        extra={"order": n, "iterations": cfg.max_iterations},
    )
    raise NonConvergenceError(
        f"root(n={n}) did not converge within {cfg.max_iterations} iterations",
        estimate=x,
        iterations=cfg.max_iterations,
    )


def sqrt(a: LedgerDecimal, settings: Optional[RootConfig] = None) -> LedgerDecimal:
    return root(a, 2, settings)
