"""
Shared pytest fixtures for the LedgerDecimal test suite.
"""

import pytest

from ledgerdecimal.number import LedgerDecimal
from ledgerdecimal.precision import MAX_INTEGER_PART


@pytest.fixture
def two():
    return LedgerDecimal.new(2)


@pytest.fixture
def eight():
    return LedgerDecimal.new(8)


@pytest.fixture
def max_amount():
    """Largest admissible whole amount, 2**42 - 1."""
    return LedgerDecimal.from_int(MAX_INTEGER_PART)

