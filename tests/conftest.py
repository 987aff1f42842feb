import pytest
from py_ecc.optimized_bls12_381 import curve_order

from ptau_gen.curves import get_group

# small on purpose: pure python scalar multiplication cost grows with bit length
TEST_TAU = 0x5EED


@pytest.fixture
def tau():
    return TEST_TAU


@pytest.fixture
def expected_point():
    """Encoding of generator * TEST_TAU^k computed directly, not iteratively."""

    def _expected(group_name, k, tau=TEST_TAU):
        group = get_group(group_name)
        return group.encode(group.multiply(group.generator, pow(tau, k, curve_order)))

    return _expected


@pytest.fixture
def counter_bytes():
    """Deterministic stand-in for the secure random source."""
    state = {"n": 0}

    def _randbytes(n):
        state["n"] += 1
        return bytes([state["n"] % 256]) * n

    return _randbytes
