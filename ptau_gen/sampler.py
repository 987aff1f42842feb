"""
Scalar sampling for the tau secret
==================================

One tau is drawn per run from the operating system's secure random source
(through pycryptodome) and reduced into the BLS12-381 scalar field.
"""

from Crypto.Random import get_random_bytes
from py_ecc.optimized_bls12_381 import curve_order

from .config import ENTROPY_BYTES
from .errors import EntropyError


def scalar_from_bytes(data: bytes) -> int:
    """
    Wide reduction of little-endian bytes into the scalar field.

    Args:
        data (bytes): at least ENTROPY_BYTES of uniform randomness

    Returns:
        int: scalar in [0, curve_order)
    """
    if len(data) < ENTROPY_BYTES:
        raise ValueError(
            f"need at least {ENTROPY_BYTES} bytes for a wide reduction, got {len(data)}"
        )
    return int.from_bytes(data, "little") % curve_order


def secure_bytes(n: int) -> bytes:
    try:
        data = get_random_bytes(n)
    except (OSError, RuntimeError, ValueError) as e:
        raise EntropyError(f"secure random source unavailable: {e}") from e
    if len(data) != n:
        raise EntropyError(f"secure random source returned {len(data)} of {n} bytes")
    return data


def sample_scalar() -> int:
    """Sample tau. Raises EntropyError, which callers must treat as fatal."""
    return scalar_from_bytes(secure_bytes(ENTROPY_BYTES))
