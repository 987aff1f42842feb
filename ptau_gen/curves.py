"""
BLS12-381 curve groups used by the parameter streams
====================================================

Each group bundles its base point, scalar multiplication, fixed-width
encoding and (where available) hash-to-curve:

- g1:   compressed G1 points, 48 bytes
- g2:   compressed G2 points, 96 bytes
- g1g2: a G1 point and a G2 point raised to the same power, 144 bytes
"""

import hashlib

from py_ecc.bls.g2_primitives import G1_to_pubkey, G2_to_signature
from py_ecc.bls.hash_to_curve import hash_to_G1, hash_to_G2
from py_ecc.optimized_bls12_381 import G1, G2, multiply

from .config import PEDERSEN_BASE_SEED, PEDERSEN_DST
from .errors import ConfigurationError


class CurveGroup:
    def __init__(self, name, width, generator, mul, encode, hash_to_point=None):
        self.name = name
        self.width = width
        self.generator = generator
        self._mul = mul
        self._encode = encode
        self._hash_to_point = hash_to_point
        self._pedersen_base = None

    def __repr__(self):
        return f"CurveGroup({self.name!r}, width={self.width})"

    @property
    def can_hash(self):
        return self._hash_to_point is not None

    def multiply(self, point, scalar: int):
        return self._mul(point, scalar)

    def encode(self, point) -> bytes:
        data = bytes(self._encode(point))
        if len(data) != self.width:
            raise ValueError(f"{self.name} encoding is {len(data)} bytes, expected {self.width}")
        return data

    def hash_to_point(self, message: bytes):
        if self._hash_to_point is None:
            raise ConfigurationError(f"group {self.name} has no hash-to-curve map")
        return self._hash_to_point(message, PEDERSEN_DST, hashlib.sha256)

    def pedersen_base(self):
        """Hash-derived base with no known discrete log relative to the generator."""
        if self._pedersen_base is None:
            self._pedersen_base = self.hash_to_point(PEDERSEN_BASE_SEED)
        return self._pedersen_base


# === paired G1/G2 helpers ===
def _paired_multiply(point, scalar):
    return multiply(point[0], scalar), multiply(point[1], scalar)


def _paired_encode(point):
    return G1_to_pubkey(point[0]) + G2_to_signature(point[1])


GROUPS = {
    "g1": CurveGroup("g1", 48, G1, multiply, G1_to_pubkey, hash_to_G1),
    "g2": CurveGroup("g2", 96, G2, multiply, G2_to_signature, hash_to_G2),
    "g1g2": CurveGroup("g1g2", 144, (G1, G2), _paired_multiply, _paired_encode),
}


def get_group(name: str) -> CurveGroup:
    try:
        return GROUPS[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown curve group {name!r} (expected one of {', '.join(GROUPS)})"
        ) from None
