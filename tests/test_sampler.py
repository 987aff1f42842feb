import pytest
from py_ecc.optimized_bls12_381 import curve_order

import ptau_gen.sampler as sampler
from ptau_gen.errors import EntropyError, PtauError


def test_wide_reduction_is_little_endian_mod_order():
    data = bytes(range(64))
    assert sampler.scalar_from_bytes(data) == int.from_bytes(data, "little") % curve_order


def test_all_ones_reduces_below_order():
    assert 0 <= sampler.scalar_from_bytes(b"\xff" * 64) < curve_order


def test_short_input_is_refused():
    with pytest.raises(ValueError):
        sampler.scalar_from_bytes(b"\x01" * 32)


def test_sample_scalar_in_field_and_fresh():
    a = sampler.sample_scalar()
    b = sampler.sample_scalar()
    assert 0 <= a < curve_order
    assert a != b


def test_entropy_failure_is_fatal(monkeypatch):
    def broken(n):
        raise OSError("no /dev/urandom")

    monkeypatch.setattr(sampler, "get_random_bytes", broken)
    with pytest.raises(EntropyError, match="no /dev/urandom") as info:
        sampler.sample_scalar()
    assert isinstance(info.value, PtauError)


def test_short_read_is_an_entropy_failure(monkeypatch):
    monkeypatch.setattr(sampler, "get_random_bytes", lambda n: b"\x00" * (n - 1))
    with pytest.raises(EntropyError):
        sampler.secure_bytes(64)
