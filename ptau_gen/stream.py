"""
Point stream generation
=======================

A stream is one logical sequence of curve points:

- "powers":   element i = base * tau^(i+1), computed by repeated
              multiplication of a running point by tau
- "pedersen": element i = hash_to_curve(64 fresh random bytes), each point
              independent of the others

Elements are produced strictly in index order by a single producer, packed
into a ChunkBuffer and written out one complete chunk at a time.
"""

from multiprocessing import RawValue
from typing import Callable, Iterator, Optional

from .chunks import ChunkBuffer, chunk_path, write_chunk
from .config import (
    ENTROPY_BYTES,
    FLUSH_PARTIAL_CHUNK,
    MAX_COUNT,
    MIN_CHUNK_LENGTH,
)
from .curves import CurveGroup, get_group
from .errors import ConfigurationError, EntropyError
from .sampler import secure_bytes

KINDS = ("powers", "pedersen")


class StreamSpec:
    """What one producer has to emit. Picklable, so it can cross into a worker process."""

    def __init__(self, name, group, count, chunk_length, pattern, kind="powers"):
        self.name = name
        self.group = group
        self.count = count
        self.chunk_length = chunk_length
        self.pattern = pattern
        self.kind = kind

    def __repr__(self):
        return (
            f"StreamSpec({self.name!r}, group={self.group!r}, kind={self.kind!r}, "
            f"count={self.count}, chunk_length={self.chunk_length}, pattern={self.pattern!r})"
        )


class StreamResult:
    def __init__(self, name, produced, persisted, paths, cancelled=False):
        self.name = name
        self.produced = produced
        self.persisted = persisted
        self.paths = paths
        self.cancelled = cancelled

    @property
    def dropped(self):
        """Elements computed but never written to any file."""
        return self.produced - self.persisted

    def __repr__(self):
        return (
            f"StreamResult({self.name!r}, produced={self.produced}, persisted={self.persisted}, "
            f"files={len(self.paths)}, cancelled={self.cancelled})"
        )


def validate_stream(spec: StreamSpec) -> CurveGroup:
    """Reject a stream before it runs. Returns the stream's curve group."""
    if spec.count > MAX_COUNT:
        raise ConfigurationError(
            f"{spec.name}: invalid number of entries requested: {spec.count} "
            f"(must be at most {MAX_COUNT})"
        )
    if spec.count < 0:
        raise ConfigurationError(f"{spec.name}: number of entries cannot be negative ({spec.count})")
    if spec.chunk_length < MIN_CHUNK_LENGTH:
        raise ConfigurationError(
            f"{spec.name}: each chunk must have at least {MIN_CHUNK_LENGTH} elements "
            f"(got {spec.chunk_length})"
        )
    if spec.kind not in KINDS:
        raise ConfigurationError(f"{spec.name}: unknown stream kind {spec.kind!r}")
    group = get_group(spec.group)
    if spec.kind == "pedersen" and not group.can_hash:
        raise ConfigurationError(f"{spec.name}: group {group.name} cannot hash to curve points")
    return group


# === element sources ===
def power_points(group: CurveGroup, tau: int, base=None) -> Iterator:
    """Lazily yield base*tau, base*tau^2, ... without end."""
    point = group.generator if base is None else base
    while True:
        point = group.multiply(point, tau)
        yield point


def pedersen_points(group: CurveGroup, randbytes: Callable[[int], bytes] = secure_bytes) -> Iterator:
    while True:
        yield group.hash_to_point(randbytes(ENTROPY_BYTES))


def _elements(spec, group, tau, randbytes):
    if spec.kind == "pedersen":
        return pedersen_points(group, randbytes)
    return power_points(group, tau)


# === producer loop ===
def generate_stream(
    spec: StreamSpec,
    tau: int,
    claimed=None,
    persisted=None,
    cancel=None,
    announce: Optional[Callable[[str], None]] = None,
    flush_partial: bool = FLUSH_PARTIAL_CHUNK,
    randbytes: Callable[[int], bytes] = secure_bytes,
) -> StreamResult:
    """
    Produce spec.count elements and write every chunk as it completes.

    Args:
        spec (StreamSpec): stream to produce
        tau (int): the run's secret scalar (ignored by pedersen streams)
        claimed: shared counter set to index+1 *before* element index is computed
        persisted: shared counter of elements durably written
        cancel: event checked once per element; when set the stream stops early
        announce: display callback for human-readable progress lines
        flush_partial (bool): write a trailing chunk shorter than chunk_length
        randbytes: entropy source for pedersen streams

    Returns:
        StreamResult
    """
    group = validate_stream(spec)
    claimed = RawValue("Q", 0) if claimed is None else claimed
    persisted = RawValue("Q", 0) if persisted is None else persisted
    say = announce or (lambda line: None)

    say(f"Generating {spec.count} {spec.name} points...")
    elements = _elements(spec, group, tau, randbytes)
    buffer = ChunkBuffer(spec.chunk_length, group.width)
    paths = []
    produced = 0
    cancelled = False

    def flush():
        chunk_index, rows = buffer.drain()
        path = chunk_path(spec.pattern, chunk_index)
        write_chunk(path, rows, stream=spec.name, chunk_index=chunk_index)
        persisted.value = produced
        paths.append(path)
        say(f"\n{path} written")

    for index in range(spec.count):
        if cancel is not None and cancel.is_set():
            cancelled = True
            break
        claimed.value = index + 1
        try:
            point = next(elements)
        except EntropyError as e:
            raise EntropyError(f"{spec.name}: element {index}: {e}") from e
        produced = index + 1
        if buffer.put(index, group.encode(point)):
            flush()

    if not buffer.empty and flush_partial:
        flush()

    return StreamResult(spec.name, produced, persisted.value, paths, cancelled)
