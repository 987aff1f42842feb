"""
Chunk buffering and chunk files
===============================

A chunk is a run of consecutive stream elements held as a uint8 matrix with
one fixed-width point encoding per row. On disk a chunk is a plain NumPy
.npy array, so its row count and encoding width are self-describing.
"""

import os
from contextlib import suppress

import numpy as np

from .config import MIN_CHUNK_LENGTH, PLACEHOLDER
from .errors import ChunkWriteError


class ChunkBuffer:
    """Holds exactly one chunk of a stream; reused after every flush."""

    def __init__(self, chunk_length: int, width: int):
        if chunk_length < MIN_CHUNK_LENGTH:
            raise ValueError(f"chunk_length must be at least {MIN_CHUNK_LENGTH}")
        self.chunk_length = chunk_length
        self.width = width
        self.slots = np.zeros((chunk_length, width), dtype=np.uint8)
        self.filled = 0
        self.chunk_index = 0

    def put(self, index: int, encoded: bytes) -> bool:
        """Store element `index`; returns True when the chunk is complete."""
        slot = index - self.chunk_index * self.chunk_length
        if slot != self.filled:
            raise IndexError(
                f"element {index} does not follow slot {self.filled} of chunk {self.chunk_index}"
            )
        self.slots[slot] = np.frombuffer(encoded, dtype=np.uint8)
        self.filled += 1
        return self.filled == self.chunk_length

    @property
    def empty(self) -> bool:
        return self.filled == 0

    def drain(self):
        """
        Hand out the filled rows and start the next chunk.

        The returned view aliases the buffer, so it must be written out
        before the next put().
        """
        rows = self.slots[: self.filled]
        chunk_index = self.chunk_index
        self.filled = 0
        self.chunk_index += 1
        return chunk_index, rows


def chunk_path(pattern: str, chunk_index: int) -> str:
    return pattern.replace(PLACEHOLDER, str(chunk_index))


def write_chunk(path: str, rows, stream: str = "", chunk_index=None):
    """
    Store the rows as a .npy array at `path`, replacing any existing file.

    The data goes to `path + ".tmp"` first and is renamed into place, so a
    file under the chunk name is always complete.
    """
    rows = np.ascontiguousarray(rows, dtype=np.uint8)
    tmp = path + ".tmp"
    try:
        with open(tmp, "wb") as f:
            np.save(f, rows, allow_pickle=False)
        os.replace(tmp, path)
    except OSError as e:
        with suppress(FileNotFoundError):
            os.remove(tmp)
        where = f"chunk {chunk_index} " if chunk_index is not None else ""
        who = f"{stream}: " if stream else ""
        raise ChunkWriteError(f"{who}failed to write {where}to {path}: {e}") from e


def read_chunk(path: str) -> list:
    rows = np.load(path, allow_pickle=False)
    if rows.ndim != 2 or rows.dtype != np.uint8:
        raise ValueError(f"{path} is not a chunk file (shape {rows.shape}, dtype {rows.dtype})")
    return [row.tobytes() for row in rows]


# === single value files ===
def write_single(path: str, encoded: bytes, name: str = ""):
    """The unchunked variant: exactly one encoded point at a fixed path."""
    write_chunk(path, np.frombuffer(encoded, dtype=np.uint8).reshape(1, -1), stream=name)


def read_single(path: str) -> bytes:
    rows = read_chunk(path)
    if len(rows) != 1:
        raise ValueError(f"{path} holds {len(rows)} points, expected exactly one")
    return rows[0]
