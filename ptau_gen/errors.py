class PtauError(Exception):
    """Base class for every error raised by ptau_gen."""


class ConfigurationError(PtauError, ValueError):
    """Bad count, chunk length or stream layout; reported before any work starts."""


class EntropyError(PtauError):
    """The secure random source failed. Never retried."""


class ChunkWriteError(PtauError, OSError):
    """A chunk or single-value file could not be created or written."""
