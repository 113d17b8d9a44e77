"""Errors raised by the distributed bloom filter."""


class DistBFError(Exception):
    """Base class for all filter errors."""
    pass


class InvalidArgument(DistBFError, ValueError):
    """Raised when sizing or hashing inputs are out of range."""
    pass


class IndexOutOfRange(DistBFError, IndexError):
    """Raised when a raw bit index falls outside [0, m)."""
    pass


class DecodeError(DistBFError, ValueError):
    """Raised when a transfer envelope is truncated or malformed."""
    pass


class SeedMismatch(DistBFError):
    """Raised when a foreign bit array was built from a different hash chain."""
    pass
