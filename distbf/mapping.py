"""Element to bit-index mapping."""
from typing import Sequence

from . import constants
from .hashing import combine, digest
from .errors import InvalidArgument


def bytes_to_index(m: int, combined: bytes) -> int:
    """Reduce the leading 8 bytes of a digest (big-endian) modulo m."""
    value = int.from_bytes(combined[:constants.INDEX_BYTES], byteorder='big')
    return value % m


def indices_for(element: bytes, chain: Sequence[bytes], m: int) -> list[int]:
    """Map an element to one bit index per chain entry.

    Args:
        element: Raw element bytes
        chain: Hash chain derived from the round seed
        m: Bit-array size

    Returns:
        len(chain) indices in [0, m), in chain order
    """
    if m <= 0:
        raise InvalidArgument(f"bit-array size must be positive, got {m}")
    element_digest = digest(element)
    return [bytes_to_index(m, combine(h, element_digest)) for h in chain]
