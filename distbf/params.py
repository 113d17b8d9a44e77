"""Bloom filter sizing from expected element count and false positive rate."""
import math
from typing import Optional

from . import constants
from .config import get_filter_config
from .errors import InvalidArgument


def estimate_parameters(n: int, fpr: float) -> tuple[int, int]:
    """Estimate bit-array size m and hash count k for n elements.

    Uses the optimal bloom filter formulas, rounded up:
        m = ceil(-n * ln(fpr) / ln(2)^2)
        k = ceil(ln(2) * m / n)

    Args:
        n: Expected number of elements (must be positive)
        fpr: Target false positive rate, strictly between 0 and 1

    Returns:
        (m, k)
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidArgument(f"element count must be an integer, got {n!r}")
    if n <= 0:
        raise InvalidArgument(f"element count must be positive, got {n}")
    if not isinstance(fpr, (int, float)) or not 0.0 < fpr < 1.0:
        raise InvalidArgument(f"false positive rate must be in (0, 1), got {fpr!r}")

    m = math.ceil(-1 * n * math.log(fpr) / math.pow(math.log(2), 2))
    k = math.ceil(math.log(2) * m / n)
    if k > constants.MAX_HASHES:
        raise InvalidArgument(f"false positive rate {fpr!r} needs {k} hash functions, at most {constants.MAX_HASHES} are supported")
    return m, k


def estimate_for_peers(n1: int, n2: int, fpr: Optional[float] = None) -> tuple[int, int]:
    """Size one filter for a pair of peers, large enough for the bigger side."""
    if fpr is None:
        fpr = get_filter_config().false_positive_rate
    return estimate_parameters(max(n1, n2), fpr)
