"""Reconciliation between a local filter and a peer's bit array.

- compare: are the two bit arrays nested (one a subset of the other)?
- sync_missing: which candidates does the peer's filter NOT claim?
- plan_sync: both, plus the direction the round should go
"""
from dataclasses import dataclass, field
from typing import Optional, Sequence
import logging

from bitarray import bitarray

from .bloom import BitsLike, DistBF, as_bits

log = logging.getLogger(__name__)


def _aligned(a: bitarray, b: bitarray) -> tuple[bitarray, bitarray]:
    """Copies of a and b with equal length and endianness (zero-extended)."""
    size = max(len(a), len(b))
    a = bitarray(a, endian='big')
    b = bitarray(b, endian='big')
    a.extend([0] * (size - len(a)))
    b.extend([0] * (size - len(b)))
    return a, b


def compare(bits_a: BitsLike, bits_b: BitsLike) -> tuple[bool, int, int]:
    """Compare two bit arrays coordinate-wise.

    Args:
        bits_a: First bit array (or filter)
        bits_b: Second bit array (or filter)

    Returns:
        (comparable, only_in_a, only_in_b) where only_in_a counts bits set in
        a but not b. comparable is True when at least one count is zero.
    """
    a, b = _aligned(as_bits(bits_a), as_bits(bits_b))
    only_in_a = (a & ~b).count(1)
    only_in_b = (b & ~a).count(1)
    comparable = only_in_a == 0 or only_in_b == 0
    return comparable, only_in_a, only_in_b


def sync_missing(
    dbf: DistBF,
    candidates: Sequence[bytes],
    foreign_bits: BitsLike,
    foreign_chain: Optional[Sequence[bytes]] = None
) -> list[bytes]:
    """Filter candidates down to those the peer's bit array does not claim.

    May omit an element the peer lacks (false positive in the peer's
    filter), never includes one the peer's filter was built from.

    Args:
        dbf: Local filter holding the round's hash chain
        candidates: Elements we could send
        foreign_bits: Peer's bit array (or filter)
        foreign_chain: Peer's hash chain, when known

    Returns:
        Candidates to send, in their original order
    """
    missing = dbf.select_missing(candidates, foreign_bits, foreign_chain)
    log.debug(f"sync_missing: {len(missing)}/{len(candidates)} candidates not in peer filter")
    return missing


@dataclass
class SyncPlan:
    """Outcome of reconciling with one peer for one round."""
    comparable: bool
    only_local: int  # bits set locally but not in the peer's array
    only_peer: int  # bits set in the peer's array but not locally
    missing: list[bytes] = field(default_factory=list)  # candidates to send

    @property
    def direction(self) -> str:
        """'equal', 'push' (we have more), 'pull' (peer has more) or 'both'."""
        if self.only_local == 0 and self.only_peer == 0:
            return 'equal'
        if not self.comparable:
            return 'both'
        return 'push' if self.only_local else 'pull'


def plan_sync(
    local: DistBF,
    foreign_bits: BitsLike,
    candidates: Sequence[bytes],
    foreign_chain: Optional[Sequence[bytes]] = None
) -> SyncPlan:
    """Compare bit arrays and select the candidates to send in one call."""
    missing = sync_missing(local, candidates, foreign_bits, foreign_chain)
    comparable, only_local, only_peer = compare(local, foreign_bits)
    plan = SyncPlan(comparable, only_local, only_peer, missing)
    log.debug(f"plan_sync: direction={plan.direction} only_local={only_local} only_peer={only_peer} missing={len(missing)}")
    return plan
