"""Distributed bloom filter.

Bloom semantics for sync:
- A filter is built from the elements a peer HAS, under a round seed
- The other peer, holding the same seed, tests its candidates against the bits
- False positives result in elements NOT being sent
"""
from typing import Any, Iterable, Optional, Sequence, Union
import logging

from bitarray import bitarray
from bitarray.util import zeros

from . import constants
from .config import get_filter_config
from .errors import IndexOutOfRange, InvalidArgument, SeedMismatch
from .hashing import derive_chain
from .mapping import indices_for
from .params import estimate_for_peers, estimate_parameters

log = logging.getLogger(__name__)

BitsLike = Union[bitarray, 'DistBF']

SEED_MISMATCH_MODES = ('raise', 'warn')


def as_bits(value: BitsLike) -> bitarray:
    """Return the bit array behind a filter, or the bit array itself."""
    if isinstance(value, DistBF):
        return value._bits
    if isinstance(value, bitarray):
        return value
    raise InvalidArgument(f"expected a bitarray or DistBF, got {type(value).__name__}")


def bit_is_set(bits: bitarray, index: int) -> bool:
    """Test a bit; indices past the end of the array read as unset."""
    return index < len(bits) and bool(bits[index])


class DistBF:
    """Bloom filter whose k index functions are derived from a round seed.

    Holds:
    - bits: m-bit array, the only mutable state
    - m, k: sizing, fixed at construction
    - chain: k digests derived from the seed
    - on_seed_mismatch: 'raise' or 'warn' when a peer's filter disagrees
    """

    def __init__(
        self,
        m: int,
        k: int,
        chain: Sequence[bytes],
        bits: Optional[bitarray] = None,
        on_seed_mismatch: str = 'raise'
    ):
        if m <= 0:
            raise InvalidArgument(f"bit-array size must be positive, got {m}")
        if k <= 0:
            raise InvalidArgument(f"hash count must be positive, got {k}")
        if on_seed_mismatch not in SEED_MISMATCH_MODES:
            raise InvalidArgument(f"on_seed_mismatch must be 'raise' or 'warn', got {on_seed_mismatch!r}")
        chain = tuple(bytes(h) for h in chain)
        if len(chain) != k:
            raise InvalidArgument(f"hash chain has {len(chain)} entries, expected {k}")
        for h in chain:
            if len(h) != constants.DIGEST_SIZE:
                raise InvalidArgument(f"hash chain entry has {len(h)} bytes, expected {constants.DIGEST_SIZE}")
        if bits is None:
            bits = zeros(m, endian='big')
        elif len(bits) != m:
            raise InvalidArgument(f"bit array has {len(bits)} bits, expected {m}")

        self._m = m
        self._k = k
        self._chain = chain
        self._bits = bits
        self._on_seed_mismatch = on_seed_mismatch

    @property
    def m(self) -> int:
        return self._m

    @property
    def k(self) -> int:
        return self._k

    @property
    def chain(self) -> tuple[bytes, ...]:
        return self._chain

    @property
    def bit_array(self) -> bitarray:
        """Copy of the bit array, safe to hand to a transport."""
        return self._bits.copy()

    def _chain_for(self, seed: Optional[bytes]) -> tuple[bytes, ...]:
        # Seed-per-call: derive a one-off chain of the same length
        if seed is None:
            return self._chain
        return derive_chain(seed, self._k)

    def indices_for_element(self, element: bytes, seed: Optional[bytes] = None) -> list[int]:
        """Indices an element maps to, without testing or setting them."""
        return indices_for(element, self._chain_for(seed), self._m)

    def add(self, element: bytes, seed: Optional[bytes] = None) -> None:
        """Set the k bits for an element."""
        for index in self.indices_for_element(element, seed):
            self._bits[index] = 1

    def verify_element(self, element: bytes, seed: Optional[bytes] = None) -> bool:
        """Check if an element is in this filter.

        Returns:
            True if element is PROBABLY in the filter
            False if element is DEFINITELY NOT in the filter
        """
        for index in self.indices_for_element(element, seed):
            if not self._bits[index]:
                return False
        return True

    def seed_matches(self, chain: Sequence[bytes]) -> bool:
        """Check whether a foreign hash chain is the one this filter uses."""
        return tuple(bytes(h) for h in chain) == self._chain

    @property
    def on_seed_mismatch(self) -> str:
        return self._on_seed_mismatch

    def check_foreign(
        self,
        foreign_bits: BitsLike,
        foreign_chain: Optional[Sequence[bytes]] = None
    ) -> bitarray:
        """Surface a seed or sizing mismatch with a peer's filter.

        A foreign bit array of another size, or built under a different
        seed, makes every membership answer meaningless. A foreign DistBF
        supplies its own chain when foreign_chain is not given.

        Raises:
            SeedMismatch: unless this filter was built with on_seed_mismatch='warn',
                in which case a warning is logged instead

        Returns:
            The foreign bit array
        """
        if foreign_chain is None and isinstance(foreign_bits, DistBF):
            foreign_chain = foreign_bits.chain
        bits = as_bits(foreign_bits)

        problem = None
        if len(bits) != self._m:
            problem = f"foreign bit array has {len(bits)} bits, ours has m={self._m}"
        elif foreign_chain is not None and not self.seed_matches(foreign_chain):
            problem = "foreign bit array was built from a different hash chain"
        if problem is None:
            return bits
        if self._on_seed_mismatch == 'warn':
            log.warning(f"dbf: {problem} (k={self._k}), results are unreliable")
            return bits
        raise SeedMismatch(problem)

    def _claims(self, element: bytes, bits: bitarray) -> bool:
        for index in self.indices_for_element(element):
            if not bit_is_set(bits, index):
                return False
        return True

    def verify_against(
        self,
        element: bytes,
        foreign_bits: BitsLike,
        foreign_chain: Optional[Sequence[bytes]] = None
    ) -> bool:
        """Check if a peer's bit array claims to contain an element.

        Uses this filter's own chain, so both peers must have agreed on the
        round seed and sizing. The foreign array must be m bits long; pass
        the peer's chain as foreign_chain (or pass the peer's DistBF) to
        have the seed checked as well.

        Args:
            element: Candidate element
            foreign_bits: Peer's bit array (or filter)
            foreign_chain: Peer's hash chain, when known

        Returns:
            True if the peer PROBABLY has the element
            False if the peer DEFINITELY does not
        """
        bits = self.check_foreign(foreign_bits, foreign_chain)
        return self._claims(element, bits)

    def select_missing(
        self,
        candidates: Sequence[bytes],
        foreign_bits: BitsLike,
        foreign_chain: Optional[Sequence[bytes]] = None
    ) -> list[bytes]:
        """Candidates the peer's bit array does not claim, in order."""
        bits = self.check_foreign(foreign_bits, foreign_chain)
        return [element for element in candidates if not self._claims(element, bits)]

    def proof(self, element: bytes) -> tuple[list[int], bool]:
        """Evidence for a membership answer.

        Returns:
            ([first unset index], False) for a non-member, or
            (all k indices, True) for a probable member
        """
        found = []
        for index in self.indices_for_element(element):
            if not self._bits[index]:
                return [index], False
            found.append(index)
        return found, True

    def set_indices(self, indices: Iterable[int]) -> None:
        """Set raw bit indices without hashing an element.

        All indices are checked before any bit is set.
        """
        indices = list(indices)
        for index in indices:
            if not 0 <= index < self._m:
                raise IndexOutOfRange(f"index {index} outside bit array of size {self._m}")
        for index in indices:
            self._bits[index] = 1

    def get_set_bit_indices(self) -> list[int]:
        """Indices of every set bit, ascending."""
        return list(self._bits.search(1))

    def count(self) -> int:
        """Number of set bits."""
        return self._bits.count(1)

    def with_bit_array(self, bits: bitarray) -> 'DistBF':
        """New filter with this sizing and chain, holding a peer's bits."""
        return DistBF(self._m, self._k, self._chain, bits.copy(), self._on_seed_mismatch)

    def to_bytes(self) -> bytes:
        """Encode to the transfer envelope."""
        from .codec import encode
        return encode(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'DistBF':
        """Decode from the transfer envelope."""
        from .codec import decode
        return decode(data)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DistBF):
            return NotImplemented
        return (
            self._m == other._m
            and self._k == other._k
            and self._chain == other._chain
            and self._bits == other._bits
        )

    def __repr__(self) -> str:
        return f"DistBF(m={self._m}, k={self._k}, set_bits={self.count()})"


def new_dbf(n: int, fpr: Optional[float], seed: bytes, on_seed_mismatch: str = 'raise') -> DistBF:
    """Build an empty filter sized for n elements at a false positive rate.

    Args:
        n: Expected number of elements
        fpr: Target false positive rate (None uses the configured default).
            Rates so small that k would exceed 256 are rejected.
        seed: Round seed both peers agreed on
        on_seed_mismatch: 'raise' or 'warn' when a peer's filter disagrees
            with this one's seed or sizing

    Returns:
        Empty DistBF with its hash chain derived from seed
    """
    if fpr is None:
        fpr = get_filter_config().false_positive_rate
    m, k = estimate_parameters(n, fpr)
    chain = derive_chain(seed, k)
    log.debug(f"new_dbf: n={n} fpr={fpr} -> m={m} k={k}")
    return DistBF(m, k, chain, on_seed_mismatch=on_seed_mismatch)


def new_for_peers(
    n1: int,
    n2: int,
    seed: bytes,
    fpr: Optional[float] = None,
    on_seed_mismatch: str = 'raise'
) -> DistBF:
    """Build an empty filter sized for the larger of two peers' element counts."""
    m, k = estimate_for_peers(n1, n2, fpr)
    log.debug(f"new_for_peers: n1={n1} n2={n2} -> m={m} k={k}")
    return DistBF(m, k, derive_chain(seed, k), on_seed_mismatch=on_seed_mismatch)
