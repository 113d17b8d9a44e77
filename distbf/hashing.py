"""Seeded hash chain and digest helpers.

A single SHA-512/256 digest stands in for k hash functions:
- chain[i] = SHA-512/256(seed || i), with i as one byte
- an element's digest is XORed into every chain entry to get k outputs
- round seeds come from PyNaCl (random) or BLAKE2b(peer_pk || round_id)
"""
import hashlib

import nacl.encoding
import nacl.hash
import nacl.utils

from . import constants
from .errors import InvalidArgument


def digest(data: bytes) -> bytes:
    """SHA-512/256 of data (32 bytes)."""
    return hashlib.new(constants.DIGEST_ALGORITHM, bytes(data)).digest()


def derive_chain(seed: bytes, k: int) -> tuple[bytes, ...]:
    """Derive k digests from a seed.

    Args:
        seed: Round seed / nonce agreed by both peers
        k: Number of hash functions (1..256)

    Returns:
        Tuple of k 32-byte digests in derivation order
    """
    if isinstance(k, bool) or not isinstance(k, int) or not 0 < k <= constants.MAX_HASHES:
        raise InvalidArgument(f"hash count must be in [1, {constants.MAX_HASHES}], got {k!r}")
    seed = bytes(seed)
    return tuple(digest(seed + bytes([i])) for i in range(k))


def combine(a: bytes, b: bytes) -> bytes:
    """XOR two digests byte by byte."""
    if len(a) != len(b):
        raise InvalidArgument(f"cannot combine digests of length {len(a)} and {len(b)}")
    return bytes(x ^ y for x, y in zip(a, b))


def generate_seed() -> bytes:
    """Generate a random 32-byte round seed."""
    return nacl.utils.random(constants.ROUND_SEED_SIZE)


def derive_round_seed(peer_pk: bytes, round_id: int) -> bytes:
    """Derive a round seed from a peer public key and round number.

    Both peers compute the same seed for a round without sending it.

    Args:
        peer_pk: Public key of the peer whose filter is being built
        round_id: Synchronization round number

    Returns:
        32-byte seed: BLAKE2b-256(peer_pk || round_id)
    """
    if round_id < 0:
        raise InvalidArgument(f"round id must be non-negative, got {round_id}")
    round_id_bytes = round_id.to_bytes(8, byteorder='big')
    return nacl.hash.blake2b(
        peer_pk + round_id_bytes,
        digest_size=constants.ROUND_SEED_SIZE,
        encoder=nacl.encoding.RawEncoder
    )
