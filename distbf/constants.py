"""Constants for the distributed bloom filter.

Digest and envelope layout shared by hashing, mapping and the codec.
"""

# SHA-512/256 output
DIGEST_SIZE = 32  # bytes (256 bits)
DIGEST_ALGORITHM = 'sha512_256'

# Only the leading 8 bytes of a combined digest address the bit array
INDEX_BYTES = 8

# Chain entries are suffixed with a single byte, so k is capped at 256
MAX_HASHES = 256

# Round seeds derived from a peer key
ROUND_SEED_SIZE = 32  # bytes

# Default false positive rate for a sync round
DEFAULT_FPR = 0.1

# Envelope header: m (uint64), k (uint64), big-endian
HEADER_FORMAT = '>QQ'
PAYLOAD_LENGTH_FORMAT = '>I'
