"""Transfer envelope for a DistBF.

Layout (big-endian):
- m: uint64
- k: uint64
- chain: k x 32-byte digests, in derivation order
- payload length: uint32
- payload: bitarray.util.serialize() of the bit array
"""
import logging
import struct

from bitarray.util import deserialize, serialize

from . import constants
from .bloom import DistBF
from .errors import DecodeError, InvalidArgument

log = logging.getLogger(__name__)

_header = struct.Struct(constants.HEADER_FORMAT)
_payload_length = struct.Struct(constants.PAYLOAD_LENGTH_FORMAT)


def encode(dbf: DistBF) -> bytes:
    """Serialize m, k, the hash chain and the bit array into one envelope."""
    payload = serialize(dbf.bit_array)
    parts = [_header.pack(dbf.m, dbf.k)]
    parts.extend(dbf.chain)
    parts.append(_payload_length.pack(len(payload)))
    parts.append(payload)
    return b''.join(parts)


def decode(data: bytes) -> DistBF:
    """Rebuild a DistBF from an envelope.

    Raises:
        DecodeError: truncated, oversized or inconsistent input
    """
    data = bytes(data)
    offset = 0

    if len(data) < _header.size:
        raise DecodeError(f"envelope too short for header: {len(data)} bytes")
    m, k = _header.unpack_from(data, offset)
    offset += _header.size
    if m == 0 or k == 0:
        raise DecodeError(f"envelope has empty sizing: m={m} k={k}")
    if k > constants.MAX_HASHES:
        raise DecodeError(f"envelope hash count {k} exceeds {constants.MAX_HASHES}")

    chain_size = k * constants.DIGEST_SIZE
    if len(data) < offset + chain_size:
        raise DecodeError(f"envelope truncated in hash chain: need {chain_size} bytes")
    chain = [
        data[offset + i * constants.DIGEST_SIZE:offset + (i + 1) * constants.DIGEST_SIZE]
        for i in range(k)
    ]
    offset += chain_size

    if len(data) < offset + _payload_length.size:
        raise DecodeError("envelope truncated before payload length")
    (payload_size,) = _payload_length.unpack_from(data, offset)
    offset += _payload_length.size
    if len(data) != offset + payload_size:
        raise DecodeError(f"envelope payload is {len(data) - offset} bytes, header says {payload_size}")

    try:
        bits = deserialize(data[offset:])
    except (ValueError, TypeError) as e:
        raise DecodeError(f"invalid bit-array payload: {e}") from e
    if len(bits) != m:
        raise DecodeError(f"bit array has {len(bits)} bits, header says m={m}")

    try:
        dbf = DistBF(m, k, chain, bits)
    except InvalidArgument as e:
        raise DecodeError(str(e)) from e
    log.debug(f"decode: m={m} k={k} set_bits={dbf.count()}")
    return dbf
