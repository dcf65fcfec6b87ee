"""
Content-addressed hashing using SHA-1.

Provides deterministic object ids for all object kinds.
"""

import hashlib
import string

from ..errors import InvalidInputError
from .framing import frame_object

RAW_SIZE = 20
HEX_SIZE = 40


class ObjectId:
    """
    A 160-bit content address.

    Exposed both as raw 20 bytes (embedded in tree entries) and as
    40 lowercase hex characters (filesystem paths and user output).
    """

    __slots__ = ('_raw',)

    def __init__(self, raw: bytes):
        if not isinstance(raw, (bytes, bytearray)) or len(raw) != RAW_SIZE:
            raise InvalidInputError(
                f"Object id must be {RAW_SIZE} raw bytes", repr(raw)
            )
        self._raw = bytes(raw)

    @classmethod
    def from_hex(cls, text: str) -> 'ObjectId':
        """Parse a 40-character hex id (either case)."""
        text = text.strip()
        if len(text) != HEX_SIZE or not all(c in string.hexdigits for c in text):
            raise InvalidInputError(
                f"Object id must be {HEX_SIZE} hex characters", text
            )
        return cls(bytes.fromhex(text))

    @property
    def raw(self) -> bytes:
        return self._raw

    @property
    def hex(self) -> str:
        return self._raw.hex()

    def __eq__(self, other) -> bool:
        if not isinstance(other, ObjectId):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __str__(self) -> str:
        return self.hex

    def __repr__(self) -> str:
        return f"ObjectId({self.hex})"


def compute_object_id(framed: bytes) -> ObjectId:
    """
    Compute the id of an already framed buffer.

    Hashes the exact bytes given, header included.
    """
    return ObjectId(hashlib.sha1(framed).digest())


def hash_object(kind: str, payload: bytes) -> ObjectId:
    """Frame a payload and compute its id."""
    return compute_object_id(frame_object(kind, payload))


def get_hash_prefix(hex_id: str, prefix_length: int = 2) -> str:
    """
    Get prefix of a hex id for directory sharding.

    Default is 2 characters, creating 256 subdirectories.
    """
    if len(hex_id) < prefix_length:
        raise ValueError(f"Id too short for prefix length {prefix_length}")
    return hex_id[:prefix_length]
