"""
Object framing for deterministic hashing.

A framed buffer is the exact byte sequence that gets hashed and compressed:

    <kind> SP <decimal payload length> NUL <payload>

The length counts only the payload, never the header.
"""

from typing import Tuple

from ..errors import InvalidObjectError

BLOB = 'blob'
TREE = 'tree'

OBJECT_KINDS = (BLOB, TREE)


def frame_object(kind: str, payload: bytes) -> bytes:
    """
    Prefix a payload with its kind tag and length.

    Same (kind, payload) always produces the same bytes.
    """
    if kind not in OBJECT_KINDS:
        raise InvalidObjectError(f"Unknown object kind: {kind!r}")
    header = f"{kind} {len(payload)}\0".encode('ascii')
    return header + payload


def unframe_object(framed: bytes, object_id: str = None) -> Tuple[str, bytes]:
    """
    Split a framed buffer into (kind, payload).

    Raises InvalidObjectError if the header is malformed or the declared
    length disagrees with the payload actually present.
    """
    nul = framed.find(b'\0')
    if nul < 0:
        raise InvalidObjectError("Missing header terminator", object_id)

    header = framed[:nul]
    payload = framed[nul + 1:]

    kind_bytes, sep, size_bytes = header.partition(b' ')
    if not sep:
        raise InvalidObjectError(f"Malformed header: {header!r}", object_id)

    kind = kind_bytes.decode('ascii', errors='replace')
    if kind not in OBJECT_KINDS:
        raise InvalidObjectError(f"Unknown object kind: {kind!r}", object_id)

    if not size_bytes.isdigit():
        raise InvalidObjectError(f"Malformed size field: {size_bytes!r}", object_id)

    size = int(size_bytes)
    if size != len(payload):
        raise InvalidObjectError(
            f"Size mismatch: header says {size}, payload has {len(payload)}",
            object_id,
        )

    return kind, payload
