"""
Blob object model.

Blobs store raw file content, or a symlink's target path, addressed by id.
"""

from ..integrity.framing import BLOB, frame_object
from ..integrity.hashing import ObjectId, compute_object_id


class Blob:
    """
    Immutable blob object containing raw data.

    Blobs are leaf objects - they contain no references.
    """

    kind = BLOB

    def __init__(self, data: bytes):
        self.data = bytes(data)

    def to_payload(self) -> bytes:
        return self.data

    def framed(self) -> bytes:
        """Return the header-prefixed bytes that are hashed and stored."""
        return frame_object(BLOB, self.data)

    @classmethod
    def from_payload(cls, payload: bytes) -> 'Blob':
        return cls(payload)

    def compute_id(self) -> ObjectId:
        """Compute content id of this blob."""
        return compute_object_id(self.framed())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Blob):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"Blob(size={len(self.data)}, id={self.compute_id().hex[:8]}...)"
