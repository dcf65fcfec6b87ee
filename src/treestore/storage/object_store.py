"""
Content-addressed object storage.

Provides immutable, zlib-compressed object files addressed by SHA-1 id.
"""

import logging
import os
import tempfile
import zlib
from pathlib import Path
from typing import Tuple

from ..errors import (
    CorruptDataError,
    InvalidObjectError,
    ObjectCorruptedError,
    ObjectNotFoundError,
    StorageError,
)
from ..integrity import compression
from ..integrity.framing import frame_object, unframe_object
from ..integrity.hashing import ObjectId, compute_object_id
from .layout import StorageLayout

logger = logging.getLogger(__name__)


class ObjectStore:
    """
    Content-addressed object store with immutable objects.

    Objects are stored by the id of their framed content.
    Once written, objects never change.
    """

    def __init__(
        self,
        layout: StorageLayout,
        compression_level: int = zlib.Z_BEST_COMPRESSION,
        max_buffer_size: int = compression.DEFAULT_MAX_BUFFER_SIZE,
    ):
        """Initialize object store with given layout."""
        self.layout = layout
        self.compression_level = compression_level
        self.max_buffer_size = max_buffer_size

    # ========== Raw object files ==========

    def write(self, object_id: ObjectId, compressed: bytes) -> bool:
        """
        Write compressed bytes as the object file for object_id.

        If the file already exists the write is skipped: same id means
        same content. Returns True if a new file was written.
        """
        obj_path = self.layout.get_object_path(object_id)
        if obj_path.exists():
            logger.debug("Object %s already present, skipping write", object_id.hex)
            return False

        self.layout.ensure_object_directory(object_id)
        self._write_object_atomic(obj_path, compressed)
        logger.debug("Wrote object %s (%d bytes)", object_id.hex, len(compressed))
        return True

    def read(self, object_id: ObjectId) -> bytes:
        """
        Read the still-compressed bytes of an object.

        Raises ObjectNotFoundError if the file is absent or unreadable.
        """
        obj_path = self.layout.get_object_path(object_id)
        try:
            return obj_path.read_bytes()
        except OSError as e:
            logger.debug("Cannot read %s: %s", obj_path, e)
            raise ObjectNotFoundError(object_id.hex)

    # ========== Framed objects ==========

    def put_object(self, kind: str, payload: bytes) -> ObjectId:
        """
        Store a payload as an object of the given kind and return its id.

        The payload is framed, hashed, compressed and written.
        """
        framed = frame_object(kind, payload)
        object_id = compute_object_id(framed)
        if not self.has_object(object_id):
            self.write(object_id, compression.compress(framed, self.compression_level))
        return object_id

    def get_framed(self, object_id: ObjectId) -> bytes:
        """Read and decompress an object, header included."""
        data = self.read(object_id)
        try:
            return compression.decompress(
                data, hint_size=len(data) * 2, max_buffer_size=self.max_buffer_size
            )
        except CorruptDataError as e:
            raise CorruptDataError(e.reason, object_id.hex) from e

    def get_object(self, object_id: ObjectId, verify: bool = False) -> Tuple[str, bytes]:
        """
        Retrieve an object by its id as (kind, payload).

        If verify=True, re-hashes the content before returning.

        Raises ObjectNotFoundError if object doesn't exist.
        Raises CorruptDataError if the stream cannot be decompressed.
        Raises InvalidObjectError if the header is malformed.
        Raises ObjectCorruptedError if verification fails.
        """
        framed = self.get_framed(object_id)

        if verify:
            actual = compute_object_id(framed)
            if actual != object_id:
                raise ObjectCorruptedError(object_id.hex, actual.hex)

        return unframe_object(framed, object_id.hex)

    def get_typed_object(self, object_id: ObjectId, kind: str, verify: bool = False) -> bytes:
        """
        Retrieve the payload of an object that must be of the given kind.

        Raises InvalidObjectError if the stored kind differs.
        """
        actual_kind, payload = self.get_object(object_id, verify=verify)
        if actual_kind != kind:
            raise InvalidObjectError(f"Expected {kind}, found {actual_kind}", object_id.hex)
        return payload

    def has_object(self, object_id: ObjectId) -> bool:
        """Check if an object exists in the store."""
        return self.layout.object_exists(object_id)

    def list_all_objects(self) -> list[ObjectId]:
        """List all object ids in the store."""
        return self.layout.list_all_objects()

    def _write_object_atomic(self, path: Path, data: bytes) -> None:
        """
        Write object file atomically.

        Uses temp file + rename for atomicity.
        """
        fd = None
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(dir=str(path.parent), prefix='.tmp_')

            with os.fdopen(fd, 'wb') as f:
                fd = None
                f.write(data)

            os.replace(temp_path, path)
            temp_path = None

        except OSError as e:
            if fd is not None:
                os.close(fd)
            raise StorageError("write_file", str(path), e)

        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)
