"""
Object Store Engine.

Main entry point coordinating all components.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from .config import StoreConfig
from .integrity.framing import BLOB, TREE
from .integrity.hashing import ObjectId
from .integrity.verification import verify_object_integrity, verify_tree_recursive
from .model.blob import Blob
from .model.tree import Tree, TreeEntry
from .snapshotter import Snapshotter
from .storage.layout import StorageLayout
from .storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


def parse_object_id(value: str | ObjectId) -> ObjectId:
    """Accept an ObjectId or its hex form."""
    if isinstance(value, ObjectId):
        return value
    return ObjectId.from_hex(value)


class ObjectStoreEngine:
    """
    Main engine for object store operations.

    This is the primary interface for:
    - Writing files as blobs
    - Reading objects back by id
    - Listing trees
    - Snapshotting directories into trees
    - Verifying stored objects
    """

    def __init__(self, config: Optional[StoreConfig] = None):
        """
        Initialize engine for the repository described by config.

        Args:
            config: repository settings (defaults to the current directory)
        """
        self.config = config or StoreConfig()
        self.layout = StorageLayout(self.config.store_root)
        self.object_store = ObjectStore(
            self.layout,
            compression_level=self.config.compression_level,
            max_buffer_size=self.config.max_buffer_size,
        )
        self.snapshotter = Snapshotter(self.object_store, self.layout.store_root)

    def initialize(self) -> bool:
        """
        Initialize the store.

        Creates the metadata directory, objects/, refs/ and HEAD.
        Safe to call multiple times (idempotent).
        """
        created = self.layout.initialize()
        logger.debug("Initialized store at %s", self.layout.store_root)
        return created

    # ========== Writing ==========

    def hash_file(self, path: str | Path, write: bool = True) -> ObjectId:
        """
        Store a file (or symlink) as a blob and return its id.

        Args:
            path: file to hash; relative paths resolve against the work tree
            write: if False, only compute the id

        Raises InvalidInputError if the path is missing or not a file.
        """
        return self.snapshotter.snapshot_file(self._resolve(path), write=write).target

    def put_blob(self, data: bytes) -> ObjectId:
        """Store raw bytes as a blob and return its id."""
        return self.object_store.put_object(BLOB, data)

    def put_tree(self, entries: List[TreeEntry]) -> ObjectId:
        """Store a tree built from entries (sorted on the way in)."""
        return self.object_store.put_object(TREE, Tree(entries).to_payload())

    def write_tree(self, directory: Optional[str | Path] = None) -> ObjectId:
        """
        Snapshot a directory and return its tree id.

        Defaults to the work tree root.
        """
        directory = self._resolve(directory) if directory is not None else self.config.work_tree
        tree_id = self.snapshotter.snapshot(directory)
        logger.info("Snapshot of %s is %s", directory, tree_id.hex)
        return tree_id

    # ========== Reading ==========

    def cat_object(self, object_id: str | ObjectId) -> bytes:
        """Return the payload of any object, header stripped."""
        _, payload = self.object_store.get_object(parse_object_id(object_id))
        return payload

    def object_type(self, object_id: str | ObjectId) -> str:
        kind, _ = self.object_store.get_object(parse_object_id(object_id))
        return kind

    def object_size(self, object_id: str | ObjectId) -> int:
        _, payload = self.object_store.get_object(parse_object_id(object_id))
        return len(payload)

    def get_blob(self, object_id: str | ObjectId) -> Blob:
        """Retrieve a blob by id."""
        payload = self.object_store.get_typed_object(parse_object_id(object_id), BLOB)
        return Blob.from_payload(payload)

    def get_tree(self, object_id: str | ObjectId) -> Tree:
        """Retrieve a tree by id."""
        payload = self.object_store.get_typed_object(parse_object_id(object_id), TREE)
        return Tree.from_payload(payload)

    def list_tree(self, object_id: str | ObjectId) -> List[TreeEntry]:
        """Return the entries of a tree in stored order."""
        return list(self.get_tree(object_id).entries)

    def list_tree_names(self, object_id: str | ObjectId) -> List[str]:
        """Return the child names of a tree in stored order."""
        return self.get_tree(object_id).names()

    def has_object(self, object_id: str | ObjectId) -> bool:
        """Check if an object exists."""
        return self.object_store.has_object(parse_object_id(object_id))

    def list_all_objects(self) -> List[ObjectId]:
        """List all object ids in store."""
        return self.object_store.list_all_objects()

    # ========== Integrity Verification ==========

    def verify_object(self, object_id: str | ObjectId) -> bool:
        """
        Verify an object's integrity.

        Returns True if valid.
        Raises ObjectCorruptedError if corrupted.
        """
        object_id = parse_object_id(object_id)
        verify_object_integrity(self.object_store.get_framed(object_id), object_id)
        return True

    def verify_tree(self, object_id: str | ObjectId) -> Dict[str, object]:
        """
        Verify a tree and everything reachable from it.

        Returns dict with:
            - valid: bool
            - errors: list of error messages
        """
        is_valid, errors = verify_tree_recursive(
            parse_object_id(object_id),
            load_func=self.object_store.get_framed,
            exists_func=self.object_store.has_object,
        )
        return {
            'valid': is_valid,
            'errors': errors,
        }

    def _resolve(self, path: str | Path) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = self.config.work_tree / path
        return path
