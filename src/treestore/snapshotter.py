"""
Directory snapshots.

Walks a directory recursively, storing every file and symlink as a blob
and every directory as a tree, and returns the id of the top tree.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Optional

from .errors import InvalidInputError, StorageError
from .integrity.framing import BLOB, TREE
from .integrity.hashing import ObjectId, hash_object
from .model.tree import FileMode, Tree, TreeEntry
from .storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


def mode_for_file(st_mode: int) -> FileMode:
    """Executable if the owner-execute bit is set."""
    if st_mode & stat.S_IXUSR:
        return FileMode.EXECUTABLE_FILE
    return FileMode.REGULAR_FILE


class Snapshotter:
    """
    Turns a directory into blob and tree objects.

    Symlinks are stored as blobs holding their target path and are never
    followed, so the walk cannot loop. The store's own metadata directory
    is never included.
    """

    def __init__(self, object_store: ObjectStore, store_root: Optional[Path] = None):
        """
        Args:
            object_store: where blobs and trees are written
            store_root: metadata directory to leave out of every snapshot
        """
        self.object_store = object_store
        self.store_root = Path(store_root).resolve() if store_root else None

    def snapshot(self, directory: str | Path) -> ObjectId:
        """
        Snapshot a directory and return its tree id.

        Raises InvalidInputError if directory does not exist or is not
        a directory.
        """
        directory = Path(directory)
        try:
            st = directory.lstat()
        except FileNotFoundError:
            raise InvalidInputError("Path does not exist", str(directory))
        except OSError as e:
            raise StorageError("stat", str(directory), e)

        if not stat.S_ISDIR(st.st_mode):
            raise InvalidInputError("Not a directory", str(directory))

        return self._snapshot_directory(directory)

    def snapshot_file(self, path: str | Path, write: bool = True) -> TreeEntry:
        """
        Store a single file or symlink as a blob.

        Returns the entry that would describe it inside a tree. With
        write=False the id is computed but nothing is stored.
        Raises InvalidInputError if path is missing or is not a regular
        file or symlink.
        """
        path = Path(path)
        try:
            st = path.lstat()
        except FileNotFoundError:
            raise InvalidInputError("Path does not exist", str(path))
        except OSError as e:
            raise StorageError("stat", str(path), e)

        entry = self._snapshot_leaf(path, st, write)
        if entry is None:
            raise InvalidInputError("Not a regular file or symlink", str(path))
        return entry

    def _is_store_dir(self, path: Path) -> bool:
        return self.store_root is not None and path.resolve() == self.store_root

    def _snapshot_directory(self, directory: Path) -> ObjectId:
        entries = []

        try:
            with os.scandir(directory) as it:
                children = list(it)
        except OSError as e:
            raise StorageError("list_directory", str(directory), e)

        for child in children:
            path = Path(child.path)
            try:
                st = child.stat(follow_symlinks=False)
            except OSError as e:
                raise StorageError("stat", str(path), e)

            if stat.S_ISDIR(st.st_mode):
                if self._is_store_dir(path):
                    logger.debug("Skipping metadata directory %s", path)
                    continue
                entry = TreeEntry(FileMode.DIRECTORY, os.fsencode(child.name),
                                  self._snapshot_directory(path))
            else:
                entry = self._snapshot_leaf(path, st)
                if entry is None:
                    logger.debug("Skipping special file %s", path)
                    continue

            entries.append(entry)

        tree = Tree(entries)
        tree_id = self.object_store.put_object(TREE, tree.to_payload())
        logger.debug("Tree %s for %s (%d entries)", tree_id.hex, directory, len(tree))
        return tree_id

    def _snapshot_leaf(self, path: Path, st: os.stat_result, write: bool = True) -> Optional[TreeEntry]:
        """Store a regular file or symlink; None for any other kind."""
        if stat.S_ISLNK(st.st_mode):
            try:
                payload = os.fsencode(os.readlink(path))
            except OSError as e:
                raise StorageError("readlink", str(path), e)
            mode = FileMode.SYMLINK

        elif stat.S_ISREG(st.st_mode):
            try:
                payload = path.read_bytes()
            except OSError as e:
                raise StorageError("read_file", str(path), e)
            mode = mode_for_file(st.st_mode)

        else:
            return None

        if write:
            blob_id = self.object_store.put_object(BLOB, payload)
        else:
            blob_id = hash_object(BLOB, payload)
        return TreeEntry(mode, os.fsencode(path.name), blob_id)
