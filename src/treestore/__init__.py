"""
treestore - Content-addressed blob and tree object storage.

This package provides:
- Immutable, zlib-compressed objects addressed by SHA-1 id
- A binary tree format of sorted (mode, name, id) entries
- Recursive directory snapshots
- Integrity verification

Main entry point:
    ObjectStoreEngine - primary interface for all operations

Example usage:
    from treestore import ObjectStoreEngine, StoreConfig

    engine = ObjectStoreEngine(StoreConfig('/path/to/work/tree'))
    engine.initialize()

    blob_id = engine.hash_file('README.md')
    tree_id = engine.write_tree()

    print(engine.list_tree_names(tree_id))
"""

from .config import StoreConfig
from .engine import ObjectStoreEngine
from .integrity.hashing import ObjectId
from .model.blob import Blob
from .model.tree import FileMode, Tree, TreeEntry
from .snapshotter import Snapshotter
from .errors import (
    ObjectStoreError,
    ObjectNotFoundError,
    StorageError,
    CorruptDataError,
    CorruptTreeError,
    InvalidInputError,
    InvalidObjectError,
    ObjectCorruptedError,
)

__version__ = '0.1.0'

__all__ = [
    'ObjectStoreEngine',
    'StoreConfig',
    'ObjectId',
    'Blob',
    'FileMode',
    'Tree',
    'TreeEntry',
    'Snapshotter',
    'ObjectStoreError',
    'ObjectNotFoundError',
    'StorageError',
    'CorruptDataError',
    'CorruptTreeError',
    'InvalidInputError',
    'InvalidObjectError',
    'ObjectCorruptedError',
]
