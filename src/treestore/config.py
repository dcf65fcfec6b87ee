"""
Store configuration.

Values come from constructor arguments, falling back to environment
variables and then to defaults.
"""

import os
import zlib
from pathlib import Path
from typing import Optional

from .errors import InvalidInputError
from .integrity.compression import DEFAULT_MAX_BUFFER_SIZE

DEFAULT_STORE_DIR = '.git'

ENV_STORE_DIR = 'TREESTORE_DIR'
ENV_WORK_TREE = 'TREESTORE_WORK_TREE'
ENV_COMPRESSION_LEVEL = 'TREESTORE_COMPRESSION_LEVEL'


class StoreConfig:
    """
    Settings for one repository.

    Attributes:
        work_tree: directory being snapshotted
        store_dir_name: name of the metadata directory inside work_tree
        compression_level: zlib level used when writing objects
        max_buffer_size: upper bound for the decompression buffer
    """

    def __init__(
        self,
        work_tree: str | Path = '.',
        store_dir_name: str = DEFAULT_STORE_DIR,
        compression_level: int = zlib.Z_BEST_COMPRESSION,
        max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE,
    ):
        if not store_dir_name or '/' in store_dir_name or store_dir_name in ('.', '..'):
            raise InvalidInputError("Store directory must be a plain name", store_dir_name)
        if not 0 <= compression_level <= 9:
            raise InvalidInputError("Compression level must be 0-9", str(compression_level))

        self.work_tree = Path(work_tree).resolve()
        self.store_dir_name = store_dir_name
        self.compression_level = compression_level
        self.max_buffer_size = max_buffer_size

    @property
    def store_root(self) -> Path:
        return self.work_tree / self.store_dir_name

    @classmethod
    def from_env(
        cls,
        work_tree: Optional[str | Path] = None,
        store_dir_name: Optional[str] = None,
    ) -> 'StoreConfig':
        """Build a config, letting explicit arguments win over the environment."""
        level_text = os.environ.get(ENV_COMPRESSION_LEVEL)
        try:
            level = int(level_text) if level_text else zlib.Z_BEST_COMPRESSION
        except ValueError:
            raise InvalidInputError(f"{ENV_COMPRESSION_LEVEL} is not an integer", level_text)

        return cls(
            work_tree=work_tree or os.environ.get(ENV_WORK_TREE) or '.',
            store_dir_name=store_dir_name or os.environ.get(ENV_STORE_DIR) or DEFAULT_STORE_DIR,
            compression_level=level,
        )

    def __repr__(self) -> str:
        return (
            f"StoreConfig(work_tree={str(self.work_tree)!r}, "
            f"store_dir_name={self.store_dir_name!r})"
        )
