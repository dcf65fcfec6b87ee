"""
Filesystem layout for object storage.

Implements content-addressed storage with directory sharding.
"""

from pathlib import Path

from ..errors import StorageError
from ..integrity.hashing import HEX_SIZE, ObjectId, get_hash_prefix

DEFAULT_HEAD = 'ref: refs/heads/main\n'


class StorageLayout:
    """
    Manages filesystem layout for content-addressed objects.

    Layout:
        store_root/
            objects/
                <id[0:2]>/
                    <id[2:40]>   # compressed object file
            refs/
            HEAD                 # symbolic pointer, written once
    """

    def __init__(self, store_root: Path):
        """Initialize storage layout at given root."""
        self.store_root = Path(store_root).resolve()
        self.objects_dir = self.store_root / "objects"
        self.refs_dir = self.store_root / "refs"
        self.head_file = self.store_root / "HEAD"

    def initialize(self) -> bool:
        """
        Initialize storage directory structure.

        Creates all necessary directories and the HEAD file.
        Idempotent - an existing HEAD is left alone.
        Returns True if HEAD was newly written.
        """
        try:
            self.store_root.mkdir(parents=True, exist_ok=True)
            self.objects_dir.mkdir(exist_ok=True)
            self.refs_dir.mkdir(exist_ok=True)
            if self.head_file.exists():
                return False
            self.head_file.write_text(DEFAULT_HEAD, encoding='utf-8')
            return True
        except OSError as e:
            raise StorageError("initialize", str(self.store_root), e)

    def get_object_path(self, object_id: ObjectId) -> Path:
        """
        Get filesystem path for an object by its id.

        Uses 2-character prefix for directory sharding.
        """
        hex_id = object_id.hex
        return self.objects_dir / get_hash_prefix(hex_id, 2) / hex_id[2:]

    def ensure_object_directory(self, object_id: ObjectId) -> None:
        """Ensure the shard directory for an object exists."""
        prefix_dir = self.get_object_path(object_id).parent
        try:
            prefix_dir.mkdir(exist_ok=True)
        except OSError as e:
            raise StorageError("mkdir", str(prefix_dir), e)

    def list_all_objects(self) -> list[ObjectId]:
        """
        List all object ids in the store.

        Scans all prefix directories; files that do not form a valid id
        are ignored.
        """
        objects = []

        if not self.objects_dir.exists():
            return objects

        try:
            for prefix_dir in sorted(self.objects_dir.iterdir()):
                if not prefix_dir.is_dir() or len(prefix_dir.name) != 2:
                    continue

                for obj_file in sorted(prefix_dir.iterdir()):
                    hex_id = prefix_dir.name + obj_file.name
                    if obj_file.is_file() and len(hex_id) == HEX_SIZE:
                        try:
                            objects.append(ObjectId(bytes.fromhex(hex_id)))
                        except ValueError:
                            continue

        except OSError as e:
            raise StorageError("list_objects", str(self.objects_dir), e)

        return objects

    def object_exists(self, object_id: ObjectId) -> bool:
        """Check if an object exists in storage."""
        return self.get_object_path(object_id).is_file()
