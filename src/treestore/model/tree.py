"""
Tree object model and its binary codec.

A tree payload is a concatenation of records with no delimiter between
them:

    <mode text> SP <name bytes> NUL <20-byte raw id>

Entries are ordered by strict ascending byte comparison of their names.
"""

import enum
from typing import Iterable, List, NamedTuple

from ..errors import CorruptTreeError, InvalidInputError, InvalidObjectError
from ..integrity.framing import BLOB, TREE, frame_object, unframe_object
from ..integrity.hashing import RAW_SIZE, ObjectId, compute_object_id


class FileMode(enum.Enum):
    """Entry classification, valued by its on-disk text."""

    REGULAR_FILE = b'100644'
    EXECUTABLE_FILE = b'100755'
    SYMLINK = b'120000'
    # No leading zero for directories.
    DIRECTORY = b'40000'

    @classmethod
    def from_text(cls, text: bytes) -> 'FileMode':
        try:
            return cls(bytes(text))
        except ValueError:
            raise CorruptTreeError(f"Unknown entry mode {bytes(text)!r}")

    @property
    def text(self) -> str:
        return self.value.decode('ascii')

    @property
    def object_kind(self) -> str:
        """Kind of the object this entry points at."""
        return TREE if self is FileMode.DIRECTORY else BLOB


class TreeEntry(NamedTuple):
    mode: FileMode
    name: bytes
    target: ObjectId

    @property
    def display_name(self) -> str:
        return self.name.decode('utf-8', errors='replace')


def validate_entry_name(name: bytes) -> None:
    """Raise InvalidInputError if name cannot appear in a tree."""
    if not name:
        raise InvalidInputError("Entry name is empty")
    if b'/' in name or b'\0' in name:
        raise InvalidInputError("Entry name contains '/' or NUL", repr(name))


class PayloadReader:
    """
    Cursor over a tree payload.

    Every read either returns a complete field or raises CorruptTreeError;
    the position only moves forward.
    """

    def __init__(self, payload: bytes):
        self._data = bytes(payload)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    def at_end(self) -> bool:
        return self._pos == len(self._data)

    def read_until(self, delimiter: bytes, field: str) -> bytes:
        """Read up to (not including) delimiter and step past it."""
        end = self._data.find(delimiter, self._pos)
        if end < 0:
            raise CorruptTreeError(f"Truncated entry: no terminator after {field}", self._pos)
        value = self._data[self._pos:end]
        self._pos = end + len(delimiter)
        return value

    def read_exact(self, size: int, field: str) -> bytes:
        remaining = len(self._data) - self._pos
        if remaining < size:
            raise CorruptTreeError(
                f"Truncated {field}: need {size} bytes, {remaining} left", self._pos
            )
        value = self._data[self._pos:self._pos + size]
        self._pos += size
        return value


def encode_tree_entries(entries: Iterable[TreeEntry]) -> bytes:
    """
    Encode entries, in the given order, as a tree payload.

    The result is not framed.
    """
    parts = []
    for entry in entries:
        parts.append(entry.mode.value)
        parts.append(b' ')
        parts.append(entry.name)
        parts.append(b'\0')
        parts.append(entry.target.raw)
    return b''.join(parts)


def decode_tree_payload(payload: bytes) -> List[TreeEntry]:
    """
    Decode a tree payload (framing already stripped) into entries.

    Decoding stops exactly at the end of the payload. A remainder that is
    not a whole entry raises CorruptTreeError.
    """
    reader = PayloadReader(payload)
    entries = []

    while not reader.at_end():
        start = reader.position
        mode = FileMode.from_text(reader.read_until(b' ', 'mode'))
        name = reader.read_until(b'\0', 'name')
        if not name:
            raise CorruptTreeError("Empty entry name", start)
        target = ObjectId(reader.read_exact(RAW_SIZE, 'object id'))
        entries.append(TreeEntry(mode, name, target))

    return entries


class Tree:
    """
    Immutable tree object: a sorted list of named entries.

    Each entry points at a blob (file or symlink) or a subtree.
    """

    kind = TREE

    def __init__(self, entries: Iterable[TreeEntry]):
        """
        Create a tree.

        Entries are sorted by name bytes. Raises InvalidInputError on an
        invalid or duplicate name.
        """
        entries = sorted(entries, key=lambda e: e.name)
        for i, entry in enumerate(entries):
            validate_entry_name(entry.name)
            if i and entries[i - 1].name == entry.name:
                raise InvalidInputError("Duplicate entry name", entry.display_name)
        self.entries = tuple(entries)

    def to_payload(self) -> bytes:
        return encode_tree_entries(self.entries)

    def framed(self) -> bytes:
        """Return the header-prefixed bytes that are hashed and stored."""
        return frame_object(TREE, self.to_payload())

    @classmethod
    def from_payload(cls, payload: bytes) -> 'Tree':
        """
        Reconstruct tree from a stored payload.

        Stored order is kept as-is. Raises CorruptTreeError if entries are
        malformed.
        """
        entries = decode_tree_payload(payload)
        tree = cls.__new__(cls)
        tree.entries = tuple(entries)
        return tree

    @classmethod
    def from_framed(cls, framed: bytes) -> 'Tree':
        kind, payload = unframe_object(framed)
        if kind != TREE:
            raise InvalidObjectError(f"Expected tree, found {kind}")
        return cls.from_payload(payload)

    def compute_id(self) -> ObjectId:
        """Compute content id of this tree."""
        return compute_object_id(self.framed())

    def names(self) -> List[str]:
        return [entry.display_name for entry in self.entries]

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tree):
            return NotImplemented
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"Tree(entries={len(self.entries)}, id={self.compute_id().hex[:8]}...)"
