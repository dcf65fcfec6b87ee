"""
Test the tree binary format.

Verifies encoding, exact-length decoding and rejection of malformed
payloads.
"""

import pytest

from treestore import (
    CorruptTreeError,
    FileMode,
    InvalidInputError,
    ObjectId,
    Tree,
    TreeEntry,
)
from treestore.integrity.framing import TREE
from treestore.integrity.hashing import hash_object
from treestore.model.tree import PayloadReader, decode_tree_payload, encode_tree_entries

HELLO_BLOB_ID = ObjectId.from_hex('3b18e512dba79e4c8300dd08aeb37f8e728b8dad')
EMPTY_TREE_ID = ObjectId.from_hex('4b825dc642cb6eb9a060e54bf8d69288fbee4904')


def make_entries():
    return [
        TreeEntry(FileMode.REGULAR_FILE, b"a.txt", HELLO_BLOB_ID),
        TreeEntry(FileMode.EXECUTABLE_FILE, b"build.sh", hash_object('blob', b"#!/bin/sh\n")),
        TreeEntry(FileMode.SYMLINK, b"link", hash_object('blob', b"a.txt")),
        TreeEntry(FileMode.DIRECTORY, b"subdir", EMPTY_TREE_ID),
    ]


class TestEncode:
    """Test tree payload encoding."""

    def test_single_entry_layout(self):
        payload = encode_tree_entries([TreeEntry(FileMode.REGULAR_FILE, b"a.txt", HELLO_BLOB_ID)])
        assert payload == b"100644 a.txt\0" + HELLO_BLOB_ID.raw

    def test_directory_mode_has_no_leading_zero(self):
        payload = encode_tree_entries([TreeEntry(FileMode.DIRECTORY, b"sub", EMPTY_TREE_ID)])
        assert payload.startswith(b"40000 sub\0")

    @pytest.mark.parametrize("mode,text", [
        (FileMode.REGULAR_FILE, b"100644"),
        (FileMode.EXECUTABLE_FILE, b"100755"),
        (FileMode.SYMLINK, b"120000"),
        (FileMode.DIRECTORY, b"40000"),
    ])
    def test_mode_text(self, mode, text):
        assert mode.value == text

    def test_empty_sequence(self):
        assert encode_tree_entries([]) == b""

    def test_entries_concatenated_without_delimiter(self):
        entries = make_entries()
        payload = encode_tree_entries(entries)
        expected_length = sum(len(e.mode.value) + 1 + len(e.name) + 1 + 20 for e in entries)
        assert len(payload) == expected_length


class TestDecode:
    """Test tree payload decoding."""

    def test_round_trip(self):
        entries = make_entries()
        assert decode_tree_payload(encode_tree_entries(entries)) == entries

    def test_empty_payload(self):
        assert decode_tree_payload(b"") == []

    def test_name_with_space(self):
        entries = [TreeEntry(FileMode.REGULAR_FILE, b"my file.txt", HELLO_BLOB_ID)]
        assert decode_tree_payload(encode_tree_entries(entries)) == entries

    def test_raw_id_containing_delimiter_bytes(self):
        """Ids are read by length, so NUL and space bytes inside them are fine."""
        odd_id = ObjectId(b"\0 \0 " * 5)
        entries = [
            TreeEntry(FileMode.REGULAR_FILE, b"a", odd_id),
            TreeEntry(FileMode.REGULAR_FILE, b"b", odd_id),
        ]
        assert decode_tree_payload(encode_tree_entries(entries)) == entries

    def test_truncated_id(self):
        payload = encode_tree_entries(make_entries())
        with pytest.raises(CorruptTreeError):
            decode_tree_payload(payload[:-1])

    def test_one_trailing_byte(self):
        payload = encode_tree_entries(make_entries())
        with pytest.raises(CorruptTreeError):
            decode_tree_payload(payload + b"1")

    def test_trailing_partial_entry(self):
        payload = encode_tree_entries(make_entries())
        with pytest.raises(CorruptTreeError):
            decode_tree_payload(payload + b"100644 tail\0" + b"\x01" * 5)

    def test_missing_name_terminator(self):
        with pytest.raises(CorruptTreeError):
            decode_tree_payload(b"100644 a.txt")

    def test_unknown_mode(self):
        with pytest.raises(CorruptTreeError):
            decode_tree_payload(b"100600 a.txt\0" + HELLO_BLOB_ID.raw)

    def test_empty_name(self):
        with pytest.raises(CorruptTreeError):
            decode_tree_payload(b"100644 \0" + HELLO_BLOB_ID.raw)

    def test_error_reports_offset(self):
        payload = encode_tree_entries(make_entries()[:1])
        with pytest.raises(CorruptTreeError) as excinfo:
            decode_tree_payload(payload + b"100644 x\0abc")
        assert excinfo.value.offset == len(payload) + len(b"100644 x\0")


class TestPayloadReader:
    """Test the cursor used by the decoder."""

    def test_reads_advance_position(self):
        reader = PayloadReader(b"abc def\0xyz")
        assert reader.read_until(b" ", "mode") == b"abc"
        assert reader.position == 4
        assert reader.read_until(b"\0", "name") == b"def"
        assert reader.read_exact(3, "id") == b"xyz"
        assert reader.at_end()

    def test_short_read_does_not_move(self):
        reader = PayloadReader(b"ab")
        with pytest.raises(CorruptTreeError):
            reader.read_exact(3, "id")
        assert reader.position == 0


class TestTreeModel:
    """Test the Tree object."""

    def test_entries_sorted_bytewise(self):
        names = [b"b.txt", b"a.txt", b"B", b"a-b", b"a.b", b"a"]
        tree = Tree(TreeEntry(FileMode.REGULAR_FILE, n, HELLO_BLOB_ID) for n in names)
        assert [e.name for e in tree] == [b"B", b"a", b"a-b", b"a.b", b"a.txt", b"b.txt"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(InvalidInputError):
            Tree([
                TreeEntry(FileMode.REGULAR_FILE, b"a", HELLO_BLOB_ID),
                TreeEntry(FileMode.DIRECTORY, b"a", EMPTY_TREE_ID),
            ])

    @pytest.mark.parametrize("name", [b"", b"a/b", b"a\0b"])
    def test_invalid_names_rejected(self, name):
        with pytest.raises(InvalidInputError):
            Tree([TreeEntry(FileMode.REGULAR_FILE, name, HELLO_BLOB_ID)])

    def test_payload_round_trip(self):
        tree = Tree(make_entries())
        assert Tree.from_payload(tree.to_payload()) == tree

    def test_framed_round_trip(self):
        tree = Tree(make_entries())
        assert tree.framed().startswith(b"tree %d\0" % len(tree.to_payload()))
        assert Tree.from_framed(tree.framed()) == tree

    def test_from_framed_rejects_blob(self):
        from treestore import InvalidObjectError

        with pytest.raises(InvalidObjectError):
            Tree.from_framed(b"blob 0\0")

    def test_names(self):
        tree = Tree(make_entries())
        assert tree.names() == ["a.txt", "build.sh", "link", "subdir"]

    def test_id_matches_framed_hash(self):
        tree = Tree(make_entries())
        assert tree.compute_id() == hash_object(TREE, tree.to_payload())

    def test_object_kind(self):
        assert FileMode.DIRECTORY.object_kind == "tree"
        assert FileMode.SYMLINK.object_kind == "blob"
