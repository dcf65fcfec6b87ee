"""
Integrity verification for objects and trees.

Provides tamper detection and recursive reference checks.
"""

from typing import Callable, Dict, List, Optional, Set, Tuple

from ..errors import ObjectCorruptedError, ObjectStoreError
from ..model.tree import decode_tree_payload
from .framing import TREE, unframe_object
from .hashing import ObjectId, compute_object_id


def verify_object_integrity(framed: bytes, expected: ObjectId) -> None:
    """
    Verify that a decompressed object matches its id.

    Raises ObjectCorruptedError if mismatch detected.
    """
    actual = compute_object_id(framed)
    if actual != expected:
        raise ObjectCorruptedError(expected.hex, actual.hex)


def verify_tree_recursive(
    tree_id: ObjectId,
    load_func: Callable[[ObjectId], bytes],
    exists_func: Callable[[ObjectId], bool],
    visited: Optional[Set[ObjectId]] = None,
) -> Tuple[bool, List[str]]:
    """
    Recursively verify a tree and everything it references.

    load_func: callable returning the decompressed framed bytes of an id
    exists_func: callable that checks if an object exists by id
    visited: ids already checked (shared subtrees are checked once)

    Every reference must point at the kind its mode promises: directory
    entries at trees, all other entries at blobs.

    Returns (is_valid, errors) where errors is list of error messages.
    """
    if visited is None:
        visited = set()

    errors = []
    kinds: Dict[ObjectId, str] = {}
    # (id, expected kind, referring entry or None for the root)
    stack: List[Tuple[ObjectId, str, Optional[str]]] = [(tree_id, TREE, None)]

    while stack:
        current, expected_kind, referrer = stack.pop()

        kind = kinds.get(current)
        first_visit = kind is None
        if first_visit:
            if current in visited:
                continue
            visited.add(current)

            if not exists_func(current):
                if referrer is None:
                    errors.append(f"Missing object {current.hex}")
                else:
                    errors.append(f"{referrer} references missing object {current.hex}")
                continue

            try:
                framed = load_func(current)
                verify_object_integrity(framed, current)
                kind, payload = unframe_object(framed, current.hex)
            except ObjectStoreError as e:
                errors.append(f"Failed to verify {current.hex}: {e}")
                continue
            kinds[current] = kind

        if kind != expected_kind:
            source = referrer or "Root"
            errors.append(
                f"{source} expects a {expected_kind} but {current.hex} is a {kind}"
            )

        if not first_visit or kind != TREE:
            continue

        try:
            entries = decode_tree_payload(payload)
        except ObjectStoreError as e:
            errors.append(f"Invalid tree {current.hex}: {e}")
            continue

        for entry in entries:
            referrer = (
                f"Tree {current.hex} entry '{entry.display_name}' (mode {entry.mode.text})"
            )
            stack.append((entry.target, entry.mode.object_kind, referrer))

    return len(errors) == 0, errors
