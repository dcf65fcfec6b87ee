"""
Error types for object store operations.

All errors are explicit and never silent.
"""


class ObjectStoreError(Exception):
    """Base exception for all object store errors."""
    pass


class ObjectNotFoundError(ObjectStoreError):
    """Raised when a requested object does not exist."""

    def __init__(self, object_id: str):
        self.object_id = object_id
        super().__init__(f"Object not found: {object_id}")


class StorageError(ObjectStoreError):
    """Raised when filesystem operations fail."""

    def __init__(self, operation: str, path: str, cause: Exception = None):
        self.operation = operation
        self.path = path
        self.cause = cause
        msg = f"Storage error during {operation}: {path}"
        if cause:
            msg += f"\nCause: {cause}"
        super().__init__(msg)


class CorruptDataError(ObjectStoreError):
    """Raised when a compressed object stream cannot be decoded."""

    def __init__(self, reason: str, object_id: str = None):
        self.reason = reason
        self.object_id = object_id
        msg = f"Corrupt object data: {reason}"
        if object_id:
            msg += f" (id: {object_id})"
        super().__init__(msg)


class CorruptTreeError(ObjectStoreError):
    """Raised when a tree payload is not a whole sequence of entries."""

    def __init__(self, reason: str, offset: int = None):
        self.reason = reason
        self.offset = offset
        msg = f"Corrupt tree: {reason}"
        if offset is not None:
            msg += f" (at byte {offset})"
        super().__init__(msg)


class InvalidInputError(ObjectStoreError):
    """Raised when a path or identifier given by the caller is unusable."""

    def __init__(self, reason: str, value: str = None):
        self.reason = reason
        self.value = value
        msg = f"Invalid input: {reason}"
        if value is not None:
            msg += f": {value}"
        super().__init__(msg)


class InvalidObjectError(ObjectStoreError):
    """Raised when a decompressed object has a malformed header or wrong kind."""

    def __init__(self, reason: str, object_id: str = None):
        self.reason = reason
        self.object_id = object_id
        msg = f"Invalid object: {reason}"
        if object_id:
            msg += f" (id: {object_id})"
        super().__init__(msg)


class ObjectCorruptedError(ObjectStoreError):
    """Raised when an object's content does not match its id."""

    def __init__(self, object_id: str, actual: str):
        self.object_id = object_id
        self.expected = object_id
        self.actual = actual
        super().__init__(
            f"Object corrupted: {object_id}\n"
            f"Expected id: {object_id}\n"
            f"Actual id: {actual}"
        )
