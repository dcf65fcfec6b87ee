"""
zlib codec for object files.

Objects are written at the strongest compression level. Reading uses a
grow-and-retry policy: the inflated size is not stored anywhere, so the
output buffer starts small and doubles until the whole stream fits.
"""

import logging
import zlib

from ..errors import CorruptDataError

logger = logging.getLogger(__name__)

MIN_BUFFER_SIZE = 64
DEFAULT_MAX_BUFFER_SIZE = 1 << 30


def compress(data: bytes, level: int = zlib.Z_BEST_COMPRESSION) -> bytes:
    """Compress bytes into a single zlib stream."""
    return zlib.compress(data, level)


def _inflate(data: bytes, buffer_size: int):
    """
    Inflate at most buffer_size bytes.

    Returns (output, complete). complete is False when the output buffer
    filled up before the stream ended.
    """
    inflater = zlib.decompressobj()
    output = inflater.decompress(data, buffer_size)

    if inflater.eof:
        if inflater.unused_data:
            raise CorruptDataError(
                f"{len(inflater.unused_data)} trailing bytes after end of stream"
            )
        return output, True

    if inflater.unconsumed_tail or len(output) >= buffer_size:
        return output, False

    raise CorruptDataError("Stream ended before end-of-stream marker")


def decompress(
    data: bytes,
    hint_size: int = None,
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE,
) -> bytes:
    """
    Decompress a zlib stream with bounded grow-and-retry.

    The buffer starts at hint_size (or the compressed length) and doubles
    each time it proves too small. Raises CorruptDataError on an invalid or
    truncated stream, or when the buffer would exceed max_buffer_size.
    """
    buffer_size = max(hint_size or len(data), MIN_BUFFER_SIZE)
    buffer_size = min(buffer_size, max_buffer_size)

    while True:
        try:
            output, complete = _inflate(data, buffer_size)
        except zlib.error as e:
            raise CorruptDataError(str(e))

        if complete:
            return output

        if buffer_size >= max_buffer_size:
            raise CorruptDataError(
                f"Decompressed size exceeds limit of {max_buffer_size} bytes"
            )

        logger.debug("Decompression buffer of %d bytes too small, retrying", buffer_size)
        buffer_size = min(buffer_size * 2, max_buffer_size)
