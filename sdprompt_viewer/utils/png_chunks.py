"""Utility functions for reading PNG text chunks."""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional

from ..exceptions import ExtractionError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
CHUNK_HEADER_SIZE = 8  # length + type
CHUNK_CRC_SIZE = 4
SKIP_BLOCK_SIZE = 64 * 1024


def _read_exact(stream: BinaryIO, count: int) -> Optional[bytes]:
    """Read exactly ``count`` bytes; None on a short read."""
    data = stream.read(count)
    if data is None or len(data) < count:
        return None
    return data


def _skip(stream: BinaryIO, count: int) -> bool:
    """Skip ``count`` bytes without buffering them."""
    seekable = False
    try:
        seekable = stream.seekable()
    except (AttributeError, ValueError):
        pass
    if seekable:
        stream.seek(count, io.SEEK_CUR)
        return True
    while count > 0:
        block = stream.read(min(count, SKIP_BLOCK_SIZE))
        if not block:
            return False
        count -= len(block)
    return True


def read_png_text_chunk(stream: BinaryIO, key: str, source=None) -> Optional[bytes]:
    """
    Walk the chunks of a PNG stream and return the value of the first tEXt
    chunk whose keyword equals ``key``.

    Returns None when the stream is not a PNG, is truncated, or has no such
    chunk. Raises ExtractionError only when the signature itself cannot be
    read because of an I/O error.
    """
    source = source or getattr(stream, "name", "<stream>")
    wanted = key.encode("latin-1", "replace")

    try:
        sig = stream.read(len(PNG_SIGNATURE))
    except OSError as e:
        raise ExtractionError(source, str(e)) from e
    if sig != PNG_SIGNATURE:
        logger.debug(f"Not a PNG signature: {source}")
        return None

    try:
        while True:
            header = _read_exact(stream, CHUNK_HEADER_SIZE)
            if header is None:
                break
            length = int.from_bytes(header[:4], "big")
            ctype = header[4:]

            if ctype == b"tEXt":
                data = _read_exact(stream, length)
                if data is None:
                    logger.debug(f"Truncated tEXt chunk in {source}")
                    break
                keyword, sep, value = data.partition(b"\x00")
                if sep and value and keyword == wanted:
                    return value
                if not _skip(stream, CHUNK_CRC_SIZE):
                    break
                continue

            if not _skip(stream, length + CHUNK_CRC_SIZE):
                logger.debug(f"Truncated {ctype!r} chunk in {source}")
                break
    except OSError as e:
        logger.warning(f"Read error while walking PNG chunks of {source}: {e}")

    return None


def decode_text_chunk(value: bytes) -> str:
    """Decode a tEXt value; generators commonly store UTF-8 in it, the format says Latin-1."""
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return value.decode("latin-1")


def read_png_parameters_text(png_path: Path, key: str = "parameters") -> Optional[str]:
    """
    Read the text stored under ``key`` in a PNG file.

    Returns the decoded text, or None if the file has no such chunk (including
    non-PNG and corrupted files). Raises ExtractionError if the file cannot
    be opened.
    """
    try:
        f = open(png_path, "rb")
    except OSError as e:
        raise ExtractionError(png_path, str(e)) from e

    with f:
        value = read_png_text_chunk(f, key, source=png_path)
    if value is None:
        return None
    return decode_text_chunk(value)
