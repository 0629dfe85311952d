"""Byte-exact file reading for presigned transfers.

Storage endpoints validate the signed content length, so every reader here
either produces exactly the bytes asked for or raises ``IntegrityError``.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from stashctl.core.exceptions import IntegrityError
from stashctl.uploaders.constants import DEFAULT_READ_SIZE

logger = logging.getLogger(__name__)


# =============================================================================
# Part Ranges
# =============================================================================


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range of one part."""

    part_number: int
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def expected_part_count(file_size: int, part_size: int) -> int:
    """Number of parts needed to cover file_size bytes."""
    return math.ceil(file_size / part_size) if part_size > 0 else 0


def compute_part_ranges(file_size: int, part_size: int, part_count: int) -> list[ByteRange]:
    """Split a file into contiguous part ranges.

    Every part is ``part_size`` bytes except the last, which holds the
    remainder.

    Args:
        file_size: Size of the file in bytes.
        part_size: Bytes per part.
        part_count: Number of parts the server planned.

    Returns:
        Ranges for parts 1..part_count.

    Raises:
        IntegrityError: If the planned parts do not exactly cover the file.
    """
    if part_size <= 0 or part_count <= 0:
        raise IntegrityError(
            f"Invalid chunk plan: part size {part_size}, {part_count} parts"
        )

    needed = expected_part_count(file_size, part_size)
    if needed != part_count:
        raise IntegrityError(
            f"Chunk plan declares {part_count} parts but the file needs {needed}",
            expected=needed,
            actual=part_count,
        )

    ranges = []
    for index in range(part_count):
        start = index * part_size
        end = min((index + 1) * part_size - 1, file_size - 1)
        ranges.append(ByteRange(part_number=index + 1, start=start, end=end))
    return ranges


# =============================================================================
# Bounded Streams
# =============================================================================


class ByteRangeStream:
    """Iterator over exactly ``length`` bytes of an open file, from ``start``.

    Each iteration rewinds to ``start``, so a redirected PUT resends the
    same bytes.
    """

    def __init__(
        self,
        fileobj: BinaryIO,
        start: int,
        length: int,
        *,
        read_size: int = DEFAULT_READ_SIZE,
        path: str | None = None,
    ) -> None:
        self._file = fileobj
        self.start = start
        self.length = length
        self.read_size = read_size
        self.path = path
        self.bytes_read = 0

    def __iter__(self) -> Iterator[bytes]:
        try:
            self._file.seek(self.start)
        except OSError as e:
            raise IntegrityError(
                f"Failed to skip to position {self.start}: {e}", file_path=self.path
            ) from e
        self.bytes_read = 0

        remaining = self.length
        while remaining > 0:
            block = self._file.read(min(self.read_size, remaining))
            if not block:
                raise IntegrityError(
                    "File ended before the byte range was fully read",
                    file_path=self.path,
                    expected=self.length,
                    actual=self.bytes_read,
                )
            remaining -= len(block)
            self.bytes_read += len(block)
            yield block


@contextmanager
def open_range(
    path: Path | str,
    start: int,
    length: int,
    *,
    read_size: int = DEFAULT_READ_SIZE,
) -> Iterator[ByteRangeStream]:
    """Open a file positioned at ``start`` and bounded to ``length`` bytes.

    The file is closed when the context exits, including when the consumer
    fails halfway through the stream.

    Raises:
        IntegrityError: If the file cannot be positioned exactly at ``start``.
    """
    if start < 0 or length < 0:
        raise ValueError(f"Invalid byte range: start={start}, length={length}")

    try:
        fileobj = open(path, "rb")
    except OSError as e:
        raise IntegrityError(f"Failed to open file: {e}", file_path=str(path)) from e

    with fileobj:
        try:
            size = os.fstat(fileobj.fileno()).st_size
            if start > size:
                raise IntegrityError(
                    f"Failed to skip to position {start}, file holds only {size} bytes",
                    file_path=str(path),
                    expected=start,
                    actual=size,
                )
            position = fileobj.seek(start)
        except OSError as e:
            raise IntegrityError(
                f"Failed to skip to position {start}: {e}", file_path=str(path)
            ) from e
        if position != start:
            raise IntegrityError(
                f"Failed to skip to position {start}, only skipped {position} bytes",
                file_path=str(path),
                expected=start,
                actual=position,
            )

        logger.debug("Opened %s bytes %d-%d", path, start, start + length - 1)
        yield ByteRangeStream(fileobj, start, length, read_size=read_size, path=str(path))


def read_whole_file(path: Path | str) -> bytes:
    """Read a file into memory, checking the byte count against its size.

    Raises:
        IntegrityError: If the bytes read differ from the reported file size.
    """
    path = Path(path)
    expected = path.stat().st_size
    with open(path, "rb") as f:
        data = f.read()
    if len(data) != expected:
        raise IntegrityError(
            f"File read mismatch: expected {expected} bytes, but read {len(data)} bytes",
            file_path=str(path),
            expected=expected,
            actual=len(data),
        )
    return data
