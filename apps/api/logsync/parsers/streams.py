"""
Byte stream helpers shared by the detector, parsers and archive extractor.

Ownership rule: whoever opens a stream closes it. Everything here only
borrows the streams it is given; closing a wrapper never closes the
wrapped source.
"""

import io
from typing import BinaryIO, Iterator, Optional


class StreamChain(io.RawIOBase):
    """Reads ``prefix`` first, then the remainder of ``source``."""

    def __init__(self, source: Optional[BinaryIO], prefix: bytes = b""):
        super().__init__()
        self._prefix = memoryview(prefix)
        self._pos = 0
        self._source = source

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._pos < len(self._prefix):
            n = min(len(buffer), len(self._prefix) - self._pos)
            buffer[:n] = self._prefix[self._pos:self._pos + n]
            self._pos += n
            return n
        if self._source is None:
            return 0
        data = self._source.read(len(buffer))
        if not data:
            return 0
        n = len(data)
        buffer[:n] = data
        return n


def read_prefix(stream: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, tolerating short reads."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def iter_text_lines(stream: BinaryIO) -> Iterator[str]:
    """
    Decode a byte stream as UTF-8 and yield its lines without terminators.

    Accepts \\n, \\r\\n and \\r line endings. A leading BOM is dropped and
    undecodable bytes are replaced rather than failing the read.
    """
    reader = io.TextIOWrapper(
        io.BufferedReader(StreamChain(stream)),
        encoding="utf-8-sig",
        errors="replace",
        newline=None,
    )
    for line in reader:
        yield line[:-1] if line.endswith("\n") else line
