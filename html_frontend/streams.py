"""
Input stream wrapper.

The caller owns the byte stream handed to HTMLFrontend.parse().  Parsers are
free to close whatever they read from, so they only ever get a
CloseShieldStream: closing it marks the wrapper closed and leaves the
underlying stream open.
"""

import io
from typing import BinaryIO


class CloseShieldStream(io.RawIOBase):
    """Read-only view of a binary stream that never closes it."""

    def __init__(self, stream: BinaryIO):
        super().__init__()
        self.stream = stream

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        self._check_open()
        data = self.stream.read(len(buffer))
        if not data:
            return 0
        size = len(data)
        buffer[:size] = data
        return size

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        if size is None or size < 0:
            return self.stream.read()
        return self.stream.read(size)

    def _check_open(self) -> None:
        # Closing only flags the wrapper; self.stream stays with its owner
        if self.closed:
            raise ValueError("I/O operation on closed stream")
