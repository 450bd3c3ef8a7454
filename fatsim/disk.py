"""Block device simulated on top of an ordinary file."""

from __future__ import annotations

import os

BLOCK_SIZE = 4096


class DiskError(Exception):
    """Raised on an invalid block access or a failed disk operation."""


class Disk:
    """A fixed number of BLOCK_SIZE blocks stored in a host file."""

    def __init__(self, filename, number_blocks):
        if number_blocks < 0:
            raise ValueError(f"number of blocks ({number_blocks}) is negative")
        try:
            self._file = open(filename, "r+b")
        except FileNotFoundError:
            self._file = open(filename, "w+b")
        self._file.truncate(number_blocks * BLOCK_SIZE)
        self.filename = os.fspath(filename)
        self.number_blocks = number_blocks
        self.reads = 0
        self.writes = 0

    @property
    def closed(self) -> bool:
        return self._file.closed

    def _check(self, number: int) -> None:
        if number < 0:
            raise DiskError(f"blocknum ({number}) is negative!")
        if number >= self.number_blocks:
            raise DiskError(f"blocknum ({number}) is too big!")

    def read(self, number) -> bytes:
        """Return the contents of block ``number``."""
        self._check(number)
        self._file.seek(number * BLOCK_SIZE)
        data = self._file.read(BLOCK_SIZE)
        if len(data) != BLOCK_SIZE:
            raise DiskError("disk simulation failed")
        self.reads += 1
        return data

    def write(self, number, data) -> None:
        """Store exactly one block of ``data`` at block ``number``."""
        self._check(number)
        data = bytes(data)
        if len(data) != BLOCK_SIZE:
            raise DiskError(
                f"block data must be {BLOCK_SIZE} bytes, got {len(data)}"
            )
        self._file.seek(number * BLOCK_SIZE)
        self._file.write(data)
        self.writes += 1

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()