"""A small FAT file system living on a simulated disk."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from itertools import islice
from typing import Iterator, Optional

from .disk import BLOCK_SIZE

logger = logging.getLogger(__name__)

MAGIC = 0xAC0010DE
SUPER_BLOCK = 0
DIR_BLOCK = 1
TABLE_BLOCK = 2

MAX_LETTERS = 6

FREE = 0
EOFF = 1
BUSY = 2

_SUPER = struct.Struct("<III")
_ENTRY = struct.Struct(f"<B{MAX_LETTERS + 1}sII")
N_ITEMS = BLOCK_SIZE // _ENTRY.size
_FAT_PER_BLOCK = BLOCK_SIZE // 4
_FAT_BLOCK = struct.Struct(f"<{_FAT_PER_BLOCK}I")


class FatError(Exception):
    """Raised when a file system operation cannot be carried out."""


@dataclass
class DirEntry:
    """One slot of the single directory block."""

    used: bool = False
    name: str = ""
    length: int = 0
    first: int = 0

    def pack(self) -> bytes:
        encoded = self.name.encode("utf-8")[:MAX_LETTERS]
        return _ENTRY.pack(int(self.used), encoded, self.length, self.first)

    @classmethod
    def unpack(cls, raw: bytes) -> "DirEntry":
        used, name, length, first = _ENTRY.unpack(raw)
        name = name.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        return cls(bool(used), name, length, first)


class FileSystem:
    """Files kept as linked chains of blocks in a file allocation table."""

    def __init__(self, disk):
        self.disk = disk
        self.mounted = False
        self.number_blocks = 0
        self.n_fat_blocks = 0
        self.fat: list[int] = []
        self.directory = [DirEntry() for _ in range(N_ITEMS)]

    # -- on-disk structures -------------------------------------------------

    def _read_super(self) -> tuple[int, int, int]:
        return _SUPER.unpack_from(self.disk.read(SUPER_BLOCK))

    def _load_fat(self, n_fat_blocks: int) -> list[int]:
        fat: list[int] = []
        for i in range(n_fat_blocks):
            fat.extend(_FAT_BLOCK.unpack(self.disk.read(TABLE_BLOCK + i)))
        return fat

    def _load_directory(self) -> list[DirEntry]:
        raw = self.disk.read(DIR_BLOCK)
        return [DirEntry.unpack(chunk) for chunk in _ENTRY.iter_unpack(raw)
                for chunk in [_ENTRY.pack(*chunk)]]

    def _save_directory(self) -> None:
        self.disk.write(DIR_BLOCK, b"".join(e.pack() for e in self.directory))

    def _save_fat(self) -> None:
        for i in range(self.n_fat_blocks):
            start = i * _FAT_PER_BLOCK
            chunk = self.fat[start:start + _FAT_PER_BLOCK]
            self.disk.write(TABLE_BLOCK + i, _FAT_BLOCK.pack(*chunk))

    # -- helpers --------------------------------------------------------------

    def _require_mounted(self) -> None:
        if not self.mounted:
            raise FatError("fat nao montado!")

    def _lookup(self, name: str) -> int:
        index = self.find_file(name)
        if index is None:
            raise FatError("arquivo nao encontrado!")
        return index

    def _allocate(self) -> Optional[int]:
        return next(
            (i for i in range(self.number_blocks) if self.fat[i] == FREE), None
        )

    def _next_or_extend(self, block: int) -> Optional[int]:
        """Follow the chain from ``block``, growing it if it ends here."""
        if self.fat[block] == EOFF:
            new_block = self._allocate()
            if new_block is None:
                logger.warning("sem blocos livres na fat!")
                return None
            self.fat[block] = new_block
            self.fat[new_block] = EOFF
        return self.fat[block]

    @staticmethod
    def _chain(fat: list[int], first: int) -> Iterator[int]:
        seen = set()
        block = first
        while block != EOFF:
            if block >= len(fat) or block in seen:
                raise FatError("cadeia de blocos corrompida!")
            seen.add(block)
            yield block
            block = fat[block]

    # -- operations -----------------------------------------------------------

    def format(self) -> None:
        """Write a fresh superblock, empty directory and table."""
        if self.mounted:
            raise FatError("ja montado!")
        self.number_blocks = self.disk.number_blocks
        self.n_fat_blocks = self.number_blocks // 1024 + 1
        superblock = _SUPER.pack(MAGIC, self.number_blocks, self.n_fat_blocks)
        self.disk.write(SUPER_BLOCK, superblock.ljust(BLOCK_SIZE, b"\0"))

        self.directory = [DirEntry() for _ in range(N_ITEMS)]
        self._save_directory()

        self.fat = [FREE] * (self.n_fat_blocks * _FAT_PER_BLOCK)
        self.fat[SUPER_BLOCK] = BUSY
        self.fat[DIR_BLOCK] = BUSY
        for i in range(TABLE_BLOCK, TABLE_BLOCK + self.n_fat_blocks):
            self.fat[i] = BUSY
        self._save_fat()

    def mount(self) -> None:
        """Load the superblock, table and directory from disk."""
        if self.mounted:
            raise FatError("ja montado!")
        magic, number_blocks, n_fat_blocks = self._read_super()
        if magic != MAGIC:
            raise FatError("superbloco invalido!")
        self.number_blocks = number_blocks
        self.n_fat_blocks = n_fat_blocks
        self.fat = self._load_fat(n_fat_blocks)
        self.directory = self._load_directory()
        self.mounted = True

    def debug(self) -> str:
        """Describe the superblock and every file as stored on disk."""
        magic, number_blocks, n_fat_blocks = self._read_super()
        lines = ["superblock:"]
        if magic != MAGIC:
            lines.append("  magic is not ok!")
            return "\n".join(lines) + "\n"
        lines.append("  magic is ok")
        lines.append(f"  {number_blocks} blocks")
        lines.append(f"  {n_fat_blocks} blocks fat")

        fat = self._load_fat(n_fat_blocks)
        for entry in self._load_directory():
            if not entry.used:
                continue
            lines.append(f'File "{entry.name}":')
            lines.append(f"  size: {entry.length} bytes")
            blocks = "".join(f"{b} " for b in self._chain(fat, entry.first))
            lines.append(f"  Blocks: {blocks}")
        return "\n".join(lines) + "\n"

    def create(self, name) -> None:
        """Create an empty file holding one block."""
        self._require_mounted()
        if len(name.encode("utf-8")) > MAX_LETTERS:
            raise FatError("nome muito grande!")
        if self.find_file(name) is not None:
            raise FatError("arquivo ja existe!")
        free_index = next(
            (i for i, e in enumerate(self.directory) if not e.used), None
        )
        if free_index is None:
            raise FatError("diretorio cheio!")
        first_block = self._allocate()
        if first_block is None:
            raise FatError("erro: sem blocos livres na fat!")

        self.fat[first_block] = EOFF
        self.directory[free_index] = DirEntry(True, name, 0, first_block)
        self._save_directory()
        self._save_fat()

    def delete(self, name) -> None:
        """Remove a file and free its blocks."""
        self._require_mounted()
        index = self._lookup(name)
        for block in list(self._chain(self.fat, self.directory[index].first)):
            self.fat[block] = FREE
        self.directory[index].used = False
        self._save_directory()
        self._save_fat()

    def getsize(self, name) -> int:
        self._require_mounted()
        return self.directory[self._lookup(name)].length

    def read(self, name, length, offset) -> bytes:
        """Return up to ``length`` bytes of the file starting at ``offset``."""
        self._require_mounted()
        entry = self.directory[self._lookup(name)]
        if length <= 0 or offset < 0:
            raise FatError("tamanho invalido!")

        remaining = min(length, entry.length - offset)
        if remaining <= 0:
            return b""
        skip, start = divmod(offset, BLOCK_SIZE)
        chunks = []
        for block in islice(self._chain(self.fat, entry.first), skip, None):
            if remaining <= 0:
                break
            piece = self.disk.read(block)[start:start + remaining]
            chunks.append(piece)
            remaining -= len(piece)
            start = 0
        return b"".join(chunks)

    def write(self, name, data, offset) -> int:
        """Write ``data`` at ``offset``, growing the file; return bytes written.

        A non-empty file cannot be written again from offset zero. When the
        disk runs out of blocks the write stops short.
        """
        self._require_mounted()
        logger.debug("write(%s, %d bytes, offset %d)", name, len(data), offset)
        index = self._lookup(name)
        entry = self.directory[index]
        if offset < 0:
            raise FatError("tamanho invalido!")
        if entry.length > 0 and offset == 0:
            raise FatError("arquivo ja existe, nao e possivel sobrescrever!")

        data = bytes(data)
        block = entry.first
        position = offset
        written = 0
        while written < len(data):
            if position >= BLOCK_SIZE:
                position -= BLOCK_SIZE
                next_block = self._next_or_extend(block)
                if next_block is None:
                    break
                block = next_block
                continue

            chunk = data[written:written + BLOCK_SIZE - position]
            buffer = bytearray(self.disk.read(block))
            buffer[position:position + len(chunk)] = chunk
            self.disk.write(block, buffer)
            written += len(chunk)
            position = 0

            if written < len(data):
                next_block = self._next_or_extend(block)
                if next_block is None:
                    break
                block = next_block

        entry.length = offset + written
        logger.debug("file %s now has %d bytes", name, entry.length)
        self._save_directory()
        self._save_fat()
        return written

    def find_file(self, name) -> Optional[int]:
        """Return the directory index of ``name``, or None."""
        return next(
            (i for i, e in enumerate(self.directory) if e.used and e.name == name),
            None,
        )