"""
Backing stores for the record tail of a SLEEP file.

EntryStore slices records out of a backing store and does not care where the
bytes live. Two implementations share the same contract:

- MemoryBacking: the whole tail read into an immutable bytes object
- MmapBacking: the file memory mapped read-only, pages loaded on access

Both return fresh ``bytes`` objects from read(), so callers never see a
difference between them.
"""

import logging
import mmap
import os
from abc import ABC, abstractmethod
from typing import BinaryIO, Union

from .errors import SleepIOError

__all__ = ["Backing", "MemoryBacking", "MmapBacking"]

logger = logging.getLogger(__name__)


class Backing(ABC):
    """Read-only byte source for the record tail."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    @abstractmethod
    def read(self, start: int, end: int) -> bytes:
        """Return the bytes in ``[start, end)`` of the tail."""

    def close(self) -> None:
        """Release any resource held by the store."""

    @property
    def closed(self) -> bool:
        return False


class MemoryBacking(Backing):
    """Tail held entirely in memory."""

    def __init__(self, data: Union[bytes, bytearray, memoryview] = b""):
        self._data = bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    def read(self, start: int, end: int) -> bytes:
        return self._data[start:end]

    @classmethod
    def from_reader(cls, reader: BinaryIO) -> "MemoryBacking":
        """
        Read a stream to its end.

        Raises:
            SleepIOError: If the read fails
        """
        try:
            chunks = []
            while True:
                chunk = reader.read(1 << 16)
                if not chunk:
                    break
                chunks.append(chunk)
        except OSError as e:
            raise SleepIOError(f"failed to read record data: {e}") from e
        return cls(b"".join(chunks))


class MmapBacking(Backing):
    """
    Tail served from a read-only memory map of the file.

    The mapping covers the whole file (mmap offsets must be page aligned) and
    reads are shifted by ``offset``.
    """

    def __init__(self, path: Union[str, os.PathLike], offset: int):
        self._offset = offset
        try:
            with open(path, "rb") as f:
                self._mm = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as e:
            raise SleepIOError(f"failed to map {os.fspath(path)}: {e}") from e
        self._length = max(len(self._mm) - offset, 0)
        logger.debug("Mapped %s (%d tail bytes)", os.fspath(path), self._length)

    def __len__(self) -> int:
        return self._length

    def read(self, start: int, end: int) -> bytes:
        if self._mm.closed:
            raise SleepIOError("read from a closed memory map")
        return self._mm[self._offset + start:self._offset + end]

    def close(self) -> None:
        if not self._mm.closed:
            self._mm.close()

    @property
    def closed(self) -> bool:
        return self._mm.closed
