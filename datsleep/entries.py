"""
Fixed-size record access over the tail of a SLEEP file.
"""

from typing import Iterator

from .backing import Backing
from .errors import RecordIndexError
from .header import Header

__all__ = ["EntryStore"]


class EntryStore:
    """
    Index-based view of the records that follow the header.

    The tail is cut into ``record_size`` byte records in file order. Trailing
    bytes too short to form a whole record are not indexed. A header declaring
    a record size of 0 yields an empty store.

    Instance Attributes:
        header (Header): Header the record size comes from
        backing (Backing): Where the tail bytes live
    """

    def __init__(self, header: Header, backing: Backing):
        self.header = header
        self.backing = backing

    # ==========================================================================
    # HEADER ACCESSORS
    # ==========================================================================

    @property
    def record_kind(self):
        return self.header.record_kind

    @property
    def record_size(self) -> int:
        return self.header.record_size

    @property
    def algorithm_name(self) -> str:
        return self.header.algorithm_name

    # ==========================================================================
    # RECORD ACCESS
    # ==========================================================================

    def record_count(self) -> int:
        """Number of whole records in the tail."""
        if self.record_size == 0:
            return 0
        return len(self.backing) // self.record_size

    def record_offset(self, index: int) -> int:
        """Byte offset of record ``index`` within the tail."""
        return self.record_size * index

    def record(self, index: int) -> bytes:
        """
        Return the raw bytes of one record.

        Args:
            index (int): Record index. Negative values count from the end,
                as with any Python sequence.

        Returns:
            bytes: Exactly ``record_size`` bytes

        Raises:
            RecordIndexError: If the index is out of range
        """
        count = self.record_count()
        if index < 0:
            index += count
        if not 0 <= index < count:
            raise RecordIndexError(f"record index {index} out of range for {count} records")
        start = self.record_offset(index)
        return self.backing.read(start, start + self.record_size)

    def iterate(self) -> Iterator[bytes]:
        """Yield every record in index order. Each call starts over."""
        for index in range(self.record_count()):
            yield self.record(index)

    # ==========================================================================
    # SEQUENCE PROTOCOL
    # ==========================================================================

    def __len__(self) -> int:
        return self.record_count()

    def __getitem__(self, index: int) -> bytes:
        return self.record(index)

    def __iter__(self) -> Iterator[bytes]:
        return self.iterate()

    def __repr__(self) -> str:
        return (
            f"EntryStore(kind={self.record_kind.name}, record_size={self.record_size}, "
            f"records={self.record_count()})"
        )
