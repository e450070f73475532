"""
Opening SLEEP files.

open_file() reads the 32-byte header, loads the record tail and resolves the
declared record kind into exactly one typed view, wrapped in a SleepFile.

Usage:

    with datsleep.open_file("metadata.signatures") as f:
        sigs = f.as_signatures().signatures
"""

import logging
import os
from typing import BinaryIO, Iterator, Union

from .backing import Backing, MemoryBacking, MmapBacking
from .entries import EntryStore
from .errors import SleepIOError, TruncatedFileError, TypeMismatchError
from .header import HEADER_SIZE, Header, RecordKind, parse_header
from .views import BitfieldView, RecordView, SignatureView, TreeView

__all__ = ["SleepFile", "open_file", "open_path", "open_reader"]

logger = logging.getLogger(__name__)

PathType = Union[str, os.PathLike]

_VIEW_TYPES = {
    RecordKind.BITFIELD: BitfieldView,
    RecordKind.SIGNATURES: SignatureView,
    RecordKind.TREE: TreeView,
}


# ==============================================================================
# TYPED FILE
# ==============================================================================

class SleepFile:
    """
    An opened SLEEP file: its header plus one typed view.

    The view matches ``header.record_kind``. Asking for a different kind with
    narrow() or the as_*() helpers raises TypeMismatchError.

    Instance Attributes:
        header (Header): Decoded header
        view (RecordView): SignatureView, BitfieldView or TreeView
    """

    def __init__(self, header: Header, view: RecordView, backing: Backing):
        self.header = header
        self.view = view
        self._backing = backing

    # ==========================================================================
    # HEADER ACCESSORS
    # ==========================================================================

    @property
    def record_kind(self) -> RecordKind:
        return self.header.record_kind

    @property
    def record_size(self) -> int:
        return self.header.record_size

    @property
    def algorithm_name(self) -> str:
        return self.header.algorithm_name

    def record_offset(self, index: int) -> int:
        """Byte offset of record ``index`` within the tail."""
        return self.header.record_size * index

    # ==========================================================================
    # NARROWING
    # ==========================================================================

    def narrow(self, kind: RecordKind) -> RecordView:
        """
        Return the view if it is of the requested kind.

        Raises:
            TypeMismatchError: If the file holds a different kind of record
        """
        kind = RecordKind(kind)
        if kind is not self.record_kind:
            raise TypeMismatchError(
                f"file holds {self.record_kind.name.lower()} records, not {kind.name.lower()}"
            )
        return self.view

    def as_signatures(self) -> SignatureView:
        return self.narrow(RecordKind.SIGNATURES)

    def as_bitfield(self) -> BitfieldView:
        return self.narrow(RecordKind.BITFIELD)

    def as_tree(self) -> TreeView:
        return self.narrow(RecordKind.TREE)

    # ==========================================================================
    # RECORD ACCESS
    # ==========================================================================

    def record_count(self) -> int:
        return self.view.record_count()

    def record(self, index: int) -> bytes:
        return self.view.record(index)

    def iterate(self) -> Iterator[bytes]:
        return self.view.iterate()

    def decoded_signatures(self):
        """Decoded signatures of a signatures file, in record order."""
        return self.as_signatures().decoded_signatures()

    # ==========================================================================
    # RESOURCES
    # ==========================================================================

    def close(self) -> None:
        """Release the memory map, if any. In-memory files need no closing."""
        self._backing.close()

    @property
    def closed(self) -> bool:
        return self._backing.closed

    def __enter__(self) -> "SleepFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"SleepFile(kind={self.record_kind.name}, record_size={self.record_size}, "
            f"algorithm={self.algorithm_name!r})"
        )


# ==============================================================================
# OPENING
# ==============================================================================

def _read_exact(reader: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise TruncatedFileError."""
    buf = bytearray()
    try:
        while len(buf) < size:
            chunk = reader.read(size - len(buf))
            if not chunk:
                break
            buf += chunk
    except OSError as e:
        raise SleepIOError(f"failed to read header: {e}") from e
    if len(buf) < size:
        raise TruncatedFileError(f"expected a {size}-byte header, stream ended after {len(buf)} bytes")
    return bytes(buf)


def _build(header: Header, backing: Backing) -> SleepFile:
    entries = EntryStore(header, backing)
    logger.debug(
        "Opened %s file: record_size=%d algorithm=%r records=%d",
        header.record_kind.name.lower(), header.record_size,
        header.algorithm_name, entries.record_count(),
    )
    try:
        view = _VIEW_TYPES[header.record_kind](entries)
    except Exception:
        backing.close()
        raise
    return SleepFile(header, view, backing)


def open_reader(reader: BinaryIO, strict_padding: bool = False) -> SleepFile:
    """
    Open a SLEEP file from a binary stream.

    The stream is read to its end; the caller keeps ownership of it.

    Args:
        reader: Readable binary stream positioned at the header
        strict_padding (bool): Reject non-zero header padding

    Returns:
        SleepFile: The opened file with its typed view

    Raises:
        TruncatedFileError: If fewer than 32 bytes are available
        SleepIOError: If reading fails
        HeaderError: Any header decode failure (see parse_header)
        SignatureDecodeError: If a record of a signatures file is malformed
    """
    header = parse_header(_read_exact(reader, HEADER_SIZE), strict_padding=strict_padding)
    return _build(header, MemoryBacking.from_reader(reader))


def open_path(path: PathType, strict_padding: bool = False, lazy: bool = False) -> SleepFile:
    """
    Open a SLEEP file from the filesystem.

    Args:
        path: File path
        strict_padding (bool): Reject non-zero header padding
        lazy (bool): Memory map the record tail instead of reading it all
            into memory. Close the returned file (or use it as a context
            manager) to release the mapping.

    Returns:
        SleepFile: The opened file with its typed view

    Raises:
        SleepIOError: If the file cannot be opened or read
        See open_reader() for the remaining errors.
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise SleepIOError(f"cannot open {os.fspath(path)}: {e}") from e

    with f:
        if not lazy:
            return open_reader(f, strict_padding=strict_padding)
        header = parse_header(_read_exact(f, HEADER_SIZE), strict_padding=strict_padding)
        try:
            file_size = os.fstat(f.fileno()).st_size
        except OSError as e:
            raise SleepIOError(f"cannot stat {os.fspath(path)}: {e}") from e

    # A zero-length region cannot be mapped.
    if file_size > HEADER_SIZE:
        backing = MmapBacking(path, HEADER_SIZE)
    else:
        backing = MemoryBacking()
    return _build(header, backing)


def open_file(source: Union[PathType, BinaryIO], strict_padding: bool = False, lazy: bool = False) -> SleepFile:
    """
    Open a SLEEP file from a path or a binary stream.

    ``lazy`` only applies to paths; streams are always read into memory.
    """
    if isinstance(source, (str, bytes, os.PathLike)):
        return open_path(source, strict_padding=strict_padding, lazy=lazy)
    if hasattr(source, "read"):
        return open_reader(source, strict_padding=strict_padding)
    raise TypeError(f"expected a path or binary stream, got {type(source).__name__}")
