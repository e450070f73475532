"""
Typed views over the records of an opened SLEEP file.

SignatureView decodes every record as an Ed25519 signature when it is built.
BitfieldView and TreeView are placeholders: their record layouts are not
decoded yet and every record access fails with UnimplementedViewError.
"""

import logging
from typing import Iterator, List, Sequence, Tuple

from .crypto import DEFAULT_ALGORITHM, Ed25519Signature, SignatureFormatError, decode_signature
from .entries import EntryStore
from .errors import SignatureDecodeError, UnimplementedViewError
from .header import Header, RecordKind

__all__ = ["RecordView", "SignatureView", "BitfieldView", "TreeView"]

logger = logging.getLogger(__name__)


class RecordView:
    """Common base for the typed views. Holds the entry store."""

    kind: RecordKind

    def __init__(self, entries: EntryStore):
        self._entries = entries

    @property
    def header(self) -> Header:
        return self._entries.header

    def record_count(self) -> int:
        return self._entries.record_count()

    def record(self, index: int) -> bytes:
        return self._entries.record(index)

    def iterate(self) -> Iterator[bytes]:
        return self._entries.iterate()

    def __len__(self) -> int:
        return self.record_count()

    def __iter__(self) -> Iterator[bytes]:
        return self.iterate()

    def __bool__(self) -> bool:
        return True


# ==============================================================================
# SIGNATURES
# ==============================================================================

class SignatureView(RecordView):
    """
    Signatures file with every record decoded.

    Construction is all-or-nothing: the first record the decoder rejects
    aborts the whole view with SignatureDecodeError.
    """

    kind = RecordKind.SIGNATURES

    def __init__(self, entries: EntryStore):
        super().__init__(entries)
        if entries.algorithm_name != DEFAULT_ALGORITHM:
            logger.warning(
                "Signatures file declares algorithm %r; decoding as %s",
                entries.algorithm_name, DEFAULT_ALGORITHM,
            )
        self._signatures = tuple(self._decode_all(entries))
        logger.debug("Decoded %d signatures", len(self._signatures))

    @staticmethod
    def _decode_all(entries: EntryStore) -> List[Ed25519Signature]:
        decoded = []
        for index, raw in enumerate(entries.iterate()):
            try:
                decoded.append(decode_signature(raw))
            except SignatureFormatError as e:
                raise SignatureDecodeError(str(e), index) from e
        return decoded

    @property
    def entries(self) -> EntryStore:
        """Underlying store, for raw-byte access."""
        return self._entries

    @property
    def signatures(self) -> Tuple[Ed25519Signature, ...]:
        """Decoded signatures, index-aligned with the records."""
        return self._signatures

    def decoded_signatures(self) -> Sequence[Ed25519Signature]:
        return self._signatures

    def signature(self, index: int) -> Ed25519Signature:
        """Decoded signature of record ``index``."""
        # Same bounds check and error as raw access.
        self._entries.record(index)
        return self._signatures[index]

    def verify(self, index: int, public_key, message: bytes) -> bool:
        """Check the signature stored at ``index`` over ``message``."""
        return self.signature(index).verify(public_key, message)

    def __getitem__(self, index: int) -> Ed25519Signature:
        return self.signature(index)

    def __repr__(self) -> str:
        return f"SignatureView(signatures={len(self._signatures)})"


# ==============================================================================
# PLACEHOLDERS
# ==============================================================================

class _UnimplementedView(RecordView):
    """View whose record layout has no decoder. All record access fails."""

    def _unimplemented(self):
        raise UnimplementedViewError(f"{self.kind.name.lower()} records are not decoded")

    def record_count(self) -> int:
        self._unimplemented()

    def record(self, index: int) -> bytes:
        self._unimplemented()

    def iterate(self) -> Iterator[bytes]:
        self._unimplemented()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BitfieldView(_UnimplementedView):
    """Bitfield file. Record decoding not implemented."""

    kind = RecordKind.BITFIELD


class TreeView(_UnimplementedView):
    """Merkle tree file. Record decoding not implemented."""

    kind = RecordKind.TREE
