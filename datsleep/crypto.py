"""
Signature decoding for SLEEP signature files.

This module turns a fixed-size byte string into an Ed25519 signature value,
or rejects it with a diagnostic message. Verification against a public key is
delegated to the cryptography library; nothing here performs curve math.

An encoded Ed25519 signature is 64 bytes: the compressed point R followed by
the little-endian scalar S. A well-formed S is below the group order, which
is less than 2**253, so the three most significant bits of the last byte must
be clear.
"""

import hmac
from dataclasses import dataclass
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

__all__ = [
    "SIGNATURE_SIZE",
    "PUBLIC_KEY_SIZE",
    "DEFAULT_ALGORITHM",
    "SignatureFormatError",
    "Ed25519Signature",
    "decode_signature",
    "load_public_key",
]

# ==============================================================================
# CRYPTOGRAPHIC CONSTANTS
# ==============================================================================

# Encoded Ed25519 signature: 32-byte R point + 32-byte S scalar
SIGNATURE_SIZE = 64

# Encoded Ed25519 public key
PUBLIC_KEY_SIZE = 32

# Algorithm name written by conforming encoders
DEFAULT_ALGORITHM = "Ed25519"

# Bits of the final S byte that must be zero
_SCALAR_HIGH_BITS = 0xE0


class SignatureFormatError(ValueError):
    """Raised by decode_signature() when bytes are not a valid encoding."""


# ==============================================================================
# SIGNATURE VALUE
# ==============================================================================

@dataclass(frozen=True)
class Ed25519Signature:
    """
    A decoded Ed25519 signature.

    Instances are only built by decode_signature(), which has already checked
    the length and scalar encoding.

    Attributes:
        raw (bytes): The 64-byte encoding
    """

    raw: bytes

    @property
    def r(self) -> bytes:
        """Encoded R point (first 32 bytes)."""
        return self.raw[:32]

    @property
    def s(self) -> bytes:
        """Encoded S scalar (last 32 bytes)."""
        return self.raw[32:]

    def to_bytes(self) -> bytes:
        return self.raw

    def hex(self) -> str:
        return self.raw.hex()

    def verify(self, public_key: Union[bytes, Ed25519PublicKey], message: bytes) -> bool:
        """
        Check this signature over ``message``.

        Args:
            public_key: 32-byte encoded key or a loaded Ed25519PublicKey
            message (bytes): The signed data

        Returns:
            bool: True if the signature is valid for the key and message

        Raises:
            ValueError: If ``public_key`` is not a valid encoded key
        """
        key = load_public_key(public_key)
        try:
            key.verify(self.raw, message)
        except InvalidSignature:
            return False
        return True

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ed25519Signature):
            return NotImplemented
        return hmac.compare_digest(self.raw, other.raw)

    def __hash__(self) -> int:
        return hash(self.raw)

    def __repr__(self) -> str:
        return f"Ed25519Signature({self.raw[:8].hex()}...)"


# ==============================================================================
# DECODING HELPERS
# ==============================================================================

def decode_signature(data: Union[bytes, bytearray, memoryview]) -> Ed25519Signature:
    """
    Decode a fixed-size byte string into a signature.

    Args:
        data: Encoded signature, exactly SIGNATURE_SIZE bytes

    Returns:
        Ed25519Signature: The decoded signature

    Raises:
        SignatureFormatError: If the length is wrong or the S scalar has any
            of its high bits set
    """
    raw = bytes(data)
    if len(raw) != SIGNATURE_SIZE:
        raise SignatureFormatError(
            f"signature must be {SIGNATURE_SIZE} bytes, got {len(raw)}"
        )
    if raw[-1] & _SCALAR_HIGH_BITS:
        raise SignatureFormatError("signature scalar is not canonically encoded")
    return Ed25519Signature(raw)


def load_public_key(public_key: Union[bytes, Ed25519PublicKey]) -> Ed25519PublicKey:
    """
    Normalize a public key argument.

    Raises:
        ValueError: If raw bytes are not a valid 32-byte encoded key
    """
    if isinstance(public_key, Ed25519PublicKey):
        return public_key
    key_bytes = bytes(public_key)
    if len(key_bytes) != PUBLIC_KEY_SIZE:
        raise ValueError(f"public key must be {PUBLIC_KEY_SIZE} bytes, got {len(key_bytes)}")
    return Ed25519PublicKey.from_public_bytes(key_bytes)
