from __future__ import annotations
import struct

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

MAGIC = bytes([5, 2, 87])


def build_header(kind: int = 1, version: int = 0, record_size: int = 64,
                 name: bytes = b"Ed25519", padding: bytes | None = None) -> bytes:
    """Hand-build a 32-byte SLEEP header (the package ships no encoder)."""
    head = MAGIC + struct.pack(">BBH", kind, version, record_size) + bytes([len(name)]) + name
    if padding is None:
        padding = b"\x00" * (32 - len(head))
    out = head + padding
    assert len(out) == 32
    return out


@pytest.fixture
def make_header():
    return build_header


@pytest.fixture(scope="session")
def signing_key():
    return Ed25519PrivateKey.generate()


@pytest.fixture(scope="session")
def public_key_bytes(signing_key):
    from cryptography.hazmat.primitives import serialization
    return signing_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


@pytest.fixture(scope="session")
def messages():
    return [b"root-0", b"root-1", b"root-2"]


@pytest.fixture(scope="session")
def signature_records(signing_key, messages):
    return [signing_key.sign(m) for m in messages]


@pytest.fixture
def signatures_file(make_header, signature_records):
    """Header + three valid signature records."""
    return make_header() + b"".join(signature_records)
