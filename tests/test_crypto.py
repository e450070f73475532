from __future__ import annotations
import pytest

from datsleep import Ed25519Signature, SignatureFormatError, decode_signature, load_public_key


def test_decode_valid(signature_records):
    sig = decode_signature(signature_records[0])
    assert isinstance(sig, Ed25519Signature)
    assert sig.to_bytes() == signature_records[0]
    assert sig.r + sig.s == signature_records[0]
    assert sig.hex() == signature_records[0].hex()


def test_decode_wrong_length(signature_records):
    with pytest.raises(SignatureFormatError):
        decode_signature(signature_records[0][:63])
    with pytest.raises(SignatureFormatError):
        decode_signature(signature_records[0] + b"\x00")


def test_decode_rejects_high_scalar_bits(signature_records):
    bad = bytearray(signature_records[0])
    bad[63] |= 0x80
    with pytest.raises(SignatureFormatError):
        decode_signature(bytes(bad))


def test_verify(signature_records, messages, public_key_bytes, signing_key):
    sig = decode_signature(signature_records[1])
    assert sig.verify(public_key_bytes, messages[1])
    assert sig.verify(signing_key.public_key(), messages[1])
    assert not sig.verify(public_key_bytes, messages[0])


def test_verify_bad_key_length(signature_records, messages):
    with pytest.raises(ValueError):
        decode_signature(signature_records[0]).verify(b"\x01" * 31, messages[0])


def test_load_public_key_passthrough(signing_key):
    key = signing_key.public_key()
    assert load_public_key(key) is key


def test_equality(signature_records):
    a = decode_signature(signature_records[0])
    assert a == decode_signature(bytearray(signature_records[0]))
    assert a != decode_signature(signature_records[1])
    assert len({a, decode_signature(signature_records[0])}) == 1
