from __future__ import annotations
import io
import logging

import pytest

import datsleep
from datsleep import (
    BitfieldView, HeaderParseError, IncorrectFileTypeError, IncorrectFormatError,
    InvalidVersionError, RecordKind, SignatureDecodeError, SignatureView,
    SleepIOError, TreeView, TruncatedFileError, TypeMismatchError,
    UnimplementedViewError, open_file, open_path, open_reader,
)


def test_open_signatures(signatures_file, signature_records):
    f = open_reader(io.BytesIO(signatures_file))
    assert f.record_kind is RecordKind.SIGNATURES
    assert f.record_size == 64
    assert f.algorithm_name == "Ed25519"
    view = f.as_signatures()
    assert isinstance(view, SignatureView)
    assert f.record_count() == 3
    assert [s.to_bytes() for s in f.decoded_signatures()] == signature_records
    assert list(f.iterate()) == signature_records
    assert view.entries.record(1) == signature_records[1]


def test_two_signature_records(make_header, signature_records):
    f = open_reader(io.BytesIO(make_header() + b"".join(signature_records[:2])))
    assert f.record_count() == 2
    assert len(f.decoded_signatures()) == 2


def test_partial_trailing_record_excluded(make_header):
    f = open_reader(io.BytesIO(make_header() + bytes(63)))
    assert f.record_count() == 0
    assert list(f.iterate()) == []
    assert f.decoded_signatures() == ()


def test_header_only_file(make_header):
    f = open_reader(io.BytesIO(make_header()))
    assert f.record_count() == 0


def test_trailing_bytes_after_valid_records(make_header, signature_records):
    f = open_reader(io.BytesIO(make_header() + signature_records[0] + b"\xff" * 10))
    assert f.record_count() == 1
    assert len(f.decoded_signatures()) == 1


def test_corrupt_first_record_fails_open(signatures_file):
    data = bytearray(signatures_file)
    data[32 + 63] |= 0xE0
    with pytest.raises(SignatureDecodeError) as err:
        open_reader(io.BytesIO(bytes(data)))
    assert err.value.index == 0
    assert "canonical" in err.value.message


def test_corrupt_later_record_reports_index(signatures_file):
    data = bytearray(signatures_file)
    data[32 + 2 * 64 + 63] |= 0x20
    with pytest.raises(SignatureDecodeError) as err:
        open_reader(io.BytesIO(bytes(data)))
    assert err.value.index == 2


def test_record_size_mismatch_fails_every_record(make_header):
    data = make_header(record_size=32) + bytes(64)
    with pytest.raises(SignatureDecodeError) as err:
        open_reader(io.BytesIO(data))
    assert err.value.index == 0


def test_unknown_algorithm_logs_warning(make_header, signature_records, caplog):
    data = make_header(name=b"RSA") + signature_records[0]
    with caplog.at_level(logging.WARNING, logger="datsleep"):
        f = open_reader(io.BytesIO(data))
    assert f.algorithm_name == "RSA"
    assert len(f.decoded_signatures()) == 1
    assert "RSA" in caplog.text


def test_wrong_magic(signatures_file):
    data = b"\x09" + signatures_file[1:]
    with pytest.raises(IncorrectFormatError):
        open_reader(io.BytesIO(data))


def test_undefined_record_kind(make_header):
    with pytest.raises(IncorrectFileTypeError):
        open_reader(io.BytesIO(make_header(kind=3)))


def test_invalid_version(make_header):
    with pytest.raises(InvalidVersionError):
        open_reader(io.BytesIO(make_header(version=2)))


def test_short_header():
    with pytest.raises(TruncatedFileError):
        open_reader(io.BytesIO(bytes([5, 2, 87, 1, 0])))
    with pytest.raises(SleepIOError):
        open_reader(io.BytesIO(b""))


def test_strict_padding(make_header):
    data = make_header(padding=b"\x01" * 17)
    assert open_reader(io.BytesIO(data)).record_count() == 0
    with pytest.raises(HeaderParseError):
        open_reader(io.BytesIO(data), strict_padding=True)


def test_narrow_signatures_to_bitfield_fails(signatures_file):
    f = open_reader(io.BytesIO(signatures_file))
    with pytest.raises(TypeMismatchError):
        f.as_bitfield()
    with pytest.raises(TypeMismatchError):
        f.narrow(RecordKind.TREE)
    with pytest.raises(TypeError):
        f.as_tree()
    assert f.narrow(RecordKind.SIGNATURES) is f.view


@pytest.mark.parametrize("kind,view_type,accessor", [
    (0, BitfieldView, "as_bitfield"),
    (2, TreeView, "as_tree"),
])
def test_placeholder_views(make_header, kind, view_type, accessor):
    f = open_reader(io.BytesIO(make_header(kind=kind, record_size=4, name=b"") + bytes(16)))
    view = getattr(f, accessor)()
    assert isinstance(view, view_type)
    assert view.kind is RecordKind(kind)
    with pytest.raises(UnimplementedViewError):
        view.record_count()
    with pytest.raises(UnimplementedViewError):
        view.record(0)
    with pytest.raises(NotImplementedError):
        view.iterate()
    with pytest.raises(UnimplementedViewError):
        f.record_count()
    with pytest.raises(TypeMismatchError):
        f.decoded_signatures()


def test_signature_view_access(signatures_file, signature_records, messages, public_key_bytes):
    view = open_reader(io.BytesIO(signatures_file)).as_signatures()
    assert len(view) == 3
    assert view[2].to_bytes() == signature_records[2]
    assert view.signature(-1) == view.signatures[2]
    assert view.verify(0, public_key_bytes, messages[0])
    assert not view.verify(0, public_key_bytes, messages[1])
    with pytest.raises(datsleep.RecordIndexError):
        view.signature(3)


def test_open_path(tmp_path, signatures_file, signature_records):
    p = tmp_path / "metadata.signatures"
    p.write_bytes(signatures_file)
    with open_path(p) as f:
        assert f.record_count() == 3
        assert f.record(1) == signature_records[1]
    with open_path(str(p)) as f:
        assert f.record_offset(2) == 128


def test_open_path_lazy_matches_in_memory(tmp_path, signatures_file):
    p = tmp_path / "metadata.signatures"
    p.write_bytes(signatures_file + b"\x01\x02")
    eager = open_path(p)
    with open_path(p, lazy=True) as lazy:
        assert lazy.record_count() == eager.record_count() == 3
        assert list(lazy.iterate()) == list(eager.iterate())
        assert lazy.decoded_signatures() == eager.decoded_signatures()
    assert lazy.closed
    assert not eager.closed


def test_lazy_header_only_file(tmp_path, make_header):
    p = tmp_path / "empty.signatures"
    p.write_bytes(make_header())
    with open_path(p, lazy=True) as f:
        assert f.record_count() == 0


def test_lazy_corrupt_record_fails(tmp_path, signatures_file):
    data = bytearray(signatures_file)
    data[32 + 64 + 63] |= 0x40
    p = tmp_path / "bad.signatures"
    p.write_bytes(bytes(data))
    with pytest.raises(SignatureDecodeError) as err:
        open_path(p, lazy=True)
    assert err.value.index == 1


def test_open_missing_path(tmp_path):
    with pytest.raises(SleepIOError):
        open_path(tmp_path / "nope.signatures")


def test_open_file_dispatch(tmp_path, signatures_file):
    p = tmp_path / "metadata.signatures"
    p.write_bytes(signatures_file)
    assert open_file(p).record_count() == 3
    assert open_file(io.BytesIO(signatures_file)).record_count() == 3
    with pytest.raises(TypeError):
        open_file(42)


def test_stream_read_error():
    class Broken(io.RawIOBase):
        def readable(self):
            return True

        def readinto(self, b):
            raise OSError("disk gone")

    with pytest.raises(SleepIOError):
        open_reader(Broken())
