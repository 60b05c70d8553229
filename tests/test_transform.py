import pytest

from redicmd import error, reply, transform


def test_error_replies_raise_response_error() -> None:
    with pytest.raises(error.ResponseError, match="no such key") as exc_info:
        transform.to_ok(reply.Error("ERR", "no such key"))

    assert exc_info.value.code == "ERR"


def test_identity_returns_reply() -> None:
    assert transform.identity(reply.Status("PONG")) == reply.Status("PONG")


def test_to_int() -> None:
    assert transform.to_int(reply.Integer(-2)) == -2

    with pytest.raises(error.UnexpectedReplyError):
        transform.to_int(reply.BulkString(b"1"))


def test_to_bool() -> None:
    assert transform.to_bool(reply.Integer(1)) is True
    assert transform.to_bool(reply.Integer(0)) is False


def test_to_ok_only_accepts_ok() -> None:
    assert transform.to_ok(reply.Status("OK")) is True

    with pytest.raises(error.UnexpectedReplyError):
        transform.to_ok(reply.Status("QUEUED"))


def test_to_migrate_status() -> None:
    assert transform.to_migrate_status(reply.Status("OK")) is True
    assert transform.to_migrate_status(reply.Status("NOKEY")) is False

    with pytest.raises(error.UnexpectedReplyError):
        transform.to_migrate_status(reply.Integer(1))


def test_optional_str_handles_nil() -> None:
    assert transform.to_optional_str(reply.NIL) is None
    assert transform.to_optional_str(reply.BulkString(b"user:1")) == "user:1"


def test_str_rejects_nil() -> None:
    with pytest.raises(error.UnexpectedReplyError):
        transform.to_str(reply.NIL)


def test_str_accepts_status() -> None:
    assert transform.to_str(reply.Status("string")) == "string"


def test_bytes_are_not_decoded() -> None:
    payload = b"\x00\xc0\x01\t\x00\xf6\x8a"
    assert transform.to_optional_bytes(reply.BulkString(payload)) == payload


def test_to_str_list() -> None:
    raw = reply.Array((reply.BulkString(b"a"), reply.BulkString(b"b")))
    assert transform.to_str_list(raw) == ["a", "b"]
    assert transform.to_str_list(reply.Array(None)) == []


def test_to_scan() -> None:
    raw = reply.Array((reply.BulkString(b"17"), reply.Array((reply.BulkString(b"user:1"),))))
    assert transform.to_scan(raw) == transform.ScanResult(17, ["user:1"])


def test_to_scan_rejects_malformed_replies() -> None:
    with pytest.raises(error.UnexpectedReplyError):
        transform.to_scan(reply.Array((reply.BulkString(b"0"),)))

    with pytest.raises(error.UnexpectedReplyError):
        transform.to_scan(reply.Array((reply.BulkString(b"x"), reply.Array(()))))


def test_to_int_or_str() -> None:
    assert transform.to_int_or_str(reply.Integer(3)) == 3
    assert transform.to_int_or_str(reply.BulkString(b"listpack")) == "listpack"
    assert transform.to_int_or_str(reply.NIL) is None


def test_to_sort() -> None:
    assert transform.to_sort(reply.Integer(4)) == 4
    assert transform.to_sort(reply.Array((reply.BulkString(b"1"), reply.NIL))) == ["1", None]


def test_nil_replies() -> None:
    assert reply.NIL.is_nil
    assert not reply.BulkString(b"").is_nil
    assert reply.Array(None).is_nil
    assert not reply.Array(()).is_nil

    assert transform.to_optional_bytes(reply.BulkString(b"")) == b""
    assert transform.to_sort(reply.Array(None)) == []
