import pytest

from redicmd import error, keys, reply


@pytest.mark.parametrize(
    ("cmd", "expected"),
    [
        (keys.delete("a"), [b"DEL", b"a"]),
        (keys.delete(["a", "b"]), [b"DEL", b"a", b"b"]),
        (keys.dump("k"), [b"DUMP", b"k"]),
        (keys.exists(("a", "b", "a")), [b"EXISTS", b"a", b"b", b"a"]),
        (keys.expire("session:42", 30), [b"EXPIRE", b"session:42", b"30"]),
        (keys.expireat("k", "1700000000"), [b"EXPIREAT", b"k", b"1700000000"]),
        (keys.keys("user:*"), [b"KEYS", b"user:*"]),
        (keys.move("k", 2), [b"MOVE", b"k", b"2"]),
        (keys.object("ENCODING", "k"), [b"OBJECT", b"ENCODING", b"k"]),
        (keys.object("REFCOUNT"), [b"OBJECT", b"REFCOUNT"]),
        (keys.persist("k"), [b"PERSIST", b"k"]),
        (keys.pexpire("k", 1500), [b"PEXPIRE", b"k", b"1500"]),
        (keys.pexpireat("k", 1700000000000), [b"PEXPIREAT", b"k", b"1700000000000"]),
        (keys.pttl("k"), [b"PTTL", b"k"]),
        (keys.randomkey(), [b"RANDOMKEY"]),
        (keys.rename("a", "b"), [b"RENAME", b"a", b"b"]),
        (keys.renamenx("a", "b"), [b"RENAMENX", b"a", b"b"]),
        (keys.ttl("k"), [b"TTL", b"k"]),
        (keys.type("k"), [b"TYPE", b"k"]),
        (keys.wait(1, 100), [b"WAIT", b"1", b"100"]),
    ],
)
def test_wire_tokens(cmd: keys.Command, expected: list[bytes]) -> None:
    assert list(cmd) == expected


def test_migrate_without_flags() -> None:
    cmd = keys.migrate("10.0.0.2", 6379, "k", 0, 5000)
    assert list(cmd) == [b"MIGRATE", b"10.0.0.2", b"6379", b"k", b"0", b"5000"]


def test_migrate_copy_only() -> None:
    cmd = keys.migrate("10.0.0.2", 6379, "k", 0, 5000, copy=True)
    assert cmd.tokens[-2:] == (b"5000", b"COPY")


def test_migrate_copy_and_replace_in_fixed_order() -> None:
    cmd = keys.migrate("10.0.0.2", 6379, "k", 0, 5000, replace=True, copy=True)
    assert cmd.tokens[-2:] == (b"COPY", b"REPLACE")


def test_migrate_validates_port() -> None:
    with pytest.raises(error.ValidationError):
        keys.migrate("10.0.0.2", 70000, "k", 0, 5000)


def test_object_rejects_unknown_subcommand() -> None:
    with pytest.raises(error.ValidationError):
        keys.object("refcount", "k")


def test_restore_passes_payload_verbatim() -> None:
    payload = b"\x00\xc0\x01\t\x00\xf6\x8a\r\n"
    cmd = keys.restore("k", 0, payload, replace=True)
    assert list(cmd) == [b"RESTORE", b"k", b"0", payload, b"REPLACE"]


def test_scan_with_match_and_count() -> None:
    cmd = keys.scan(0, pattern="user:*", count=100)
    assert cmd.tokens == (b"0", b"MATCH", b"user:*", b"COUNT", b"100")


def test_scan_cursor_only() -> None:
    assert keys.scan(42).tokens == (b"42",)


def test_sort_repeats_get_patterns_in_order() -> None:
    cmd = keys.sort("k", get=["w1", "w2"])
    assert cmd.tokens == (b"k", b"GET", b"w1", b"GET", b"w2")


def test_sort_single_get_pattern() -> None:
    assert keys.sort("k", get="#").tokens == (b"k", b"GET", b"#")


def test_sort_full_clause_order() -> None:
    cmd = keys.sort(
        "mylist",
        by="weight_*",
        limit=(10, 5),
        get=["object_*", "#"],
        order="DESC",
        alpha=True,
        store="dst",
    )
    assert cmd.tokens == (
        b"mylist",
        b"BY", b"weight_*",
        b"LIMIT", b"10", b"5",
        b"GET", b"object_*",
        b"GET", b"#",
        b"DESC",
        b"ALPHA",
        b"STORE", b"dst",
    )


def test_sort_bare_limit_is_count_from_zero() -> None:
    assert keys.sort("k", limit=3).tokens == (b"k", b"LIMIT", b"0", b"3")


def test_sort_rejects_lowercase_order() -> None:
    with pytest.raises(error.ValidationError):
        keys.sort("k", order="asc")


def test_validation_happens_before_dispatch() -> None:
    with pytest.raises(error.ValidationError):
        keys.expire("", 30)

    with pytest.raises(error.ValidationError):
        keys.expire("k", "30s")


async def test_expire_end_to_end(dispatcher) -> None:
    cmd = keys.expire("session:42", 30)
    assert cmd.verb == b"EXPIRE"
    assert cmd.tokens == (b"session:42", b"30")

    dispatcher.replies.append(reply.Integer(1))
    assert await cmd.execute(dispatcher) == 1


async def test_randomkey_end_to_end(dispatcher) -> None:
    cmd = keys.randomkey()
    assert cmd.verb == b"RANDOMKEY"
    assert cmd.tokens == ()

    dispatcher.replies.append(reply.BulkString(None))
    assert await cmd.execute(dispatcher) is None


async def test_rename_decodes_ok(dispatcher) -> None:
    dispatcher.replies.append(reply.Status("OK"))
    assert await keys.rename("a", "b").execute(dispatcher) is True


async def test_rename_surfaces_error_reply(dispatcher) -> None:
    dispatcher.replies.append(reply.Error("ERR", "no such key"))
    with pytest.raises(error.ResponseError):
        await keys.rename("a", "b").execute(dispatcher)


async def test_type_decodes_status(dispatcher) -> None:
    dispatcher.replies.append(reply.Status("zset"))
    assert await keys.type("k").execute(dispatcher) == "zset"


async def test_dump_returns_bytes(dispatcher) -> None:
    dispatcher.replies.append(reply.BulkString(b"\x00\xff"))
    assert await keys.dump("k").execute(dispatcher) == b"\x00\xff"
