import dataclasses

import pytest

from redicmd import error, parameter, reply, transform
from redicmd.command import Command


def test_build_flattens_parameters_in_order() -> None:
    cmd = Command.build("rename", parameter.key("a"), parameter.key("b"))

    assert cmd.verb == b"RENAME"
    assert cmd.tokens == (b"a", b"b")
    assert list(cmd) == [b"RENAME", b"a", b"b"]
    assert len(cmd) == 3


def test_build_skips_missing_parameters() -> None:
    cmd = Command.build("OBJECT", parameter.string("REFCOUNT"), None)
    assert cmd.tokens == (b"REFCOUNT",)


def test_multi_token_parameters_count_towards_length() -> None:
    cmd = Command.build("DEL", parameter.keys(["a", "b", "c"]))
    assert len(cmd) == 4


def test_empty_verb_is_rejected() -> None:
    with pytest.raises(error.ValidationError):
        Command.build("")


def test_commands_are_immutable() -> None:
    cmd = Command.build("TTL", parameter.key("k"))

    with pytest.raises(dataclasses.FrozenInstanceError):
        cmd.verb = b"PTTL"  # type: ignore[misc]


def test_chaining_returns_new_commands() -> None:
    base = Command.build("MIGRATE", parameter.string("host"))
    with_copy = base.flag(True, "COPY")  # noqa: FBT003

    assert base.tokens == (b"host",)
    assert with_copy.tokens == (b"host", b"COPY")


@pytest.mark.parametrize(
    ("copy", "replace", "suffix"),
    [
        (False, False, ()),
        (True, False, (b"COPY",)),
        (False, True, (b"REPLACE",)),
        (True, True, (b"COPY", b"REPLACE")),
    ],
)
def test_conditional_suffixes_keep_fixed_order(copy: bool, replace: bool, suffix: tuple[bytes, ...]) -> None:  # noqa: FBT001
    cmd = Command.build("MIGRATE", parameter.key("k")).flag(copy, "COPY").flag(replace, "REPLACE")
    assert cmd.tokens == (b"k", *suffix)


def test_option_is_skipped_for_none() -> None:
    cmd = (
        Command.build("SCAN", parameter.integer(0))
        .option("MATCH", None)
        .option("COUNT", parameter.integer(100))
    )
    assert cmd.tokens == (b"0", b"COUNT", b"100")


def test_repeat_emits_one_group_per_value_in_order() -> None:
    cmd = Command.build("SORT", parameter.key("k")).repeat("GET", [parameter.string("w1"), parameter.string("w2")])
    assert cmd.tokens == (b"k", b"GET", b"w1", b"GET", b"w2")


def test_repeat_with_no_values_adds_nothing() -> None:
    cmd = Command.build("SORT", parameter.key("k"))
    assert cmd.repeat("GET", []) is cmd


def test_equality_ignores_decoder() -> None:
    plain = Command.build("TTL", parameter.key("k"))
    decoded = plain.with_decoder(transform.to_int)

    assert plain == decoded
    assert decoded.decoder is transform.to_int


def test_str_joins_tokens() -> None:
    cmd = Command.build("scan", parameter.integer(0), parameter.string("MATCH"), parameter.string("user:*"))
    assert str(cmd) == "SCAN 0 MATCH user:*"


async def test_execute_dispatches_and_decodes(dispatcher) -> None:
    dispatcher.replies.append(reply.Integer(7))
    cmd = Command.build("DEL", parameter.keys(["a", "b"]), decoder=transform.to_int)

    assert await cmd.execute(dispatcher) == 7
    assert dispatcher.sent == [(b"DEL", b"a", b"b")]


async def test_execute_raises_error_replies(dispatcher) -> None:
    dispatcher.replies.append(reply.Error("WRONGTYPE", "Operation against a key holding the wrong kind of value"))
    cmd = Command.build("TTL", parameter.key("k"), decoder=transform.to_int)

    with pytest.raises(error.ResponseError) as exc_info:
        await cmd.execute(dispatcher)

    assert exc_info.value.code == "WRONGTYPE"


async def test_disconnect_on_error_is_passed_to_the_dispatcher(dispatcher) -> None:
    dispatcher.replies.extend([reply.Integer(-2), reply.Integer(-2)])
    cmd = Command.build("TTL", parameter.key("k"), decoder=transform.to_int)
    lenient = cmd.set_disconnect_on_error(False)  # noqa: FBT003

    assert lenient == cmd
    assert cmd.disconnect_on_error is True
    assert await cmd.execute(dispatcher) == -2
    assert await lenient.execute(dispatcher) == -2
    assert dispatcher.disconnect_flags == [True, False]
