"""Module containing reply decoders for high-level Redis commands.

Each command built by ``redicmd.keys`` names one of these decoders. A decoder
takes the raw ``Reply`` a dispatcher produced and narrows it to the value the
command documents. Every decoder raises ``ResponseError`` for error replies and
``UnexpectedReplyError`` for replies of the wrong shape.
"""

import collections.abc
import typing

from redicmd import error, parameter, reply

__all__: collections.abc.Sequence[str] = (
    "Decoder",
    "ScanResult",
    "identity",
    "to_int",
    "to_bool",
    "to_ok",
    "to_migrate_status",
    "to_str",
    "to_optional_str",
    "to_bytes",
    "to_optional_bytes",
    "to_str_list",
    "to_scan",
    "to_int_or_str",
    "to_sort",
)


Decoder: typing.TypeAlias = typing.Callable[[reply.Reply], typing.Any]


class ScanResult(typing.NamedTuple):
    """The next cursor and the batch of keys returned by a single SCAN."""

    cursor: int
    keys: list[str]


def _unexpected(raw: reply.Reply, expected: str) -> error.UnexpectedReplyError:
    return error.UnexpectedReplyError(f"Expected {expected} reply, got {raw!r}.")


def _check(raw: reply.Reply) -> reply.Reply:
    if isinstance(raw, reply.Error):
        raise error.ResponseError.from_reply(raw)

    return raw


def identity(raw: reply.Reply) -> reply.Reply:
    """Return the reply as-is, raising only for error replies."""
    return _check(raw)


def to_int(raw: reply.Reply) -> int:
    raw = _check(raw)
    if isinstance(raw, reply.Integer):
        return raw.value

    raise _unexpected(raw, "an integer")


def to_bool(raw: reply.Reply) -> bool:
    return to_int(raw) != 0


def to_ok(raw: reply.Reply) -> bool:
    """Decode a ``+OK`` status reply to ``True``."""
    raw = _check(raw)
    if isinstance(raw, reply.Status) and raw.value == "OK":
        return True

    raise _unexpected(raw, "an OK status")


def to_migrate_status(raw: reply.Reply) -> bool:
    """Decode the MIGRATE status; ``NOKEY`` means nothing was migrated."""
    raw = _check(raw)
    if isinstance(raw, reply.Status):
        if raw.value == "OK":
            return True

        if raw.value == "NOKEY":
            return False

    raise _unexpected(raw, "an OK or NOKEY status")


def to_optional_bytes(raw: reply.Reply) -> bytes | None:
    raw = _check(raw)
    if isinstance(raw, reply.BulkString):
        return None if raw.is_nil else raw.value

    if isinstance(raw, reply.Status):
        return parameter.encode_text(raw.value)

    raise _unexpected(raw, "a bulk string")


def to_bytes(raw: reply.Reply) -> bytes:
    value = to_optional_bytes(raw)
    if value is None:
        raise _unexpected(raw, "a non-nil bulk string")

    return value


def to_optional_str(raw: reply.Reply) -> str | None:
    value = to_optional_bytes(raw)
    if value is None:
        return None

    return parameter.decode_text(value)


def to_str(raw: reply.Reply) -> str:
    return parameter.decode_text(to_bytes(raw))


def _items(raw: reply.Reply) -> tuple[reply.Reply, ...]:
    raw = _check(raw)
    if isinstance(raw, reply.Array):
        return () if raw.is_nil else raw.items

    raise _unexpected(raw, "an array")


def to_str_list(raw: reply.Reply) -> list[str]:
    return [to_str(item) for item in _items(raw)]


def to_scan(raw: reply.Reply) -> ScanResult:
    """Decode a SCAN reply of shape ``[cursor, [key, ...]]``."""
    items = _items(raw)
    if len(items) != 2:  # noqa: PLR2004
        raise _unexpected(raw, "a two-element SCAN")

    cursor, batch = items
    try:
        next_cursor = int(to_bytes(cursor))
    except ValueError as exc:
        raise _unexpected(cursor, "a numeric cursor") from exc

    return ScanResult(next_cursor, to_str_list(batch))


def to_int_or_str(raw: reply.Reply) -> int | str | None:
    """Decode a reply that is an integer or a (possibly nil) string."""
    raw = _check(raw)
    if isinstance(raw, reply.Integer):
        return raw.value

    return to_optional_str(raw)


def to_sort(raw: reply.Reply) -> list[str | None] | int:
    """Decode a SORT reply.

    With STORE, Redis answers with the number of stored elements. Otherwise
    the reply is the sorted elements, where GET patterns that match nothing
    come back as ``None``.
    """
    raw = _check(raw)
    if isinstance(raw, reply.Integer):
        return raw.value

    return [to_optional_str(item) for item in _items(raw)]
