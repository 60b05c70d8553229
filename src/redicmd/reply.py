"""Module containing the reply types a dispatcher hands back for a command."""

import collections.abc
import typing

__all__: collections.abc.Sequence[str] = (
    "Integer",
    "BulkString",
    "Status",
    "Array",
    "Error",
    "Reply",
    "NIL",
)


class Integer(typing.NamedTuple):
    """An integer reply (``:<n>``)."""

    value: int


class BulkString(typing.NamedTuple):
    """A binary-safe bulk string reply, ``None`` for a nil bulk string."""

    value: bytes | None

    @property
    def is_nil(self) -> bool:
        return self.value is None


class Status(typing.NamedTuple):
    """A simple status reply such as ``+OK``."""

    value: str


class Array(typing.NamedTuple):
    """A multi-bulk reply, ``None`` for a nil multi-bulk."""

    items: tuple["Reply", ...] | None

    @property
    def is_nil(self) -> bool:
        return self.items is None


class Error(typing.NamedTuple):
    """An error reply, split into its leading code and the message."""

    code: str
    message: str

    @classmethod
    def from_response(cls, response: bytes) -> "Error":
        text = response.decode("utf-8", errors="replace")
        code, _, message = text.partition(" ")
        return cls(code, message or text)


Reply: typing.TypeAlias = Integer | BulkString | Status | Array | Error

NIL: typing.Final = BulkString(None)
