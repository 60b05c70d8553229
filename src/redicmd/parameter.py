"""Module containing argument validation for Redis commands.

Every command argument passes through one of the validators in this module
before it becomes part of a ``Command``. A validator either returns a
``Parameter`` holding the wire tokens for that argument, or raises
``ValidationError`` without anything having been sent.
"""

import collections.abc
import enum as enum_
import re
import typing

from redicmd import error

__all__: collections.abc.Sequence[str] = (
    "Parameter",
    "ParameterKind",
    "key",
    "keys",
    "integer",
    "port",
    "string",
    "enum",
    "limit",
    "validate",
    "encode_text",
    "decode_text",
)


Scalar: typing.TypeAlias = str | bytes | int | float
KeyT: typing.TypeAlias = str | bytes
IntegerT: typing.TypeAlias = int | str | bytes

_INTEGER_PATTERN: typing.Final = re.compile(rb"[+-]?[0-9]+")
_MIN_PORT: typing.Final = 1
_MAX_PORT: typing.Final = 65535


def encode_text(value: str) -> bytes:
    """Encode text into a wire token.

    ``surrogateescape`` lets binary key names that were decoded by
    ``decode_text`` travel back to Redis unchanged.
    """
    return value.encode("utf-8", errors="surrogateescape")


def decode_text(value: bytes) -> str:
    """Decode a wire token into text, inverse of ``encode_text``."""
    return value.decode("utf-8", errors="surrogateescape")


class Parameter(tuple[bytes, ...]):
    """The validated wire tokens of a single command argument.

    A parameter is never empty. Most parameters are a single token; key lists
    and limits expand into several.
    """

    __slots__ = ()

    def __new__(cls, *tokens: bytes) -> "Parameter":
        if not tokens:
            msg = "A parameter must hold at least one token."
            raise error.ValidationError(msg)

        for token in tokens:
            if not isinstance(token, bytes):
                msg = f"Parameter tokens must be bytes, got {type(token).__name__}."
                raise TypeError(msg)

        return super().__new__(cls, tokens)

    def __getnewargs__(self) -> tuple[bytes, ...]:
        return tuple(self)

    def __repr__(self) -> str:
        return f"Parameter({', '.join(map(repr, self))})"


class ParameterKind(enum_.Enum):
    """The closed set of argument shapes a command can accept."""

    KEY = "key"
    KEY_LIST = "key-list"
    INTEGER = "integer"
    PORT_NUMBER = "port-number"
    PLAIN_STRING = "plain-string"
    ENUM = "enum"
    LIMIT_SPEC = "limit-spec"


def _describe(value: object) -> str:
    return f"{value!r} ({type(value).__name__})"


def key(value: KeyT) -> Parameter:
    """Validate a single key name."""
    if isinstance(value, str):
        value = encode_text(value)

    elif not isinstance(value, bytes):
        msg = f"A key must be str or bytes, got {_describe(value)}."
        raise error.ValidationError(msg)

    if not value:
        msg = "A key must not be empty."
        raise error.ValidationError(msg)

    return Parameter(value)


def keys(value: KeyT | collections.abc.Iterable[KeyT]) -> Parameter:
    """Validate one or more key names, keeping their order.

    A lone key is treated as a list holding just that key.
    """
    if isinstance(value, str | bytes):
        return key(value)

    if not isinstance(value, collections.abc.Iterable):
        msg = f"Expected a key or a sequence of keys, got {_describe(value)}."
        raise error.ValidationError(msg)

    tokens: list[bytes] = []
    for index, item in enumerate(value):
        try:
            tokens.extend(key(item))
        except error.ValidationError as exc:
            msg = f"Invalid key at position {index}: {exc}"
            raise error.ValidationError(msg) from exc

    if not tokens:
        msg = "At least one key is required."
        raise error.ValidationError(msg)

    return Parameter(*tokens)


def _to_int(value: object) -> int:
    # bool is an int subclass, but True is never a meaningful count.
    if isinstance(value, bool):
        msg = f"Expected an integer, got {_describe(value)}."
        raise error.ValidationError(msg)

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        raw = value.strip().encode("ascii", errors="replace")
    elif isinstance(value, bytes):
        raw = value.strip()
    else:
        msg = f"Expected an integer, got {_describe(value)}."
        raise error.ValidationError(msg)

    if not _INTEGER_PATTERN.fullmatch(raw):
        msg = f"Expected a base-10 integer, got {_describe(value)}."
        raise error.ValidationError(msg)

    return int(raw)


def integer(value: IntegerT) -> Parameter:
    """Validate an integer, given either as an int or as decimal text."""
    return Parameter(b"%i" % _to_int(value))


def port(value: IntegerT) -> Parameter:
    """Validate a TCP port number."""
    number = _to_int(value)
    if not _MIN_PORT <= number <= _MAX_PORT:
        msg = f"Port must be between {_MIN_PORT} and {_MAX_PORT}, got {number}."
        raise error.ValidationError(msg)

    return Parameter(b"%i" % number)


def string(value: Scalar) -> Parameter:
    """Pass a scalar through as a single token.

    Nothing is escaped; the multi-bulk framing is binary safe. Bytes are used
    as-is, which is what serialized DUMP payloads need.
    """
    if isinstance(value, bytes):
        return Parameter(value)

    if isinstance(value, str):
        return Parameter(encode_text(value))

    if isinstance(value, int | float):
        return Parameter(str(value).encode())

    msg = f"Expected a str, bytes, int or float, got {_describe(value)}."
    raise error.ValidationError(msg)


def enum(value: str, allowed: collections.abc.Iterable[str]) -> Parameter:
    """Validate that ``value`` is exactly one of ``allowed``.

    Matching is case-sensitive.
    """
    options = tuple(allowed)
    if isinstance(value, str) and value in options:
        return Parameter(encode_text(value))

    msg = f"Expected one of {', '.join(options)}; got {_describe(value)}."
    raise error.ValidationError(msg)


def limit(value: int | collections.abc.Sequence[IntegerT]) -> Parameter:
    """Validate a LIMIT clause as ``offset count`` tokens.

    A bare integer is a count with an offset of 0.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return Parameter(b"0", b"%i" % value)

    if isinstance(value, collections.abc.Sequence) and not isinstance(value, str | bytes):
        if len(value) == 2:  # noqa: PLR2004
            offset, count = value
            try:
                return Parameter(b"%i" % _to_int(offset), b"%i" % _to_int(count))
            except error.ValidationError as exc:
                msg = f"Invalid limit {value!r}: {exc}"
                raise error.ValidationError(msg) from exc

    msg = f"A limit must be a count or an (offset, count) pair, got {_describe(value)}."
    raise error.ValidationError(msg)


def validate(
    kind: ParameterKind,
    value: typing.Any,  # noqa: ANN401
    /,
    *,
    allowed: collections.abc.Iterable[str] | None = None,
) -> Parameter:
    """Validate ``value`` according to ``kind``."""
    if kind is ParameterKind.ENUM:
        if allowed is None:
            msg = "ParameterKind.ENUM requires the allowed values."
            raise TypeError(msg)

        return enum(value, allowed)

    if allowed is not None:
        msg = f"Allowed values only apply to ParameterKind.ENUM, not {kind}."
        raise TypeError(msg)

    return _VALIDATORS[kind](value)


_VALIDATORS: typing.Final[dict[ParameterKind, typing.Callable[[typing.Any], Parameter]]] = {
    ParameterKind.KEY: key,
    ParameterKind.KEY_LIST: keys,
    ParameterKind.INTEGER: integer,
    ParameterKind.PORT_NUMBER: port,
    ParameterKind.PLAIN_STRING: string,
    ParameterKind.LIMIT_SPEC: limit,
}
