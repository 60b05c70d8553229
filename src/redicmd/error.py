"""Module containing the redicmd exception hierarchy."""

import collections.abc
import dataclasses
import typing

if typing.TYPE_CHECKING:
    from redicmd import reply

__all__: collections.abc.Sequence[str] = (
    "RedisError",
    "ValidationError",
    "ConnectionError",
    "StateError",
    "ResponseError",
    "UnexpectedReplyError",
)


class RedisError(Exception):
    ...


class ValidationError(RedisError, ValueError):
    """An argument was rejected before anything was sent to Redis."""


class ConnectionError(RedisError):  # noqa: A001
    ...


class StateError(RedisError):
    ...


@dataclasses.dataclass
class ResponseError(RedisError):
    """Redis answered a command with an error reply."""

    code: str
    message: str

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_reply(cls, error_reply: "reply.Error") -> "ResponseError":
        return cls(error_reply.code, error_reply.message)


class UnexpectedReplyError(RedisError):
    """A reply did not have the shape the issuing command documents."""
