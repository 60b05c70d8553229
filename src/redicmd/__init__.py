"""An asyncio Redis client that validates every argument before it is sent."""

import collections.abc

from redicmd import keys, parameter, reply, transform
from redicmd.client import Redis
from redicmd.command import Command
from redicmd.connection import ActionableConnection, Connection
from redicmd.error import (
    ConnectionError,  # noqa: A004
    RedisError,
    ResponseError,
    StateError,
    UnexpectedReplyError,
    ValidationError,
)
from redicmd.parameter import Parameter, ParameterKind
from redicmd.transform import ScanResult

__version__ = "0.1.0"

__all__: collections.abc.Sequence[str] = (
    "ActionableConnection",
    "Command",
    "Connection",
    "ConnectionError",
    "Parameter",
    "ParameterKind",
    "Redis",
    "RedisError",
    "ResponseError",
    "ScanResult",
    "StateError",
    "UnexpectedReplyError",
    "ValidationError",
    "keys",
    "parameter",
    "reply",
    "transform",
)
