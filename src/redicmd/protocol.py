"""Module containing protocols that prescribe redicmd implementations."""

import collections.abc
import typing

if typing.TYPE_CHECKING:
    import typing_extensions

    from redicmd import reply

__all__: collections.abc.Sequence[str] = ("CommandProto", "DispatcherProto", "ConnectionProto")


class CommandProto(typing.Protocol):
    """Redis command protocol."""

    @property
    def verb(self) -> bytes: ...

    @property
    def tokens(self) -> tuple[bytes, ...]: ...

    def __iter__(self) -> typing.Iterator[bytes]: ...

    def __len__(self) -> int: ...


class DispatcherProto(typing.Protocol):
    """Anything that can send a command and hand back the raw reply."""

    async def execute(
        self,
        command: "CommandProto",
        /,
        *,
        disconnect_on_error: bool = True,
    ) -> "reply.Reply":
        """Send ``command`` and wait for its complete reply.

        Error replies are returned, not raised; deciding what they mean is up
        to the command's decoder.
        """
        ...


class ConnectionProto(DispatcherProto, typing.Protocol):
    """Redis connection protocol."""

    @classmethod
    async def from_host_port(
        cls,
        host: str,
        port: int,
        /,
        *,
        db: int = 0,
    ) -> "typing_extensions.Self":
        """Connect to Redis at the provided host and port, selecting ``db``."""
        ...

    def is_alive(self) -> bool:
        """Check whether this connection has an active redis connection."""
        ...

    async def connect(self) -> None:
        """Connect to Redis with the connection parameters provided at instantiation."""
        ...

    async def disconnect(self) -> None:
        """Close the connection with Redis."""
        ...

    async def write_command(self, command: "CommandProto", /) -> None:
        """Write a command to the connected Redis instance.

        This requires this connection to be alive.

        ``read_response`` *must* be called after this.
        """
        ...

    async def read_response(self, *, disconnect_on_error: bool) -> "reply.Reply":
        """Read the response to a previously executed command.

        This requires this connection to be alive.
        """
        ...
