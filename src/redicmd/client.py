"""Module containing Redis client implementation."""

import asyncio
import collections.abc
import dataclasses
import logging
import types
import typing

from redicmd import connection, protocol

if typing.TYPE_CHECKING:
    import typing_extensions

__all__: collections.abc.Sequence[str] = ("Redis",)

_LOGGER: typing.Final = logging.getLogger(__name__)


ConnectionT = typing.TypeVar("ConnectionT", bound=protocol.ConnectionProto)


@dataclasses.dataclass(slots=True)
class Redis:
    """Redis client implementation."""

    host: str
    port: int
    db: int = 0

    _connections: list[protocol.ConnectionProto] = dataclasses.field(
        default_factory=list,
        init=False,
        repr=False,
    )

    @classmethod
    def from_url(cls, url: str) -> "Redis":
        """Create a Redis client from a Redis url.

        Urls take the shape ``redis://host:port[/db]``. This performs URL
        validation, but does *not* make any connections.

        Connections should be created by the user with ``get_connection``.
        """
        host, port, db = connection.parse_url(url)
        return cls(host, port, db)

    async def get_connection(
        self,
        connection_class: type[ConnectionT] = connection.ActionableConnection,
    ) -> ConnectionT:
        """Make a new connection to this client's Redis instance.

        By default, this make a new ActionableConnection. You can provide a
        different (custom) connection class through the ``connection_class``
        argument.

        Every connection handles one command at a time; make one connection per
        concurrent task.
        """
        new_connection = await connection_class.from_host_port(self.host, self.port, db=self.db)
        self._connections.append(new_connection)
        return new_connection

    async def disconnect(self) -> None:
        """Disconnect all connections registered to this Redis client."""
        connections, self._connections = self._connections, []
        _LOGGER.debug("disconnecting %i connection(s)", len(connections))
        # Connections closed by the user or by a transport failure are skipped.
        await asyncio.gather(*[con.disconnect() for con in connections if con.is_alive()])

    async def __aenter__(self) -> "typing_extensions.Self":
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _exc_tb: types.TracebackType | None,
    ) -> None:
        await self.disconnect()
