"""Module containing connection implementations."""

import asyncio
import collections.abc
import dataclasses
import enum
import logging
import socket
import typing
import urllib.parse

from redicmd import command, error, keys, parameter, protocol, reply, transform

if typing.TYPE_CHECKING:
    import typing_extensions

__all__: collections.abc.Sequence[str] = ("Connection", "ActionableConnection", "parse_url")

_LOGGER: typing.Final = logging.getLogger(__name__)

_RESP3: typing.Final = 3

KeysT: typing.TypeAlias = keys.KeysT

ConnectHook: typing.TypeAlias = typing.Callable[
    ["Connection"],
    typing.Coroutine[typing.Any, typing.Any, None],
]


class ByteResponse(bytes, enum.Enum):
    # Ordered by documentation:
    # https://github.com/redis/redis-specifications/blob/master/protocol/RESP3.md

    # Simple types
    BLOB_STRING = b"$"
    SIMPLE_STRING = b"+"
    SIMPLE_ERROR = b"-"
    NUMBER = b":"
    NULL = b"_"
    DOUBLE = b","
    BOOLEAN = b"#"
    BLOB_ERROR = b"!"
    VERBATIM_STRING = b"="
    BIG_NUMBER = b"("

    # Aggregate types
    ARRAY = b"*"
    MAP = b"%"
    SET = b"~"
    ATTRIBUTE = b"|"
    PUSH = b">"


def parse_url(url: str, /) -> tuple[str, int, int]:
    """Split a ``redis://host:port[/db]`` url into host, port and db."""
    parsed = urllib.parse.urlparse(url)
    if not parsed.hostname or not parsed.port or parsed.scheme != "redis":
        msg = "Only urls of scheme 'redis://host:port[/db]' are supported"
        raise ValueError(msg)

    path = parsed.path.strip("/")
    if not path:
        return parsed.hostname, parsed.port, 0

    if not path.isdigit():
        msg = f"Database must be a non-negative integer, got {path!r}"
        raise ValueError(msg)

    return parsed.hostname, parsed.port, int(path)


def pack_command(command: protocol.CommandProto, /) -> bytes:
    """Frame a command as a RESP multi-bulk request."""
    chunks = [b"*%i\r\n" % len(command)]
    for arg in command:
        chunks.append(b"$%i\r\n" % len(arg))
        chunks.append(arg)
        chunks.append(b"\r\n")

    return b"".join(chunks)


@dataclasses.dataclass(slots=True)
class Connection:
    """Low-level connection implementation.

    This connection can make connections to Redis, and both send and receive
    commands. It does not implement any higher-level commands.

    Replies are parsed into ``redicmd.reply`` values. RESP3 replies are
    narrowed onto the RESP2 reply shapes, so decoders see the same replies
    regardless of the negotiated protocol version.
    """

    host: str
    port: int
    db: int = 0
    resp3: bool = True
    buffer_limit: int = 6000
    _post_connect_hooks: dict[str, ConnectHook] = dataclasses.field(
        default_factory=dict,
        repr=False,
    )
    _reader: asyncio.StreamReader | None = dataclasses.field(default=None, repr=False)
    _writer: asyncio.StreamWriter | None = dataclasses.field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.resp3:
            self._post_connect_hooks["HELLO"] = _set_resp3

        if self.db:
            self._post_connect_hooks["SELECT"] = _select_db

    @classmethod
    async def from_url(cls, url: str, /) -> "typing_extensions.Self":
        """Connect to the provided Redis url."""
        host, port, db = parse_url(url)
        return await cls.from_host_port(host, port, db=db)

    @classmethod
    async def from_host_port(
        cls,
        host: str,
        port: int,
        /,
        *,
        db: int = 0,
    ) -> "typing_extensions.Self":
        """Connect to Redis at the provided host and port."""
        self = cls(host=host, port=port, db=db)
        await self.connect()
        return self

    def __del__(self) -> None:
        if getattr(self, "_writer", None):
            self._close()

    def _close(self) -> asyncio.StreamWriter:
        assert self._writer

        writer = self._writer
        writer.close()
        self._writer = self._reader = None

        return writer

    def is_alive(self) -> bool:
        """Check whether this connection has an active redis connection."""
        return self._reader is not None and self._writer is not None

    def add_post_connect_hook(self, name: str, hook: ConnectHook, /) -> None:
        """Register a coroutine to run every time this connection connects.

        Hooks run in registration order; registering a name again replaces the
        earlier hook.
        """
        self._post_connect_hooks[name] = hook

    async def connect(self) -> None:
        """Connect to Redis with the connection parameters provided at instantiation."""
        try:
            reader, writer = await asyncio.open_connection(
                self.host,
                self.port,
                limit=self.buffer_limit,
            )
            sock: socket.socket | None = writer.transport.get_extra_info("socket")
            if sock is not None:
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        except OSError as exc:
            _LOGGER.warning("failed to connect to %s:%i: %s", self.host, self.port, exc)
            msg = f"Failed to connect to '{self.host}:{self.port}'."
            raise error.ConnectionError(msg) from exc

        self._reader = reader
        self._writer = writer
        _LOGGER.info("connected to %s:%i", self.host, self.port)

        try:
            for hook in list(self._post_connect_hooks.values()):
                await hook(self)

        except BaseException:
            if self.is_alive():
                self._close()

            raise

    async def disconnect(self) -> None:
        """Close the connection with Redis."""
        if not self.is_alive():
            msg = "The connection is already closed."
            raise error.StateError(msg)

        closing_writer = self._close()
        await closing_writer.wait_closed()
        _LOGGER.info("disconnected from %s:%i", self.host, self.port)

    async def write_command(self, command: protocol.CommandProto, /) -> None:
        """Write a command to the connected Redis instance.

        This requires this connection to be alive.

        ``read_response`` *must* be called after this.
        """
        if not self.is_alive():
            msg = "Cannot send commands to a closed connection."
            raise error.StateError(msg)

        assert self._writer is not None

        try:
            self._writer.write(pack_command(command))
            await self._writer.drain()

        except OSError as exc:
            self._close()

            if len(exc.args) < 2:  # noqa: PLR2004
                error_code = "UNKNOWN"
                error_msg = exc.args[0] if exc.args else exc

            else:
                error_code, error_msg, *_ = exc.args

            _LOGGER.warning("writing to %s:%i failed: %s", self.host, self.port, error_msg)
            msg = f"Writing to '{self.host}:{self.port}' raised {error_code}: {error_msg}"
            raise error.ConnectionError(msg) from exc

        except BaseException:
            self._close()
            raise

    async def _read_bytes(self, n: int) -> bytes:
        assert self._reader is not None

        response = await self._reader.readexactly(n + 2)

        if response[-2:] == b"\r\n":
            return response[:-2]

        msg = "reading data from stream returned incomplete response."
        raise error.ConnectionError(msg)

    async def _read_aggregate(self, length: int) -> tuple[reply.Reply, ...]:
        return tuple([await self._read_response() for _ in range(length)])

    async def _read_response(self) -> reply.Reply:  # noqa: C901, PLR0911, PLR0912
        assert self._reader is not None

        data = await self._reader.readuntil(b"\r\n")

        # First character is a symbol that determines the data type,
        # the rest is the actual data.
        byte, response = data[:1], data[1:-2]

        if byte == ByteResponse.SIMPLE_ERROR:
            return reply.Error.from_response(response)

        if byte == ByteResponse.BLOB_ERROR:
            return reply.Error.from_response(await self._read_bytes(int(response)))

        if byte == ByteResponse.SIMPLE_STRING:
            return reply.Status(response.decode("utf-8", errors="replace"))

        if byte == ByteResponse.BLOB_STRING:
            length = int(response)
            # RESP2 nil bulk string.
            if length < 0:
                return reply.NIL

            return reply.BulkString(await self._read_bytes(length))

        if byte == ByteResponse.VERBATIM_STRING:
            # Drop the three-letter format and its separator, e.g. b"txt:".
            return reply.BulkString((await self._read_bytes(int(response)))[4:])

        if byte in (ByteResponse.NUMBER, ByteResponse.BIG_NUMBER):
            return reply.Integer(int(response))

        if byte == ByteResponse.DOUBLE:
            return reply.BulkString(response)

        if byte == ByteResponse.BOOLEAN:
            return reply.Integer(int(response == b"t"))

        if byte == ByteResponse.NULL:
            return reply.NIL

        if byte in (ByteResponse.ARRAY, ByteResponse.SET):
            length = int(response)
            # RESP2 nil multi-bulk.
            if length < 0:
                return reply.Array(None)

            return reply.Array(await self._read_aggregate(length))

        if byte == ByteResponse.MAP:
            return reply.Array(await self._read_aggregate(2 * int(response)))

        if byte in (ByteResponse.PUSH, ByteResponse.ATTRIBUTE):
            raise NotImplementedError

        msg = f"{byte!r} is not a valid response type"
        raise error.UnexpectedReplyError(msg)

    async def read_response(self, *, disconnect_on_error: bool = True) -> reply.Reply:
        """Read the response to a previously executed command.

        This requires this connection to be alive.
        """
        if not self.is_alive():
            msg = "Cannot read responses from a closed connection."
            raise error.StateError(msg)

        try:
            return await self._read_response()

        except (OSError, asyncio.IncompleteReadError) as exc:
            if disconnect_on_error and self.is_alive():
                await self.disconnect()

            _LOGGER.warning("reading from %s:%i failed: %s", self.host, self.port, exc)
            msg = f"Failed to read from '{self.host}:{self.port}': {exc}"
            raise error.ConnectionError(msg) from exc

        except BaseException:
            if disconnect_on_error and self.is_alive():
                await self.disconnect()

            raise

    async def execute(
        self,
        command: protocol.CommandProto,
        /,
        *,
        disconnect_on_error: bool = True,
    ) -> reply.Reply:
        """Send a command and wait for its complete reply."""
        _LOGGER.debug("executing %s with %i argument(s)", command.verb.decode(errors="replace"), len(command) - 1)
        await self.write_command(command)
        return await self.read_response(disconnect_on_error=disconnect_on_error)


async def _set_resp3(con: Connection) -> None:
    hello = command.Command.build("HELLO", parameter.integer(_RESP3))
    response = await con.execute(hello)
    if isinstance(response, reply.Error):
        raise error.ResponseError.from_reply(response)

    # HELLO answers with a map, flattened to alternating keys and values.
    items = response.items if isinstance(response, reply.Array) else None
    fields = dict(zip(items[::2], items[1::2], strict=True)) if items else {}
    if fields.get(reply.BulkString(b"proto")) != reply.Integer(_RESP3):
        msg = "Failed to set redis protocol version to 3"
        raise error.RedisError(msg)


async def _select_db(con: Connection) -> None:
    select = command.Command.build("SELECT", parameter.integer(con.db), decoder=transform.to_ok)
    await select.execute(con)


@dataclasses.dataclass(slots=True)
class ActionableConnection:
    """High-level connection implementation.

    This connection can make connections to Redis, and both send and receive
    commands. This connection implements the keyspace commands on top of the
    builders in ``redicmd.keys``; each method validates its arguments before
    anything is sent and returns the decoded reply.
    """

    connection: protocol.ConnectionProto

    @classmethod
    async def from_url(
        cls,
        url: str,
        /,
        *,
        connection_class: type[protocol.ConnectionProto] = Connection,
    ) -> "typing_extensions.Self":
        """Connect to the provided Redis url."""
        host, port, db = parse_url(url)
        return await cls.from_host_port(host, port, db=db, connection_class=connection_class)

    @classmethod
    async def from_host_port(
        cls,
        host: str,
        port: int,
        /,
        *,
        db: int = 0,
        connection_class: type[protocol.ConnectionProto] = Connection,
    ) -> "typing_extensions.Self":
        """Connect to Redis at the provided host and port."""
        connection = await connection_class.from_host_port(host, port, db=db)
        return cls(connection)

    async def connect(self) -> None:
        """Connect to Redis with the connection parameters provided at instantiation."""
        await self.connection.connect()

    def is_alive(self) -> bool:
        """Check whether the wrapped connection has an active redis connection."""
        return self.connection.is_alive()

    async def disconnect(self) -> None:
        """Close the connection with Redis."""
        await self.connection.disconnect()

    async def write_command(self, command: protocol.CommandProto, /) -> None:
        """Write a command to the connected Redis instance.

        This requires this connection to be alive.

        ``read_response`` *must* be called after this.
        """
        await self.connection.write_command(command)

    async def read_response(self, *, disconnect_on_error: bool = True) -> reply.Reply:
        """Read the response to a previously executed command.

        This requires this connection to be alive.
        """
        return await self.connection.read_response(disconnect_on_error=disconnect_on_error)

    async def execute(
        self,
        command: protocol.CommandProto,
        /,
        *,
        disconnect_on_error: bool = True,
    ) -> reply.Reply:
        """Send a command and wait for its complete, undecoded reply."""
        return await self.connection.execute(command, disconnect_on_error=disconnect_on_error)

    async def delete(self, keys_: KeysT, /) -> int:
        """Remove the specified keys, returning how many were removed."""
        return await keys.delete(keys_).execute(self.connection)

    async def dump(self, key: parameter.KeyT, /) -> bytes | None:
        """Serialize the value stored at key."""
        return await keys.dump(key).execute(self.connection)

    async def exists(self, keys_: KeysT, /) -> int:
        """Count how many of the given keys exist."""
        return await keys.exists(keys_).execute(self.connection)

    async def expire(self, key: parameter.KeyT, seconds: parameter.IntegerT, /) -> int:
        """Set a timeout on key, in seconds."""
        return await keys.expire(key, seconds).execute(self.connection)

    async def expireat(self, key: parameter.KeyT, timestamp: parameter.IntegerT, /) -> int:
        """Set key to expire at a unix timestamp, in seconds."""
        return await keys.expireat(key, timestamp).execute(self.connection)

    async def keys(self, pattern: parameter.Scalar, /) -> list[str]:
        """Return all keys matching pattern."""
        return await keys.keys(pattern).execute(self.connection)

    async def migrate(  # noqa: PLR0913
        self,
        host: str,
        port: parameter.IntegerT,
        key: parameter.KeyT,
        destination_db: parameter.IntegerT,
        timeout: parameter.IntegerT,
        *,
        copy: bool = False,
        replace: bool = False,
    ) -> bool:
        """Atomically transfer a key to another Redis instance."""
        cmd = keys.migrate(host, port, key, destination_db, timeout, copy=copy, replace=replace)
        return await cmd.execute(self.connection)

    async def move(self, key: parameter.KeyT, db: parameter.IntegerT, /) -> int:
        """Move key to another database."""
        return await keys.move(key, db).execute(self.connection)

    async def object(self, subcommand: str, arguments: KeysT | None = None, /) -> int | str | None:
        """Inspect the internals of the value stored at a key."""
        return await keys.object(subcommand, arguments).execute(self.connection)

    async def persist(self, key: parameter.KeyT, /) -> int:
        """Remove the existing timeout on key."""
        return await keys.persist(key).execute(self.connection)

    async def pexpire(self, key: parameter.KeyT, milliseconds: parameter.IntegerT, /) -> int:
        """Set a timeout on key, in milliseconds."""
        return await keys.pexpire(key, milliseconds).execute(self.connection)

    async def pexpireat(self, key: parameter.KeyT, timestamp: parameter.IntegerT, /) -> int:
        """Set key to expire at a unix timestamp, in milliseconds."""
        return await keys.pexpireat(key, timestamp).execute(self.connection)

    async def pttl(self, key: parameter.KeyT, /) -> int:
        """Remaining time to live of key, in milliseconds."""
        return await keys.pttl(key).execute(self.connection)

    async def randomkey(self) -> str | None:
        """Return a random key, or ``None`` if the database is empty."""
        return await keys.randomkey().execute(self.connection)

    async def rename(self, key: parameter.KeyT, newkey: parameter.KeyT, /) -> bool:
        """Rename key to newkey."""
        return await keys.rename(key, newkey).execute(self.connection)

    async def renamenx(self, key: parameter.KeyT, newkey: parameter.KeyT, /) -> int:
        """Rename key to newkey if newkey does not exist yet."""
        return await keys.renamenx(key, newkey).execute(self.connection)

    async def restore(
        self,
        key: parameter.KeyT,
        ttl: parameter.IntegerT,
        serialized_value: bytes,
        /,
        *,
        replace: bool = False,
    ) -> bool:
        """Create key from a value serialized with ``dump``."""
        return await keys.restore(key, ttl, serialized_value, replace=replace).execute(self.connection)

    async def scan(
        self,
        cursor: parameter.IntegerT,
        /,
        *,
        pattern: parameter.Scalar | None = None,
        count: parameter.IntegerT | None = None,
    ) -> transform.ScanResult:
        """Run a single SCAN step from ``cursor``."""
        return await keys.scan(cursor, pattern=pattern, count=count).execute(self.connection)

    async def scan_iter(
        self,
        *,
        pattern: parameter.Scalar | None = None,
        count: parameter.IntegerT | None = None,
    ) -> collections.abc.AsyncIterator[str]:
        """Iterate over the whole keyspace with SCAN.

        Redis may return a key more than once during a full iteration.
        """
        cursor = 0
        while True:
            cursor, batch = await self.scan(cursor, pattern=pattern, count=count)
            for key in batch:
                yield key

            if cursor == 0:
                return

    async def sort(  # noqa: PLR0913
        self,
        key: parameter.KeyT,
        /,
        *,
        by: parameter.Scalar | None = None,
        limit: int | collections.abc.Sequence[parameter.IntegerT] | None = None,
        get: parameter.Scalar | collections.abc.Iterable[parameter.Scalar] | None = None,
        order: str | None = None,
        alpha: bool = False,
        store: parameter.KeyT | None = None,
    ) -> list[str | None] | int:
        """Sort the elements of a list, set or sorted set."""
        cmd = keys.sort(key, by=by, limit=limit, get=get, order=order, alpha=alpha, store=store)
        return await cmd.execute(self.connection)

    async def ttl(self, key: parameter.KeyT, /) -> int:
        """Remaining time to live of key, in seconds."""
        return await keys.ttl(key).execute(self.connection)

    async def type(self, key: parameter.KeyT, /) -> str:
        """Return the type of the value stored at key."""
        return await keys.type(key).execute(self.connection)

    async def wait(self, numreplicas: parameter.IntegerT, timeout: parameter.IntegerT, /) -> int:
        """Wait until previous writes reached ``numreplicas`` replicas."""
        return await keys.wait(numreplicas, timeout).execute(self.connection)
