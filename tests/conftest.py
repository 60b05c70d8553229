import asyncio
import collections.abc
import dataclasses

import pytest

from redicmd import connection, protocol, reply


@dataclasses.dataclass
class FakeDispatcher:
    """Records every command and answers with scripted replies, in order."""

    replies: list[reply.Reply] = dataclasses.field(default_factory=list)
    sent: list[tuple[bytes, ...]] = dataclasses.field(default_factory=list)
    disconnect_flags: list[bool] = dataclasses.field(default_factory=list)

    async def execute(
        self,
        command: protocol.CommandProto,
        /,
        *,
        disconnect_on_error: bool = True,
    ) -> reply.Reply:
        self.sent.append(tuple(command))
        self.disconnect_flags.append(disconnect_on_error)
        return self.replies.pop(0)


@dataclasses.dataclass
class FakeWriter:
    """Just enough of ``asyncio.StreamWriter`` for ``Connection``."""

    buffer: bytearray = dataclasses.field(default_factory=bytearray)
    closed: bool = False

    def write(self, data: bytes) -> None:
        self.buffer.extend(data)

    async def drain(self) -> None:
        return

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return

    @property
    def transport(self) -> "FakeWriter":
        return self

    def get_extra_info(self, name: str) -> None:
        return None


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def writer() -> FakeWriter:
    return FakeWriter()


@pytest.fixture
def make_connection(
    writer: FakeWriter,
) -> collections.abc.Callable[[bytes], connection.Connection]:
    """Build an already-connected ``Connection`` that will read ``data``."""

    def factory(data: bytes) -> connection.Connection:
        reader = asyncio.StreamReader()
        reader.feed_data(data)
        reader.feed_eof()
        return connection.Connection(
            "localhost",
            6379,
            resp3=False,
            _reader=reader,
            _writer=writer,  # type: ignore[arg-type]
        )

    return factory
