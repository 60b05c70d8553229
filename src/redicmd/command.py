"""Module containing command implementation."""

import collections.abc
import dataclasses
import typing

from redicmd import error, parameter, protocol, transform

if typing.TYPE_CHECKING:
    import typing_extensions

    from redicmd import reply

__all__: collections.abc.Sequence[str] = ("Command",)


def _as_token(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode()

    return value


@dataclasses.dataclass(frozen=True, slots=True)
class Command:
    """A Redis command.

    A command is an uppercase verb followed by an ordered sequence of
    validated ``Parameter`` objects. Commands are immutable; every method that
    adds arguments returns a new command, so a partially built command can be
    shared safely.

    The command also carries the rule used to decode its reply. The rule does
    not take part in equality: two commands are equal when they put the same
    tokens on the wire.
    """

    verb: bytes
    parameters: tuple[parameter.Parameter, ...] = ()
    decoder: transform.Decoder = dataclasses.field(
        default=transform.identity,
        compare=False,
        repr=False,
    )
    disconnect_on_error: bool = dataclasses.field(default=True, compare=False, repr=False)

    def __post_init__(self) -> None:
        verb = _as_token(self.verb).upper()
        if not verb:
            msg = "A command needs a verb."
            raise error.ValidationError(msg)

        object.__setattr__(self, "verb", verb)

    @classmethod
    def build(
        cls,
        verb: str | bytes,
        *parameters: parameter.Parameter | None,
        decoder: transform.Decoder = transform.identity,
    ) -> "typing_extensions.Self":
        """Create a command from a verb and its parameters, in order.

        ``None`` parameters are left out, so optional arguments can be passed
        straight through.
        """
        return cls(
            _as_token(verb),
            tuple(param for param in parameters if param is not None),
            decoder,
        )

    def arg(self, *parameters: parameter.Parameter | None) -> "typing_extensions.Self":
        """Return a copy of this command with parameters appended."""
        added = tuple(param for param in parameters if param is not None)
        if not added:
            return self

        return dataclasses.replace(self, parameters=self.parameters + added)

    def flag(self, enabled: object, token: str | bytes, /) -> "typing_extensions.Self":
        """Append the literal ``token`` only if ``enabled`` is truthy."""
        if not enabled:
            return self

        return self.arg(parameter.Parameter(_as_token(token)))

    def option(
        self,
        keyword: str | bytes,
        value: parameter.Parameter | None,
        /,
    ) -> "typing_extensions.Self":
        """Append ``keyword`` followed by ``value``, unless ``value`` is ``None``."""
        if value is None:
            return self

        return self.arg(parameter.Parameter(_as_token(keyword)), value)

    def repeat(
        self,
        keyword: str | bytes,
        values: collections.abc.Iterable[parameter.Parameter],
        /,
    ) -> "typing_extensions.Self":
        """Append ``keyword value`` once for every value, in the given order."""
        token = parameter.Parameter(_as_token(keyword))
        pairs: list[parameter.Parameter] = []
        for value in values:
            pairs.append(token)
            pairs.append(value)

        return self.arg(*pairs)

    def with_decoder(self, decoder: transform.Decoder, /) -> "typing_extensions.Self":
        """Set the rule used to decode the reply to this command."""
        return dataclasses.replace(self, decoder=decoder)

    def set_disconnect_on_error(self, disconnect_on_error: bool, /) -> "typing_extensions.Self":  # noqa: FBT001
        """Set ``disconnect_on_error`` when executing the command."""
        return dataclasses.replace(self, disconnect_on_error=disconnect_on_error)

    @property
    def tokens(self) -> tuple[bytes, ...]:
        """The argument tokens of this command, verb excluded."""
        return tuple(token for param in self.parameters for token in param)

    def decode(self, raw: "reply.Reply", /) -> typing.Any:  # noqa: ANN401
        """Decode a reply to this command into its documented return value."""
        return self.decoder(raw)

    async def execute(self, dispatcher: protocol.DispatcherProto) -> typing.Any:  # noqa: ANN401
        """Execute this command on a given dispatcher and decode the reply."""
        raw = await dispatcher.execute(self, disconnect_on_error=self.disconnect_on_error)
        return self.decode(raw)

    def __str__(self) -> str:
        return " ".join(arg.decode("utf-8", errors="replace") for arg in self)

    def __len__(self) -> int:
        return 1 + sum(len(param) for param in self.parameters)

    def __iter__(self) -> collections.abc.Iterator[bytes]:
        yield self.verb
        for param in self.parameters:
            yield from param
