"""Module containing builders for the Redis keyspace commands.

Every function here is pure: it validates its arguments, assembles a
``Command`` and attaches the decoder for the reply. Nothing is sent until the
command is executed on a dispatcher, e.g. through ``ActionableConnection``.
"""

import collections.abc
import typing

from redicmd import command, parameter, transform

__all__: collections.abc.Sequence[str] = (
    "OBJECT_SUBCOMMANDS",
    "SORT_ORDERS",
    "delete",
    "dump",
    "exists",
    "expire",
    "expireat",
    "keys",
    "migrate",
    "move",
    "object",
    "persist",
    "pexpire",
    "pexpireat",
    "pttl",
    "randomkey",
    "rename",
    "renamenx",
    "restore",
    "scan",
    "sort",
    "ttl",
    "type",
    "wait",
)


OBJECT_SUBCOMMANDS: typing.Final = ("REFCOUNT", "ENCODING", "IDLETIME")
SORT_ORDERS: typing.Final = ("ASC", "DESC")

KeysT: typing.TypeAlias = parameter.KeyT | collections.abc.Iterable[parameter.KeyT]

Command = command.Command


def delete(keys: KeysT) -> Command:
    """Remove the specified keys. Non-existent keys are ignored.

    Returns the number of keys that were removed.

    See also: https://redis.io/docs/latest/commands/del/
    """
    return Command.build("DEL", parameter.keys(keys), decoder=transform.to_int)


def dump(key: parameter.KeyT) -> Command:
    """Serialize the value stored at key in a Redis-specific format.

    Returns the serialized value as bytes, or ``None`` if the key does not
    exist. The payload can be handed back to ``restore`` unchanged.

    See also: https://redis.io/docs/latest/commands/dump/
    """
    return Command.build("DUMP", parameter.key(key), decoder=transform.to_optional_bytes)


def exists(keys: KeysT) -> Command:
    """Count how many of the given keys exist.

    A key given more than once is counted more than once.

    See also: https://redis.io/docs/latest/commands/exists/
    """
    return Command.build("EXISTS", parameter.keys(keys), decoder=transform.to_int)


def expire(key: parameter.KeyT, seconds: parameter.IntegerT) -> Command:
    """Set a timeout on key, in seconds.

    Returns 1 if the timeout was set, 0 if the key does not exist.

    See also: https://redis.io/docs/latest/commands/expire/
    """
    return Command.build(
        "EXPIRE",
        parameter.key(key),
        parameter.integer(seconds),
        decoder=transform.to_int,
    )


def expireat(key: parameter.KeyT, timestamp: parameter.IntegerT) -> Command:
    """Set key to expire at an absolute unix timestamp, in seconds.

    See also: https://redis.io/docs/latest/commands/expireat/
    """
    return Command.build(
        "EXPIREAT",
        parameter.key(key),
        parameter.integer(timestamp),
        decoder=transform.to_int,
    )


def keys(pattern: parameter.Scalar) -> Command:
    """Return all keys matching the glob-style pattern.

    See also: https://redis.io/docs/latest/commands/keys/
    """
    return Command.build("KEYS", parameter.string(pattern), decoder=transform.to_str_list)


def migrate(
    host: str,
    port: parameter.IntegerT,
    key: parameter.KeyT,
    destination_db: parameter.IntegerT,
    timeout: parameter.IntegerT,
    *,
    copy: bool = False,
    replace: bool = False,
) -> Command:
    """Atomically transfer a key to another Redis instance.

    ``timeout`` is the maximum idle time in milliseconds for the transfer.
    If ``copy`` is set the key is not removed from this instance; if
    ``replace`` is set an existing key on the destination is overwritten.

    Returns ``True`` once the key was transferred, ``False`` if Redis reports
    that the key did not exist.

    See also: https://redis.io/docs/latest/commands/migrate/
    """
    return (
        Command.build(
            "MIGRATE",
            parameter.string(host),
            parameter.port(port),
            parameter.key(key),
            parameter.integer(destination_db),
            parameter.integer(timeout),
            decoder=transform.to_migrate_status,
        )
        .flag(copy, "COPY")
        .flag(replace, "REPLACE")
    )


def move(key: parameter.KeyT, db: parameter.IntegerT) -> Command:
    """Move key to another database.

    Returns 1 if the key was moved, 0 if it was not.

    See also: https://redis.io/docs/latest/commands/move/
    """
    return Command.build(
        "MOVE",
        parameter.key(key),
        parameter.integer(db),
        decoder=transform.to_int,
    )


def object(  # noqa: A001
    subcommand: str,
    arguments: KeysT | None = None,
) -> Command:
    """Inspect the internals of the value stored at a key.

    ``subcommand`` is one of REFCOUNT, ENCODING or IDLETIME. REFCOUNT and
    IDLETIME answer with an integer, ENCODING with a string.

    See also: https://redis.io/docs/latest/commands/object/
    """
    return Command.build(
        "OBJECT",
        parameter.enum(subcommand, OBJECT_SUBCOMMANDS),
        parameter.keys(arguments) if arguments else None,
        decoder=transform.to_int_or_str,
    )


def persist(key: parameter.KeyT) -> Command:
    """Remove the existing timeout on key.

    See also: https://redis.io/docs/latest/commands/persist/
    """
    return Command.build("PERSIST", parameter.key(key), decoder=transform.to_int)


def pexpire(key: parameter.KeyT, milliseconds: parameter.IntegerT) -> Command:
    """Like ``expire``, but the timeout is in milliseconds.

    See also: https://redis.io/docs/latest/commands/pexpire/
    """
    return Command.build(
        "PEXPIRE",
        parameter.key(key),
        parameter.integer(milliseconds),
        decoder=transform.to_int,
    )


def pexpireat(key: parameter.KeyT, timestamp: parameter.IntegerT) -> Command:
    """Like ``expireat``, but the unix timestamp is in milliseconds.

    See also: https://redis.io/docs/latest/commands/pexpireat/
    """
    return Command.build(
        "PEXPIREAT",
        parameter.key(key),
        parameter.integer(timestamp),
        decoder=transform.to_int,
    )


def pttl(key: parameter.KeyT) -> Command:
    """Remaining time to live of key in milliseconds.

    -2 means the key does not exist, -1 that it has no timeout.

    See also: https://redis.io/docs/latest/commands/pttl/
    """
    return Command.build("PTTL", parameter.key(key), decoder=transform.to_int)


def randomkey() -> Command:
    """Return a random key, or ``None`` when the database is empty.

    See also: https://redis.io/docs/latest/commands/randomkey/
    """
    return Command.build("RANDOMKEY", decoder=transform.to_optional_str)


def rename(key: parameter.KeyT, newkey: parameter.KeyT) -> Command:
    """Rename key to newkey, overwriting newkey if it exists.

    See also: https://redis.io/docs/latest/commands/rename/
    """
    return Command.build(
        "RENAME",
        parameter.key(key),
        parameter.key(newkey),
        decoder=transform.to_ok,
    )


def renamenx(key: parameter.KeyT, newkey: parameter.KeyT) -> Command:
    """Rename key to newkey only if newkey does not exist yet.

    Returns 1 if key was renamed, 0 if newkey already exists.

    See also: https://redis.io/docs/latest/commands/renamenx/
    """
    return Command.build(
        "RENAMENX",
        parameter.key(key),
        parameter.key(newkey),
        decoder=transform.to_int,
    )


def restore(
    key: parameter.KeyT,
    ttl: parameter.IntegerT,
    serialized_value: bytes,
    *,
    replace: bool = False,
) -> Command:
    """Create key from a value previously serialized with ``dump``.

    ``ttl`` is in milliseconds; 0 creates the key without a timeout.

    See also: https://redis.io/docs/latest/commands/restore/
    """
    return (
        Command.build(
            "RESTORE",
            parameter.key(key),
            parameter.integer(ttl),
            parameter.string(serialized_value),
            decoder=transform.to_ok,
        )
        .flag(replace, "REPLACE")
    )


def scan(
    cursor: parameter.IntegerT,
    *,
    pattern: parameter.Scalar | None = None,
    count: parameter.IntegerT | None = None,
) -> Command:
    """Incrementally iterate the keyspace.

    Start with cursor 0 and keep calling with the returned cursor until Redis
    hands back 0 again.

    See also: https://redis.io/docs/latest/commands/scan/
    """
    return (
        Command.build("SCAN", parameter.integer(cursor), decoder=transform.to_scan)
        .option("MATCH", None if pattern is None else parameter.string(pattern))
        .option("COUNT", None if count is None else parameter.integer(count))
    )


def sort(
    key: parameter.KeyT,
    *,
    by: parameter.Scalar | None = None,
    limit: int | collections.abc.Sequence[parameter.IntegerT] | None = None,
    get: parameter.Scalar | collections.abc.Iterable[parameter.Scalar] | None = None,
    order: str | None = None,
    alpha: bool = False,
    store: parameter.KeyT | None = None,
) -> Command:
    """Sort the elements of a list, set or sorted set.

    ``limit`` is either a count or an ``(offset, count)`` pair. ``get`` is a
    single pattern or a sequence of them; results come back in the order the
    patterns were given. ``order`` is ``"ASC"`` or ``"DESC"``.

    Returns the sorted elements, or the number of stored elements if
    ``store`` is given.

    See also: https://redis.io/docs/latest/commands/sort/
    """
    if get is None:
        patterns = ()
    elif isinstance(get, str | bytes | int | float):
        patterns = (get,)
    else:
        patterns = tuple(get)

    return (
        Command.build("SORT", parameter.key(key), decoder=transform.to_sort)
        .option("BY", None if by is None else parameter.string(by))
        .option("LIMIT", None if limit is None else parameter.limit(limit))
        .repeat("GET", map(parameter.string, patterns))
        .arg(None if order is None else parameter.enum(order, SORT_ORDERS))
        .flag(alpha, "ALPHA")
        .option("STORE", None if store is None else parameter.key(store))
    )


def ttl(key: parameter.KeyT) -> Command:
    """Remaining time to live of key in seconds.

    -2 means the key does not exist, -1 that it has no timeout.

    See also: https://redis.io/docs/latest/commands/ttl/
    """
    return Command.build("TTL", parameter.key(key), decoder=transform.to_int)


def type(key: parameter.KeyT) -> Command:  # noqa: A001
    """Return the type of the value stored at key, ``"none"`` if missing.

    See also: https://redis.io/docs/latest/commands/type/
    """
    return Command.build("TYPE", parameter.key(key), decoder=transform.to_str)


def wait(numreplicas: parameter.IntegerT, timeout: parameter.IntegerT) -> Command:
    """Block until previous writes reached ``numreplicas`` replicas.

    ``timeout`` is in milliseconds and is passed to Redis; it is not a local
    deadline. Returns the number of replicas reached.

    See also: https://redis.io/docs/latest/commands/wait/
    """
    return Command.build(
        "WAIT",
        parameter.integer(numreplicas),
        parameter.integer(timeout),
        decoder=transform.to_int,
    )
