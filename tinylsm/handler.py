"""Redis command handlers: argument checks and RESP replies over a key/value engine."""

from __future__ import annotations

import enum
from typing import Callable, Protocol, Sequence

OK_REPLY = "+OK\r\n"
PONG_REPLY = "+PONG\r\n"


class RedisEngine(Protocol):
    """The operations the handlers need from the storage engine.

    Each command method receives the full argument list, command name
    included, and returns the RESP-encoded reply.  ``incr`` and ``decr``
    return the bare resulting number as text.
    """

    def clear(self) -> object: ...
    def flushall(self) -> object: ...
    def set(self, args: Sequence[str]) -> str: ...
    def get(self, args: Sequence[str]) -> str: ...
    def delete(self, args: Sequence[str]) -> str: ...
    def incr(self, args: Sequence[str]) -> str: ...
    def decr(self, args: Sequence[str]) -> str: ...
    def expire(self, args: Sequence[str]) -> str: ...
    def ttl(self, args: Sequence[str]) -> str: ...
    def hset(self, args: Sequence[str]) -> str: ...
    def hget(self, args: Sequence[str]) -> str: ...
    def hdel(self, args: Sequence[str]) -> str: ...
    def hkeys(self, args: Sequence[str]) -> str: ...
    def lpush(self, args: Sequence[str]) -> str: ...
    def rpush(self, args: Sequence[str]) -> str: ...
    def lpop(self, args: Sequence[str]) -> str: ...
    def rpop(self, args: Sequence[str]) -> str: ...
    def llen(self, args: Sequence[str]) -> str: ...
    def lrange(self, args: Sequence[str]) -> str: ...
    def zadd(self, args: Sequence[str]) -> str: ...
    def zrem(self, args: Sequence[str]) -> str: ...
    def zrange(self, args: Sequence[str]) -> str: ...
    def zcard(self, args: Sequence[str]) -> str: ...
    def zscore(self, args: Sequence[str]) -> str: ...
    def zincrby(self, args: Sequence[str]) -> str: ...
    def zrank(self, args: Sequence[str]) -> str: ...
    def sadd(self, args: Sequence[str]) -> str: ...
    def srem(self, args: Sequence[str]) -> str: ...
    def sismember(self, args: Sequence[str]) -> str: ...
    def scard(self, args: Sequence[str]) -> str: ...
    def smembers(self, args: Sequence[str]) -> str: ...


class Ops(enum.Enum):
    """Supported command names."""

    PING = enum.auto()
    FLUSHALL = enum.auto()
    SAVE = enum.auto()
    GET = enum.auto()
    SET = enum.auto()
    DEL = enum.auto()
    INCR = enum.auto()
    DECR = enum.auto()
    EXPIRE = enum.auto()
    TTL = enum.auto()
    HSET = enum.auto()
    HGET = enum.auto()
    HDEL = enum.auto()
    HKEYS = enum.auto()
    LPUSH = enum.auto()
    RPUSH = enum.auto()
    LPOP = enum.auto()
    RPOP = enum.auto()
    LLEN = enum.auto()
    LRANGE = enum.auto()
    ZADD = enum.auto()
    ZREM = enum.auto()
    ZRANGE = enum.auto()
    ZCARD = enum.auto()
    ZSCORE = enum.auto()
    ZINCRBY = enum.auto()
    ZRANK = enum.auto()
    SADD = enum.auto()
    SREM = enum.auto()
    SISMEMBER = enum.auto()
    SCARD = enum.auto()
    SMEMBERS = enum.auto()
    UNKNOWN = enum.auto()


_OPS_BY_NAME = {op.name.lower(): op for op in Ops if op is not Ops.UNKNOWN}


def string_to_ops(op_str: str) -> Ops:
    """Map a command name, in any letter case, to its :class:`Ops` member."""
    return _OPS_BY_NAME.get(op_str.lower(), Ops.UNKNOWN)


def _wrong_args(name: str) -> str:
    return f"-ERR wrong number of arguments for '{name}' command\r\n"


def flushall_handler(engine: RedisEngine) -> str:
    engine.clear()
    return OK_REPLY


def save_handler(engine: RedisEngine) -> str:
    # Persists memory tables to disk; unlike Redis FLUSHALL it deletes nothing.
    engine.flushall()
    return OK_REPLY


# ------------------------------------------------------------------ strings
def set_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("SET")
    return engine.set(args)


def get_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("GET")
    return engine.get(args)


def del_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) < 2:
        return _wrong_args("DEL")
    return engine.delete(args)


def incr_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("INCR")
    return f":{engine.incr(args)}\r\n"


def decr_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("DECR")
    return f":{engine.decr(args)}\r\n"


def expire_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("EXPIRE")
    return engine.expire(args)


def ttl_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("TTL")
    return engine.ttl(args)


# ------------------------------------------------------------------- hashes
def hset_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) < 4:
        return _wrong_args("HSET")
    return engine.hset(args)


def hget_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("HGET")
    return engine.hget(args)


def hdel_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("HDEL")
    return engine.hdel(args)


def hkeys_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("HKEYS")
    return engine.hkeys(args)


# -------------------------------------------------------------------- lists
def lpush_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("LPUSH")
    return engine.lpush(args)


def rpush_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("RPUSH")
    return engine.rpush(args)


def lpop_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("LPOP")
    return engine.lpop(args)


def rpop_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("RPOP")
    return engine.rpop(args)


def llen_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("LLEN")
    return engine.llen(args)


def lrange_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 4:
        return _wrong_args("LRANGE")
    return engine.lrange(args)


# -------------------------------------------------------------- sorted sets
def zadd_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) < 4 or (len(args) - 2) % 2 != 0:
        return _wrong_args("zadd")
    return engine.zadd(args)


def zrem_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) < 3:
        return _wrong_args("zrem")
    return engine.zrem(args)


def zrange_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) < 4:
        return _wrong_args("zrange")
    return engine.zrange(args)


def zcard_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("zcard")
    return engine.zcard(args)


def zscore_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("zscore")
    return engine.zscore(args)


def zincrby_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 4:
        return _wrong_args("zincrby")
    return engine.zincrby(args)


def zrank_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("zrank")
    return engine.zrank(args)


# --------------------------------------------------------------------- sets
def sadd_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) < 3:
        return _wrong_args("sadd")
    return engine.sadd(args)


def srem_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) < 3:
        return _wrong_args("srem")
    return engine.srem(args)


def sismember_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 3:
        return _wrong_args("sismember")
    return engine.sismember(args)


def scard_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("scard")
    return engine.scard(args)


def smembers_handler(args: Sequence[str], engine: RedisEngine) -> str:
    if len(args) != 2:
        return _wrong_args("smembers")
    return engine.smembers(args)


_ARG_HANDLERS: dict[Ops, Callable[[Sequence[str], RedisEngine], str]] = {
    Ops.SET: set_handler,
    Ops.GET: get_handler,
    Ops.DEL: del_handler,
    Ops.INCR: incr_handler,
    Ops.DECR: decr_handler,
    Ops.EXPIRE: expire_handler,
    Ops.TTL: ttl_handler,
    Ops.HSET: hset_handler,
    Ops.HGET: hget_handler,
    Ops.HDEL: hdel_handler,
    Ops.HKEYS: hkeys_handler,
    Ops.LPUSH: lpush_handler,
    Ops.RPUSH: rpush_handler,
    Ops.LPOP: lpop_handler,
    Ops.RPOP: rpop_handler,
    Ops.LLEN: llen_handler,
    Ops.LRANGE: lrange_handler,
    Ops.ZADD: zadd_handler,
    Ops.ZREM: zrem_handler,
    Ops.ZRANGE: zrange_handler,
    Ops.ZCARD: zcard_handler,
    Ops.ZSCORE: zscore_handler,
    Ops.ZINCRBY: zincrby_handler,
    Ops.ZRANK: zrank_handler,
    Ops.SADD: sadd_handler,
    Ops.SREM: srem_handler,
    Ops.SISMEMBER: sismember_handler,
    Ops.SCARD: scard_handler,
    Ops.SMEMBERS: smembers_handler,
}


def dispatch(args: Sequence[str], engine: RedisEngine) -> str:
    """Run the command named by ``args[0]`` and return its RESP reply."""
    if not args:
        return "-ERR empty command\r\n"
    op = string_to_ops(args[0])
    if op is Ops.PING:
        return PONG_REPLY
    if op is Ops.FLUSHALL:
        return flushall_handler(engine)
    if op is Ops.SAVE:
        return save_handler(engine)
    handler = _ARG_HANDLERS.get(op)
    if handler is None:
        return f"-ERR unknown command '{args[0]}'\r\n"
    return handler(args, engine)