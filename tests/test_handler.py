import pytest

from tinylsm import handler
from tinylsm.handler import Ops, dispatch, string_to_ops


class FakeEngine:
    """Records every call and answers with '<method>-reply'."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def method(*args):
            self.calls.append((name, args))
            return f"{name}-reply"

        return method


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.mark.parametrize(
    "text, op",
    [
        ("ping", Ops.PING),
        ("PING", Ops.PING),
        ("Set", Ops.SET),
        ("zincrby", Ops.ZINCRBY),
        ("SISMEMBER", Ops.SISMEMBER),
        ("hkeys", Ops.HKEYS),
        ("flushall", Ops.FLUSHALL),
    ],
)
def test_string_to_ops_is_case_insensitive(text, op):
    assert string_to_ops(text) is op


@pytest.mark.parametrize("text", ["", "nope", "unknown", "sett"])
def test_string_to_ops_unknown(text):
    assert string_to_ops(text) is Ops.UNKNOWN


def test_every_known_op_round_trips_through_its_name():
    for op in Ops:
        if op is not Ops.UNKNOWN:
            assert string_to_ops(op.name.lower()) is op


def test_flushall_clears_engine(engine):
    assert handler.flushall_handler(engine) == "+OK\r\n"
    assert engine.calls == [("clear", ())]


def test_save_flushes_engine(engine):
    assert handler.save_handler(engine) == "+OK\r\n"
    assert engine.calls == [("flushall", ())]


def test_set_wrong_arity(engine):
    result = handler.set_handler(["SET", "k"], engine)
    assert result == "-ERR wrong number of arguments for 'SET' command\r\n"
    assert engine.calls == []


def test_set_passes_args_through(engine):
    args = ["SET", "k", "v"]
    assert handler.set_handler(args, engine) == "set-reply"
    assert engine.calls == [("set", (args,))]


def test_del_accepts_many_keys(engine):
    args = ["DEL", "a", "b", "c"]
    assert handler.del_handler(args, engine) == "delete-reply"
    assert handler.del_handler(["DEL"], engine) == (
        "-ERR wrong number of arguments for 'DEL' command\r\n"
    )


def test_incr_and_decr_wrap_integer_reply():
    class Numbers:
        def incr(self, args):
            return "5"

        def decr(self, args):
            return "-2"

    assert handler.incr_handler(["INCR", "n"], Numbers()) == ":5\r\n"
    assert handler.decr_handler(["DECR", "n"], Numbers()) == ":-2\r\n"


@pytest.mark.parametrize(
    "func, name, bad, good, method",
    [
        (handler.get_handler, "GET", ["GET"], ["GET", "k"], "get"),
        (handler.expire_handler, "EXPIRE", ["EXPIRE", "k"], ["EXPIRE", "k", "10"], "expire"),
        (handler.ttl_handler, "TTL", ["TTL"], ["TTL", "k"], "ttl"),
        (handler.hset_handler, "HSET", ["HSET", "h", "f"], ["HSET", "h", "f", "v"], "hset"),
        (handler.hget_handler, "HGET", ["HGET", "h"], ["HGET", "h", "f"], "hget"),
        (handler.hdel_handler, "HDEL", ["HDEL", "h"], ["HDEL", "h", "f"], "hdel"),
        (handler.hkeys_handler, "HKEYS", ["HKEYS"], ["HKEYS", "h"], "hkeys"),
        (handler.lpush_handler, "LPUSH", ["LPUSH", "l"], ["LPUSH", "l", "x"], "lpush"),
        (handler.rpush_handler, "RPUSH", ["RPUSH", "l"], ["RPUSH", "l", "x"], "rpush"),
        (handler.lpop_handler, "LPOP", ["LPOP"], ["LPOP", "l"], "lpop"),
        (handler.rpop_handler, "RPOP", ["RPOP"], ["RPOP", "l"], "rpop"),
        (handler.llen_handler, "LLEN", ["LLEN", "l"], ["LLEN", "l", "x"], "llen"),
        (handler.lrange_handler, "LRANGE", ["LRANGE", "l", "0"], ["LRANGE", "l", "0", "-1"], "lrange"),
        (handler.zrem_handler, "zrem", ["ZREM", "z"], ["ZREM", "z", "m"], "zrem"),
        (handler.zrange_handler, "zrange", ["ZRANGE", "z", "0"], ["ZRANGE", "z", "0", "1"], "zrange"),
        (handler.zcard_handler, "zcard", ["ZCARD"], ["ZCARD", "z"], "zcard"),
        (handler.zscore_handler, "zscore", ["ZSCORE", "z"], ["ZSCORE", "z", "m"], "zscore"),
        (handler.zincrby_handler, "zincrby", ["ZINCRBY", "z", "1"], ["ZINCRBY", "z", "1", "m"], "zincrby"),
        (handler.zrank_handler, "zrank", ["ZRANK", "z"], ["ZRANK", "z", "m"], "zrank"),
        (handler.sadd_handler, "sadd", ["SADD", "s"], ["SADD", "s", "m"], "sadd"),
        (handler.srem_handler, "srem", ["SREM", "s"], ["SREM", "s", "m"], "srem"),
        (handler.sismember_handler, "sismember", ["SISMEMBER", "s"], ["SISMEMBER", "s", "m"], "sismember"),
        (handler.scard_handler, "scard", ["SCARD"], ["SCARD", "s"], "scard"),
        (handler.smembers_handler, "smembers", ["SMEMBERS"], ["SMEMBERS", "s"], "smembers"),
    ],
)
def test_handlers_check_arity_and_delegate(engine, func, name, bad, good, method):
    assert func(bad, engine) == f"-ERR wrong number of arguments for '{name}' command\r\n"
    assert engine.calls == []
    assert func(good, engine) == f"{method}-reply"
    assert engine.calls == [(method, (good,))]


@pytest.mark.parametrize(
    "args, accepted",
    [
        (["ZADD", "z", "1"], False),
        (["ZADD", "z", "1", "a"], True),
        (["ZADD", "z", "1", "a", "2"], False),
        (["ZADD", "z", "1", "a", "2", "b"], True),
    ],
)
def test_zadd_requires_score_member_pairs(engine, args, accepted):
    result = handler.zadd_handler(args, engine)
    if accepted:
        assert result == "zadd-reply"
    else:
        assert result == "-ERR wrong number of arguments for 'zadd' command\r\n"
        assert engine.calls == []


def test_dispatch_ping(engine):
    assert dispatch(["PING"], engine) == "+PONG\r\n"
    assert engine.calls == []


def test_dispatch_routes_by_name(engine):
    assert dispatch(["set", "k", "v"], engine) == "set-reply"
    assert dispatch(["HGET", "h", "f"], engine) == "hget-reply"
    assert [name for name, _ in engine.calls] == ["set", "hget"]


def test_dispatch_flushall_and_save(engine):
    assert dispatch(["FLUSHALL"], engine) == "+OK\r\n"
    assert dispatch(["save"], engine) == "+OK\r\n"
    assert engine.calls == [("clear", ()), ("flushall", ())]


def test_dispatch_unknown_and_empty(engine):
    assert dispatch(["bogus"], engine).startswith("-ERR")
    assert "bogus" in dispatch(["bogus"], engine)
    assert dispatch([], engine).startswith("-ERR")
    assert engine.calls == []


def test_dispatch_propagates_arity_error(engine):
    assert dispatch(["get"], engine) == (
        "-ERR wrong number of arguments for 'GET' command\r\n"
    )