# tinylsm

Building blocks of a small log-structured merge-tree (LSM) key-value store,
and the command layer of a Redis-style front end.

## Modules

- `tinylsm.block`: `Block` is a sorted, size-limited run of entries. Each entry
  holds a key, a value and a transaction id. A block has these features:
  - Binary encoding (`encode` / `Block.decode`), with an optional crc32 checksum.
  - Binary search (`get_idx_binary`, `get_value_binary`). Versions of one key
    are stored newest first. A transaction id of 0 selects the newest version.
  - Half-open iterator ranges, from `iters_preffix` and from
    `get_monotony_predicate_iters`. The predicate returns `>0` for keys left of
    the wanted range, `0` inside it and `<0` right of it.
  - `BlockIterator` yields one `(key, value)` pair per distinct key.
    `BlockIterator.from_key` positions it on a key.
  - `Entry` holds one decoded record.
- `tinylsm.blockmeta`: `BlockMeta` (offset, first key, last key) and its
  checksummed encoding. The methods are `BlockMeta.encode_meta_to_slice` and
  `BlockMeta.decode_meta_from_slice`. Decoding raises `ValueError` on data that
  is too short, truncated or corrupted.
- `tinylsm.block_cache`: `BlockCache(capacity, k)` is a thread-safe LRU-K cache
  of blocks keyed by `(sst_id, block_id)`. Eviction works in two steps:
  1. Blocks seen fewer than `k` times go before those seen at least `k` times.
  2. Within each group, the least recently used block goes first.

  `hit_rate()` reports hits divided by lookups.
- `tinylsm.config`: `TomlConfig` holds the engine settings (memory limits, block
  size, level ratio, cache size, Redis key prefixes and separators, Bloom filter
  parameters). It works as follows:
  - Every setting has a built-in default.
  - `load_from_file` requires every key. On any failure it keeps the defaults
    and returns `False`.
  - `save_to_file` writes the current settings as TOML.
  - `TomlConfig.get_instance` returns one process-wide instance.
- `tinylsm.iterator`: `SearchItem`, `HeapIterator` and `TwoMergeIterator`.
  - `HeapIterator` is a k-way merge that yields each key once, the newest
    version first. It hides keys whose newest version is an empty value, which
    is how a deletion is stored.
  - `TwoMergeIterator` merges two sorted cursors, and `it_a` wins on equal keys.
  - `IteratorType` names the iterator kinds.
- `tinylsm.logger` has two functions:
  - `init_file_logging(log_dir)` attaches a rotating `tiny_lsm.log` file
    (5 MiB, 3 backups) to the `tinylsm` logger, once per process.
  - `reset_log_level(name)` sets that logger's level by name.
- `tinylsm.handler`: `Ops`, `string_to_ops`, `dispatch` and one handler per
  command (`set_handler`, `hget_handler`, `zadd_handler`, …).
  - Each handler checks the argument count. A wrong count returns a RESP
    `-ERR wrong number of arguments …` reply. Otherwise it calls the engine.
  - `dispatch` answers `PING` with `+PONG` and unknown commands with an error
    reply.
  - The engine is any object with the methods described by the `RedisEngine`
    protocol.

## Installing

```
pip install .
```

## Example

```python
from tinylsm.block import Block
from tinylsm.block_cache import BlockCache

block = Block(4096)
block.add_entry("apple", "red", 0, False)
block.add_entry("banana", "yellow", 0, False)

data = block.encode(True)
restored = Block.decode(data, True)
assert restored.get_value_binary("banana", 0) == "yellow"

for key, value in restored:
    print(key, value)

cache = BlockCache(3, 2)
cache.put(1, 1, restored)
assert cache.get(1, 1) is restored
print(cache.hit_rate())  # 1.0
```

```python
from tinylsm.iterator import HeapIterator, SearchItem

items = [
    SearchItem("a", "new", idx=0),
    SearchItem("a", "old", idx=1),
    SearchItem("b", "", idx=0),      # deletion of "b"
    SearchItem("b", "gone", idx=1),
    SearchItem("c", "kept", idx=0),
]
print(list(HeapIterator(items)))  # [('a', 'new'), ('c', 'kept')]
```

## What this package does not do

This package holds components, not a running database. Its limits:

- It has no memtable, no SST files, no write-ahead log and no compaction.
- It has no `LSM` engine object that ties the components together.
- It has no network server. The handlers in `tinylsm.handler` produce RESP
  replies, but nothing here parses RESP requests from a socket.
- It does not implement the Redis data types. You must supply an engine object
  that provides those commands.
- There is no command-line program.

## Running the tests

```
pip install ".[test]"
pytest
```