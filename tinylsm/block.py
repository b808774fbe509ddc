"""Sorted key/value block: the unit of storage inside an SST file.

Layout of an encoded block::

    entries | offsets (u16 each) | entry count (u16) | [crc32 (u32)]

and of a single entry::

    key_len (u16) | key | value_len (u16) | value | tranc_id (u64)

All integers are little endian.
"""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import Callable, Iterator

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")

_ENTRY_OVERHEAD = _U16.size * 2 + _U64.size
_MAX_U16 = 0xFFFF

DEFAULT_CAPACITY = 4096


def _to_bytes(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _to_text(raw: bytes) -> str:
    return raw.decode("utf-8", "surrogateescape")


def _checksum(payload: bytes) -> int:
    return zlib.crc32(payload) & 0xFFFFFFFF


@dataclass(frozen=True)
class Entry:
    """One decoded key/value record together with its transaction id."""

    key: str
    value: str
    tranc_id: int


class Block:
    """An append-only, sorted run of entries with a size limit."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = capacity
        self._data = bytearray()
        self._offsets: list[int] = []

    # ------------------------------------------------------------------ codec
    def encode(self, with_hash: bool = False) -> bytes:
        """Serialise the block, optionally followed by a crc32 of its body."""
        body = bytes(self._data) + b"".join(_U16.pack(off) for off in self._offsets)
        encoded = body + _U16.pack(len(self._offsets))
        if with_hash:
            encoded += _U32.pack(_checksum(body))
        return encoded

    @classmethod
    def decode(cls, encoded: bytes, with_hash: bool = False) -> "Block":
        """Rebuild a block from bytes produced by :meth:`encode`."""
        encoded = bytes(encoded)
        if len(encoded) <= _U16.size + _U32.size:
            raise ValueError("Encoded data is too small to decode")
        end = len(encoded)
        if with_hash:
            end -= _U32.size
            (stored,) = _U32.unpack_from(encoded, end)
            if stored != _checksum(encoded[: end - _U16.size]):
                raise ValueError("Block decode: hash mismatch")
        end -= _U16.size
        (count,) = _U16.unpack_from(encoded, end)
        block = cls()
        if count == 0:
            return block
        offsets_start = end - count * _U16.size
        if offsets_start < 0:
            raise ValueError("Block decode: offset section out of range")
        block._offsets = [
            off for (off,) in _U16.iter_unpack(encoded[offsets_start:end])
        ]
        block._data = bytearray(encoded[:offsets_start])
        return block

    # ------------------------------------------------------------- accessors
    def get_first_key(self) -> str:
        if not self._data or not self._offsets:
            return ""
        return self.get_key_at(0)

    def get_offset_at(self, idx: int) -> int:
        if not 0 <= idx < len(self._offsets):
            raise IndexError("idx out of offsets range")
        return self._offsets[idx]

    def add_entry(
        self, key: str, value: str, tranc_id: int = 0, force_write: bool = False
    ) -> bool:
        """Append an entry; return False if the block is full and not forced."""
        raw_key = _to_bytes(key)
        raw_value = _to_bytes(value)
        if len(raw_key) > _MAX_U16 or len(raw_value) > _MAX_U16:
            raise ValueError("key or value longer than 65535 bytes")
        entry_size = _ENTRY_OVERHEAD + len(raw_key) + len(raw_value)
        if self.cur_size() + entry_size > self.capacity and not force_write:
            return False
        offset = len(self._data)
        if offset > _MAX_U16:
            raise ValueError("block data exceeds the addressable 64 KiB")
        self._data += _U16.pack(len(raw_key)) + raw_key
        self._data += _U16.pack(len(raw_value)) + raw_value
        self._data += _U64.pack(tranc_id)
        self._offsets.append(offset)
        return True

    def _value_len_pos(self, offset: int) -> int:
        (key_len,) = _U16.unpack_from(self._data, offset)
        return offset + _U16.size + key_len

    def get_key_at(self, offset: int) -> str:
        (key_len,) = _U16.unpack_from(self._data, offset)
        start = offset + _U16.size
        return _to_text(bytes(self._data[start : start + key_len]))

    def get_value_at(self, offset: int) -> str:
        pos = self._value_len_pos(offset)
        (value_len,) = _U16.unpack_from(self._data, pos)
        start = pos + _U16.size
        return _to_text(bytes(self._data[start : start + value_len]))

    def get_tranc_id_at(self, offset: int) -> int:
        pos = self._value_len_pos(offset)
        (value_len,) = _U16.unpack_from(self._data, pos)
        (tranc_id,) = _U64.unpack_from(self._data, pos + _U16.size + value_len)
        return tranc_id

    def compare_key_at(self, offset: int, target: str) -> int:
        """Return <0, 0 or >0 as the key at ``offset`` sorts before, with or after ``target``."""
        key = self.get_key_at(offset)
        return (key > target) - (key < target)

    def get_entry_at(self, offset: int) -> Entry:
        return Entry(
            key=self.get_key_at(offset),
            value=self.get_value_at(offset),
            tranc_id=self.get_tranc_id_at(offset),
        )

    def _key_at_index(self, idx: int) -> str:
        return self.get_key_at(self._offsets[idx])

    def _tranc_id_at_index(self, idx: int) -> int:
        return self.get_tranc_id_at(self._offsets[idx])

    # ---------------------------------------------------------------- search
    def is_same_key(self, idx: int, target_key: str) -> bool:
        if not 0 <= idx < len(self._offsets):
            return False
        return self._key_at_index(idx) == target_key

    def adjust_idx_by_tranc_id(self, idx: int, tranc_id: int) -> int | None:
        """Move ``idx`` to the newest version of its key visible to ``tranc_id``.

        Versions of one key are stored newest first.  A ``tranc_id`` of 0
        disables visibility checks and picks the newest version.
        """
        if not 0 <= idx < len(self._offsets):
            return None
        target_key = self._key_at_index(idx)
        first = idx
        while first > 0 and self.is_same_key(first - 1, target_key):
            first -= 1
        if tranc_id == 0:
            return first
        pos = first
        while self.is_same_key(pos, target_key):
            if self._tranc_id_at_index(pos) <= tranc_id:
                return pos
            pos += 1
        return None

    def _partition_point(self, lo: int, go_right: Callable[[int], bool]) -> int:
        hi = len(self._offsets)
        while lo < hi:
            mid = (lo + hi) // 2
            if go_right(mid):
                lo = mid + 1
            else:
                hi = mid
        return lo

    def get_idx_binary(self, key: str, tranc_id: int = 0) -> int | None:
        """Binary-search the index of ``key``; None if absent or invisible."""
        if not self._offsets:
            return None
        idx = self._partition_point(0, lambda i: self._key_at_index(i) < key)
        if idx >= len(self._offsets) or self._key_at_index(idx) != key:
            return None
        return self.adjust_idx_by_tranc_id(idx, tranc_id)

    def get_value_binary(self, key: str, tranc_id: int = 0) -> str | None:
        idx = self.get_idx_binary(key, tranc_id)
        if idx is None:
            return None
        return self.get_value_at(self._offsets[idx])

    def iters_preffix(
        self, tranc_id: int, preffix: str
    ) -> tuple["BlockIterator", "BlockIterator"] | None:
        """Half-open iterator range over keys starting with ``preffix``."""
        if not self._offsets:
            return None
        left = self._partition_point(0, lambda i: self._key_at_index(i) < preffix)
        right = self._partition_point(
            left, lambda i: self._key_at_index(i).startswith(preffix)
        )
        if left >= right:
            return None
        return BlockIterator(self, left, tranc_id), BlockIterator(self, right, tranc_id)

    def get_monotony_predicate_iters(
        self, tranc_id: int, predicate: Callable[[str], int]
    ) -> tuple["BlockIterator", "BlockIterator"] | None:
        """Half-open iterator range of keys for which ``predicate`` returns 0.

        ``predicate`` returns >0 for keys left of the range and <0 for keys
        right of it; the matching keys must be contiguous.
        """
        if not self._offsets:
            return None
        left = self._partition_point(0, lambda i: predicate(self._key_at_index(i)) > 0)
        right = self._partition_point(
            left, lambda i: predicate(self._key_at_index(i)) >= 0
        )
        if left >= right:
            return None
        return BlockIterator(self, left, tranc_id), BlockIterator(self, right, tranc_id)

    # ------------------------------------------------------------------ sizes
    def cur_size(self) -> int:
        """Encoded size without checksum."""
        return len(self._data) + len(self._offsets) * _U16.size + _U16.size

    def is_empty(self) -> bool:
        return not self._offsets

    def __len__(self) -> int:
        return len(self._offsets)

    # -------------------------------------------------------------- iteration
    def begin(self, tranc_id: int = 0) -> "BlockIterator":
        return BlockIterator(self, 0, tranc_id)

    def end(self) -> "BlockIterator":
        return BlockIterator(self, len(self._offsets), 0)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return self.begin(0)


class BlockIterator:
    """Cursor over a block yielding one (key, value) pair per distinct key."""

    def __init__(self, block: Block, index: int = 0, tranc_id: int = 0) -> None:
        self.block = block
        self.index = index
        self.tranc_id = tranc_id
        self._skip_invisible()

    @classmethod
    def from_key(cls, block: Block, key: str, tranc_id: int = 0) -> "BlockIterator":
        """Position on ``key``, or at the end if it is not present."""
        idx = block.get_idx_binary(key, tranc_id)
        return cls(block, len(block) if idx is None else idx, tranc_id)

    def _skip_invisible(self) -> None:
        if self.tranc_id == 0:
            return
        while (
            self.index < len(self.block)
            and self.block._tranc_id_at_index(self.index) > self.tranc_id
        ):
            self.index += 1

    def current(self) -> tuple[str, str]:
        if self.is_end():
            raise IndexError("BlockIterator out of range")
        offset = self.block.get_offset_at(self.index)
        return self.block.get_key_at(offset), self.block.get_value_at(offset)

    def advance(self) -> "BlockIterator":
        """Move past every remaining version of the current key."""
        if self.index < len(self.block):
            key = self.block._key_at_index(self.index)
            self.index += 1
            while self.block.is_same_key(self.index, key):
                self.index += 1
            self._skip_invisible()
        return self

    def is_end(self) -> bool:
        return self.index >= len(self.block)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BlockIterator):
            return NotImplemented
        return self.block is other.block and self.index == other.index

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> "BlockIterator":
        return self

    def __next__(self) -> tuple[str, str]:
        if self.is_end():
            raise StopIteration
        item = self.current()
        self.advance()
        return item