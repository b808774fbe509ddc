"""Per-block metadata stored in an SST file and its binary encoding.

Encoded layout::

    count (u32) | { offset (u32) | first_len (u16) | first_key
                               | last_len (u16) | last_key } * count | crc32 (u32)
"""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import Iterable

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


def _checksum(payload: bytes) -> int:
    return zlib.crc32(payload) & 0xFFFFFFFF


def _pack_key(key: str) -> bytes:
    raw = key.encode("utf-8", "surrogateescape")
    if len(raw) > 0xFFFF:
        raise ValueError("key longer than 65535 bytes")
    return _U16.pack(len(raw)) + raw


@dataclass
class BlockMeta:
    """Position and key range of one block inside an SST."""

    offset: int = 0
    first_key: str = ""
    last_key: str = ""

    @staticmethod
    def encode_meta_to_slice(meta_entries: Iterable["BlockMeta"]) -> bytes:
        """Encode metadata entries into bytes ending with a checksum."""
        entries = list(meta_entries)
        parts = [_U32.pack(len(entries))]
        for meta in entries:
            try:
                parts.append(_U32.pack(meta.offset))
            except struct.error as exc:
                raise ValueError(f"offset {meta.offset} does not fit in 32 bits") from exc
            parts.append(_pack_key(meta.first_key))
            parts.append(_pack_key(meta.last_key))
        body = b"".join(parts)
        return body + _U32.pack(_checksum(body))

    @staticmethod
    def decode_meta_from_slice(metadata: bytes) -> list["BlockMeta"]:
        """Decode bytes produced by :meth:`encode_meta_to_slice`."""
        data = bytes(metadata)
        if len(data) < _U32.size * 2:
            raise ValueError("Invalid metadata size")
        body, (stored,) = data[: -_U32.size], _U32.unpack(data[-_U32.size :])
        if stored != _checksum(body):
            raise ValueError("Metadata hash mismatch")

        pos = 0

        def take(size: int) -> bytes:
            nonlocal pos
            if pos + size > len(body):
                raise ValueError("Metadata truncated")
            chunk = body[pos : pos + size]
            pos += size
            return chunk

        def take_key() -> str:
            (length,) = _U16.unpack(take(_U16.size))
            return take(length).decode("utf-8", "surrogateescape")

        (count,) = _U32.unpack(take(_U32.size))
        metas = []
        for _ in range(count):
            (offset,) = _U32.unpack(take(_U32.size))
            first_key = take_key()
            last_key = take_key()
            metas.append(BlockMeta(offset, first_key, last_key))
        if pos != len(body):
            raise ValueError("Trailing bytes in metadata")
        return metas