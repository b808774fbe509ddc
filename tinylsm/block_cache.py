"""LRU-K cache of decoded blocks keyed by (sst id, block id)."""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass

from tinylsm.block import Block

_Key = tuple[int, int]


@dataclass
class _CacheItem:
    block: Block
    access_count: int


class BlockCache:
    """Thread-safe LRU-K cache.

    Items seen fewer than ``k`` times are evicted before items seen at least
    ``k`` times; within each group the least recently used goes first.
    """

    def __init__(self, capacity: int, k: int) -> None:
        self._capacity = capacity
        self._k = k
        self._less_k: OrderedDict[_Key, _CacheItem] = OrderedDict()
        self._greater_k: OrderedDict[_Key, _CacheItem] = OrderedDict()
        self._lock = threading.Lock()
        self._total_requests = 0
        self._hit_requests = 0

    def get(self, sst_id: int, block_id: int) -> Block | None:
        key = (sst_id, block_id)
        with self._lock:
            self._total_requests += 1
            item = self._less_k.get(key) or self._greater_k.get(key)
            if item is None:
                return None
            self._hit_requests += 1
            self._touch(key)
            return item.block

    def put(self, sst_id: int, block_id: int, block: Block) -> None:
        key = (sst_id, block_id)
        with self._lock:
            existing = self._less_k.get(key) or self._greater_k.get(key)
            if existing is not None:
                existing.block = block
                self._touch(key)
                return
            if self._capacity <= 0:
                return
            if len(self._less_k) + len(self._greater_k) >= self._capacity:
                self._evict()
            target = self._less_k if self._k > 1 else self._greater_k
            target[key] = _CacheItem(block, 1)

    def hit_rate(self) -> float:
        with self._lock:
            if self._total_requests == 0:
                return 0.0
            return self._hit_requests / self._total_requests

    def _evict(self) -> None:
        victims = self._less_k if self._less_k else self._greater_k
        if victims:
            victims.popitem(last=False)

    def _touch(self, key: _Key) -> None:
        if key in self._less_k:
            item = self._less_k[key]
            item.access_count += 1
            if item.access_count >= self._k:
                del self._less_k[key]
                self._greater_k[key] = item
            else:
                self._less_k.move_to_end(key)
        else:
            item = self._greater_k[key]
            item.access_count += 1
            self._greater_k.move_to_end(key)