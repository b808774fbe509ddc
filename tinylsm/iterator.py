"""Merging iterators over sorted key/value sources.

A deleted key is stored as an entry with an empty value; the iterators
here hide such keys together with every older version of them.
"""

from __future__ import annotations

import enum
import functools
import heapq
from dataclasses import dataclass
from typing import Iterable, Protocol


class IteratorType(enum.Enum):
    SKIP_LIST_ITERATOR = "SkipListIterator"
    SST_ITERATOR = "SstIterator"
    HEAP_ITERATOR = "HeapIterator"
    TWO_MERGE_ITERATOR = "TwoMergeIterator"
    CONCACT_ITERATOR = "ConcactIterator"
    LEVEL_ITERATOR = "LevelIterator"


class _Cursor(Protocol):
    def current(self) -> tuple[str, str]: ...

    def advance(self) -> object: ...

    def is_end(self) -> bool: ...

    def is_valid(self) -> bool: ...


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SearchItem:
    """A heap entry; among equal keys the lower ``idx`` (newer source) wins."""

    key: str
    value: str
    idx: int = 0
    level: int = 0
    tranc_id: int = 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchItem):
            return NotImplemented
        return self.key == other.key and self.idx == other.idx

    def __lt__(self, other: "SearchItem") -> bool:
        if self.key != other.key:
            return self.key < other.key
        return self.idx < other.idx

    def __hash__(self) -> int:
        return hash((self.key, self.idx))


class HeapIterator:
    """Yields each key once, newest version first, skipping deletions."""

    def __init__(self, items: Iterable[SearchItem] = (), max_tranc_id: int = 0) -> None:
        self._heap: list[SearchItem] = list(items)
        heapq.heapify(self._heap)
        self._max_tranc_id = max_tranc_id
        self._settle()

    def _visible(self, item: SearchItem) -> bool:
        return self._max_tranc_id == 0 or item.tranc_id <= self._max_tranc_id

    def _top_value_legal(self) -> bool:
        if not self._heap:
            return True
        top = self._heap[0]
        return self._visible(top) and top.value != ""

    def _skip_by_tranc_id(self) -> None:
        while self._heap and not self._visible(self._heap[0]):
            heapq.heappop(self._heap)

    def _drop_key(self, key: str) -> None:
        while self._heap and self._heap[0].key == key:
            heapq.heappop(self._heap)

    def _settle(self) -> None:
        while not self._top_value_legal():
            self._skip_by_tranc_id()
            while self._heap and self._heap[0].value == "":
                self._drop_key(self._heap[0].key)

    def current(self) -> tuple[str, str]:
        if not self._heap:
            raise IndexError("HeapIterator is exhausted")
        top = self._heap[0]
        return top.key, top.value

    def advance(self) -> "HeapIterator":
        if self._heap:
            self._drop_key(self._heap[0].key)
            self._settle()
        return self

    def is_end(self) -> bool:
        return not self._heap

    def is_valid(self) -> bool:
        return bool(self._heap)

    def get_type(self) -> IteratorType:
        return IteratorType.HEAP_ITERATOR

    def get_tranc_id(self) -> int:
        return self._max_tranc_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeapIterator):
            return NotImplemented
        if self.is_end() or other.is_end():
            return self.is_end() and other.is_end()
        return self.current() == other.current()

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> "HeapIterator":
        return self

    def __next__(self) -> tuple[str, str]:
        if self.is_end():
            raise StopIteration
        item = self.current()
        self.advance()
        return item


class TwoMergeIterator:
    """Merges two sorted cursors; on equal keys ``it_a`` takes precedence."""

    def __init__(
        self,
        it_a: _Cursor | None = None,
        it_b: _Cursor | None = None,
        max_tranc_id: int = 0,
    ) -> None:
        self.it_a = it_a
        self.it_b = it_b
        self._max_tranc_id = max_tranc_id
        self._skip_it_b()
        self._choose_a = self._choose_it_a()

    @staticmethod
    def _exhausted(it: _Cursor | None) -> bool:
        return it is None or it.is_end()

    def _choose_it_a(self) -> bool:
        if self._exhausted(self.it_a):
            return False
        if self._exhausted(self.it_b):
            return True
        return self.it_a.current()[0] < self.it_b.current()[0]

    def _skip_it_b(self) -> None:
        if (
            not self._exhausted(self.it_a)
            and not self._exhausted(self.it_b)
            and self.it_a.current()[0] == self.it_b.current()[0]
        ):
            self.it_b.advance()

    def current(self) -> tuple[str, str]:
        if self.is_end():
            raise IndexError("TwoMergeIterator is exhausted")
        chosen = self.it_a if self._choose_a else self.it_b
        return chosen.current()

    def advance(self) -> "TwoMergeIterator":
        if self.is_end():
            return self
        if self._choose_a:
            self.it_a.advance()
        else:
            self.it_b.advance()
        self._skip_it_b()
        self._choose_a = self._choose_it_a()
        return self

    def is_end(self) -> bool:
        return self._exhausted(self.it_a) and self._exhausted(self.it_b)

    def is_valid(self) -> bool:
        a_valid = self.it_a is not None and self.it_a.is_valid()
        b_valid = self.it_b is not None and self.it_b.is_valid()
        return a_valid or b_valid

    def get_type(self) -> IteratorType:
        return IteratorType.TWO_MERGE_ITERATOR

    def get_tranc_id(self) -> int:
        return self._max_tranc_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TwoMergeIterator):
            return NotImplemented
        if self.is_end() or other.is_end():
            return self.is_end() and other.is_end()
        return self.current() == other.current()

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> "TwoMergeIterator":
        return self

    def __next__(self) -> tuple[str, str]:
        if self.is_end():
            raise StopIteration
        item = self.current()
        self.advance()
        return item