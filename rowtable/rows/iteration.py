"""
Row Sequences
=============

One-shot iterators over a table's entries.

INVARIANTS:
- Entries come out in the table's storage (insertion) order
- Once exhausted, a sequence never yields again
- RowIter can be cloned into an independent cursor; RowIterMut cannot,
  since two cursors would hand out aliasing mutable views
"""

from __future__ import annotations
from itertools import tee
from typing import Any, Generic, Iterator, MutableMapping, NoReturn, Optional, Tuple, TypeVar

from ..borrow import Lease
from ..contracts.base import Id
from .row import Row, RowMut


T = TypeVar('T')


class RowIter(Generic[T]):
    """An iterator over rows in a Table."""

    def __init__(self, entries: Iterator[Tuple[Id, T]], lease: Optional[Lease] = None):
        self._entries = entries
        self._lease = lease

    def __iter__(self) -> RowIter[T]:
        return self

    def __next__(self) -> Row[T]:
        if self._lease is not None:
            self._lease.check()
        row_id, data = next(self._entries)
        return Row(row_id, data, self._lease)

    def clone(self) -> RowIter[T]:
        """Independent cursor starting at this cursor's current position."""
        self._entries, twin = tee(self._entries)
        return RowIter(twin, self._lease)

    def __copy__(self) -> RowIter[T]:
        return self.clone()

    def __repr__(self) -> str:
        return f"RowIter(lease={self._lease!r})"


class RowIterMut(Generic[T]):
    """A mutable iterator over rows in a Table."""

    def __init__(self, slot: MutableMapping[Id, T], lease: Optional[Lease] = None):
        self._slot = slot
        self._ids: Iterator[Id] = iter(slot)
        self._lease = lease

    def __iter__(self) -> RowIterMut[T]:
        return self

    def __next__(self) -> RowMut[T]:
        if self._lease is not None:
            self._lease.check()
        row_id = next(self._ids)
        return RowMut(row_id, self._slot, self._lease)

    def __copy__(self) -> NoReturn:
        raise TypeError("RowIterMut cannot be copied; it holds exclusive access")

    def __deepcopy__(self, memo: dict) -> NoReturn:
        raise TypeError("RowIterMut cannot be copied; it holds exclusive access")

    def __reduce_ex__(self, protocol: Any) -> NoReturn:
        raise TypeError("RowIterMut cannot be pickled; it holds exclusive access")

    def __repr__(self) -> str:
        return f"RowIterMut(lease={self._lease!r})"
