"""
Row Views
=========

Row      - shared, read-only view of one table entry
RowMut   - exclusive, read-write view of one table entry
MappedRow - owned (id, value) pair produced by `map`, detached from the table

Row and RowMut hold a Lease on the borrow scope that produced them and
stop working when that scope ends. MappedRow holds no borrow at all.
"""

from __future__ import annotations
import copy
from typing import Any, Callable, Generic, MutableMapping, NoReturn, Optional, TypeVar

from ..borrow import Lease
from ..contracts.base import Id
from .view import RowView


T = TypeVar('T')
U = TypeVar('U')
V = TypeVar('V')


class Row(RowView[T]):
    """
    A row in a Table.

    Acts like a read-only reference to the wrapped value. `clone()` and
    `copy.copy` duplicate the id and the reference; `copy.deepcopy`
    also deep-copies the value, so the copy shares nothing mutable with
    the table.
    """

    __slots__ = ('_id', '_data', '_lease')

    def __init__(self, row_id: Id, data: T, lease: Optional[Lease] = None):
        object.__setattr__(self, '_id', row_id)
        object.__setattr__(self, '_data', data)
        object.__setattr__(self, '_lease', lease)

    def _read(self) -> T:
        if self._lease is not None:
            self._lease.check()
        return self._data

    def map(self, f: Callable[[T], U]) -> MappedRow[T, U]:
        """Change the data held in a row without changing its id."""
        return MappedRow(self._id, f(self._read()))

    def clone(self) -> Row[T]:
        return Row(self._id, self._data, self._lease)

    def __copy__(self) -> Row[T]:
        return self.clone()

    def __deepcopy__(self, memo: dict) -> Row[T]:
        return Row(self._id, copy.deepcopy(self._read(), memo), self._lease)

    def __setattr__(self, name: str, value: Any) -> NoReturn:
        raise AttributeError(f"Row is read-only; cannot set {name!r}")

    def __delattr__(self, name: str) -> NoReturn:
        raise AttributeError(f"Row is read-only; cannot delete {name!r}")


class RowMut(RowView[T]):
    """
    A mutable row in a Table.

    Reads and writes go straight to the table slot, so assigning
    `row.data` replaces the stored value. Attribute and item writes are
    forwarded to the stored value. A RowMut can never be copied.
    """

    __slots__ = ('_id', '_slot', '_lease')

    def __init__(self, row_id: Id, slot: MutableMapping[Id, T], lease: Optional[Lease] = None):
        object.__setattr__(self, '_id', row_id)
        object.__setattr__(self, '_slot', slot)
        object.__setattr__(self, '_lease', lease)

    def _check(self) -> None:
        if self._lease is not None:
            self._lease.check()

    def _read(self) -> T:
        self._check()
        return self._slot[self._id]

    @property
    def data(self) -> T:
        return self._read()

    @data.setter
    def data(self, value: T) -> None:
        self._check()
        self._slot[self._id] = value

    def set(self, value: T) -> None:
        """Replace the stored value."""
        self.data = value

    def map(self, f: Callable[[T], U]) -> MappedRow[T, U]:
        """Change the data held in a row without changing its id."""
        return MappedRow(self._id, f(self._read()))

    def __setattr__(self, name: str, value: Any) -> None:
        if name == 'data':
            object.__setattr__(self, name, value)
            return
        self._check_forwardable(name, 'set')
        setattr(self._read(), name, value)

    def __delattr__(self, name: str) -> None:
        self._check_forwardable(name, 'delete')
        delattr(self._read(), name)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._read()[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._read()[key]

    def __copy__(self) -> NoReturn:
        raise TypeError("RowMut cannot be copied; it holds exclusive access")

    def __deepcopy__(self, memo: dict) -> NoReturn:
        raise TypeError("RowMut cannot be copied; it holds exclusive access")

    def __reduce_ex__(self, protocol: Any) -> NoReturn:
        raise TypeError("RowMut cannot be pickled; it holds exclusive access")


class MappedRow(RowView[V], Generic[T, V]):
    """
    A row that was mapped from another and owns its data.

    The id keeps the entity tag of the row it came from, however many
    times the carried value is mapped.
    """

    __slots__ = ('_id', '_data')

    def __init__(self, row_id: Id, data: V):
        object.__setattr__(self, '_id', row_id)
        object.__setattr__(self, '_data', data)

    def _read(self) -> V:
        return self._data

    @property
    def data(self) -> V:
        return self._data

    @data.setter
    def data(self, value: V) -> None:
        object.__setattr__(self, '_data', value)

    def map(self, f: Callable[[V], U]) -> MappedRow[T, U]:
        """Change the data held in a row without changing its id."""
        return MappedRow(self._id, f(self._data))

    def clone(self) -> MappedRow[T, V]:
        """Duplicate the row; the value is copied with copy.deepcopy."""
        return MappedRow(self._id, copy.deepcopy(self._data))

    def __copy__(self) -> MappedRow[T, V]:
        return MappedRow(self._id, copy.copy(self._data))

    def __deepcopy__(self, memo: dict) -> MappedRow[T, V]:
        return MappedRow(self._id, copy.deepcopy(self._data, memo))

    def __setattr__(self, name: str, value: Any) -> None:
        if name == 'data':
            object.__setattr__(self, name, value)
            return
        self._check_forwardable(name, 'set')
        setattr(self._data, name, value)

    def __delattr__(self, name: str) -> None:
        self._check_forwardable(name, 'delete')
        delattr(self._data, name)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._data[key]
