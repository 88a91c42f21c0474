"""
Shared Row View Surface
=======================

Behavior common to Row, RowMut and MappedRow.

INVARIANTS:
- Equality compares carried values only, never ids
- Views are unhashable (their data may change under RowMut)
- Read access is transparent: attribute reads, indexing, len, iteration
  and membership are forwarded to the wrapped value
"""

from __future__ import annotations
from typing import Any, Generic, Iterator, TypeVar

from ..contracts.base import Id
from .formatting import DEFAULT_PRETTY_WIDTH, display_row, format_row


T = TypeVar('T')


class RowView(Generic[T]):
    """
    Base for all row views.

    Subclasses provide `_id` and implement `_read()`.
    Names starting with an underscore, and the view's own names, are
    never forwarded to the wrapped value.
    """

    __slots__ = ()

    _OWN_NAMES = frozenset({'id', 'data', 'map', 'pretty', 'clone', 'set'})

    @property
    def id(self) -> Id:
        return self._id

    @property
    def data(self) -> T:
        return self._read()

    def _read(self) -> T:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Equality (data only)
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RowView):
            return NotImplemented
        return rows_equal(self, other)

    __hash__ = None

    # -------------------------------------------------------------------------
    # Transparent read access
    # -------------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        return getattr(self._read(), name)

    def _check_forwardable(self, name: str, action: str) -> None:
        """Refuse attribute writes that would land on the view's own names."""
        if name.startswith('_') or name in self._OWN_NAMES:
            raise AttributeError(f"cannot {action} {name!r} on {type(self).__name__}")

    def __getitem__(self, key: Any) -> Any:
        return self._read()[key]

    def __len__(self) -> int:
        return len(self._read())

    def __iter__(self) -> Iterator[Any]:
        return iter(self._read())

    def __contains__(self, item: Any) -> bool:
        return item in self._read()

    def __bool__(self) -> bool:
        return bool(self._read())

    # -------------------------------------------------------------------------
    # Formatting
    # -------------------------------------------------------------------------

    def pretty(self, width: int = DEFAULT_PRETTY_WIDTH) -> str:
        """Multi-line rendering, the alternate form of repr."""
        return format_row(self._id, self._read(), pretty=True, width=width)

    def __repr__(self) -> str:
        return format_row(self._id, self._read())

    def __str__(self) -> str:
        return display_row(self._id, self._read())

    def __format__(self, format_spec: str) -> str:
        return display_row(self._id, self._read(), format_spec)


def row_data(view: RowView[T]) -> T:
    """Unwrap a view of any kind to the value it carries."""
    if not isinstance(view, RowView):
        raise TypeError(f"expected a row view, got {type(view).__name__}")
    return view.data


def rows_equal(left: RowView, right: RowView) -> bool:
    """
    Compare two views of any kind by carried value.

    Ids (and their entity tags) are deliberately not inspected, so rows
    from different tables or mapped rows compare by value alone.
    """
    return row_data(left) == row_data(right)
