"""
Table Storage Layer

RESPONSIBILITY: Own entity values keyed by Id, hand out scoped views
ALLOWED INPUTS: Entity values, Ids this table allocated
OUTPUTS: Row / RowMut views, RowIter / RowIterMut sequences

WHAT THIS LAYER MUST NOT DO:
============================
- Validate or interpret entity values
- Sort or reorder entries (storage order is insertion order)
- Reuse ids of removed entries
- Hand out views without a borrow scope

BOUNDARY ENFORCEMENT:
=====================
- Shared scopes (borrow) may overlap each other freely
- An exclusive scope (borrow_mut) excludes every other scope
- Structural changes (insert/remove/clear) need exclusive access
- Views die with the scope that produced them
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Dict, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar
import logging

from ..borrow import BorrowFlag, BorrowToken
from ..config import TableConfig
from ..contracts.base import Id
from ..observability import BorrowAuditLog
from ..rows import Row, RowIter, RowIterMut, RowMut


T = TypeVar('T')

logger = logging.getLogger(__name__)


# =============================================================================
# TABLE
# =============================================================================

class Table(Generic[T]):
    """
    In-memory table of entity values keyed by Id.

    Ids are allocated monotonically from config.first_id and tagged
    with `entity`. Values are only reachable through borrow scopes:

        with table.borrow() as rows:          # shared
            row = rows.get(user_id)
        with table.borrow_mut() as rows:      # exclusive
            rows.get_mut(user_id).data = ...
    """

    def __init__(
        self,
        entity: Optional[type] = None,
        config: Optional[TableConfig] = None,
        audit: Optional[BorrowAuditLog] = None
    ):
        self._config = config or TableConfig()
        if audit is None and self._config.audit_borrows:
            audit = BorrowAuditLog()

        self._entity = entity
        self._audit = audit

        # Storage order is insertion order (dict guarantee)
        self._rows: Dict[Id, T] = {}
        self._next_id: Id = Id(self._config.first_id, entity)

        self._flag = BorrowFlag(self._config.name, audit)

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def entity(self) -> Optional[type]:
        return self._entity

    @property
    def config(self) -> TableConfig:
        return self._config

    @property
    def audit(self) -> Optional[BorrowAuditLog]:
        return self._audit

    @property
    def is_borrowed(self) -> bool:
        return self._flag.is_borrowed

    @property
    def is_mutably_borrowed(self) -> bool:
        return self._flag.is_mutably_borrowed

    # -------------------------------------------------------------------------
    # Structural changes (exclusive)
    # -------------------------------------------------------------------------

    def insert(self, value: T) -> Id:
        """Store a value under a freshly allocated id."""
        self._flag.require_exclusive("insert")
        return self._insert(value)

    def extend(self, values: Iterable[T]) -> List[Id]:
        """Insert every value, returning their ids in order."""
        self._flag.require_exclusive("extend")
        return [self._insert(value) for value in values]

    def remove(self, row_id: Id) -> Optional[T]:
        """Remove an entry and return its value, or None if absent."""
        self._flag.require_exclusive("remove")
        return self._remove(row_id)

    def clear(self) -> None:
        self._flag.require_exclusive("clear")
        self._rows.clear()

    def _insert(self, value: T) -> Id:
        row_id = self._next_id
        self._rows[row_id] = value
        self._next_id = row_id.next()
        logger.debug("%s: inserted %s", self.name, row_id)
        return row_id

    def _remove(self, row_id: Id) -> Optional[T]:
        if row_id not in self._rows:
            return None
        logger.debug("%s: removed %s", self.name, row_id)
        return self._rows.pop(row_id)

    # -------------------------------------------------------------------------
    # Borrow scopes
    # -------------------------------------------------------------------------

    @contextmanager
    def borrow(self) -> Iterator[TableRef[T]]:
        """Open a shared scope. Fails with AlreadyMutablyBorrowed during borrow_mut."""
        with self._flag.shared() as token:
            yield TableRef(self._rows, token)

    @contextmanager
    def borrow_mut(self) -> Iterator[TableMut[T]]:
        """Open an exclusive scope. Fails with AlreadyBorrowed if any scope is open."""
        with self._flag.exclusive() as token:
            yield TableMut(self, token)

    # -------------------------------------------------------------------------
    # Unscoped metadata
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._rows

    def __repr__(self) -> str:
        return f"Table({self.name!r}, rows={len(self._rows)})"


# =============================================================================
# SCOPES
# =============================================================================

class TableRef(Generic[T]):
    """Shared, read-only access to a table for one `borrow()` scope."""

    def __init__(self, rows: Dict[Id, T], token: BorrowToken):
        self._rows = rows
        self._lease = token.lease()

    def get(self, row_id: Id) -> Optional[Row[T]]:
        """Row for row_id, or None if the table has no such entry."""
        self._lease.check()
        if row_id not in self._rows:
            return None
        return Row(row_id, self._rows[row_id], self._lease)

    def iter(self) -> RowIter[T]:
        """Fresh sequence over every entry in storage order."""
        self._lease.check()
        return RowIter(iter(self._rows.items()), self._lease)

    def __iter__(self) -> RowIter[T]:
        return self.iter()

    def ids(self) -> Tuple[Id, ...]:
        self._lease.check()
        return tuple(self._rows)

    def __len__(self) -> int:
        self._lease.check()
        return len(self._rows)

    def __contains__(self, row_id: object) -> bool:
        self._lease.check()
        return row_id in self._rows


class TableMut(Generic[T]):
    """
    Exclusive access to a table for one `borrow_mut()` scope.

    Every get_mut, iter_mut, insert and remove re-borrows the scope:
    views handed out earlier raise AlreadyBorrowed on their next use.
    """

    def __init__(self, table: Table[T], token: BorrowToken):
        self._table = table
        self._token = token

    def get_mut(self, row_id: Id) -> Optional[RowMut[T]]:
        """RowMut for row_id, or None if the table has no such entry."""
        self._token.lease().check()
        if row_id not in self._table._rows:
            return None
        lease = self._table._flag.reborrow(self._token)
        return RowMut(row_id, self._table._rows, lease)

    def iter_mut(self) -> RowIterMut[T]:
        """Fresh mutable sequence over every entry in storage order."""
        lease = self._table._flag.reborrow(self._token)
        return RowIterMut(self._table._rows, lease)

    def __iter__(self) -> RowIterMut[T]:
        return self.iter_mut()

    def insert(self, value: T) -> Id:
        self._table._flag.reborrow(self._token)
        return self._table._insert(value)

    def remove(self, row_id: Id) -> Optional[T]:
        self._table._flag.reborrow(self._token)
        return self._table._remove(row_id)

    def __len__(self) -> int:
        self._token.lease().check()
        return len(self._table._rows)

    def __contains__(self, row_id: object) -> bool:
        self._token.lease().check()
        return row_id in self._table._rows


__all__ = [
    'Table',
    'TableRef',
    'TableMut',
]
