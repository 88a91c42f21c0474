"""
rowtable

An in-memory typed table whose entries are reached through views.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Id, ErrorCode, Error and the borrow exceptions
   - Shared by every other layer

2. BORROW (borrow.py)
   - Runtime shared/exclusive borrow flag with scoped acquisition
   - MUST NOT: Permit aliased mutable access

3. ROWS (rows/)
   - Row, RowMut, MappedRow views and RowIter, RowIterMut sequences
   - MUST NOT: Compare ids when comparing views

4. STORAGE (storage/)
   - Table plus its shared (TableRef) and exclusive (TableMut) scopes
   - MUST NOT: Reorder entries or reuse ids

5. OBSERVABILITY (observability/)
   - Append-only borrow audit trail
   - MUST NOT: Change borrow behavior

CONSTRAINTS ENFORCED:
=====================
- Single-threaded and synchronous
- Explicit errors: borrow violations always raise
- Views never outlive the scope that produced them, except MappedRow,
  which owns its value
"""

from .config import TableConfig
from .contracts import (
    AlreadyBorrowed,
    AlreadyMutablyBorrowed,
    BorrowError,
    BorrowReleased,
    Error,
    ErrorCode,
    Id,
)
from .observability import AuditEventType, AuditLogEntry, BorrowAuditLog
from .rows import (
    MappedRow,
    Row,
    RowIter,
    RowIterMut,
    RowMut,
    RowView,
    row_data,
    rows_equal,
)
from .storage import Table, TableMut, TableRef

__version__ = "0.1.0"

__all__ = [
    'TableConfig',
    'AlreadyBorrowed',
    'AlreadyMutablyBorrowed',
    'BorrowError',
    'BorrowReleased',
    'Error',
    'ErrorCode',
    'Id',
    'AuditEventType',
    'AuditLogEntry',
    'BorrowAuditLog',
    'MappedRow',
    'Row',
    'RowIter',
    'RowIterMut',
    'RowMut',
    'RowView',
    'row_data',
    'rows_equal',
    'Table',
    'TableMut',
    'TableRef',
]
