"""
Row View Layer
==============

Views onto table entries and sequences of them.

INVARIANTS:
- A view's id always names the slot its data came from
- Row never writes; RowMut always may
- MappedRow keeps its original id through any chain of map calls
- Equality across all three view kinds compares data only

Modules:
- view: shared surface (equality, forwarding, formatting)
- row: Row, RowMut, MappedRow
- iteration: RowIter, RowIterMut
- formatting: "{id}: {data}" rendering
"""

from .view import RowView, row_data, rows_equal
from .row import MappedRow, Row, RowMut
from .iteration import RowIter, RowIterMut

__all__ = [
    'RowView',
    'row_data',
    'rows_equal',
    'Row',
    'RowMut',
    'MappedRow',
    'RowIter',
    'RowIterMut',
]
