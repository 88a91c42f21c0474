"""
Table Configuration

Explicit, immutable configuration for a Table.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class TableConfig:
    """
    Configuration for a table.

    WHY FROZEN:
    Config should not change while views are live.
    Changes require a new table.
    """
    name: str = "table"

    # Id allocation: monotonic from here, never recycled
    first_id: int = 1

    # Audit trail - explicit, never hidden
    audit_borrows: bool = False

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string")
        if self.first_id < 0:
            raise ValueError("first_id must be non-negative")
