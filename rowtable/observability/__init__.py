"""
Observability & Audit Layer

RESPONSIBILITY: Borrow audit trail
ALLOWED INPUTS: Borrow lifecycle events from the borrow layer
OUTPUTS: AuditLogEntry records

WHAT THIS LAYER MUST NOT DO:
============================
- Modify borrow behavior
- Filter or interpret events (only record them)
- Block or delay borrow operations

BOUNDARY ENFORCEMENT:
=====================
- Entries are immutable once collected
- Collectors are append-only
- Provides read-only access to entries
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


class AuditEventType(Enum):
    """Explicit audit event types."""
    ACQUIRED = "acquired"
    RELEASED = "released"
    REBORROWED = "reborrowed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    sequence: int
    event_type: AuditEventType
    table: str
    kind: str  # "shared" or "exclusive"
    timestamp: datetime
    detail: Optional[str] = None


class BorrowAuditLog:
    """
    Append-only collector for borrow events.

    One log may be shared by several tables; entries are tagged with
    the table name that produced them.
    """

    def __init__(self):
        self._entries: List[AuditLogEntry] = []
        self._sequence: int = 0

    def record(
        self,
        event_type: AuditEventType,
        table: str,
        kind: str,
        detail: Optional[str] = None
    ) -> AuditLogEntry:
        """Append an entry and return it."""
        self._sequence += 1
        entry = AuditLogEntry(
            sequence=self._sequence,
            event_type=event_type,
            table=table,
            kind=kind,
            timestamp=datetime.now(timezone.utc),
            detail=detail
        )
        self._entries.append(entry)
        return entry

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None,
        table: Optional[str] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = self._entries

        if event_type:
            entries = [e for e in entries if e.event_type == event_type]

        if table:
            entries = [e for e in entries if e.table == table]

        return list(entries)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    'AuditEventType',
    'AuditLogEntry',
    'BorrowAuditLog',
]
