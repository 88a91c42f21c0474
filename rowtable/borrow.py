"""
Runtime Borrow Flag
===================

Scoped shared/exclusive access to a table.

INVARIANTS:
- Any number of shared borrows may be open at once
- An exclusive borrow is only granted when no other borrow is open
- Views hold a Lease on the scope that produced them; a lease dies with
  its scope and is never revived
- Inside one exclusive scope, each mutable re-borrow bumps the scope
  generation, so at most one generation of mutable views is usable

Violations raise; aliased mutation is never silently permitted.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, NoReturn, Optional
import logging

from .contracts.errors import (
    AlreadyBorrowed,
    AlreadyMutablyBorrowed,
    BorrowError,
    BorrowReleased,
)
from .observability import AuditEventType, BorrowAuditLog


logger = logging.getLogger(__name__)


class BorrowKind(Enum):
    SHARED = "shared"
    EXCLUSIVE = "exclusive"


@dataclass(eq=False)
class BorrowToken:
    """One open borrow scope. Mutated only by its BorrowFlag."""
    kind: BorrowKind
    table: str
    serial: int
    active: bool = True
    generation: int = 0

    def lease(self) -> Lease:
        """Lease valid for the whole scope (shared views)."""
        return Lease(token=self)

    def __repr__(self) -> str:
        state = "active" if self.active else "released"
        return f"BorrowToken({self.table}#{self.serial}, {self.kind.value}, {state})"


@dataclass(frozen=True, eq=False)
class Lease:
    """
    A view's claim on a borrow scope.

    generation is None for leases that live as long as the scope;
    otherwise the lease is only good while the scope is still at
    that generation.
    """
    token: BorrowToken
    generation: Optional[int] = None

    @property
    def is_valid(self) -> bool:
        if not self.token.active:
            return False
        return self.generation is None or self.generation == self.token.generation

    def check(self) -> None:
        """Raise if the view holding this lease may no longer be used."""
        token = self.token
        if not token.active:
            raise BorrowReleased(
                f"{token.table}: view used after its {token.kind.value} borrow ended",
                table=token.table
            )
        if self.generation is not None and self.generation != token.generation:
            raise AlreadyBorrowed(
                f"{token.table}: mutable view superseded by a later mutable borrow",
                table=token.table
            )


class BorrowFlag:
    """
    Reader count plus a single writer slot for one table.

    GUARANTEES:
    ===========
    1. acquire_exclusive fails with AlreadyBorrowed if anything is open
    2. acquire_shared fails with AlreadyMutablyBorrowed if a writer is open
    3. release is idempotent per token
    """

    def __init__(self, table: str, audit: Optional[BorrowAuditLog] = None):
        self._table = table
        self._audit = audit
        self._readers: int = 0
        self._writer: Optional[BorrowToken] = None
        self._serial: int = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def is_borrowed(self) -> bool:
        return self._readers > 0 or self._writer is not None

    @property
    def is_mutably_borrowed(self) -> bool:
        return self._writer is not None

    def acquire_shared(self) -> BorrowToken:
        if self._writer is not None:
            self._reject(
                BorrowKind.SHARED,
                AlreadyMutablyBorrowed(
                    f"{self._table}: already mutably borrowed",
                    table=self._table
                )
            )
        self._readers += 1
        return self._open(BorrowKind.SHARED)

    def acquire_exclusive(self) -> BorrowToken:
        if self.is_borrowed:
            self._reject(
                BorrowKind.EXCLUSIVE,
                AlreadyBorrowed(
                    f"{self._table}: already borrowed "
                    f"({self._readers} shared, "
                    f"{1 if self._writer else 0} exclusive)",
                    table=self._table
                )
            )
        token = self._open(BorrowKind.EXCLUSIVE)
        self._writer = token
        return token

    def require_exclusive(self, action: str) -> None:
        """Check that a one-off exclusive operation may run right now."""
        if self.is_borrowed:
            self._reject(
                BorrowKind.EXCLUSIVE,
                AlreadyBorrowed(
                    f"{self._table}: cannot {action} while borrowed",
                    table=self._table
                )
            )

    def reborrow(self, token: BorrowToken) -> Lease:
        """
        Start a new generation of mutable views inside an exclusive scope.

        Views from earlier generations raise AlreadyBorrowed on next use.
        """
        token.lease().check()
        if token.kind is not BorrowKind.EXCLUSIVE:
            raise AlreadyMutablyBorrowed(
                f"{self._table}: mutable access requires an exclusive borrow",
                table=self._table
            )
        token.generation += 1
        if self._audit is not None:
            self._audit.record(
                AuditEventType.REBORROWED,
                self._table,
                token.kind.value,
                detail=f"generation={token.generation}"
            )
        return Lease(token=token, generation=token.generation)

    def release(self, token: BorrowToken) -> None:
        if not token.active:
            return
        token.active = False
        if token.kind is BorrowKind.EXCLUSIVE:
            self._writer = None
        else:
            self._readers -= 1

        logger.debug("released %r", token)
        if self._audit is not None:
            self._audit.record(
                AuditEventType.RELEASED,
                self._table,
                token.kind.value,
                detail=f"serial={token.serial}"
            )

    @contextmanager
    def shared(self) -> Iterator[BorrowToken]:
        token = self.acquire_shared()
        try:
            yield token
        finally:
            self.release(token)

    @contextmanager
    def exclusive(self) -> Iterator[BorrowToken]:
        token = self.acquire_exclusive()
        try:
            yield token
        finally:
            self.release(token)

    def _open(self, kind: BorrowKind) -> BorrowToken:
        self._serial += 1
        token = BorrowToken(kind=kind, table=self._table, serial=self._serial)

        logger.debug("acquired %r", token)
        if self._audit is not None:
            self._audit.record(
                AuditEventType.ACQUIRED,
                self._table,
                kind.value,
                detail=f"serial={self._serial}"
            )
        return token

    def _reject(self, kind: BorrowKind, error: BorrowError) -> NoReturn:
        logger.warning("borrow rejected: %s", error.message)
        if self._audit is not None:
            self._audit.record(
                AuditEventType.REJECTED,
                self._table,
                kind.value,
                detail=error.message
            )
        raise error
