"""
Borrow Errors

Exceptions raised when the exclusivity contract is violated.

Each exception maps onto one ErrorCode so a violation can also be
recorded as immutable Error data (see to_error).
"""

from __future__ import annotations
from typing import Optional

from .base import Error, ErrorCode


class BorrowError(Exception):
    """Base class for borrow contract violations."""

    code: ErrorCode = ErrorCode.ALREADY_BORROWED

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.table = table

    def to_error(self) -> Error:
        error = Error.now(self.code, self.message)
        if self.table is not None:
            error = error.with_context("table", self.table)
        return error


class AlreadyBorrowed(BorrowError):
    """
    Raised when exclusive access is requested while the table is borrowed,
    or when a mutable view superseded by a later re-borrow is used.
    """

    code = ErrorCode.ALREADY_BORROWED


class AlreadyMutablyBorrowed(BorrowError):
    """Raised when shared access is requested during an exclusive borrow."""

    code = ErrorCode.ALREADY_MUTABLY_BORROWED


class BorrowReleased(BorrowError):
    """Raised when a view or sequence is used after its scope has ended."""

    code = ErrorCode.BORROW_RELEASED
