"""
Contracts Module

Identifier, error code and exception types shared by every layer.
No layer may import implementation details from another layer;
they meet here.

DESIGN PRINCIPLES:
==================
1. Identifiers are immutable (frozen dataclasses)
2. Every refusal has an explicit ErrorCode
3. Violations raise, they are never silently permitted
"""

from .base import Error, ErrorCode, Id
from .errors import (
    AlreadyBorrowed,
    AlreadyMutablyBorrowed,
    BorrowError,
    BorrowReleased,
)

__all__ = [
    'Error',
    'ErrorCode',
    'Id',
    'BorrowError',
    'AlreadyBorrowed',
    'AlreadyMutablyBorrowed',
    'BorrowReleased',
]
