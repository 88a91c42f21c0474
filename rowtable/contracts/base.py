"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- Identifiers carry no ownership of the value they name
- The entity tag on an Id is descriptive only; it is never compared or hashed
- All types are frozen dataclasses for immutability guarantee
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Generic, Optional, Tuple, TypeVar


E = TypeVar('E')


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for borrow violations.
    Every way a view can be refused is enumerated here.
    """
    # Exclusive access requested while any borrow is live,
    # or a superseded mutable view was used
    ALREADY_BORROWED = auto()

    # Shared access requested while an exclusive borrow is live
    ALREADY_MUTABLY_BORROWED = auto()

    # View or sequence used after its scope ended
    BORROW_RELEASED = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def now(code: ErrorCode, message: str) -> Error:
        return Error(code=code, message=message, timestamp=datetime.now(timezone.utc))

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )


# =============================================================================
# IDENTITY TYPES (Immutable)
# =============================================================================

@dataclass(frozen=True)
class Id(Generic[E]):
    """
    Immutable identifier naming one table slot.

    WHY ENTITY IS EXCLUDED FROM COMPARISON:
    Python has no phantom type parameters, so the entity type is carried
    at runtime for repr/debugging. Two ids are equal iff they name the
    same slot, whatever they are tagged with.
    """
    value: int
    entity: Optional[type] = field(default=None, compare=False, hash=False)

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("Id value must be an int")
        if self.value < 0:
            raise ValueError("Id value must be non-negative")

    def next(self) -> Id[E]:
        """Return the id allocated after this one (same entity tag)."""
        return Id(value=self.value + 1, entity=self.entity)

    @property
    def entity_name(self) -> Optional[str]:
        if self.entity is None:
            return None
        return self.entity.__name__

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        if self.entity is None:
            return f"Id({self.value})"
        return f"Id[{self.entity.__name__}]({self.value})"
