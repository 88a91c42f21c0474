"""
Row Formatting

Every view kind renders the same way, whatever its provenance:

    repr:    "{id}: {data!r}"
    str:     "{id}: {data}"
    pretty:  "{id}: " followed by the pretty-printed data
"""

from __future__ import annotations
from pprint import pformat
from typing import Any

from ..contracts.base import Id


DEFAULT_PRETTY_WIDTH = 80


def format_row(row_id: Id, data: Any, pretty: bool = False, width: int = DEFAULT_PRETTY_WIDTH) -> str:
    """Debug rendering of an (id, data) pair."""
    if pretty:
        return f"{row_id}: {pformat(data, width=width)}"
    return f"{row_id}: {data!r}"


def display_row(row_id: Id, data: Any, format_spec: str = "") -> str:
    """
    Display rendering of an (id, data) pair.

    "#" selects the pretty variant; any other spec is applied to data.
    """
    if format_spec == "#":
        return format_row(row_id, data, pretty=True)
    return f"{row_id}: {format(data, format_spec)}"
