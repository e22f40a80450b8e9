from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Row models for the customer CSV import.

RawRow is one data line after splitting and header binding (strings only).
ParsedCustomer is the typed result of a row that passed every validation rule.
"""

__all__ = [
    "RawRow",
    "ParsedCustomer",
]


@dataclass(frozen=True)
class RawRow:
    """One data line bound to the header columns.

    row_number is the physical 1-based line number in the uploaded file
    (the header is line 1), so it maps directly to a spreadsheet row.
    """
    row_number: int
    values: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str:
        return self.values.get(name, "")


@dataclass(frozen=True)
class ParsedCustomer:
    """A fully validated customer row (never partially valid)."""
    row_number: int
    values: dict[str, Any]  # floor -> int, dates -> YYYY-MM-DD, status -> lowercase

    @property
    def name(self) -> str:
        return self.values["name"]

    @property
    def floor(self) -> int:
        return self.values["floor"]
