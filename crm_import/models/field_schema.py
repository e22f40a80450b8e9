from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

"""Field schema for the customer CSV import.

The schema is the static, ordered catalog of columns the importer understands.
It drives the template header, the required-field check and the per-kind
validation rules. It is module-level configuration and never mutated.
"""

__all__ = [
    "ValueKind",
    "FieldSpec",
    "FieldSchema",
    "CUSTOMER_SCHEMA",
    "STATUS_CHOICES",
    "FLOOR_MIN",
    "FLOOR_MAX",
]

STATUS_CHOICES: tuple[str, ...] = ("active", "inactive", "lead", "prospect", "customer", "vip")
FLOOR_MIN = 1
FLOOR_MAX = 10


class ValueKind(Enum):
    """Value kind of a schema field.

    - TEXT: free text, stored as given (trimmed)
    - INTEGER: integer string, range checked
    - ENUM: case-insensitive member of a closed lowercase set
    - DATE: any parseable calendar date, rewritten to YYYY-MM-DD
    """
    TEXT = "text"
    INTEGER = "integer"
    ENUM = "enum"
    DATE = "date"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    required: bool = False
    kind: ValueKind = ValueKind.TEXT
    choices: tuple[str, ...] | None = None  # ENUM only, lowercase
    min_value: int | None = None  # INTEGER only
    max_value: int | None = None


@dataclass(frozen=True)
class FieldSchema:
    """Ordered, read-only collection of FieldSpec entries."""
    fields: tuple[FieldSpec, ...]

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self.fields)

    def get(self, name: str) -> FieldSpec | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def required_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    @property
    def date_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.kind is ValueKind.DATE)


def _text(name: str, required: bool = False) -> FieldSpec:
    return FieldSpec(name=name, required=required)


def _date(name: str) -> FieldSpec:
    return FieldSpec(name=name, kind=ValueKind.DATE)


# Template column order
CUSTOMER_SCHEMA = FieldSchema(
    fields=(
        _text("name", required=True),
        _text("phone", required=True),
        _text("interest"),
        FieldSpec(
            name="floor",
            required=True,
            kind=ValueKind.INTEGER,
            min_value=FLOOR_MIN,
            max_value=FLOOR_MAX,
        ),
        _date("visited_date"),
        FieldSpec(name="status", kind=ValueKind.ENUM, choices=STATUS_CHOICES),
        _text("notes"),
        _text("assigned_to"),
        _text("email"),
        _text("address"),
        _text("city"),
        _text("state"),
        _text("country"),
        _text("postal_code"),
        _date("date_of_birth"),
        _date("anniversary_date"),
        _text("community"),
        _text("mother_tongue"),
        _text("reason_for_visit"),
        _text("age_of_end_user"),
        _text("saving_scheme"),
        _text("catchment_area"),
        _date("next_follow_up"),
        _text("summary_notes"),
        _text("ring_size"),
        _text("customer_interests"),
    )
)
