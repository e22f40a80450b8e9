from __future__ import annotations

import pytest

from crm_import.models.field_schema import CUSTOMER_SCHEMA, STATUS_CHOICES, ValueKind


EXPECTED_ORDER = (
    "name", "phone", "interest", "floor", "visited_date", "status", "notes", "assigned_to",
    "email", "address", "city", "state", "country", "postal_code", "date_of_birth",
    "anniversary_date", "community", "mother_tongue", "reason_for_visit", "age_of_end_user",
    "saving_scheme", "catchment_area", "next_follow_up", "summary_notes", "ring_size",
    "customer_interests",
)


def test_schema_canonical_order():
    assert CUSTOMER_SCHEMA.names == EXPECTED_ORDER
    assert len(CUSTOMER_SCHEMA) == 26


def test_schema_required_fields():
    assert CUSTOMER_SCHEMA.required_names == ("name", "phone", "floor")


def test_schema_date_fields():
    assert CUSTOMER_SCHEMA.date_names == ("visited_date", "date_of_birth", "anniversary_date", "next_follow_up")


def test_schema_floor_and_status_specs():
    floor = CUSTOMER_SCHEMA.get("floor")
    assert floor.kind is ValueKind.INTEGER
    assert (floor.min_value, floor.max_value) == (1, 10)

    status = CUSTOMER_SCHEMA.get("status")
    assert status.kind is ValueKind.ENUM
    assert status.choices == STATUS_CHOICES
    assert all(c == c.lower() for c in status.choices)


def test_schema_membership_and_lookup():
    assert "phone" in CUSTOMER_SCHEMA
    assert "first_name" not in CUSTOMER_SCHEMA
    assert CUSTOMER_SCHEMA.get("first_name") is None


def test_schema_is_immutable():
    with pytest.raises(AttributeError):
        CUSTOMER_SCHEMA.fields = ()  # type: ignore[misc]
