from __future__ import annotations

import json
from pathlib import Path

import pytest

from crm_import.cli import main as cli_main
from crm_import.models.field_schema import CUSTOMER_SCHEMA

"""End-to-end runs through the CLI: template -> fill in -> import."""


@pytest.fixture()
def captured_inserts(monkeypatch):
    """Run live mode against a recording cursor instead of PostgreSQL."""
    from contextlib import contextmanager

    import crm_import.db.batch_insert as bi

    state: dict[str, list] = {"statements": [], "inserts": []}

    class Cursor:
        def execute(self, sql, params=None):
            state["statements"].append((sql, params))

    @contextmanager
    def fake_cursor(db_cfg):
        yield Cursor()

    def fake_execute_values(cursor, sql, rows, page_size=1000):
        state["inserts"].append((sql, rows))

    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    monkeypatch.setattr("crm_import.cli.__main__.db_cursor", fake_cursor)
    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return state


def _fill_template(template: Path, rows: list[dict[str, str]]) -> str:
    header = template.read_text(encoding="utf-8").strip()
    names = header.split(",")
    lines = [header]
    for row in rows:
        lines.append(",".join(row.get(n, "") for n in names))
    return "\n".join(lines) + "\n"


def test_template_round_trip_import(temp_workdir: Path, write_config, write_csv, captured_inserts, capsys):
    assert cli_main(["template", "--output-dir", "templates"]) == 0
    template = temp_workdir / "templates" / "customers_import_template.csv"

    content = _fill_template(
        template,
        [
            {"name": "Asha Rao", "phone": "9998887776", "floor": "2", "status": "Lead",
             "visited_date": "01/05/2024", "preferred_metal": "gold"},
            {"name": "Meera Iyer", "phone": "9990001112", "floor": "10",
             "date_of_birth": "1990-07-15T08:00:00"},
        ],
    )
    path = write_csv("filled.csv", content)
    code = cli_main(["import", str(path), "--preview", "0"])
    out = capsys.readouterr().out

    assert code == 0
    assert "INFO 2 customers imported" in out
    ((sql, rows),) = captured_inserts["inserts"]
    assert sql.startswith('INSERT INTO "customers" (')
    # every schema column is present in the template, so every one is inserted
    assert sql.count('"') == 2 * (len(CUSTOMER_SCHEMA.names) + 1)
    names = list(CUSTOMER_SCHEMA.names)
    first = dict(zip(names, rows[0]))
    assert first["status"] == "lead"
    assert first["visited_date"] == "2024-01-05"
    assert first["floor"] == 2
    assert first["email"] is None
    second = dict(zip(names, rows[1]))
    assert second["status"] == "active"
    assert second["date_of_birth"] == "1990-07-15"
    assert captured_inserts["statements"][-1] == ("COMMIT", None)
    assert not (temp_workdir / "logs").exists() or not list((temp_workdir / "logs").glob("*.log"))


def test_fix_and_resubmit(temp_workdir: Path, write_csv, captured_inserts, scenario_csv: str, capsys):
    path = write_csv("scenario.csv", scenario_csv)
    assert cli_main(["import", str(path)]) == 2
    assert captured_inserts["inserts"] == []

    (log_file,) = (temp_workdir / "logs").glob("errors-*.log")
    rows = [json.loads(line)["row"] for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert rows == [3, 4]

    fixed = scenario_csv.replace(",9991112223,3,lead", "Neha Das,9991112223,3,lead").replace(",12,", ",9,")
    path.write_text(fixed, encoding="utf-8")
    assert cli_main(["import", str(path)]) == 0
    ((_, inserted),) = captured_inserts["inserts"]
    assert [r[0] for r in inserted] == ["Asha Rao", "Neha Das", "Kiran Shah"]
