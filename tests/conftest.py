# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from crm_import.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """table: customers
template_filename: customers_import_template.csv
default_status: active
page_size: 500
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: crm
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path) -> Callable[[str, str], Path]:
    def _write(name: str, content: str) -> Path:
        p = temp_workdir / "data" / name
        p.write_text(content, encoding="utf-8")
        return p
    return _write


@pytest.fixture()
def scenario_csv() -> str:
    return (
        "name,phone,floor,status\n"
        "Asha Rao,9998887776,2,lead\n"
        ",9991112223,3,lead\n"
        "Kiran Shah,9994445556,12,customer\n"
    )


@pytest.fixture()
def clean_csv() -> str:
    return (
        "name,phone,floor,status,visited_date,email\n"
        "Asha Rao,9998887776,2,lead,2024-01-05,asha@example.com\n"
        "Meera Iyer,9990001112,5,VIP,01/06/2024,\n"
        "Ravi Menon,9993334445,1,,2024-01-07T10:30:00,ravi@example.com\n"
    )
