# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from census_formatter.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("CENSUS_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./out
header_row: 1
default_hours_worked: 40
validation:
  warn_missing_expected: false
  child_age_limit: 25
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "census.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


SAMPLE_HEADERS = [
    "Relationship", "Last Name", "First Name", "Gender", "DOB", "SSN",
    "Address", "City", "State", "Zip", "Dental Coverage", "Spouse Vol Life",
]


def sample_rows() -> list[list[Any]]:
    return [
        ["Employee", "Smith", "John", "Male", "01/15/1980", "123-45-6789",
         "12 North Main Street", "Springfield", "IL", "62701", "Family", 0],
        ["Spouse", "Smith", "Jane", "Female", "02/20/1982", "", "", "", "", "", "", 10000],
        ["Child", "Smith", "Sam", "M", "03/01/2012", "", "", "", "", "", "", ""],
        ["Employee", "Jones", "Ann", "F", "07/04/1975", "987654321",
         "5 Oak Ave", "Dayton", "OH", "45402", "EE", ""],
    ]


@pytest.fixture()
def make_workbook() -> Callable[..., Path]:
    """Write a single-sheet workbook with pandas (optional title line above the headers)."""

    def _make(
        path: Path,
        headers: list[str] | None = None,
        rows: list[list[Any]] | None = None,
        sheet_name: str = "MASTER CENSUS",
        title: str | None = None,
    ) -> Path:
        headers = SAMPLE_HEADERS if headers is None else headers
        rows = sample_rows() if rows is None else rows
        lines = [headers, *rows] if title is None else [[title], headers, *rows]
        frame = pd.DataFrame(lines)
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            frame.to_excel(writer, sheet_name=sheet_name, index=False, header=False)
        return path

    return _make
