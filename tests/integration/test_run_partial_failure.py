from __future__ import annotations

from pathlib import Path

from census_formatter.cli.__main__ import EXIT_PARTIAL_FAILURE, main


def test_partial_failure_keeps_processing(write_config, temp_workdir: Path, make_workbook, capsys):
    make_workbook(temp_workdir / "data" / "a_good.xlsx")
    (temp_workdir / "data" / "b_corrupt.xlsx").write_bytes(b"PK\x03\x04 broken")
    make_workbook(
        temp_workdir / "data" / "c_invalid.xlsx",
        rows=[["Employee", "Doe", "Jim", "X", "01/01/1980", "12", "", "", "", "", "", ""]],
    )
    code = main([])
    out = capsys.readouterr().out
    assert code == EXIT_PARTIAL_FAILURE
    assert "ERROR b_corrupt.xlsx:" in out
    assert "SUMMARY files=2/3 valid=1 invalid=1 failed=1 records=5" in out
    assert (temp_workdir / "out" / "a_good-formatted.xlsx").exists()
    assert (temp_workdir / "out" / "c_invalid-formatted.xlsx").exists()
    assert not (temp_workdir / "out" / "b_corrupt-formatted.xlsx").exists()


def test_missing_sheet_fails_file(temp_workdir: Path, make_workbook, capsys):
    (temp_workdir / "config" / "census.yml").write_text(
        "source_directory: ./data\noutput_directory: ./out\nsheet_name: Census\n",
        encoding="utf-8",
    )
    make_workbook(temp_workdir / "data" / "acme.xlsx", sheet_name="Other")
    assert main([]) == EXIT_PARTIAL_FAILURE
    out = capsys.readouterr().out
    assert "failed=1" in out
