from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from helium10_row_store import (
    NOTE_ERROR,
    NOTE_NO_REVENUE,
    BrandRow,
    RowState,
    load_rows,
    read_rows,
    rows_to_frame,
    save_rows,
)


def _write(path: Path, text: str) -> str:
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_missing_file_returns_empty_and_reports(tmp_path: Path, capsys) -> None:
    rows = load_rows(str(tmp_path / "nope.csv"))

    assert rows == []
    assert "File not found" in capsys.readouterr().out


def test_load_reads_all_cells_as_text(tmp_path: Path) -> None:
    csv_path = _write(
        tmp_path / "brands.csv",
        'Brand,Revenue,Note\nAcme,"$1,234.50",\n007,,No revenue found\n',
    )

    rows = load_rows(csv_path)

    assert rows == [
        BrandRow(brand="Acme", revenue="$1,234.50", note=""),
        BrandRow(brand="007", revenue="", note=NOTE_NO_REVENUE),
    ]


def test_missing_columns_default_to_empty(tmp_path: Path) -> None:
    csv_path = _write(tmp_path / "brands.csv", "Brand,Owner\nAcme,Jo\nNike,\n")

    rows = load_rows(csv_path)

    assert rows == [BrandRow("Acme"), BrandRow("Nike")]


def test_header_names_are_case_sensitive(tmp_path: Path) -> None:
    csv_path = _write(tmp_path / "brands.csv", "brand,Revenue\nAcme,10\n")

    rows = load_rows(csv_path)

    assert rows == [BrandRow(brand="", revenue="10", note="")]


def test_short_rows_are_filled(tmp_path: Path) -> None:
    csv_path = _write(tmp_path / "brands.csv", "Brand,Revenue,Note\nAcme\n")

    assert load_rows(csv_path) == [BrandRow("Acme")]


def test_parse_fault_is_reported(tmp_path: Path, capsys) -> None:
    csv_path = _write(tmp_path / "brands.csv", "")

    rows = load_rows(csv_path)

    assert rows == []
    assert "Error reading CSV file" in capsys.readouterr().out


def test_save_writes_all_headers(tmp_path: Path) -> None:
    csv_path = str(tmp_path / "out.csv")

    save_rows(csv_path, [BrandRow("Acme", None, None), BrandRow("Nike", "$5", "")])

    lines = Path(csv_path).read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Brand,Revenue,Note"
    assert lines[1] == "Acme,,"
    assert lines[2] == "Nike,$5,"


def test_save_empty_row_set_writes_header_only(tmp_path: Path) -> None:
    csv_path = str(tmp_path / "out.csv")

    save_rows(csv_path, [])

    assert Path(csv_path).read_text(encoding="utf-8").strip() == "Brand,Revenue,Note"
    assert load_rows(csv_path) == []


def test_save_and_reload_keeps_rows_and_order(tmp_path: Path) -> None:
    csv_path = str(tmp_path / "out.csv")
    rows = [
        BrandRow("Zeta, Inc", "$9,999", ""),
        BrandRow("ACME (old)", "", NOTE_ERROR),
        BrandRow('Quote "Q"', "", ""),
        BrandRow("0042", "-", "manual check"),
    ]

    save_rows(csv_path, rows)

    assert load_rows(csv_path) == rows


def test_save_overwrites_previous_content(tmp_path: Path) -> None:
    csv_path = str(tmp_path / "out.csv")
    save_rows(csv_path, [BrandRow("A"), BrandRow("B"), BrandRow("C")])

    save_rows(csv_path, [BrandRow("A", "$1")])

    assert load_rows(csv_path) == [BrandRow("A", "$1")]


def test_row_state_is_derived_from_fields() -> None:
    assert BrandRow("A").state == RowState.UNPROCESSED
    assert BrandRow("A", revenue="$1").state == RowState.RESOLVED
    assert BrandRow("A", revenue="$1", note=NOTE_ERROR).state == RowState.RESOLVED
    assert BrandRow("A", note=NOTE_NO_REVENUE).state == RowState.UNRESOLVED
    assert BrandRow("A", note="checked by hand").state == RowState.UNRESOLVED
    assert BrandRow("A", note=NOTE_ERROR).state == RowState.FAILED


def test_rows_to_frame_adds_status_column() -> None:
    frame = rows_to_frame([BrandRow("A", "$1"), BrandRow("B", note=NOTE_ERROR)])

    assert list(frame.columns) == ["Brand", "Revenue", "Note", "Status"]
    assert frame["Status"].tolist() == ["resolved", "failed"]


def test_rows_to_frame_handles_empty_rows() -> None:
    frame = rows_to_frame([])

    assert frame.empty
    assert list(frame.columns) == ["Brand", "Revenue", "Note", "Status"]


def test_unquoted_comma_in_brand_keeps_every_row(tmp_path: Path, capsys) -> None:
    csv_path = _write(tmp_path / "brands.csv", "Brand,Revenue,Note\nAcme,$5,\nFoo, Inc,,\nNike,,\n")

    rows, error = read_rows(csv_path)

    assert error is None
    assert rows == [BrandRow("Acme", "$5"), BrandRow("Foo, Inc"), BrandRow("Nike")]
    assert "expected 3" in capsys.readouterr().out


def test_read_rows_reports_error_for_unparseable_file(tmp_path: Path) -> None:
    csv_path = _write(tmp_path / "brands.csv", "")

    rows, error = read_rows(csv_path)

    assert rows == []
    assert error


def test_read_rows_missing_file_is_not_an_error(tmp_path: Path) -> None:
    assert read_rows(str(tmp_path / "nope.csv")) == ([], None)


def test_save_leaves_no_temp_file(tmp_path: Path) -> None:
    csv_path = str(tmp_path / "out.csv")

    save_rows(csv_path, [BrandRow("A", "$1")])
    save_rows(csv_path, [BrandRow("A", "$2")])

    assert sorted(p.name for p in tmp_path.iterdir()) == ["out.csv"]
    assert load_rows(csv_path) == [BrandRow("A", "$2")]


def test_failed_save_keeps_previous_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    csv_path = str(tmp_path / "out.csv")
    save_rows(csv_path, [BrandRow("A", "$1"), BrandRow("B")])

    def broken_to_csv(self, path, **_: object) -> None:
        Path(path).write_text("Brand,Rev", encoding="utf-8")
        raise OSError("disk full")

    monkeypatch.setattr(pd.DataFrame, "to_csv", broken_to_csv)

    with pytest.raises(OSError):
        save_rows(csv_path, [BrandRow("A", "$9")])

    monkeypatch.undo()
    assert load_rows(csv_path) == [BrandRow("A", "$1"), BrandRow("B")]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["out.csv"]
