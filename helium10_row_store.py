"""
CSV row store for the Helium 10 brand revenue filler.

The brands spreadsheet is a plain CSV with a header row:

    Brand,Revenue,Note
    Acme Corp,"$12,345.67",
    Foo Brand,,No revenue found

Rows are loaded into an ordered list of BrandRow records and the whole list is
written back after every processed brand, so the file always holds the latest
progress and a run can be resumed after any interruption.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import pandas as pd

CSV_HEADERS = ["Brand", "Revenue", "Note"]

NOTE_NO_REVENUE = "No revenue found"
NOTE_ERROR = "Error retrieving revenue"


class RowState(Enum):
    """Processing state of a row, derived from its Revenue and Note fields"""
    UNPROCESSED = "unprocessed"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    FAILED = "failed"


@dataclass
class BrandRow:
    """One brand line of the spreadsheet"""
    brand: str
    revenue: str = ""
    note: str = ""

    @property
    def state(self) -> RowState:
        if self.revenue:
            return RowState.RESOLVED
        if self.note == NOTE_ERROR:
            return RowState.FAILED
        if self.note:
            return RowState.UNRESOLVED
        return RowState.UNPROCESSED


def _cell(value) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value)


def _merge_extra_fields(fields: List[str], width: int) -> List[str]:
    """Fold surplus fields of an over-long line back into the first column"""
    extra = len(fields) - width
    if extra <= 0:
        return fields
    merged = [",".join(fields[:extra + 1])] + fields[extra + 1:]
    print(f"⚠️  Line has {len(fields)} fields, expected {width}: kept brand as '{merged[0]}'")
    return merged


def read_rows(file_path: str) -> Tuple[List[BrandRow], Optional[str]]:
    """
    Load brand rows from a CSV file and report any read error.

    Returns (rows, error). error is None when the file was read cleanly or
    does not exist; otherwise it holds the reason and rows holds whatever was
    recovered (usually none).
    """
    rows = []
    try:
        if not os.path.exists(file_path):
            print(f"❌ File not found: {file_path}")
            return rows, None

        width = len(pd.read_csv(file_path, nrows=0).columns)

        # Read every cell as text so revenue strings and numeric-looking brands survive untouched.
        # An unquoted comma in a brand gives a line with extra fields; it is repaired, not dropped.
        df = pd.read_csv(
            file_path,
            dtype=str,
            keep_default_na=False,
            engine="python",
            on_bad_lines=lambda fields: _merge_extra_fields(fields, width),
        )

        for _, record in df.iterrows():
            rows.append(BrandRow(
                brand=_cell(record.get("Brand", "")),
                revenue=_cell(record.get("Revenue", "")),
                note=_cell(record.get("Note", "")),
            ))
        print(f"📄 Loaded {len(rows)} brands from {file_path}")
    except Exception as e:
        print(f"❌ Error reading CSV file: {e}")
        return rows, str(e) or e.__class__.__name__
    return rows, None


def load_rows(file_path: str) -> List[BrandRow]:
    """
    Load brand rows from a CSV file.

    A missing file or a file that cannot be parsed is reported and yields
    whatever rows were recovered (usually none) instead of raising.
    """
    rows, _ = read_rows(file_path)
    return rows


def save_rows(file_path: str, rows: List[BrandRow]):
    """Overwrite the CSV file with all rows, filling missing fields with empty strings"""
    full_rows = [
        {
            "Brand": row.brand or "",
            "Revenue": row.revenue or "",
            "Note": row.note or "",
        }
        for row in rows
    ]
    df = pd.DataFrame(full_rows, columns=CSV_HEADERS)

    # Write next to the target and swap it in so readers never see a half-written file
    temp_path = f"{file_path}.tmp"
    try:
        df.to_csv(temp_path, index=False)
        os.replace(temp_path, file_path)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)


def rows_to_frame(rows: List[BrandRow]) -> pd.DataFrame:
    """Tabular view of the rows with their derived status, for progress tables"""
    return pd.DataFrame(
        [
            {
                "Brand": row.brand,
                "Revenue": row.revenue,
                "Note": row.note,
                "Status": row.state.value,
            }
            for row in rows
        ],
        columns=CSV_HEADERS + ["Status"],
    )
