"""
CSV normalization for the Financials Comparison Tool.
Parses uploaded CSV text and model replies into Table values.
"""
import re
from dataclasses import dataclass

import pandas as pd


# Opening fence, optionally tagged (```csv); the tag must be followed by whitespace or the end.
_OPENING_FENCE = re.compile(r"^\s*```(?:[\w+-]+(?=\s|$))?\s*")
_CLOSING_FENCE = re.compile(r"[ \t]*```\s*$")


@dataclass(frozen=True)
class Table:
    """Normalized headers and rows extracted from CSV text. Rows may be ragged."""

    headers: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()

    @property
    def width(self) -> int:
        """Widest of the header row and the data rows."""
        return max([len(self.headers)] + [len(row) for row in self.rows])

    @property
    def is_empty(self) -> bool:
        return not self.headers and not self.rows

    def padded_rows(self, width: int = None) -> list[list[str]]:
        """Rows padded with empty strings to `width` (defaults to the table width)."""
        width = self.width if width is None else width
        return [list(row) + [""] * (width - len(row)) for row in self.rows]

    def column_labels(self) -> list[str]:
        """
        Header labels made unique and non-blank for display.

        Blank headers become "Column N"; repeated headers get a " (2)", " (3)" suffix.
        """
        labels = []
        seen = {}
        headers = list(self.headers) + [""] * (self.width - len(self.headers))
        for idx, header in enumerate(headers):
            label = header or f"Column {idx + 1}"
            count = seen.get(label, 0) + 1
            seen[label] = count
            labels.append(label if count == 1 else f"{label} ({count})")
        return labels

    def to_dataframe(self) -> pd.DataFrame:
        """All-string DataFrame with ragged rows padded to the table width."""
        return pd.DataFrame(self.padded_rows(), columns=self.column_labels(), dtype=str)


def _split_cells(line: str) -> list[str]:
    cells = []
    for cell in line.split(","):
        cell = cell.strip()
        # One quote at each end at most; embedded commas and escaped quotes are not handled.
        if cell.startswith('"'):
            cell = cell[1:]
        if cell.endswith('"'):
            cell = cell[:-1]
        cells.append(cell)
    return cells


def _first_non_blank_column(grid: list[list[str]]) -> int:
    """Index of the first column, up to the header width, with a non-empty cell in any row."""
    header_width = len(grid[0])
    for idx in range(header_width):
        if any(idx < len(row) and row[idx] != "" for row in grid):
            return idx
    return header_width


def remove_leading_blank_columns(grid: list[list[str]]) -> list[list[str]]:
    """
    Drop the leading run of columns that are blank in every row.

    Interior and trailing blank columns are kept. The first row is the header row
    and bounds how far the run can extend.
    """
    if not grid:
        return grid
    start = _first_non_blank_column(grid)
    return [row[start:] for row in grid]


def normalize(raw: str) -> Table:
    """
    Parse CSV text into a Table.

    Args:
        raw: Full CSV text, newline-delimited rows, comma-delimited cells

    Returns:
        Table with the first line as headers, fully blank rows dropped and the
        leading run of blank columns removed. Malformed input never raises.
    """
    lines = [_split_cells(line) for line in raw.split("\n")]
    headers = lines[0]
    rows = [line for line in lines[1:] if any(cell for cell in line)]

    cleaned = remove_leading_blank_columns([headers] + rows)
    return Table(
        headers=tuple(cleaned[0]),
        rows=tuple(tuple(row) for row in cleaned[1:]),
    )


def strip_fence(text: str) -> str:
    """Remove a leading ```csv (or bare ```) fence and a trailing ``` fence from a model reply."""
    text = _OPENING_FENCE.sub("", text, count=1)
    return _CLOSING_FENCE.sub("", text, count=1)


def normalize_response(text: str) -> Table:
    """Strip the code fence from a model reply and parse the remainder as CSV."""
    return normalize(strip_fence(text))


def decode_csv_bytes(file_bytes: bytes) -> str:
    """Decode an uploaded CSV file, trying common encodings in turn."""
    for encoding in ["utf-8-sig", "cp1252"]:
        try:
            return file_bytes.decode(encoding)
        except UnicodeDecodeError:
            continue
    return file_bytes.decode("latin-1")
