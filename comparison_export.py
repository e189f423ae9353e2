"""
Downloads for the Financials Comparison Tool: the model's CSV as returned, and a
workbook with the two uploads and the result side by side.
"""
import io

import pandas as pd

from config import Config
from csv_normalizer import Table


def result_csv_bytes(raw_result: str) -> bytes:
    """The fence-stripped model reply, verbatim, as the CSV download."""
    return raw_result.encode("utf-8")


def _write_table(worksheet, start_col: int, title: str, table: Table, header_format, title_format) -> None:
    width = max(table.width, 1)
    if width > 1:
        worksheet.merge_range(0, start_col, 0, start_col + width - 1, title, title_format)
    else:
        worksheet.write(0, start_col, title, title_format)

    for col_idx, header in enumerate(table.headers):
        worksheet.write(1, start_col + col_idx, header, header_format)

    for row_idx, row in enumerate(table.padded_rows()):
        for col_idx, value in enumerate(row):
            worksheet.write_string(row_idx + 2, start_col + col_idx, value)


def side_by_side_workbook(first: Table, second: Table, result: Table) -> bytes:
    """
    Write three tables side-by-side in a single sheet: first, second, and the comparison.

    Each table gets a merged title cell in row 0, its headers in row 1 and its rows
    below. Two blank columns separate the tables.

    Returns:
        Bytes of the .xlsx file
    """
    tables = [
        ("First spreadsheet", first or Table()),
        ("Second spreadsheet", second or Table()),
        ("Comparison", result or Table()),
    ]

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        workbook = writer.book
        worksheet = workbook.add_worksheet("Comparison")

        title_format = workbook.add_format({
            'bg_color': '#90EE90',  # Light green
            'bold': True,
            'align': 'center',
            'valign': 'vcenter'
        })
        header_format = workbook.add_format({'bold': True, 'bg_color': '#F2F2F2'})

        start_col = 0
        for title, table in tables:
            _write_table(worksheet, start_col, title, table, header_format, title_format)
            start_col += max(table.width, 1) + 2  # +2 for spacing

    return output.getvalue()


def downloads(first: Table, second: Table, raw_result: str, result: Table) -> list[dict]:
    """Download button arguments for a finished comparison."""
    return [
        {
            "label": "⬇️ Download CSV",
            "data": result_csv_bytes(raw_result),
            "file_name": Config.OUTPUT_FILENAME,
            "mime": Config.OUTPUT_MIME_TYPE,
        },
        {
            "label": "⬇️ Download side-by-side workbook",
            "data": side_by_side_workbook(first, second, result),
            "file_name": Config.EXCEL_FILENAME,
            "mime": Config.EXCEL_MIME_TYPE,
        },
    ]
