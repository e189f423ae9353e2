from __future__ import annotations

import io
import zipfile

from comparison_export import downloads, result_csv_bytes, side_by_side_workbook
from csv_normalizer import Table, normalize


def test_result_csv_is_reply_verbatim() -> None:
    raw = "First,Second\nCash 100,\n"
    assert result_csv_bytes(raw) == raw.encode("utf-8")


def test_workbook_contains_all_three_tables() -> None:
    first = normalize("Account,Value\nCash,100")
    second = normalize("Item,Amount\nCash,100\nLoan,5")
    result = normalize("First,Second\nCash 100,Cash 100")

    data = side_by_side_workbook(first, second, result)

    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        assert "xl/worksheets/sheet1.xml" in archive.namelist()
        workbook_xml = archive.read("xl/workbook.xml").decode("utf-8")
        strings = archive.read("xl/sharedStrings.xml").decode("utf-8")
    assert 'name="Comparison"' in workbook_xml
    for text in ["First spreadsheet", "Second spreadsheet", "Comparison", "Account", "Loan", "Cash 100"]:
        assert text in strings


def test_workbook_with_empty_tables() -> None:
    data = side_by_side_workbook(Table(), None, normalize("a"))
    assert data[:2] == b"PK"


def test_downloads_use_fixed_names() -> None:
    buttons = downloads(normalize("a\n1"), normalize("b\n2"), "a,b\n1,2", normalize("a,b\n1,2"))

    csv_button = buttons[0]
    assert csv_button["file_name"] == "processed-comparison.csv"
    assert csv_button["mime"] == "text/csv"
    assert csv_button["data"] == b"a,b\n1,2"
    assert buttons[1]["file_name"] == "processed-comparison.xlsx"
