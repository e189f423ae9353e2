"""
LLM prompt for side-by-side CSV comparison.
The wording is fixed: the external model's alignment is sensitive to phrasing.
"""
from csv_normalizer import Table

CSV_COMPARISON_PROMPT = """I want to compare these two spreadsheets side-by-side.
  First collapse each spreadsheet into one column.
  Make an index from the row and cell data from First spreadsheet.
  Use the index to match rows and cells in Second spreadsheet.
  If there is no matching pair, use an empty cell.
  Double-check each row carefully.
  Show the result as a well-formed CSV with exactly two columns.
  Do not provide any commentary.

  First spreadsheet:
  {csv1}

  Second spreadsheet:
  {csv2}"""


def get_csv_comparison_prompt() -> str:
    """Get the prompt template for CSV comparison."""
    return CSV_COMPARISON_PROMPT


def format_table_parts(headers, rows) -> str:
    """Serialize headers and rows as comma-space joined lines."""
    lines = [", ".join(headers)]
    lines.extend(", ".join(row) for row in rows)
    return "\n".join(lines)


def format_table(table: Table) -> str:
    """
    Format a Table for the comparison prompt.

    Args:
        table: Normalized table

    Returns:
        Header line followed by one line per row, cells joined with ", "
    """
    return format_table_parts(table.headers, table.rows)


def build_prompt_from_parts(headers1, rows1, headers2, rows2) -> str:
    return CSV_COMPARISON_PROMPT.format(
        csv1=format_table_parts(headers1, rows1),
        csv2=format_table_parts(headers2, rows2),
    )


def build_prompt(first: Table, second: Table) -> str:
    """Embed both tables in the comparison prompt."""
    return build_prompt_from_parts(first.headers, first.rows, second.headers, second.rows)
