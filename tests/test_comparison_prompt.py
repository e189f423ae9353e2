from __future__ import annotations

from comparison_prompt import build_prompt, build_prompt_from_parts, format_table, get_csv_comparison_prompt
from csv_normalizer import normalize


def test_format_table_joins_with_comma_space() -> None:
    table = normalize("a,b\n1,2\n3")
    assert format_table(table) == "a, b\n1, 2\n3"


def test_prompt_embeds_both_tables() -> None:
    first = normalize("Account,Value\nCash,100\nLoan,5")
    second = normalize("Item,Amount\nCash,100")
    prompt = build_prompt(first, second)

    assert prompt.startswith("I want to compare these two spreadsheets side-by-side.")
    assert "  First spreadsheet:\n  Account, Value\nCash, 100\nLoan, 5\n\n" in prompt
    assert prompt.endswith("  Second spreadsheet:\n  Item, Amount\nCash, 100")
    assert prompt.index("First spreadsheet:") < prompt.index("Second spreadsheet:")


def test_prompt_keeps_fixed_instructions() -> None:
    template = get_csv_comparison_prompt()
    for line in [
        "First collapse each spreadsheet into one column.",
        "Make an index from the row and cell data from First spreadsheet.",
        "Use the index to match rows and cells in Second spreadsheet.",
        "If there is no matching pair, use an empty cell.",
        "Double-check each row carefully.",
        "Show the result as a well-formed CSV with exactly two columns.",
        "Do not provide any commentary.",
    ]:
        assert f"\n  {line}\n" in template


def test_four_argument_form_matches_table_form() -> None:
    first = normalize("a\n1")
    second = normalize("b\n{2}")
    assert build_prompt_from_parts(first.headers, first.rows, second.headers, second.rows) == build_prompt(first, second)
    assert "{2}" in build_prompt(first, second)
