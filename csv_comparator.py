"""
CSV comparison session for the Financials Comparison Tool.
Holds the two uploaded tables and the model's aligned result, and drives one
LLM comparison request at a time.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum

import pandas as pd

from comparison_prompt import build_prompt
from csv_normalizer import Table, normalize, strip_fence
from llm_client import ProviderSelection, ServiceRegistry, default_registry

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    MISSING_CREDENTIAL = "missing_credential"
    MISSING_INPUT = "missing_input"
    COMPLETION_ERROR = "completion_error"
    EMPTY_RESPONSE = "empty_response"


@dataclass(frozen=True)
class ComparisonError:
    """Tagged error with the message shown to the user."""

    kind: ErrorKind
    message: str

    @property
    def visible(self) -> bool:
        # Empty model replies are ignored without a message
        return self.kind is not ErrorKind.EMPTY_RESPONSE


@dataclass(frozen=True)
class ComparisonState:
    """Snapshot of one comparison session. Replaced wholesale on every transition."""

    first: Table = None
    second: Table = None
    processing: bool = False
    error: ComparisonError = None
    raw_result: str = None
    result: Table = None

    @property
    def error_message(self) -> str:
        if self.error is None or not self.error.visible:
            return ""
        return self.error.message

    @property
    def has_inputs(self) -> bool:
        """Both tables loaded with at least one data row each."""
        return bool(self.first and self.first.rows and self.second and self.second.rows)


class CSVComparator:
    """Drives the upload → prompt → completion → result flow through explicit transitions."""

    def __init__(self, registry: ServiceRegistry = None):
        self.registry = registry if registry is not None else default_registry()
        self.state = ComparisonState()

    # Transitions

    def load_file(self, slot: int, raw_text: str) -> ComparisonState:
        """Normalize uploaded CSV text into slot 1 or 2."""
        if slot not in (1, 2):
            raise ValueError(f"slot must be 1 or 2, got {slot}")
        table = normalize(raw_text)
        logger.info(
            "[COMPARE] Loaded file %d: %d columns, %d rows", slot, len(table.headers), len(table.rows)
        )
        field = "first" if slot == 1 else "second"
        self.state = replace(self.state, **{field: table})
        return self.state

    def start_processing(self) -> ComparisonState:
        self.state = replace(self.state, processing=True, error=None, raw_result=None, result=None)
        return self.state

    def receive_result(self, text: str) -> ComparisonState:
        """
        Store the model's reply.

        An empty reply leaves the result cleared and records a silent EMPTY_RESPONSE.
        """
        if not text:
            logger.info("[COMPARE] Model returned no text; result left empty")
            self.state = replace(
                self.state,
                processing=False,
                error=ComparisonError(ErrorKind.EMPTY_RESPONSE, "The model returned no text"),
            )
            return self.state

        stripped = strip_fence(text)
        result = normalize(stripped)
        logger.info("[COMPARE] Result: %d columns, %d rows", len(result.headers), len(result.rows))
        self.state = replace(self.state, processing=False, raw_result=stripped, result=result)
        return self.state

    def receive_error(self, error: ComparisonError) -> ComparisonState:
        logger.info("[COMPARE] %s: %s", error.kind.value, error.message)
        self.state = replace(self.state, processing=False, error=error)
        return self.state

    # Actions

    def process(self, selection: ProviderSelection, credentials: str) -> ComparisonState:
        """
        Send both tables to the selected model and store its aligned CSV.

        Args:
            selection: Provider and model to use
            credentials: API key for the provider

        Returns:
            The new state. Validation failures issue no request. While a request is
            in flight further calls return the current state unchanged.
        """
        if self.state.processing:
            return self.state

        if not credentials:
            return self.receive_error(ComparisonError(
                ErrorKind.MISSING_CREDENTIAL,
                f"Please enter your {selection.provider.upper()} API key first",
            ))

        if not self.state.has_inputs:
            return self.receive_error(ComparisonError(
                ErrorKind.MISSING_INPUT, "Please upload both CSV files first"
            ))

        self.start_processing()
        try:
            prompt = build_prompt(self.state.first, self.state.second)
            result = self.registry.complete(selection, prompt, credentials)
        except Exception as e:
            logger.exception("[COMPARE] Comparison request failed")
            return self.receive_error(ComparisonError(
                ErrorKind.COMPLETION_ERROR, f"Comparison failed: {e}"
            ))

        if not result.ok:
            return self.receive_error(ComparisonError(ErrorKind.COMPLETION_ERROR, result.error.message))
        return self.receive_result(result.text)

    # Display helpers

    def side_by_side(self) -> tuple[pd.DataFrame, pd.DataFrame]:
        """
        Both uploaded tables padded to the same number of rows.

        Returns:
            Tuple of (first_df, second_df); each keeps its own header width and
            missing cells are empty strings.
        """
        first = self.state.first or Table()
        second = self.state.second or Table()
        max_rows = max(len(first.rows), len(second.rows))
        return _pad_to_rows(first, max_rows), _pad_to_rows(second, max_rows)


def _pad_to_rows(table: Table, max_rows: int) -> pd.DataFrame:
    width = len(table.headers)
    rows = []
    for i in range(max_rows):
        row = list(table.rows[i]) if i < len(table.rows) else []
        row = (row + [""] * width)[:width]
        rows.append(row)
    labels = Table(headers=table.headers).column_labels()
    return pd.DataFrame(rows, columns=labels, dtype=str)
