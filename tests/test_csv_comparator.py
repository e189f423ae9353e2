from __future__ import annotations

import httpx
import pytest

from csv_comparator import ComparisonError, CSVComparator, ErrorKind
from llm_client import CompletionError, CompletionService, GeminiService, ProviderSelection, ServiceRegistry

SELECTION = ProviderSelection("fake", "fake-model")


class FakeService(CompletionService):
    provider = "fake"

    def __init__(self, reply: str = "", fail_with: str = None):
        super().__init__()
        self.reply = reply
        self.fail_with = fail_with
        self.calls = []

    def _create_completion(self, prompt: str, model: str, credentials: str) -> str:
        self.calls.append((prompt, model, credentials))
        if self.fail_with:
            raise CompletionError(self.fail_with)
        return self.reply


def _comparator(service: FakeService) -> CSVComparator:
    comparator = CSVComparator(registry=ServiceRegistry([service]))
    comparator.load_file(1, "Account,Value\nCash,100\nLoan,5")
    comparator.load_file(2, "Item,Amount\nCash,100")
    return comparator


def test_missing_credential_issues_no_request() -> None:
    service = FakeService(reply="a,b")
    comparator = _comparator(service)

    state = comparator.process(ProviderSelection("fake", "fake-model"), "")

    assert state.error.kind is ErrorKind.MISSING_CREDENTIAL
    assert state.error_message == "Please enter your FAKE API key first"
    assert not state.processing
    assert service.calls == []


def test_missing_input_issues_no_request() -> None:
    service = FakeService(reply="a,b")
    comparator = CSVComparator(registry=ServiceRegistry([service]))
    comparator.load_file(1, "a,b\n1,2")

    state = comparator.process(SELECTION, "key")

    assert state.error.kind is ErrorKind.MISSING_INPUT
    assert state.error_message == "Please upload both CSV files first"
    assert service.calls == []


def test_header_only_file_counts_as_missing_input() -> None:
    service = FakeService(reply="a,b")
    comparator = CSVComparator(registry=ServiceRegistry([service]))
    comparator.load_file(1, "a,b\n1,2")
    comparator.load_file(2, "a,b")

    assert comparator.process(SELECTION, "key").error.kind is ErrorKind.MISSING_INPUT
    assert not comparator.state.processing


def test_process_sends_one_request_with_both_tables() -> None:
    service = FakeService(reply="```csv\nFirst,Second\nCash 100,Cash 100\nLoan 5,\n```")
    comparator = _comparator(service)

    state = comparator.process(SELECTION, "key")

    assert len(service.calls) == 1
    prompt, model, credentials = service.calls[0]
    assert "Account, Value\nCash, 100\nLoan, 5" in prompt
    assert "Item, Amount\nCash, 100" in prompt
    assert model == "fake-model"
    assert credentials == "key"

    assert state.error is None
    assert not state.processing
    assert state.raw_result == "First,Second\nCash 100,Cash 100\nLoan 5,\n"
    assert state.result.headers == ("First", "Second")
    assert state.result.rows == (("Cash 100", "Cash 100"), ("Loan 5", ""))


def test_completion_failure_becomes_visible_error() -> None:
    service = FakeService(fail_with="Fake API error: 401 Unauthorized")
    comparator = _comparator(service)

    state = comparator.process(SELECTION, "key")

    assert state.error.kind is ErrorKind.COMPLETION_ERROR
    assert state.error_message == "Fake API error: 401 Unauthorized"
    assert state.result is None
    assert not state.processing


def test_empty_reply_clears_prior_result_silently() -> None:
    service = FakeService(reply="a,b\n1,2")
    comparator = _comparator(service)
    assert comparator.process(SELECTION, "key").result is not None

    service.reply = ""
    state = comparator.process(SELECTION, "key")

    assert state.result is None
    assert state.raw_result is None
    assert state.error.kind is ErrorKind.EMPTY_RESPONSE
    assert state.error_message == ""
    assert len(service.calls) == 2


def test_retry_after_error_clears_error() -> None:
    service = FakeService(fail_with="boom")
    comparator = _comparator(service)
    comparator.process(SELECTION, "key")

    service.fail_with = None
    service.reply = "a,b"
    state = comparator.process(SELECTION, "key")

    assert state.error is None
    assert state.result.headers == ("a", "b")


def test_process_is_gated_while_processing() -> None:
    service = FakeService(reply="a,b")
    comparator = _comparator(service)
    comparator.start_processing()

    state = comparator.process(SELECTION, "key")

    assert state.processing
    assert service.calls == []


def test_files_can_be_loaded_while_processing() -> None:
    comparator = _comparator(FakeService())
    comparator.start_processing()

    state = comparator.load_file(2, "x\n1")

    assert state.processing
    assert state.second.headers == ("x",)


def test_transitions_replace_state_snapshots() -> None:
    comparator = _comparator(FakeService())
    before = comparator.state

    comparator.start_processing()

    assert comparator.state is not before
    assert not before.processing
    assert comparator.state.first is before.first


def test_receive_error_stops_processing() -> None:
    comparator = _comparator(FakeService())
    comparator.start_processing()

    state = comparator.receive_error(ComparisonError(ErrorKind.COMPLETION_ERROR, "network down"))

    assert not state.processing
    assert state.error_message == "network down"


def test_load_file_rejects_unknown_slot() -> None:
    with pytest.raises(ValueError):
        CSVComparator(registry=ServiceRegistry()).load_file(3, "a")


def test_side_by_side_pads_to_longest_table() -> None:
    comparator = CSVComparator(registry=ServiceRegistry())
    comparator.load_file(1, "a,b\n1,2\n3\n5,6,7")
    comparator.load_file(2, "c\nx")

    first_df, second_df = comparator.side_by_side()

    assert first_df.values.tolist() == [["1", "2"], ["3", ""], ["5", "6"]]
    assert second_df.values.tolist() == [["x"], [""], [""]]
    assert list(second_df.columns) == ["c"]


def test_side_by_side_with_nothing_loaded() -> None:
    first_df, second_df = CSVComparator(registry=ServiceRegistry()).side_by_side()
    assert first_df.empty and second_df.empty


def test_unexpected_exception_still_ends_processing() -> None:
    class BrokenService(FakeService):
        def complete(self, prompt: str, model: str, credentials: str):
            raise RuntimeError("adapter exploded")

    comparator = _comparator(BrokenService())

    state = comparator.process(SELECTION, "key")

    assert not state.processing
    assert state.error.kind is ErrorKind.COMPLETION_ERROR
    assert "adapter exploded" in state.error_message


def test_malformed_gemini_reply_does_not_wedge_the_session() -> None:
    body = {"candidates": [{"content": {"parts": ["a,b"]}}]}
    http_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)))
    comparator = CSVComparator(registry=ServiceRegistry([
        GeminiService(http_client=http_client, base_url="https://gemini.test"),
    ]))
    comparator.load_file(1, "a,b\n1,2")
    comparator.load_file(2, "a,b\n1,2")

    state = comparator.process(ProviderSelection("gemini", "gemini-1.5-pro"), "g-key")

    assert not state.processing
    assert state.error.kind is ErrorKind.COMPLETION_ERROR
    assert state.error_message.startswith("Unexpected Google Gemini response")


def test_whitespace_reply_is_kept_as_a_result() -> None:
    comparator = _comparator(FakeService(reply="  \n"))

    state = comparator.process(SELECTION, "key")

    assert state.error is None
    assert state.raw_result == "  \n"
    assert state.result.rows == ()
