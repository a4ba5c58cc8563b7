"""Tests for page-level outcome classification."""

from fabula_import.ingest.combinators import Error, Result, alt, matches, seq, text
from fabula_import.ingest.resolve import ParseStatus, classify, parse_page
from fabula_import.ingest.tokens import Cursor, StringToken


def _tokens(*texts):
    return [StringToken(t, "PTSans-Narrow") for t in texts]


class TestClassify:
    def test_single_complete_result_is_success(self):
        parsed = parse_page(seq(text("a"), text("b")), _tokens("a", "b"))
        assert parsed.status is ParseStatus.SUCCESS
        assert parsed.ok
        assert parsed.value == ("a", "b")
        assert parsed.count == 1

    def test_no_result_is_failure_with_errors(self):
        parsed = parse_page(seq(text("a"), text("b")), _tokens("a", "x"))
        assert parsed.status is ParseStatus.FAILURE
        assert parsed.count == 0
        assert [e.message for e in parsed.errors] == ['"b"']

    def test_two_complete_results_is_ambiguous(self):
        grammar = alt(text("a"), matches(r"^a$", "letter a"))
        parsed = parse_page(grammar, _tokens("a"))
        assert parsed.status is ParseStatus.AMBIGUOUS
        assert parsed.count == 2
        assert parsed.value is None

    def test_partial_result_does_not_count(self):
        parsed = parse_page(text("a"), _tokens("a", "trailing"))
        assert parsed.status is ParseStatus.FAILURE

    def test_partial_results_ignored_next_to_complete_one(self):
        cursor = Cursor.start(_tokens("a", "b"))
        outcomes = [
            Result("short", cursor.advance()),
            Result("full", cursor.advance().advance()),
            Error("noise", None),
        ]
        parsed = classify(outcomes)
        assert parsed.status is ParseStatus.SUCCESS
        assert parsed.value == "full"

    def test_span_to_end_disabled(self):
        cursor = Cursor.start(_tokens("a", "b"))
        parsed = classify([Result("short", cursor.advance())], span_to_end=False)
        assert parsed.ok
