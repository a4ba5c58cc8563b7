"""Tests for the parser combinator core."""

from fabula_import.ingest.combinators import (
    Error, Result, alt, eof, errors, fail, fmap, image, keep_left, keep_right,
    localized, many, many1, matches, optional, results, scan_to, seq, string,
    string_with_font, success, text, text_with_font, when_next,
)
from fabula_import.ingest.tokens import Cursor, ImageToken, StringToken


def _page(*texts, font="PTSans-Narrow"):
    return Cursor.start(StringToken(t, font) for t in texts)


class TestPrimitives:
    def test_text_matches_literal(self):
        [outcome] = text("COST")(_page("COST"))
        assert outcome.value == "COST"
        assert outcome.remainder.at_end()

    def test_text_failure_reports_found_token(self):
        [outcome] = text("COST")(_page("DEF"))
        assert isinstance(outcome, Error)
        assert outcome.message == '"COST"'
        assert outcome.found_text == '<Text str="DEF" font="PTSans-Narrow">'

    def test_text_at_end_of_page(self):
        [outcome] = text("COST")(_page())
        assert isinstance(outcome, Error)
        assert outcome.found is None
        assert outcome.as_dict() == {"message": '"COST"', "found": "<end of page>"}

    def test_normalized_text_ignores_case_and_accents(self):
        [outcome] = text("armas basicas", normalized=True)(_page("ARMAS BÁSICAS"))
        assert isinstance(outcome, Result)

    def test_localized_accepts_any_variant(self):
        parser = localized("COST", "CUSTO")
        assert results(parser(_page("CUSTO")))[0].value == "CUSTO"
        assert not results(parser(_page("PREÇO")))

    def test_matches_uses_search(self):
        assert results(matches(r"Order #\d+", "watermark")(_page("Jane Doe Order #42")))

    def test_string_with_font(self):
        parser = string_with_font([r"Antonio-Bold$"], "heading")
        assert results(parser(_page("BASIC WEAPONS", font="XYZ+Antonio-Bold")))
        assert not results(parser(_page("BASIC WEAPONS")))

    def test_text_with_font_checks_both(self):
        parser = text_with_font("w", [r"Wingdings-Regular$"])
        assert results(parser(_page("w", font="Wingdings-Regular")))
        assert not results(parser(_page("w")))
        assert not results(parser(_page("x", font="Wingdings-Regular")))

    def test_image(self):
        cursor = Cursor.start([ImageToken(b"")])
        assert results(image(cursor))
        assert not results(string(cursor))

    def test_eof(self):
        assert results(eof(_page()))
        assert errors(eof(_page("extra")))


class TestComposition:
    def test_success_consumes_nothing(self):
        cursor = _page("a")
        [outcome] = success(7)(cursor)
        assert outcome == Result(7, cursor)

    def test_fail(self):
        [outcome] = fail("nope")(_page("a"))
        assert outcome.message == "nope"

    def test_fmap_transforms_values_only(self):
        parser = fmap(text("3"), int)
        assert results(parser(_page("3")))[0].value == 3
        assert errors(parser(_page("x")))

    def test_seq_collects_values(self):
        [outcome] = seq(text("a"), text("b"))(_page("a", "b"))
        assert outcome.value == ("a", "b")
        assert outcome.remainder.at_end()

    def test_seq_stops_branch_at_first_error(self):
        outcomes = seq(text("a"), text("b"), text("c"))(_page("a", "x", "c"))
        assert not results(outcomes)
        assert [e.message for e in errors(outcomes)] == ['"b"']

    def test_seq_keeps_errors_from_dead_branches(self):
        # Branch "a" dies at the second step; branch "ab" survives.
        parser = seq(alt(text("a"), fmap(seq(text("a"), text("b")), "".join)), text("c"))
        outcomes = parser(_page("a", "b", "c"))
        assert [r.value for r in results(outcomes)] == [("ab", "c")]
        assert [e.message for e in errors(outcomes)] == ['"c"']

    def test_keep_left_and_right(self):
        cursor = _page("a", "b")
        assert results(keep_left(text("a"), text("b"))(cursor))[0].value == "a"
        assert results(keep_right(text("a"), text("b"))(cursor))[0].value == "b"


class TestAlt:
    def test_exactly_one_branch_accepts(self):
        outcomes = alt(text("a"), text("b"))(_page("b"))
        assert [r.value for r in results(outcomes)] == ["b"]
        assert len(errors(outcomes)) == 1

    def test_neither_branch_accepts(self):
        outcomes = alt(text("a"), text("b"))(_page("c"))
        assert not results(outcomes)
        assert len(errors(outcomes)) == 2

    def test_both_branches_accept(self):
        parser = alt(text("a"), matches(r"^a$", "letter a"))
        assert len(results(parser(_page("a")))) == 2

    def test_branches_start_from_same_position(self):
        cursor = _page("a")
        outcomes = results(alt(text("a"), success(None))(cursor))
        assert [o.remainder.offset for o in outcomes] == [1, 0]

    def test_optional_keeps_both_readings(self):
        outcomes = results(optional(text("★"), "plain")(_page("★")))
        assert [o.value for o in outcomes] == ["★", "plain"]


class TestRepetition:
    def test_many_zero_repetitions_succeeds(self):
        [outcome] = many(text("a"))(_page("b"))
        assert outcome.value == []
        assert outcome.remainder.offset == 0

    def test_many_is_greedy(self):
        [outcome] = many(text("a"))(_page("a", "a", "a", "b"))
        assert outcome.value == ["a", "a", "a"]
        assert outcome.remainder.offset == 3

    def test_many_stops_on_zero_width_match(self):
        [outcome] = many(success(1))(_page("a"))
        assert outcome.value == [1]
        assert outcome.remainder.offset == 0

    def test_many1_zero_repetitions_fails(self):
        outcomes = many1(text("a"))(_page("b"))
        assert not results(outcomes)
        assert errors(outcomes)[0].message == '"a"'

    def test_many1_consumes_exactly_k(self):
        for k in (1, 2, 5):
            cursor = _page(*(["a"] * k + ["b"]))
            [outcome] = results(many1(text("a"))(cursor))
            assert len(outcome.value) == k
            assert outcome.remainder.offset == k

    def test_many1_at_end_of_page(self):
        outcomes = many1(text("a"))(_page())
        assert not results(outcomes)


class TestLookahead:
    def test_when_next_commits_on_keyword(self):
        parser = when_next(["SPELLS"], keep_right(text("SPELLS"), text("Fireball")), ())
        [outcome] = results(parser(_page("SPELLS", "Fireball")))
        assert outcome.value == "Fireball"

    def test_when_next_commits_even_if_section_fails(self):
        parser = when_next(["SPELLS"], keep_right(text("SPELLS"), text("Fireball")), ())
        outcomes = parser(_page("SPELLS", "Ice"))
        assert not results(outcomes)

    def test_when_next_defaults_without_consuming(self):
        parser = when_next(["SPELLS"], text("SPELLS"), ())
        [outcome] = parser(_page("OTHER ACTIONS"))
        assert outcome.value == ()
        assert outcome.remainder.offset == 0

    def test_scan_to_skips_tokens(self):
        [outcome] = scan_to(seq(text("ITEM"), text("COST")), "header")(_page("art", "ITEM", "COST", "x"))
        assert outcome.remainder.offset == 3

    def test_scan_to_not_found(self):
        [outcome] = scan_to(text("ITEM"), "item header")(_page("a", "b"))
        assert isinstance(outcome, Error)
        assert outcome.message == "item header"
