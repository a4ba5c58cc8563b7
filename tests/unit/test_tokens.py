"""Tests for the page token stream and cursor."""

import pytest

from fabula_import.ingest.tokens import (
    Cursor, ImageToken, StringToken, advance, at_end, describe_token, peek,
)


def _tokens():
    return (StringToken("Bronze Sword", "PTSans-Narrow"), StringToken("100 z", "PTSans-Narrow"))


class TestCursor:
    def test_peek_returns_token_at_offset(self):
        cursor = Cursor.start(_tokens())
        assert peek(cursor).text == "Bronze Sword"

    def test_advance_moves_exactly_one(self):
        cursor = Cursor.start(_tokens())
        moved = advance(cursor)
        assert moved.offset == 1
        assert moved.peek().text == "100 z"

    def test_advance_does_not_mutate(self):
        cursor = Cursor.start(_tokens())
        cursor.advance()
        assert cursor.offset == 0

    def test_advance_shares_token_tuple(self):
        cursor = Cursor.start(_tokens())
        assert cursor.advance().tokens is cursor.tokens

    def test_at_end(self):
        cursor = Cursor.start(_tokens())
        assert not at_end(cursor)
        end = cursor.advance().advance()
        assert at_end(end)
        assert end.peek() is None

    def test_advance_past_end_raises(self):
        end = Cursor.start(())
        with pytest.raises(IndexError):
            end.advance()

    def test_offset_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            Cursor(_tokens(), 3)

    def test_equality_uses_shared_tuple_and_offset(self):
        cursor = Cursor.start(_tokens())
        assert cursor.advance() == cursor.advance()
        assert cursor != cursor.advance()
        # Same contents, different page
        assert Cursor.start(_tokens()) != cursor


class TestDescribeToken:
    def test_string(self):
        assert describe_token(StringToken("DEF", "Antonio-Bold")) == '<Text str="DEF" font="Antonio-Bold">'

    def test_image(self):
        token = ImageToken(payload=b"x", position=(10.0, 20.4, 30.0, 40.6))
        assert describe_token(token) == "<Image at (10, 20, 30, 41)>"

    def test_end_of_page(self):
        assert describe_token(None) == "<end of page>"

    def test_image_repr_hides_payload(self):
        token = ImageToken(payload=b"\x89PNG" * 100)
        assert "PNG" not in repr(token)
