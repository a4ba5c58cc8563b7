"""Non-deterministic parser combinators over a page token stream.

A parser is a plain function ``Cursor -> list[Outcome]``. Each outcome is
either a ``Result`` (a value plus the cursor after it) or an ``Error``
(what was expected and the token found instead). A parser may return any
number of outcomes; ``alt`` is the only combinator that can turn one input
into several results, and grammar boundaries decide what to do with them
(see ``resolve.py``).

Failures are ordinary return values. A failed branch contributes its
``Error`` entries and nothing else, so sibling branches are unaffected.

``many`` is leftmost-greedy: it follows the first ``Result`` of each
repetition and stops at the first position where the repeated parser has
no ``Result``. It never enumerates shorter prefixes.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from .normalize import normalize_text
from .tokens import Cursor, ImageToken, StringToken, Token, describe_token


@dataclass(frozen=True)
class Result:
    value: Any
    remainder: Cursor


@dataclass(frozen=True)
class Error:
    message: str
    found: Optional[Token] = None

    @property
    def found_text(self) -> str:
        return describe_token(self.found)

    def as_dict(self) -> dict:
        return {"message": self.message, "found": self.found_text}


Outcome = Union[Result, Error]
Parser = Callable[[Cursor], list]


def is_result(outcome: Outcome) -> bool:
    return isinstance(outcome, Result)


def is_error(outcome: Outcome) -> bool:
    return isinstance(outcome, Error)


def results(outcomes: Iterable[Outcome]) -> list[Result]:
    return [o for o in outcomes if isinstance(o, Result)]


def errors(outcomes: Iterable[Outcome]) -> list[Error]:
    return [o for o in outcomes if isinstance(o, Error)]


def first_result(outcomes: Iterable[Outcome]) -> Optional[Result]:
    for outcome in outcomes:
        if isinstance(outcome, Result):
            return outcome
    return None


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def success(value: Any) -> Parser:
    def parse(cursor: Cursor) -> list:
        return [Result(value, cursor)]
    return parse


def fail(message: str) -> Parser:
    def parse(cursor: Cursor) -> list:
        return [Error(message, cursor.peek())]
    return parse


def fmap(parser: Parser, fn: Callable[[Any], Any]) -> Parser:
    """Apply ``fn`` to every result value. Errors pass through."""
    def parse(cursor: Cursor) -> list:
        return [
            Result(fn(o.value), o.remainder) if isinstance(o, Result) else o
            for o in parser(cursor)
        ]
    return parse


def seq(*parsers: Parser) -> Parser:
    """Run parsers one after another along every branch.

    The result value is a tuple of each step's value. Every error raised by
    any step on any branch is kept; a branch that stops early contributes
    only its error.
    """
    def parse(cursor: Cursor) -> list:
        branches = [((), cursor)]
        failures = []
        for parser in parsers:
            advanced = []
            for values, rest in branches:
                for outcome in parser(rest):
                    if isinstance(outcome, Result):
                        advanced.append((values + (outcome.value,), outcome.remainder))
                    else:
                        failures.append(outcome)
            branches = advanced
            if not branches:
                break
        return [Result(values, rest) for values, rest in branches] + failures
    return parse


def then(first: Parser, second: Parser) -> Parser:
    return seq(first, second)


def alt(*parsers: Parser) -> Parser:
    """Union of every alternative's outcomes at the same position."""
    def parse(cursor: Cursor) -> list:
        outcomes = []
        for parser in parsers:
            outcomes.extend(parser(cursor))
        return outcomes
    return parse


def optional(parser: Parser, default: Any = None) -> Parser:
    """Either ``parser`` or nothing; both readings are kept."""
    return alt(parser, success(default))


def keep_left(left: Parser, right: Parser) -> Parser:
    return fmap(seq(left, right), lambda v: v[0])


def keep_right(left: Parser, right: Parser) -> Parser:
    return fmap(seq(left, right), lambda v: v[1])


def many(parser: Parser) -> Parser:
    """Leftmost-greedy repetition; always yields exactly one result."""
    def parse(cursor: Cursor) -> list:
        values = []
        while True:
            found = first_result(parser(cursor))
            if found is None:
                break
            values.append(found.value)
            if found.remainder.offset == cursor.offset:
                # Zero-width match: repeating it would never terminate.
                cursor = found.remainder
                break
            cursor = found.remainder
        return [Result(values, cursor)]
    return parse


def many1(parser: Parser) -> Parser:
    """Like ``many`` but at least one repetition is required."""
    repeated = many(parser)

    def parse(cursor: Cursor) -> list:
        outcome = repeated(cursor)[0]
        if outcome.value:
            return [outcome]
        return errors(parser(cursor)) or [Error("at least one repetition", cursor.peek())]
    return parse


def when_next(texts: Sequence[str], parser: Parser, default: Any = None) -> Parser:
    """Commit to ``parser`` only if the next token's text is in ``texts``.

    Otherwise succeed with ``default`` without consuming anything.
    """
    choices = frozenset(texts)

    def parse(cursor: Cursor) -> list:
        token = cursor.peek()
        if isinstance(token, StringToken) and token.text in choices:
            return parser(cursor)
        return [Result(default, cursor)]
    return parse


def scan_to(parser: Parser, description: str) -> Parser:
    """Skip tokens until ``parser`` matches; yield its first result."""
    def parse(cursor: Cursor) -> list:
        probe = cursor
        while True:
            found = first_result(parser(probe))
            if found is not None:
                return [found]
            if probe.at_end():
                return [Error(description, cursor.peek())]
            probe = probe.advance()
    return parse


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def _compile_fonts(fonts: Iterable[Union[str, re.Pattern]]) -> list[re.Pattern]:
    return [f if isinstance(f, re.Pattern) else re.compile(f) for f in fonts]


def font_matches(token: Token, fonts: Sequence[re.Pattern]) -> bool:
    return isinstance(token, StringToken) and any(f.search(token.font) for f in fonts)


def satisfy(predicate: Callable[[Token], bool], description: str) -> Parser:
    """Consume one token if ``predicate`` accepts it; yield the token."""
    def parse(cursor: Cursor) -> list:
        token = cursor.peek()
        if token is not None and predicate(token):
            return [Result(token, cursor.advance())]
        return [Error(description, token)]
    return parse


def text(literal: str, normalized: bool = False) -> Parser:
    """Match a string token whose text equals ``literal``.

    With ``normalized`` the comparison ignores case, accents and
    surrounding whitespace.
    """
    if normalized:
        wanted = normalize_text(literal)
        check = lambda t: normalize_text(t.text) == wanted
    else:
        check = lambda t: t.text == literal
    return fmap(
        satisfy(lambda t: isinstance(t, StringToken) and check(t), f'"{literal}"'),
        lambda t: t.text,
    )


def localized(*variants: str, normalized: bool = False) -> Parser:
    """Any one of several spellings of the same literal (EN, PT, legacy...)."""
    return alt(*(text(v, normalized=normalized) for v in variants))


def matches(pattern: Union[str, re.Pattern], description: str) -> Parser:
    """Match a string token whose text satisfies ``pattern`` (re.search)."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    return fmap(
        satisfy(lambda t: isinstance(t, StringToken) and regex.search(t.text) is not None,
                description),
        lambda t: t.text,
    )


def string_with_font(fonts: Iterable[Union[str, re.Pattern]], description: str = "text") -> Parser:
    compiled = _compile_fonts(fonts)
    return fmap(
        satisfy(lambda t: font_matches(t, compiled), f"{description} in font {[f.pattern for f in compiled]}"),
        lambda t: t.text,
    )


def text_with_font(literal: str, fonts: Iterable[Union[str, re.Pattern]]) -> Parser:
    compiled = _compile_fonts(fonts)
    return fmap(
        satisfy(lambda t: font_matches(t, compiled) and t.text == literal,
                f'"{literal}" in font {[f.pattern for f in compiled]}'),
        lambda t: t.text,
    )


string = fmap(satisfy(lambda t: isinstance(t, StringToken), "text"), lambda t: t.text)

image = satisfy(lambda t: isinstance(t, ImageToken), "image")


def eof(cursor: Cursor) -> list:
    if cursor.at_end():
        return [Result(None, cursor)]
    return [Error("end of page", cursor.peek())]
