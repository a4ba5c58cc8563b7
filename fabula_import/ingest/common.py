"""Grammar pieces shared by the page grammars.

Field parsers (cost, accuracy, damage...), the description scanner and the
page footers. Page-specific grammars live in the ``*_page`` modules.
"""

import re
from typing import Callable, Optional, Sequence

from .combinators import (
    Error, Parser, Result, alt, eof, fmap, font_matches, image, localized,
    matches, optional, seq, string, success, text, text_with_font,
)
from .models import Accuracy
from .normalize import (
    convert_cost, dash_or_number, normalize_damage_type, normalize_distance, normalize_handed,
    normalize_stat, prettify_strings,
)
from .tokens import Cursor, StringToken


BODY_FONTS = tuple(re.compile(p) for p in (
    r"PTSans-Narrow$",
    r"PTSans-NarrowBold$",
    r"Heydings-Icons$",
    r"KozMinPro-Regular$",
    r"Type3$",
))

WINGDINGS = r"Wingdings-Regular$"
BASIC_SHAPES = r"BasicShapes1"
FLAVOR_FONT = r"MonotypeCorsiva$"


def convert(parser: Parser, fn: Callable, description: str) -> Parser:
    """Like ``fmap`` but a ``ValueError`` from ``fn`` becomes an ``Error``."""
    def parse(cursor: Cursor) -> list:
        outcomes = []
        for outcome in parser(cursor):
            if isinstance(outcome, Result):
                try:
                    outcomes.append(Result(fn(outcome.value), outcome.remainder))
                except ValueError:
                    outcomes.append(Error(description, cursor.peek()))
            else:
                outcomes.append(outcome)
        return outcomes
    return parse


def lookup(parser: Parser, table: Callable[[str], Optional[object]], description: str) -> Parser:
    """Map a token's text through an alias lookup; unknown text fails."""
    def checked(value):
        found = table(value)
        if found is None:
            raise ValueError(value)
        return found
    return convert(parser, checked, description)


# ---------------------------------------------------------------------------
# Listing fields
# ---------------------------------------------------------------------------

sep = text_with_font("w", [WINGDINGS])

rarity = optional(text("★"))

martial = alt(fmap(text_with_font("E", [BASIC_SHAPES]), lambda _: True), success(False))

cost = convert(
    matches(r"^(-|\d{1,3}(\.\d{3})+ ?z?|\d+ ?z?)$", "cost"),
    convert_cost,
    "cost",
)

def dash_field(name: str) -> Parser:
    """A numeric column where ``-`` stands for zero."""
    return convert(matches(r"^(-|\+?\d+)$", name), dash_or_number, name)


_ACCURACY = re.compile(r"^【\s*(\w+)\s*\+\s*(\w+)\s*】$")
DAMAGE = re.compile(r"^[【(]\s*(?:HR|RA)\s*\+\s*(\d+)\s*[】)]$")


def _accuracy_check(value: str) -> tuple:
    m = _ACCURACY.match(value)
    primary, secondary = normalize_stat(m.group(1)), normalize_stat(m.group(2))
    if primary is None or secondary is None:
        raise ValueError(value)
    return primary, secondary


accuracy = fmap(
    seq(
        convert(matches(_ACCURACY, "accuracy"), _accuracy_check, "accuracy attributes"),
        optional(fmap(matches(r"^[+-]\d+$", "accuracy bonus"), int), 0),
    ),
    lambda v: Accuracy(v[0][0], v[0][1], v[1]),
)

damage = fmap(matches(DAMAGE, "damage"), lambda s: int(DAMAGE.match(s).group(1)))

damage_type = lookup(string, normalize_damage_type, "damage type")

hands = lookup(string, normalize_handed, "handedness")

distance = lookup(string, normalize_distance, "melee or ranged")


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------

def description_scanner(
    fonts: Sequence[re.Pattern],
    stop: Callable[[StringToken], bool] = lambda t: False,
    name: str = "description",
) -> Parser:
    """Consume body-text tokens up to the first foreign font or stop token.

    At least one line is required. The lines are joined with
    ``prettify_strings``.
    """
    def parse(cursor: Cursor) -> list:
        lines = []
        rest = cursor
        token = rest.peek()
        while font_matches(token, fonts) and not stop(token):
            lines.append(token.text)
            rest = rest.advance()
            token = rest.peek()
        if not lines:
            return [Error(name, cursor.peek())]
        return [Result(prettify_strings(lines), rest)]
    return parse


description = description_scanner(BODY_FONTS)


# ---------------------------------------------------------------------------
# Footers
# ---------------------------------------------------------------------------

page_number = matches(r"^\d+$", "page number")
ornament = text("W")
WATERMARK = re.compile(r"Order #\d+")

watermark = matches(WATERMARK, "watermark")
chapter_number = matches(r"^\d+$", "chapter number")
chapter_word = localized("CAPÍTULO", "CHAPTER")
chapter_rank = localized("REGRAS DO JOGO", "MESTRE", "GAME RULES", "GAME MASTER")

footer = alt(
    seq(image, page_number, ornament, watermark),
    seq(image, page_number, watermark),
    seq(page_number, ornament, watermark),
    seq(page_number, watermark),
    seq(image, watermark),
    watermark,
)


def chapter_footer(rank: Parser = chapter_rank) -> Parser:
    """Footer of a chapter's opening spread."""
    return seq(
        page_number, ornament, chapter_number, chapter_number,
        rank, chapter_word, chapter_word, watermark,
    )


chapter_marker = seq(ornament, chapter_number, chapter_word, chapter_word)

footer_with_chapter = alt(
    seq(image, chapter_footer()),
    chapter_footer(),
    seq(chapter_marker, footer),
    footer,
)


def page_ending(*repeated_titles: str) -> Parser:
    """Footer, optionally preceded by a running section title, then end."""
    if repeated_titles:
        body = alt(seq(localized(*repeated_titles), footer_with_chapter), footer_with_chapter)
    else:
        body = footer_with_chapter
    return seq(body, eof)


def no_header(cursor: Cursor) -> list:
    """Page opens straight on a listing, with no front matter."""
    return [Result(None, cursor)]
