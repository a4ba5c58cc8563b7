"""Page token stream and cursor.

A page is tokenized once into a tuple of ``StringToken`` / ``ImageToken``
values. Parsers never index the tuple directly; they read it through a
``Cursor``, which pairs the shared tuple with an integer offset. Copying a
cursor never copies the tokens, so speculative branches are cheap.
"""

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class StringToken:
    """A run of text and the font it was set in."""
    text: str
    font: str


@dataclass(frozen=True)
class ImageToken:
    """An embedded image with its page bounding box (x0, y0, x1, y1)."""
    payload: bytes = field(repr=False)
    position: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    ext: str = "png"


Token = Union[StringToken, ImageToken]


def describe_token(token: Optional[Token]) -> str:
    """Render a token for diagnostics."""
    if token is None:
        return "<end of page>"
    if isinstance(token, StringToken):
        return f'<Text str="{token.text}" font="{token.font}">'
    x0, y0, x1, y1 = token.position
    return f"<Image at ({x0:.0f}, {y0:.0f}, {x1:.0f}, {y1:.0f})>"


@dataclass(frozen=True)
class Cursor:
    """Immutable position in a page's token stream."""
    tokens: tuple[Token, ...] = field(repr=False)
    offset: int = 0

    def __post_init__(self):
        if not 0 <= self.offset <= len(self.tokens):
            raise ValueError(
                f"Cursor offset {self.offset} outside 0..{len(self.tokens)}"
            )

    @classmethod
    def start(cls, tokens) -> "Cursor":
        return cls(tuple(tokens), 0)

    def peek(self) -> Optional[Token]:
        """Next token, or None at the end of the page."""
        if self.offset < len(self.tokens):
            return self.tokens[self.offset]
        return None

    def advance(self) -> "Cursor":
        """Cursor one token further on. Advancing past the end is an error."""
        if self.at_end():
            raise IndexError("Cannot advance past the end of the page")
        return Cursor(self.tokens, self.offset + 1)

    def at_end(self) -> bool:
        return self.offset >= len(self.tokens)

    def __eq__(self, other):
        if not isinstance(other, Cursor):
            return NotImplemented
        return self.tokens is other.tokens and self.offset == other.offset

    def __hash__(self):
        return hash((id(self.tokens), self.offset))


def peek(cursor: Cursor) -> Optional[Token]:
    return cursor.peek()


def advance(cursor: Cursor) -> Cursor:
    return cursor.advance()


def at_end(cursor: Cursor) -> bool:
    return cursor.at_end()
