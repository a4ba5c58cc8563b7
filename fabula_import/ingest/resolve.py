"""Turn a grammar's outcome list into a page-level verdict.

Only results that consumed the whole page count. Exactly one such result
is a success; none is a failure, reported with every collected error;
more than one is ambiguous, which points at an under-constrained grammar
rather than a bad page. Picking "the first" result is never an option.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from .combinators import Error, Outcome, Parser, Result
from .tokens import Cursor


class ParseStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    AMBIGUOUS = "ambiguous"


@dataclass
class PageParse:
    status: ParseStatus
    value: Any = None
    count: int = 0
    errors: list[Error] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is ParseStatus.SUCCESS


def classify(outcomes: Iterable[Outcome], span_to_end: bool = True) -> PageParse:
    """Apply the exactly-one-result acceptance rule."""
    outcomes = list(outcomes)
    accepted = [
        o for o in outcomes
        if isinstance(o, Result) and (not span_to_end or o.remainder.at_end())
    ]
    failures = [o for o in outcomes if isinstance(o, Error)]
    if len(accepted) == 1:
        return PageParse(ParseStatus.SUCCESS, value=accepted[0].value, count=1)
    if not accepted:
        return PageParse(ParseStatus.FAILURE, count=0, errors=failures)
    return PageParse(ParseStatus.AMBIGUOUS, count=len(accepted), errors=failures)


def parse_page(grammar: Parser, tokens) -> PageParse:
    """Run ``grammar`` over a whole page's tokens and classify the outcome."""
    return classify(grammar(Cursor.start(tokens)))
