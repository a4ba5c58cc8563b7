"""Consumables page grammar (potions, elixirs, tonics...)."""

from .combinators import (
    Parser, alt, fmap, image, keep_left, keep_right, localized, many1, matches,
    scan_to, seq, then,
)
from .common import description, no_header, page_ending
from .models import Consumable


def _consumable(values) -> Consumable:
    img, name, ip_cost, text = values
    return Consumable(image=img, name=name, ip_cost=ip_cost, description=text)


consumable: Parser = fmap(
    seq(
        image,
        fmap(many1(matches(r"^\D", "consumable name")), " ".join),
        fmap(matches(r"^\d+$", "IP cost"), int),
        description,
    ),
    _consumable,
)

# Group titles such as "RESTORATIVES" carry no sentence punctuation.
group_header = matches(r"^[^.?!]*$", "consumable group header")

item_columns = seq(
    localized("ITEM"),
    localized("IP COST", "CUSTO DE PI"),
    localized("EFFECT", "EFEITO"),
)

starting = alt(no_header, keep_right(many1(image), scan_to(item_columns, "consumables header")))

group = fmap(then(group_header, many1(consumable)), lambda v: v[1])

consumables_page: Parser = fmap(
    keep_left(keep_right(starting, many1(group)), page_ending()),
    lambda groups: [c for g in groups for c in g],
)
