"""Accessory page grammar."""

from .combinators import (
    Parser, alt, fmap, image, keep_left, keep_right, localized, many1, scan_to,
    seq, string,
)
from .common import cost, description, page_ending, rarity
from .models import Accessory


def _accessory(values) -> Accessory:
    img, name, _star, price, text = values
    return Accessory(image=img, name=name, cost=price, description=text)


accessory_listing: Parser = fmap(
    seq(image, string, rarity, cost, description),
    _accessory,
)

accessory_title = localized("ACCESSORIES", "ACESSÓRIOS", "EXEMPLOS DE ACESSÓRIOS")

accessory_columns = alt(
    seq(
        localized("ACCESSORY", "ACESSÓRIO"),
        localized("COST", "CUSTO"),
        localized("EFFECT", "EFEITO"),
    ),
    seq(localized("ACCESSORY", "ACESSÓRIO"), localized("COST", "CUSTO")),
)

accessory_header = alt(seq(accessory_title, accessory_columns), accessory_columns)

# Accessory pages open with a variable amount of art and flavor text.
starting = scan_to(accessory_header, "accessory header")

accessories_page: Parser = keep_left(
    keep_right(starting, many1(accessory_listing)),
    page_ending(),
)
