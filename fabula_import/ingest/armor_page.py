"""Armor page grammar (basic armor table and rare armor samples)."""

from functools import partial

from .combinators import (
    Parser, alt, fmap, image, keep_left, keep_right, localized, many1, seq,
    string, then,
)
from .common import (
    convert, cost, dash_field, description, martial, page_ending, rarity,
)
from .models import Armor
from .normalize import convert_defense


def _armor(values) -> Armor:
    img, name, _star, is_martial, price, defense, mdefense, init, text = values
    return Armor(
        image=img, name=name, martial=is_martial, cost=price, defense=defense,
        magic_defense=mdefense, initiative=init, description=text,
    )


armor_listing: Parser = fmap(
    seq(
        image,
        string,
        rarity,
        martial,
        cost,
        convert(string, partial(convert_defense, "DEX"), "defense"),
        convert(string, partial(convert_defense, "INS"), "magic defense"),
        dash_field("initiative"),
        description,
    ),
    _armor,
)

armor_title = alt(
    localized("BASIC ARMORS", "ARMADURAS BÁSICAS", "EXEMPLOS DE ARMADURAS RARAS"),
    then(localized("ARMADURAS E ESCUDOS BÁSICOS"), localized("ARMADURAS BÁSICAS")),
)

armor_columns = seq(
    localized("ARMOR", "ARMADURA", "ITEM"),
    localized("COST", "CUSTO"),
    localized("DEF", "DEFESA"),
    localized("M.DEF", "DEF.M", "MDEF"),
    localized("INIT", "INIC.", "INIC", "INICIATIVA"),
)

starting = keep_right(many1(image), alt(seq(armor_title, armor_columns), armor_columns))

armor_page: Parser = keep_left(
    keep_right(starting, many1(armor_listing)),
    page_ending("BASIC ARMORS", "ARMADURAS BÁSICAS"),
)
