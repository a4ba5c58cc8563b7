"""Shield page grammar."""

from .combinators import (
    Parser, alt, eof, fmap, image, keep_left, keep_right, localized, many1,
    optional, seq, string, string_with_font, then,
)
from .common import (
    FLAVOR_FONT, cost, dash_field, description, footer_with_chapter, martial,
    no_header, rarity,
)
from .models import Shield


def _shield(values) -> Shield:
    img, name, _star, is_martial, price, defense, mdefense, init, text = values
    return Shield(
        image=img, name=name, martial=is_martial, cost=price, defense=defense,
        magic_defense=mdefense, initiative=init, description=text,
    )


shield_listing: Parser = fmap(
    seq(
        image,
        string,
        rarity,
        martial,
        cost,
        dash_field("defense"),
        dash_field("magic defense"),
        dash_field("initiative"),
        description,
    ),
    _shield,
)

SHIELD_TITLES = ("BASIC SHIELDS", "ESCUDOS BÁSICOS")

shield_title = alt(
    localized(*SHIELD_TITLES, "EXEMPLOS DE ESCUDOS RAROS"),
    then(localized("ARMADURAS E ESCUDOS BÁSICOS"), localized("ESCUDOS BÁSICOS")),
)

shield_header = seq(
    shield_title,
    localized("SHIELD", "ESCUDO", "ITEM"),
    localized("COST", "CUSTO"),
    localized("DEF", "DEFESA"),
    localized("M.DEF", "DEF.M", "MDEF"),
    localized("INIT", "INIC.", "INIC", "INICIATIVA"),
)

# The combined armor/shield spread repeats its title above the shield table.
starting = alt(
    no_header,
    keep_right(many1(image), alt(then(shield_title, shield_header), shield_header)),
)

flavor_line = string_with_font([FLAVOR_FONT], "flavor text")
flavor = optional(seq(flavor_line, flavor_line))

ending = seq(
    optional(localized(*SHIELD_TITLES)),
    keep_left(flavor, footer_with_chapter),
    eof,
)

shield_page: Parser = keep_left(keep_right(starting, many1(shield_listing)), ending)
