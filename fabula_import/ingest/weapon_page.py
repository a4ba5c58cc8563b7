"""Weapon page grammars: basic weapon tables and rare weapon samples.

Listings are grouped under a category title ("Sword Category", "Categoria
de Espadas") or, on rare weapon pages, under a banner such as "SAMPLE RARE
SWORD WEAPONS" / "EXEMPLOS DE ESPADAS RARAS". The category applies to
every listing up to the next title.
"""

import re
from dataclasses import replace
from typing import Optional

from .combinators import (
    Error, Parser, Result, alt, fmap, image, keep_left, keep_right, localized,
    many1, seq, string, then,
)
from .common import (
    accuracy, cost, damage, damage_type, description, distance, hands, martial,
    no_header, page_ending, rarity, sep,
)
from .models import Weapon, WeaponCategory
from .normalize import normalize_weapon_category
from .tokens import Cursor, StringToken


def _weapon(values) -> Weapon:
    (img, name, _star, is_martial, price, acc, dmg, dmg_type,
     handed, dist, text) = values
    return Weapon(
        image=img, name=name, martial=is_martial, cost=price, accuracy=acc,
        damage=dmg, damage_type=dmg_type, hands=handed, distance=dist,
        # Replaced by the enclosing category title.
        category=WeaponCategory.ARCANE,
        description=text,
    )


weapon_listing: Parser = fmap(
    seq(
        image,
        string,
        rarity,
        martial,
        cost,
        accuracy,
        damage,
        damage_type,
        keep_left(hands, sep),
        keep_left(distance, sep),
        description,
    ),
    _weapon,
)


def _with_category(category: WeaponCategory, weapons) -> list[Weapon]:
    return [replace(w, category=category) for w in weapons]


_TITLE_FORMS = (
    re.compile(r"^(?P<name>.+) Category$"),
    re.compile(r"^Categorias? de (?P<name>.+)$"),
)
_RARE_BANNERS = (
    re.compile(r"^SAMPLE RARE (?P<name>.+) WEAPONS$"),
    re.compile(r"^EXEMPLOS DE (?P<name>.+) RAR[AO]S$"),
)


def category_parser(forms, fallback: Optional[WeaponCategory], description: str) -> Parser:
    """Parse a category title token in one of ``forms``.

    Unknown category names resolve to ``fallback``; with ``fallback=None``
    they are rejected.
    """
    def parse(cursor: Cursor) -> list:
        token = cursor.peek()
        if isinstance(token, StringToken):
            for form in forms:
                m = form.match(token.text)
                if m:
                    category = normalize_weapon_category(m.group("name"), fallback)
                    if category is None:
                        return [Error(f"Unexpected category {m.group('name')}", token)]
                    return [Result(category, cursor.advance())]
        return [Error(description, token)]
    return parse


column_headers = seq(
    localized("WEAPON", "ARMA"),
    localized("COST", "CUSTO"),
    localized("ACCURACY", "PRECISÃO"),
    localized("DAMAGE", "DANO"),
)

BASIC_TITLES = ("BASIC WEAPONS", "ARMAS BÁSICAS")


def _optional_table_header(cursor: Cursor) -> list:
    """Section title plus column headers, bare column headers, or nothing."""
    token = cursor.peek()
    if isinstance(token, StringToken):
        if token.text in BASIC_TITLES:
            return fmap(then(localized(*BASIC_TITLES), column_headers), lambda _: None)(cursor)
        if token.text in ("WEAPON", "ARMA"):
            return fmap(column_headers, lambda _: None)(cursor)
    return [Result(None, cursor)]


def basic_weapons_grammar(fallback: Optional[WeaponCategory] = WeaponCategory.ARCANE) -> Parser:
    category_title = category_parser(_TITLE_FORMS, fallback, "weapon category title")
    group = fmap(
        then(category_title, many1(weapon_listing)),
        lambda v: _with_category(*v),
    )
    starting = alt(no_header, keep_right(many1(image), _optional_table_header))
    return fmap(
        keep_left(keep_right(starting, many1(group)), page_ending(*BASIC_TITLES)),
        lambda groups: [w for g in groups for w in g],
    )


def rare_weapons_grammar(fallback: Optional[WeaponCategory] = WeaponCategory.ARCANE) -> Parser:
    banner = category_parser(_RARE_BANNERS, fallback, "rare weapon banner")
    starting = fmap(keep_right(many1(image), seq(banner, column_headers)), lambda v: v[0])
    return keep_left(
        fmap(then(starting, many1(weapon_listing)), lambda v: _with_category(*v)),
        page_ending(),
    )


basic_weapons_page: Parser = basic_weapons_grammar()
rare_weapons_page: Parser = rare_weapons_grammar()
