"""Bestiary page grammar.

A page holds any number of beast stat blocks, separated by a variable
amount of art and flavor text. ``beasts`` scans forward for the next
image/name/level triple, parses a whole stat block from there, and repeats
until the page footer.
"""

import re
from typing import Optional

from .combinators import (
    Error, Parser, Result, alt, eof, errors, first_result, fmap, font_matches, image,
    keep_left, keep_right, localized, many, many1, matches, satisfy, scan_to,
    seq, string, text, text_with_font, when_next,
)
from .common import (
    BODY_FONTS, DAMAGE, WATERMARK, accuracy, chapter_number, chapter_word, damage,
    description_scanner, ornament, page_number, sep, watermark,
)
from .models import (
    Affinity, Attack, Beast, BeastAttributes, DamageType, Distance, SpecialRule,
    Spell,
)
from .normalize import map_duration, normalize_affinity, normalize_damage_type
from .tokens import Cursor, StringToken


ICON_FONT = r"FabulaUltimaicons-Regular$"
EVILZ = r"Evilz$"

BEAST_FONTS = BODY_FONTS + (re.compile(ICON_FONT),)

ATTACK_HEADERS = ("BASIC ATTACKS", "ATAQUES BÁSICOS")
SPELL_HEADERS = ("SPELLS", "FEITIÇOS")
OTHER_ACTION_HEADERS = ("OTHER ACTIONS", "OUTRAS AÇÕES")
SPECIAL_RULE_HEADERS = ("SPECIAL RULES", "REGRAS ESPECIAIS")
EQUIPMENT_HEADERS = ("Equipment:", "Equipamento:")
TRAIT_HEADERS = ("Typical Traits:", "Traços típicos:")
OPPORTUNITY_HEADERS = ("Opportunity:", "Oportunidade:")

STOP_HEADERS = frozenset(
    ATTACK_HEADERS + SPELL_HEADERS + OTHER_ACTION_HEADERS
    + SPECIAL_RULE_HEADERS + TRAIT_HEADERS
)

# Icon glyph(s) announcing each damage type in the resistance block.
TYPE_ICONS = {
    DamageType.PHYSICAL: ("p", "P"),
    DamageType.AIR: ("a", "A"),
    DamageType.BOLT: ("b", "B"),
    DamageType.DARK: ("d", "D"),
    DamageType.EARTH: ("e", "E"),
    DamageType.FIRE: ("f", "F"),
    DamageType.ICE: ("i", "I"),
    DamageType.LIGHT: ("l", "L"),
    DamageType.POISON: ("t", "T"),
}


def _is_section_icon(token: StringToken) -> bool:
    return bool(re.search(ICON_FONT, token.font)) and token.text in ("C", "M", "R", "S")


def _stops_description(token: StringToken) -> bool:
    return (
        token.text in STOP_HEADERS
        or token.text.startswith(OPPORTUNITY_HEADERS)
        or _is_section_icon(token)
    )


beast_description = description_scanner(BEAST_FONTS, _stops_description, "beast description")


# ---------------------------------------------------------------------------
# Attributes and resistances
# ---------------------------------------------------------------------------

def _die(codes: tuple[str, ...]) -> Parser:
    pattern = re.compile(rf"^({'|'.join(codes)}) d(6|8|10|12)$")
    return fmap(matches(pattern, f"{codes[0]} die"), lambda s: int(s.rsplit("d", 1)[1]))


def _number(description: str) -> Parser:
    return fmap(matches(r"^\d+$", description), int)


def _labelled(labels: tuple[str, ...], description: str) -> Parser:
    pattern = re.compile(rf"^({'|'.join(re.escape(l) for l in labels)}) \+?(\d+)$")
    return fmap(matches(pattern, description), lambda s: int(pattern.match(s).group(2)))


def _attributes(values) -> BeastAttributes:
    dex, ins, mig, wlp, hp, crisis, mp, init, defense, mdefense = values
    return BeastAttributes(
        dex=dex, ins=ins, mig=mig, wlp=wlp, max_hp=hp, crisis=crisis,
        max_mp=mp, initiative=init, defense=defense, magic_defense=mdefense,
    )


beast_attributes = fmap(
    seq(
        _die(("DEX", "DES")),
        _die(("INS", "AST")),
        _die(("MIG", "VIG")),
        _die(("WLP", "VON")),
        keep_right(localized("HP", "PV"), _number("max HP")),
        keep_right(sep, _number("crisis")),
        keep_right(localized("MP", "PM"), _number("max MP")),
        _labelled(("Init.", "Inic."), "initiative"),
        _labelled(("DEF",), "defense"),
        _labelled(("M.DEF", "DEF.M"), "magic defense"),
    ),
    _attributes,
)


def _icon_for(token, damage_type: DamageType) -> bool:
    return isinstance(token, StringToken) and token.text in TYPE_ICONS[damage_type]


def _affinity_of(token) -> Optional[Affinity]:
    if isinstance(token, StringToken):
        return normalize_affinity(token.text)
    return None


def resistance(damage_type: DamageType) -> Parser:
    """One entry of the resistance block.

    The type icon is required. An affinity code may follow, possibly after a
    repeated icon; without a code the affinity is normal and only the icon
    is consumed.
    """
    def parse(cursor: Cursor) -> list:
        if not _icon_for(cursor.peek(), damage_type):
            return [Error(f"{damage_type.value} icon", cursor.peek())]
        after_icon = cursor.advance()
        following = after_icon.peek()
        affinity = _affinity_of(following)
        if affinity is not None:
            return [Result(affinity, after_icon.advance())]
        if _icon_for(following, damage_type):
            after_repeat = after_icon.advance()
            affinity = _affinity_of(after_repeat.peek())
            if affinity is not None:
                return [Result(affinity, after_repeat.advance())]
        return [Result(Affinity.NORMAL, after_icon)]
    return parse


beast_resistances = fmap(
    seq(*(resistance(t) for t in DamageType)),
    lambda affinities: dict(zip(DamageType, affinities)),
)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def _maybe_damage_type(cursor: Cursor) -> list:
    token = cursor.peek()
    if isinstance(token, StringToken):
        found = normalize_damage_type(token.text)
        if found is not None:
            return [Result(found, cursor.advance())]
    return [Result(None, cursor)]


def _maybe_damage(cursor: Cursor) -> list:
    token = cursor.peek()
    if isinstance(token, StringToken) and DAMAGE.match(token.text):
        return seq(damage, _maybe_damage_type)(cursor)
    return [Result((0, None), cursor)]


attack_kind = alt(
    fmap(alt(text_with_font("$", [EVILZ]), text_with_font("M", [ICON_FONT])),
         lambda _: Distance.MELEE),
    fmap(alt(many1(text_with_font("a", [r"fabulaultima$"])),
             many1(text_with_font("R", [ICON_FONT]))),
         lambda _: Distance.RANGED),
)


def _attack(values) -> Attack:
    kind, name, acc, (dmg, dmg_type), text_ = values
    return Attack(
        distance=kind, name=name, accuracy=acc, damage=dmg,
        damage_type=dmg_type, description=text_,
    )


beast_attack = fmap(
    seq(
        attack_kind,
        string,
        keep_right(sep, accuracy),
        keep_right(sep, _maybe_damage),
        beast_description,
    ),
    _attack,
)


def _maybe_sep_description(cursor: Cursor) -> list:
    token = cursor.peek()
    if isinstance(token, StringToken) and token.text == "w" and re.search(r"Wingdings-Regular$", token.font):
        return keep_right(sep, beast_description)(cursor)
    return beast_description(cursor)


special_rule = fmap(
    seq(string, _maybe_sep_description),
    lambda v: SpecialRule(name=v[0], description=v[1]),
)

opportunity = keep_right(localized(*OPPORTUNITY_HEADERS), beast_description)

spell_icon = alt(text_with_font("h", [EVILZ]), text_with_font("C", [ICON_FONT]))
spell_accuracy_icon = alt(text_with_font("r", [r"Heydings-Icons$"]), text_with_font("O", [r"Type3$"]))


def _maybe_spell_accuracy(cursor: Cursor) -> list:
    token = cursor.peek()
    if isinstance(token, StringToken) and (
        re.search(r"Heydings-Icons$", token.font)
        or (token.text == "O" and re.search(r"Type3$", token.font))
    ):
        return keep_right(many1(spell_accuracy_icon), keep_right(sep, accuracy))(cursor)
    return [Result(None, cursor)]


def _mp_cost(value: str) -> int:
    # "10 MP" / "10 PM": a three-character unit suffix.
    return int(value[:-3])


def _spell(values) -> Spell:
    name, acc, mp, target, duration, text_, chance = values
    return Spell(
        name=name, accuracy=acc, mp=mp, target=target, duration=duration,
        description=text_, opportunity=chance,
    )


beast_spell = fmap(
    seq(
        keep_right(spell_icon, string),
        _maybe_spell_accuracy,
        keep_right(sep, fmap(matches(r"^\d+ (MP|PM)$", "MP cost"), _mp_cost)),
        keep_right(sep, string),
        keep_right(sep, fmap(keep_left(string, text(".")), map_duration)),
        beast_description,
        when_next(OPPORTUNITY_HEADERS, opportunity),
    ),
    _spell,
)

other_action = keep_right(
    alt(text_with_font("S", [r"WebSymbols-Regular$"]), text_with_font("S", [ICON_FONT])),
    special_rule,
)

def _as_tuple(parser: Parser) -> Parser:
    return fmap(parser, tuple)

equipment = when_next(
    EQUIPMENT_HEADERS,
    keep_right(
        localized(*EQUIPMENT_HEADERS),
        fmap(string, lambda s: tuple(s[:-1].split(", ")) if s.endswith(".") else tuple(s.split(", "))),
    ),
    (),
)
attacks = when_next(ATTACK_HEADERS, keep_right(localized(*ATTACK_HEADERS), _as_tuple(many1(beast_attack))), ())
spells = when_next(SPELL_HEADERS, keep_right(localized(*SPELL_HEADERS), _as_tuple(many1(beast_spell))), ())
other_actions = when_next(
    OTHER_ACTION_HEADERS,
    keep_right(localized(*OTHER_ACTION_HEADERS), _as_tuple(many1(other_action))),
    (),
)
special_rules = when_next(
    SPECIAL_RULE_HEADERS,
    keep_right(localized(*SPECIAL_RULE_HEADERS), _as_tuple(many1(special_rule))),
    (),
)


# ---------------------------------------------------------------------------
# Stat block
# ---------------------------------------------------------------------------

LEVEL = re.compile(r"^(Lv|Nvl)\. (\d+)$")

level = fmap(matches(LEVEL, "level"), lambda s: int(LEVEL.match(s).group(2)))


def _beast(values) -> Beast:
    (img, name, lvl, kind, text_, traits, attrs, resists,
     gear, basic_attacks, spell_list, actions, rules) = values
    return Beast(
        image=img, name=name, level=lvl, type=kind, description=text_,
        traits=traits, attributes=attrs, resists=resists, equipment=gear,
        attacks=basic_attacks, spells=spell_list, other_actions=actions,
        special_rules=rules,
    )


beast: Parser = fmap(
    seq(
        image,
        string,
        level,
        keep_right(sep, string),
        beast_description,
        keep_right(localized(*TRAIT_HEADERS), string),
        beast_attributes,
        beast_resistances,
        equipment,
        attacks,
        spells,
        other_actions,
        special_rules,
    ),
    _beast,
)

beast_start = seq(image, string, level)


# ---------------------------------------------------------------------------
# Footers and the record scan
# ---------------------------------------------------------------------------

chapter_footer = seq(
    page_number, ornament, chapter_number, chapter_number,
    localized("BESTIARY", "BESTIÁRIO"), chapter_word, chapter_word,
    watermark, eof,
)

# Quotes, asides and credit boxes that may trail the last stat block.
_FOOTER_FONTS = tuple(re.compile(p) for p in (r"MonotypeCorsiva$", r"CreditValley$", r"Antonio-Bold$"))

_footer_matter = alt(
    image,
    satisfy(
        lambda t: font_matches(t, _FOOTER_FONTS) and not WATERMARK.search(t.text),
        "footer matter",
    ),
)

legacy_footer = seq(many(_footer_matter), watermark, eof)

bestiary_footer = alt(chapter_footer, legacy_footer)


def find_next_start(cursor: Cursor, start: Parser, stop: Parser) -> Optional[Cursor]:
    """Scan forward for the first offset where ``start`` matches.

    The scan gives up as soon as ``stop`` matches, so a start lying beyond
    the stop pattern is never returned.
    """
    probe = cursor
    while not probe.at_end():
        if first_result(stop(probe)) is not None:
            return None
        if first_result(start(probe)) is not None:
            return probe
        probe = probe.advance()
    return None


def beasts(cursor: Cursor) -> list:
    """Every stat block from ``cursor`` up to the footer.

    A stat block that starts but does not parse fails the whole list with
    that block's errors; records are never dropped.
    """
    found = []
    rest = cursor
    while not rest.at_end():
        if first_result(bestiary_footer(rest)) is not None:
            break
        start = find_next_start(rest, beast_start, bestiary_footer)
        if start is None:
            break
        outcomes = beast(start)
        parsed = first_result(outcomes)
        if parsed is None:
            return errors(outcomes) or [Error("beast stat block", start.peek())]
        if parsed.remainder.offset == rest.offset:
            break
        found.append(parsed.value)
        rest = parsed.remainder
    if not found:
        return [Error("beast stat block", cursor.peek())]
    return [Result(found, rest)]


def _scan_start(cursor: Cursor) -> list:
    start = find_next_start(cursor, beast_start, lambda c: [])
    if start is None:
        return [Error("bestiary start", cursor.peek())]
    return [Result(None, start)]


_scan_footer = fmap(scan_to(bestiary_footer, "bestiary footer"), lambda _: None)

bestiary_page: Parser = keep_left(keep_right(_scan_start, beasts), _scan_footer)
