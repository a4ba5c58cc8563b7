"""Text normalisation, bilingual alias tables and numeric conversions.

Every table is keyed by ``normalize_text`` output (lower-cased,
accent-stripped, single-spaced) and built once at import time.
"""

import logging
import re
import unicodedata
from types import MappingProxyType
from typing import Optional

from .models import Affinity, DamageType, Distance, Handed, Stat, WeaponCategory

logger = logging.getLogger(__name__)


def normalize_text(value: str) -> str:
    """Lower-case, strip accents and collapse whitespace.

    >>> normalize_text("  Armas  BÁSICAS ")
    'armas basicas'
    """
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return re.sub(r"\s+", " ", stripped).strip().lower()


# ---------------------------------------------------------------------------
# Alias tables
# ---------------------------------------------------------------------------

DAMAGE_TYPE_ALIASES = MappingProxyType({
    **{t.value: t for t in DamageType},
    "fisico": DamageType.PHYSICAL,
    "ar": DamageType.AIR,
    "raio": DamageType.BOLT,
    "trevas": DamageType.DARK,
    "terra": DamageType.EARTH,
    "fogo": DamageType.FIRE,
    "gelo": DamageType.ICE,
    "luz": DamageType.LIGHT,
    "veneno": DamageType.POISON,
})

WEAPON_CATEGORY_ALIASES = MappingProxyType({
    **{c.value: c for c in WeaponCategory},
    "arcana": WeaponCategory.ARCANE,
    "arcano": WeaponCategory.ARCANE,
    "arcanas": WeaponCategory.ARCANE,
    "arcanos": WeaponCategory.ARCANE,
    "arco": WeaponCategory.BOW,
    "arcos": WeaponCategory.BOW,
    "luta": WeaponCategory.BRAWLING,
    "adaga": WeaponCategory.DAGGER,
    "adagas": WeaponCategory.DAGGER,
    "armas de fogo": WeaponCategory.FIREARM,
    "fogo": WeaponCategory.FIREARM,
    "malhos": WeaponCategory.FLAIL,
    "pesada": WeaponCategory.HEAVY,
    "pesadas": WeaponCategory.HEAVY,
    "lanca": WeaponCategory.SPEAR,
    "lancas": WeaponCategory.SPEAR,
    "espada": WeaponCategory.SWORD,
    "espadas": WeaponCategory.SWORD,
    "arremesso": WeaponCategory.THROWN,
    "arremessada": WeaponCategory.THROWN,
    "arremessadas": WeaponCategory.THROWN,
})

STAT_ALIASES = MappingProxyType({
    "dex": Stat.DEX,
    "des": Stat.DEX,
    "ins": Stat.INS,
    "ast": Stat.INS,
    "mig": Stat.MIG,
    "vig": Stat.MIG,
    "wlp": Stat.WLP,
    "von": Stat.WLP,
})

HANDED_ALIASES = MappingProxyType({
    "one-handed": Handed.ONE,
    "uma mao": Handed.ONE,
    "two-handed": Handed.TWO,
    "duas maos": Handed.TWO,
})

DISTANCE_ALIASES = MappingProxyType({
    "melee": Distance.MELEE,
    "corpo a corpo": Distance.MELEE,
    "ranged": Distance.RANGED,
    "a distancia": Distance.RANGED,
})

AFFINITY_CODES = MappingProxyType({
    "VU": Affinity.VULNERABLE,
    "RS": Affinity.RESISTANT,
    "RE": Affinity.RESISTANT,  # legacy printing
    "IM": Affinity.IMMUNE,
    "AB": Affinity.ABSORB,
})

DURATIONS = MappingProxyType({
    "Until the start of your next turn": "nextTurn",
    "Até o início do seu próximo turno": "nextTurn",
    "Instantaneous": "instant",
    "Instantânea": "instant",
    "Scene": "scene",
    "Cena": "scene",
})

# Defense columns print an attribute die instead of a number on some rows.
DEFENSE_PREFIX_ALIASES = MappingProxyType({
    "dex": ("dex", "des"),
    "ins": ("ins", "ast"),
})


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def normalize_damage_type(raw: str) -> Optional[DamageType]:
    normalized = re.sub(r"^(de|do|da|dos|das)\s+", "", normalize_text(raw))
    return DAMAGE_TYPE_ALIASES.get(normalized)


def normalize_weapon_category(
    raw: str,
    fallback: Optional[WeaponCategory] = WeaponCategory.ARCANE,
) -> Optional[WeaponCategory]:
    """Map a category title fragment to a ``WeaponCategory``.

    Unknown names return ``fallback``; pass ``None`` to get ``None`` back
    instead.
    """
    normalized = normalize_text(raw)
    normalized = re.sub(r"^categorias? de\s+", "", normalized)
    normalized = re.sub(r"^armas\s+de\s+", "", normalized)
    normalized = re.sub(r"^armas\s+", "", normalized)
    normalized = re.sub(r"\s+category$", "", normalized)
    category = WEAPON_CATEGORY_ALIASES.get(normalized)
    if category is None and fallback is not None:
        logger.debug("Unknown weapon category %r, using %s", raw, fallback.value)
        return fallback
    return category


def normalize_stat(raw: str) -> Optional[Stat]:
    return STAT_ALIASES.get(normalize_text(raw))


def normalize_handed(raw: str) -> Optional[Handed]:
    return HANDED_ALIASES.get(normalize_text(raw))


def normalize_distance(raw: str) -> Optional[Distance]:
    return DISTANCE_ALIASES.get(normalize_text(raw))


def normalize_affinity(code: str) -> Optional[Affinity]:
    return AFFINITY_CODES.get(code)


def map_duration(raw: str) -> str:
    return DURATIONS.get(raw, raw.lower())


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def dash_or_number(raw: str) -> int:
    """``"-"`` is zero; anything else must be a non-negative integer."""
    value = raw.strip()
    if value == "-":
        return 0
    if not re.fullmatch(r"\+?\d+", value):
        raise ValueError(f"Not a number: {raw!r}")
    return int(value)


def convert_cost(raw: str) -> int:
    """Parse a price column value.

    >>> convert_cost("1.200z")
    1200
    >>> convert_cost("-")
    0
    """
    value = raw.strip()
    if value == "-":
        return 0
    value = re.sub(r"\s*z$", "", value).replace(".", "")
    if not value.isdigit():
        raise ValueError(f"Not a cost: {raw!r}")
    return int(value)


def convert_defense(prefix: str, raw: str) -> int:
    """Parse an armor DEF/M.DEF cell.

    Cells are either a number, ``-``, or an attribute die such as
    ``"DEX Die 6"``, ``"DES size 8"`` or ``"dado de dex 6"``, in which case
    the trailing number is returned.
    """
    normalized = normalize_text(raw)
    aliases = DEFENSE_PREFIX_ALIASES.get(normalize_text(prefix), (normalize_text(prefix),))
    for alias in aliases:
        for label in (f"{alias} size", f"{alias} die", f"dado de {alias}"):
            if normalized.startswith(label):
                rest = normalized[len(label):].strip()
                return dash_or_number(rest) if rest else 0
    return dash_or_number(raw)


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------

_ATTACHED_PUNCTUATION = re.compile(r"^[.?!),]")


def prettify_strings(lines) -> str:
    """Join reflowed text lines.

    A line starting with closing punctuation is glued to the previous one;
    any other line is joined with a single space.

    >>> prettify_strings(["Hello", ",", "world"])
    'Hello, world'
    """
    joined = ""
    for line in lines:
        s = line.strip()
        if _ATTACHED_PUNCTUATION.match(s):
            joined += s
        else:
            joined += " " + s
    return joined.strip()
