"""Data models for the rulebook import pipeline.

Domain records produced by the page grammars, the closed enumerations they
draw from, and the configuration/report objects passed around the driver.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from .tokens import ImageToken


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class DamageType(Enum):
    """Damage types, in the order the bestiary resistance block lists them."""
    PHYSICAL = "physical"
    AIR = "air"
    BOLT = "bolt"
    DARK = "dark"
    EARTH = "earth"
    FIRE = "fire"
    ICE = "ice"
    LIGHT = "light"
    POISON = "poison"


class WeaponCategory(Enum):
    ARCANE = "arcane"
    BOW = "bow"
    BRAWLING = "brawling"
    DAGGER = "dagger"
    FIREARM = "firearm"
    FLAIL = "flail"
    HEAVY = "heavy"
    SPEAR = "spear"
    SWORD = "sword"
    THROWN = "thrown"


class Stat(Enum):
    DEX = "dex"
    INS = "ins"
    MIG = "mig"
    WLP = "wlp"


class Handed(Enum):
    ONE = "one-handed"
    TWO = "two-handed"


class Distance(Enum):
    MELEE = "melee"
    RANGED = "ranged"


class Affinity(Enum):
    NORMAL = "normal"
    VULNERABLE = "vulnerable"
    RESISTANT = "resistant"
    IMMUNE = "immune"
    ABSORB = "absorb"


class Category(Enum):
    """Page content categories known to the page registry."""
    CONSUMABLES = "consumables"
    BASIC_WEAPONS = "basic_weapons"
    RARE_WEAPONS = "rare_weapons"
    ARMOR = "armor"
    SHIELDS = "shields"
    ACCESSORIES = "accessories"
    BESTIARY = "bestiary"


# ---------------------------------------------------------------------------
# Equipment records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Accuracy:
    """An accuracy check: two attributes plus a flat bonus."""
    primary: Stat
    secondary: Stat
    bonus: int = 0


@dataclass(frozen=True)
class Consumable:
    image: ImageToken
    name: str
    ip_cost: int
    description: str


@dataclass(frozen=True)
class Weapon:
    image: ImageToken
    name: str
    martial: bool
    cost: int
    accuracy: Accuracy
    damage: int
    damage_type: DamageType
    hands: Handed
    distance: Distance
    category: WeaponCategory
    description: str


@dataclass(frozen=True)
class Armor:
    image: ImageToken
    name: str
    martial: bool
    cost: int
    defense: int
    magic_defense: int
    initiative: int
    description: str


@dataclass(frozen=True)
class Shield:
    image: ImageToken
    name: str
    martial: bool
    cost: int
    defense: int
    magic_defense: int
    initiative: int
    description: str


@dataclass(frozen=True)
class Accessory:
    image: ImageToken
    name: str
    cost: int
    description: str


# ---------------------------------------------------------------------------
# Bestiary records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BeastAttributes:
    dex: int
    ins: int
    mig: int
    wlp: int
    max_hp: int
    crisis: int
    max_mp: int
    initiative: int
    defense: int
    magic_defense: int


@dataclass(frozen=True)
class Attack:
    distance: Distance
    name: str
    accuracy: Accuracy
    damage: int
    damage_type: Optional[DamageType]
    description: str


@dataclass(frozen=True)
class Spell:
    name: str
    accuracy: Optional[Accuracy]
    mp: int
    target: str
    duration: str
    description: str
    opportunity: Optional[str] = None


@dataclass(frozen=True)
class SpecialRule:
    name: str
    description: str


@dataclass(frozen=True)
class Beast:
    image: ImageToken
    name: str
    level: int
    type: str
    description: str
    traits: str
    attributes: BeastAttributes
    resists: dict[DamageType, Affinity]
    equipment: tuple[str, ...] = ()
    attacks: tuple[Attack, ...] = ()
    spells: tuple[Spell, ...] = ()
    other_actions: tuple[SpecialRule, ...] = ()
    special_rules: tuple[SpecialRule, ...] = ()


# ---------------------------------------------------------------------------
# Page driver
# ---------------------------------------------------------------------------

@dataclass
class PageEntry:
    """A registered page: what it holds and where its records are filed."""
    page: int
    category: Category
    folders: list[str] = field(default_factory=list)


@dataclass
class PageReport:
    """Outcome of importing one page."""
    page: int
    category: Category
    status: str  # success, failure, ambiguous
    source: str = ""
    count: int = 0
    records: list[str] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    save: Optional[Callable[[Path], Path]] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def as_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "category": self.category.value,
            "status": self.status,
            "source": self.source,
            "count": self.count,
            "records": self.records,
            "errors": self.errors,
        }


@dataclass
class ImportConfig:
    """Configuration for a rulebook import run."""
    pdf_path: str = ""
    output_dir: str = ""
    pages: Optional[str] = None  # page range spec, None for every registered page
    registry_path: str = ""  # override YAML merged over the bundled registry
    rulebook: str = "core_rulebook"
    source_prefix: Optional[str] = None  # None: use the registry's
    page_offset: Optional[int] = None
    weapon_category_fallback: Optional[str] = "arcane"

    def get_output_dir(self) -> Path:
        if self.output_dir:
            return Path(self.output_dir)
        pdf_stem = Path(self.pdf_path).stem if self.pdf_path else "unknown"
        return Path(f"import_{pdf_stem}")
