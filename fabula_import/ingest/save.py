"""Persist a page's records as JSON plus images.

One JSON file per page, ``<asset_dir>/<folders...>/<source>.json``, holding
the list of records. Record images are written beside it under
``images/<slug>.png`` and the image field becomes that relative path.
Every record is validated against its category's JSON Schema first.
"""

import dataclasses
import io
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

import jsonschema
from PIL import Image

from .models import Category
from .tokens import ImageToken
from .utils import ensure_dir, slugify, write_manifest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

_STAT = {"enum": ["dex", "ins", "mig", "wlp"]}
_DAMAGE_TYPE = {"enum": ["physical", "air", "bolt", "dark", "earth", "fire", "ice", "light", "poison"]}
_COUNT = {"type": "integer", "minimum": 0}
_TEXT = {"type": "string"}
_AFFINITY = {"enum": ["normal", "vulnerable", "resistant", "immune", "absorb"]}

_ACCURACY = {
    "type": "object",
    "required": ["primary", "secondary", "bonus"],
    "properties": {"primary": _STAT, "secondary": _STAT, "bonus": {"type": "integer"}},
}


def _record(properties: dict) -> dict:
    return {
        "type": "object",
        "required": list(properties),
        "properties": properties,
    }


_PROTECTION = _record({
    "image": _TEXT,
    "name": _TEXT,
    "martial": {"type": "boolean"},
    "cost": _COUNT,
    "defense": _COUNT,
    "magic_defense": _COUNT,
    "initiative": _COUNT,
    "description": _TEXT,
})

_WEAPON = _record({
    "image": _TEXT,
    "name": _TEXT,
    "martial": {"type": "boolean"},
    "cost": _COUNT,
    "accuracy": _ACCURACY,
    "damage": _COUNT,
    "damage_type": _DAMAGE_TYPE,
    "hands": {"enum": ["one-handed", "two-handed"]},
    "distance": {"enum": ["melee", "ranged"]},
    "category": {"enum": [
        "arcane", "bow", "brawling", "dagger", "firearm",
        "flail", "heavy", "spear", "sword", "thrown",
    ]},
    "description": _TEXT,
})

_NAMED_TEXT = _record({"name": _TEXT, "description": _TEXT})

_BEAST = _record({
    "image": _TEXT,
    "name": _TEXT,
    "level": _COUNT,
    "type": _TEXT,
    "description": _TEXT,
    "traits": _TEXT,
    "attributes": _record({
        "dex": {"enum": [6, 8, 10, 12]},
        "ins": {"enum": [6, 8, 10, 12]},
        "mig": {"enum": [6, 8, 10, 12]},
        "wlp": {"enum": [6, 8, 10, 12]},
        "max_hp": _COUNT,
        "crisis": _COUNT,
        "max_mp": _COUNT,
        "initiative": _COUNT,
        "defense": _COUNT,
        "magic_defense": _COUNT,
    }),
    "resists": {
        **_record({t: _AFFINITY for t in _DAMAGE_TYPE["enum"]}),
        "additionalProperties": False,
    },
    "equipment": {"type": "array", "items": _TEXT},
    "attacks": {"type": "array", "items": _record({
        "distance": {"enum": ["melee", "ranged"]},
        "name": _TEXT,
        "accuracy": _ACCURACY,
        "damage": _COUNT,
        "damage_type": {"anyOf": [_DAMAGE_TYPE, {"type": "null"}]},
        "description": _TEXT,
    })},
    "spells": {"type": "array", "items": _record({
        "name": _TEXT,
        "accuracy": {"anyOf": [_ACCURACY, {"type": "null"}]},
        "mp": _COUNT,
        "target": _TEXT,
        "duration": _TEXT,
        "description": _TEXT,
        "opportunity": {"type": ["string", "null"]},
    })},
    "other_actions": {"type": "array", "items": _NAMED_TEXT},
    "special_rules": {"type": "array", "items": _NAMED_TEXT},
})

RECORD_SCHEMAS: dict[Category, dict] = {
    Category.CONSUMABLES: _record({
        "image": _TEXT, "name": _TEXT, "ip_cost": _COUNT, "description": _TEXT,
    }),
    Category.BASIC_WEAPONS: _WEAPON,
    Category.RARE_WEAPONS: _WEAPON,
    Category.ARMOR: _PROTECTION,
    Category.SHIELDS: _PROTECTION,
    Category.ACCESSORIES: _record({
        "image": _TEXT, "name": _TEXT, "cost": _COUNT, "description": _TEXT,
    }),
    Category.BESTIARY: _BEAST,
}


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

def to_jsonable(value: Any) -> Any:
    """Convert records, enums and tuples into plain JSON values.

    Image tokens are left in place; ``save_records`` swaps them for paths.
    """
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, ImageToken):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {to_jsonable(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def write_image(token: ImageToken, images_dir: Path, slug: str) -> str:
    """Write an image token as PNG and return its file name.

    Payloads Pillow cannot decode are written as-is with their own extension.
    """
    ensure_dir(images_dir)
    try:
        with Image.open(io.BytesIO(token.payload)) as img:
            if img.mode == "CMYK":
                img = img.convert("RGB")
            path = images_dir / f"{slug}.png"
            img.save(path, format="PNG")
    except OSError as e:
        path = images_dir / f"{slug}.{token.ext or 'bin'}"
        logger.warning("Could not convert image for %s (%s); writing raw bytes", slug, e)
        path.write_bytes(token.payload)
    return path.name


def save_records(
    records: Sequence[Any],
    category: Category,
    source: str,
    folders: Sequence[str],
    asset_dir: str | Path,
) -> Path:
    """Validate and write one page's records. Returns the JSON path.

    Every record is validated before anything touches the disk, so an
    invalid record leaves neither images nor a JSON file behind.
    """
    schema = RECORD_SCHEMAS[category]

    serialised = []
    pending = []
    for record in records:
        data = to_jsonable(record)
        token = data.get("image")
        if isinstance(token, ImageToken):
            slug = slugify(data.get("name", source))
            data["image"] = f"images/{slug}.png"
            pending.append((data, token, slug))
        jsonschema.validate(instance=data, schema=schema)
        serialised.append(data)

    target_dir = ensure_dir(Path(asset_dir).joinpath(*folders))
    images_dir = target_dir / "images"
    for data, token, slug in pending:
        data["image"] = f"images/{write_image(token, images_dir, slug)}"

    path = target_dir / f"{source}.json"
    write_manifest(path, serialised)
    logger.info("Saved %d %s records to %s", len(serialised), category.value, path)
    return path
