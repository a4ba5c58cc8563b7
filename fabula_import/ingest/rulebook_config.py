"""Page registry loader.

The registry says which grammar reads each rulebook page and where its
records are filed. It ships as YAML under ``fabula_import/rulebooks/`` and
may be overridden by a user file, deep-merged on top:
  rulebooks/<id>.yaml -> override.yaml
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .models import Category, PageEntry

logger = logging.getLogger(__name__)

# Default location for bundled registries
RULEBOOKS_DIR = Path(__file__).parent.parent / "rulebooks"


@dataclass
class PageRegistry:
    """Pages of one rulebook that have a grammar."""
    id: str = ""
    name: str = ""
    source_prefix: str = "FUCR"
    page_offset: int = 2
    pages: dict[int, PageEntry] = field(default_factory=dict)
    sources: list[str] = field(default_factory=list)  # files that were merged

    def entry(self, page: int) -> PageEntry:
        try:
            return self.pages[page]
        except KeyError:
            raise KeyError(f"Page {page} has no registered grammar in {self.id}") from None


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override dict into base dict.

    - Dicts are merged recursively
    - Scalars and lists are replaced by override
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_file(path: Path) -> dict:
    """Load a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _page_keys(key) -> list[int]:
    """A registry key is a page number or an inclusive "first-last" range."""
    if isinstance(key, int):
        return [key]
    text = str(key).strip()
    if "-" in text:
        first, last = (int(p) for p in text.split("-", 1))
        if first > last:
            raise ValueError(f"Bad page range in registry: {text}")
        return list(range(first, last + 1))
    return [int(text)]


def parse_pages(raw: dict) -> dict[int, PageEntry]:
    """Parse the ``pages`` mapping into PageEntry objects."""
    pages: dict[int, PageEntry] = {}
    for key, data in raw.items():
        if not isinstance(data, dict) or "category" not in data:
            raise ValueError(f"Registry entry {key!r} needs a category")
        try:
            category = Category(data["category"])
        except ValueError:
            valid = ", ".join(c.value for c in Category)
            raise ValueError(
                f"Unknown category {data['category']!r} for pages {key}. Valid: {valid}"
            ) from None
        for page in _page_keys(key):
            pages[page] = PageEntry(
                page=page,
                category=category,
                folders=list(data.get("folders", [])),
            )
    return pages


def load_registry(rulebook: str = "core_rulebook", override_path: Optional[str | Path] = None) -> PageRegistry:
    """Load a bundled registry and merge an optional override file on top."""
    base_path = RULEBOOKS_DIR / f"{rulebook}.yaml"
    raw = load_yaml_file(base_path)
    if not raw:
        raise FileNotFoundError(f"No page registry for rulebook {rulebook!r} at {base_path}")
    sources = [str(base_path)]

    if override_path:
        override = load_yaml_file(Path(override_path))
        if override:
            raw = deep_merge(raw, override)
            sources.append(str(override_path))
        else:
            logger.warning("Registry override %s is empty or missing", override_path)

    registry = PageRegistry(
        id=raw.get("id", rulebook),
        name=raw.get("name", rulebook),
        source_prefix=raw.get("source_prefix", "FUCR"),
        page_offset=raw.get("page_offset", 2),
        pages=parse_pages(raw.get("pages", {})),
        sources=sources,
    )
    logger.debug("Loaded %d registered pages from %s", len(registry.pages), ", ".join(sources))
    return registry
