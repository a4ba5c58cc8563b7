"""Shared utility functions for the import pipeline."""

import json
import re
import unicodedata
from pathlib import Path
from typing import Any, Iterable


def slugify(text: str) -> str:
    """Convert text to a file-name-safe slug.

    >>> slugify("Bronze Sword of Ága")
    'bronze_sword_of_aga'
    """
    decomposed = unicodedata.normalize("NFD", text)
    slug = "".join(c for c in decomposed if not unicodedata.combining(c)).lower().strip()
    slug = re.sub(r"[^a-z0-9\s_-]", "", slug)
    slug = re.sub(r"[\s_-]+", "_", slug)
    return slug.strip("_") or "untitled"


def parse_page_range(spec: str, available: Iterable[int]) -> list[int]:
    """Parse a page range specification, keeping only available pages.

    Supports: "1-5", "1,3,5", "1-3,7-9", "all".

    >>> parse_page_range("134-136,289", [108, 134, 135, 136, 137, 289])
    [134, 135, 136, 289]
    """
    available = sorted(set(available))
    if spec.strip().lower() == "all":
        return available

    wanted: set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_s, end_s = part.split("-", 1)
            start, end = int(start_s.strip()), int(end_s.strip())
            if start > end:
                raise ValueError(f"Bad page range: {part}")
            wanted.update(range(start, end + 1))
        else:
            wanted.add(int(part))

    return [p for p in available if p in wanted]


def write_manifest(path: Path, data: Any) -> None:
    """Write a JSON manifest file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def read_manifest(path: Path) -> Any:
    """Read a JSON manifest file."""
    return json.loads(path.read_text(encoding="utf-8"))


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path
