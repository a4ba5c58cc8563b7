"""Rulebook import driver.

For each registered page: tokenize it, run the category's grammar, classify
the outcome (success / failure / ambiguous) and, on success, hand back a
deferred ``save(asset_dir)`` action. Pages are processed one at a time over
a single opened document and each page is released when its parse is done.
"""

import logging
import time
from functools import partial
from typing import Optional

from .accessory_page import accessories_page
from .armor_page import armor_page
from .bestiary_page import bestiary_page
from .combinators import Parser
from .consumable_page import consumables_page
from .models import Category, ImportConfig, PageEntry, PageReport, WeaponCategory
from .resolve import parse_page
from .rulebook_config import PageRegistry, load_registry
from .save import save_records
from .shield_page import shield_page
from .tokenize import PDFTokenizer
from .utils import ensure_dir, parse_page_range, write_manifest
from .weapon_page import basic_weapons_grammar, rare_weapons_grammar

logger = logging.getLogger(__name__)

FIXED_GRAMMARS: dict[Category, Parser] = {
    Category.CONSUMABLES: consumables_page,
    Category.ARMOR: armor_page,
    Category.SHIELDS: shield_page,
    Category.ACCESSORIES: accessories_page,
    Category.BESTIARY: bestiary_page,
}


def grammar_for(category: Category, fallback: Optional[WeaponCategory] = WeaponCategory.ARCANE) -> Parser:
    """The page grammar for a category.

    Weapon grammars are built per call so the category fallback can be
    overridden (``None`` rejects unknown category titles).
    """
    if category is Category.BASIC_WEAPONS:
        return basic_weapons_grammar(fallback)
    if category is Category.RARE_WEAPONS:
        return rare_weapons_grammar(fallback)
    return FIXED_GRAMMARS[category]


def _dedupe_errors(errors) -> list[dict]:
    seen = []
    for error in errors:
        entry = error.as_dict()
        if entry not in seen:
            seen.append(entry)
    return seen


class RulebookImporter:
    """Drives page grammars over a rulebook PDF."""

    def __init__(
        self,
        config: ImportConfig,
        tokenizer: Optional[PDFTokenizer] = None,
        registry: Optional[PageRegistry] = None,
    ):
        """
        Args:
            config: Import configuration.
            tokenizer: Page tokenizer; defaults to one over ``config.pdf_path``.
            registry: Page registry; defaults to the bundled one for
                ``config.rulebook`` merged with ``config.registry_path``.
        """
        self.config = config
        self.tokenizer = tokenizer or PDFTokenizer(config.pdf_path)
        self.registry = registry or load_registry(config.rulebook, config.registry_path or None)
        fallback = config.weapon_category_fallback
        self.fallback = WeaponCategory(fallback) if fallback else None

    def source_for(self, page: int) -> str:
        """Provenance tag for a PDF page: the prefix plus the printed page number."""
        prefix = self.config.source_prefix or self.registry.source_prefix
        offset = self.config.page_offset
        if offset is None:
            offset = self.registry.page_offset
        return f"{prefix}{page - offset}"

    def pages(self) -> list[int]:
        """Registered pages selected by ``config.pages`` (all when unset)."""
        return parse_page_range(self.config.pages or "all", self.registry.pages)

    def import_page(self, entry: PageEntry) -> PageReport:
        """Parse one registered page. The tokenizer must be open."""
        grammar = grammar_for(entry.category, self.fallback)
        source = self.source_for(entry.page)

        with self.tokenizer.page(entry.page) as tokens:
            parsed = parse_page(grammar, tokens)

        report = PageReport(
            page=entry.page,
            category=entry.category,
            status=parsed.status.value,
            source=source,
            count=parsed.count,
            errors=_dedupe_errors(parsed.errors),
        )
        if parsed.ok:
            records = parsed.value
            report.records = [r.name for r in records]
            report.save = partial(
                save_records, records, entry.category, source, list(entry.folders),
            )
            logger.info("Page %d (%s): %d records", entry.page, entry.category.value, len(records))
        elif report.status == "ambiguous":
            logger.warning("Page %d (%s): %d complete parses", entry.page, entry.category.value, parsed.count)
        else:
            logger.warning("Page %d (%s): no complete parse", entry.page, entry.category.value)
            for error in report.errors[:5]:
                logger.debug("  expected %s, found %s", error["message"], error["found"])
        return report

    def check(self) -> list[PageReport]:
        """Parse every selected page without saving."""
        reports = []
        with self.tokenizer:
            for page in self.pages():
                reports.append(self.import_page(self.registry.entry(page)))
        return reports

    def run(self, save: bool = True) -> dict:
        """Parse every selected page, save the successes and write a summary.

        Returns:
            Dict with output_dir, per-status counts, saved files, pages
            (one report dict per page) and elapsed seconds.
        """
        output_dir = ensure_dir(self.config.get_output_dir())
        logger.info("Importing %s into %s", self.config.pdf_path, output_dir)
        t0 = time.time()

        reports = self.check()
        saved: list[str] = []
        if save:
            for report in reports:
                if report.ok:
                    saved.append(str(report.save(output_dir)))

        counts = {"success": 0, "failure": 0, "ambiguous": 0}
        for report in reports:
            counts[report.status] += 1

        summary = {
            "pdf_path": self.config.pdf_path,
            "output_dir": str(output_dir),
            "rulebook": self.registry.id,
            "counts": counts,
            "saved": saved,
            "pages": [r.as_dict() for r in reports],
            "elapsed": round(time.time() - t0, 2),
        }
        write_manifest(output_dir / "import_summary.json", summary)

        logger.info(
            "Import complete: %d ok, %d failed, %d ambiguous",
            counts["success"], counts["failure"], counts["ambiguous"],
        )
        return summary
