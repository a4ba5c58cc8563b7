"""
Shared pytest fixtures for all tests.
"""

import pytest
from pathlib import Path

# Add the repository root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from fabula_import.ingest.models import Category, PageEntry
from fabula_import.ingest.rulebook_config import PageRegistry
from tests.fixtures import tokens as pages
from tests.fixtures.tokenizer import FakeTokenizer


# =============================================================================
# Page Fixtures
# =============================================================================

SYNTHETIC_PAGES = {
    108: (Category.CONSUMABLES, pages.consumables_page, ["Equipment", "Consumables"]),
    134: (Category.BASIC_WEAPONS, pages.basic_weapons_page, ["Equipment", "Weapons", "Basic"]),
    136: (Category.ARMOR, pages.armor_page, ["Equipment", "Armors", "Basic"]),
    137: (Category.SHIELDS, pages.shield_page, ["Equipment", "Shields", "Basic"]),
    276: (Category.RARE_WEAPONS, pages.rare_weapons_page, ["Equipment", "Weapons", "Rare"]),
    289: (Category.ACCESSORIES, pages.accessories_page, ["Equipment", "Accessories"]),
    341: (Category.BESTIARY, pages.bestiary_page, ["Bestiary"]),
}


@pytest.fixture
def synthetic_registry():
    """Registry covering one synthetic page per category."""
    return PageRegistry(
        id="synthetic",
        name="Synthetic Rulebook",
        source_prefix="FUCR",
        page_offset=2,
        pages={
            number: PageEntry(page=number, category=category, folders=list(folders))
            for number, (category, _, folders) in SYNTHETIC_PAGES.items()
        },
    )


@pytest.fixture
def fake_tokenizer():
    """Tokenizer serving a well-formed synthetic page for each category."""
    return FakeTokenizer({
        number: build() for number, (_, build, _) in SYNTHETIC_PAGES.items()
    })
