"""
Fixed shopping-category taxonomy and category validation.

The taxonomy is static reference data: every category value that enters or
leaves the classifier is passed through ``validate_and_map_category`` before
it is trusted, so stored rows, manual corrections and AI output all end up in
the official slug set.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "other"


@dataclass(frozen=True)
class CategoryDefinition:
    """Static description of one shopping category."""

    slug: str
    name: str
    icon: str
    aisle_order: int


# Ordered by store walk (aisle_order); names are the Latvian display labels.
OFFICIAL_CATEGORIES: Tuple[CategoryDefinition, ...] = (
    CategoryDefinition("vegetables", "Dārzeņi", "🥕", 10),
    CategoryDefinition("fruits", "Augļi", "🍎", 20),
    CategoryDefinition("meat", "Gaļa", "🥩", 30),
    CategoryDefinition("fish", "Zivis", "🐟", 40),
    CategoryDefinition("dairy", "Piena produkti", "🧀", 50),
    CategoryDefinition("eggs", "Olas", "🥚", 55),
    CategoryDefinition("bakery", "Maize", "🍞", 60),
    CategoryDefinition("grains", "Graudi", "🌾", 70),
    CategoryDefinition("condiments", "Garšvielas", "🧂", 75),
    CategoryDefinition("snacks", "Uzkodas", "🍫", 80),
    CategoryDefinition("ready_meals", "Gatavie ēdieni", "🧊", 90),
    CategoryDefinition("beverages", "Dzērieni", "🥤", 100),
    CategoryDefinition("alcohol", "Alkohols", "🍷", 105),
    CategoryDefinition("household", "Mājsaimniecība", "🧴", 200),
    CategoryDefinition("hygiene", "Higiēna", "🧼", 210),
    CategoryDefinition("pet", "Mājdzīvniekiem", "🐾", 220),
    CategoryDefinition("international", "Starptautiskie", "🌍", 230),
    CategoryDefinition("construction", "Būvniecība", "🧱", 240),
    CategoryDefinition(OTHER_CATEGORY, "Citi", "📦", 999),
)

OFFICIAL_SLUGS = frozenset(category.slug for category in OFFICIAL_CATEGORIES)

# Synonyms the model (or a client) tends to produce instead of official slugs.
CATEGORY_ALIASES: Dict[str, str] = {
    # English synonyms
    "spices": "condiments",
    "seasonings": "condiments",
    "herbs": "condiments",
    "sauces": "condiments",
    "vegetable": "vegetables",
    "produce": "vegetables",
    "fruit": "fruits",
    "berries": "fruits",
    "poultry": "meat",
    "sausages": "meat",
    "seafood": "fish",
    "milk": "dairy",
    "cheese": "dairy",
    "egg": "eggs",
    "bread": "bakery",
    "pastry": "bakery",
    "cereals": "grains",
    "pasta": "grains",
    "sweets": "snacks",
    "candy": "snacks",
    "frozen": "ready_meals",
    "frozen_food": "ready_meals",
    "drinks": "beverages",
    "beverage": "beverages",
    "wine": "alcohol",
    "beer": "alcohol",
    "spirits": "alcohol",
    "alcoholic_beverages": "alcohol",
    "cleaning": "household",
    "personal_care": "hygiene",
    "cosmetics": "hygiene",
    "pets": "pet",
    "pet_food": "pet",
    "hardware": "construction",
    "unknown": OTHER_CATEGORY,
    "misc": OTHER_CATEGORY,
    # Latvian category names
    "dārzeņi": "vegetables",
    "augļi": "fruits",
    "gaļa": "meat",
    "zivis": "fish",
    "piena produkti": "dairy",
    "olas": "eggs",
    "maize": "bakery",
    "graudi": "grains",
    "garšvielas": "condiments",
    "uzkodas": "snacks",
    "saldumi": "snacks",
    "gatavie ēdieni": "ready_meals",
    "dzērieni": "beverages",
    "alkohols": "alcohol",
    "mājsaimniecība": "household",
    "higiēna": "hygiene",
    "mājdzīvniekiem": "pet",
    "starptautiskie": "international",
    "būvniecība": "construction",
    "citi": OTHER_CATEGORY,
}


def _validate_alias_table(aliases: Mapping[str, str]) -> Dict[str, str]:
    """Check that every alias points at an official slug.

    Raises:
        ConfigurationError: If an alias maps outside the taxonomy
    """
    validated: Dict[str, str] = {}
    for alias, target in aliases.items():
        if target not in OFFICIAL_SLUGS:
            raise ConfigurationError(
                f"Alias '{alias}' maps to unknown category '{target}'",
                parameter="category_aliases",
                suggested_fix=f"Map aliases only to: {sorted(OFFICIAL_SLUGS)}",
            )
        validated[alias.lower().strip()] = target
    return validated


class TaxonomyMapper:
    """
    Maps arbitrary category strings onto the official slug set.

    The mapping is total and idempotent: official slugs pass through, known
    aliases are translated, and anything else becomes ``other``.
    """

    def __init__(self, extra_aliases: Optional[Mapping[str, str]] = None) -> None:
        aliases = dict(CATEGORY_ALIASES)
        if extra_aliases:
            aliases.update(extra_aliases)
        self.aliases = _validate_alias_table(aliases)

    def validate_and_map_category(self, raw: Optional[str]) -> str:
        """Return the official slug for a raw category value."""
        candidate = (raw or "").lower().strip()

        if candidate in OFFICIAL_SLUGS:
            return candidate

        mapped = self.aliases.get(candidate)
        if mapped is not None:
            logger.info(f"Mapped category alias '{candidate}' -> '{mapped}'")
            return mapped

        logger.warning(
            f"Unknown category '{raw}', falling back to '{OTHER_CATEGORY}'"
        )
        return OTHER_CATEGORY

    def is_official(self, slug: str) -> bool:
        return slug in OFFICIAL_SLUGS


# Built at import so a broken alias table fails immediately.
_default_mapper = TaxonomyMapper()


def validate_and_map_category(raw: Optional[str]) -> str:
    """Map a raw category value onto the official taxonomy."""
    return _default_mapper.validate_and_map_category(raw)


def get_official_categories() -> List[CategoryDefinition]:
    """Return the official categories ordered by aisle."""
    return sorted(OFFICIAL_CATEGORIES, key=lambda category: category.aisle_order)
