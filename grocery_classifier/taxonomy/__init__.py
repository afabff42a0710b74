"""
Shopping-category taxonomy for the grocery classifier.
"""

from .categories import (
    CATEGORY_ALIASES,
    OFFICIAL_CATEGORIES,
    OFFICIAL_SLUGS,
    OTHER_CATEGORY,
    CategoryDefinition,
    TaxonomyMapper,
    get_official_categories,
    validate_and_map_category,
)

__all__ = [
    "CATEGORY_ALIASES",
    "OFFICIAL_CATEGORIES",
    "OFFICIAL_SLUGS",
    "OTHER_CATEGORY",
    "CategoryDefinition",
    "TaxonomyMapper",
    "get_official_categories",
    "validate_and_map_category",
]
