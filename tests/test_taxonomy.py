"""
Tests for the shopping-category taxonomy and category mapping.
"""

import logging

import pytest

from grocery_classifier.exceptions import ConfigurationError
from grocery_classifier.taxonomy import (
    CATEGORY_ALIASES,
    OFFICIAL_CATEGORIES,
    OFFICIAL_SLUGS,
    OTHER_CATEGORY,
    TaxonomyMapper,
    get_official_categories,
    validate_and_map_category,
)


class TestOfficialCategories:
    """Test the static category table."""

    def test_slug_set(self) -> None:
        assert OFFICIAL_SLUGS == {
            "vegetables",
            "fruits",
            "meat",
            "fish",
            "dairy",
            "eggs",
            "bakery",
            "grains",
            "condiments",
            "snacks",
            "ready_meals",
            "beverages",
            "alcohol",
            "household",
            "hygiene",
            "pet",
            "international",
            "construction",
            "other",
        }

    def test_slugs_and_aisles_are_unique(self) -> None:
        slugs = [category.slug for category in OFFICIAL_CATEGORIES]
        aisles = [category.aisle_order for category in OFFICIAL_CATEGORIES]
        assert len(set(slugs)) == len(slugs)
        assert len(set(aisles)) == len(aisles)

    def test_get_official_categories_sorted_by_aisle(self) -> None:
        categories = get_official_categories()
        orders = [category.aisle_order for category in categories]

        assert orders == sorted(orders)
        assert categories[0].slug == "vegetables"
        assert categories[-1].slug == OTHER_CATEGORY

    def test_aliases_only_target_official_slugs(self) -> None:
        assert set(CATEGORY_ALIASES.values()) <= OFFICIAL_SLUGS


class TestValidateAndMapCategory:
    """Test mapping raw category strings onto official slugs."""

    @pytest.mark.parametrize("slug", sorted(OFFICIAL_SLUGS))
    def test_official_slug_passes_through(self, slug) -> None:
        assert validate_and_map_category(slug) == slug

    def test_case_and_whitespace_are_ignored(self) -> None:
        assert validate_and_map_category("  Dairy ") == "dairy"
        assert validate_and_map_category("READY_MEALS") == "ready_meals"

    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("spices", "condiments"),
            ("garšvielas", "condiments"),
            ("wine", "alcohol"),
            ("beer", "alcohol"),
            ("drinks", "beverages"),
            ("dzērieni", "beverages"),
            ("Piena produkti", "dairy"),
            ("unknown", "other"),
        ],
    )
    def test_aliases(self, alias, expected) -> None:
        assert validate_and_map_category(alias) == expected

    def test_unknown_value_falls_back_to_other(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert validate_and_map_category("electronics") == OTHER_CATEGORY
        assert "electronics" in caplog.text

    def test_empty_and_missing_values(self) -> None:
        assert validate_and_map_category("") == OTHER_CATEGORY
        assert validate_and_map_category(None) == OTHER_CATEGORY

    def test_mapping_is_idempotent(self) -> None:
        for raw in ["spices", "Dairy", "electronics", "gaļa", "wine"]:
            mapped = validate_and_map_category(raw)
            assert mapped in OFFICIAL_SLUGS
            assert validate_and_map_category(mapped) == mapped


class TestTaxonomyMapper:
    """Test custom alias tables."""

    def test_extra_aliases(self) -> None:
        mapper = TaxonomyMapper(extra_aliases={"Kafija": "beverages"})

        assert mapper.validate_and_map_category("kafija") == "beverages"
        assert mapper.validate_and_map_category("spices") == "condiments"

    def test_alias_to_unknown_slug_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            TaxonomyMapper(extra_aliases={"gadgets": "electronics"})

        assert exc_info.value.parameter == "category_aliases"
        assert "electronics" in str(exc_info.value)

    def test_is_official(self) -> None:
        mapper = TaxonomyMapper()

        assert mapper.is_official("dairy")
        assert not mapper.is_official("spices")
