"""
Manual classification learning.

User corrections are stored as manual catalog rows with confidence 1.0 and
replace any earlier AI classification for the same normalized name. The
response cache is left alone; stale cached responses expire with its next
clear.
"""

import logging

from ..database.catalog_store import CatalogStore
from ..database.models import SOURCE_MANUAL
from ..exceptions import ValidationError
from ..models import LearningAck
from ..taxonomy import validate_and_map_category
from ..text_processing.normalizer import normalize

logger = logging.getLogger(__name__)


class LearningWriter:
    """Stores manual category corrections in the catalog."""

    def __init__(self, catalog: CatalogStore) -> None:
        self.catalog = catalog

    def learn(self, raw_name: str, correct_category: str) -> LearningAck:
        """
        Record a manual classification.

        Args:
            raw_name: Product name as the user typed it
            correct_category: Category chosen by the user; mapped onto the
                official taxonomy first

        Returns:
            Acknowledgement carrying the stored category

        Raises:
            ValidationError: If the name or category is blank
            StoreError: If the catalog write fails
        """
        if not isinstance(raw_name, str) or not normalize(raw_name):
            raise ValidationError(
                "Product name is required", field="product", value=raw_name
            )
        if not isinstance(correct_category, str) or not correct_category.strip():
            raise ValidationError(
                "Correct category is required",
                field="correctCategory",
                value=correct_category,
            )

        category = validate_and_map_category(correct_category)
        entry = self.catalog.upsert_classification(
            name=raw_name.strip(),
            normalized_name=normalize(raw_name),
            category=category,
            confidence=1.0,
            source=SOURCE_MANUAL,
        )

        logger.info(f"Learned: '{raw_name}' -> '{entry.category}'")
        return LearningAck(success=True, product=raw_name, category=entry.category)
