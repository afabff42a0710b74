"""
Persistent product catalog operations.

The catalog maps normalized product names to their resolved category. All
reads for a request are issued as one bulk query and every write call runs in
a single transaction, so a failure never leaves a partial write behind.
"""

import csv
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from sqlalchemy import func, or_, select, update

from ..exceptions import StoreError, ValidationError
from ..taxonomy import OFFICIAL_CATEGORIES, OFFICIAL_SLUGS, validate_and_map_category
from ..text_processing.normalizer import normalize
from .engine import DatabaseManager
from .models import SOURCE_AI, SOURCE_MANUAL, VALID_SOURCES, Category, Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """Detached snapshot of a catalog row."""

    id: int
    name: str
    normalized_name: str
    category: str
    confidence: float
    source: str
    usage_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Product) -> "CatalogEntry":
        return cls(
            id=row.id,
            name=row.name,
            normalized_name=row.normalized_name,
            category=row.category,
            confidence=row.confidence,
            source=row.source,
            usage_count=row.usage_count,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@dataclass(frozen=True)
class ClassificationWrite:
    """One classification to upsert into the catalog."""

    name: str
    normalized_name: str
    category: str
    confidence: float
    source: str


class CatalogStore:
    """
    Product catalog repository.

    Features:
    - Bulk lookup by normalized key
    - Bulk usage counting
    - Upserts where manual corrections always win and AI rows are insert-only
    - Suggestion and category listing
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self.db_manager = db_manager

    def batch_lookup(self, keys: Iterable[str]) -> Dict[str, CatalogEntry]:
        """
        Look up many normalized keys with a single query.

        Args:
            keys: Normalized product names

        Returns:
            Mapping of normalized key to catalog entry for every key found
        """
        unique_keys = sorted(set(keys))
        if not unique_keys:
            return {}

        with self.db_manager.get_session() as session:
            rows = session.scalars(
                select(Product).where(Product.normalized_name.in_(unique_keys))
            ).all()
            entries = {row.normalized_name: CatalogEntry.from_row(row) for row in rows}

        logger.debug(f"Catalog lookup: {len(entries)}/{len(unique_keys)} keys found")
        return entries

    def batch_increment_usage(self, ids: Sequence[int]) -> int:
        """
        Increment usage_count and refresh updated_at for all ids in one statement.

        Returns:
            Number of rows updated
        """
        unique_ids = sorted(set(ids))
        if not unique_ids:
            return 0

        with self.db_manager.get_session() as session:
            result = session.execute(
                update(Product)
                .where(Product.id.in_(unique_ids))
                .values(usage_count=Product.usage_count + 1, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            updated = result.rowcount

        logger.debug(f"Incremented usage for {updated} products")
        return updated

    def upsert_classification(
        self,
        name: str,
        normalized_name: str,
        category: str,
        confidence: float,
        source: str,
    ) -> CatalogEntry:
        """Upsert a single classification. See ``upsert_classifications``."""
        entries = self.upsert_classifications(
            [
                ClassificationWrite(
                    name=name,
                    normalized_name=normalized_name,
                    category=category,
                    confidence=confidence,
                    source=source,
                )
            ]
        )
        return entries[normalized_name]

    def upsert_classifications(
        self, writes: Sequence[ClassificationWrite]
    ) -> Dict[str, CatalogEntry]:
        """
        Upsert several classifications in one transaction.

        A key that does not exist yet is inserted. On conflict the row is only
        overwritten when the incoming source is manual; AI writes never
        replace an existing classification.

        Args:
            writes: Classifications to store; categories must already be
                official slugs

        Returns:
            Mapping of normalized key to the row as stored after the write
        """
        if not writes:
            return {}

        for write in writes:
            self._check_write(write)

        keys = sorted({write.normalized_name for write in writes})

        with self.db_manager.get_session() as session:
            existing = {
                row.normalized_name: row
                for row in session.scalars(
                    select(Product).where(Product.normalized_name.in_(keys))
                ).all()
            }

            inserted = 0
            overwritten = 0
            for write in writes:
                row = existing.get(write.normalized_name)
                if row is None:
                    row = Product(
                        name=write.name,
                        normalized_name=write.normalized_name,
                        category=write.category,
                        confidence=write.confidence,
                        source=write.source,
                        usage_count=1,
                    )
                    session.add(row)
                    existing[write.normalized_name] = row
                    inserted += 1
                elif write.source == SOURCE_MANUAL:
                    row.category = write.category
                    row.confidence = 1.0
                    row.source = SOURCE_MANUAL
                    row.updated_at = func.now()
                    overwritten += 1

            session.flush()
            # Refresh server-side defaults and func.now() values before detaching.
            for row in existing.values():
                session.refresh(row)
            entries = {key: CatalogEntry.from_row(row) for key, row in existing.items()}

        logger.debug(
            f"Catalog upsert: {inserted} inserted, {overwritten} overwritten, "
            f"{len(writes) - inserted - overwritten} unchanged"
        )
        return entries

    def _check_write(self, write: ClassificationWrite) -> None:
        """Enforce catalog invariants before anything is written."""
        if write.source not in VALID_SOURCES:
            raise ValidationError(
                f"Unknown classification source '{write.source}'",
                field="source",
                value=write.source,
            )
        if write.normalized_name != normalize(write.name):
            raise ValidationError(
                "normalized_name does not match the normalized product name",
                field="normalized_name",
                value=write.normalized_name,
            )
        if not write.normalized_name:
            raise ValidationError(
                "Product name normalizes to an empty key", field="name", value=write.name
            )
        if write.category not in OFFICIAL_SLUGS:
            raise ValidationError(
                f"Category '{write.category}' is not an official slug",
                field="category",
                value=write.category,
            )
        if write.source == SOURCE_MANUAL and write.confidence != 1.0:
            raise ValidationError(
                "Manual classifications must have confidence 1.0",
                field="confidence",
                value=write.confidence,
            )
        if write.source == SOURCE_AI and not (0.0 <= write.confidence < 1.0):
            raise ValidationError(
                "AI classifications must have confidence in [0.0, 1.0)",
                field="confidence",
                value=write.confidence,
            )

    def get_by_name(self, name: str) -> Optional[CatalogEntry]:
        """Return the catalog entry for a raw product name, if any."""
        return self.batch_lookup([normalize(name)]).get(normalize(name))

    def count_products(self) -> int:
        with self.db_manager.get_session() as session:
            return session.scalar(select(func.count()).select_from(Product)) or 0

    def list_suggestions(
        self, query: Optional[str] = None, limit: int = 10
    ) -> List[CatalogEntry]:
        """
        List frequently used products.

        Args:
            query: Optional text matched as a substring of the raw name or,
                normalized, of the normalized name
            limit: Maximum number of rows

        Returns:
            Rows ordered by usage_count descending, then name ascending
        """
        statement = select(Product).where(Product.usage_count > 0)

        if query:
            # User text is matched literally; % and _ are not wildcards.
            conditions = [Product.name.contains(query, autoescape=True)]
            normalized_query = normalize(query)
            if normalized_query:
                conditions.append(
                    Product.normalized_name.contains(normalized_query, autoescape=True)
                )
            statement = statement.where(or_(*conditions))

        statement = statement.order_by(
            Product.usage_count.desc(), Product.name.asc()
        ).limit(limit)

        with self.db_manager.get_session() as session:
            return [CatalogEntry.from_row(row) for row in session.scalars(statement)]

    def list_categories(self) -> List[Category]:
        """Return all category reference rows ordered by aisle."""
        with self.db_manager.get_session() as session:
            return list(
                session.scalars(
                    select(Category).order_by(Category.aisle_order, Category.slug)
                )
            )

    def seed_categories(self) -> int:
        """
        Insert any official category missing from the reference table.

        Returns:
            Number of categories inserted
        """
        with self.db_manager.get_session() as session:
            present = set(session.scalars(select(Category.slug)).all())
            missing = [
                definition
                for definition in OFFICIAL_CATEGORIES
                if definition.slug not in present
            ]
            for definition in missing:
                session.add(
                    Category(
                        slug=definition.slug,
                        name=definition.name,
                        icon=definition.icon,
                        aisle_order=definition.aisle_order,
                    )
                )

        if missing:
            logger.info(f"Seeded {len(missing)} categories")
        return len(missing)

    def import_product_dictionary(self, path: Union[str, Path]) -> int:
        """
        Load a curated ``term,slug`` CSV into the catalog.

        The first line is a header. Curated terms are stored as manual rows
        but only for keys the catalog does not know yet, so an import never
        overrides earlier corrections.

        Returns:
            Number of products inserted
        """
        csv_path = Path(path)
        try:
            with csv_path.open(newline="", encoding="utf-8") as handle:
                reader = csv.reader(handle)
                next(reader, None)
                terms: Dict[str, ClassificationWrite] = {}
                for line in reader:
                    if len(line) < 2 or not line[0].strip() or not line[1].strip():
                        continue
                    term = line[0].strip()
                    key = normalize(term)
                    if not key or key in terms:
                        continue
                    terms[key] = ClassificationWrite(
                        name=term,
                        normalized_name=key,
                        category=validate_and_map_category(line[1]),
                        confidence=1.0,
                        source=SOURCE_MANUAL,
                    )
        except OSError as e:
            raise StoreError(
                f"Failed to read product dictionary {csv_path}: {e}",
                operation="import_product_dictionary",
            ) from e

        known = self.batch_lookup(terms.keys())
        new_writes = [write for key, write in terms.items() if key not in known]
        self.upsert_classifications(new_writes)

        logger.info(
            f"Imported {len(new_writes)} products from {csv_path.name} "
            f"({len(known)} already known)"
        )
        return len(new_writes)
