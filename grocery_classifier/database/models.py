"""SQLAlchemy database models for the grocery classifier."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    validates,
)
from sqlalchemy.sql import func

from ..exceptions import ValidationError
from ..taxonomy import OFFICIAL_SLUGS

SOURCE_AI = "ai"
SOURCE_MANUAL = "manual"
VALID_SOURCES = (SOURCE_AI, SOURCE_MANUAL)


class Base(DeclarativeBase):
    """Declarative base class for ORM models."""

    pass


class Product(Base):
    """
    Catalog entry mapping a product name to its resolved category.

    ``normalized_name`` is the lookup key and is unique, so every spelling
    that normalizes to the same key shares one row. ``usage_count`` grows
    with every catalog hit and feeds the suggestion list.
    """

    __tablename__ = "products"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Core fields
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    normalized_name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)

    # Provenance
    confidence: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    source: Mapped[str] = mapped_column(String(16), default=SOURCE_AI, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "confidence >= 0 AND confidence <= 1", name="valid_confidence_range"
        ),
        CheckConstraint("source IN ('ai', 'manual')", name="valid_product_source"),
        CheckConstraint("usage_count >= 1", name="positive_usage_count"),
        Index("idx_products_usage_count", "usage_count"),
        Index("idx_products_category", "category"),
    )

    @validates("category")
    def validate_category(self, key: str, category: str) -> str:
        """Only official taxonomy slugs may be stored."""
        if category not in OFFICIAL_SLUGS:
            raise ValidationError(
                f"Category must be an official slug, got '{category}'",
                field="category",
                value=category,
            )
        return category

    @validates("source")
    def validate_source(self, key: str, source: str) -> str:
        if source not in VALID_SOURCES:
            raise ValidationError(
                f"Source must be one of {VALID_SOURCES}, got '{source}'",
                field="source",
                value=source,
            )
        return source

    @validates("name")
    def validate_name(self, key: str, name: str) -> str:
        """Validate product name."""
        if not name or not name.strip():
            raise ValidationError("Product name cannot be empty", field="name", value=name)
        return name.strip()

    def __repr__(self) -> str:
        return (
            f"<Product(id={self.id}, name='{self.name}', category='{self.category}', "
            f"source='{self.source}', usage_count={self.usage_count})>"
        )


class Category(Base):
    """Static shopping category reference row, ordered by aisle."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str] = mapped_column(String(16), nullable=False)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    aisle_order: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (Index("idx_categories_aisle_order", "aisle_order"),)

    def __repr__(self) -> str:
        return f"<Category(slug='{self.slug}', aisle_order={self.aisle_order})>"
