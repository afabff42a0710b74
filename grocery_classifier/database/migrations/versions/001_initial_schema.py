"""Initial catalog schema

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create products and categories tables."""

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("normalized_name", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "confidence >= 0 AND confidence <= 1", name="valid_confidence_range"
        ),
        sa.CheckConstraint("source IN ('ai', 'manual')", name="valid_product_source"),
        sa.CheckConstraint("usage_count >= 1", name="positive_usage_count"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("normalized_name"),
    )
    op.create_index("idx_products_usage_count", "products", ["usage_count"])
    op.create_index("idx_products_category", "products", ["category"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(length=16), nullable=False),
        sa.Column("slug", sa.String(length=64), nullable=False),
        sa.Column("aisle_order", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("idx_categories_aisle_order", "categories", ["aisle_order"])


def downgrade() -> None:
    """Drop all tables."""

    op.drop_index("idx_categories_aisle_order", table_name="categories")
    op.drop_table("categories")
    op.drop_index("idx_products_category", table_name="products")
    op.drop_index("idx_products_usage_count", table_name="products")
    op.drop_table("products")
