"""
Tests for database manager and engine functionality.
"""

import os
import tempfile

import pytest
from sqlalchemy.pool import StaticPool

from grocery_classifier.config import GroceryClassifierConfig
from grocery_classifier.database.engine import DatabaseManager
from grocery_classifier.database.models import Category, Product
from grocery_classifier.exceptions import StoreError


class TestDatabaseManager:
    """Test DatabaseManager functionality."""

    def test_sqlite_file_initialization(self) -> None:
        """Test SQLite database initialization."""
        with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp_file:
            db_path = tmp_file.name

        try:
            config = GroceryClassifierConfig(database_url=f"sqlite:///{db_path}")
            db_manager = DatabaseManager(config)

            assert db_manager.engine is not None
            assert db_manager.SessionLocal is not None

            db_manager.create_tables()

            with db_manager.get_session() as session:
                category = Category(slug="dairy", name="Piena produkti", icon="🧀", aisle_order=50)
                session.add(category)
                session.flush()

                assert category.id is not None

            db_manager.close()

        finally:
            if os.path.exists(db_path):
                os.unlink(db_path)

    def test_in_memory_sqlite(self, db_manager) -> None:
        """Data written in one session is visible in the next."""
        with db_manager.get_session() as session:
            session.add(Product(name="Piens", normalized_name="piens", category="dairy"))

        with db_manager.get_session() as session:
            products = session.query(Product).all()
            assert len(products) == 1
            assert products[0].name == "Piens"

    def test_session_error_rolls_back(self, db_manager) -> None:
        """A failing block leaves nothing behind and surfaces as StoreError."""
        with pytest.raises(StoreError):
            with db_manager.get_session() as session:
                session.add(Product(name="Piens", normalized_name="piens", category="dairy"))
                session.flush()

                session.add(Product(name="piens!", normalized_name="piens", category="dairy"))
                session.flush()

        with db_manager.get_session() as session:
            assert session.query(Product).count() == 0

    def test_store_error_passes_through_unwrapped(self, db_manager) -> None:
        with pytest.raises(StoreError) as exc_info:
            with db_manager.get_session():
                raise StoreError("catalog offline", operation="lookup")

        assert exc_info.value.operation == "lookup"

    def test_drop_tables(self, db_manager) -> None:
        db_manager.drop_tables()

        with pytest.raises(StoreError):
            with db_manager.get_session() as session:
                session.query(Product).count()

    def test_sqlite_engine_kwargs(self, db_manager) -> None:
        kwargs = db_manager._get_engine_kwargs()

        assert kwargs["poolclass"] is StaticPool
        assert kwargs["connect_args"] == {"check_same_thread": False}

    @pytest.mark.parametrize(
        "database_url,connect_args",
        [
            ("postgresql://grocery@localhost/grocery", None),
            ("mysql+pymysql://grocery@localhost/grocery", {"charset": "utf8mb4"}),
        ],
    )
    def test_server_engine_kwargs(self, db_manager, database_url, connect_args) -> None:
        db_manager.config.database_url = database_url

        kwargs = db_manager._get_engine_kwargs()

        assert "poolclass" not in kwargs
        assert kwargs["pool_pre_ping"] is True
        assert kwargs.get("connect_args") == connect_args

    def test_session_after_close(self) -> None:
        config = GroceryClassifierConfig(database_url="sqlite:///:memory:")
        db_manager = DatabaseManager(config)
        db_manager.close()

        assert db_manager.engine is None
        with pytest.raises(StoreError) as exc_info:
            with db_manager.get_session():
                pass
        assert "not initialized" in str(exc_info.value)

    def test_unreachable_database(self) -> None:
        config = GroceryClassifierConfig(
            database_url="sqlite:////nonexistent-dir/grocery/products.db"
        )

        with pytest.raises(StoreError) as exc_info:
            DatabaseManager(config)
        assert exc_info.value.operation == "initialize_engine"
