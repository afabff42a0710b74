"""
Database engine and connection management for the grocery classifier.
"""

from typing import Optional, Dict, Any
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base
from ..exceptions import StoreError
from ..config import GroceryClassifierConfig


class DatabaseManager:
    """
    Database connection and session management.

    Handles database initialization and transactional sessions. Failures are
    reported as ``StoreError`` and never retried.
    """

    def __init__(self, config: GroceryClassifierConfig):
        """Initialize database manager with configuration."""
        self.config = config
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

        self._initialize_engine()

    def _initialize_engine(self):
        """Initialize SQLAlchemy engine with appropriate settings."""
        try:
            engine_kwargs = self._get_engine_kwargs()

            self.engine = create_engine(self.config.database_url, **engine_kwargs)

            # expire_on_commit=False keeps row attributes readable after the
            # session closes; callers work with detached snapshots.
            self.SessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
                bind=self.engine,
            )

            self._test_connection()

        except Exception as e:
            raise StoreError(
                f"Failed to initialize database engine: {str(e)}",
                operation="initialize_engine",
            ) from e

    def _get_engine_kwargs(self) -> Dict[str, Any]:
        """Get engine configuration based on database type."""
        url_lower = self.config.database_url.lower()

        if url_lower.startswith("sqlite"):
            # One shared connection so in-memory catalogs survive across sessions.
            return {
                "echo": False,
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }

        engine_kwargs: Dict[str, Any] = {
            "echo": False,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }
        if url_lower.startswith("mysql"):
            # Latvian product names need 4-byte-safe UTF-8.
            engine_kwargs["connect_args"] = {"charset": "utf8mb4"}
        return engine_kwargs

    def _test_connection(self):
        """Test database connection."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            raise StoreError(
                f"Database connection test failed: {str(e)}",
                operation="test_connection",
            ) from e

    def create_tables(self, use_migrations: bool = False):
        """
        Create all database tables and indexes.

        Args:
            use_migrations: If True, use migration system instead of direct creation
        """
        try:
            if use_migrations:
                # Import here to avoid circular imports
                from .migration_manager import MigrationManager

                migration_manager = MigrationManager(self.config, db_manager=self)
                migration_manager.initialize_database(create_tables=True)
            else:
                Base.metadata.create_all(bind=self.engine)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(
                f"Failed to create database tables: {str(e)}", operation="create_tables"
            ) from e

    def drop_tables(self):
        """Drop all database tables (for testing/cleanup)."""
        try:
            Base.metadata.drop_all(bind=self.engine)
        except Exception as e:
            raise StoreError(
                f"Failed to drop database tables: {str(e)}", operation="drop_tables"
            ) from e

    @contextmanager
    def get_session(self):
        """
        Get a database session with automatic cleanup and error handling.

        The session commits when the block exits normally and rolls back
        everything otherwise, so one block is one all-or-nothing write.

        Usage:
            with db_manager.get_session() as session:
                # Use session here
                pass
        """
        if not self.SessionLocal:
            raise StoreError("Database not initialized", operation="get_session")

        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except StoreError:
            session.rollback()
            raise
        except Exception as e:
            session.rollback()
            raise StoreError(
                f"Database session error: {str(e)}", operation="session_operation"
            ) from e
        finally:
            session.close()

    def close(self):
        """Close database connections and cleanup resources."""
        if self.engine:
            self.engine.dispose()
            self.engine = None
            self.SessionLocal = None
