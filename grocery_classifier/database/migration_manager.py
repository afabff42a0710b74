"""
Database migration management for the grocery classifier.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect, text

from ..config import GroceryClassifierConfig
from ..exceptions import StoreError
from .engine import DatabaseManager

APPLICATION_TABLES = ("products", "categories")


class MigrationManager:
    """
    Manages database schema versions using Alembic.

    Tables are created from the ORM metadata and the database is stamped with
    the head revision of the bundled migration scripts.
    """

    def __init__(
        self,
        config: GroceryClassifierConfig,
        db_manager: Optional[DatabaseManager] = None,
    ) -> None:
        """Initialize migration manager with configuration."""
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        self.alembic_cfg = self._setup_alembic_config()
        self.logger = logging.getLogger(__name__)

    def _setup_alembic_config(self) -> Config:
        """Set up Alembic configuration."""
        migrations_dir = Path(__file__).parent / "migrations"
        alembic_ini_path = migrations_dir / "alembic.ini"

        if not alembic_ini_path.exists():
            raise StoreError(
                f"Alembic configuration not found at {alembic_ini_path}",
                operation="setup_alembic",
            )

        alembic_cfg = Config(str(alembic_ini_path))
        alembic_cfg.set_main_option("sqlalchemy.url", self.config.database_url)
        alembic_cfg.set_main_option("script_location", str(migrations_dir))

        return alembic_cfg

    def _ensure_version_table(self) -> None:
        with self.db_manager.engine.begin() as connection:
            connection.execute(
                text(
                    "CREATE TABLE IF NOT EXISTS alembic_version (\n"
                    "    version_num VARCHAR(32) NOT NULL PRIMARY KEY\n"
                    ")"
                )
            )

    def _stamp_version(self, revision: str) -> None:
        """Stamp the database with the provided migration revision."""
        self._ensure_version_table()

        with self.db_manager.engine.begin() as connection:
            connection.execute(text("DELETE FROM alembic_version"))
            connection.execute(
                text("INSERT INTO alembic_version (version_num) VALUES (:rev)"),
                {"rev": revision},
            )

    def get_current_revision(self) -> Optional[str]:
        """Return the currently stamped migration revision."""
        if "alembic_version" not in inspect(self.db_manager.engine).get_table_names():
            return None

        with self.db_manager.engine.connect() as connection:
            row = connection.execute(
                text("SELECT version_num FROM alembic_version LIMIT 1")
            ).fetchone()
            return row[0] if row else None

    def get_head_revision(self) -> Optional[str]:
        script_dir = ScriptDirectory.from_config(self.alembic_cfg)
        return script_dir.get_current_head()

    def tables_exist(self) -> bool:
        """Check if the application tables exist."""
        table_names = set(inspect(self.db_manager.engine).get_table_names())
        return all(table in table_names for table in APPLICATION_TABLES)

    def get_pending_migrations(self) -> List[str]:
        """Get list of revisions newer than the stamped one."""
        script_dir = ScriptDirectory.from_config(self.alembic_cfg)
        current_rev = self.get_current_revision()

        return [
            revision.revision
            for revision in script_dir.walk_revisions(
                base=current_rev or "base", head="heads"
            )
            if revision.revision != current_rev
        ]

    def initialize_database(self, create_tables: bool = True) -> Dict[str, Any]:
        """
        Initialize database with proper schema and migration tracking.

        Args:
            create_tables: Whether to create tables if they don't exist

        Returns:
            Dictionary with initialization results
        """
        try:
            results: Dict[str, Any] = {
                "database_url": self.config.database_url,
                "tables_created": False,
                "current_revision": None,
                "pending_migrations": [],
            }

            tables_exist = self.tables_exist()

            if create_tables and not tables_exist:
                self.logger.info("Creating database tables via ORM metadata...")
                self.db_manager.create_tables()
                results["tables_created"] = True
                tables_exist = True

            if tables_exist and self.get_current_revision() is None:
                self._stamp_version(self.get_head_revision())

            results["current_revision"] = self.get_current_revision()
            results["pending_migrations"] = self.get_pending_migrations()

            return results

        except StoreError:
            raise
        except Exception as e:
            raise StoreError(
                f"Failed to initialize database: {str(e)}",
                operation="initialize_database",
            ) from e

    def reset_database(self) -> Dict[str, Any]:
        """
        Drop and recreate all tables.

        WARNING: This will destroy all data!
        """
        self.logger.warning("Resetting database - all data will be lost!")

        self.db_manager.drop_tables()
        self.db_manager.create_tables()
        self._stamp_version(self.get_head_revision())

        return {
            "success": True,
            "current_revision": self.get_current_revision(),
            "message": "Database reset successfully",
        }
