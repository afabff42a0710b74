"""
Database module for the grocery classifier.
"""

from .catalog_store import CatalogEntry, CatalogStore, ClassificationWrite
from .engine import DatabaseManager
from .migration_manager import MigrationManager
from .models import SOURCE_AI, SOURCE_MANUAL, Base, Category, Product

__all__ = [
    "Base",
    "Category",
    "Product",
    "SOURCE_AI",
    "SOURCE_MANUAL",
    "CatalogEntry",
    "CatalogStore",
    "ClassificationWrite",
    "DatabaseManager",
    "MigrationManager",
]
