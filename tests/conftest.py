"""
Shared fixtures for the grocery classifier test suite.
"""

import json
from types import SimpleNamespace
from typing import Dict, List
from unittest.mock import AsyncMock, Mock, patch

import pytest

from grocery_classifier.config import GroceryClassifierConfig
from grocery_classifier.database.catalog_store import CatalogStore
from grocery_classifier.database.engine import DatabaseManager

GROCERY_ENV_VARS = (
    "GROCERY_DATABASE_URL",
    "GROCERY_MODEL_NAME",
    "GROCERY_AI_TIMEOUT",
    "GROCERY_AI_CONFIDENCE",
    "GROCERY_CACHE_CAPACITY",
    "GROCERY_CACHE_CLEAR_INTERVAL",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep configuration overrides from the developer's shell out of tests."""
    for name in GROCERY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def fake_token_counter():
    """Token counting would otherwise load a tokenizer for every prompt."""
    with patch(
        "grocery_classifier.llm.interactions.token_counter", return_value=100
    ) as counter:
        yield counter


@pytest.fixture
def db_manager():
    config = GroceryClassifierConfig(database_url="sqlite:///:memory:")
    manager = DatabaseManager(config)
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def catalog(db_manager) -> CatalogStore:
    store = CatalogStore(db_manager)
    store.seed_categories()
    return store


def agent_returning(*outputs: str) -> Mock:
    """Build an agent stand-in whose ``run`` yields the given raw outputs in turn."""
    agent = Mock()
    agent.run = AsyncMock(
        side_effect=[SimpleNamespace(output=output) for output in outputs]
    )
    return agent


def classification_output(pairs: Dict[str, str]) -> str:
    return json.dumps(
        [{"product": product, "category": category} for product, category in pairs.items()],
        ensure_ascii=False,
    )


def correction_output(names: List[str]) -> str:
    return json.dumps({"correctedNames": names}, ensure_ascii=False)
