"""
Core GroceryClassifier class providing the main public API.

This module ties the normalizer, product catalog, taxonomy mapper, AI
classifier, learning writer and response cache into one request flow.
"""

import asyncio
import logging
import time
from pathlib import Path
from types import TracebackType
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from pydantic_ai import Agent

from .classification.inflight import InFlightRegistry
from .classification.learning import LearningWriter
from .classification.response_cache import ResponseCache
from .config import GroceryClassifierConfig
from .database.catalog_store import CatalogEntry, CatalogStore, ClassificationWrite
from .database.engine import DatabaseManager
from .database.models import SOURCE_AI
from .exceptions import AIError, ClassificationError, StoreError, ValidationError
from .llm.agents import AgentFactory
from .llm.interactions import classify_products_with_llm, correct_names_with_llm
from .llm.schemas import ModelConfiguration
from .models import (
    CategoryInfo,
    ClassificationResponse,
    LearningAck,
    ProductClassification,
    ProductSuggestion,
)
from .taxonomy import validate_and_map_category
from .text_processing.normalizer import normalize

logger = logging.getLogger(__name__)

# (category, confidence, source) resolved for one normalized key
Resolution = Tuple[str, float, str]


class GroceryClassifier:
    """
    Resolves free-text grocery item names into shopping categories.

    Features:
    - Diacritic-insensitive catalog lookup with one query per batch
    - LLM fallback for unknown products, de-duplicated across concurrent requests
    - Taxonomy validation of every stored, learned and generated category
    - Manual corrections that always override AI classifications
    - Bounded, periodically cleared response cache
    - All-or-nothing failure semantics per request
    """

    def __init__(
        self,
        database_url: str,
        model_name: str = "openai:gpt-4o-mini",
        ai_confidence: float = 0.8,
        ai_timeout_seconds: float = 30.0,
        cache_capacity: int = 1000,
        cache_clear_interval_seconds: float = 3600.0,
        use_migrations: bool = False,
        classification_agent: Optional[Agent] = None,
        correction_agent: Optional[Agent] = None,
        clock: Callable[[], float] = time.monotonic,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the classifier.

        Args:
            database_url: Database connection URL
            model_name: LLM model in ``provider:model`` form
            ai_confidence: Confidence stored for AI classifications
            ai_timeout_seconds: Upper bound for one LLM call
            cache_capacity: Maximum number of cached responses
            cache_clear_interval_seconds: Interval after which the cache is emptied
            use_migrations: Create the schema through the migration manager
            classification_agent: Pre-built agent for product classification
            correction_agent: Pre-built agent for name correction
            clock: Monotonic clock driving the cache clear interval
            **kwargs: Additional configuration options
        """
        self.config = GroceryClassifierConfig(
            database_url=database_url,
            model_name=model_name,
            ai_confidence=ai_confidence,
            ai_timeout_seconds=ai_timeout_seconds,
            cache_capacity=cache_capacity,
            cache_clear_interval_seconds=cache_clear_interval_seconds,
            use_migrations=use_migrations,
            **kwargs,
        )

        self.db_manager = DatabaseManager(self.config)
        self.db_manager.create_tables(use_migrations=self.config.use_migrations)

        self.catalog = CatalogStore(self.db_manager)
        self.catalog.seed_categories()

        self.learning_writer = LearningWriter(self.catalog)
        self.response_cache = ResponseCache(
            capacity=self.config.cache_capacity,
            clear_interval_seconds=self.config.cache_clear_interval_seconds,
            clock=clock,
        )
        self.inflight = InFlightRegistry()

        self.agent_factory = AgentFactory(
            ModelConfiguration(
                model_name=self.config.model_name,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                timeout=self.config.ai_timeout_seconds,
            )
        )
        self._classification_agent = classification_agent
        self._correction_agent = correction_agent

        self._background_tasks: Set["asyncio.Task[None]"] = set()

        logger.info(f"GroceryClassifier initialized with model {self.config.model_name}")

    @property
    def classification_agent(self) -> Agent:
        if self._classification_agent is None:
            self._classification_agent = (
                self.agent_factory.create_product_classification_agent()
            )
        return self._classification_agent

    @property
    def correction_agent(self) -> Agent:
        if self._correction_agent is None:
            self._correction_agent = self.agent_factory.create_name_correction_agent()
        return self._correction_agent

    @staticmethod
    def _validate_items(items: Sequence[str]) -> List[str]:
        if isinstance(items, str) or not isinstance(items, (list, tuple)) or not items:
            raise ValidationError("Products array is required", field="products")

        for item in items:
            if not isinstance(item, str) or not normalize(item):
                raise ValidationError(
                    "Product names must be non-empty strings",
                    field="products",
                    value=item,
                )
        return list(items)

    async def classify_products(self, items: Sequence[str]) -> ClassificationResponse:
        """
        Classify a batch of product names.

        Args:
            items: Raw product names; the response keeps their order and text

        Returns:
            Classifications plus whether the response came from the cache and
            whether the LLM was involved

        Raises:
            ValidationError: If ``items`` is empty or contains blank names
            ClassificationError: If the catalog or the LLM fails; no
                classifications are returned and no AI rows are committed
        """
        names = self._validate_items(items)
        keys = [normalize(name) for name in names]

        signature = self.response_cache.signature(names)
        cached = self.response_cache.get(signature)
        if cached is not None:
            logger.debug(f"Serving {len(names)} classifications from response cache")
            # Permutations share an entry; answer in the caller's order.
            by_product = {item.product: item for item in cached.classifications}
            return ClassificationResponse(
                classifications=[by_product[name] for name in names],
                cached=True,
                ai_used=False,
            )

        logger.info(f"Classifying {len(names)} products")

        try:
            known = self.catalog.batch_lookup(keys)
            resolved: Dict[str, Resolution] = {
                key: (validate_and_map_category(entry.category), entry.confidence, entry.source)
                for key, entry in known.items()
            }

            unknown: Dict[str, str] = {}
            for name, key in zip(names, keys):
                if key not in resolved and key not in unknown:
                    unknown[key] = name.strip()

            ai_used = bool(unknown)
            if unknown:
                logger.info(f"Using AI for {len(unknown)} unknown products")
                resolved.update(await self._resolve_unknown(unknown))

        except (StoreError, AIError) as e:
            stage = "store_failed" if isinstance(e, StoreError) else "ai_failed"
            logger.error(f"Classification of {len(names)} products aborted: {e}")
            raise ClassificationError(
                f"Classification failed: {e}", stage=stage, item_count=len(names)
            ) from e

        self._schedule_usage_increment(known.values())

        classifications = [
            ProductClassification(
                product=name,
                category=resolved[key][0],
                confidence=resolved[key][1],
                source=resolved[key][2],
            )
            for name, key in zip(names, keys)
        ]
        response = ClassificationResponse(
            classifications=classifications, cached=False, ai_used=ai_used
        )
        self.response_cache.put(
            signature,
            ClassificationResponse(
                classifications=list(classifications), cached=False, ai_used=ai_used
            ),
        )

        if not ai_used:
            logger.info("All products found in catalog")
        return response

    async def _resolve_unknown(self, unknown: Dict[str, str]) -> Dict[str, Resolution]:
        """
        Resolve unknown keys, sharing in-flight LLM calls with other requests.

        Owned keys are released to waiting requests as soon as the LLM has
        answered. Nothing is written until every key this request reports,
        owned or waited on, has an answer; the catalog upsert is insert-only
        for AI rows, so overlapping writes from concurrent requests are no-ops.

        Args:
            unknown: Normalized key -> representative raw name
        """
        owned, waiting = self.inflight.claim(unknown)
        categories: Dict[str, str] = {}

        if owned:
            try:
                categories.update(
                    await self._classify_unknown({key: unknown[key] for key in owned})
                )
            except BaseException as exc:
                failure = exc
                if not isinstance(exc, Exception):
                    failure = AIError(
                        "Request resolving this product was cancelled",
                        error_type="cancelled",
                    )
                for key in owned:
                    self.inflight.fail(key, failure)
                raise
            for key in owned:
                self.inflight.resolve(key, categories[key])

        for key, future in waiting.items():
            categories[key] = await future

        return self._store_ai_classifications(unknown, categories)

    async def _classify_unknown(self, unknown: Dict[str, str]) -> Dict[str, str]:
        """Ask the LLM about unknown products; returns key -> official slug."""
        raw_names = list(unknown.values())
        pairs, _metadata = await classify_products_with_llm(
            products=raw_names,
            agent=self.classification_agent,
            model_name=self.config.model_name,
            timeout=self.config.ai_timeout_seconds,
        )

        categories: Dict[str, str] = {}
        for (key, raw_name), pair in zip(unknown.items(), pairs):
            if normalize(pair.product) != key:
                logger.debug(f"LLM renamed '{raw_name}' to '{pair.product}'; keeping input name")
            categories[key] = validate_and_map_category(pair.category)
        return categories

    def _store_ai_classifications(
        self, unknown: Dict[str, str], categories: Dict[str, str]
    ) -> Dict[str, Resolution]:
        """Store AI answers in one transaction and return the rows as stored."""
        writes = [
            ClassificationWrite(
                name=raw_name,
                normalized_name=key,
                category=categories[key],
                confidence=self.config.ai_confidence,
                source=SOURCE_AI,
            )
            for key, raw_name in unknown.items()
        ]

        stored = self.catalog.upsert_classifications(writes)
        return {
            key: (entry.category, entry.confidence, entry.source)
            for key, entry in stored.items()
        }

    def _schedule_usage_increment(self, entries: Sequence[CatalogEntry]) -> None:
        """Record catalog hits without making the caller wait for the write."""
        ids = [entry.id for entry in entries]
        if not ids:
            return

        task = asyncio.get_running_loop().create_task(self._increment_usage(ids))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _increment_usage(self, ids: List[int]) -> None:
        try:
            self.catalog.batch_increment_usage(ids)
        except StoreError as e:
            logger.warning(f"Failed to record usage for {len(ids)} products: {e}")

    async def wait_for_background_tasks(self) -> None:
        """Wait until all scheduled usage writes have finished."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks))

    async def correct_names(self, items: Sequence[str]) -> List[str]:
        """
        Fix spelling mistakes in product names.

        Brand names and descriptive qualifiers are kept as written. The
        catalog and the response cache are not involved.

        Raises:
            ValidationError: If ``items`` is empty or contains blank names
            AIError: If the LLM fails or returns unusable output
        """
        names = self._validate_items(items)
        logger.info(f"Correcting {len(names)} product names")

        corrected = await correct_names_with_llm(
            products=names,
            agent=self.correction_agent,
            model_name=self.config.model_name,
            timeout=self.config.ai_timeout_seconds,
        )

        logger.info(f"Corrected names: {corrected}")
        return corrected

    def learn(self, raw_name: str, correct_category: str) -> LearningAck:
        """Store a manual category correction. See ``LearningWriter.learn``."""
        return self.learning_writer.learn(raw_name, correct_category)

    def list_suggestions(
        self, query: Optional[str] = None, limit: Optional[int] = None
    ) -> List[ProductSuggestion]:
        """
        List products ordered by usage count (descending) then name.

        Args:
            query: Optional substring matched against raw and normalized names
            limit: Maximum number of suggestions (default from configuration)
        """
        effective_limit = self.config.suggestion_limit if limit is None else limit
        if not isinstance(effective_limit, int) or effective_limit < 1:
            raise ValidationError(
                "limit must be a positive integer", field="limit", value=limit
            )

        return [
            ProductSuggestion(
                name=entry.name, category=entry.category, usage_count=entry.usage_count
            )
            for entry in self.catalog.list_suggestions(query, effective_limit)
        ]

    def list_categories(self) -> List[CategoryInfo]:
        """Return all shopping categories ordered by aisle."""
        return [
            CategoryInfo(
                slug=category.slug,
                name=category.name,
                icon=category.icon,
                aisle_order=category.aisle_order,
            )
            for category in self.catalog.list_categories()
        ]

    def import_product_dictionary(self, path: Union[str, Path]) -> int:
        """Load a curated ``term,slug`` CSV into the catalog."""
        return self.catalog.import_product_dictionary(path)

    def clear_cache(self) -> None:
        """Empty the response cache."""
        self.response_cache.clear()

    def close(self) -> None:
        """Close database connections and cleanup resources."""
        if self._background_tasks:
            logger.warning(
                f"Closing with {len(self._background_tasks)} usage writes still pending"
            )
        self.db_manager.close()
        logger.info("GroceryClassifier closed")

    async def __aenter__(self) -> "GroceryClassifier":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.wait_for_background_tasks()
        self.close()


def create_grocery_classifier(
    database_url: str,
    model_name: str = "openai:gpt-4o-mini",
    **kwargs: Any,
) -> GroceryClassifier:
    """
    Create a GroceryClassifier instance with simplified configuration.

    Args:
        database_url: Database connection URL
        model_name: LLM model name
        **kwargs: Additional configuration options

    Returns:
        Configured GroceryClassifier instance
    """
    return GroceryClassifier(database_url=database_url, model_name=model_name, **kwargs)
