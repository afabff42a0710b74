"""
Grocery classifier - resolves free-text grocery item names into shopping categories.
"""

from .core import GroceryClassifier, create_grocery_classifier
from .config import GroceryClassifierConfig
from .exceptions import (
    AIError,
    ClassificationError,
    ConfigurationError,
    GroceryClassifierError,
    StoreError,
    ValidationError,
)
from .models import (
    CategoryInfo,
    ClassificationResponse,
    LearningAck,
    ProductClassification,
    ProductSuggestion,
)
from .taxonomy import OFFICIAL_SLUGS, validate_and_map_category
from .text_processing import normalize

__version__ = "0.1.0"
__all__ = [
    "GroceryClassifier",
    "create_grocery_classifier",
    "GroceryClassifierConfig",
    "GroceryClassifierError",
    "ConfigurationError",
    "ValidationError",
    "StoreError",
    "AIError",
    "ClassificationError",
    "ClassificationResponse",
    "ProductClassification",
    "ProductSuggestion",
    "CategoryInfo",
    "LearningAck",
    "OFFICIAL_SLUGS",
    "validate_and_map_category",
    "normalize",
]
