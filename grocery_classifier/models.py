"""
Data models and type definitions for the grocery classifier.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class ProductClassification:
    """Resolved category for one requested product."""

    product: str
    category: str
    confidence: float
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product,
            "category": self.category,
            "confidence": self.confidence,
            "source": self.source,
        }


@dataclass
class ClassificationResponse:
    """Result of a classify_products call, in input order."""

    classifications: List[ProductClassification] = field(default_factory=list)
    cached: bool = False
    ai_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation used by HTTP clients."""
        return {
            "classifications": [item.to_dict() for item in self.classifications],
            "cached": self.cached,
            "aiUsed": self.ai_used,
        }


@dataclass(frozen=True)
class ProductSuggestion:
    """Frequently used product offered as a suggestion."""

    name: str
    category: str
    usage_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "usage_count": self.usage_count,
        }


@dataclass(frozen=True)
class CategoryInfo:
    """Shopping category as presented to clients."""

    slug: str
    name: str
    icon: str
    aisle_order: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "name": self.name,
            "icon": self.icon,
            "aisle_order": self.aisle_order,
        }


@dataclass(frozen=True)
class LearningAck:
    """Acknowledgement of a stored manual correction."""

    success: bool
    product: str
    category: str
    message: str = "Learning saved"

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}
