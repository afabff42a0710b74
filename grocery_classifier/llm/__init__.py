"""
LLM interaction module for the grocery classifier.

This module provides Pydantic AI agents, response schemas and prompt helpers
used to classify unknown products and correct product names.
"""

from .agents import AgentFactory, validate_model_name
from .interactions import (
    build_name_correction_prompt,
    build_product_classification_prompt,
    classify_products_with_llm,
    correct_names_with_llm,
    strip_code_fences,
)
from .llm_models import Model, Models, get_model
from .schemas import CorrectedNames, ModelConfiguration, ProductCategoryPair

__all__ = [
    "AgentFactory",
    "validate_model_name",
    "build_name_correction_prompt",
    "build_product_classification_prompt",
    "classify_products_with_llm",
    "correct_names_with_llm",
    "strip_code_fences",
    "Model",
    "Models",
    "get_model",
    "CorrectedNames",
    "ModelConfiguration",
    "ProductCategoryPair",
]
