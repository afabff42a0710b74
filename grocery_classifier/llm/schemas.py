"""
Pydantic schemas for LLM interactions.

The model answers in plain text that is expected to contain JSON, sometimes
wrapped in Markdown fences. These schemas validate that JSON once the fences
have been stripped.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ProductCategoryPair(BaseModel):
    """Schema for one classified product in the model output."""

    model_config = ConfigDict(extra="ignore")

    product: str = Field(description="Product name as given in the request")
    category: str = Field(description="Category slug chosen for the product")


class CorrectedNames(BaseModel):
    """Schema for grammar-corrected product names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    corrected_names: List[str] = Field(
        alias="correctedNames",
        description="Corrected product names in the same order as the request",
    )


class ModelConfiguration(BaseModel):
    """Schema for LLM model configuration."""

    model_name: str = Field(description="Name of the LLM model to use")
    temperature: float = Field(
        description="Temperature for model generation", ge=0.0, le=2.0, default=0.1
    )
    max_tokens: Optional[int] = Field(
        description="Maximum tokens for model response", default=1000, gt=0
    )
    timeout: Optional[float] = Field(
        description="Request timeout in seconds", default=30, gt=0
    )


PRODUCT_CLASSIFICATION_ADAPTER = TypeAdapter(List[ProductCategoryPair])
