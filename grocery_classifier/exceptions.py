"""
Custom exceptions for the grocery classifier library.
"""

from typing import Any


class GroceryClassifierError(Exception):
    """Base exception for all grocery classifier errors."""

    pass


class ConfigurationError(GroceryClassifierError):
    """Raised when configuration parameters are invalid."""

    def __init__(self, message: str, parameter: str = None, suggested_fix: str = None):
        self.parameter = parameter
        self.suggested_fix = suggested_fix

        full_message = f"Configuration Error: {message}"
        if parameter:
            full_message += f" (Parameter: {parameter})"
        if suggested_fix:
            full_message += f" Suggested fix: {suggested_fix}"

        super().__init__(full_message)


class ValidationError(GroceryClassifierError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value

        full_message = f"Validation Error: {message}"
        if field:
            full_message += f" (Field: {field})"
        if value is not None:
            full_message += f" (Value: {value})"

        super().__init__(full_message)


class StoreError(GroceryClassifierError):
    """Raised when the persistent product catalog is unreachable or a write fails."""

    def __init__(self, message: str, operation: str = None, table: str = None):
        self.operation = operation
        self.table = table

        full_message = f"Store Error: {message}"
        if operation:
            full_message += f" (Operation: {operation})"
        if table:
            full_message += f" (Table: {table})"

        super().__init__(full_message)


class AIError(GroceryClassifierError):
    """Raised when the external AI classifier fails or returns unusable output."""

    def __init__(
        self,
        message: str,
        model: str = None,
        error_type: str = None,
    ):
        self.model = model
        self.error_type = error_type

        full_message = f"AI Error: {message}"
        if model:
            full_message += f" (Model: {model})"
        if error_type:
            full_message += f" (Type: {error_type})"

        super().__init__(full_message)


class ClassificationError(GroceryClassifierError):
    """Raised when a classification request cannot be completed."""

    def __init__(self, message: str, stage: str = None, item_count: int = None):
        self.stage = stage
        self.item_count = item_count

        full_message = f"Classification Error: {message}"
        if stage:
            full_message += f" (Stage: {stage})"
        if item_count is not None:
            full_message += f" (Items: {item_count})"

        super().__init__(full_message)
