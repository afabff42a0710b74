"""Configuration management and validation for the grocery classifier."""

import os
from typing import Dict, Any
from dataclasses import dataclass, field

from .exceptions import ConfigurationError


@dataclass
class GroceryClassifierConfig:
    """Configuration class with comprehensive validation."""

    # Database settings
    database_url: str

    # LLM settings
    model_name: str = "openai:gpt-4o-mini"
    temperature: float = 0.1
    max_tokens: int = 1000
    ai_timeout_seconds: float = 30.0

    # Confidence stored for AI-sourced catalog rows
    ai_confidence: float = 0.8

    # Response cache settings
    cache_capacity: int = 1000
    cache_clear_interval_seconds: float = 3600.0

    # Suggestion settings
    suggestion_limit: int = 10

    # Schema management
    use_migrations: bool = False

    # Additional settings
    extra_config: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration parameters after initialization."""
        self._validate_all_parameters()
        self._load_environment_variables()

    def _validate_all_parameters(self):
        """Run all validation checks."""
        self._validate_database_url()
        self._validate_llm_settings()
        self._validate_ai_confidence()
        self._validate_cache_settings()
        self._validate_suggestion_limit()

    def _validate_database_url(self):
        """Validate database URL format."""
        if not self.database_url:
            raise ConfigurationError(
                "database_url cannot be empty",
                parameter="database_url",
                suggested_fix="Provide a valid database URL (e.g., 'sqlite:///products.db')",
            )

        supported_schemes = ["sqlite", "postgresql", "mysql"]
        is_supported_scheme = any(
            self.database_url.startswith(f"{scheme}:") for scheme in supported_schemes
        )
        if not is_supported_scheme:
            raise ConfigurationError(
                f"database_url scheme not supported. Supported schemes: {supported_schemes}",
                parameter="database_url",
                suggested_fix="Use sqlite:, postgresql:, or mysql: URL scheme",
            )

    def _validate_llm_settings(self):
        """Validate model name and generation settings."""
        if not self.model_name or ":" not in self.model_name:
            raise ConfigurationError(
                f"model_name ({self.model_name!r}) must use the 'provider:model' format",
                parameter="model_name",
                suggested_fix="Specify a model such as 'openai:gpt-4o-mini'",
            )

        if not (0.0 <= self.temperature <= 2.0):
            raise ConfigurationError(
                f"temperature ({self.temperature}) must be between 0.0 and 2.0",
                parameter="temperature",
            )

        if self.max_tokens <= 0:
            raise ConfigurationError(
                f"max_tokens ({self.max_tokens}) must be positive",
                parameter="max_tokens",
            )

        if self.ai_timeout_seconds <= 0:
            raise ConfigurationError(
                f"ai_timeout_seconds ({self.ai_timeout_seconds}) must be positive",
                parameter="ai_timeout_seconds",
                suggested_fix="Set ai_timeout_seconds to a value such as 30",
            )

    def _validate_ai_confidence(self):
        """Confidence 1.0 is reserved for manual classifications."""
        if not (0.0 <= self.ai_confidence < 1.0):
            raise ConfigurationError(
                f"ai_confidence ({self.ai_confidence}) must be in the range [0.0, 1.0)",
                parameter="ai_confidence",
                suggested_fix="Use a value below 1.0, e.g. 0.8",
            )

    def _validate_cache_settings(self):
        """Validate response cache constraints."""
        if self.cache_capacity < 0:
            raise ConfigurationError(
                f"cache_capacity ({self.cache_capacity}) cannot be negative",
                parameter="cache_capacity",
                suggested_fix="Set cache_capacity to 0 to disable caching",
            )

        if self.cache_clear_interval_seconds <= 0:
            raise ConfigurationError(
                f"cache_clear_interval_seconds ({self.cache_clear_interval_seconds}) must be positive",
                parameter="cache_clear_interval_seconds",
            )

    def _validate_suggestion_limit(self):
        if self.suggestion_limit < 1:
            raise ConfigurationError(
                f"suggestion_limit ({self.suggestion_limit}) must be at least 1",
                parameter="suggestion_limit",
            )

    def _load_environment_variables(self):
        """Load configuration from environment variables."""
        env_mappings = {
            "GROCERY_DATABASE_URL": "database_url",
            "GROCERY_MODEL_NAME": "model_name",
            "GROCERY_AI_TIMEOUT": ("ai_timeout_seconds", float),
            "GROCERY_AI_CONFIDENCE": ("ai_confidence", float),
            "GROCERY_CACHE_CAPACITY": ("cache_capacity", int),
            "GROCERY_CACHE_CLEAR_INTERVAL": ("cache_clear_interval_seconds", float),
        }

        for env_var, config_attr in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                if isinstance(config_attr, tuple):
                    attr_name, attr_type = config_attr
                    try:
                        setattr(self, attr_name, attr_type(env_value))
                    except ValueError:
                        raise ConfigurationError(
                            f"Invalid value for {env_var}: {env_value}",
                            parameter=attr_name,
                            suggested_fix=f"Provide a valid {attr_type.__name__} value",
                        )
                else:
                    setattr(self, config_attr, env_value)

        # Re-validate after loading environment variables
        self._validate_all_parameters()
