"""
Tests for LLM agents.
"""

from unittest.mock import Mock, patch

import pytest

from grocery_classifier.exceptions import ConfigurationError
from grocery_classifier.llm.agents import (
    CLASSIFICATION_SYSTEM_PROMPT,
    NAME_CORRECTION_SYSTEM_PROMPT,
    AgentFactory,
    validate_model_name,
)
from grocery_classifier.llm.schemas import ModelConfiguration


class TestAgentFactory:
    """Test AgentFactory functionality."""

    def test_agent_factory_initialization_defaults(self) -> None:
        factory = AgentFactory()

        assert factory.default_config.model_name == "openai:gpt-4o-mini"
        assert factory.default_config.temperature == 0.1
        assert factory.default_config.timeout == 30

    def test_agent_factory_initialization_custom(self) -> None:
        config = ModelConfiguration(
            model_name="anthropic:claude-sonnet-4-5", temperature=0.5, timeout=60
        )

        factory = AgentFactory(config)

        assert factory.default_config.model_name == "anthropic:claude-sonnet-4-5"
        assert factory.default_config.temperature == 0.5
        assert factory.default_config.timeout == 60

    @patch("grocery_classifier.llm.agents.Agent")
    def test_create_product_classification_agent(self, mock_agent_class) -> None:
        mock_agent = Mock()
        mock_agent_class.return_value = mock_agent

        factory = AgentFactory()
        agent = factory.create_product_classification_agent()

        assert agent == mock_agent
        mock_agent_class.assert_called_once()
        call_args = mock_agent_class.call_args
        assert call_args[0][0] == "openai:gpt-4o-mini"
        assert call_args[1]["output_type"] is str
        assert call_args[1]["system_prompt"] == CLASSIFICATION_SYSTEM_PROMPT
        assert call_args[1]["defer_model_check"] is True

        # Cached on second request
        assert factory.create_product_classification_agent() == mock_agent
        assert mock_agent_class.call_count == 1

    @patch("grocery_classifier.llm.agents.Agent")
    def test_create_name_correction_agent(self, mock_agent_class) -> None:
        factory = AgentFactory()
        factory.create_name_correction_agent()

        call_args = mock_agent_class.call_args
        assert call_args[1]["system_prompt"] == NAME_CORRECTION_SYSTEM_PROMPT

    @patch("grocery_classifier.llm.agents.Agent")
    def test_model_settings(self, mock_agent_class) -> None:
        config = ModelConfiguration(
            model_name="openai:gpt-4o", temperature=0.3, max_tokens=500, timeout=12
        )

        AgentFactory(config).create_product_classification_agent()

        model_settings = mock_agent_class.call_args[1]["model_settings"]
        assert model_settings == {"temperature": 0.3, "max_tokens": 500, "timeout": 12}

    @patch("grocery_classifier.llm.agents.Agent")
    def test_agent_with_custom_model(self, mock_agent_class) -> None:
        factory = AgentFactory()
        factory.create_product_classification_agent(model_name="anthropic:claude-sonnet-4-5")

        assert mock_agent_class.call_args[0][0] == "anthropic:claude-sonnet-4-5"

    @patch("grocery_classifier.llm.agents.Agent")
    def test_agent_creation_error(self, mock_agent_class) -> None:
        mock_agent_class.side_effect = ValueError("Unknown provider")

        factory = AgentFactory()
        with pytest.raises(ConfigurationError) as exc_info:
            factory.create_product_classification_agent()

        assert "Failed to create product_classification agent" in str(exc_info.value)
        assert exc_info.value.parameter == "model_name"

    def test_cache_management(self) -> None:
        factory = AgentFactory()

        cache_info = factory.get_cache_info()
        assert cache_info["cached_agents"] == 0
        assert cache_info["cache_keys"] == []

        with patch("grocery_classifier.llm.agents.Agent"):
            factory.create_product_classification_agent()
            factory.create_name_correction_agent()

            cache_info = factory.get_cache_info()
            assert cache_info["cached_agents"] == 2
            assert len(cache_info["cache_keys"]) == 2

            factory.clear_cache()
            cache_info = factory.get_cache_info()
            assert cache_info["cached_agents"] == 0

    def test_effective_config_model_override(self) -> None:
        config = ModelConfiguration(model_name="openai:gpt-4o-mini", temperature=0.5)
        factory = AgentFactory(config)

        effective_config = factory._get_effective_config("openai:gpt-4o", None)

        assert effective_config.model_name == "openai:gpt-4o"
        assert effective_config.temperature == 0.5
        # Default config untouched
        assert factory.default_config.model_name == "openai:gpt-4o-mini"


class TestValidateModelName:
    """Test model name validation."""

    def test_valid_names(self) -> None:
        assert validate_model_name("openai:gpt-4o-mini")
        assert validate_model_name("google-gla:gemini-2.0-flash")

    def test_invalid_names(self) -> None:
        assert not validate_model_name("")
        assert not validate_model_name("gpt-4o")
        assert not validate_model_name("openai:")
        assert not validate_model_name(None)
