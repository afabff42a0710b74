"""
Pydantic AI agents for LLM interactions.

Agents answer with plain text; parsing and validation of the JSON payload
happen in ``interactions`` so that fenced or malformed answers surface as
``AIError`` rather than as provider-specific failures.
"""

import logging
from typing import Any, Dict, Optional

from pydantic_ai import Agent

from .schemas import ModelConfiguration
from ..exceptions import ConfigurationError


logger = logging.getLogger(__name__)

CLASSIFICATION_SYSTEM_PROMPT = (
    "Tu esi eksperts pārtikas produktu klasifikācijā. Atbildi tikai JSON formātā."
)
NAME_CORRECTION_SYSTEM_PROMPT = (
    "Tu esi eksperts latviešu valodā. Labo produktu nosaukumus, lai tie būtu "
    "gramatiski pareizi un skaidri. Ja nosaukums jau ir pareizs, atstāj to "
    "nemainītu. Atbildi tikai JSON formātā."
)


class AgentFactory:
    """
    Factory class for creating Pydantic AI agents with proper configuration.

    Agents are cached per purpose, model and temperature.
    """

    def __init__(self, default_config: Optional[ModelConfiguration] = None):
        """
        Initialize the agent factory.

        Args:
            default_config: Default configuration for all agents
        """
        self.default_config = default_config or ModelConfiguration(
            model_name="openai:gpt-4o-mini", temperature=0.1, timeout=30
        )
        self._agent_cache: Dict[str, Agent] = {}

    def create_product_classification_agent(
        self,
        model_name: Optional[str] = None,
        config: Optional[ModelConfiguration] = None,
    ) -> Agent:
        """Create an agent that assigns categories to product names."""
        return self._get_or_create(
            purpose="product_classification",
            system_prompt=CLASSIFICATION_SYSTEM_PROMPT,
            model_name=model_name,
            config=config,
        )

    def create_name_correction_agent(
        self,
        model_name: Optional[str] = None,
        config: Optional[ModelConfiguration] = None,
    ) -> Agent:
        """Create an agent that fixes spelling in product names."""
        return self._get_or_create(
            purpose="name_correction",
            system_prompt=NAME_CORRECTION_SYSTEM_PROMPT,
            model_name=model_name,
            config=config,
        )

    def _get_or_create(
        self,
        purpose: str,
        system_prompt: str,
        model_name: Optional[str],
        config: Optional[ModelConfiguration],
    ) -> Agent:
        effective_config = self._get_effective_config(model_name, config)
        cache_key = (
            f"{purpose}_{effective_config.model_name}_{effective_config.temperature}"
        )

        if cache_key in self._agent_cache:
            return self._agent_cache[cache_key]

        agent = self._create_text_agent(effective_config, system_prompt, purpose)
        self._agent_cache[cache_key] = agent
        return agent

    def _create_text_agent(
        self, config: ModelConfiguration, system_prompt: str, purpose: str
    ) -> Agent:
        """
        Create a text-output agent for the given configuration.

        The model is resolved lazily so that agents can be built before
        provider credentials are available.
        """
        try:
            model_settings: Dict[str, Any] = {"temperature": config.temperature}
            if config.max_tokens is not None:
                model_settings["max_tokens"] = config.max_tokens
            if config.timeout is not None:
                model_settings["timeout"] = config.timeout

            agent = Agent(
                config.model_name,
                output_type=str,
                system_prompt=system_prompt,
                model_settings=model_settings,
                defer_model_check=True,
            )

            logger.info(f"Created {purpose} agent for model {config.model_name}")
            return agent

        except Exception as e:
            logger.error(
                f"Failed to create {purpose} agent for model {config.model_name}: {e}"
            )
            raise ConfigurationError(
                f"Failed to create {purpose} agent: {str(e)}",
                parameter="model_name",
            ) from e

    def _get_effective_config(
        self, model_name: Optional[str], config: Optional[ModelConfiguration]
    ) -> ModelConfiguration:
        """Merge an optional model name override into the configuration."""
        if config is None:
            config = self.default_config

        if model_name is not None:
            config = config.model_copy(update={"model_name": model_name})

        return config

    def clear_cache(self):
        """Clear the agent cache."""
        self._agent_cache.clear()
        logger.info("Agent cache cleared")

    def get_cache_info(self) -> Dict[str, Any]:
        return {
            "cached_agents": len(self._agent_cache),
            "cache_keys": list(self._agent_cache.keys()),
        }


def validate_model_name(model_name: str) -> bool:
    """
    Validate that a model name uses the ``provider:model`` format.

    Args:
        model_name: Model name to validate

    Returns:
        True if valid, False otherwise
    """
    if not model_name or not isinstance(model_name, str):
        return False

    if ":" not in model_name:
        return False

    provider, model = model_name.split(":", 1)
    return bool(provider.strip() and model.strip())
