"""
Context window sizes for the LLM models used for product classification.
"""

from typing import Dict


class Model:
    def __init__(self, name: str, context_length: int, litellm_name: str = ""):
        self.name = name
        self.context_length = context_length
        self.litellm_name = litellm_name


class Models:
    # Anthropic models
    anthropic_claude_3_5_haiku_latest = Model(
        "anthropic:claude-3-5-haiku-latest", 200_000, "claude-3-5-haiku-latest"
    )
    anthropic_claude_sonnet_4_5 = Model(
        "anthropic:claude-sonnet-4-5", 200_000, "claude-sonnet-4-5"
    )

    # Google models
    google_gla_gemini_2_0_flash = Model(
        "google-gla:gemini-2.0-flash", 1_000_000, "gemini-2.0-flash"
    )

    # OpenAI models
    openai_gpt_4_1_mini = Model("openai:gpt-4.1-mini", 1_000_000, "gpt-4.1-mini")
    openai_gpt_4o = Model("openai:gpt-4o", 128_000, "gpt-4o")
    openai_gpt_4o_mini = Model("openai:gpt-4o-mini", 128_000, "gpt-4o-mini")
    openai_gpt_5_mini = Model("openai:gpt-5-mini", 400_000, "gpt-5-mini")

    # Test model
    test = Model("test", 1_000_000)


# Used for models missing from the registry.
DEFAULT_CONTEXT_LENGTH = 16_000


def _registry() -> Dict[str, Model]:
    return {
        value.name: value
        for value in vars(Models).values()
        if isinstance(value, Model)
    }


def get_model(model_name: str) -> Model:
    """Return the registered model, or a conservative stand-in for unknown names."""
    model = _registry().get(model_name)
    if model is not None:
        return model

    litellm_name = model_name.split(":", 1)[-1]
    return Model(model_name, DEFAULT_CONTEXT_LENGTH, litellm_name)
