"""Model routing and provider selection"""

from ..config import Config
from ..model import ModelConfig
from .base import Provider
from .factory import create


class ModelRouter:
    """Routes "provider/model" strings to configured providers"""

    DEFAULT_PROVIDER = "anthropic"

    # Common model aliases
    MODEL_ALIASES = {
        "claude": "anthropic/claude-3-5-sonnet-latest",
        "claude-sonnet": "anthropic/claude-3-5-sonnet-latest",
        "claude-haiku": "anthropic/claude-3-5-haiku-latest",
        "claude-opus": "anthropic/claude-3-opus-latest",
        "gpt-4": "openai/gpt-4-turbo",
        "gpt-4-turbo": "openai/gpt-4-turbo",
        "gpt-4o": "openai/gpt-4o",
        "gemini": "google/gemini-2.0-flash-exp",
    }

    @classmethod
    def resolve_model(cls, model_string: str) -> tuple[str, str]:
        """Resolve model string to (provider, model_id)"""
        # Check if it's an alias
        if model_string in cls.MODEL_ALIASES:
            model_string = cls.MODEL_ALIASES[model_string]

        # Parse provider/model format; OpenRouter model ids keep their own slash
        if "/" in model_string:
            provider, model_id = model_string.split("/", 1)
            return provider, model_id

        # Default to anthropic if no provider specified
        return cls.DEFAULT_PROVIDER, model_string

    @classmethod
    def get_provider(
        cls,
        model_string: str,
        config: Config | None = None,
        context_limit: int | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Provider:
        """Get a configured provider instance for a model string"""
        provider_name, model_id = cls.resolve_model(model_string)
        model = (
            ModelConfig(model_name=model_id)
            .with_context_limit(context_limit)
            .with_temperature(temperature)
            .with_max_tokens(max_tokens)
        )
        return create(provider_name, model, config)
