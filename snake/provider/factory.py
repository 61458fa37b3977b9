"""Provider registry: list and construct providers by name"""

import logging

from ..config import Config, ConfigError
from ..model import ModelConfig
from .anthropic import AnthropicProvider
from .base import Provider, ProviderMetadata
from .google import GoogleProvider
from .openai import OpenAIProvider
from .openrouter import GroqProvider, OllamaProvider, OpenRouterProvider

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type[Provider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
    "google": GoogleProvider,
    "openrouter": OpenRouterProvider,
    "groq": GroqProvider,
    "ollama": OllamaProvider,
}


def providers() -> list[ProviderMetadata]:
    """Metadata for every registered provider; constructs nothing"""
    return [provider_class.metadata() for provider_class in PROVIDERS.values()]


def get_provider_class(name: str) -> type[Provider]:
    if name not in PROVIDERS:
        raise ValueError(
            f"Unknown provider: {name}. "
            f"Available: {', '.join(PROVIDERS.keys())}"
        )
    return PROVIDERS[name]


def missing_config_keys(name: str, config: Config) -> list[str]:
    """Names of required config keys that cannot be resolved"""
    metadata = get_provider_class(name).metadata()
    return [
        key.name
        for key in metadata.config_keys
        if key.required and not config.has(key.name, secret=key.secret)
    ]


def create(name: str, model: ModelConfig | None = None, config: Config | None = None) -> Provider:
    """Construct a provider, failing before any request if configuration is incomplete"""
    provider_class = get_provider_class(name)
    config = config or Config.load()

    missing = missing_config_keys(name, config)
    if missing:
        raise ConfigError(
            missing[0],
            f"Provider '{name}' is missing required configuration: {', '.join(missing)}",
        )

    logger.debug(f"Creating provider {name} with model {model.model_name if model else 'default'}")
    return provider_class.from_env(model, config)
