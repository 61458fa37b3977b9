"""Providers: one completion contract over many LLM vendors"""

from .anthropic import AnthropicProvider
from .base import ConfigKey, Provider, ProviderMetadata, ProviderUsage, Usage
from .errors import (
    AuthenticationError,
    ContextLengthExceededError,
    ProviderError,
    ProviderErrorKind,
    RateLimitExceededError,
    RequestFailedError,
    ServerError,
    UsageError,
)
from .factory import PROVIDERS, create, missing_config_keys, providers
from .google import GoogleProvider
from .openai import OpenAIProvider
from .openrouter import GroqProvider, OllamaProvider, OpenRouterProvider
from .router import ModelRouter

__all__ = [
    "Provider",
    "ProviderMetadata",
    "ConfigKey",
    "Usage",
    "ProviderUsage",
    "ProviderError",
    "ProviderErrorKind",
    "AuthenticationError",
    "RequestFailedError",
    "RateLimitExceededError",
    "ContextLengthExceededError",
    "ServerError",
    "UsageError",
    "AnthropicProvider",
    "OpenAIProvider",
    "GoogleProvider",
    "OpenRouterProvider",
    "GroqProvider",
    "OllamaProvider",
    "PROVIDERS",
    "providers",
    "create",
    "missing_config_keys",
    "ModelRouter",
]
