"""OpenAI-compatible providers: OpenRouter, Groq and Ollama"""

import httpx

from ..config import Config
from ..model import ModelConfig
from .base import ConfigKey, ProviderMetadata
from .openai import OpenAIProvider

OPENROUTER_HOST = "https://openrouter.ai"
OPENROUTER_DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"
OPENROUTER_KNOWN_MODELS = [
    "anthropic/claude-3.5-sonnet",
    "openai/gpt-4o",
    "google/gemini-2.0-flash-exp",
    "meta-llama/llama-3.3-70b-instruct",
]

GROQ_HOST = "https://api.groq.com"
GROQ_DEFAULT_MODEL = "llama-3.3-70b-versatile"
GROQ_KNOWN_MODELS = [
    "llama-3.3-70b-versatile",
    "llama-3.1-8b-instant",
    "gemma2-9b-it",
]

OLLAMA_HOST = "http://localhost:11434"
OLLAMA_DEFAULT_MODEL = "qwen2.5"
OLLAMA_KNOWN_MODELS = ["qwen2.5", "llama3.2", "llama3.3"]


class OpenRouterProvider(OpenAIProvider):
    """Provider for OpenRouter API - access Claude, GPT, Gemini, and more with one key"""

    DEFAULT_HOST = OPENROUTER_HOST
    BASE_PATH = "api/v1/chat/completions"
    API_KEY_NAME = "OPENROUTER_API_KEY"
    HOST_NAME = "OPENROUTER_HOST"

    def __init__(
        self,
        model: ModelConfig,
        api_key: str | None,
        host: str | None = None,
        client: httpx.AsyncClient | None = None,
        referer: str | None = None,
    ):
        super().__init__(model, api_key, host, client)
        self.referer = referer

    @classmethod
    def metadata(cls) -> ProviderMetadata:
        return ProviderMetadata(
            name="openrouter",
            display_name="OpenRouter",
            description="Router for many model providers",
            default_model=OPENROUTER_DEFAULT_MODEL,
            known_models=OPENROUTER_KNOWN_MODELS,
            model_doc_link="https://openrouter.ai/models",
            config_keys=[
                ConfigKey(name="OPENROUTER_API_KEY", required=True, secret=True),
                ConfigKey(name="OPENROUTER_HOST", required=False, secret=False, default=OPENROUTER_HOST),
                ConfigKey(name="OPENROUTER_REFERER", required=False, secret=False),
            ],
        )

    @classmethod
    def from_env(cls, model: ModelConfig | None = None, config: Config | None = None) -> "OpenRouterProvider":
        config = config or Config.load()
        provider = super().from_env(model, config)
        if config.has("OPENROUTER_REFERER"):
            provider.referer = config.get("OPENROUTER_REFERER")
        return provider

    def _get_headers(self) -> dict:
        headers = super()._get_headers()
        # App attribution shown on openrouter.ai
        headers["X-Title"] = "snake"
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        return headers


class GroqProvider(OpenAIProvider):
    """Provider for Groq's OpenAI-compatible endpoint"""

    DEFAULT_HOST = GROQ_HOST
    BASE_PATH = "openai/v1/chat/completions"
    API_KEY_NAME = "GROQ_API_KEY"
    HOST_NAME = "GROQ_HOST"

    @classmethod
    def metadata(cls) -> ProviderMetadata:
        return ProviderMetadata(
            name="groq",
            display_name="Groq",
            description="Fast inference of open models on Groq hardware",
            default_model=GROQ_DEFAULT_MODEL,
            known_models=GROQ_KNOWN_MODELS,
            model_doc_link="https://console.groq.com/docs/models",
            config_keys=[
                ConfigKey(name="GROQ_API_KEY", required=True, secret=True),
                ConfigKey(name="GROQ_HOST", required=False, secret=False, default=GROQ_HOST),
            ],
        )


class OllamaProvider(OpenAIProvider):
    """Provider for a local Ollama server; no API key"""

    DEFAULT_HOST = OLLAMA_HOST
    BASE_PATH = "v1/chat/completions"
    API_KEY_NAME = None
    HOST_NAME = "OLLAMA_HOST"

    @classmethod
    def metadata(cls) -> ProviderMetadata:
        return ProviderMetadata(
            name="ollama",
            display_name="Ollama",
            description="Local open source models served by Ollama",
            default_model=OLLAMA_DEFAULT_MODEL,
            known_models=OLLAMA_KNOWN_MODELS,
            model_doc_link="https://ollama.com/library",
            config_keys=[
                ConfigKey(name="OLLAMA_HOST", required=False, secret=False, default=OLLAMA_HOST),
            ],
        )
