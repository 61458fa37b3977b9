"""Anthropic provider implementation"""

import logging

import httpx

from ..config import Config
from ..message import Message
from ..model import ModelConfig
from ..tool import Tool
from .base import ConfigKey, Provider, ProviderMetadata, ProviderUsage, build_client
from .formats import anthropic as anthropic_format
from .utils import emit_debug_trace, get_model, handle_response, post_json

logger = logging.getLogger(__name__)

ANTHROPIC_HOST = "https://api.anthropic.com"
ANTHROPIC_API_VERSION = "2023-06-01"
ANTHROPIC_DEFAULT_MODEL = "claude-3-5-sonnet-latest"
ANTHROPIC_KNOWN_MODELS = [
    "claude-3-5-sonnet-latest",
    "claude-3-5-haiku-latest",
    "claude-3-opus-latest",
]
ANTHROPIC_DOC_URL = "https://docs.anthropic.com/en/docs/about-claude/models"


class AnthropicProvider(Provider):
    """Provider for Anthropic Claude models"""

    def __init__(
        self,
        model: ModelConfig,
        api_key: str,
        host: str = ANTHROPIC_HOST,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(model, client)
        self.api_key = api_key
        self.host = host

    @classmethod
    def metadata(cls) -> ProviderMetadata:
        return ProviderMetadata(
            name="anthropic",
            display_name="Anthropic",
            description="Claude and other models from Anthropic",
            default_model=ANTHROPIC_DEFAULT_MODEL,
            known_models=ANTHROPIC_KNOWN_MODELS,
            model_doc_link=ANTHROPIC_DOC_URL,
            config_keys=[
                ConfigKey(name="ANTHROPIC_API_KEY", required=True, secret=True),
                ConfigKey(name="ANTHROPIC_HOST", required=False, secret=False, default=ANTHROPIC_HOST),
            ],
        )

    @classmethod
    def from_env(cls, model: ModelConfig | None = None, config: Config | None = None) -> "AnthropicProvider":
        config = config or Config.load()
        model = model or ModelConfig(model_name=cls.metadata().default_model)
        api_key = config.get_secret("ANTHROPIC_API_KEY")
        host = config.get("ANTHROPIC_HOST", ANTHROPIC_HOST)
        return cls(model, api_key=api_key, host=host, client=build_client())

    def _get_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
        }

    async def _post(self, payload: dict) -> dict:
        url = f"{self.host.rstrip('/')}/v1/messages"
        response = await post_json(
            self.client,
            url,
            payload,
            headers=self._get_headers(),
            secrets=[self.api_key],
        )
        return handle_response(response, anthropic_format.is_context_length_error)

    async def complete(
        self,
        system: str,
        messages: list[Message],
        tools: list[Tool] | None = None,
    ) -> tuple[Message, ProviderUsage]:
        payload = anthropic_format.create_request(self.model, system, messages, tools or [])

        logger.debug(f"Anthropic request: model={self.model.model_name}, messages={len(messages)}, tools={len(tools or [])}")
        response = await self._post(payload)

        message = anthropic_format.response_to_message(response)
        usage = anthropic_format.get_usage(response)
        model = get_model(response)

        emit_debug_trace(self.model, payload, response, usage)
        return message, ProviderUsage(model=model, usage=usage)
