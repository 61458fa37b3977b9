"""OpenAI provider implementation, also the base for OpenAI-compatible APIs"""

import logging

import httpx

from ..config import Config
from ..message import Message
from ..model import ModelConfig
from ..tool import Tool
from .base import ConfigKey, Provider, ProviderMetadata, ProviderUsage, Usage, build_client
from .errors import UsageError
from .formats import openai as openai_format
from .utils import ImageFormat, emit_debug_trace, get_model, handle_response, post_json

logger = logging.getLogger(__name__)

OPENAI_HOST = "https://api.openai.com"
OPENAI_DEFAULT_MODEL = "gpt-4o"
OPENAI_KNOWN_MODELS = [
    "gpt-4o",
    "gpt-4o-mini",
    "gpt-4-turbo",
    "gpt-3.5-turbo",
    "o1",
    "o1-mini",
]
OPENAI_DOC_URL = "https://platform.openai.com/docs/models"


def handle_response_openai_compat(response: httpx.Response) -> dict:
    """Classify a response from any OpenAI-compatible endpoint"""
    return handle_response(response, openai_format.is_context_length_error)


class OpenAIProvider(Provider):
    """Provider for OpenAI GPT models"""

    DEFAULT_HOST = OPENAI_HOST
    BASE_PATH = "v1/chat/completions"
    API_KEY_NAME: str | None = "OPENAI_API_KEY"
    HOST_NAME = "OPENAI_HOST"
    IMAGE_FORMAT = ImageFormat.OPENAI

    def __init__(
        self,
        model: ModelConfig,
        api_key: str | None,
        host: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(model, client)
        self.api_key = api_key
        self.host = host or self.DEFAULT_HOST

    @classmethod
    def metadata(cls) -> ProviderMetadata:
        return ProviderMetadata(
            name="openai",
            display_name="OpenAI",
            description="GPT-4 and other OpenAI models",
            default_model=OPENAI_DEFAULT_MODEL,
            known_models=OPENAI_KNOWN_MODELS,
            model_doc_link=OPENAI_DOC_URL,
            config_keys=[
                ConfigKey(name="OPENAI_API_KEY", required=True, secret=True),
                ConfigKey(name="OPENAI_HOST", required=False, secret=False, default=OPENAI_HOST),
            ],
        )

    @classmethod
    def from_env(cls, model: ModelConfig | None = None, config: Config | None = None) -> "OpenAIProvider":
        config = config or Config.load()
        model = model or ModelConfig(model_name=cls.metadata().default_model)
        api_key = config.get_secret(cls.API_KEY_NAME) if cls.API_KEY_NAME else None
        host = config.get(cls.HOST_NAME, cls.DEFAULT_HOST)
        return cls(model, api_key=api_key, host=host, client=build_client())

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _post(self, payload: dict) -> dict:
        url = f"{self.host.rstrip('/')}/{self.BASE_PATH}"
        response = await post_json(
            self.client,
            url,
            payload,
            headers=self._get_headers(),
            secrets=[self.api_key or ""],
        )
        return handle_response_openai_compat(response)

    async def complete(
        self,
        system: str,
        messages: list[Message],
        tools: list[Tool] | None = None,
    ) -> tuple[Message, ProviderUsage]:
        payload = openai_format.create_request(
            self.model, system, messages, tools or [], image_format=self.IMAGE_FORMAT
        )

        logger.debug(f"{self.metadata().display_name} request: model={self.model.model_name}, messages={len(messages)}")
        response = await self._post(payload)

        message = openai_format.response_to_message(response)
        try:
            usage = openai_format.get_usage(response)
        except UsageError as e:
            logger.warning(f"Failed to get usage data: {e.detail}")
            usage = Usage()
        model = get_model(response)

        emit_debug_trace(self.model, payload, response, usage)
        return message, ProviderUsage(model=model, usage=usage)
