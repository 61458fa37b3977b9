"""Google Gemini provider implementation"""

import logging

import httpx

from ..config import Config
from ..message import Message
from ..model import ModelConfig
from ..tool import Tool
from .base import ConfigKey, Provider, ProviderMetadata, ProviderUsage, build_client
from .formats import google as google_format
from .utils import emit_debug_trace, handle_response, post_json, unescape_json_values

logger = logging.getLogger(__name__)

GOOGLE_API_HOST = "https://generativelanguage.googleapis.com"
GOOGLE_DEFAULT_MODEL = "gemini-2.0-flash-exp"
GOOGLE_KNOWN_MODELS = [
    "models/gemini-1.5-pro-latest",
    "models/gemini-1.5-pro",
    "models/gemini-1.5-flash-latest",
    "models/gemini-1.5-flash",
    "models/gemini-2.0-flash-exp",
    "models/gemini-2.0-flash-thinking-exp-01-21",
]
GOOGLE_DOC_URL = "https://ai.google/get-started/our-models/"


class GoogleProvider(Provider):
    """Provider for Google Gemini models"""

    def __init__(
        self,
        model: ModelConfig,
        api_key: str,
        host: str = GOOGLE_API_HOST,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(model, client)
        self.api_key = api_key
        self.host = host

    @classmethod
    def metadata(cls) -> ProviderMetadata:
        return ProviderMetadata(
            name="google",
            display_name="Google Gemini",
            description="Gemini models from Google AI",
            default_model=GOOGLE_DEFAULT_MODEL,
            known_models=GOOGLE_KNOWN_MODELS,
            model_doc_link=GOOGLE_DOC_URL,
            config_keys=[
                ConfigKey(name="GOOGLE_API_KEY", required=True, secret=True),
                ConfigKey(name="GOOGLE_HOST", required=False, secret=False, default=GOOGLE_API_HOST),
            ],
        )

    @classmethod
    def from_env(cls, model: ModelConfig | None = None, config: Config | None = None) -> "GoogleProvider":
        config = config or Config.load()
        model = model or ModelConfig(model_name=cls.metadata().default_model)
        api_key = config.get_secret("GOOGLE_API_KEY")
        host = config.get("GOOGLE_HOST", GOOGLE_API_HOST)
        return cls(model, api_key=api_key, host=host, client=build_client())

    @property
    def model_path(self) -> str:
        # Known model names carry a "models/" prefix that is already part of the route
        return self.model.model_name.removeprefix("models/")

    async def _post(self, payload: dict) -> dict:
        url = f"{self.host.rstrip('/')}/v1beta/models/{self.model_path}:generateContent"
        response = await post_json(
            self.client,
            url,
            payload,
            headers={"Content-Type": "application/json"},
            params={"key": self.api_key},
            secrets=[self.api_key],
        )
        return handle_response(response, google_format.is_context_length_error)

    async def complete(
        self,
        system: str,
        messages: list[Message],
        tools: list[Tool] | None = None,
    ) -> tuple[Message, ProviderUsage]:
        payload = google_format.create_request(self.model, system, messages, tools or [])

        logger.debug(f"Google request: model={self.model_path}, messages={len(messages)}, tools={len(tools or [])}")
        response = await self._post(payload)

        message = google_format.response_to_message(unescape_json_values(response))
        usage = google_format.get_usage(response)
        model = response.get("modelVersion") or self.model.model_name

        emit_debug_trace(self.model, payload, response, usage)
        return message, ProviderUsage(model=model, usage=usage)
