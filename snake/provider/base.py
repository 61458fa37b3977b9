"""Provider abstraction for LLM APIs"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, Field

from ..message import Message
from ..model import ModelConfig
from ..tool import Tool

if TYPE_CHECKING:
    from ..config import Config

# Fixed per provider; callers cancel by cancelling the awaited call
REQUEST_TIMEOUT = 600.0


class ConfigKey(BaseModel):
    """A named configuration entry a provider needs"""
    name: str
    required: bool
    secret: bool
    default: str | None = None


class ProviderMetadata(BaseModel):
    """Static description of a provider's capabilities and configuration requirements"""
    name: str
    display_name: str
    description: str
    default_model: str
    # Known models at release time; the APIs are not queried
    known_models: list[str] = Field(default_factory=list)
    model_doc_link: str = ""
    config_keys: list[ConfigKey] = Field(default_factory=list)


class Usage(BaseModel):
    """Token counts for a single completion; vendors may omit any of them"""
    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None


class ProviderUsage(BaseModel):
    """Usage paired with the model id the vendor reports having used"""
    model: str
    usage: Usage


def build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(REQUEST_TIMEOUT))


class Provider(ABC):
    """Base class for LLM providers"""

    def __init__(self, model: ModelConfig, client: httpx.AsyncClient | None = None):
        self.model = model
        self.client = client or build_client()

    @classmethod
    @abstractmethod
    def metadata(cls) -> ProviderMetadata:
        """Describe this provider type without doing any I/O"""
        pass

    @classmethod
    @abstractmethod
    def from_env(cls, model: ModelConfig | None = None, config: "Config | None" = None) -> "Provider":
        """Build a provider from configuration, raising ConfigError if a required secret is missing"""
        pass

    def get_model_config(self) -> ModelConfig:
        """ModelConfig is frozen, so handing out the instance is safe"""
        return self.model

    @abstractmethod
    async def complete(
        self,
        system: str,
        messages: list[Message],
        tools: list[Tool] | None = None,
    ) -> tuple[Message, ProviderUsage]:
        """Generate the next message for the conversation.

        Raises a ``ProviderError`` subclass on failure. Raising
        ``ContextLengthExceededError`` correctly matters: the agent loop
        compacts history when it sees it.
        """
        pass

    async def aclose(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()
