"""Model configuration: context limits, tokenizer selection, generation params"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_CONTEXT_LIMIT = 128_000

# Sanitized HuggingFace tokenizer names ("Xenova/gpt-4o" -> "Xenova--gpt-4o")
GPT_4O_TOKENIZER = "Xenova--gpt-4o"
CLAUDE_TOKENIZER = "Xenova--claude-tokenizer"

# Substring -> context window. First match wins.
MODEL_CONTEXT_LIMITS: list[tuple[str, int]] = [
    # https://platform.openai.com/docs/models
    ("gpt-4o", 128_000),
    ("gpt-4-turbo", 128_000),
    # https://docs.anthropic.com/en/docs/about-claude/models
    ("claude-3", 200_000),
    # https://github.com/meta-llama/llama-models
    ("llama3.2", 128_000),
    ("llama3.3", 128_000),
]


def infer_tokenizer_name(model_name: str) -> str:
    if "claude" in model_name:
        return CLAUDE_TOKENIZER
    return GPT_4O_TOKENIZER


def get_model_specific_limit(model_name: str) -> int | None:
    for pattern, limit in MODEL_CONTEXT_LIMITS:
        if pattern in model_name:
            return limit
    return None


class ModelConfig(BaseModel):
    """Model-specific settings and limits.

    The context limit is resolved with the following precedence:
    1. Explicit ``context_limit``
    2. Model-specific default based on the model name
    3. Global default (``DEFAULT_CONTEXT_LIMIT``), applied by ``get_context_limit``
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_name: str
    tokenizer_name: str = ""
    context_limit: int | None = Field(default=None, gt=0)
    temperature: float | None = Field(default=None, ge=0.0, le=1.0)
    max_tokens: int | None = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _infer_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        model_name = data.get("model_name") or ""
        if not data.get("tokenizer_name"):
            data["tokenizer_name"] = infer_tokenizer_name(model_name)
        if data.get("context_limit") is None:
            data["context_limit"] = get_model_specific_limit(model_name)
        return data

    def _with(self, **updates: Any) -> "ModelConfig":
        # Rebuild rather than model_copy so field validation still applies
        return ModelConfig(**{**self.model_dump(), **updates})

    def with_context_limit(self, limit: int | None) -> "ModelConfig":
        """Set an explicit context limit; None keeps the current value"""
        if limit is None:
            return self
        return self._with(context_limit=limit)

    def with_temperature(self, temperature: float | None) -> "ModelConfig":
        if temperature is None:
            return self
        return self._with(temperature=temperature)

    def with_max_tokens(self, max_tokens: int | None) -> "ModelConfig":
        if max_tokens is None:
            return self
        return self._with(max_tokens=max_tokens)

    def get_context_limit(self) -> int:
        """Context limit for this model, falling back to the global default"""
        if self.context_limit is None:
            return DEFAULT_CONTEXT_LIMIT
        return self.context_limit
