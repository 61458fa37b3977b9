"""Shared transport and translation helpers for providers"""

import json
import logging
import re
from enum import Enum
from typing import Any, Callable, Iterable

import httpx
from pydantic import ValidationError

from ..message import ImageContent, Message, TextContent, ToolRequest, ToolResponse
from ..model import ModelConfig
from .base import Usage
from .errors import (
    AuthenticationError,
    ContextLengthExceededError,
    RateLimitExceededError,
    RequestFailedError,
    ServerError,
    UsageError,
)

logger = logging.getLogger(__name__)
trace_logger = logging.getLogger("snake.trace")

ContextLengthRule = Callable[[dict], bool]

_FUNCTION_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


class ImageFormat(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


def convert_image(image: ImageContent, image_format: ImageFormat) -> dict:
    """Convert an image block to the vendor's inline image representation"""
    if image_format == ImageFormat.OPENAI:
        return {
            "type": "image_url",
            "image_url": {"url": f"data:{image.mime_type};base64,{image.data}"},
        }
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": image.mime_type,
            "data": image.data,
        },
    }


def is_valid_function_name(name: str) -> bool:
    return bool(_FUNCTION_NAME_RE.match(name))


def tool_response_text(response: ToolResponse) -> str:
    """Flatten a tool response to text; images are dropped"""
    if response.error:
        return f"Error: {response.error}"
    return "\n".join(c.text for c in response.content if isinstance(c, TextContent))


def errored_request_ids(messages: list[Message]) -> set[str]:
    """Ids of tool requests the model got wrong; these are replayed as plain text"""
    return {
        request.id
        for msg in messages
        for request in msg.tool_requests
        if request.tool_call is None
    }


def errored_request_text(request: ToolRequest) -> str:
    return f"Tool request {request.id} failed: {request.error}"


def errored_response_text(request_id: str, text: str) -> str:
    return f"Tool result for {request_id}: {text}"


def redact(text: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


def status_text(status: int) -> str:
    reason = httpx.codes.get_reason_phrase(status)
    return f"{status} {reason}" if reason else str(status)


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    payload: dict,
    headers: dict | None = None,
    params: dict | None = None,
    secrets: Iterable[str] = (),
) -> httpx.Response:
    """POST a JSON payload; transport failures become RequestFailedError"""
    try:
        return await client.post(url, json=payload, headers=headers, params=params)
    except httpx.RequestError as e:
        detail = redact(f"{type(e).__name__}: {e}", secrets)
        raise RequestFailedError(detail) from e


def parse_body(response: httpx.Response) -> Any:
    """Decode a JSON body; an unparsable body is treated as absent"""
    try:
        return response.json()
    except ValueError:
        return None


def error_object(payload: Any) -> dict | None:
    """Find the vendor error object, e.g. {"error": {"message": ...}}"""
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        payload = payload[0]
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return payload["error"]
    return None


def handle_status(status: int, payload: Any, is_context_length_error: ContextLengthRule) -> Any:
    """Classify a vendor response by HTTP status into a payload or a ProviderError"""
    if status == 200:
        if payload is None:
            raise RequestFailedError("Response body is not valid JSON")
        return payload

    if status in (401, 403):
        raise AuthenticationError(
            "Authentication failed. Please ensure your API keys are valid and have the "
            f"required permissions. Status: {status_text(status)}. Response: {payload}"
        )

    if status == 400:
        message = "Unknown error"
        error = error_object(payload)
        if error is not None:
            logger.debug(f"Bad request error: {error}")
            message = str(error.get("message") or "Unknown error")
            if is_context_length_error(error):
                raise ContextLengthExceededError(message)
        logger.debug(f"Provider request failed with status: {status_text(status)}. Payload: {payload}")
        raise RequestFailedError(f"Request failed with status: {status_text(status)}. Message: {message}")

    if status == 429:
        raise RateLimitExceededError(str(payload))

    if status in (500, 503):
        raise ServerError(str(payload))

    logger.debug(f"Provider request failed with status: {status_text(status)}. Payload: {payload}")
    raise RequestFailedError(f"Request failed with status: {status_text(status)}")


def handle_response(response: httpx.Response, is_context_length_error: ContextLengthRule) -> Any:
    return handle_status(response.status_code, parse_body(response), is_context_length_error)


def message_contains(error: dict, *needles: str) -> bool:
    message = str(error.get("message") or "").lower()
    return any(needle in message for needle in needles)


def unescape_json_values(value: Any) -> Any:
    """Undo the extra escaping some vendors apply to string values"""
    if isinstance(value, dict):
        return {k: unescape_json_values(v) for k, v in value.items()}
    if isinstance(value, list):
        return [unescape_json_values(v) for v in value]
    if isinstance(value, str):
        return (
            value.replace("\\\\n", "\n")
            .replace("\\\\t", "\t")
            .replace("\\\\r", "\r")
            .replace('\\\\"', '"')
            .replace("\\n", "\n")
            .replace("\\t", "\t")
            .replace("\\r", "\r")
            .replace('\\"', '"')
        )
    return value


def build_usage(
    input_tokens: Any,
    output_tokens: Any,
    total_tokens: Any = None,
    derive_total: bool = False,
) -> Usage:
    """Validate vendor token counts into a Usage record"""
    try:
        usage = Usage(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=total_tokens)
    except ValidationError as e:
        raise UsageError(f"Invalid usage data: {e.error_count()} bad token count(s)") from e

    if derive_total and usage.total_tokens is None:
        if usage.input_tokens is not None and usage.output_tokens is not None:
            usage.total_tokens = usage.input_tokens + usage.output_tokens
    return usage


def get_model(response: dict) -> str:
    model = response.get("model") if isinstance(response, dict) else None
    return model if isinstance(model, str) else "Unknown"


def emit_debug_trace(model_config: ModelConfig, payload: Any, response: Any, usage: Usage):
    """Log request/response/usage for debugging. Never raises."""
    try:
        if not trace_logger.isEnabledFor(logging.DEBUG):
            return
        trace_logger.debug(json.dumps({
            "model_config": model_config.model_dump(),
            "input": payload,
            "output": response,
            "usage": usage.model_dump(),
        }, default=str))
    except Exception as e:
        logger.debug(f"Failed to emit debug trace: {type(e).__name__}: {e}")
