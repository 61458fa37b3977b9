"""Anthropic Messages API request/response translation"""

import logging
from typing import Any

from ...message import (
    ImageContent,
    Message,
    TextContent,
    ToolCall,
    ToolRequest,
    ToolResponse,
)
from ...model import ModelConfig
from ...tool import Tool
from ..base import Usage
from ..errors import RequestFailedError, UsageError
from ..utils import (
    ImageFormat,
    build_usage,
    convert_image,
    errored_request_ids,
    errored_request_text,
    errored_response_text,
    is_valid_function_name,
    message_contains,
    tool_response_text,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 8192
CACHE_CONTROL = {"type": "ephemeral"}


def is_context_length_error(error: dict) -> bool:
    """https://docs.anthropic.com/en/api/errors"""
    return message_contains(error, "too long", "too many")


def _format_tool_result_content(response: ToolResponse) -> list[dict] | str:
    if response.error:
        return f"Error: {response.error}"
    blocks = []
    for item in response.content:
        if isinstance(item, TextContent):
            blocks.append({"type": "text", "text": item.text})
        elif isinstance(item, ImageContent):
            blocks.append(convert_image(item, ImageFormat.ANTHROPIC))
    return blocks


def format_messages(messages: list[Message]) -> list[dict]:
    """Convert messages to Anthropic format"""
    result = []
    errored = errored_request_ids(messages)

    for msg in messages:
        content = []
        for item in msg.content:
            if isinstance(item, TextContent):
                if item.text:
                    content.append({"type": "text", "text": item.text})
            elif isinstance(item, ImageContent):
                content.append(convert_image(item, ImageFormat.ANTHROPIC))
            elif isinstance(item, ToolRequest):
                # Requests the model got wrong have no tool_use to pair with
                if item.tool_call is None:
                    content.append({"type": "text", "text": errored_request_text(item)})
                else:
                    content.append({
                        "type": "tool_use",
                        "id": item.id,
                        "name": item.tool_call.name,
                        "input": item.tool_call.arguments,
                    })
            elif isinstance(item, ToolResponse) and item.id in errored:
                text = tool_response_text(item)
                content.append({"type": "text", "text": errored_response_text(item.id, text)})
            elif isinstance(item, ToolResponse):
                block: dict[str, Any] = {
                    "type": "tool_result",
                    "tool_use_id": item.id,
                    "content": _format_tool_result_content(item),
                }
                if item.error:
                    block["is_error"] = True
                content.append(block)

        if content:
            result.append({"role": msg.role, "content": content})

    # Cache the tail of the conversation: the last block of the last two user turns
    user_turns = [m for m in result if m["role"] == "user"]
    for turn in user_turns[-2:]:
        turn["content"][-1]["cache_control"] = dict(CACHE_CONTROL)

    if not result:
        result.append({
            "role": "user",
            "content": [{"type": "text", "text": "Ignore"}],
        })

    return result


def format_tools(tools: list[Tool]) -> list[dict]:
    """Convert tools to Anthropic format"""
    result = [
        {
            "name": t.name,
            "description": t.description,
            "input_schema": t.input_schema,
        }
        for t in tools
    ]
    if result:
        result[-1]["cache_control"] = dict(CACHE_CONTROL)
    return result


def format_system(system: str) -> list[dict]:
    return [{"type": "text", "text": system, "cache_control": dict(CACHE_CONTROL)}]


def create_request(
    model_config: ModelConfig,
    system: str,
    messages: list[Message],
    tools: list[Tool],
) -> dict:
    body: dict[str, Any] = {
        "model": model_config.model_name,
        "messages": format_messages(messages),
        "max_tokens": model_config.max_tokens or DEFAULT_MAX_TOKENS,
    }
    if system:
        body["system"] = format_system(system)
    if tools:
        body["tools"] = format_tools(tools)
    if model_config.temperature is not None:
        body["temperature"] = model_config.temperature
    return body


def response_to_message(response: dict) -> Message:
    """Convert an Anthropic response body to a Message"""
    content = response.get("content") if isinstance(response, dict) else None
    if not isinstance(content, list):
        raise RequestFailedError(f"Invalid response: no content array in {response}")

    message = Message.assistant()
    for block in content:
        if not isinstance(block, dict):
            raise RequestFailedError(f"Invalid response: content block is not an object: {block}")
        kind = block.get("type")
        if kind == "text":
            message.with_text(block.get("text", ""))
        elif kind == "tool_use":
            tool_id = block.get("id", "")
            name = block.get("name", "")
            if not is_valid_function_name(name):
                message.with_tool_request(
                    tool_id,
                    error=f"The provided function name '{name}' had invalid characters, "
                          "it must match this regex [a-zA-Z0-9_-]+",
                )
                continue
            message.with_tool_request(tool_id, ToolCall(name=name, arguments=block.get("input") or {}))
        else:
            logger.debug(f"Skipping unsupported content block: {kind}")

    return message


def get_usage(response: dict) -> Usage:
    usage = response.get("usage") if isinstance(response, dict) else None
    if not isinstance(usage, dict):
        raise UsageError("No usage data in response")

    return build_usage(usage.get("input_tokens"), usage.get("output_tokens"), derive_total=True)
