"""OpenAI chat-completions request/response translation (also used by compatible APIs)"""

import json
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

# Reasoning models take the system prompt as "developer" and reject temperature
REASONING_MODEL_PREFIXES = ("o1", "o3")


def is_context_length_error(error: dict) -> bool:
    if error.get("code") == "context_length_exceeded":
        return True
    return message_contains(error, "too long", "too many", "maximum context length")


def is_reasoning_model(model_name: str) -> bool:
    return model_name.startswith(REASONING_MODEL_PREFIXES)


def format_messages(messages: list[Message], image_format: ImageFormat = ImageFormat.OPENAI) -> list[dict]:
    """Convert messages to OpenAI format"""
    result = []
    errored = errored_request_ids(messages)

    for msg in messages:
        converted: dict[str, Any] = {"role": msg.role}
        text_parts = []
        tool_calls = []
        tool_messages = []
        image_messages = []

        for item in msg.content:
            if isinstance(item, TextContent):
                if item.text:
                    text_parts.append(item.text)
            elif isinstance(item, ImageContent):
                image_messages.append({
                    "role": "user",
                    "content": [convert_image(item, image_format)],
                })
            elif isinstance(item, ToolRequest):
                # Requests the model got wrong have no tool_calls entry to answer
                if item.tool_call is None:
                    text_parts.append(errored_request_text(item))
                else:
                    tool_calls.append({
                        "id": item.id,
                        "type": "function",
                        "function": {
                            "name": item.tool_call.name,
                            "arguments": json.dumps(item.tool_call.arguments),
                        },
                    })
            elif isinstance(item, ToolResponse) and item.id in errored:
                text_parts.append(errored_response_text(item.id, tool_response_text(item)))
            elif isinstance(item, ToolResponse):
                tool_messages.append({
                    "role": "tool",
                    "content": tool_response_text(item),
                    "tool_call_id": item.id,
                })
                # Tool messages are text-only; images go back as a user turn
                images = [c for c in item.content if isinstance(c, ImageContent)]
                if images and not item.error:
                    image_messages.append({
                        "role": "user",
                        "content": [convert_image(image, image_format) for image in images],
                    })

        if text_parts:
            converted["content"] = "\n".join(text_parts)
        if tool_calls:
            converted["tool_calls"] = tool_calls
        has_body = "content" in converted or "tool_calls" in converted
        # Tool results must directly follow the assistant turn that made the calls
        if msg.role == "assistant":
            if has_body:
                result.append(converted)
            result.extend(tool_messages)
        else:
            result.extend(tool_messages)
            if has_body:
                result.append(converted)
        result.extend(image_messages)

    return result


def format_tools(tools: list[Tool]) -> list[dict]:
    """Convert tools to OpenAI function format"""
    seen = set()
    result = []
    for t in tools:
        if t.name in seen:
            raise RequestFailedError(f"Duplicate tool name: {t.name}")
        seen.add(t.name)
        result.append({
            "type": "function",
            "function": {
                "name": t.name,
                "description": t.description,
                "parameters": t.input_schema,
            },
        })
    return result


def create_request(
    model_config: ModelConfig,
    system: str,
    messages: list[Message],
    tools: list[Tool],
    image_format: ImageFormat = ImageFormat.OPENAI,
) -> dict:
    reasoning = is_reasoning_model(model_config.model_name)
    system_message = {
        "role": "developer" if reasoning else "system",
        "content": system,
    }

    body: dict[str, Any] = {
        "model": model_config.model_name,
        "messages": [system_message] + format_messages(messages, image_format),
    }
    if tools:
        body["tools"] = format_tools(tools)
    if model_config.temperature is not None and not reasoning:
        body["temperature"] = model_config.temperature
    if model_config.max_tokens is not None:
        key = "max_completion_tokens" if reasoning else "max_tokens"
        body[key] = model_config.max_tokens
    return body


def _parse_tool_call(call: dict) -> ToolRequest:
    tool_id = call.get("id", "")
    function = call.get("function")
    if not isinstance(function, dict):
        function = {}
    name = function.get("name", "")
    if not is_valid_function_name(name):
        return ToolRequest(
            id=tool_id,
            error=f"The provided function name '{name}' had invalid characters, "
                  "it must match this regex [a-zA-Z0-9_-]+",
        )

    raw_arguments = function.get("arguments") or "{}"
    try:
        arguments = json.loads(raw_arguments)
    except json.JSONDecodeError as e:
        return ToolRequest(
            id=tool_id,
            error=f"Could not interpret tool use parameters for id {tool_id}: {e}",
        )
    if not isinstance(arguments, dict):
        return ToolRequest(id=tool_id, error=f"Tool use parameters for id {tool_id} must be an object")
    return ToolRequest(id=tool_id, tool_call=ToolCall(name=name, arguments=arguments))


def response_to_message(response: dict) -> Message:
    """Convert an OpenAI response body to a Message"""
    try:
        original = response["choices"][0]["message"]
    except (KeyError, IndexError, TypeError):
        raise RequestFailedError(f"Invalid response: no choices in {response}")
    if not isinstance(original, dict):
        raise RequestFailedError(f"Invalid response: choice has no message in {response}")

    message = Message.assistant()
    content = original.get("content")
    if isinstance(content, str) and content:
        message.with_text(content)

    for call in original.get("tool_calls") or []:
        if not isinstance(call, dict):
            raise RequestFailedError(f"Invalid response: tool call is not an object: {call}")
        message.with_content(_parse_tool_call(call))

    return message


def get_usage(response: dict) -> Usage:
    usage = response.get("usage") if isinstance(response, dict) else None
    if not isinstance(usage, dict):
        raise UsageError("No usage data in response")

    return build_usage(
        usage.get("prompt_tokens"),
        usage.get("completion_tokens"),
        usage.get("total_tokens"),
        derive_total=True,
    )
