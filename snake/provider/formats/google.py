"""Google Gemini generateContent request/response translation"""

import logging
import uuid
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
    build_usage,
    errored_request_ids,
    errored_request_text,
    errored_response_text,
    is_valid_function_name,
    message_contains,
    tool_response_text,
)

logger = logging.getLogger(__name__)

# JSON schema keys the Gemini function declaration schema rejects
UNSUPPORTED_SCHEMA_KEYS = {"$schema", "additionalProperties"}
# Keywords whose value maps user-chosen names to subschemas
SCHEMA_MAP_KEYS = {"properties", "patternProperties", "definitions", "$defs"}


def is_context_length_error(error: dict) -> bool:
    status = error.get("status")
    if status in (None, "INVALID_ARGUMENT") and message_contains(error, "exceeds"):
        return True
    return message_contains(error, "too long", "too many")


def _tool_names_by_id(messages: list[Message]) -> dict[str, str]:
    names = {}
    for msg in messages:
        for request in msg.tool_requests:
            if request.tool_call is not None:
                names[request.id] = request.tool_call.name
    return names


def format_messages(messages: list[Message]) -> list[dict]:
    """Convert messages to Gemini contents"""
    tool_names = _tool_names_by_id(messages)
    errored = errored_request_ids(messages)
    result = []

    for msg in messages:
        parts = []
        for item in msg.content:
            if isinstance(item, TextContent):
                if item.text:
                    parts.append({"text": item.text})
            elif isinstance(item, ImageContent):
                parts.append({"inline_data": {"mime_type": item.mime_type, "data": item.data}})
            elif isinstance(item, ToolRequest):
                # Requests the model got wrong have no functionCall to answer
                if item.tool_call is None:
                    parts.append({"text": errored_request_text(item)})
                else:
                    parts.append({
                        "functionCall": {
                            "name": item.tool_call.name,
                            "args": item.tool_call.arguments,
                        }
                    })
            elif isinstance(item, ToolResponse) and item.id in errored:
                parts.append({"text": errored_response_text(item.id, tool_response_text(item))})
            elif isinstance(item, ToolResponse):
                parts.append({
                    "functionResponse": {
                        "name": tool_names.get(item.id, item.id),
                        "response": {"content": tool_response_text(item)},
                    }
                })

        if parts:
            result.append({
                "role": "model" if msg.role == "assistant" else "user",
                "parts": parts,
            })

    return result


def clean_schema(schema: Any) -> Any:
    """Strip schema keywords Gemini does not accept, keeping everything else"""
    if isinstance(schema, list):
        return [clean_schema(v) for v in schema]
    if not isinstance(schema, dict):
        return schema

    cleaned = {}
    for key, value in schema.items():
        if key in UNSUPPORTED_SCHEMA_KEYS:
            continue
        if key in SCHEMA_MAP_KEYS and isinstance(value, dict):
            cleaned[key] = clean_properties(value)
        else:
            cleaned[key] = clean_schema(value)
    return cleaned


def clean_properties(properties: dict) -> dict:
    """Clean each named subschema; the names themselves are kept as-is"""
    return {name: clean_schema(schema) for name, schema in properties.items()}


def format_tools(tools: list[Tool]) -> list[dict]:
    """Convert tools to Gemini function declarations"""
    declarations = []
    for t in tools:
        declaration: dict[str, Any] = {
            "name": t.name,
            "description": t.description,
        }
        properties = t.input_schema.get("properties") or {}
        if properties:
            parameters = {
                "type": "object",
                "properties": clean_properties(properties),
            }
            if t.required:
                parameters["required"] = t.required
            declaration["parameters"] = parameters
        declarations.append(declaration)
    return [{"functionDeclarations": declarations}]


def create_request(
    model_config: ModelConfig,
    system: str,
    messages: list[Message],
    tools: list[Tool],
) -> dict:
    body: dict[str, Any] = {
        "system_instruction": {"parts": [{"text": system}]},
        "contents": format_messages(messages),
    }
    if tools:
        body["tools"] = format_tools(tools)

    generation_config = {}
    if model_config.temperature is not None:
        generation_config["temperature"] = model_config.temperature
    if model_config.max_tokens is not None:
        generation_config["maxOutputTokens"] = model_config.max_tokens
    if generation_config:
        body["generationConfig"] = generation_config
    return body


def response_to_message(response: dict) -> Message:
    """Convert a Gemini response body to a Message"""
    try:
        parts = response["candidates"][0]["content"].get("parts") or []
    except (KeyError, IndexError, TypeError, AttributeError):
        raise RequestFailedError(f"Invalid response: no candidates in {response}")

    message = Message.assistant()
    for part in parts:
        if not isinstance(part, dict):
            raise RequestFailedError(f"Invalid response: content part is not an object: {part}")
        if "text" in part:
            message.with_text(part["text"])
        elif "functionCall" in part:
            call = part["functionCall"]
            name = call.get("name", "")
            # Gemini does not assign call ids
            tool_id = f"{name}_{uuid.uuid4().hex[:8]}"
            if not is_valid_function_name(name):
                message.with_tool_request(
                    tool_id,
                    error=f"The provided function name '{name}' had invalid characters, "
                          "it must match this regex [a-zA-Z0-9_-]+",
                )
                continue
            message.with_tool_request(tool_id, ToolCall(name=name, arguments=call.get("args") or {}))
        else:
            logger.debug(f"Skipping unsupported part: {list(part)}")

    return message


def get_usage(response: dict) -> Usage:
    usage = response.get("usageMetadata") if isinstance(response, dict) else None
    if not isinstance(usage, dict):
        raise UsageError("No usageMetadata in response")

    return build_usage(
        usage.get("promptTokenCount"),
        usage.get("candidatesTokenCount"),
        usage.get("totalTokenCount"),
    )
