"""Tests for per-vendor request/response translation"""

import json

import pytest

from snake.message import ImageContent, Message, TextContent, ToolCall
from snake.model import ModelConfig
from snake.provider.base import Usage
from snake.provider.errors import RequestFailedError, UsageError
from snake.provider.formats import anthropic as anthropic_format
from snake.provider.formats import google as google_format
from snake.provider.formats import openai as openai_format
from snake.provider.utils import unescape_json_values
from snake.tool import Tool


@pytest.fixture
def read_tool():
    return Tool(
        name="read_file",
        description="Read a file from disk",
        input_schema={
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "additionalProperties": False,
            "required": ["path"],
            "properties": {
                "path": {"type": "string", "description": "File path"},
                "limit": {"type": "integer", "description": "Max lines"},
            },
        },
    )


@pytest.fixture
def conversation():
    """user asks, assistant calls a tool, user returns the result"""
    return [
        Message.user().with_text("What is in notes.txt?"),
        Message.assistant()
        .with_text("Let me read it")
        .with_tool_request("call_1", ToolCall(name="read_file", arguments={"path": "notes.txt"})),
        Message.user().with_tool_response("call_1", [TextContent(text="buy milk")]),
    ]


@pytest.fixture
def errored_conversation():
    """assistant made a tool call that could not be parsed; the caller answered it"""
    return [
        Message.user().with_text("hi"),
        Message.assistant().with_tool_request("bad_1", error="The provided function name 'bad name!' had invalid characters"),
        Message.user().with_tool_response("bad_1", error="Unknown tool"),
    ]


class TestAnthropicFormat:
    def test_create_request(self, conversation, read_tool):
        model = ModelConfig(model_name="claude-3-5-sonnet-latest").with_temperature(0.3)
        body = anthropic_format.create_request(model, "Be brief", conversation, [read_tool])

        assert body["model"] == "claude-3-5-sonnet-latest"
        assert body["max_tokens"] == anthropic_format.DEFAULT_MAX_TOKENS
        assert body["temperature"] == 0.3
        assert body["system"] == [
            {"type": "text", "text": "Be brief", "cache_control": {"type": "ephemeral"}}
        ]
        assert body["tools"][0]["input_schema"]["required"] == ["path"]
        assert body["tools"][-1]["cache_control"] == {"type": "ephemeral"}

    def test_messages(self, conversation):
        messages = anthropic_format.format_messages(conversation)

        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        tool_use = messages[1]["content"][1]
        assert tool_use == {
            "type": "tool_use",
            "id": "call_1",
            "name": "read_file",
            "input": {"path": "notes.txt"},
        }
        tool_result = messages[2]["content"][0]
        assert tool_result["type"] == "tool_result"
        assert tool_result["tool_use_id"] == "call_1"
        assert tool_result["content"] == [{"type": "text", "text": "buy milk"}]

    def test_last_two_user_turns_cached(self, conversation):
        messages = anthropic_format.format_messages(conversation)
        assert messages[0]["content"][-1]["cache_control"] == {"type": "ephemeral"}
        assert messages[2]["content"][-1]["cache_control"] == {"type": "ephemeral"}
        assert "cache_control" not in messages[1]["content"][-1]

    def test_tool_error_response(self):
        messages = anthropic_format.format_messages([
            Message.user().with_tool_response("call_1", error="file not found"),
        ])
        block = messages[0]["content"][0]
        assert block["is_error"] is True
        assert block["content"] == "Error: file not found"

    def test_empty_history_gets_placeholder(self):
        messages = anthropic_format.format_messages([])
        assert messages == [{"role": "user", "content": [{"type": "text", "text": "Ignore"}]}]

    def test_max_tokens_from_config(self):
        model = ModelConfig(model_name="claude-3-opus").with_max_tokens(256)
        body = anthropic_format.create_request(model, "", [Message.user().with_text("hi")], [])
        assert body["max_tokens"] == 256
        assert "tools" not in body
        assert "system" not in body

    def test_response_to_message(self):
        response = {
            "content": [
                {"type": "text", "text": "Reading now"},
                {"type": "tool_use", "id": "toolu_1", "name": "read_file", "input": {"path": "a.txt"}},
                {"type": "tool_use", "id": "toolu_2", "name": "bad name!", "input": {}},
            ],
        }
        message = anthropic_format.response_to_message(response)

        assert message.role == "assistant"
        assert message.text == "Reading now"
        ok, bad = message.tool_requests
        assert ok.tool_call == ToolCall(name="read_file", arguments={"path": "a.txt"})
        assert bad.tool_call is None
        assert "invalid characters" in bad.error

    def test_response_without_content(self):
        with pytest.raises(RequestFailedError):
            anthropic_format.response_to_message({"type": "message"})

    def test_usage(self):
        usage = anthropic_format.get_usage({"usage": {"input_tokens": 12, "output_tokens": 30}})
        assert usage == Usage(input_tokens=12, output_tokens=30, total_tokens=42)

    def test_usage_missing(self):
        with pytest.raises(UsageError):
            anthropic_format.get_usage({"content": []})
    def test_errored_request_replayed_as_text(self, errored_conversation):
        messages = anthropic_format.format_messages(errored_conversation)

        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        blocks = [block for m in messages for block in m["content"]]
        assert all(block["type"] == "text" for block in blocks)
        assert "Tool request bad_1 failed" in messages[1]["content"][0]["text"]
        assert messages[2]["content"][0]["text"] == "Tool result for bad_1: Error: Unknown tool"

    def test_valid_and_errored_requests_mixed(self, errored_conversation):
        history = errored_conversation + [
            Message.assistant().with_tool_request("call_2", ToolCall(name="read_file", arguments={"path": "a"})),
            Message.user().with_tool_response("call_2", [TextContent(text="ok")]),
        ]
        messages = anthropic_format.format_messages(history)

        assert messages[3]["content"][0]["type"] == "tool_use"
        assert messages[4]["content"][0]["type"] == "tool_result"
        assert messages[4]["content"][0]["tool_use_id"] == "call_2"

    def test_content_block_not_an_object(self):
        with pytest.raises(RequestFailedError):
            anthropic_format.response_to_message({"content": ["x"]})

    def test_usage_with_bad_counts(self):
        with pytest.raises(UsageError):
            anthropic_format.get_usage({"usage": {"input_tokens": "many", "output_tokens": 3}})


class TestOpenAIFormat:
    def test_create_request(self, conversation, read_tool):
        model = ModelConfig(model_name="gpt-4o").with_temperature(0.5).with_max_tokens(512)
        body = openai_format.create_request(model, "Be brief", conversation, [read_tool])

        assert body["model"] == "gpt-4o"
        assert body["temperature"] == 0.5
        assert body["max_tokens"] == 512
        assert body["messages"][0] == {"role": "system", "content": "Be brief"}
        assert body["tools"] == [{
            "type": "function",
            "function": {
                "name": "read_file",
                "description": "Read a file from disk",
                "parameters": read_tool.input_schema,
            },
        }]

    def test_messages(self, conversation):
        messages = openai_format.format_messages(conversation)

        assert messages[0] == {"role": "user", "content": "What is in notes.txt?"}
        assistant = messages[1]
        assert assistant["content"] == "Let me read it"
        call = assistant["tool_calls"][0]
        assert call["id"] == "call_1"
        assert call["function"]["name"] == "read_file"
        assert json.loads(call["function"]["arguments"]) == {"path": "notes.txt"}
        assert messages[2] == {"role": "tool", "content": "buy milk", "tool_call_id": "call_1"}

    def test_tool_results_precede_user_text(self):
        messages = openai_format.format_messages([
            Message.user().with_tool_response("call_1", [TextContent(text="done")]).with_text("thanks"),
        ])
        assert [m["role"] for m in messages] == ["tool", "user"]

    def test_images_in_tool_response(self):
        messages = openai_format.format_messages([
            Message.user().with_tool_response("call_1", [TextContent(text="screenshot")]),
        ])
        assert len(messages) == 1

        response = Message.user().with_tool_response(
            "call_2",
            [TextContent(text="see image"), ImageContent(data="aGVsbG8=", mime_type="image/png")],
        )
        messages = openai_format.format_messages([response])
        assert messages[0]["role"] == "tool"
        assert messages[1]["role"] == "user"
        assert messages[1]["content"][0]["image_url"]["url"] == "data:image/png;base64,aGVsbG8="

    def test_reasoning_model(self):
        model = ModelConfig(model_name="o1-mini").with_temperature(0.5).with_max_tokens(100)
        body = openai_format.create_request(model, "sys", [Message.user().with_text("hi")], [])

        assert body["messages"][0]["role"] == "developer"
        assert body["max_completion_tokens"] == 100
        assert "max_tokens" not in body
        assert "temperature" not in body

    def test_duplicate_tool_names(self, read_tool):
        with pytest.raises(RequestFailedError, match="Duplicate tool name"):
            openai_format.format_tools([read_tool, read_tool])

    def test_response_to_message(self):
        response = {
            "choices": [{
                "message": {
                    "role": "assistant",
                    "content": "Sure",
                    "tool_calls": [
                        {"id": "c1", "type": "function", "function": {"name": "read_file", "arguments": '{"path": "x"}'}},
                        {"id": "c2", "type": "function", "function": {"name": "read_file", "arguments": "{not json"}},
                        {"id": "c3", "type": "function", "function": {"name": "read file", "arguments": "{}"}},
                    ],
                },
            }],
        }
        message = openai_format.response_to_message(response)

        assert message.text == "Sure"
        first, second, third = message.tool_requests
        assert first.tool_call == ToolCall(name="read_file", arguments={"path": "x"})
        assert "Could not interpret tool use parameters" in second.error
        assert "invalid characters" in third.error

    def test_response_without_choices(self):
        with pytest.raises(RequestFailedError):
            openai_format.response_to_message({"choices": []})

    def test_usage(self):
        usage = openai_format.get_usage({"usage": {"prompt_tokens": 5, "completion_tokens": 7}})
        assert usage == Usage(input_tokens=5, output_tokens=7, total_tokens=12)

    def test_usage_missing(self):
        with pytest.raises(UsageError):
            openai_format.get_usage({"choices": []})
    def test_errored_request_replayed_as_text(self, errored_conversation):
        messages = openai_format.format_messages(errored_conversation)

        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert "tool_calls" not in messages[1]
        assert "Tool request bad_1 failed" in messages[1]["content"]
        assert messages[2]["content"] == "Tool result for bad_1: Error: Unknown tool"

    def test_every_tool_message_answers_a_call(self, errored_conversation, conversation):
        messages = openai_format.format_messages(errored_conversation + conversation)

        call_ids = {call["id"] for m in messages for call in m.get("tool_calls", [])}
        tool_ids = {m["tool_call_id"] for m in messages if m["role"] == "tool"}
        assert tool_ids == call_ids == {"call_1"}

    def test_null_message(self):
        with pytest.raises(RequestFailedError):
            openai_format.response_to_message({"choices": [{"message": None}]})

    def test_usage_with_bad_counts(self):
        with pytest.raises(UsageError):
            openai_format.get_usage({"usage": {"prompt_tokens": "many", "completion_tokens": 3}})


class TestGoogleFormat:
    def test_create_request(self, conversation, read_tool):
        model = ModelConfig(model_name="gemini-1.5-pro").with_temperature(0.1).with_max_tokens(64)
        body = google_format.create_request(model, "Be brief", conversation, [read_tool])

        assert body["system_instruction"] == {"parts": [{"text": "Be brief"}]}
        assert body["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 64}
        assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]

    def test_function_parts(self, conversation):
        contents = google_format.format_messages(conversation)

        assert contents[1]["parts"][1] == {
            "functionCall": {"name": "read_file", "args": {"path": "notes.txt"}}
        }
        assert contents[2]["parts"][0] == {
            "functionResponse": {"name": "read_file", "response": {"content": "buy milk"}}
        }

    def test_tools_cleaned(self, read_tool):
        declaration = google_format.format_tools([read_tool])[0]["functionDeclarations"][0]
        parameters = declaration["parameters"]

        assert parameters["required"] == ["path"]
        assert set(parameters["properties"]) == {"path", "limit"}
        assert "$schema" not in parameters
        assert "additionalProperties" not in parameters

    def test_tool_without_properties(self):
        tool = Tool(name="ping", description="Ping the server")
        declaration = google_format.format_tools([tool])[0]["functionDeclarations"][0]
        assert "parameters" not in declaration

    def test_response_to_message(self):
        response = {
            "candidates": [{
                "content": {
                    "role": "model",
                    "parts": [
                        {"text": "Checking"},
                        {"functionCall": {"name": "read_file", "args": {"path": "b.txt"}}},
                    ],
                },
            }],
        }
        message = google_format.response_to_message(response)

        assert message.text == "Checking"
        (request,) = message.tool_requests
        assert request.id.startswith("read_file_")
        assert request.tool_call == ToolCall(name="read_file", arguments={"path": "b.txt"})

    def test_response_without_candidates(self):
        with pytest.raises(RequestFailedError):
            google_format.response_to_message({"promptFeedback": {"blockReason": "SAFETY"}})

    def test_usage(self):
        usage = google_format.get_usage({
            "usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 4, "totalTokenCount": 7},
        })
        assert usage == Usage(input_tokens=3, output_tokens=4, total_tokens=7)

    def test_usage_missing(self):
        with pytest.raises(UsageError):
            google_format.get_usage({"candidates": []})
    def test_errored_request_replayed_as_text(self, errored_conversation):
        contents = google_format.format_messages(errored_conversation)

        assert [c["role"] for c in contents] == ["user", "model", "user"]
        parts = [part for c in contents for part in c["parts"]]
        assert all(set(part) == {"text"} for part in parts)
        assert contents[2]["parts"][0]["text"] == "Tool result for bad_1: Error: Unknown tool"

    def test_property_names_are_not_keywords(self):
        tool = Tool(
            name="configure",
            description="Set options",
            input_schema={
                "type": "object",
                "properties": {
                    "additionalProperties": {"type": "boolean"},
                    "nested": {
                        "type": "object",
                        "additionalProperties": False,
                        "properties": {"$schema": {"type": "string"}},
                    },
                },
            },
        )
        properties = google_format.format_tools([tool])[0]["functionDeclarations"][0]["parameters"]["properties"]

        assert properties["additionalProperties"] == {"type": "boolean"}
        assert properties["nested"] == {"type": "object", "properties": {"$schema": {"type": "string"}}}

    def test_part_not_an_object(self):
        with pytest.raises(RequestFailedError):
            google_format.response_to_message({"candidates": [{"content": {"parts": ["text"]}}]})

    def test_usage_with_bad_counts(self):
        with pytest.raises(UsageError):
            google_format.get_usage({"usageMetadata": {"promptTokenCount": "many"}})


class TestUnescape:
    def test_nested_values(self):
        value = {
            "text": "line one\\nline two",
            "args": [{"code": 'print(\\"hi\\")'}],
            "count": 3,
        }
        assert unescape_json_values(value) == {
            "text": "line one\nline two",
            "args": [{"code": 'print("hi")'}],
            "count": 3,
        }

    def test_double_escaped(self):
        assert unescape_json_values("a\\\\nb") == "a\nb"

    def test_keys_untouched(self):
        assert list(unescape_json_values({"a\\nb": "x"})) == ["a\\nb"]
