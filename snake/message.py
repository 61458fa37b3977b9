"""Conversation messages exchanged with providers"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Union


@dataclass
class TextContent:
    text: str
    type: Literal["text"] = "text"

    def to_dict(self) -> dict:
        return {"type": self.type, "text": self.text}


@dataclass
class ImageContent:
    """Base64 encoded image"""
    data: str
    mime_type: str
    type: Literal["image"] = "image"

    def to_dict(self) -> dict:
        return {"type": self.type, "data": self.data, "mime_type": self.mime_type}


@dataclass
class ToolCall:
    """A tool invocation requested by the model"""
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "arguments": self.arguments,
        }


@dataclass
class ToolRequest:
    """A tool call from the model, or the reason it could not be understood"""
    id: str
    tool_call: ToolCall | None = None
    error: str | None = None
    type: Literal["tool_request"] = "tool_request"

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"type": self.type, "id": self.id}
        if self.tool_call:
            result["tool_call"] = self.tool_call.to_dict()
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class ToolResponse:
    """Result of executing a tool request, sent back to the model"""
    id: str
    content: list[Union[TextContent, ImageContent]] = field(default_factory=list)
    error: str | None = None
    type: Literal["tool_response"] = "tool_response"

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "type": self.type,
            "id": self.id,
            "content": [c.to_dict() for c in self.content],
        }
        if self.error:
            result["error"] = self.error
        return result


Content = Union[TextContent, ImageContent, ToolRequest, ToolResponse]


def _content_from_dict(data: dict) -> Content:
    kind = data.get("type")
    if kind == "text":
        return TextContent(text=data["text"])
    if kind == "image":
        return ImageContent(data=data["data"], mime_type=data["mime_type"])
    if kind == "tool_request":
        call = data.get("tool_call")
        return ToolRequest(
            id=data["id"],
            tool_call=ToolCall(name=call["name"], arguments=call.get("arguments", {})) if call else None,
            error=data.get("error"),
        )
    if kind == "tool_response":
        return ToolResponse(
            id=data["id"],
            content=[_content_from_dict(c) for c in data.get("content", [])],
            error=data.get("error"),
        )
    raise ValueError(f"Unknown content type: {kind}")


@dataclass
class Message:
    """A single conversation turn made of content blocks"""
    role: Literal["user", "assistant"]
    content: list[Content] = field(default_factory=list)
    created: datetime = field(default_factory=datetime.now)

    @classmethod
    def user(cls) -> "Message":
        return cls(role="user")

    @classmethod
    def assistant(cls) -> "Message":
        return cls(role="assistant")

    def with_content(self, content: Content) -> "Message":
        self.content.append(content)
        return self

    def with_text(self, text: str) -> "Message":
        return self.with_content(TextContent(text=text))

    def with_image(self, data: str, mime_type: str) -> "Message":
        return self.with_content(ImageContent(data=data, mime_type=mime_type))

    def with_tool_request(
        self,
        id: str,
        tool_call: ToolCall | None = None,
        error: str | None = None,
    ) -> "Message":
        return self.with_content(ToolRequest(id=id, tool_call=tool_call, error=error))

    def with_tool_response(
        self,
        id: str,
        content: list[Union[TextContent, ImageContent]] | None = None,
        error: str | None = None,
    ) -> "Message":
        return self.with_content(ToolResponse(id=id, content=content or [], error=error))

    @property
    def text(self) -> str:
        """Concatenated text of all text blocks"""
        return "\n".join(c.text for c in self.content if isinstance(c, TextContent))

    @property
    def tool_requests(self) -> list[ToolRequest]:
        return [c for c in self.content if isinstance(c, ToolRequest)]

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "content": [c.to_dict() for c in self.content],
            "created": self.created.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        """Create from dictionary"""
        return cls(
            role=data["role"],
            content=[_content_from_dict(c) for c in data.get("content", [])],
            created=datetime.fromisoformat(data.get("created", datetime.now().isoformat())),
        )
