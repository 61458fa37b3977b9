"""snake: uniform completion client over multiple LLM vendors"""

from .message import ImageContent, Message, TextContent, ToolCall, ToolRequest, ToolResponse
from .model import ModelConfig
from .tool import Tool

__version__ = "0.1.0"

__all__ = [
    "Message",
    "TextContent",
    "ImageContent",
    "ToolCall",
    "ToolRequest",
    "ToolResponse",
    "ModelConfig",
    "Tool",
]
