"""Tool descriptors offered to the model"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Tool:
    """A tool the model may invoke: name, description and JSON schema for parameters"""
    name: str
    description: str
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []}
    )

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }
