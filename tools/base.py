"""Tool contract shared by the built-in tools and the MCP server.

A tool takes a mapping of argument name -> JSONValue and returns a
ToolResult. Tools never raise: missing arguments, bad values and failures
of the outside world all come back as ``ToolResult.failure(...)``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class ValueKind(Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


@dataclass(frozen=True)
class JSONValue:
    """A primitive JSON value tagged with its kind.

    Decoding tries boolean, integer, number, string in that order, so ``true``
    is never read back as ``1`` or ``"True"``. Anything else becomes null.
    """
    kind: ValueKind
    value: Union[str, int, float, bool, None] = None

    @classmethod
    def string(cls, value: str) -> "JSONValue":
        return cls(ValueKind.STRING, value)

    @classmethod
    def integer(cls, value: int) -> "JSONValue":
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def number(cls, value: float) -> "JSONValue":
        return cls(ValueKind.NUMBER, value)

    @classmethod
    def boolean(cls, value: bool) -> "JSONValue":
        return cls(ValueKind.BOOLEAN, value)

    @classmethod
    def null(cls) -> "JSONValue":
        return cls(ValueKind.NULL, None)

    @classmethod
    def from_json(cls, raw: Any) -> "JSONValue":
        # bool is a subclass of int, so it has to be checked first
        if isinstance(raw, bool):
            return cls.boolean(raw)
        if isinstance(raw, int):
            return cls.integer(raw)
        if isinstance(raw, float):
            return cls.number(raw)
        if isinstance(raw, str):
            return cls.string(raw)
        return cls.null()

    @property
    def string_value(self) -> Optional[str]:
        return self.value if self.kind is ValueKind.STRING else None

    @property
    def int_value(self) -> Optional[int]:
        return self.value if self.kind is ValueKind.INTEGER else None

    @property
    def number_value(self) -> Optional[float]:
        return self.value if self.kind is ValueKind.NUMBER else None

    @property
    def bool_value(self) -> Optional[bool]:
        return self.value if self.kind is ValueKind.BOOLEAN else None

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def to_json(self) -> Union[str, int, float, bool, None]:
        return self.value

    def __str__(self) -> str:
        if self.kind is ValueKind.NULL:
            return "null"
        if self.kind is ValueKind.BOOLEAN:
            return "true" if self.value else "false"
        return str(self.value)


class ParameterType(Enum):
    """JSON Schema type of a tool parameter."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ToolParameter:
    name: str
    description: str
    type: ParameterType = ParameterType.STRING
    required: bool = True
    enum_values: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class ToolResult:
    content: str
    is_error: bool = False

    @classmethod
    def success(cls, content: str) -> "ToolResult":
        return cls(content=content, is_error=False)

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(content=message, is_error=True)


Arguments = Dict[str, JSONValue]


class Tool(ABC):
    """A capability the claude CLI can call through the MCP server."""

    name: str = ""
    description: str = ""
    parameters: Tuple[ToolParameter, ...] = ()

    @abstractmethod
    async def execute(self, arguments: Arguments) -> ToolResult:
        """Run the tool. Must not raise."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
