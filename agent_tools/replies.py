"""Reply envelope returned by every tool handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from fastmcp.exceptions import ToolError
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent


@dataclass(frozen=True)
class Reply:
    """Text content plus optional structured data and an error flag."""

    content: tuple[TextContent, ...]
    is_error: bool = False
    data: Mapping[str, Any] | None = None

    @classmethod
    def success(cls, text: str, data: Mapping[str, Any] | None = None) -> Reply:
        return cls(content=(TextContent(type="text", text=text),), data=data)

    @classmethod
    def failure(cls, text: str) -> Reply:
        return cls(content=(TextContent(type="text", text=text),), is_error=True)

    @property
    def text(self) -> str:
        """All text blocks joined by newlines."""
        return "\n".join(block.text for block in self.content)

    def to_tool_result(self) -> ToolResult:
        """Convert the reply for the MCP transport.

        Error replies are raised as ``ToolError`` so the transport reports them
        with ``isError`` set and the reply text as content.
        """
        if self.is_error:
            raise ToolError(self.text)
        structured = dict(self.data) if self.data is not None else None
        return ToolResult(content=list(self.content), structured_content=structured)
