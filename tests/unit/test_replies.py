"""Tests for the reply envelope."""

import pytest
from fastmcp.exceptions import ToolError

from agent_tools.replies import Reply


def test_success_reply_becomes_tool_result():
    reply = Reply.success("hello", data={"answer": 42})

    result = reply.to_tool_result()

    assert reply.is_error is False
    assert result.content[0].text == "hello"
    assert result.structured_content == {"answer": 42}


def test_success_without_data_has_no_structured_content():
    result = Reply.success("plain").to_tool_result()

    assert result.structured_content is None


def test_failure_reply_raises_tool_error():
    reply = Reply.failure("Error listing repositories: Bad credentials")

    assert reply.is_error is True
    with pytest.raises(ToolError, match="Bad credentials"):
        reply.to_tool_result()


def test_reply_is_immutable():
    reply = Reply.success("hello")

    with pytest.raises(AttributeError):
        reply.is_error = True  # type: ignore[misc]
