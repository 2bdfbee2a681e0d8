"""Error variants raised by the external API clients.

Clients classify failures into one of these kinds; tool handlers decide how a
kind is rendered for the calling agent.
"""

from __future__ import annotations

from typing import Any


class ConfigurationError(Exception):
    """Required startup configuration is missing or invalid."""


class ApiError(Exception):
    """Base class for failures talking to an external API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def __str__(self) -> str:
        return self.message

    def with_context(self, context: str) -> ApiError:
        """Return an error of the same kind whose message is prefixed with ``context``."""
        return type(self)(
            f"{context}: {self.message}",
            status_code=self.status_code,
            details=self.details,
        )


class NetworkError(ApiError):
    """The service could not be reached or returned an unreadable response."""


class NotFoundError(ApiError):
    """A lookup matched nothing."""


class RemoteRejectedError(ApiError):
    """The service answered with an HTTP error status.

    ``message`` is the API's own message when the payload carries one and
    ``details`` holds any sub-errors it listed.
    """
