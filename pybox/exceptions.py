"""Exceptions raised by the Box client library."""

from __future__ import annotations

from typing import Any


class BoxError(Exception):
    """Base exception for all pybox errors."""


class BoxConfigError(BoxError):
    """Raised when the client is not configured (e.g. missing API key)."""


class BoxNotFoundError(BoxError):
    """Raised when an attribute or path segment is absent after a fetch."""

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class BoxInvalidPathError(BoxNotFoundError):
    """Raised when a path segment needs a folder but the item is not one."""


class BoxProtocolError(BoxError):
    """Raised when the server answers with a malformed response."""


class BoxAPIError(BoxError):
    """Raised when a remote operation fails.

    Attributes:
        status_code: HTTP status code, if the failure came from an HTTP response
        code: Box error code or v1 status string, if the server sent one
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.details = details or {}


class BoxAuthenticationError(BoxAPIError):
    """Raised when no valid session token is available."""


class BoxPermissionError(BoxAPIError):
    """Raised when access to a resource is forbidden (HTTP 403)."""


class BoxResourceNotFoundError(BoxAPIError):
    """Raised when the server reports a missing resource (HTTP 404)."""


class BoxRateLimitError(BoxAPIError):
    """Raised when the server rate-limits the client (HTTP 429)."""


class BoxNetworkError(BoxAPIError):
    """Raised when the request could not reach the server."""


class BoxDownloadError(BoxAPIError):
    """Raised when downloading content fails."""


class BoxUploadError(BoxAPIError):
    """Raised when uploading content fails."""
