"""Error types raised by inoutflow."""

from __future__ import annotations

from typing import Optional


class InoutflowError(RuntimeError):
    """Base class for every fatal inoutflow error."""


class ConfigError(InoutflowError):
    """Missing or unusable configuration (API key, chain, address)."""


class UrlError(InoutflowError):
    """A request URL could not be built from the configured base URL."""


class TransportError(InoutflowError):
    """The request could not be sent or no response was received."""


class ApiError(InoutflowError):
    """The explorer answered with a non-200 status or a failure envelope."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(InoutflowError):
    """The response body does not match the expected schema."""
