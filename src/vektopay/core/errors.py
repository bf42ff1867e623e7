"""
Exception hierarchy raised by the Vektopay client.

Every error carries a stable machine-readable ``code`` so callers can branch
on the failure without parsing messages.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "ConfigError",
    "GatewayError",
    "PollError",
    "PresentationError",
    "ProtocolError",
    "TransportError",
    "VektopayError",
]


class VektopayError(Exception):
    """Base class for every error raised by the client."""

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        self.code = code
        self.message = message or code
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.message == self.code:
            return self.code
        return f"{self.code}: {self.message}"


class TransportError(VektopayError):
    """The request never produced a usable HTTP response."""


class GatewayError(VektopayError):
    """The gateway answered with a non-2xx status."""

    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(code, message)
        self.status_code = status_code
        self.payload = payload


class ProtocolError(VektopayError):
    """A 2xx response is missing required fields or has the wrong shape."""


class ConfigError(VektopayError):
    """Raised when the supplied configuration is invalid or incomplete."""

    def __init__(self, message: str, code: str = "invalid_config") -> None:
        super().__init__(code, message)


class PollError(VektopayError):
    """Polling stopped before a terminal status was observed."""


class PresentationError(VektopayError):
    """No surface is available to present an authentication challenge."""
