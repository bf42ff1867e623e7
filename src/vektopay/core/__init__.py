"""
Core primitives that implement the Vektopay payment lifecycle.
"""

from .challenge import (
    BrowserSurface,
    ChallengeHandle,
    ChallengePresenter,
    PresentationSurface,
)
from .client import CancelSignal, VektopayClient
from .config import ClientConfig, ClientParameters, load_client_config
from .environment import ClientEnvironment, build_environment, load_env_file
from .errors import (
    ConfigError,
    GatewayError,
    PollError,
    PresentationError,
    ProtocolError,
    TransportError,
    VektopayError,
)
from .idempotency import generate_idempotency_key
from .transport import AuthMode, Transport

__all__ = [
    "AuthMode",
    "BrowserSurface",
    "CancelSignal",
    "ChallengeHandle",
    "ChallengePresenter",
    "ClientConfig",
    "ClientEnvironment",
    "ClientParameters",
    "ConfigError",
    "GatewayError",
    "PollError",
    "PresentationError",
    "PresentationSurface",
    "ProtocolError",
    "Transport",
    "TransportError",
    "VektopayClient",
    "VektopayError",
    "build_environment",
    "generate_idempotency_key",
    "load_client_config",
    "load_env_file",
]
