"""
Configuration objects and helpers for the Vektopay client.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .environment import build_environment
from .errors import ConfigError

__all__ = [
    "ClientConfig",
    "ClientParameters",
    "ConfigError",
    "load_client_config",
]

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_POLL_INTERVAL_MS = 3000
DEFAULT_POLL_TIMEOUT_MS = 120_000

_PARAMETER_TO_ENV_KEY = {
    "api_key": "VEKTOPAY_API_KEY",
    "base_url": "VEKTOPAY_BASE_URL",
    "bearer_token": "VEKTOPAY_BEARER_TOKEN",
    "timeout_seconds": "VEKTOPAY_TIMEOUT_SECONDS",
    "poll_interval_ms": "VEKTOPAY_POLL_INTERVAL_MS",
    "poll_timeout_ms": "VEKTOPAY_POLL_TIMEOUT_MS",
    "default_headers": "VEKTOPAY_DEFAULT_HEADERS",
}


def _stringify(value: Any) -> str:
    if isinstance(value, Mapping):
        return json.dumps(dict(value))
    return str(value)


@dataclass(frozen=True)
class ClientParameters:
    """
    Explicit parameter bundle for constructing :class:`ClientConfig`.

    Every field left as ``None`` falls back to the environment.
    """

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    bearer_token: Optional[str] = None
    timeout_seconds: Optional[float | str] = None
    poll_interval_ms: Optional[int | str] = None
    poll_timeout_ms: Optional[int | str] = None
    default_headers: Optional[Mapping[str, str] | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = _stringify(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[ClientParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown client parameter '{key}'") from exc
        overrides[env_key] = _stringify(value)
    return overrides


def _require(values: Mapping[str, str], key: str) -> str:
    value = (values.get(key) or "").strip()
    if not value:
        raise ConfigError(f"{key} must be provided")
    return value


def _parse_number(values: Mapping[str, str], key: str, default: float) -> float:
    raw = values.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        number = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got '{raw}'") from exc
    if number < 0:
        raise ConfigError(f"{key} must not be negative")
    return number


def _parse_headers(raw: Optional[str]) -> Dict[str, str]:
    if raw is None or raw.strip() == "":
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            "VEKTOPAY_DEFAULT_HEADERS must be a JSON object of header names to values"
        ) from exc
    if not isinstance(decoded, dict):
        raise ConfigError("VEKTOPAY_DEFAULT_HEADERS must be a JSON object")
    return {str(key): str(value) for key, value in decoded.items()}


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings shared by every call a client makes."""

    api_key: str
    base_url: str
    bearer_token: Optional[str] = None
    default_headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    poll_timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("api_key must not be empty")
        if not self.base_url:
            raise ConfigError("base_url must not be empty")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(
            self, "default_headers", MappingProxyType(dict(self.default_headers))
        )

    @property
    def has_bearer_token(self) -> bool:
        return bool(self.bearer_token)

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfig":
        api_key = _require(values, "VEKTOPAY_API_KEY")
        base_url = _require(values, "VEKTOPAY_BASE_URL")
        if not base_url.startswith(("http://", "https://")):
            raise ConfigError("VEKTOPAY_BASE_URL must be an http(s) URL")

        bearer_token = (values.get("VEKTOPAY_BEARER_TOKEN") or "").strip() or None

        timeout_seconds = _parse_number(
            values, "VEKTOPAY_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
        )
        if timeout_seconds == 0:
            raise ConfigError("VEKTOPAY_TIMEOUT_SECONDS must be greater than zero")
        poll_interval_ms = int(
            _parse_number(values, "VEKTOPAY_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS)
        )
        poll_timeout_ms = int(
            _parse_number(values, "VEKTOPAY_POLL_TIMEOUT_MS", DEFAULT_POLL_TIMEOUT_MS)
        )

        return cls(
            api_key=api_key,
            base_url=base_url,
            bearer_token=bearer_token,
            default_headers=_parse_headers(values.get("VEKTOPAY_DEFAULT_HEADERS")),
            timeout_seconds=timeout_seconds,
            poll_interval_ms=poll_interval_ms,
            poll_timeout_ms=poll_timeout_ms,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[ClientParameters] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        bearer_token: Optional[str] = None,
        timeout_seconds: Optional[float | str] = None,
        poll_interval_ms: Optional[int | str] = None,
        poll_timeout_ms: Optional[int | str] = None,
        default_headers: Optional[Mapping[str, str] | str] = None,
    ) -> "ClientConfig":
        parameter_overrides = _collect_parameter_overrides(
            parameters,
            {
                "api_key": api_key,
                "base_url": base_url,
                "bearer_token": bearer_token,
                "timeout_seconds": timeout_seconds,
                "poll_interval_ms": poll_interval_ms,
                "poll_timeout_ms": poll_timeout_ms,
                "default_headers": default_headers,
            },
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_client_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    bearer_token: Optional[str] = None,
    timeout_seconds: Optional[float | str] = None,
    poll_interval_ms: Optional[int | str] = None,
    poll_timeout_ms: Optional[int | str] = None,
    default_headers: Optional[Mapping[str, str] | str] = None,
) -> ClientConfig:
    """
    Convenience wrapper that mirrors :meth:`ClientConfig.from_env`.

    The configuration can be provided through environment variables, a
    ``.env`` file, keyword arguments, or any combination of the three.
    """
    return ClientConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        base_url=base_url,
        bearer_token=bearer_token,
        timeout_seconds=timeout_seconds,
        poll_interval_ms=poll_interval_ms,
        poll_timeout_ms=poll_timeout_ms,
        default_headers=default_headers,
    )
