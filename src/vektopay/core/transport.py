"""
HTTP transport for the Vektopay gateway.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

import requests
from requests.structures import CaseInsensitiveDict

from .config import ClientConfig
from .errors import ConfigError, TransportError

__all__ = [
    "AuthMode",
    "Transport",
    "is_success",
]

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
AUTHORIZATION_HEADER = "Authorization"


class AuthMode(str, Enum):
    """How a request proves who is calling."""

    API_KEY = "api_key"
    BEARER = "bearer"
    NONE = "none"


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class Transport:
    """
    Issues authenticated JSON requests against the configured base URL.

    Non-2xx responses are not raised here: the status code and the decoded
    body are handed back so the normalizer can build a structured error.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()

    def build_headers(
        self,
        auth: AuthMode,
        extra: Optional[Mapping[str, str]] = None,
    ) -> CaseInsensitiveDict:
        if auth is AuthMode.BEARER and not self.config.has_bearer_token:
            raise ConfigError(
                "This operation is dashboard-scoped and needs a bearer token",
                code="bearer_token_required",
            )

        headers: CaseInsensitiveDict = CaseInsensitiveDict()
        headers["content-type"] = "application/json"
        headers.update(self.config.default_headers)
        if extra:
            headers.update(extra)

        # Credentials go in last so caller headers can never replace them.
        if auth is AuthMode.API_KEY:
            headers[API_KEY_HEADER] = self.config.api_key
        elif auth is AuthMode.BEARER:
            headers.pop(API_KEY_HEADER, None)
            headers[AUTHORIZATION_HEADER] = f"Bearer {self.config.bearer_token}"
        else:
            headers.pop(API_KEY_HEADER, None)
            headers.pop(AUTHORIZATION_HEADER, None)
        return headers

    def send(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        auth: AuthMode = AuthMode.API_KEY,
        operation: str = "request",
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Tuple[int, Any]:
        request_headers = self.build_headers(auth, headers)
        url = self.config.url(path)
        logger.debug("%s %s (%s)", method, url, operation)

        try:
            response = self.session.request(
                method,
                url,
                json=body,
                params=dict(params) if params else None,
                headers=dict(request_headers),
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise TransportError(
                f"{operation}_transport_error",
                f"{method} {url} failed: {exc}",
            ) from exc

        status_code = response.status_code
        text = response.text or ""
        if not text.strip():
            return status_code, None

        try:
            payload = response.json()
        except ValueError as exc:
            if not is_success(status_code):
                logger.warning(
                    "Non-JSON error body from %s (status %s)", url, status_code
                )
                return status_code, None
            raise TransportError(
                f"{operation}_invalid_json",
                f"Failed to parse JSON from {url}: {text[:200]}",
            ) from exc
        return status_code, payload

    def close(self) -> None:
        self.session.close()
