"""Upstream provider adapter protocol and shared helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from clipchat.core.models import ErrorKind, RelayRequest, RelayResponse

_MISSING = object()


@dataclass
class ProviderInfo:
    """Display metadata for an upstream provider."""

    display_name: str
    api_key_env: str
    key_url: str = ""
    free_tier: bool = False


@runtime_checkable
class ProviderAdapter(Protocol):
    """Contract between the relay and one upstream model API.

    The relay only ever talks to an adapter; swapping providers means
    registering or configuring a different adapter, nothing else.
    """

    @property
    def name(self) -> str:
        """Provider ID: 'gemini', 'huggingface', 'openai'."""
        ...

    @property
    def info(self) -> ProviderInfo:
        """Provider metadata."""
        ...

    @property
    def api_key(self) -> str | None:
        """Server-held credential, None when not configured."""
        ...

    def endpoint(self) -> str:
        """Full URL of the completion endpoint."""
        ...

    def headers(self) -> dict[str, str]:
        """HTTP headers for the upstream call."""
        ...

    def build_request(self, request: RelayRequest) -> dict | list:
        """Translate a validated relay request into the provider payload."""
        ...

    def parse_response(self, body: Any) -> RelayResponse:
        """Translate a 2xx provider body into a normalized response."""
        ...


def dig(data: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning a sentinel on any mismatch."""
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return _MISSING
        elif not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def text_or_shape_error(value: Any, body: Any) -> RelayResponse:
    """Accept a non-empty string as the answer, anything else is a shape error."""
    if isinstance(value, str) and value.strip():
        return RelayResponse(text=value)
    return RelayResponse.failure(ErrorKind.UNEXPECTED_UPSTREAM_SHAPE, detail=body)
