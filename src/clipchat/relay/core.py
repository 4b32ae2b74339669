"""Chat relay: validate, forward to one upstream provider, normalize.

The relay is stateless. Each call makes at most one outbound request and
never retries; every failure comes back as a structured RelayResponse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from clipchat.core.models import ErrorKind, RelayRequest, RelayResponse
from clipchat.providers import ProviderAdapter, get_adapter
from clipchat.relay.validation import InvalidRequestError, parse_relay_request

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# HTTP status returned to the caller for each error kind.
_STATUS: dict[ErrorKind, int] = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.METHOD_NOT_ALLOWED: 405,
    ErrorKind.MISSING_CREDENTIALS: 500,
    ErrorKind.UPSTREAM_UNREACHABLE: 500,
    ErrorKind.UPSTREAM_ERROR: 500,
    ErrorKind.UPSTREAM_TIMEOUT: 504,
    ErrorKind.UNEXPECTED_UPSTREAM_SHAPE: 500,
    ErrorKind.INTERNAL_ERROR: 500,
}

# Upstream statuses passed through as-is on upstream_error.
_PASSTHROUGH = {429}


@dataclass
class RelayResult:
    """HTTP status plus the normalized body."""

    status: int
    response: RelayResponse

    @classmethod
    def error(cls, kind: ErrorKind, detail: Any = None, status: int | None = None) -> RelayResult:
        return cls(
            status=status or _STATUS[kind],
            response=RelayResponse.failure(kind, detail=detail),
        )


class Relay:
    """Forward chat prompts to the configured upstream adapter."""

    def __init__(self, adapter: ProviderAdapter, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.adapter = adapter
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: dict, provider: str | None = None) -> Relay:
        """Build a relay from a merged config dict.

        Args:
            config: Output of load_config().
            provider: Override relay.provider.

        Raises:
            KeyError: Unknown provider name.
        """
        relay_cfg = config.get("relay", {})
        name = provider or relay_cfg.get("provider", "gemini")
        provider_cfg = config.get("providers", {}).get(name, {})
        adapter = get_adapter(name, provider_cfg)
        timeout = float(relay_cfg.get("timeout_seconds") or DEFAULT_TIMEOUT)
        return cls(adapter, timeout=timeout)

    @property
    def provider(self) -> str:
        return self.adapter.name

    @property
    def has_credentials(self) -> bool:
        return bool(self.adapter.api_key)

    def handle(self, method: str, body: Any) -> RelayResult:
        """Handle one inbound relay call.

        Args:
            method: HTTP method of the inbound request.
            body: Decoded JSON body (None when absent or unparsable).
        """
        if method.upper() != "POST":
            return RelayResult.error(
                ErrorKind.METHOD_NOT_ALLOWED, detail=f"{method.upper()} not allowed, use POST"
            )

        try:
            request = parse_relay_request(body)
        except InvalidRequestError as e:
            log.info("Rejected relay request: %s", e)
            return RelayResult.error(ErrorKind.INVALID_REQUEST, detail=str(e))

        return self.forward(request)

    def forward(self, request: RelayRequest) -> RelayResult:
        """Send a validated request upstream and normalize the outcome."""
        if not self.has_credentials:
            log.error("No API key configured for provider %s", self.provider)
            return RelayResult.error(
                ErrorKind.MISSING_CREDENTIALS,
                detail=f"Set {self.adapter.info.api_key_env} for provider '{self.provider}'",
            )

        payload = self.adapter.build_request(request)
        log.debug("Relaying %d turn(s) to %s", len(request.turns), self.provider)

        try:
            resp = httpx.post(
                self.adapter.endpoint(),
                headers=self.adapter.headers(),
                json=payload,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except httpx.TimeoutException as e:
            log.warning("%s timed out after %.1fs", self.provider, self.timeout)
            return RelayResult.error(ErrorKind.UPSTREAM_TIMEOUT, detail=str(e) or "timed out")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.warning("%s returned HTTP %d", self.provider, status)
            return RelayResult.error(
                ErrorKind.UPSTREAM_ERROR,
                detail=_decode_body(e.response),
                status=status if status in _PASSTHROUGH else None,
            )
        except (httpx.RequestError, OSError) as e:
            log.warning("%s unreachable: %s", self.provider, e)
            return RelayResult.error(ErrorKind.UPSTREAM_UNREACHABLE, detail=str(e))

        body = _decode_body(resp)
        response = self.adapter.parse_response(body)
        if not response.ok:
            log.warning("%s answered with %s", self.provider, response.error)
            return RelayResult(status=_STATUS[ErrorKind(response.error)], response=response)
        return RelayResult(status=200, response=response)


def _decode_body(resp: httpx.Response) -> Any:
    """Return the JSON body, or the raw text when it is not JSON."""
    try:
        return resp.json()
    except ValueError:
        return resp.text
