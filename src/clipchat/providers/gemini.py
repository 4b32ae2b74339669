"""Gemini adapter (Google Generative Language REST API).

FREE tier: 15 requests/minute, 1M tokens/day (Gemini Flash).
"""

from __future__ import annotations

from typing import Any

from clipchat.core.config import resolve_api_key
from clipchat.core.models import RelayRequest, RelayResponse
from clipchat.providers.base import ProviderInfo, dig, text_or_shape_error


class GeminiAdapter:
    """Send turns to Gemini via generateContent."""

    def __init__(self, config: dict | None = None) -> None:
        config = config or {}
        self._model = config.get("model", "gemini-2.0-flash")
        self._api_key = resolve_api_key("gemini", config)
        self._base_url = config.get(
            "base_url", "https://generativelanguage.googleapis.com"
        ).rstrip("/")

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            display_name="Gemini (Google)",
            api_key_env="GEMINI_API_KEY",
            key_url="https://aistudio.google.com/apikey",
            free_tier=True,
        )

    @property
    def api_key(self) -> str | None:
        return self._api_key

    @property
    def model(self) -> str:
        return self._model

    def endpoint(self) -> str:
        return (
            f"{self._base_url}/v1beta/models/{self._model}:generateContent"
            f"?key={self._api_key}"
        )

    def headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    def build_request(self, request: RelayRequest) -> dict:
        # Gemini speaks the relay's own turn format: {"role", "parts": [{"text"}]}
        return {"contents": [turn.to_dict() for turn in request.turns]}

    def parse_response(self, body: Any) -> RelayResponse:
        # {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
        text = dig(body, "candidates", 0, "content", "parts", 0, "text")
        return text_or_shape_error(text, body)
