"""OpenAI Chat Completions adapter."""

from __future__ import annotations

from typing import Any

from clipchat.core.config import resolve_api_key
from clipchat.core.models import RelayRequest, RelayResponse, Role
from clipchat.providers.base import ProviderInfo, dig, text_or_shape_error


DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


class OpenAIAdapter:
    """Send turns to an OpenAI-compatible /v1/chat/completions endpoint."""

    def __init__(self, config: dict | None = None) -> None:
        config = config or {}
        self._model = config.get("model", "gpt-4o-mini")
        self._api_key = resolve_api_key("openai", config)
        self._base_url = config.get("base_url", "https://api.openai.com").rstrip("/")
        self._system_prompt = config.get("system_prompt") or DEFAULT_SYSTEM_PROMPT

    @property
    def name(self) -> str:
        return "openai"

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            display_name="ChatGPT (OpenAI)",
            api_key_env="OPENAI_API_KEY",
            key_url="https://platform.openai.com/api-keys",
        )

    @property
    def api_key(self) -> str | None:
        return self._api_key

    @property
    def model(self) -> str:
        return self._model

    def endpoint(self) -> str:
        return f"{self._base_url}/v1/chat/completions"

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def build_request(self, request: RelayRequest) -> dict:
        messages = [{"role": "system", "content": self._system_prompt}]
        messages.extend(
            {"role": "user" if t.role == Role.USER else "assistant", "content": t.text}
            for t in request.turns
        )
        return {"model": self._model, "messages": messages}

    def parse_response(self, body: Any) -> RelayResponse:
        # {"choices": [{"message": {"content": "..."}}]}
        text = dig(body, "choices", 0, "message", "content")
        return text_or_shape_error(text, body)
