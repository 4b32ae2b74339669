"""Hugging Face Inference API adapter (text-generation models)."""

from __future__ import annotations

from typing import Any

from clipchat.core.config import resolve_api_key
from clipchat.core.models import ErrorKind, RelayRequest, RelayResponse, Role
from clipchat.providers.base import ProviderInfo, dig, text_or_shape_error


class HuggingFaceAdapter:
    """Send a prompt to a hosted text-generation model.

    The Inference API takes a single ``inputs`` string, so a multi-turn
    history is flattened into a labelled transcript.
    """

    def __init__(self, config: dict | None = None) -> None:
        config = config or {}
        self._model = config.get("model", "deepseek-ai/deepseek-coder-6.7b-instruct")
        self._api_key = resolve_api_key("huggingface", config)
        self._base_url = config.get(
            "base_url", "https://api-inference.huggingface.co"
        ).rstrip("/")

    @property
    def name(self) -> str:
        return "huggingface"

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            display_name="Hugging Face Inference",
            api_key_env="HUGGINGFACE_API_KEY",
            key_url="https://huggingface.co/settings/tokens",
            free_tier=True,
        )

    @property
    def api_key(self) -> str | None:
        return self._api_key

    @property
    def model(self) -> str:
        return self._model

    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self._model}"

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    def build_request(self, request: RelayRequest) -> dict:
        return {"inputs": _flatten(request)}

    def parse_response(self, body: Any) -> RelayResponse:
        # The Inference API reports model loading and quota problems as
        # {"error": "..."} even on 2xx.
        if isinstance(body, dict) and body.get("error"):
            return RelayResponse.failure(ErrorKind.UPSTREAM_ERROR, detail=body)
        # [{"generated_text": "..."}]
        text = dig(body, 0, "generated_text")
        return text_or_shape_error(text, body)


def _flatten(request: RelayRequest) -> str:
    """Render the request as a single prompt string."""
    if request.prompt is not None:
        return request.prompt
    if len(request.contents) == 1:
        return request.contents[0].text

    lines = []
    for turn in request.contents:
        label = "User" if turn.role == Role.USER else "Assistant"
        lines.append(f"{label}: {turn.text}")
    lines.append("Assistant:")
    return "\n".join(lines)
