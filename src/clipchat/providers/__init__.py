"""Upstream model provider adapters.

WARNING: Cloud API access requires provider API keys.
- Gemini: https://aistudio.google.com/apikey (FREE tier)
- Hugging Face: https://huggingface.co/settings/tokens (FREE tier, rate limited)
- OpenAI: https://platform.openai.com/api-keys (pay-per-token)
"""

from clipchat.providers.base import ProviderAdapter, ProviderInfo
from clipchat.providers.gemini import GeminiAdapter
from clipchat.providers.huggingface import HuggingFaceAdapter
from clipchat.providers.openai import OpenAIAdapter
from clipchat.providers.registry import ProviderRegistry, registry

registry.register("gemini", GeminiAdapter)
registry.register("huggingface", HuggingFaceAdapter)
registry.register("openai", OpenAIAdapter)


def get_adapter(name: str, config: dict | None = None) -> ProviderAdapter:
    """Instantiate a registered adapter by name."""
    return registry.get(name, config)


__all__ = [
    "GeminiAdapter",
    "HuggingFaceAdapter",
    "OpenAIAdapter",
    "ProviderAdapter",
    "ProviderInfo",
    "ProviderRegistry",
    "get_adapter",
    "registry",
]
