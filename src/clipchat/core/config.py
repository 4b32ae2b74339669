"""Configuration loader for ClipChat."""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path

import yaml

log = logging.getLogger(__name__)

DEFAULTS: dict = {
    "home": "~/.clipchat",
    "log_level": "info",
    "relay": {
        "provider": "gemini",
        "timeout_seconds": 30.0,
    },
    # Upstream model providers. api_key may be a literal key, "keyring",
    # or unset (falls back to the provider's environment variable).
    "providers": {
        "gemini": {
            "model": "gemini-2.0-flash",
            "base_url": "https://generativelanguage.googleapis.com",
            "api_key": None,
        },
        "huggingface": {
            "model": "deepseek-ai/deepseek-coder-6.7b-instruct",
            "base_url": "https://api-inference.huggingface.co",
            "api_key": None,
        },
        "openai": {
            "model": "gpt-4o-mini",
            "base_url": "https://api.openai.com",
            "api_key": None,
            "system_prompt": "You are a helpful assistant.",
        },
    },
    "api": {
        "host": "127.0.0.1",
        "port": 8420,
        "api_key": None,
        "cors_origins": [],
    },
    "firebase": {
        "api_key": None,
        "database_url": None,
        "per_user_clipboard": True,
    },
    "clipboard": {
        "debounce_seconds": 0.5,
    },
    "chat": {
        "relay_url": "http://127.0.0.1:8420/relay",
        "history_window": None,
    },
}

# Environment variables consulted for upstream credentials.
API_KEY_ENV: dict[str, str] = {
    "gemini": "GEMINI_API_KEY",
    "huggingface": "HUGGINGFACE_API_KEY",
    "openai": "OPENAI_API_KEY",
    # Bearer key guarding the relay itself for non-localhost clients.
    "relay": "CLIPCHAT_API_KEY",
}


def resolve_home() -> Path:
    """Resolve CLIPCHAT_HOME: env var > default ~/.clipchat."""
    env_home = os.environ.get("CLIPCHAT_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path("~/.clipchat").expanduser().resolve()


def config_path(home: Path | None = None) -> Path:
    """Return the path to config.yaml."""
    if home is None:
        home = resolve_home()
    return home / "config.yaml"


def load_config(path: Path | None = None) -> dict:
    """Load config.yaml and merge with defaults.

    Args:
        path: Explicit path to config.yaml. If None, uses default location.

    Returns:
        Merged configuration dict.
    """
    if path is None:
        path = config_path()

    user_config: dict = {}
    if path.exists():
        try:
            raw = path.read_text(encoding="utf-8")
            user_config = yaml.safe_load(raw) or {}
        except Exception:
            log.warning("Failed to read config at %s, using defaults", path, exc_info=True)

    if not isinstance(user_config, dict):
        log.warning("Config at %s is not a mapping, using defaults", path)
        user_config = {}

    merged = _deep_merge(DEFAULTS, user_config)

    home_str = os.environ.get("CLIPCHAT_HOME") or merged.get("home", "~/.clipchat")
    merged["home"] = str(Path(home_str).expanduser().resolve())

    return merged


def resolve_api_key(provider: str, provider_config: dict | None = None) -> str | None:
    """Resolve the upstream credential for a provider.

    Order: explicit config value > environment variable > system keyring.
    A config value of "keyring" skips the environment lookup.
    """
    provider_config = provider_config or {}
    setting = provider_config.get("api_key")

    if setting and setting != "keyring":
        return setting

    if setting != "keyring":
        env_name = API_KEY_ENV.get(provider)
        if env_name and os.environ.get(env_name):
            return os.environ[env_name]

    return _keyring_get(f"{provider}_api_key")


def _keyring_get(name: str) -> str | None:
    """Retrieve a secret from the system keyring."""
    try:
        import keyring

        return keyring.get_password("clipchat", name)
    except Exception:
        log.debug("Keyring lookup failed for %s", name, exc_info=True)
        return None


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
