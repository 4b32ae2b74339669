"""Tests for clipchat.core.config."""

from pathlib import Path
from unittest.mock import patch

from clipchat.core.config import (
    DEFAULTS,
    _deep_merge,
    config_path,
    load_config,
    resolve_api_key,
    resolve_home,
)


class TestDeepMerge:
    def test_simple_override(self):
        base = {"a": 1, "b": 2}
        override = {"b": 3}
        result = _deep_merge(base, override)
        assert result == {"a": 1, "b": 3}

    def test_nested_merge(self):
        base = {"relay": {"provider": "gemini", "timeout_seconds": 30.0}}
        override = {"relay": {"provider": "openai"}}
        result = _deep_merge(base, override)
        assert result["relay"]["provider"] == "openai"
        assert result["relay"]["timeout_seconds"] == 30.0

    def test_new_keys(self):
        base = {"a": 1}
        override = {"b": 2}
        result = _deep_merge(base, override)
        assert result == {"a": 1, "b": 2}

    def test_does_not_mutate_base(self):
        base = {"a": {"b": 1}}
        override = {"a": {"b": 2}}
        _deep_merge(base, override)
        assert base["a"]["b"] == 1


class TestLoadConfig:
    def test_returns_defaults_when_no_file(self, tmp_path: Path):
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config["relay"]["provider"] == DEFAULTS["relay"]["provider"]
        assert config["api"]["port"] == 8420
        assert config["clipboard"]["debounce_seconds"] == 0.5

    def test_loads_and_merges(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "relay:\n  provider: huggingface\n"
            "providers:\n  huggingface:\n    model: org/model\n"
        )

        config = load_config(config_file)
        assert config["relay"]["provider"] == "huggingface"
        assert config["providers"]["huggingface"]["model"] == "org/model"
        # Defaults preserved for unset keys
        assert config["relay"]["timeout_seconds"] == 30.0
        assert config["providers"]["huggingface"]["base_url"].startswith("https://")

    def test_clipchat_home_env_override(self, tmp_path: Path, monkeypatch):
        custom_home = tmp_path / "custom"
        monkeypatch.setenv("CLIPCHAT_HOME", str(custom_home))

        config = load_config(tmp_path / "nonexistent.yaml")
        assert config["home"] == str(custom_home.resolve())

    def test_handles_empty_file(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = load_config(config_file)
        assert config["relay"] == DEFAULTS["relay"]

    def test_handles_corrupt_yaml(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(": : : invalid yaml [[[")

        # Should fall back to defaults without crashing
        config = load_config(config_file)
        assert "relay" in config

    def test_result_is_independent_of_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "nonexistent.yaml")
        config["providers"]["gemini"]["api_key"] = "mutated"
        assert DEFAULTS["providers"]["gemini"]["api_key"] is None

    def test_handles_non_mapping(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        config = load_config(config_file)
        assert config["relay"]["provider"] == "gemini"


class TestResolveHome:
    def test_env_var(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CLIPCHAT_HOME", str(tmp_path))
        assert resolve_home() == tmp_path.resolve()
        assert config_path() == tmp_path.resolve() / "config.yaml"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("CLIPCHAT_HOME", raising=False)
        assert resolve_home() == Path("~/.clipchat").expanduser().resolve()


class TestResolveApiKey:
    def test_config_value_wins(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        assert resolve_api_key("gemini", {"api_key": "from-config"}) == "from-config"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("HUGGINGFACE_API_KEY", "hf-env")
        assert resolve_api_key("huggingface", {}) == "hf-env"

    def test_keyring_fallback(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with patch("clipchat.core.config._keyring_get", return_value="sk-ring") as mock_get:
            assert resolve_api_key("openai") == "sk-ring"
        mock_get.assert_called_once_with("openai_api_key")

    def test_keyring_setting_skips_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        with patch("clipchat.core.config._keyring_get", return_value="from-ring"):
            assert resolve_api_key("gemini", {"api_key": "keyring"}) == "from-ring"

    def test_nothing_configured(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with patch("clipchat.core.config._keyring_get", return_value=None):
            assert resolve_api_key("gemini", {"api_key": None}) is None

    def test_relay_key_env(self, monkeypatch):
        monkeypatch.setenv("CLIPCHAT_API_KEY", "relay-secret")
        assert resolve_api_key("relay", {}) == "relay-secret"
