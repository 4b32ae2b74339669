"""CLI relay commands: clipchat serve, clipchat ask, clipchat providers."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from clipchat.core.config import load_config, resolve_api_key, resolve_home
from clipchat.providers import registry


def _load(home: Path | None) -> tuple[Path, dict]:
    home_path = home or resolve_home()
    return home_path, load_config(home_path / "config.yaml")


def _build_relay(config: dict, provider: str | None):
    from clipchat.relay import Relay

    try:
        return Relay.from_config(config, provider=provider)
    except KeyError as e:
        raise click.ClickException(str(e)) from e


@click.command("serve")
@click.option("--port", "-p", default=None, type=int, help="Port (default: 8420).")
@click.option("--host", default=None, help="Host (default: 127.0.0.1).")
@click.option("--provider", default=None, help="Upstream provider (default: relay.provider).")
@click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override CLIPCHAT_HOME path.",
)
def serve_cmd(port: int | None, host: str | None, provider: str | None, home: Path | None) -> None:
    """Start the chat relay HTTP server."""
    try:
        import uvicorn
    except ImportError:
        click.echo("uvicorn is required. Install with: pip install uvicorn")
        return

    home_path, config = _load(home)
    api_config = config.get("api", {})

    logging.basicConfig(
        level=getattr(logging, str(config.get("log_level", "info")).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    relay = _build_relay(config, provider)
    if not relay.has_credentials:
        raise click.ClickException(
            f"No API key configured for provider '{relay.provider}'.\n"
            f"Set {relay.adapter.info.api_key_env}, providers.{relay.provider}.api_key "
            f"in {home_path / 'config.yaml'}, or store it in the keyring:\n"
            f"  python -c \"import keyring; keyring.set_password("
            f"'clipchat', '{relay.provider}_api_key', 'YOUR_KEY')\""
        )

    final_host = host or api_config.get("host", "127.0.0.1")
    final_port = port or api_config.get("port", 8420)
    cors_origins = api_config.get("cors_origins", [])

    api_key = resolve_api_key("relay", api_config)

    from clipchat.api.server import create_app

    app = create_app(relay, api_key=api_key, cors_origins=cors_origins)

    click.echo(f"Starting ClipChat relay ({relay.provider}) at http://{final_host}:{final_port}/relay")
    if api_key:
        click.echo("API key authentication enabled for remote access.")
    else:
        click.echo("No API key configured, localhost access only.")

    uvicorn.run(app, host=final_host, port=final_port, log_level="info")


@click.command("ask")
@click.argument("prompt")
@click.option("--provider", default=None, help="Upstream provider (default: relay.provider).")
@click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override CLIPCHAT_HOME path.",
)
def ask_cmd(prompt: str, provider: str | None, home: Path | None) -> None:
    """Send a one-shot PROMPT through the relay, in process."""
    _home_path, config = _load(home)
    relay = _build_relay(config, provider)

    result = relay.handle("POST", {"prompt": prompt})
    response = result.response
    if response.ok:
        click.echo(response.text)
        return

    msg = f"Relay error ({response.error})"
    if response.detail is not None:
        msg += f": {response.detail}"
    raise click.ClickException(msg)


@click.command("providers")
def providers_cmd() -> None:
    """List available upstream providers."""
    for entry in registry.list_all():
        adapter = entry.cls({"api_key": "-"})
        info = adapter.info
        tier = " (free tier)" if info.free_tier else ""
        click.echo(f"{entry.name:<12} {info.display_name}{tier}  key: ${info.api_key_env}")
