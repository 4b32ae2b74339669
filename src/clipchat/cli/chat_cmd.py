"""CLI conversation commands: clipchat chat new/list/show/send/delete."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import click

from clipchat.cli.clip_cmd import open_store
from clipchat.core.models import ErrorKind
from clipchat.store import StoreError

_home_option = click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override CLIPCHAT_HOME path.",
)


def _conversations(store, uid: str | None):
    from clipchat.conversations import ConversationStore, conversations_path

    return ConversationStore(store, conversations_path(uid))


def _fmt_ms(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


@click.group("chat")
def chat_group() -> None:
    """Stored conversations with the relay."""


@chat_group.command("new")
@click.argument("title", default="New chat")
@_home_option
def chat_new(title: str, home: Path | None) -> None:
    """Create a conversation and print its ID."""
    _config, store, uid = open_store(home)
    with store:
        try:
            conv = _conversations(store, uid).create(title)
        except StoreError as e:
            raise click.ClickException(str(e)) from e
    click.echo(conv.id)


@chat_group.command("list")
@_home_option
def chat_list(home: Path | None) -> None:
    """List conversations, newest first."""
    _config, store, uid = open_store(home)
    with store:
        try:
            convs = _conversations(store, uid).list_conversations()
        except StoreError as e:
            raise click.ClickException(str(e)) from e
    if not convs:
        click.echo("No conversations.")
        return
    for conv in convs:
        click.echo(f"{conv.id}  {_fmt_ms(conv.created_at)}  {conv.title}")


@chat_group.command("show")
@click.argument("conv_id")
@_home_option
def chat_show(conv_id: str, home: Path | None) -> None:
    """Print the messages of a conversation."""
    _config, store, uid = open_store(home)
    with store:
        try:
            messages = _conversations(store, uid).messages(conv_id)
        except StoreError as e:
            raise click.ClickException(str(e)) from e
    for msg in messages:
        click.echo(f"[{msg.sender}] {msg.text}")


@chat_group.command("send")
@click.argument("conv_id")
@click.argument("prompt")
@click.option("--local", is_flag=True, help="Run the relay in process instead of over HTTP.")
@_home_option
def chat_send(conv_id: str, prompt: str, local: bool, home: Path | None) -> None:
    """Send PROMPT in the context of conversation CONV_ID."""
    from clipchat.conversations import ChatSession, LocalRelayClient, RelayClient
    from clipchat.core.config import resolve_api_key

    config, store, uid = open_store(home)
    chat_cfg = config.get("chat", {})

    if local:
        from clipchat.relay import Relay

        sender = LocalRelayClient(Relay.from_config(config))
    else:
        sender = RelayClient(
            chat_cfg.get("relay_url", "http://127.0.0.1:8420/relay"),
            api_key=resolve_api_key("relay", config.get("api", {})),
        )

    with store:
        session = ChatSession(
            _conversations(store, uid),
            sender,
            history_window=chat_cfg.get("history_window"),
        )
        try:
            response = session.ask(conv_id, prompt)
        except StoreError as e:
            raise click.ClickException(str(e)) from e

    if response.ok:
        click.echo(response.text)
        return

    # An empty or malformed answer is still a failed request.
    if response.error == ErrorKind.UNEXPECTED_UPSTREAM_SHAPE.value:
        msg = f"No response from AI ({response.error})"
    else:
        msg = f"Relay error ({response.error})"
    if response.detail is not None:
        msg += f": {response.detail}"
    raise click.ClickException(msg)


@chat_group.command("delete")
@click.argument("conv_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation.")
@_home_option
def chat_delete(conv_id: str, yes: bool, home: Path | None) -> None:
    """Delete a conversation and its messages."""
    if not yes and not click.confirm(f"Delete conversation {conv_id}?"):
        click.echo("Aborted.")
        return
    _config, store, uid = open_store(home)
    with store:
        try:
            _conversations(store, uid).delete(conv_id)
        except StoreError as e:
            raise click.ClickException(str(e)) from e
    click.echo(f"Deleted {conv_id}.")
