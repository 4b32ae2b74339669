"""CLI clipboard commands: clipchat clip show/set/clear/watch."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from clipchat.core.config import load_config, resolve_home

_FIELDS = click.Choice(["laptop", "phone"])


def open_store(home: Path | None):
    """Load config and the stored session, returning (config, store, uid)."""
    from clipchat.cli.login_cmd import load_session
    from clipchat.store import RealtimeStore, StoreConfig, StoreError

    home_path = home or resolve_home()
    config = load_config(home_path / "config.yaml")
    session = load_session()

    try:
        store_config = StoreConfig.from_config(
            config, auth_token=session.id_token if session else None
        )
    except StoreError as e:
        raise click.ClickException(str(e)) from e
    return config, RealtimeStore(store_config), session.uid if session else None


def _clipboard(config: dict, store, uid: str | None):
    from clipchat.clipboard import ClipboardStore, clipboard_path

    per_user = config.get("firebase", {}).get("per_user_clipboard", True)
    return ClipboardStore(store, clipboard_path(uid, per_user=per_user))


_home_option = click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override CLIPCHAT_HOME path.",
)


@click.group("clip")
def clip_group() -> None:
    """Shared laptop/phone clipboard."""


@clip_group.command("show")
@click.argument("field", required=False, type=_FIELDS)
@_home_option
def clip_show(field: str | None, home: Path | None) -> None:
    """Print the clipboard (or one FIELD of it)."""
    from clipchat.store import StoreError

    config, store, uid = open_store(home)
    with store:
        try:
            record = _clipboard(config, store, uid).read()
        except StoreError as e:
            raise click.ClickException(str(e)) from e

    if field:
        click.echo(getattr(record, field))
        return
    click.echo(f"laptop: {record.laptop}")
    click.echo(f"phone:  {record.phone}")


@clip_group.command("set")
@click.argument("field", type=_FIELDS)
@click.argument("text", required=False)
@_home_option
def clip_set(field: str, text: str | None, home: Path | None) -> None:
    """Write TEXT (or stdin) to FIELD, keeping the other field."""
    from clipchat.store import StoreError

    if text is None:
        text = sys.stdin.read()

    config, store, uid = open_store(home)
    with store:
        try:
            _clipboard(config, store, uid).set_field(field, text)
        except StoreError as e:
            raise click.ClickException(str(e)) from e
    click.echo(f"Saved {field} ({len(text)} chars).")


@clip_group.command("clear")
@click.argument("field", type=_FIELDS)
@_home_option
def clip_clear(field: str, home: Path | None) -> None:
    """Empty FIELD immediately."""
    from clipchat.store import StoreError

    config, store, uid = open_store(home)
    with store:
        try:
            _clipboard(config, store, uid).clear(field)
        except StoreError as e:
            raise click.ClickException(str(e)) from e
    click.echo(f"Cleared {field}.")


@clip_group.command("watch")
@_home_option
def clip_watch(home: Path | None) -> None:
    """Print the clipboard every time it changes. Ctrl+C to stop."""
    from clipchat.store import StoreError

    config, store, uid = open_store(home)

    def _show(record) -> None:
        click.echo(f"laptop: {record.laptop}")
        click.echo(f"phone:  {record.phone}")
        click.echo("---")

    with store:
        try:
            _clipboard(config, store, uid).subscribe(_show)
        except KeyboardInterrupt:
            click.echo("Stopped.")
        except StoreError as e:
            raise click.ClickException(str(e)) from e
