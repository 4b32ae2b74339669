"""CLI login commands: clipchat login, clipchat logout."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from clipchat.auth import AuthError, FirebaseAuth, Session
from clipchat.core.config import load_config, resolve_home

log = logging.getLogger(__name__)

_KEYRING_SERVICE = "clipchat"
_SESSION_KEY = "firebase_session"


def save_session(session: Session) -> None:
    """Keep the signed-in session in the system keyring."""
    import keyring

    keyring.set_password(
        _KEYRING_SERVICE,
        _SESSION_KEY,
        json.dumps({
            "uid": session.uid,
            "email": session.email,
            "id_token": session.id_token,
            "refresh_token": session.refresh_token,
        }),
    )


def load_session() -> Session | None:
    """Return the stored session, or None when not signed in."""
    try:
        import keyring

        raw = keyring.get_password(_KEYRING_SERVICE, _SESSION_KEY)
    except Exception:
        log.debug("Keyring unavailable", exc_info=True)
        return None
    if not raw:
        return None
    try:
        return Session(**json.loads(raw))
    except (ValueError, TypeError):
        log.warning("Stored session is corrupt, ignoring")
        return None


def clear_session() -> None:
    import keyring
    from keyring.errors import PasswordDeleteError

    try:
        keyring.delete_password(_KEYRING_SERVICE, _SESSION_KEY)
    except PasswordDeleteError:
        log.debug("No stored session to delete")


@click.command("login")
@click.argument("email")
@click.password_option("--password", confirmation_prompt=False, help="Account password.")
@click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override CLIPCHAT_HOME path.",
)
def login_cmd(email: str, password: str, home: Path | None) -> None:
    """Sign in with EMAIL and a password."""
    home_path = home or resolve_home()
    config = load_config(home_path / "config.yaml")
    web_key = config.get("firebase", {}).get("api_key")
    if not web_key:
        raise click.ClickException("firebase.api_key is not configured.")

    try:
        session = FirebaseAuth(web_key).sign_in(email, password)
    except AuthError as e:
        raise click.ClickException(e.message) from e

    save_session(session)
    click.echo(f"Signed in as {session.email} (uid {session.uid}).")


@click.command("logout")
def logout_cmd() -> None:
    """Forget the stored session."""
    clear_session()
    click.echo("Signed out.")
