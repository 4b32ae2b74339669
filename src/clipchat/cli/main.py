"""CLI entry point for ClipChat (clipchat command)."""

import click

from clipchat import __version__
from clipchat.cli.chat_cmd import chat_group
from clipchat.cli.clip_cmd import clip_group
from clipchat.cli.login_cmd import login_cmd, logout_cmd
from clipchat.cli.serve_cmd import ask_cmd, providers_cmd, serve_cmd


@click.group()
@click.version_option(version=__version__, prog_name="clipchat")
def cli() -> None:
    """ClipChat: shared clipboard and chat relay."""


cli.add_command(serve_cmd)
cli.add_command(ask_cmd)
cli.add_command(providers_cmd)
cli.add_command(clip_group)
cli.add_command(chat_group)
cli.add_command(login_cmd)
cli.add_command(logout_cmd)


if __name__ == "__main__":
    cli()
