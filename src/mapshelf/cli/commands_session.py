from __future__ import annotations

import asyncio

import click

from mapshelf.api.client import AuthApiClient
from mapshelf.api.errors import AuthError
from mapshelf.api.messages import error_message
from mapshelf.auth.controller import build_session
from mapshelf.auth.guard import ServerSessionGuard
from mapshelf.config import get_settings


@click.command(name="check-session")
@click.option("--cookie", "cookie_value", default="", help="Refresh cookie value to check.")
@click.option("--api-url", default=None, help="Override MAPSHELF_API_URL.")
def check_session(cookie_value: str, api_url: str | None) -> None:
    """
    Ask the API whether a refresh cookie still grants a session.

    Exit status 0 when authenticated, 1 otherwise.
    """
    guard = ServerSessionGuard(base_url=api_url)
    ok = asyncio.run(guard.is_authenticated({guard.cookie_name: cookie_value}))
    click.echo("authenticated" if ok else "anonymous")
    if not ok:
        raise SystemExit(1)


async def _login(email: str, password: str, api_url: str | None):
    ctl = build_session(api=AuthApiClient(base_url=api_url))
    try:
        return await ctl.login(email, password)
    finally:
        await ctl.api.aclose()


@click.command(name="login")
@click.option("--email", required=True)
@click.option("--password", prompt=True, hide_input=True)
@click.option("--lang", default=None, help="Language for error messages.")
@click.option("--api-url", default=None, help="Override MAPSHELF_API_URL.")
def login(email: str, password: str, lang: str | None, api_url: str | None) -> None:
    """
    Sign in against the API and report the resulting session.
    """
    lang = lang or get_settings().default_language
    try:
        session = asyncio.run(_login(email, password, api_url))
    except AuthError as ex:
        click.echo(error_message(ex, lang), err=True)
        raise SystemExit(2) from ex
    user = session.user
    click.echo(f"Signed in as {user.email if user is not None else '?'}")


def add_commands(cli_group) -> None:
    cli_group.add_command(check_session)
    cli_group.add_command(login)


__all__ = ["add_commands", "check_session", "login"]
