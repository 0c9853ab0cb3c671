from __future__ import annotations

import json

import click

from mapshelf.api.errors import EntropyError
from mapshelf.auth.verification import VerificationTokenIssuer
from mapshelf.config import get_safe_config_report
from mapshelf.utils.log import logger


@click.command(name="issue-token")
@click.option(
    "--kind",
    type=click.Choice(["verification", "password-reset"], case_sensitive=False),
    default="verification",
    show_default=True,
)
@click.option("--hours", type=float, default=None, help="Validity window (defaults from config).")
@click.option("--json", "json_flag", is_flag=True, default=False, help="Print as JSON.")
def issue_token(kind: str, hours: float | None, json_flag: bool) -> None:
    """
    Issue a verification (or password reset) token.
    """
    issuer = VerificationTokenIssuer()
    try:
        if hours is not None:
            tok = issuer.issue(hours)
        elif kind.lower() == "password-reset":
            tok = issuer.issue_password_reset()
        else:
            tok = issuer.issue()
    except ValueError as ex:
        raise click.BadParameter(str(ex), param_hint="--hours") from ex
    except EntropyError as ex:
        logger.error("cli.issue_token_failed", error=str(ex))
        click.echo(f"Cannot issue token: {ex}", err=True)
        raise SystemExit(2) from ex

    if json_flag:
        click.echo(json.dumps({"token": tok.value, "expires_at": tok.expires_at.isoformat()}))
    else:
        click.echo(tok.value)
        click.echo(f"expires: {tok.expires_at.isoformat()}")


@click.command(name="config")
def config_report() -> None:
    """
    Print the effective (non-sensitive) configuration as JSON.
    """
    click.echo(json.dumps(get_safe_config_report(), indent=2, sort_keys=True))


def add_commands(cli_group) -> None:
    cli_group.add_command(issue_token)
    cli_group.add_command(config_report)


__all__ = ["add_commands", "issue_token", "config_report"]
