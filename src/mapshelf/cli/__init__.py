from __future__ import annotations

import click

from mapshelf.utils.log import set_log_level

from . import commands_admin, commands_session
from .commands_admin import config_report, issue_token
from .commands_session import check_session, login


@click.group(name="mapshelf")
@click.option("--log-level", default=None, help="Override LOG_LEVEL for this run.")
def cli(log_level: str | None) -> None:
    """mapshelf auth session tools"""
    if log_level:
        set_log_level(log_level)


commands_admin.add_commands(cli)
commands_session.add_commands(cli)

__all__ = ["cli", "check_session", "config_report", "issue_token", "login"]
