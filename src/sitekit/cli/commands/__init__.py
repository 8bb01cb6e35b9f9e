"""Sitekit CLI commands."""

from sitekit.cli.commands.check import check_url
from sitekit.cli.commands.conf import conf
from sitekit.cli.commands.sync import sync

__all__ = [
    "check_url",
    "conf",
    "sync",
]
