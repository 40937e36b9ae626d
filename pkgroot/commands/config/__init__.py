"""Configuration management commands."""

import click

from pkgroot.commands.config.init import config_init
from pkgroot.commands.config.show import config_show


@click.group()
def config():
    """Configuration management commands."""
    pass


config.add_command(config_init, name="init")
config.add_command(config_show, name="show")
