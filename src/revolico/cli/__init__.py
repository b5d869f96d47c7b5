"""
Revolico CLI -- browse the catalog, watch for changes, administer it.

Each command group lives in its own module and registers itself on
the main Click group defined here.

Entry point: revolico.cli:main
"""

from __future__ import annotations

import click

from .. import __version__
from ._common import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="revolico")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def main(verbose):
    """Revolico GTM -- a marketplace that lives in a Gist.

    Anyone can read it. Only the admin, holding the token, writes it.
    """
    setup_logging(verbose)


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .config_cmd import register_config_commands
from .catalog_cmd import register_catalog_commands
from .admin_cmd import register_admin_commands
from .watch_cmd import register_watch_commands

register_config_commands(main)
register_catalog_commands(main)
register_admin_commands(main)
register_watch_commands(main)
