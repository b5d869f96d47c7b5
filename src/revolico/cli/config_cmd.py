"""Config commands: init, show."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from ._common import REVOLICO_HOME, console
from ..config import ConflictPolicy, StoreBackend, load_config, save_config


def register_config_commands(main: click.Group) -> None:
    """Register the config command group."""

    @main.group()
    def config():
        """Client configuration: which gist, how often, who is admin."""

    @config.command("init")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--owner", help="GitHub user owning the gist.")
    @click.option("--gist-id", help="Gist identifier.")
    @click.option("--filename", help="File inside the gist.")
    @click.option("--poll-interval", type=int, help="Poll interval in ms.")
    @click.option("--admin-user", help="Admin username.")
    @click.option("--passphrase", help="Passphrase sealing the shared token.")
    @click.option(
        "--backend",
        type=click.Choice([b.value for b in StoreBackend]),
        help="Where the document lives.",
    )
    @click.option("--local-path", type=click.Path(), help="Document file for the local backend.")
    @click.option(
        "--conflict-policy",
        type=click.Choice([p.value for p in ConflictPolicy]),
        help="What to do when the remote moved since the last read.",
    )
    def config_init(home, owner, gist_id, filename, poll_interval, admin_user,
                    passphrase, backend, local_path, conflict_policy):
        """Create or update <home>/config.yaml."""
        home_path = Path(home).expanduser()
        cfg = load_config(home_path)

        updates = {
            "owner": owner,
            "gist_id": gist_id,
            "filename": filename,
            "poll_interval_ms": poll_interval,
            "admin_user": admin_user,
            "passphrase": passphrase,
            "backend": StoreBackend(backend) if backend else None,
            "local_path": Path(local_path) if local_path else None,
            "conflict_policy": ConflictPolicy(conflict_policy) if conflict_policy else None,
        }
        for key, value in updates.items():
            if value is not None:
                setattr(cfg, key, value)

        path = save_config(cfg, home_path)
        console.print(f"\n  [green]Config saved:[/] {path}\n")

    @config.command("show")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    def config_show(home):
        """Show the active configuration."""
        cfg = load_config(Path(home).expanduser())

        table = Table(title="Revolico config")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in cfg.model_dump(mode="json").items():
            if key == "passphrase" and value:
                value = "********"
            table.add_row(key, "" if value is None else str(value))
        console.print(table)
