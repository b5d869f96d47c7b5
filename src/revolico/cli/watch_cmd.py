"""Watch and notification commands."""

from __future__ import annotations

from pathlib import Path

import click

from ._common import REVOLICO_HOME, add_file_logging, console, open_context
from ..context import ClientContext
from ..listing import list_products
from ..models import CatalogDocument
from ..notify import Notifier
from ..sync import SyncEngine


def register_watch_commands(main: click.Group) -> None:
    """Register watch and notify commands."""

    @main.command("watch")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--once", is_flag=True, help="Poll a single time and exit.")
    def watch(home, once):
        """Poll the shared document and report every change."""
        ctx = open_context(home)
        log_file = add_file_logging(ctx.home)

        def on_change(document: CatalogDocument) -> None:
            rows = list_products(document)
            console.print(
                f"  [green]Updated[/] {document.last_updated}: "
                f"{len(document.businesses)} businesses, {len(rows)} products, "
                f"{len(document.orders)} orders"
            )

        notifier = Notifier(ctx)
        notifier.request_permission()
        engine = SyncEngine(ctx, on_change=on_change, notifier=notifier)

        if once:
            if not engine.poll_once():
                console.print("  [dim]No changes.[/]")
            return

        console.print(
            f"\n  Watching [cyan]{ctx.store.name}[/] every "
            f"{ctx.config.poll_interval:.0f}s. Ctrl-C to stop. [dim]Log: {log_file}[/]\n"
        )
        try:
            engine.run_forever()
        except KeyboardInterrupt:
            engine.stop()
            console.print("\n  [dim]Stopped.[/]\n")

    @main.group()
    def notify():
        """Desktop notifications on catalog changes."""

    @notify.command("enable")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    def notify_enable(home):
        """Allow notifications."""
        ctx = ClientContext.from_home(Path(home).expanduser())
        Notifier(ctx).grant()
        console.print("\n  [green]Notifications enabled.[/]\n")

    @notify.command("disable")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    def notify_disable(home):
        """Deny notifications."""
        ctx = ClientContext.from_home(Path(home).expanduser())
        Notifier(ctx).deny()
        console.print("\n  [yellow]Notifications disabled.[/]\n")
