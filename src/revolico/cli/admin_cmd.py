"""Admin commands: login, logout, status, audit."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.panel import Panel
from rich.table import Table

from ._common import REVOLICO_HOME, console, open_context
from ..audit import read_audit_log
from ..errors import InvalidCredentials
from ..session import AdminSession, SessionState


def _state_label(state: SessionState) -> str:
    return {
        SessionState.ACTIVE: "[bold green]ACTIVE[/]",
        SessionState.AWAITING_TOKEN: "[bold yellow]AWAITING TOKEN[/]",
        SessionState.LOGGED_OUT: "[dim]LOGGED OUT[/]",
    }.get(state, "[dim]UNKNOWN[/]")


def register_admin_commands(main: click.Group) -> None:
    """Register the admin command group."""

    @main.group()
    def admin():
        """Admin session: the only way to write the shared document."""

    @admin.command("login")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--user", "username", prompt="Admin user")
    @click.option("--password", prompt=True, hide_input=True)
    @click.option("--token", default=None, help="GitHub token, if the document holds none.")
    def admin_login(home, username, password, token):
        """Log in, sharing the GitHub token on first use."""
        ctx = open_context(home)
        session = AdminSession(ctx)
        try:
            state = session.login(username, password)
        except InvalidCredentials as exc:
            console.print(f"[bold red]{exc}[/]")
            sys.exit(1)

        if state == SessionState.AWAITING_TOKEN:
            if token is None:
                token = click.prompt(
                    "GitHub token for writing", hide_input=True,
                    default="", show_default=False,
                )
            state = session.supply_token(token or "")
            if state != SessionState.ACTIVE:
                console.print("[bold red]Token not stored.[/] Session is still awaiting it.")
                sys.exit(1)

        console.print(f"\n  Admin session: {_state_label(state)}\n")

    @admin.command("logout")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    def admin_logout(home):
        """Close this machine's admin session."""
        ctx = open_context(home)
        AdminSession(ctx).logout()
        console.print("\n  [green]Logged out.[/] The shared token stays in the document.\n")

    @admin.command("status")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    def admin_status(home):
        """Show session and document status."""
        ctx = open_context(home)
        state = AdminSession(ctx).resume()
        doc = ctx.document
        admin = doc.admin

        console.print()
        console.print(
            Panel(
                f"Session: {_state_label(state)}\n"
                f"Store: [cyan]{ctx.store.name}[/]\n"
                f"Last updated: {doc.last_updated or '[dim]never[/]'}\n"
                f"Businesses: [bold]{len(doc.businesses)}[/]\n"
                f"Orders: [bold]{len(doc.orders)}[/]\n"
                f"Shared token: "
                f"{'[green]present[/]' if admin and admin.encrypted_token else '[yellow]none[/]'}",
                title="Revolico GTM",
                border_style="magenta",
            )
        )
        console.print()

    @admin.command("audit")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--limit", default=20, help="How many recent entries.")
    def admin_audit(home, limit):
        """Show the admin audit log."""
        entries = read_audit_log(Path(home).expanduser(), limit=limit)
        if not entries:
            console.print("\n  [dim]Audit log is empty.[/]\n")
            return

        table = Table(title="Audit log")
        table.add_column("When", style="dim")
        table.add_column("Event", style="cyan")
        table.add_column("Detail")
        for entry in entries:
            table.add_row(entry.timestamp, entry.event_type, entry.detail)
        console.print(table)
