"""Shared utilities for all CLI command modules.

Provides the Rich console instance, logging setup, and helpers for
opening a client context and resuming the admin session.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from rich.console import Console

from .. import REVOLICO_HOME
from ..context import ClientContext, load_document
from ..session import AdminSession, SessionState

console = Console()
logger = logging.getLogger("revolico.cli")

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure stderr logging for a CLI invocation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def add_file_logging(home: Path) -> Path:
    """Also log INFO and above to ``<home>/logs/revolico.log``."""
    log_dir = home / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "revolico.log"
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    if root.level > logging.INFO or root.level == logging.NOTSET:
        root.setLevel(logging.INFO)
    return log_file


def open_context(home: str) -> ClientContext:
    """Build a context for ``home`` and load the shared document."""
    ctx = ClientContext.from_home(Path(home).expanduser())
    load_document(ctx)
    return ctx


def require_admin(ctx: ClientContext) -> AdminSession:
    """Resume the admin session or exit with an error."""
    session = AdminSession(ctx)
    state = session.resume()
    if state == SessionState.LOGGED_OUT:
        console.print("[bold red]Not logged in as admin.[/] Run revolico admin login first.")
        sys.exit(1)
    if state == SessionState.AWAITING_TOKEN:
        console.print(
            "[bold red]Admin token missing or unreadable.[/] "
            "Run revolico admin login to enter it again."
        )
        sys.exit(1)
    return session
