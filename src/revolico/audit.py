"""
Admin audit log.

JSONL, one object per line, append-only. Records who logged in,
when the token was shared, and every write -- including the ones
that silently clobbered somebody else's newer document.
"""

from __future__ import annotations

import json
import logging
import socket
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger("revolico.audit")

AUDIT_LOG_NAME = "audit.log"


class AuditEntry(BaseModel):
    """A single structured audit log entry."""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    event_type: str
    detail: str
    host: str = Field(default_factory=socket.gethostname)
    metadata: Optional[dict] = None


def audit_event(
    home: Path,
    event_type: str,
    detail: str,
    metadata: Optional[dict] = None,
) -> AuditEntry:
    """Append an event to ``<home>/audit.log``.

    Args:
        home: Client home directory.
        event_type: Event category (LOGIN, LOGOUT, TOKEN, WRITE, CREATE,
            OVERWRITE, CONFLICT).
        detail: Human-readable description.
        metadata: Optional structured extras.

    Returns:
        AuditEntry: The entry written.
    """
    entry = AuditEntry(event_type=event_type, detail=detail, metadata=metadata)
    try:
        home.mkdir(parents=True, exist_ok=True)
        with (home / AUDIT_LOG_NAME).open("a", encoding="utf-8") as f:
            f.write(entry.model_dump_json() + "\n")
    except OSError as exc:
        logger.warning("Could not write audit entry %s: %s", event_type, exc)
    return entry


def read_audit_log(home: Path, limit: int = 0) -> list[AuditEntry]:
    """Read the audit log, oldest first.

    Args:
        home: Client home directory.
        limit: Keep only the last ``limit`` entries (0 = all).
    """
    audit_log = home / AUDIT_LOG_NAME
    if not audit_log.exists():
        return []

    entries: list[AuditEntry] = []
    for line in audit_log.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(AuditEntry.model_validate(json.loads(line)))
        except (json.JSONDecodeError, ValidationError):
            logger.debug("Skipping unreadable audit line: %s", line)

    if limit > 0:
        entries = entries[-limit:]
    return entries
