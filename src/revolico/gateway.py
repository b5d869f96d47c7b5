"""
Write gateway -- pushes the whole document back to the store.

Read the current record, create it if absent, otherwise replace its
content. There is no merge: the pushed document replaces whatever is
there, except a remote that does not decode, which is never replaced.
With the ``reject`` conflict policy a write whose base marker no
longer matches the remote is refused; with ``overwrite`` (the default)
it goes through and the clobber is written to the audit log.

Neither is a true compare-and-swap. The gist can still move between
our GET and our PATCH.
"""

from __future__ import annotations

import logging
from typing import Optional

from .audit import audit_event
from .config import ConflictPolicy, save_config
from .context import ClientContext
from .errors import ConflictError, DecodeError, StoreError
from .models import CatalogDocument, next_marker, parse_marker

logger = logging.getLogger("revolico.gateway")


def _latest(*markers: Optional[str]) -> Optional[str]:
    """Return the latest of several change markers, ignoring unparsable ones."""
    best: Optional[str] = None
    best_at = None
    for marker in markers:
        at = parse_marker(marker)
        if at is not None and (best_at is None or at > best_at):
            best, best_at = marker, at
    return best


class WriteGateway:
    """Authenticated whole-document writes for one client context."""

    def __init__(self, ctx: ClientContext):
        self.ctx = ctx

    def write(self, document: CatalogDocument) -> bool:
        """Push ``document`` to the store.

        On success the context cache is replaced with the pushed copy,
        which carries a fresh change marker. On failure nothing local
        changes and the caller decides whether to keep a local-only copy.

        Returns:
            True if the store accepted the write.
        """
        ctx = self.ctx
        if not ctx.credential:
            logger.error("Write refused: not authenticated as admin")
            return False

        try:
            return self._write(document)
        except ConflictError as exc:
            logger.error("Write rejected: %s", exc)
            audit_event(ctx.home, "CONFLICT", str(exc))
            return False
        except StoreError as exc:
            logger.error("Write to %s failed: %s", ctx.store.name, exc)
            return False

    def _write(self, document: CatalogDocument) -> bool:
        ctx = self.ctx
        store = ctx.store
        record = store.get_record(ctx.credential)

        remote_marker: Optional[str] = None
        if record is not None:
            try:
                remote = store.record_document(record)
            except DecodeError as exc:
                raise ConflictError(
                    f"Remote document unreadable, refusing to overwrite it: {exc}"
                ) from exc
            remote_marker = remote.last_updated if remote else None
            self._check_conflict(remote_marker)

        stamped = document.model_copy(deep=True)
        stamped.last_updated = next_marker(
            _latest(document.last_updated, remote_marker, ctx.base_marker)
        )
        content = stamped.to_json()

        if record is None:
            new_id = store.create_record(ctx.credential, content)
            audit_event(ctx.home, "CREATE", f"Created remote document {new_id}")
            self._persist_config()
        else:
            store.update_record(ctx.credential, record, content)
            audit_event(
                ctx.home, "WRITE", f"Document written at {stamped.last_updated}",
                metadata={
                    "businesses": len(stamped.businesses),
                    "orders": len(stamped.orders),
                },
            )

        ctx.replace_document(stamped)
        logger.info("Document pushed to %s (%s)", store.name, stamped.last_updated)
        return True

    def _check_conflict(self, remote_marker: Optional[str]) -> None:
        ctx = self.ctx
        if remote_marker == ctx.base_marker:
            return
        detail = (
            f"Remote marker {remote_marker} differs from base {ctx.base_marker}"
        )
        if ctx.config.conflict_policy == ConflictPolicy.REJECT:
            raise ConflictError(detail)
        logger.warning("Overwriting newer remote document: %s", detail)
        audit_event(ctx.home, "OVERWRITE", detail)

    def _persist_config(self) -> None:
        """Remember the identifier of a freshly created remote document."""
        try:
            save_config(self.ctx.config, self.ctx.home)
        except OSError as exc:
            logger.warning("Could not save config with new document id: %s", exc)
