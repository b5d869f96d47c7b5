"""
Client context -- the document cache and session credential in one place.

Nothing here is global. Every operation receives the context it acts
on, so two contexts against the same gist behave like two browser
tabs: they race, and the race is visible in a test.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

import requests

from .config import ClientConfig, LocalState, load_config, load_state, resolve_home, save_state
from .errors import StoreError
from .models import CatalogDocument
from .store import DocumentStore, create_store

logger = logging.getLogger("revolico.context")


class ClientContext:
    """Mutable state of one client.

    Attributes:
        config: Static client configuration.
        store: Where the shared document lives.
        home: Client home directory (local state, audit log).
        local_state: Machine-local session flag and notification permission.
        document: Cached copy of the shared document.
        credential: Decrypted upstream token, or None when not admin.
        last_seen_marker: Change marker the sync engine last acted on.
        base_marker: Marker of the remote snapshot local edits derive from.
    """

    def __init__(
        self,
        config: ClientConfig,
        store: DocumentStore,
        home: Optional[Path] = None,
        local_state: Optional[LocalState] = None,
    ):
        self.config = config
        self.store = store
        self.home = resolve_home(home)
        self.local_state = local_state if local_state is not None else load_state(self.home)
        self.document = CatalogDocument()
        self.credential: Optional[str] = None
        self.last_seen_marker: Optional[str] = None
        self.base_marker: Optional[str] = None
        self.lock = threading.RLock()

    @classmethod
    def from_home(
        cls,
        home: Optional[Path] = None,
        session: Optional[requests.Session] = None,
    ) -> "ClientContext":
        """Build a context from ``<home>/config.yaml`` and ``<home>/state.json``."""
        home_path = resolve_home(home)
        config = load_config(home_path)
        store = create_store(config, home_path, session=session)
        return cls(config, store, home_path)

    @property
    def is_admin(self) -> bool:
        return self.credential is not None

    def replace_document(self, document: CatalogDocument) -> None:
        """Install a document freshly read from, or written to, the store."""
        with self.lock:
            self.document = document
            self.base_marker = document.last_updated

    def working_copy(self) -> CatalogDocument:
        """Deep copy of the cached document for local edits."""
        with self.lock:
            return self.document.model_copy(deep=True)

    def save_local_state(self) -> None:
        save_state(self.local_state, self.home)


def load_document(ctx: ClientContext) -> CatalogDocument:
    """Initial read of the shared document into the cache.

    A failed read degrades to an empty document: to the user an outage
    looks like "no data yet".
    """
    try:
        document = ctx.store.fetch()
    except StoreError as exc:
        logger.warning("Could not load catalog from %s: %s", ctx.store.name, exc)
        document = CatalogDocument()

    with ctx.lock:
        ctx.replace_document(document)
        ctx.last_seen_marker = document.last_updated
    return document
