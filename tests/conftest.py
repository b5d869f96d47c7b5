"""Shared test fixtures for revolico."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pytest

from revolico.config import ClientConfig
from revolico.context import ClientContext
from revolico.errors import AuthError, NotFoundError, TransportError
from revolico.models import CatalogDocument, normalize_document
from revolico.store import DocumentStore

PASSPHRASE = "test-passphrase"


class MemoryStore(DocumentStore):
    """In-memory stand-in for the gist, recording every call."""

    def __init__(self, config: ClientConfig, content: Optional[str] = None):
        super().__init__(config)
        self.content = content
        self.calls: list[str] = []
        self.fail_fetch = False
        self.fail_write = False

    @property
    def name(self) -> str:
        return "memory"

    def set_document(self, data: Any) -> None:
        self.content = json.dumps(data)

    def stored(self) -> dict:
        return json.loads(self.content)

    def fetch(self) -> CatalogDocument:
        self.calls.append("fetch")
        if self.fail_fetch:
            raise TransportError("network down")
        if self.content is None:
            raise NotFoundError("missing")
        return normalize_document(json.loads(self.content))

    def get_record(self, token):
        self.calls.append("get")
        if not token:
            raise AuthError("no token")
        if self.content is None:
            return None
        return {"id": "mem", "files": {self.config.filename: {"content": self.content}}}

    def update_record(self, token, record, content):
        self.calls.append("update")
        if self.fail_write:
            raise TransportError("write failed")
        self.content = content
        return record

    def create_record(self, token, content):
        self.calls.append("create")
        if self.fail_write:
            raise TransportError("write failed")
        self.content = content
        self.config.gist_id = "mem-new"
        return "mem-new"


@pytest.fixture
def client_home(tmp_path: Path) -> Path:
    """Provide a temporary client home directory."""
    home = tmp_path / ".revolico"
    home.mkdir()
    return home


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        owner="tester",
        gist_id="abc123",
        poll_interval_ms=50,
        passphrase=PASSPHRASE,
    )


@pytest.fixture
def store(config: ClientConfig) -> MemoryStore:
    return MemoryStore(config)


@pytest.fixture
def ctx(config: ClientConfig, store: MemoryStore, client_home: Path) -> ClientContext:
    return ClientContext(config, store, client_home)
