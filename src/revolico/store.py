"""
Remote document stores -- where the catalog lives.

Every store exposes the same four moves the Gist API gives us:
anonymous read of the raw content, authenticated read of the full
record, update of that record, and creation when it does not exist.

Gist: GitHub Gist over HTTPS. Reads hit the raw CDN, writes the API.
Local: A JSON file on disk. For offline demos, USB sticks, and tests.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import requests

from .config import ClientConfig, StoreBackend
from .errors import AuthError, DecodeError, NotFoundError, TransportError
from .models import CatalogDocument, normalize_document

logger = logging.getLogger("revolico.store")

GIST_DESCRIPTION = "Revolico GTM database"


class DocumentStore(ABC):
    """Abstract home of the shared catalog document."""

    def __init__(self, config: ClientConfig):
        self.config = config

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable store name."""

    @abstractmethod
    def fetch(self) -> CatalogDocument:
        """Read the current document anonymously.

        Raises:
            StoreError: On any transport, not-found or decode failure.
        """

    @abstractmethod
    def get_record(self, token: Optional[str]) -> Optional[dict[str, Any]]:
        """Read the full record with credentials.

        Returns:
            The record, or None if it does not exist yet.
        """

    @abstractmethod
    def update_record(
        self, token: Optional[str], record: dict[str, Any], content: str
    ) -> dict[str, Any]:
        """Replace the document content inside an existing record."""

    @abstractmethod
    def create_record(self, token: Optional[str], content: str) -> str:
        """Create the record holding ``content``.

        Returns:
            Identifier of the new record.
        """

    def record_document(self, record: dict[str, Any]) -> Optional[CatalogDocument]:
        """Extract the catalog document carried by a record, if any."""
        files = record.get("files") or {}
        entry = files.get(self.config.filename)
        if not entry:
            return None
        content = entry.get("content")
        if content is None:
            return None
        return _decode_content(content)


def _decode_content(content: str) -> CatalogDocument:
    if not content.strip():
        return CatalogDocument()
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Document is not valid JSON: {exc}") from exc
    return normalize_document(raw)


def _require_token(token: Optional[str]) -> str:
    if not token:
        raise AuthError("No upstream credential; admin must log in")
    return token


class GistStore(DocumentStore):
    """GitHub Gist store.

    Reads go to ``gist.githubusercontent.com`` without credentials.
    Writes go through ``api.github.com`` with ``Authorization: token``.
    """

    def __init__(
        self, config: ClientConfig, session: Optional[requests.Session] = None
    ):
        super().__init__(config)
        self.session = session or requests.Session()

    @property
    def name(self) -> str:
        return "gist"

    @property
    def raw_url(self) -> str:
        base = self.config.raw_url.rstrip("/")
        if self.config.owner:
            return (
                f"{base}/{self.config.owner}/{self.config.gist_id}"
                f"/raw/{self.config.filename}"
            )
        return f"{base}/{self.config.gist_id}/raw/{self.config.filename}"

    @property
    def api_url(self) -> str:
        return f"{self.config.api_url.rstrip('/')}/gists"

    def _request(
        self,
        method: str,
        url: str,
        token: Optional[str] = None,
        payload: Optional[dict[str, Any]] = None,
    ) -> requests.Response:
        """Make one HTTP call and classify its failure.

        Raises:
            TransportError: Connection failure, timeout, or 5xx/other status.
            AuthError: 401 or 403.
            NotFoundError: 404.
        """
        headers = {"Cache-Control": "no-cache"}
        if token:
            headers["Authorization"] = f"token {token}"
            headers["Accept"] = "application/vnd.github+json"

        try:
            resp = self.session.request(
                method,
                url,
                headers=headers,
                json=payload,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url}: {exc}") from exc

        if resp.status_code in (401, 403):
            raise AuthError(f"{method} {url}: {resp.status_code} {resp.text}")
        if resp.status_code == 404:
            raise NotFoundError(f"{method} {url}: not found")
        if resp.status_code >= 400:
            raise TransportError(f"{method} {url}: {resp.status_code} {resp.text}")
        return resp

    def _json(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeError(f"Response is not JSON: {exc}") from exc

    def fetch(self) -> CatalogDocument:
        if not self.config.gist_id:
            raise NotFoundError("No gist_id configured")
        resp = self._request("GET", self.raw_url)
        return _decode_content(resp.text)

    def get_record(self, token: Optional[str]) -> Optional[dict[str, Any]]:
        token = _require_token(token)
        if not self.config.gist_id:
            return None
        try:
            resp = self._request("GET", f"{self.api_url}/{self.config.gist_id}", token)
        except NotFoundError:
            logger.info("Gist %s not found", self.config.gist_id)
            return None
        return self._json(resp)

    def update_record(
        self, token: Optional[str], record: dict[str, Any], content: str
    ) -> dict[str, Any]:
        token = _require_token(token)
        gist_id = record.get("id") or self.config.gist_id
        payload = {
            "description": record.get("description") or GIST_DESCRIPTION,
            "files": {self.config.filename: {"content": content}},
        }
        resp = self._request("PATCH", f"{self.api_url}/{gist_id}", token, payload)
        logger.info("Gist %s updated", gist_id)
        return self._json(resp)

    def create_record(self, token: Optional[str], content: str) -> str:
        token = _require_token(token)
        payload = {
            "description": GIST_DESCRIPTION,
            "public": True,
            "files": {self.config.filename: {"content": content}},
        }
        resp = self._request("POST", self.api_url, token, payload)
        data = self._json(resp)
        gist_id = data.get("id") if isinstance(data, dict) else None
        if not gist_id:
            raise DecodeError("Gist creation response carried no id")

        self.config.gist_id = gist_id
        owner = (data.get("owner") or {}).get("login")
        if owner and not self.config.owner:
            self.config.owner = owner
        logger.info("Gist %s created", gist_id)
        return gist_id

    def record_document(self, record: dict[str, Any]) -> Optional[CatalogDocument]:
        entry = (record.get("files") or {}).get(self.config.filename) or {}
        if entry.get("truncated") and entry.get("raw_url"):
            resp = self._request("GET", entry["raw_url"])
            return _decode_content(resp.text)
        return super().record_document(record)


class LocalStore(DocumentStore):
    """Plain JSON file on the local filesystem.

    Writes still demand a credential so the admin flow behaves the
    same as against a real gist.
    """

    def __init__(self, config: ClientConfig, home: Path):
        super().__init__(config)
        self.path = (
            config.local_path.expanduser()
            if config.local_path
            else home / config.filename
        )

    @property
    def name(self) -> str:
        return "local"

    def fetch(self) -> CatalogDocument:
        if not self.path.exists():
            raise NotFoundError(f"{self.path} does not exist")
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TransportError(f"Reading {self.path}: {exc}") from exc
        return _decode_content(content)

    def get_record(self, token: Optional[str]) -> Optional[dict[str, Any]]:
        _require_token(token)
        if not self.path.exists():
            return None
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TransportError(f"Reading {self.path}: {exc}") from exc
        return {
            "id": str(self.path),
            "files": {self.config.filename: {"content": content}},
        }

    def _write(self, content: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(content, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            raise TransportError(f"Writing {self.path}: {exc}") from exc

    def update_record(
        self, token: Optional[str], record: dict[str, Any], content: str
    ) -> dict[str, Any]:
        _require_token(token)
        self._write(content)
        logger.info("Local document updated: %s", self.path)
        return {**record, "files": {self.config.filename: {"content": content}}}

    def create_record(self, token: Optional[str], content: str) -> str:
        _require_token(token)
        self._write(content)
        logger.info("Local document created: %s", self.path)
        return str(self.path)


def create_store(
    config: ClientConfig,
    home: Path,
    session: Optional[requests.Session] = None,
) -> DocumentStore:
    """Factory for the configured document store.

    Raises:
        ValueError: If the backend is not supported.
    """
    if config.backend == StoreBackend.GIST:
        return GistStore(config, session=session)
    if config.backend == StoreBackend.LOCAL:
        return LocalStore(config, home)
    raise ValueError(f"Unsupported backend: {config.backend}")
