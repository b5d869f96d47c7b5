"""Tests for the document stores.

All HTTP is mocked -- no real gist required.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from revolico.config import ClientConfig, StoreBackend
from revolico.errors import AuthError, DecodeError, NotFoundError, TransportError
from revolico.store import GistStore, LocalStore, create_store


def _response(status: int = 200, body=None, text: str | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    if text is None:
        text = json.dumps(body) if body is not None else ""
    resp.text = text
    if body is not None:
        resp.json.return_value = body
    else:
        resp.json.side_effect = ValueError("no json")
    return resp


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def gist(config: ClientConfig, session: MagicMock) -> GistStore:
    return GistStore(config, session=session)


class TestGistRead:
    """Anonymous raw reads."""

    def test_raw_url_with_owner(self, gist):
        assert gist.raw_url == (
            "https://gist.githubusercontent.com/tester/abc123/raw/database.json"
        )

    def test_fetch_parses_document(self, gist, session):
        session.request.return_value = _response(
            text=json.dumps({"lastUpdated": "T1", "businesses": []})
        )

        doc = gist.fetch()

        assert doc.last_updated == "T1"
        method, url = session.request.call_args[0]
        assert method == "GET"
        assert url == gist.raw_url
        assert "Authorization" not in session.request.call_args[1]["headers"]

    def test_fetch_404(self, gist, session):
        session.request.return_value = _response(404, text="Not Found")
        with pytest.raises(NotFoundError):
            gist.fetch()

    def test_fetch_network_error(self, gist, session):
        session.request.side_effect = requests.ConnectionError("boom")
        with pytest.raises(TransportError):
            gist.fetch()

    def test_fetch_server_error(self, gist, session):
        session.request.return_value = _response(502, text="Bad Gateway")
        with pytest.raises(TransportError):
            gist.fetch()

    def test_fetch_garbage(self, gist, session):
        session.request.return_value = _response(text="<html>")
        with pytest.raises(DecodeError):
            gist.fetch()

    def test_fetch_without_gist_id(self, config, session):
        config.gist_id = ""
        with pytest.raises(NotFoundError):
            GistStore(config, session=session).fetch()
        session.request.assert_not_called()


class TestGistWrite:
    """Authenticated API calls."""

    def test_get_record_sends_token(self, gist, session):
        session.request.return_value = _response(body={"id": "abc123", "files": {}})

        record = gist.get_record("ghp_x")

        assert record["id"] == "abc123"
        method, url = session.request.call_args[0]
        assert (method, url) == ("GET", "https://api.github.com/gists/abc123")
        headers = session.request.call_args[1]["headers"]
        assert headers["Authorization"] == "token ghp_x"

    def test_get_record_missing(self, gist, session):
        session.request.return_value = _response(404, text="Not Found")
        assert gist.get_record("ghp_x") is None

    def test_get_record_needs_token(self, gist, session):
        with pytest.raises(AuthError):
            gist.get_record(None)
        session.request.assert_not_called()

    def test_get_record_rejected_token(self, gist, session):
        session.request.return_value = _response(401, text="Bad credentials")
        with pytest.raises(AuthError):
            gist.get_record("ghp_bad")

    def test_update_replaces_file_content(self, gist, session):
        session.request.return_value = _response(body={"id": "abc123"})
        record = {"id": "abc123", "description": "my db", "files": {}}

        gist.update_record("ghp_x", record, '{"orders": []}')

        method, url = session.request.call_args[0]
        assert (method, url) == ("PATCH", "https://api.github.com/gists/abc123")
        payload = session.request.call_args[1]["json"]
        assert payload["description"] == "my db"
        assert payload["files"]["database.json"]["content"] == '{"orders": []}'

    def test_create_records_new_id(self, config, session):
        config.owner = ""
        gist = GistStore(config, session=session)
        session.request.return_value = _response(
            201, body={"id": "new999", "owner": {"login": "someone"}}
        )

        new_id = gist.create_record("ghp_x", "{}")

        assert new_id == "new999"
        assert config.gist_id == "new999"
        assert config.owner == "someone"
        method, url = session.request.call_args[0]
        assert (method, url) == ("POST", "https://api.github.com/gists")

    def test_record_document(self, gist):
        record = {"files": {"database.json": {"content": '{"lastUpdated": "T9"}'}}}
        assert gist.record_document(record).last_updated == "T9"
        assert gist.record_document({"files": {}}) is None


class TestLocalStore:
    """File-backed store."""

    @pytest.fixture
    def local(self, config, tmp_path) -> LocalStore:
        config.backend = StoreBackend.LOCAL
        config.local_path = tmp_path / "db.json"
        return LocalStore(config, tmp_path)

    def test_fetch_missing(self, local):
        with pytest.raises(NotFoundError):
            local.fetch()

    def test_create_then_fetch(self, local):
        assert local.get_record("tok") is None
        local.create_record("tok", json.dumps({"lastUpdated": "T1"}))
        assert local.fetch().last_updated == "T1"
        assert local.get_record("tok") is not None

    def test_update(self, local):
        local.create_record("tok", "{}")
        record = local.get_record("tok")
        local.update_record("tok", record, json.dumps({"lastUpdated": "T2"}))
        assert local.fetch().last_updated == "T2"

    def test_write_needs_token(self, local):
        with pytest.raises(AuthError):
            local.create_record(None, "{}")

    def test_factory(self, config, tmp_path: Path):
        assert isinstance(create_store(config, tmp_path), GistStore)
        config.backend = StoreBackend.LOCAL
        assert isinstance(create_store(config, tmp_path), LocalStore)
