"""
Tests for bundlesync.io.download module.

Tests download functionality including:
- Classification of responses into result values
- Transport failures
- Atomic text writes and overwrites
"""

from __future__ import annotations

from pathlib import Path

import pytest
import requests
import requests_mock

from bundlesync.exceptions import NetworkError, StorageError
from bundlesync.io import (
    FetchFailure,
    FetchNotFound,
    FetchSuccess,
    fetch_text,
    make_session,
    write_text_file,
)

URL = "https://cdn.example.com/8.20.0/replay.js"


class TestFetchText:
    """Tests for fetch_text result classification."""

    def test_success(self):
        """Test that a 2xx response yields FetchSuccess with the body."""
        with requests_mock.Mocker() as m, make_session() as session:
            m.get(URL, text="const SDK_VERSION = '8.20.0';")
            result = fetch_text(URL, session)

        assert result == FetchSuccess(
            content="const SDK_VERSION = '8.20.0';", url=URL, status_code=200
        )

    def test_utf8_body_without_charset(self):
        """Test that non-ASCII bundle text is decoded as UTF-8."""
        body = "const s = 'héllo ✓';".encode("utf-8")
        with requests_mock.Mocker() as m, make_session() as session:
            m.get(URL, content=body, headers={"Content-Type": "text/javascript"})
            result = fetch_text(URL, session)

        assert isinstance(result, FetchSuccess)
        assert result.content == "const s = 'héllo ✓';"

    @pytest.mark.parametrize("status", [403, 404, 410])
    def test_client_errors_are_not_found(self, status):
        """Test that 4xx responses yield FetchNotFound with the status."""
        with requests_mock.Mocker() as m, make_session() as session:
            m.get(URL, status_code=status)
            result = fetch_text(URL, session)

        assert result == FetchNotFound(status_code=status, url=URL)

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_server_errors_are_failures(self, status):
        """Test that 5xx responses yield FetchFailure."""
        with requests_mock.Mocker() as m, make_session() as session:
            m.get(URL, status_code=status)
            result = fetch_text(URL, session)

        assert result == FetchFailure(status_code=status, url=URL)

    def test_no_retries_by_default(self):
        """Test that a failing request is issued exactly once."""
        with requests_mock.Mocker() as m, make_session() as session:
            m.get(URL, status_code=503)
            fetch_text(URL, session)

            assert m.call_count == 1

    def test_transport_error_raises(self):
        """Test that connection failures raise NetworkError."""
        with requests_mock.Mocker() as m, make_session() as session:
            m.get(URL, exc=requests.exceptions.ConnectionError("refused"))

            with pytest.raises(NetworkError, match="Request failed"):
                fetch_text(URL, session)

    def test_session_user_agent(self):
        """Test that requests identify bundlesync."""
        with requests_mock.Mocker() as m, make_session() as session:
            m.get(URL, text="ok")
            fetch_text(URL, session)

            assert m.last_request.headers["User-Agent"].startswith("bundlesync/")


class TestWriteTextFile:
    """Tests for write_text_file."""

    def test_creates_version_directory(self, tmp_test_dir: Path):
        """Test that the version directory is created recursively."""
        root = tmp_test_dir / "deep" / "bundles"

        path = write_text_file(root, "8.20.0", "replay.js", "content")

        assert path == root / "8.20.0" / "replay.js"
        assert path.read_text(encoding="utf-8") == "content"

    def test_overwrites_existing_file(self, tmp_test_dir: Path):
        """Test that an existing file at the same path is replaced."""
        write_text_file(tmp_test_dir, "1.0.0", "a.js", "old")
        path = write_text_file(tmp_test_dir, "1.0.0", "a.js", "new")

        assert path.read_text(encoding="utf-8") == "new"

    def test_no_part_leftovers(self, tmp_test_dir: Path):
        """Test that atomic writes don't leave .part files behind."""
        write_text_file(tmp_test_dir, "1.0.0", "a.js", "x" * 10)

        assert list((tmp_test_dir / "1.0.0").glob("*.part")) == []

    def test_write_failure_raises_storage_error(self, tmp_test_dir: Path):
        """Test that filesystem errors surface as StorageError."""
        blocker = tmp_test_dir / "bundles"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(StorageError, match="Could not write"):
            write_text_file(blocker, "1.0.0", "a.js", "content")
