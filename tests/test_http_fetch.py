from __future__ import annotations

from pathlib import Path

import pytest
import requests

from audo_enhance.domain.errors import TransferError
from audo_enhance.infrastructure import http_fetch
from audo_enhance.infrastructure.http_fetch import HttpInputFetcher


class _FakeResponse:
    def __init__(self, status_code: int = 200, chunks: list[bytes] | None = None) -> None:
        self.status_code = status_code
        self.ok = status_code < 400
        self._chunks = chunks if chunks is not None else [b"RIFF", b"data"]

    def iter_content(self, chunk_size: int):
        yield from self._chunks

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        return None


def _patch_get(monkeypatch, response=None, error: Exception | None = None) -> list[dict]:
    calls: list[dict] = []

    def fake_get(url, **kwargs):
        calls.append({"url": url, **kwargs})
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(http_fetch.requests, "get", fake_get)
    return calls


def test_download_streams_body_to_destination(monkeypatch, tmp_path: Path) -> None:
    calls = _patch_get(monkeypatch, _FakeResponse())
    destination = tmp_path / "job" / "input.bin"

    written = HttpInputFetcher(timeout_seconds=5).fetch("https://cdn.test/a.wav", destination)

    assert written == destination
    assert destination.read_bytes() == b"RIFFdata"
    assert calls[0]["stream"] is True
    assert calls[0]["timeout"] == 5


def test_non_success_status_raises_transfer_error(monkeypatch, tmp_path: Path) -> None:
    _patch_get(monkeypatch, _FakeResponse(status_code=404))

    with pytest.raises(TransferError, match="Failed to fetch input file: 404"):
        HttpInputFetcher().fetch("https://cdn.test/missing.wav", tmp_path / "input.bin")


def test_empty_body_raises_transfer_error(monkeypatch, tmp_path: Path) -> None:
    _patch_get(monkeypatch, _FakeResponse(chunks=[b""]))

    with pytest.raises(TransferError, match="empty"):
        HttpInputFetcher().fetch("https://cdn.test/a.wav", tmp_path / "input.bin")


def test_oversize_body_raises_transfer_error(monkeypatch, tmp_path: Path) -> None:
    _patch_get(monkeypatch, _FakeResponse(chunks=[b"x" * 6, b"x" * 6]))

    with pytest.raises(TransferError, match="max size"):
        HttpInputFetcher(max_bytes=10).fetch("https://cdn.test/a.wav", tmp_path / "input.bin")


def test_network_errors_become_transfer_errors(monkeypatch, tmp_path: Path) -> None:
    _patch_get(monkeypatch, error=requests.ConnectionError("connection refused"))

    with pytest.raises(TransferError, match="connection refused"):
        HttpInputFetcher().fetch("http://cdn.test/a.wav", tmp_path / "input.bin")


def test_local_files_are_refused_by_default(tmp_path: Path) -> None:
    source = tmp_path / "song.wav"
    source.write_bytes(b"audio")

    with pytest.raises(TransferError, match="Unsupported input URL scheme"):
        HttpInputFetcher().fetch(source.as_uri(), tmp_path / "input.bin")


@pytest.mark.parametrize("as_uri", [True, False])
def test_local_files_are_copied_when_allowed(tmp_path: Path, as_uri: bool) -> None:
    source = tmp_path / "my song.wav"
    source.write_bytes(b"audio")
    url = source.as_uri() if as_uri else str(source)

    written = HttpInputFetcher(allow_local_files=True).fetch(url, tmp_path / "job" / "input.bin")

    assert written.read_bytes() == b"audio"


def test_missing_local_file_raises(tmp_path: Path) -> None:
    with pytest.raises(TransferError, match="not found"):
        HttpInputFetcher(allow_local_files=True).fetch(str(tmp_path / "nope.wav"), tmp_path / "input.bin")
