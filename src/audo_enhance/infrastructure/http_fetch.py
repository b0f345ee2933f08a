"""Input transfer adapter backed by ``requests``."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from audo_enhance.domain.errors import TransferError

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_SECONDS = 120.0
DEFAULT_MAX_INPUT_BYTES = 100 * 1024 * 1024
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class HttpInputFetcher:
    """Stream an HTTP(S) resource to disk, enforcing a byte ceiling.

    ``file://`` URLs and bare paths are copied only when ``allow_local_files`` is
    set, which the CLI does and the HTTP service does not.
    """

    timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    max_bytes: int = DEFAULT_MAX_INPUT_BYTES
    allow_local_files: bool = False

    def fetch(self, url: str, destination: Path) -> Path:
        scheme = urlparse(url).scheme.lower()
        if scheme in {"http", "https"}:
            return self._download(url, destination)
        if self.allow_local_files and scheme in {"", "file"}:
            return self._copy_local(url, destination)
        raise TransferError(f"Unsupported input URL scheme: '{scheme or url}'")

    def _download(self, url: str, destination: Path) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        try:
            with requests.get(url, stream=True, timeout=self.timeout_seconds) as response:
                if not response.ok:
                    raise TransferError(f"Failed to fetch input file: {response.status_code}")
                with destination.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                        if not chunk:
                            continue
                        written += len(chunk)
                        if written > self.max_bytes:
                            raise TransferError(f"Input file exceeds max size limit of {self.max_bytes} bytes.")
                        handle.write(chunk)
        except requests.RequestException as exc:
            raise TransferError(f"Failed to fetch input file: {exc}") from exc

        if written == 0:
            raise TransferError("Failed to fetch input file: empty response body")
        logger.info("Input fetched", extra={"url": url, "bytes": written})
        return destination

    def _copy_local(self, url: str, destination: Path) -> Path:
        parsed = urlparse(url)
        source = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)
        if not source.is_file():
            raise TransferError(f"Input file not found: {source}")
        size = source.stat().st_size
        if size == 0:
            raise TransferError(f"Input file is empty: {source}")
        if size > self.max_bytes:
            raise TransferError(f"Input file exceeds max size limit of {self.max_bytes} bytes.")
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
        return destination
