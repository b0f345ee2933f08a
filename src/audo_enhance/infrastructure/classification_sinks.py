"""Durable sinks for classification events."""

from __future__ import annotations

import json
import threading
from pathlib import Path

from audo_enhance.domain.events import ClassificationEvent


class JsonlClassificationSink:
    """Append one JSON object per line to a local file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def append(self, event: ClassificationEvent) -> None:
        line = json.dumps(event.to_dict(), sort_keys=True)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")


class NullClassificationSink:
    """Discard events; the in-memory ring is the only record."""

    def append(self, event: ClassificationEvent) -> None:  # noqa: ARG002
        return
