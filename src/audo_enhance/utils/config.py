from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

ENV_PREFIX = "AUDO_ENHANCE_"
EVENT_LOG_FILENAME = "classification_events.jsonl"

_ENV_FIELDS: dict[str, str] = {
    "ffmpeg_binary": "FFMPEG_BINARY",
    "scratch_root": "SCRATCH_ROOT",
    "public_base_url": "PUBLIC_BASE_URL",
    "max_workers": "MAX_WORKERS",
    "event_ring_capacity": "EVENT_RING_CAPACITY",
    "event_log_path": "EVENT_LOG_PATH",
    "fetch_timeout_seconds": "FETCH_TIMEOUT_SECONDS",
    "max_input_bytes": "MAX_INPUT_BYTES",
    "diagnostic_limit": "DIAGNOSTIC_LIMIT",
}


class ServiceConfig(BaseModel):
    ffmpeg_binary: str = Field("ffmpeg", min_length=1)
    scratch_root: Path = Path("/tmp/audo_enhance")
    public_base_url: str = Field("http://localhost:10000", min_length=1)
    max_workers: int = Field(4, ge=1, le=64)
    event_ring_capacity: int = Field(500, ge=1)
    # Defaults to <scratch_root>/classification_events.jsonl; None disables the durable sink.
    event_log_path: Path | None = None
    fetch_timeout_seconds: float = Field(120.0, gt=0.0)
    max_input_bytes: int = Field(100 * 1024 * 1024, ge=1)
    diagnostic_limit: int = Field(2_000, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _default_event_log_path(cls, data: Any) -> Any:
        if isinstance(data, dict) and "event_log_path" not in data:
            scratch_root = data.get("scratch_root", "/tmp/audo_enhance")
            return {**data, "event_log_path": Path(scratch_root) / EVENT_LOG_FILENAME}
        return data

    @field_validator("event_log_path", mode="before")
    @classmethod
    def _blank_disables_event_log(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("public_base_url")
    @classmethod
    def _validate_public_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("public_base_url must be an http(s) URL.")
        return value.rstrip("/")


def service_config_from_env(environ: dict[str, str] | None = None) -> ServiceConfig:
    source = os.environ if environ is None else environ
    data = {
        field_name: source[ENV_PREFIX + suffix]
        for field_name, suffix in _ENV_FIELDS.items()
        if ENV_PREFIX + suffix in source
    }
    return ServiceConfig.model_validate(data)


@lru_cache(maxsize=1)
def load_service_config() -> ServiceConfig:
    """Load service configuration from ``AUDO_ENHANCE_*`` environment variables."""

    return service_config_from_env()


def load_service_config_file(path: Path) -> ServiceConfig:
    data = _load_config_data(path)
    return ServiceConfig.model_validate(data)


def _load_config_data(path: Path) -> dict:
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise ImportError("PyYAML is required to load YAML configs.") from exc

        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
