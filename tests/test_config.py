import json
import sys
from pathlib import Path

import pytest

from audo_enhance.utils import config as config_module
from audo_enhance.utils.config import (
    ServiceConfig,
    load_service_config,
    load_service_config_file,
    service_config_from_env,
)


def test_defaults_place_event_log_under_scratch_root() -> None:
    config = service_config_from_env({})

    assert config.ffmpeg_binary == "ffmpeg"
    assert config.scratch_root == Path("/tmp/audo_enhance")
    assert config.event_log_path == Path("/tmp/audo_enhance/classification_events.jsonl")
    assert config.max_workers == 4
    assert config.max_input_bytes == 100 * 1024 * 1024


def test_environment_overrides_are_coerced() -> None:
    config = service_config_from_env(
        {
            "AUDO_ENHANCE_SCRATCH_ROOT": "/var/lib/enhance",
            "AUDO_ENHANCE_MAX_WORKERS": "8",
            "AUDO_ENHANCE_FETCH_TIMEOUT_SECONDS": "30.5",
            "AUDO_ENHANCE_PUBLIC_BASE_URL": "https://enhance.example.com/",
            "UNRELATED": "ignored",
        }
    )

    assert config.scratch_root == Path("/var/lib/enhance")
    assert config.event_log_path == Path("/var/lib/enhance/classification_events.jsonl")
    assert config.max_workers == 8
    assert config.fetch_timeout_seconds == 30.5
    assert config.public_base_url == "https://enhance.example.com"


def test_empty_event_log_path_disables_durable_sink() -> None:
    config = service_config_from_env({"AUDO_ENHANCE_EVENT_LOG_PATH": ""})

    assert config.event_log_path is None


@pytest.mark.parametrize(
    "data",
    [
        {"max_workers": 0},
        {"event_ring_capacity": 0},
        {"fetch_timeout_seconds": 0},
        {"public_base_url": "ftp://enhance"},
        {"ffmpeg_binary": ""},
    ],
)
def test_invalid_values_are_rejected(data) -> None:
    with pytest.raises(ValueError):
        ServiceConfig.model_validate(data)


def test_load_service_config_is_cached(monkeypatch) -> None:
    load_service_config.cache_clear()
    monkeypatch.setenv("AUDO_ENHANCE_MAX_WORKERS", "2")
    try:
        first = load_service_config()
        monkeypatch.setenv("AUDO_ENHANCE_MAX_WORKERS", "6")
        assert load_service_config() is first
        assert first.max_workers == 2
    finally:
        load_service_config.cache_clear()


def test_load_service_config_file_reads_json(tmp_path: Path) -> None:
    path = tmp_path / "service.json"
    path.write_text(json.dumps({"max_workers": 3, "event_log_path": str(tmp_path / "events.jsonl")}))

    config = load_service_config_file(path)

    assert config.max_workers == 3
    assert config.event_log_path == tmp_path / "events.jsonl"


def test_load_service_config_file_reads_yaml(tmp_path: Path) -> None:
    pytest.importorskip("yaml")
    path = tmp_path / "service.yaml"
    path.write_text("scratch_root: /srv/scratch\ndiagnostic_limit: 500\n")

    config = load_service_config_file(path)

    assert config.scratch_root == Path("/srv/scratch")
    assert config.diagnostic_limit == 500


def test_yaml_config_requires_pyyaml(monkeypatch, tmp_path: Path) -> None:
    path = tmp_path / "service.yml"
    path.write_text("max_workers: 2\n")
    monkeypatch.setitem(sys.modules, "yaml", None)

    with pytest.raises(ImportError, match="PyYAML"):
        config_module.load_service_config_file(path)
