from __future__ import annotations

from pathlib import Path

from audo_enhance.infrastructure.scratch_space import ScratchSpace


def test_prepare_creates_job_directory_with_fixed_layout(tmp_path: Path) -> None:
    scratch = ScratchSpace(tmp_path).prepare("job1")

    assert scratch.directory == tmp_path / "job1"
    assert scratch.directory.is_dir()
    assert [path.name for path in scratch.intermediates] == ["input.bin", "decoded.wav", "prerender.wav"]
    assert scratch.output.name == "output.wav"


def test_discard_intermediates_keeps_output(tmp_path: Path) -> None:
    space = ScratchSpace(tmp_path)
    scratch = space.prepare("job1")
    for path in (*scratch.intermediates, scratch.output):
        path.write_bytes(b"x")

    space.discard_intermediates("job1")

    assert sorted(path.name for path in scratch.directory.iterdir()) == ["output.wav"]


def test_discard_removes_directory_and_tolerates_missing(tmp_path: Path) -> None:
    space = ScratchSpace(tmp_path)
    space.prepare("job1").source.write_bytes(b"x")

    space.discard("job1")
    space.discard("job1")

    assert not (tmp_path / "job1").exists()
