"""Per-job scratch directories on local disk."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JobScratch:
    """Fixed file layout inside one job's scratch directory."""

    directory: Path

    @property
    def source(self) -> Path:
        return self.directory / "input.bin"

    @property
    def decoded(self) -> Path:
        return self.directory / "decoded.wav"

    @property
    def prerender(self) -> Path:
        return self.directory / "prerender.wav"

    @property
    def output(self) -> Path:
        return self.directory / "output.wav"

    @property
    def intermediates(self) -> tuple[Path, ...]:
        return (self.source, self.decoded, self.prerender)


@dataclass(frozen=True, slots=True)
class ScratchSpace:
    """Allocate and clean up ``<root>/<job_id>/`` directories."""

    root: Path

    def for_job(self, job_id: str) -> JobScratch:
        return JobScratch(self.root / job_id)

    def prepare(self, job_id: str) -> JobScratch:
        scratch = self.for_job(job_id)
        scratch.directory.mkdir(parents=True, exist_ok=True)
        return scratch

    def discard_intermediates(self, job_id: str) -> None:
        """Remove everything but the rendered output."""

        for path in self.for_job(job_id).intermediates:
            try:
                path.unlink(missing_ok=True)
            except OSError as error:
                logger.warning("Failed to remove scratch file", extra={"path": path.as_posix()}, exc_info=error)

    def discard(self, job_id: str) -> None:
        directory = self.for_job(job_id).directory
        try:
            shutil.rmtree(directory)
        except FileNotFoundError:
            return
        except OSError as error:
            logger.warning(
                "Failed to remove scratch directory", extra={"path": directory.as_posix()}, exc_info=error
            )
