"""Data model for encode jobs and their outcomes"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class EncoderParams:
    """Encoder parameters passed through to ffmpeg uninterpreted."""
    codec: str
    preset: str
    crf: int
    threads: int


@dataclass(frozen=True)
class EncodeJob:
    """One source-file-to-output-file encode request."""
    source: Path
    output: Path
    params: EncoderParams
    subtitle: Optional[Path] = None


@dataclass(frozen=True)
class ProgressSample:
    """Elapsed and total duration decoded from one diagnostic line."""
    elapsed: float
    duration: float

    @property
    def percent(self) -> float:
        # Unclamped; callers rendering a bar clamp to [0, 100]
        return self.elapsed / self.duration * 100


class JobState(Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    RUNNING = "running"  # draining and waiting for exit
    COMPLETED = "completed"


@dataclass
class JobOutcome:
    """Result of supervising one encode job."""
    job: EncodeJob
    success: bool
    error: Optional[Exception] = None
    returncode: Optional[int] = None
    elapsed: float = 0.0
    lines_read: int = 0

    @property
    def source(self) -> Path:
        return self.job.source

    @property
    def output(self) -> Path:
        return self.job.output


@dataclass
class BatchResult:
    """Ordered outcomes of a batch run."""
    outcomes: List[JobOutcome] = field(default_factory=list)
    aborted: bool = False

    @property
    def succeeded(self) -> List[JobOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[JobOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def success(self) -> bool:
        return not self.failed and not self.aborted
