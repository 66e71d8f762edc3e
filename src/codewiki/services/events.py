"""Progress notifications for a wiki generation run."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from codewiki.constants import STAGE_LABELS, StageProgress


@dataclass(frozen=True)
class StageEvent:
    """A stage transition, carrying document counts during the write phase."""

    name: str
    status: StageProgress
    message: str = ""
    duration_ms: float = 0.0
    documents_written: int | None = None
    documents_total: int | None = None

    @property
    def label(self) -> str:
        return STAGE_LABELS.get(self.name, self.name)

    @property
    def failed(self) -> bool:
        return self.status == StageProgress.ERROR

    @property
    def percent(self) -> float | None:
        """Share of documents on disk; None outside the write phase."""
        if self.documents_total is None:
            return None
        if self.documents_total == 0:
            return 100.0
        written = self.documents_written or 0
        return written / self.documents_total * 100

    def __str__(self) -> str:
        text = self.message or self.label
        if self.documents_total is not None:
            text += f" [{self.documents_written or 0}/{self.documents_total}]"
        if self.status != StageProgress.RUNNING:
            text += f" ({self.status}, {self.duration_ms:.0f}ms)"
        return text


type ProgressCallback = Callable[[StageEvent], None]
