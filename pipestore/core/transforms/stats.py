"""Transfer progress statistics."""
import copy
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Stats:
    """
    Progress of one transfer.

    ``total`` comes from the caller and is not trusted: ``remaining`` never
    goes below zero and ``progress`` never goes above 100. Once finished,
    ``total`` is set to the number of bytes actually processed.

    Attributes:
        total: Expected number of bytes, if known
        opened_at: When the stream was opened
        started_at: When the first chunk arrived
        finished_at: When the stream ended
        duration: Seconds since started_at
        processed: Bytes seen so far
        remaining: Bytes still expected (requires total)
        progress: Percent done (requires total)
    """
    total: Optional[int] = None
    opened_at: datetime = field(default_factory=_now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    duration: float = 0.0
    processed: int = 0
    remaining: Optional[int] = None
    progress: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.total, int) and not isinstance(self.total, bool) and self.total > 0:
            self.remaining = self.total
            self.progress = 0.0
        else:
            self.total = None

    @property
    def is_finished(self) -> bool:
        return self.finished_at is not None

    def mark_started(self) -> None:
        if self.started_at is None:
            self.started_at = _now()

    def mark_progress(self, size: int) -> None:
        self.mark_started()
        self.processed += size
        self.duration = (_now() - self.started_at).total_seconds()

        if self.total:
            self.remaining = max(self.remaining - size, 0)
            self.progress = min(self.processed / self.total * 100, 100.0)

    def mark_finished(self) -> None:
        self.mark_started()
        self.finished_at = _now()
        self.duration = (self.finished_at - self.started_at).total_seconds()
        self.total = self.processed
        self.remaining = 0
        self.progress = 100.0

    def snapshot(self) -> 'Stats':
        """Independent copy, safe to hand to listeners."""
        return copy.copy(self)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ('opened_at', 'started_at', 'finished_at'):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data
