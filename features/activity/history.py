"""
Bounded history store — the most recent ActivityRecords, newest first.
"""

from __future__ import annotations

from collections import deque

from features.activity.models import ActivityRecord


class HistoryStore:
    """Fixed-capacity, most-recent-first record buffer.

    Appending past capacity silently drops the oldest record. Only the
    ingestion path writes; readers get immutable snapshots.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._records: deque[ActivityRecord] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._records.maxlen or 0

    def append(self, record: ActivityRecord) -> None:
        self._records.appendleft(record)

    def clear(self) -> None:
        self._records.clear()

    def snapshot(self) -> tuple[ActivityRecord, ...]:
        return tuple(self._records)

    def latest(self) -> ActivityRecord | None:
        return self._records[0] if self._records else None

    def __len__(self) -> int:
        return len(self._records)
