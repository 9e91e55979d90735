"""
Activity Monitor — the single owner of the live activity state.

Frames go in through ingest(); each one is classified, appended to the
bounded history and folded into the aggregates before the next frame is
looked at. Display code only reads snapshots and calls the controls
(pause/resume/clear). Nothing here blocks or awaits.

A frame that cannot be handled at all still produces a record: an error-level
entry describing the failure. The stream never stops because of a bad frame.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import config
from features.activity import query as projections
from features.activity.builder import RecordBuilder
from features.activity.history import HistoryStore
from features.activity.models import ActivityRecord, AgentPerformance
from features.activity.rules import SEED_AGENTS
from features.activity.tracker import AggregateTracker

log = logging.getLogger(__name__)

Listener = Callable[[ActivityRecord], None]


class ActivityMonitor:
    """Classifies frames and keeps the rolling history and agent stats.

    Arguments left as None fall back to the values in ``config``.
    """

    def __init__(
        self,
        max_records: int | None = None,
        default_agent: str | None = None,
        seed_agents: bool | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        if max_records is None:
            max_records = config.MONITOR_MAX_RECORDS
        if seed_agents is None:
            seed_agents = config.MONITOR_SEED_AGENTS
        self.builder = RecordBuilder(
            default_agent=default_agent or config.MONITOR_DEFAULT_AGENT,
            clock=clock,
            id_factory=id_factory,
        )
        self.history = HistoryStore(max_records)
        self.tracker = AggregateTracker(SEED_AGENTS if seed_agents else ())
        self._paused = False
        self._closed = False
        self._connected = False
        self._dropped = 0
        self._listeners: list[Listener] = []

    # ── State ────────────────────────────────────────────────────────

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def dropped(self) -> int:
        """Frames discarded while paused since the last clear."""
        return self._dropped

    # ── Ingestion ────────────────────────────────────────────────────

    def ingest(self, frame: Any) -> ActivityRecord | None:
        """Classify and record one frame.

        Returns the new record, or None when the frame was discarded
        (monitor paused or closed).
        """
        if self._closed:
            log.debug("[MONITOR] Ignoring frame after close")
            return None
        if self._paused:
            self._dropped += 1
            return None

        try:
            record = self.builder.build(frame)
        except Exception as e:
            log.warning("[MONITOR] Failed to classify frame: %s", e)
            record = self.builder.build_failure(frame, e)

        self.history.append(record)
        self.tracker.observe(record)
        self._notify(record)
        return record

    def ingest_many(self, frames) -> list[ActivityRecord]:
        records = []
        for frame in frames:
            record = self.ingest(frame)
            if record is not None:
                records.append(record)
        return records

    def set_connected(self, connected: bool) -> None:
        """Connectivity signal from the transport."""
        if self._closed or connected == self._connected:
            return
        self._connected = connected
        log.info("[MONITOR] Transport %s", "connected" if connected else "disconnected")

    # ── Controls ─────────────────────────────────────────────────────

    def pause(self) -> None:
        if not self._paused:
            self._paused = True
            log.info("[MONITOR] Paused")

    def resume(self) -> None:
        if self._paused:
            self._paused = False
            log.info("[MONITOR] Resumed (%d frames dropped while paused)", self._dropped)

    def clear(self) -> None:
        """Drop all records, progress and agent stats."""
        if self._closed:
            return
        self.history.clear()
        self.tracker.reset()
        self._dropped = 0
        log.info("[MONITOR] Cleared")

    def close(self) -> None:
        """End the session. Later frames and controls are ignored."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        log.info("[MONITOR] Closed")

    # ── Subscriptions ────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with each new record. Returns an unsubscribe function."""
        if self._closed:
            raise RuntimeError("monitor is closed")
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, record: ActivityRecord) -> None:
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception as e:
                log.warning("[MONITOR] Listener failed for %s: %s", record.id, e)

    # ── Reads ────────────────────────────────────────────────────────

    @property
    def progress(self) -> int:
        return self.tracker.progress

    def records(self) -> tuple[ActivityRecord, ...]:
        return self.history.snapshot()

    def agents(self) -> list[AgentPerformance]:
        return self.tracker.snapshot()

    def search(self, term: str) -> list[ActivityRecord]:
        return projections.search(self.records(), term)

    def filter_by_agent(self, agent: str) -> list[ActivityRecord]:
        return projections.filter_by_agent(self.records(), agent)

    def query(self, term: str = "", agent: str = projections.ALL_AGENTS) -> list[ActivityRecord]:
        return projections.apply_filters(self.records(), term, agent)

    def agent_names(self) -> list[str]:
        return projections.agent_names(self.records())

    def summary(self) -> dict:
        return {
            **projections.summarize(self.records()),
            **self.tracker.summary(),
            "capacity": self.history.capacity,
            "paused": self._paused,
            "connected": self._connected,
            "closed": self._closed,
            "dropped_frames": self._dropped,
        }
