"""
Record Builder — turns one frame into an ActivityRecord.

Classification (rules) and extraction (extract) feed in here; this module
owns the priority rules for agent, stage, status and level, and stamps each
record with a fresh id and the time it was classified.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from features.activity.extract import Extraction, Frame, extract, normalize_frame
from features.activity.models import (
    ActivityLevel,
    ActivityRecord,
    ActivityStatus,
    ActivityType,
)
from features.activity.rules import (
    DEFAULT_AGENT,
    STAGE_TYPES,
    STEP_AGENTS,
    Match,
    classify,
    find_agent,
    infer_type,
    marker_level,
)

log = logging.getLogger(__name__)

# Emoji statuses some producers put in a structured ``status`` field
_MARKER_STATUSES = {
    "✅": ActivityStatus.COMPLETED,
    "❌": ActivityStatus.ERROR,
    "⚠️": ActivityStatus.FALLBACK,
    "⚠": ActivityStatus.FALLBACK,
}

_STATUS_LEVELS = {
    ActivityStatus.COMPLETED: ActivityLevel.SUCCESS,
    ActivityStatus.ERROR: ActivityLevel.ERROR,
    ActivityStatus.FALLBACK: ActivityLevel.WARNING,
}

_LEVEL_STATUSES = {
    ActivityLevel.SUCCESS: ActivityStatus.COMPLETED,
    ActivityLevel.ERROR: ActivityStatus.ERROR,
    ActivityLevel.WARNING: ActivityStatus.FALLBACK,
}


def _enum_value(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return None
    return None


def new_record_id() -> str:
    return f"act-{uuid.uuid4().hex}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordBuilder:
    """Builds ActivityRecords from raw frames.

    ``clock`` and ``id_factory`` default to UTC now and a uuid4-based id;
    tests inject fixed ones.
    """

    def __init__(
        self,
        default_agent: str = DEFAULT_AGENT,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self.default_agent = default_agent
        self._clock = clock or utc_now
        self._new_id = id_factory or new_record_id

    # ── Public ───────────────────────────────────────────────────────

    def build(self, raw: Any) -> ActivityRecord:
        """Classify a raw frame. Raises TypeError only for unusable frames."""
        frame = normalize_frame(raw)
        text = frame.text.strip()
        match = classify(text)
        extraction = extract(frame, match)

        activity_type = self.resolve_type(frame, match, extraction)
        status = self.resolve_status(frame, match, extraction, text)
        level = self.resolve_level(frame, match, status, text)
        agent = self.resolve_agent(frame, match, extraction, text)
        log.debug("[MONITOR] rule=%s type=%s agent=%s", match.rule.name, activity_type.value, agent)

        return ActivityRecord(
            id=self._new_id(),
            timestamp=self._clock(),
            type=activity_type,
            status=status,
            level=level,
            agent=agent,
            message=text or self._default_message(frame, extraction),
            progress=extraction.progress,
            metadata=extraction.metadata,
        )

    def build_failure(self, raw: Any, error: Exception) -> ActivityRecord:
        """Synthetic error record for a frame that could not be handled."""
        detail = f"{type(error).__name__}: {error}"
        return ActivityRecord(
            id=self._new_id(),
            timestamp=self._clock(),
            type=ActivityType.ERROR,
            status=ActivityStatus.ERROR,
            level=ActivityLevel.ERROR,
            agent=self.default_agent,
            message=f"Failed to parse frame: {error}",
            metadata={"error": detail},
        )

    # ── Resolution ───────────────────────────────────────────────────

    def resolve_type(self, frame: Frame, match: Match, extraction: Extraction) -> ActivityType:
        if frame.kind == "error" or extraction.failed:
            return ActivityType.ERROR
        explicit = _enum_value(ActivityType, frame.fields.get("type"))
        if explicit is not None:
            return explicit
        if extraction.step and (frame.fields.get("step") or match.rule.type is None):
            return STAGE_TYPES.get(extraction.step) or infer_type(extraction.step, frame.text)
        if match.rule.type is not None:
            return match.rule.type
        return ActivityType.SYSTEM

    def resolve_status(
        self, frame: Frame, match: Match, extraction: Extraction, text: str,
    ) -> ActivityStatus:
        if frame.kind == "error" or extraction.failed:
            return ActivityStatus.ERROR
        raw_status = frame.fields.get("status")
        explicit = _enum_value(ActivityStatus, raw_status)
        if explicit is None and isinstance(raw_status, str):
            explicit = _MARKER_STATUSES.get(raw_status.strip())
        if explicit is not None:
            return explicit

        rule_status = match.rule.status
        markers = marker_level(text)
        if rule_status is ActivityStatus.ERROR or markers is ActivityLevel.ERROR:
            return ActivityStatus.ERROR
        if extraction.progress == 100 or rule_status is ActivityStatus.COMPLETED:
            return ActivityStatus.COMPLETED
        if rule_status is not None:
            return rule_status
        return _LEVEL_STATUSES.get(markers, ActivityStatus.IN_PROGRESS)

    def resolve_level(
        self, frame: Frame, match: Match, status: ActivityStatus, text: str,
    ) -> ActivityLevel:
        if frame.kind == "error":
            return ActivityLevel.ERROR
        explicit = _enum_value(ActivityLevel, frame.fields.get("level"))
        if explicit is not None:
            return explicit
        raw_status = frame.fields.get("status")
        if isinstance(raw_status, str) and raw_status.strip() in _MARKER_STATUSES:
            return _STATUS_LEVELS[_MARKER_STATUSES[raw_status.strip()]]

        markers = marker_level(text)
        if markers is not None:
            return markers
        if match.rule.level is not None:
            return match.rule.level
        return _STATUS_LEVELS.get(status, ActivityLevel.INFO)

    def resolve_agent(
        self, frame: Frame, match: Match, extraction: Extraction, text: str,
    ) -> str:
        explicit = frame.fields.get("agent")
        if isinstance(explicit, str) and explicit.strip():
            return explicit.strip()
        if extraction.agent:
            return extraction.agent
        if match.rule.agent:
            return match.rule.agent
        found = find_agent(text)
        if found:
            return found
        if extraction.step and extraction.step in STEP_AGENTS:
            return STEP_AGENTS[extraction.step]
        return self.default_agent

    def _default_message(self, frame: Frame, extraction: Extraction) -> str:
        if frame.kind == "error":
            return "An error occurred"
        if extraction.step:
            return f"Processing {extraction.step}..."
        return "Processing..."


def build_record(raw: Any, **kwargs) -> ActivityRecord:
    """One-off convenience wrapper around RecordBuilder.build."""
    return RecordBuilder(**kwargs).build(raw)
