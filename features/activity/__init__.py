"""
Activity feature — classifies the generation pipeline's event stream.

Public API:
    from features.activity import ActivityMonitor, ActivityRecord
    from features.activity import query
"""

from features.activity.builder import RecordBuilder
from features.activity.history import HistoryStore
from features.activity.models import (
    ActivityLevel,
    ActivityRecord,
    ActivityStatus,
    ActivityType,
    AgentPerformance,
    AgentStatus,
)
from features.activity.monitor import ActivityMonitor
from features.activity.rules import RULES, classify
from features.activity.tracker import AggregateTracker

__all__ = [
    "ActivityLevel",
    "ActivityMonitor",
    "ActivityRecord",
    "ActivityStatus",
    "ActivityType",
    "AgentPerformance",
    "AgentStatus",
    "AggregateTracker",
    "HistoryStore",
    "RULES",
    "RecordBuilder",
    "classify",
]
