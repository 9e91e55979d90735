"""
Read-only projections over a record snapshot.

Nothing here mutates its input. An empty result from a filter is distinct
from an empty store; callers that care compare against the snapshot size.
"""

from __future__ import annotations

from collections.abc import Sequence

from features.activity.models import ActivityRecord, ActivityType

ALL_AGENTS = "all"

STAGE_LABELS = {
    ActivityType.INITIALIZATION: "Initializing AI Agents",
    ActivityType.DOMAIN_ANALYSIS: "Domain Expert Analysis",
    ActivityType.PRIVACY_ASSESSMENT: "Privacy Assessment",
    ActivityType.BIAS_DETECTION: "Bias Detection",
    ActivityType.RELATIONSHIP_MAPPING: "Relationship Mapping",
    ActivityType.QUALITY_PLANNING: "Quality Planning",
    ActivityType.DATA_GENERATION: "Data Generation",
    ActivityType.QUALITY_VALIDATION: "Quality Validation",
    ActivityType.FINAL_ASSEMBLY: "Final Assembly",
    ActivityType.COMPLETION: "Generation Complete",
    ActivityType.ERROR: "Error Occurred",
    ActivityType.SYSTEM: "System Event",
    ActivityType.WEBSOCKET: "Connection",
    ActivityType.HEALTH: "Health Check",
}


def search(records: Sequence[ActivityRecord], term: str) -> list[ActivityRecord]:
    """Case-insensitive substring match on message or agent."""
    needle = (term or "").lower()
    if not needle:
        return list(records)
    return [
        r for r in records
        if needle in r.message.lower() or needle in r.agent.lower()
    ]


def filter_by_agent(records: Sequence[ActivityRecord], agent: str | None) -> list[ActivityRecord]:
    if not agent or agent == ALL_AGENTS:
        return list(records)
    return [r for r in records if r.agent == agent]


def apply_filters(
    records: Sequence[ActivityRecord],
    term: str = "",
    agent: str | None = ALL_AGENTS,
) -> list[ActivityRecord]:
    """Search and agent filter combined with AND."""
    return filter_by_agent(search(records, term), agent)


def agent_names(records: Sequence[ActivityRecord]) -> list[str]:
    """Distinct agents in the order they first appear."""
    return list(dict.fromkeys(r.agent for r in records))


def stage_label(activity_type: ActivityType | str) -> str:
    try:
        return STAGE_LABELS[ActivityType(activity_type)]
    except ValueError:
        return str(activity_type).replace("_", " ").upper()


def summarize(records: Sequence[ActivityRecord]) -> dict:
    """Counts by level and by type."""
    levels: dict[str, int] = {}
    types: dict[str, int] = {}
    for r in records:
        levels[r.level.value] = levels.get(r.level.value, 0) + 1
        types[r.type.value] = types.get(r.type.value, 0) + 1
    return {
        "total_records": len(records),
        "levels": levels,
        "types": types,
    }
