"""
Data models for the activity feature.

ActivityRecord is the canonical, immutable classified event. AgentPerformance
is the per-agent rollup the tracker keeps for the live status view.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ActivityType(str, Enum):
    INITIALIZATION = "initialization"
    DOMAIN_ANALYSIS = "domain_analysis"
    PRIVACY_ASSESSMENT = "privacy_assessment"
    BIAS_DETECTION = "bias_detection"
    RELATIONSHIP_MAPPING = "relationship_mapping"
    QUALITY_PLANNING = "quality_planning"
    DATA_GENERATION = "data_generation"
    QUALITY_VALIDATION = "quality_validation"
    FINAL_ASSEMBLY = "final_assembly"
    COMPLETION = "completion"
    ERROR = "error"
    SYSTEM = "system"
    WEBSOCKET = "websocket"
    HEALTH = "health"


class ActivityStatus(str, Enum):
    STARTED = "started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ERROR = "error"
    CONNECTED = "connected"
    READY = "ready"
    FALLBACK = "fallback"


class ActivityLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class AgentStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class ActivityRecord:
    """One classified event from the generation pipeline."""
    id: str
    timestamp: datetime
    type: ActivityType
    status: ActivityStatus
    level: ActivityLevel
    agent: str
    message: str
    progress: int | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only copy, so snapshot readers cannot rewrite a stored record
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "status": self.status.value,
            "level": self.level.value,
            "agent": self.agent,
            "message": self.message,
            "progress": self.progress,
            "metadata": dict(self.metadata),
        }


@dataclass
class AgentPerformance:
    """Rolling performance stats for a single agent."""
    name: str
    status: AgentStatus = AgentStatus.IDLE
    tasks_completed: int = 0
    avg_response_time: float = 0.0  # ms
    success_rate: float = 100.0  # percent
    last_activity: datetime | None = None
    # Bookkeeping for the running averages
    latency_samples: int = 0
    error_count: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status.value,
            "tasks_completed": self.tasks_completed,
            "avg_response_time": round(self.avg_response_time, 2),
            "success_rate": round(self.success_rate, 2),
            "last_activity": self.last_activity.isoformat() if self.last_activity else None,
        }
